#!/usr/bin/env python3

"""
Interval tree-backed indexes of chromosomal regions.

One IntervalTree is built per chromosome. Regions are stored with the
tree's zero-based half-open convention (begin = start - 1, end = end), so a
1-based query position p is looked up as p - 1.
"""

import logging
from collections import defaultdict
from typing import Dict, Generic, Iterable, List, TypeVar

from intervaltree import Interval, IntervalTree

from .data_structures import ChromosomalRegion, TopologicalDomain, Variant

T = TypeVar('T', bound=ChromosomalRegion)


def _sorted_regions(intervals: Iterable[Interval]) -> List:
    return [interval.data for interval in sorted(intervals, key=lambda i: (i.begin, i.end))]


class RegionIndex(Generic[T]):
    """Fast point and range overlap lookups over a fixed set of regions."""

    def __init__(self, regions: Iterable[T] = ()):
        regions_by_chromosome: Dict[int, List[Interval]] = defaultdict(list)
        for region in regions:
            regions_by_chromosome[region.chromosome].append(
                Interval(region.start - 1, region.end, region)
            )

        self._index: Dict[int, IntervalTree] = {
            chromosome: IntervalTree(intervals)
            for chromosome, intervals in regions_by_chromosome.items()
        }
        logging.debug(f"Created index for {len(self._index)} chromosomes totalling {len(self)} regions")

    @classmethod
    def empty(cls) -> 'RegionIndex':
        return cls(())

    @property
    def chromosomes(self) -> List[int]:
        return sorted(self._index)

    def __len__(self):
        return sum(len(tree) for tree in self._index.values())

    def regions_overlapping_position(self, chromosome: int, position: int) -> List[T]:
        """Regions containing the 1-based position, ordered by start then end."""
        tree = self._index.get(chromosome)
        if tree is None:
            return []
        return _sorted_regions(tree.at(position - 1))

    def regions_overlapping_variant(self, variant: Variant) -> List[T]:
        return self.regions_overlapping_position(variant.chromosome, variant.position)

    def regions_overlapping_region(self, chromosome: int, start: int, end: int) -> List[T]:
        """Regions sharing at least one base with the 1-based closed range start-end."""
        tree = self._index.get(chromosome)
        if tree is None or start > end:
            return []
        return _sorted_regions(tree.overlap(start - 1, end))

    def regions_containing_variant(self, variant: Variant) -> List[T]:
        """Regions which span every reference base of the variant."""
        overlapping = self.regions_overlapping_region(variant.chromosome, variant.position, variant.end)
        return [region for region in overlapping
                if region.start <= variant.position and variant.end <= region.end]

    def has_region_containing_position(self, chromosome: int, position: int) -> bool:
        return bool(self.regions_overlapping_position(chromosome, position))

    def has_region_overlapping_variant(self, variant: Variant) -> bool:
        return bool(self.regions_overlapping_variant(variant))


class DomainIndex(RegionIndex[TopologicalDomain]):
    """Index of topological domains (TADs)."""

    def domains_overlapping(self, variant: Variant) -> List[TopologicalDomain]:
        return self.regions_overlapping_variant(variant)

    def genes_in_domains(self, variant: Variant) -> List[str]:
        """Sorted union of the gene symbols of every domain overlapping the variant."""
        symbols = set()
        for domain in self.domains_overlapping(variant):
            symbols.update(domain.genes)
        return sorted(symbols)

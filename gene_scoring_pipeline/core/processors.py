#!/usr/bin/env python3

"""
Processing classes for regulatory variant reassignment and inheritance mode analysis.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Set, Tuple

from .data_structures import (
    Gene, Genotype, ModeOfInheritance, Pedigree, PriorityKind,
    TranscriptAnnotation, Variant, VariantEffect
)
from .exceptions import InheritanceAnalysisError, PedigreeError
from .region_index import DomainIndex


class GeneReassigner:
    """Re-point variants at the most phenotypically relevant nearby gene."""

    def __init__(self, domain_index: DomainIndex):
        self.domain_index = domain_index

    def reassign_regulatory_variants(self, variants: List[Variant], all_genes: Mapping[str, Gene],
                                     priority_kind: PriorityKind) -> int:
        """
        Reassign every regulatory region variant to the best scoring gene in its TADs.

        Args:
            variants: Variants to inspect, modified in place
            all_genes: Genes of the run keyed by symbol
            priority_kind: Prioritiser whose score decides between candidate genes

        Returns:
            Number of variants whose gene attribution changed
        """
        reassigned = 0
        for variant in variants:
            if variant.effect != VariantEffect.REGULATORY_REGION_VARIANT:
                continue
            previous = (variant.gene_symbol, variant.gene_id)
            self.assign_variant_to_gene_with_highest_phenotype_score(variant, all_genes, priority_kind)
            if (variant.gene_symbol, variant.gene_id) != previous:
                reassigned += 1
        return reassigned

    def assign_variant_to_gene_with_highest_phenotype_score(self, variant: Variant,
                                                            all_genes: Mapping[str, Gene],
                                                            priority_kind: PriorityKind) -> None:
        best_score = 0.0
        best_gene: Optional[Gene] = None

        # genes_in_domains is sorted, so ties always go to the first symbol
        for gene_symbol in self.domain_index.genes_in_domains(variant):
            score = _prioritiser_score(all_genes.get(gene_symbol), priority_kind)
            if score is not None and score > best_score:
                best_score = score
                best_gene = all_genes[gene_symbol]

        if best_gene is None:
            return
        # TAD-wide reassignment invalidates the transcript annotations
        self._assign_variant_to_gene(variant, best_gene, [])

    def reassign_gene_to_most_phenotypically_similar_gene_in_annotations(
            self, variant: Variant, all_genes: Mapping[str, Gene], priority_kind: PriorityKind) -> bool:
        """
        Move a variant to the best scoring gene among its own transcript annotations.

        Fusion gene symbols such as ``GENE1-GENE2`` are also split into their
        parts. The variant is only moved to a gene scoring strictly higher than
        the gene it is currently assigned to. A split fusion part carries no
        annotation of its own, so a variant moved to one gets the CUSTOM effect
        and an empty annotation list. A winning annotation without an effect
        leaves the variant untouched.

        Returns:
            True if the variant was reassigned
        """
        current_gene = all_genes.get(variant.gene_symbol)
        if current_gene is None:
            # e.g. variants with a '.' gene symbol
            return False

        candidates: List[Tuple[str, Optional[VariantEffect], Optional[TranscriptAnnotation]]] = []
        for annotation in variant.annotations:
            candidates.append((annotation.gene_symbol, annotation.effect, annotation))
            if _is_valid_fusion_protein(annotation.gene_symbol):
                for part in annotation.gene_symbol.split('-'):
                    candidates.append((part, VariantEffect.CUSTOM, None))

        current_score = _prioritiser_score(current_gene, priority_kind) or 0.0
        best_score = current_score
        best: Optional[Tuple[Gene, Optional[VariantEffect], Optional[TranscriptAnnotation]]] = None
        for gene_symbol, effect, annotation in candidates:
            score = _prioritiser_score(all_genes.get(gene_symbol), priority_kind)
            if score is not None and score > best_score:
                best_score = score
                best = (all_genes[gene_symbol], effect, annotation)

        if best is None:
            return False

        gene, effect, annotation = best
        if effect is None:
            return False
        # regulatory variants keep their effect for the later TAD reassignment
        if variant.effect != VariantEffect.REGULATORY_REGION_VARIANT:
            variant.effect = effect
        self._assign_variant_to_gene(variant, gene, [annotation] if annotation is not None else [])
        return True

    def _assign_variant_to_gene(self, variant: Variant, gene: Gene,
                                annotations: List[TranscriptAnnotation]) -> None:
        logging.debug(f"Reassigning {variant.effect.name} {variant.chromosome}:{variant.position} "
                      f"{variant.ref}->{variant.alt} from {variant.gene_symbol} to {gene.symbol}")
        variant.gene_symbol = gene.symbol
        variant.gene_id = gene.gene_id
        variant.annotations = annotations


def _prioritiser_score(gene: Optional[Gene], priority_kind: PriorityKind) -> Optional[float]:
    if gene is None:
        return None
    result = gene.get_priority_result(priority_kind)
    return result.score if result is not None else None


def _is_valid_fusion_protein(gene_symbol: str) -> bool:
    # avoid RP11-489C13.1 type symbols
    return '-' in gene_symbol and '.' not in gene_symbol


def _require_members(pedigree: Pedigree) -> None:
    if pedigree.is_empty:
        raise PedigreeError("Pedigree-aware analysis requires at least one individual")


@dataclass
class GenotypeList:
    """
    Genotypes of every pedigree member at every passed variant of one gene.

    ``calls[i][j]`` is the genotype of ``names[j]`` at the i-th variant.
    """
    gene_symbol: str
    names: List[str]
    is_x_chromosomal: bool
    calls: List[List[Genotype]] = field(default_factory=list)

    @property
    def variant_count(self) -> int:
        return len(self.calls)

    def genotypes_of(self, name: str) -> List[Genotype]:
        column = self.names.index(name)
        return [row[column] for row in self.calls]


class InheritanceCompatibilityChecker(ABC):
    """Decides whether observed genotypes segregate with a mode of inheritance."""

    @abstractmethod
    def is_compatible(self, genotypes: GenotypeList, pedigree: Pedigree,
                      mode: ModeOfInheritance) -> bool:
        """
        Return True if at least one allele assignment consistent with the
        genotypes satisfies the segregation pattern of ``mode``.
        """


class InheritanceAnalyser:
    """Determine the modes of inheritance a gene's passed variants are compatible with."""

    EVALUATED_MODES = (
        ModeOfInheritance.AUTOSOMAL_DOMINANT,
        ModeOfInheritance.AUTOSOMAL_RECESSIVE,
        ModeOfInheritance.X_RECESSIVE,
    )

    def __init__(self, checker: InheritanceCompatibilityChecker, pedigree: Pedigree,
                 modes: Optional[Set[ModeOfInheritance]] = None):
        _require_members(pedigree)
        self.checker = checker
        self.pedigree = pedigree
        # keep the fixed evaluation order regardless of how modes were given
        requested = set(self.EVALUATED_MODES) if modes is None else set(modes)
        self.modes = [mode for mode in self.EVALUATED_MODES if mode in requested]

    def build_genotype_list(self, gene: Gene, variants: List[Variant],
                            pedigree: Optional[Pedigree] = None) -> GenotypeList:
        names = (pedigree or self.pedigree).names
        return GenotypeList(
            gene_symbol=gene.symbol,
            names=names,
            is_x_chromosomal=variants[0].is_x_chromosomal,
            calls=[[variant.genotype_for(name) for name in names] for variant in variants]
        )

    def compatible_modes(self, gene: Gene, pedigree: Optional[Pedigree] = None) -> Set[ModeOfInheritance]:
        """
        Compute the compatible modes of inheritance for a gene without storing them.

        Args:
            gene: Gene whose passed variants are checked
            pedigree: Family to check against, defaults to the analyser's pedigree

        Raises:
            InheritanceAnalysisError: if the compatibility checker fails
        """
        if pedigree is None:
            pedigree = self.pedigree
        else:
            _require_members(pedigree)

        passed_variants = gene.passed_variants
        if not passed_variants:
            return set()

        genotypes = self.build_genotype_list(gene, passed_variants, pedigree)

        compatible_modes: Set[ModeOfInheritance] = set()
        for mode in self.modes:
            try:
                compatible = self.checker.is_compatible(genotypes, pedigree, mode)
            except Exception as e:
                raise InheritanceAnalysisError(f"Compatibility check failed: {e}",
                                               gene.symbol, mode) from e
            if compatible:
                compatible_modes.add(mode)

        logging.debug(f"Gene {gene.symbol} with {len(passed_variants)} passed variants is compatible with "
                      f"{sorted(mode.name for mode in compatible_modes)}")
        return compatible_modes

    def analyse(self, gene: Gene, pedigree: Optional[Pedigree] = None) -> Set[ModeOfInheritance]:
        """Compute the compatible modes of inheritance for a gene and store them on it."""
        compatible_modes = self.compatible_modes(gene, pedigree)
        gene.inheritance_modes = compatible_modes
        return set(compatible_modes)

    def analyse_genes(self, genes: List[Gene]) -> Dict[str, Set[ModeOfInheritance]]:
        """
        Analyse genes sequentially. The first failing gene aborts the analysis
        and no gene is updated.
        """
        results = {gene.symbol: self.compatible_modes(gene) for gene in genes}
        for gene in genes:
            gene.inheritance_modes = set(results[gene.symbol])
        return results

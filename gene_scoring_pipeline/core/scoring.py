#!/usr/bin/env python3

"""
Gene scoring: filter, priority and combined scores, and the final gene ranking.

The filter score summarises the variant evidence of a gene and depends on the
mode of inheritance. For autosomal recessive analyses the best of the top
homozygous variant and the mean of the top two heterozygous variants
(compound heterozygote) is taken; otherwise the single best variant is taken.
The priority score is the product of every prioritiser score attached to the
gene. Both are blended into the combined score by a logistic model chosen by
the prioritiser that was run.
"""

import logging
import math
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .data_structures import Gene, Genotype, ModeOfInheritance, PriorityKind, PriorityResult, Variant

# (intercept, priority coefficient, filter coefficient), first matching kind wins
COMBINED_SCORE_MODELS: Tuple[Tuple[PriorityKind, Tuple[float, float, float]], ...] = (
    (PriorityKind.HIPHIVE, (-13.28813, 10.39451, 9.18381)),
    # fitted on the raw walker score
    (PriorityKind.EXOMEWALKER, (-8.67972, 219.40082, 8.54374)),
    (PriorityKind.PHENIX, (-11.15659, 13.21835, 4.08667)),
)

SCORING_MODES = ('raw', 'rank_based')


def sigmoid(z: float) -> float:
    return 1.0 / (1.0 + math.exp(-z))


def calculate_filter_score(variants: List[Variant], modes_of_inheritance: Set[ModeOfInheritance]) -> float:
    """Filter score of a gene's passed variants."""
    if not variants:
        return 0.0
    if ModeOfInheritance.AUTOSOMAL_RECESSIVE in modes_of_inheritance:
        return calculate_autosomal_recessive_filter_score(variants)
    return calculate_non_autosomal_recessive_filter_score(variants)


def calculate_autosomal_recessive_filter_score(variants: List[Variant]) -> float:
    """Best of the top homozygous score and the mean of the two best heterozygous scores."""
    hom_scores: List[float] = []
    het_scores: List[float] = []
    for variant in variants:
        genotype = variant.first_genotype()
        if genotype == Genotype.HOMOZYGOUS_ALT:
            hom_scores.append(variant.variant_score)
        elif genotype == Genotype.HETEROZYGOUS:
            het_scores.append(variant.variant_score)

    hom_scores.sort(reverse=True)
    het_scores.sort(reverse=True)

    best_hom_score = hom_scores[0] if hom_scores else 0.0
    best_comp_het_score = (het_scores[0] + het_scores[1]) / 2 if len(het_scores) >= 2 else 0.0
    return max(best_hom_score, best_comp_het_score)


def calculate_non_autosomal_recessive_filter_score(variants: List[Variant]) -> float:
    scores = [variant.variant_score for variant in variants
              if variant.first_genotype() != Genotype.HOMOZYGOUS_REF]
    return max(scores) if scores else 0.0


def calculate_priority_score(priority_results: Iterable[PriorityResult]) -> float:
    """Product of all prioritiser scores, 0 if there are none."""
    results = list(priority_results)
    if not results:
        return 0.0
    score = 1.0
    for result in results:
        score *= result.score
    return score


def calculate_combined_score(filter_score: float, priority_score: float,
                             priority_kinds: Iterable[PriorityKind]) -> float:
    kinds = set(priority_kinds)
    for kind, (intercept, priority_coefficient, filter_coefficient) in COMBINED_SCORE_MODELS:
        if kind in kinds:
            return sigmoid(intercept + priority_coefficient * priority_score + filter_coefficient * filter_score)
    return (priority_score + filter_score) / 2


def score_gene(gene: Gene, modes_of_inheritance: Set[ModeOfInheritance]) -> None:
    """Set the filter, priority and combined scores of a single gene."""
    gene.filter_score = calculate_filter_score(gene.passed_variants, modes_of_inheritance)
    gene.priority_score = calculate_priority_score(gene.priority_results.values())
    gene.combined_score = calculate_combined_score(gene.filter_score, gene.priority_score,
                                                   gene.priority_results.keys())


def sort_genes(genes: List[Gene], score_attribute: str = 'combined_score') -> None:
    """Sort in place by descending score, then ascending symbol."""
    genes.sort(key=lambda gene: (-getattr(gene, score_attribute), gene.symbol))


class GeneScorer(ABC):
    """Scores and ranks a list of genes in place."""

    @abstractmethod
    def score_genes(self, genes: List[Gene], modes_of_inheritance: Set[ModeOfInheritance]) -> None:
        pass


class RawScoreGeneScorer(GeneScorer):
    """Ranks genes by their raw combined score."""

    def score_genes(self, genes: List[Gene], modes_of_inheritance: Set[ModeOfInheritance]) -> None:
        for gene in genes:
            score_gene(gene, modes_of_inheritance)
        sort_genes(genes)


class RankBasedGeneScorer(GeneScorer):
    """
    Raw scoring followed by rank normalisation.

    Raw combined scores are not uniformly distributed. After raw scoring the
    genes are ranked by combined score and each gene's priority score is
    overwritten with ``1 - rank / n``. Tied genes share the midpoint of the
    ranks they span, so a lone gene at rank r keeps r and two genes tied at
    the top both get rank 1.5.
    """

    def __init__(self, raw_scorer: Optional[RawScoreGeneScorer] = None):
        self.raw_scorer = raw_scorer or RawScoreGeneScorer()

    def score_genes(self, genes: List[Gene], modes_of_inheritance: Set[ModeOfInheritance]) -> None:
        if not genes:
            return
        self.raw_scorer.score_genes(genes, modes_of_inheritance)

        logging.info("Scoring genes by rank")
        genes_by_score: Dict[float, List[Gene]] = defaultdict(list)
        for gene in genes:
            genes_by_score[gene.combined_score].append(gene)

        total = len(genes)
        rank = 1
        for score in sorted(genes_by_score, reverse=True):
            tied_genes = genes_by_score[score]
            adjusted_rank = rank + (len(tied_genes) - 1) / 2
            new_score = 1.0 - adjusted_rank / total
            for gene in tied_genes:
                gene.priority_score = new_score
            rank += len(tied_genes)

        sort_genes(genes, 'priority_score')


def get_gene_scorer(scoring_mode: str) -> GeneScorer:
    """Return the scorer for a scoring mode ('raw' or 'rank_based')."""
    scorers: Mapping[str, type] = {
        'raw': RawScoreGeneScorer,
        'rank_based': RankBasedGeneScorer,
    }
    if scoring_mode not in scorers:
        raise ValueError(f"Unknown scoring mode: {scoring_mode}")
    return scorers[scoring_mode]()

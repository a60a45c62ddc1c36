#!/usr/bin/env python3

"""
Unit tests for gene scoring.

Covers the filter, priority and combined score calculations and the raw
and rank based gene scorers.
"""

import math
import unittest
import sys
import os

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from gene_scoring_pipeline.core.data_structures import (
    Gene, ModeOfInheritance, PriorityKind, PriorityResult, Variant
)
from gene_scoring_pipeline.core.scoring import (
    RankBasedGeneScorer, RawScoreGeneScorer, calculate_combined_score, calculate_filter_score,
    calculate_priority_score, get_gene_scorer, sigmoid
)

HET = ("A", "T")
HOM_ALT = ("T", "T")
HOM_REF = ("A", "A")

AD = {ModeOfInheritance.AUTOSOMAL_DOMINANT}
AR = {ModeOfInheritance.AUTOSOMAL_RECESSIVE}


def make_variant(score: float, alleles=HET, position: int = 100) -> Variant:
    return Variant(chromosome=1, position=position, ref="A", alt="T", variant_score=score,
                   sample_genotypes={"proband": alleles})


def make_gene(symbol: str, variant_scores=(), priority_scores=None) -> Gene:
    gene = Gene(symbol=symbol, variants=[make_variant(score, position=100 + i)
                                         for i, score in enumerate(variant_scores)])
    for kind, score in (priority_scores or {}).items():
        gene.add_priority_result(PriorityResult(kind, symbol, score))
    return gene


class TestFilterScore(unittest.TestCase):
    """Test the mode of inheritance dependent filter score."""

    def test_no_variants(self):
        self.assertEqual(calculate_filter_score([], AD), 0.0)
        self.assertEqual(calculate_filter_score([], AR), 0.0)

    def test_dominant_takes_best_variant(self):
        variants = [make_variant(0.9), make_variant(0.7), make_variant(0.3)]
        self.assertAlmostEqual(calculate_filter_score(variants, AD), 0.9)

    def test_unspecified_mode_takes_best_variant(self):
        variants = [make_variant(0.3), make_variant(0.7)]
        self.assertAlmostEqual(calculate_filter_score(variants, set()), 0.7)
        self.assertAlmostEqual(calculate_filter_score(variants, {ModeOfInheritance.X_RECESSIVE}), 0.7)

    def test_dominant_excludes_homozygous_reference(self):
        variants = [make_variant(0.9, HOM_REF), make_variant(0.4)]
        self.assertAlmostEqual(calculate_filter_score(variants, AD), 0.4)
        self.assertEqual(calculate_filter_score([make_variant(0.9, HOM_REF)], AD), 0.0)

    def test_recessive_compound_heterozygote(self):
        variants = [make_variant(0.3), make_variant(0.9), make_variant(0.7)]
        self.assertAlmostEqual(calculate_filter_score(variants, AR), 0.8)

    def test_recessive_single_heterozygote_scores_zero(self):
        self.assertEqual(calculate_filter_score([make_variant(0.9)], AR), 0.0)

    def test_recessive_homozygote(self):
        variants = [make_variant(0.95, HOM_ALT), make_variant(0.9), make_variant(0.7)]
        self.assertAlmostEqual(calculate_filter_score(variants, AR), 0.95)

    def test_recessive_compound_heterozygote_beats_weaker_homozygote(self):
        variants = [make_variant(0.5, HOM_ALT), make_variant(0.9), make_variant(0.7)]
        self.assertAlmostEqual(calculate_filter_score(variants, AR), 0.8)

    def test_recessive_ignores_homozygous_reference(self):
        variants = [make_variant(1.0, HOM_REF), make_variant(0.6)]
        self.assertEqual(calculate_filter_score(variants, AR), 0.0)

    def test_recessive_reads_first_inserted_sample(self):
        # proband first: homozygous alt in the proband, heterozygous in the parent
        proband_first = Variant(chromosome=1, position=100, ref="A", alt="T", variant_score=0.9,
                                sample_genotypes={"proband": HOM_ALT, "mother": HET})
        self.assertAlmostEqual(calculate_filter_score([proband_first], AR), 0.9)

        mother_first = Variant(chromosome=1, position=100, ref="A", alt="T", variant_score=0.9,
                               sample_genotypes={"mother": HET, "proband": HOM_ALT})
        self.assertEqual(calculate_filter_score([mother_first], AR), 0.0)

    def test_recessive_takes_precedence_when_several_modes(self):
        variants = [make_variant(0.9), make_variant(0.7)]
        modes = {ModeOfInheritance.AUTOSOMAL_DOMINANT, ModeOfInheritance.AUTOSOMAL_RECESSIVE}
        self.assertAlmostEqual(calculate_filter_score(variants, modes), 0.8)


class TestPriorityScore(unittest.TestCase):
    """Test the product of prioritiser scores."""

    def test_no_results(self):
        self.assertEqual(calculate_priority_score([]), 0.0)

    def test_product_of_scores(self):
        results = [PriorityResult(PriorityKind.HIPHIVE, "GENE1", 0.5),
                   PriorityResult(PriorityKind.OMIM, "GENE1", 0.4)]
        self.assertAlmostEqual(calculate_priority_score(results), 0.2)

    def test_single_result(self):
        self.assertAlmostEqual(calculate_priority_score([PriorityResult(PriorityKind.PHIVE, "GENE1", 0.7)]), 0.7)


class TestCombinedScore(unittest.TestCase):
    """Test the prioritiser specific logistic blends."""

    def test_hiphive(self):
        expected = sigmoid(-13.28813 + 10.39451 * 0.5 + 9.18381 * 0.7)
        self.assertAlmostEqual(calculate_combined_score(0.7, 0.5, [PriorityKind.HIPHIVE]), expected)

    def test_exomewalker(self):
        expected = 1 / (1 + math.exp(-(-8.67972 + 219.40082 * 0.01 + 8.54374 * 0.6)))
        self.assertAlmostEqual(calculate_combined_score(0.6, 0.01, [PriorityKind.EXOMEWALKER]), expected)

    def test_phenix(self):
        expected = 1 / (1 + math.exp(-(-11.15659 + 13.21835 * 0.8 + 4.08667 * 0.9)))
        self.assertAlmostEqual(calculate_combined_score(0.9, 0.8, [PriorityKind.PHENIX]), expected)

    def test_other_prioritisers_use_mean(self):
        self.assertAlmostEqual(calculate_combined_score(0.6, 0.4, [PriorityKind.OMIM]), 0.5)
        self.assertAlmostEqual(calculate_combined_score(0.6, 0.0, []), 0.3)

    def test_hiphive_takes_precedence(self):
        kinds = [PriorityKind.EXOMEWALKER, PriorityKind.HIPHIVE]
        self.assertAlmostEqual(calculate_combined_score(0.7, 0.5, kinds),
                               calculate_combined_score(0.7, 0.5, [PriorityKind.HIPHIVE]))

    def test_exomewalker_takes_precedence_over_phenix(self):
        kinds = [PriorityKind.PHENIX, PriorityKind.EXOMEWALKER]
        self.assertAlmostEqual(calculate_combined_score(0.7, 0.5, kinds),
                               calculate_combined_score(0.7, 0.5, [PriorityKind.EXOMEWALKER]))


class TestRawScoreGeneScorer(unittest.TestCase):
    """Test RawScoreGeneScorer."""

    def test_recessive_hiphive_gene(self):
        gene = make_gene("GENE1", [0.8, 0.6], {PriorityKind.HIPHIVE: 0.5})
        RawScoreGeneScorer().score_genes([gene], AR)

        self.assertAlmostEqual(gene.filter_score, 0.7)
        self.assertAlmostEqual(gene.priority_score, 0.5)
        self.assertAlmostEqual(gene.combined_score, 0.16, delta=0.001)

    def test_gene_without_results_or_variants(self):
        gene = make_gene("GENE1")
        RawScoreGeneScorer().score_genes([gene], AD)
        self.assertEqual(gene.filter_score, 0.0)
        self.assertEqual(gene.priority_score, 0.0)
        self.assertEqual(gene.combined_score, 0.0)

    def test_failed_variants_are_not_scored(self):
        gene = make_gene("GENE1", [0.9, 0.2], {PriorityKind.OMIM: 1.0})
        gene.variants[0].add_failed_filter("frequency")
        RawScoreGeneScorer().score_genes([gene], AD)
        self.assertAlmostEqual(gene.filter_score, 0.2)

    def test_genes_sorted_by_combined_score_then_symbol(self):
        genes = [
            make_gene("GENE_C", [0.2], {PriorityKind.OMIM: 0.2}),
            make_gene("GENE_B", [0.9], {PriorityKind.OMIM: 0.9}),
            make_gene("GENE_A", [0.2], {PriorityKind.OMIM: 0.2}),
        ]
        RawScoreGeneScorer().score_genes(genes, AD)
        self.assertEqual([gene.symbol for gene in genes], ["GENE_B", "GENE_A", "GENE_C"])

    def test_empty_gene_list(self):
        genes = []
        RawScoreGeneScorer().score_genes(genes, AD)
        self.assertEqual(genes, [])


class TestRankBasedGeneScorer(unittest.TestCase):
    """Test RankBasedGeneScorer."""

    def test_distinct_scores(self):
        genes = [make_gene(f"GENE{i}", [score], {PriorityKind.OMIM: score})
                 for i, score in enumerate([0.1, 0.9, 0.5, 0.7])]
        RankBasedGeneScorer().score_genes(genes, AD)

        n = len(genes)
        self.assertEqual([gene.symbol for gene in genes], ["GENE1", "GENE3", "GENE2", "GENE0"])
        for rank, gene in enumerate(genes, 1):
            self.assertAlmostEqual(gene.priority_score, 1 - rank / n)

    def test_tied_top_genes_share_midpoint_rank(self):
        genes = [
            make_gene("GENE_B", [0.9], {PriorityKind.OMIM: 0.9}),
            make_gene("GENE_A", [0.9], {PriorityKind.OMIM: 0.9}),
            make_gene("GENE_C", [0.5], {PriorityKind.OMIM: 0.5}),
            make_gene("GENE_D", [0.1], {PriorityKind.OMIM: 0.1}),
        ]
        RankBasedGeneScorer().score_genes(genes, AD)

        n = 4
        self.assertEqual([gene.symbol for gene in genes], ["GENE_A", "GENE_B", "GENE_C", "GENE_D"])
        self.assertAlmostEqual(genes[0].priority_score, 1 - 1.5 / n)
        self.assertAlmostEqual(genes[1].priority_score, 1 - 1.5 / n)
        self.assertAlmostEqual(genes[2].priority_score, 1 - 3 / n)
        self.assertAlmostEqual(genes[3].priority_score, 1 - 4 / n)

    def test_combined_scores_are_kept(self):
        gene = make_gene("GENE1", [0.8, 0.6], {PriorityKind.HIPHIVE: 0.5})
        RankBasedGeneScorer().score_genes([gene], AR)
        self.assertAlmostEqual(gene.combined_score, 0.16, delta=0.001)
        self.assertEqual(gene.priority_score, 0.0)

    def test_empty_gene_list(self):
        genes = []
        RankBasedGeneScorer().score_genes(genes, AD)
        self.assertEqual(genes, [])


class TestScorerFactory(unittest.TestCase):

    def test_known_modes(self):
        self.assertIsInstance(get_gene_scorer('raw'), RawScoreGeneScorer)
        self.assertIsInstance(get_gene_scorer('rank_based'), RankBasedGeneScorer)

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            get_gene_scorer('p_value')


if __name__ == '__main__':
    unittest.main()

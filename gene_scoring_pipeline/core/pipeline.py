#!/usr/bin/env python3

"""
Main pipeline class for gene scoring.

Owns the genes and variants of one analysis run and takes them through
regulatory variant reassignment, inheritance mode analysis and scoring.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from .config import PipelineConfig
from .data_structures import Gene, ModeOfInheritance, Pedigree
from .exceptions import ConfigurationError, InheritanceAnalysisError, PedigreeError, PipelineError
from .processors import GeneReassigner, InheritanceAnalyser, InheritanceCompatibilityChecker
from .region_index import DomainIndex
from .scoring import get_gene_scorer
from ..utils.performance_monitor import PerformanceMonitor


def setup_logging(log_level: str = "INFO") -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


@dataclass
class AnalysisResult:
    """Ranked genes and supporting information from one run."""
    genes: List[Gene]
    inheritance_modes: Dict[str, Set[ModeOfInheritance]] = field(default_factory=dict)
    reassigned_variant_count: int = 0
    performance: Dict[str, Any] = field(default_factory=dict)

    @property
    def top_gene(self) -> Optional[Gene]:
        return self.genes[0] if self.genes else None


class GeneScoringPipeline:
    """Main pipeline class that coordinates all processing phases."""

    def __init__(self, config: PipelineConfig, domain_index: Optional[DomainIndex] = None,
                 compatibility_checker: Optional[InheritanceCompatibilityChecker] = None):
        self.config = config
        self.domain_index = domain_index
        self.compatibility_checker = compatibility_checker
        self.monitor = PerformanceMonitor(memory_limit_mb=config.memory_limit_mb,
                                          enabled=config.enable_memory_monitoring)
        self.genes: List[Gene] = []

    def run(self, genes: List[Gene], pedigree: Optional[Pedigree] = None) -> AnalysisResult:
        """
        Run the complete gene scoring pipeline.

        Args:
            genes: Genes of the run, populated with their variants and priority results
            pedigree: Family of the sample, required when modes of inheritance are configured

        Returns:
            AnalysisResult with the genes sorted by rank

        Raises:
            PipelineError: if any phase fails. No partial ranking is returned.
        """
        if self.config.debug_mode:
            logging.getLogger().setLevel(logging.DEBUG)

        self.genes = list(genes)
        modes = self.config.get_modes_of_inheritance()

        logging.info("Starting gene scoring pipeline")
        logging.info(f"Configuration: {self.config}")
        logging.info(f"Scoring {len(self.genes)} genes")

        reassigned = self._reassign_regulatory_variants()
        inheritance_modes = self._analyse_inheritance_modes(modes, pedigree)
        self._score_genes(modes)

        logging.info("Pipeline completed successfully")
        self.monitor.log_performance_report()

        return AnalysisResult(
            genes=self.genes,
            inheritance_modes=inheritance_modes,
            reassigned_variant_count=reassigned,
            performance=self.monitor.get_performance_summary()
        )

    def _reassign_regulatory_variants(self) -> int:
        """Reassign regulatory variants to the best gene in their TAD."""
        if not self.config.enable_regulatory_reassignment:
            logging.info("Regulatory variant reassignment disabled, skipping")
            return 0
        if self.domain_index is None:
            logging.info("No topological domains provided, skipping regulatory variant reassignment")
            return 0

        with self.monitor.phase_context("regulatory_reassignment") as metrics:
            try:
                all_genes = {gene.symbol: gene for gene in self.genes}
                variants = [variant for gene in self.genes for variant in gene.variants]

                reassigner = GeneReassigner(self.domain_index)
                reassigned = reassigner.reassign_regulatory_variants(
                    variants, all_genes, self.config.get_reassignment_priority_kind()
                )
                moved = self._regroup_reassigned_variants(all_genes)

                metrics.operations_count = len(variants)
                logging.info(f"Reassigned {reassigned} regulatory variants, {moved} moved to another gene")
                return reassigned

            except PipelineError:
                raise
            except Exception as e:
                raise PipelineError(f"Failed during regulatory variant reassignment: {e}") from e

    def _regroup_reassigned_variants(self, all_genes: Dict[str, Gene]) -> int:
        """Move each variant into the gene it is now attributed to."""
        moved = 0
        for gene in self.genes:
            for variant in list(gene.variants):
                target = all_genes.get(variant.gene_symbol)
                if target is None or target is gene:
                    continue
                gene.variants.remove(variant)
                target.add_variant(variant)
                moved += 1
        return moved

    def _analyse_inheritance_modes(self, modes: Set[ModeOfInheritance],
                                   pedigree: Optional[Pedigree]) -> Dict[str, Set[ModeOfInheritance]]:
        """Determine the compatible modes of inheritance for every gene."""
        if not modes:
            logging.info("No modes of inheritance requested, skipping inheritance analysis")
            return {}
        if pedigree is None or pedigree.is_empty:
            raise PedigreeError("Modes of inheritance were requested but the pedigree has no members")
        if self.compatibility_checker is None:
            raise ConfigurationError("Modes of inheritance were requested but no compatibility checker was provided")

        analyser = InheritanceAnalyser(self.compatibility_checker, pedigree, modes)
        timeout = self.config.inheritance_check_timeout
        results: Dict[str, Set[ModeOfInheritance]] = {}

        with self.monitor.phase_context("inheritance_analysis") as metrics:
            executor = ThreadPoolExecutor(max_workers=self.config.parallel_workers)
            futures = [(gene, executor.submit(analyser.compatible_modes, gene)) for gene in self.genes]
            try:
                for count, (gene, future) in enumerate(futures, 1):
                    try:
                        results[gene.symbol] = future.result(timeout=timeout)
                    except FuturesTimeoutError as e:
                        raise InheritanceAnalysisError(f"Compatibility check timed out after {timeout}s",
                                                       gene.symbol) from e

                    if self.config.enable_memory_monitoring and count % self.config.batch_size == 0:
                        self.monitor.check_memory_limit()
            finally:
                # a failed or timed out gene aborts the whole run
                executor.shutdown(wait=False, cancel_futures=True)

            # genes are only updated once every check has succeeded
            for gene in self.genes:
                gene.inheritance_modes = set(results[gene.symbol])

            metrics.operations_count = len(results)
            compatible = sum(1 for gene_modes in results.values() if gene_modes)
            logging.info(f"Analysed inheritance modes for {len(results)} genes, {compatible} compatible with "
                         f"{sorted(mode.name for mode in modes)}")

        return results

    def _score_genes(self, modes: Set[ModeOfInheritance]) -> None:
        """Score and rank all genes."""
        with self.monitor.phase_context("gene_scoring") as metrics:
            try:
                logging.info(f"Scoring genes using mode {self.config.scoring_mode}")
                scorer = get_gene_scorer(self.config.scoring_mode)
                scorer.score_genes(self.genes, modes)

                if self.config.enable_memory_monitoring:
                    self.monitor.check_memory_limit()

                metrics.operations_count = len(self.genes)
                if self.genes:
                    top = self.genes[0]
                    logging.info(f"Top ranked gene: {top.symbol} (combined score {top.combined_score:.4f})")

            except PipelineError:
                raise
            except Exception as e:
                raise PipelineError(f"Failed during gene scoring: {e}") from e

#!/usr/bin/env python3

"""
Gene Scoring Pipeline

Ranks candidate disease genes from the filtered variants of a sample or
family and the phenotype prioritiser results attached to each gene.

Modules:
- core: Data structures, region indexes, processors, scorers, exceptions and configuration
- utils: Performance monitoring
- tests: Test suite
"""

__version__ = "1.0.0"
__author__ = "Gene Scoring Pipeline Team"

# Import main components for easy access
from .core.data_structures import (
    ChromosomalRegion, TopologicalDomain, Variant, TranscriptAnnotation, Gene,
    PriorityResult, Individual, Pedigree, Genotype, ModeOfInheritance,
    PriorityKind, VariantEffect, Sex, AffectionStatus
)
from .core.exceptions import (
    PipelineError, ConfigurationError, PedigreeError,
    InheritanceAnalysisError, MemoryLimitError
)
from .core.config import PipelineConfig, load_config
from .core.region_index import RegionIndex, DomainIndex
from .core.processors import (
    GeneReassigner, GenotypeList, InheritanceAnalyser, InheritanceCompatibilityChecker
)
from .core.scoring import RawScoreGeneScorer, RankBasedGeneScorer, get_gene_scorer
from .core.pipeline import GeneScoringPipeline, AnalysisResult, setup_logging

__all__ = [
    # Main pipeline
    'GeneScoringPipeline', 'AnalysisResult', 'setup_logging',
    # Data structures
    'ChromosomalRegion', 'TopologicalDomain', 'Variant', 'TranscriptAnnotation', 'Gene',
    'PriorityResult', 'Individual', 'Pedigree', 'Genotype', 'ModeOfInheritance',
    'PriorityKind', 'VariantEffect', 'Sex', 'AffectionStatus',
    # Exceptions
    'PipelineError', 'ConfigurationError', 'PedigreeError',
    'InheritanceAnalysisError', 'MemoryLimitError',
    # Configuration
    'PipelineConfig', 'load_config',
    # Components
    'RegionIndex', 'DomainIndex', 'GeneReassigner', 'GenotypeList',
    'InheritanceAnalyser', 'InheritanceCompatibilityChecker',
    'RawScoreGeneScorer', 'RankBasedGeneScorer', 'get_gene_scorer'
]

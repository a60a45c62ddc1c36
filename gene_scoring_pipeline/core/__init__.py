#!/usr/bin/env python3

"""
Core module for the gene scoring pipeline.

Contains the data structures, region indexes, processors, scorers,
exception types and configuration management components.
"""

from .data_structures import (
    ChromosomalRegion, TopologicalDomain, Variant, TranscriptAnnotation, Gene,
    PriorityResult, Individual, Pedigree, Genotype, ModeOfInheritance,
    PriorityKind, VariantEffect, Sex, AffectionStatus
)
from .exceptions import (
    PipelineError, ConfigurationError, PedigreeError,
    InheritanceAnalysisError, MemoryLimitError
)
from .config import PipelineConfig, load_config
from .region_index import RegionIndex, DomainIndex
from .processors import (
    GeneReassigner, GenotypeList, InheritanceAnalyser, InheritanceCompatibilityChecker
)
from .scoring import GeneScorer, RawScoreGeneScorer, RankBasedGeneScorer, get_gene_scorer

__all__ = [
    'ChromosomalRegion', 'TopologicalDomain', 'Variant', 'TranscriptAnnotation', 'Gene',
    'PriorityResult', 'Individual', 'Pedigree', 'Genotype', 'ModeOfInheritance',
    'PriorityKind', 'VariantEffect', 'Sex', 'AffectionStatus',
    'PipelineError', 'ConfigurationError', 'PedigreeError',
    'InheritanceAnalysisError', 'MemoryLimitError',
    'PipelineConfig', 'load_config',
    'RegionIndex', 'DomainIndex',
    'GeneReassigner', 'GenotypeList', 'InheritanceAnalyser', 'InheritanceCompatibilityChecker',
    'GeneScorer', 'RawScoreGeneScorer', 'RankBasedGeneScorer', 'get_gene_scorer'
]

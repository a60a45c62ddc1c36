#!/usr/bin/env python3

"""
Custom exceptions for the gene scoring pipeline.

Provides specific exception types for better error handling and debugging.
"""

class PipelineError(Exception):
    """Base exception for all pipeline-related errors."""
    pass


class ConfigurationError(PipelineError):
    """Error in pipeline configuration."""
    pass


class PedigreeError(PipelineError):
    """Pedigree cannot be used for the requested analysis."""

    def __init__(self, message: str, individual: str = ""):
        super().__init__(message)
        self.individual = individual

    def __str__(self):
        if self.individual:
            return f"Pedigree error for individual {self.individual}: {super().__str__()}"
        return super().__str__()


class InheritanceAnalysisError(PipelineError):
    """The inheritance compatibility check failed for a gene."""

    def __init__(self, message: str, gene_symbol: str = "", mode=None):
        super().__init__(message)
        self.gene_symbol = gene_symbol
        self.mode = mode

    def __str__(self):
        if self.gene_symbol and self.mode is not None:
            return (f"Inheritance analysis error for gene {self.gene_symbol} "
                    f"({self.mode.name}): {super().__str__()}")
        elif self.gene_symbol:
            return f"Inheritance analysis error for gene {self.gene_symbol}: {super().__str__()}"
        return super().__str__()


class MemoryLimitError(PipelineError):
    """Memory usage exceeded limits."""

    def __init__(self, message: str, current_usage: float, limit: float):
        super().__init__(message)
        self.current_usage = current_usage
        self.limit = limit

    def __str__(self):
        return f"Memory error: {super().__str__()} (current: {self.current_usage:.1f}MB, limit: {self.limit:.1f}MB)"

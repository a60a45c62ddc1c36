#!/usr/bin/env python3

"""
Utility components for the gene scoring pipeline.
"""

from .performance_monitor import PerformanceMonitor, PerformanceMetrics

__all__ = ['PerformanceMonitor', 'PerformanceMetrics']

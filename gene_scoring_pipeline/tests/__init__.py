#!/usr/bin/env python3

"""
Test suite for the gene scoring pipeline.

Unit tests covering all major components including:
- Core data structures and genotype derivation
- Region and topological domain indexes
- Regulatory variant reassignment
- Inheritance mode analysis
- Raw and rank based gene scoring
- Configuration management and the end-to-end pipeline
"""

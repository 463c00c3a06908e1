"""
Tests package for DNF Shapley computation.

This package contains unit and integration tests for:
- Formula and coefficient algebra
- Structural decomposition
- Decomposition-tree Shapley engine and ablation
- Allocation engine, data generation, validation
- Ablation runner
"""

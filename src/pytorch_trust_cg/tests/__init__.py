"""
Test suite for pytorch_trust_cg.

This test suite validates:
1. The vector kernels and linear-operator wrappers
2. The trust-region boundary intersection
3. Correctness of the CG iteration, with and without a trust region
4. The configured solver interface and utilities
"""

__all__ = [
    'test_kernels',
    'test_operators',
    'test_boundary',
    'test_cg',
    'test_solver',
    'test_utils',
]

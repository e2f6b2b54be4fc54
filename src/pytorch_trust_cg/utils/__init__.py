"""
Utility functions for pytorch_trust_cg.
"""

from .availability import (
    check_cuda_available,
    check_sparse_csr_available,
    get_available_devices,
    get_capabilities,
    print_availability_report,
)

from .matrix_utils import (
    create_spd_matrix,
    dense_to_sparse_csr,
    create_tridiagonal_sparse_coo,
    create_poisson_2d_sparse_coo,
    create_indefinite_diagonal,
    compute_residual,
    compute_relative_residual,
)

__all__ = [
    'check_cuda_available',
    'check_sparse_csr_available',
    'get_available_devices',
    'get_capabilities',
    'print_availability_report',
    'create_spd_matrix',
    'dense_to_sparse_csr',
    'create_tridiagonal_sparse_coo',
    'create_poisson_2d_sparse_coo',
    'create_indefinite_diagonal',
    'compute_residual',
    'compute_relative_residual',
]

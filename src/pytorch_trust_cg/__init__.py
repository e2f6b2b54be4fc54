"""
PyTorch Trust-Region CG - Conjugate Gradient for Symmetric Linear Systems

This package solves symmetric linear systems Ax = b with the preconditioned
conjugate gradient method. Given a trust-region radius, it becomes the
Steihaug-Toint truncated CG used by trust-region optimizers: the iterate is
kept inside ||x|| <= radius and the solve stops on the boundary when a step
would leave it or when A shows non-positive curvature.

A can be a dense or sparse tensor, a function computing A(v), or a
LinearOperator. Definiteness is never checked.

Quick Start:
    >>> import torch
    >>> from pytorch_trust_cg import cg
    >>>
    >>> A = torch.eye(3, dtype=torch.float64)
    >>> b = torch.tensor([1.0, 2.0, 3.0], dtype=torch.float64)
    >>> x, stats = cg(A, b)
    >>> stats.status
    'solution good enough given atol and rtol'

Trust Region:
    >>> x, stats = cg(torch.eye(2, dtype=torch.float64),
    ...               torch.tensor([3.0, 4.0], dtype=torch.float64), radius=2.0)
    >>> x
    tensor([1.2000, 1.6000], dtype=torch.float64)
    >>> stats.on_boundary
    True

Preconditioning:
    >>> from pytorch_trust_cg import DiagonalOperator
    >>> x, stats = cg(A, b, M=DiagonalOperator.jacobi(A))
"""

__version__ = '1.0.0'
__author__ = 'Litianyu141'
__license__ = 'Apache-2.0'

from .cg import cg
from .boundary import to_boundary
from .kernels import dot, norm, axpy_, scal_
from .operators import (
    LinearOperator,
    IdentityOperator,
    DiagonalOperator,
    aslinearoperator,
)
from .stats import CGStatus, CGStats, CGIterationRecord
from .solver import CGSolver, solve, trust_region_cg

from .utils.availability import (
    check_cuda_available,
    get_available_devices,
    print_availability_report,
)

__all__ = [
    # Version info
    '__version__',
    '__author__',
    '__license__',

    # Solver
    'cg',
    'to_boundary',
    'CGSolver',
    'solve',
    'trust_region_cg',

    # Results
    'CGStatus',
    'CGStats',
    'CGIterationRecord',

    # Operators
    'LinearOperator',
    'IdentityOperator',
    'DiagonalOperator',
    'aslinearoperator',

    # Vector kernels
    'dot',
    'norm',
    'axpy_',
    'scal_',

    # Availability checking
    'check_cuda_available',
    'get_available_devices',
    'print_availability_report',
]

"""
Matrix utility functions for pytorch_trust_cg.

This module builds the symmetric test problems used by the examples and the
test suite, and evaluates residuals of computed solutions.
"""

import torch
from typing import Callable, Optional, Union

from ..operators import LinearOperator, aslinearoperator


def create_spd_matrix(
    n: int,
    device: str = 'cpu',
    dtype: torch.dtype = torch.float64,
    generator: Optional[torch.Generator] = None
) -> torch.Tensor:
    """
    Create a dense symmetric positive definite matrix B B^T + n I.

    Args:
        n: Matrix dimension
        device: Target device
        dtype: Data type
        generator: Optional random generator for reproducibility

    Returns:
        Dense SPD tensor of shape (n, n)
    """
    B = torch.randn(n, n, generator=generator, dtype=dtype).to(device)
    return B @ B.T + torch.eye(n, device=device, dtype=dtype) * n


def dense_to_sparse_csr(
    A: torch.Tensor,
    device: Optional[str] = None
) -> torch.Tensor:
    """
    Convert a dense matrix to sparse CSR format.

    Args:
        A: Dense matrix tensor of shape (n, n)
        device: Target device (default: same as input)

    Returns:
        Sparse CSR tensor
    """
    if A.ndim != 2:
        raise ValueError(f"Expected 2D tensor, got {A.ndim}D")

    if device is not None:
        A = A.to(device)
    return A.to_sparse_csr()


def create_tridiagonal_sparse_coo(
    n: int,
    diag_val: float = 2.0,
    off_diag_val: float = -1.0,
    device: str = 'cpu',
    dtype: torch.dtype = torch.float64
) -> torch.Tensor:
    """
    Create a tridiagonal sparse COO tensor (the 1D Laplacian by default).

    Args:
        n: Matrix dimension
        diag_val: Main diagonal value
        off_diag_val: Off-diagonal value
        device: Target device
        dtype: Data type

    Returns:
        Coalesced sparse COO tensor
    """
    main = torch.arange(n, device=device)
    upper = torch.arange(max(n - 1, 0), device=device)

    rows = torch.cat([main, upper, upper + 1])
    cols = torch.cat([main, upper + 1, upper])
    values = torch.cat([
        torch.full((n,), diag_val, device=device, dtype=dtype),
        torch.full((2 * upper.numel(),), off_diag_val, device=device, dtype=dtype),
    ])

    sparse_matrix = torch.sparse_coo_tensor(
        torch.stack([rows, cols]), values, (n, n),
        device=device, dtype=dtype
    )
    return sparse_matrix.coalesce()


def create_poisson_2d_sparse_coo(
    nx: int,
    ny: int,
    device: str = 'cpu',
    dtype: torch.dtype = torch.float64
) -> torch.Tensor:
    """
    Create a 2D Poisson matrix using the 5-point stencil.

    The matrix is the Kronecker sum T_x (x) I + I (x) T_y of two 1D Laplacians,
    with 4 on the diagonal and -1 for each grid neighbour.

    Args:
        nx: Number of grid points in x direction
        ny: Number of grid points in y direction
        device: Target device
        dtype: Data type

    Returns:
        Coalesced sparse COO tensor of shape (nx * ny, nx * ny)
    """
    Tx = create_tridiagonal_sparse_coo(nx, device=device, dtype=dtype)
    Ty = create_tridiagonal_sparse_coo(ny, device=device, dtype=dtype)
    Ix = torch.eye(nx, device=device, dtype=dtype).to_sparse_coo()
    Iy = torch.eye(ny, device=device, dtype=dtype).to_sparse_coo()

    return (_sparse_kron(Tx, Iy) + _sparse_kron(Ix, Ty)).coalesce()


def _sparse_kron(A: torch.Tensor, B: torch.Tensor) -> torch.Tensor:
    """Kronecker product of two coalesced sparse COO matrices."""
    A = A.coalesce()
    B = B.coalesce()
    (a_rows, a_cols), a_vals = A.indices(), A.values()
    (b_rows, b_cols), b_vals = B.indices(), B.values()
    bm, bn = B.shape

    rows = (a_rows[:, None] * bm + b_rows[None, :]).reshape(-1)
    cols = (a_cols[:, None] * bn + b_cols[None, :]).reshape(-1)
    values = (a_vals[:, None] * b_vals[None, :]).reshape(-1)
    shape = (A.shape[0] * bm, A.shape[1] * bn)
    return torch.sparse_coo_tensor(torch.stack([rows, cols]), values, shape)


def create_indefinite_diagonal(
    eigenvalues,
    device: str = 'cpu',
    dtype: torch.dtype = torch.float64
) -> torch.Tensor:
    """
    Create a dense diagonal matrix with the given (possibly negative) entries.

    Useful for exercising the non-positive curvature branch of the solver.
    """
    return torch.diag(torch.as_tensor(eigenvalues, device=device, dtype=dtype))


def compute_residual(
    A: Union[LinearOperator, torch.Tensor, Callable],
    x: torch.Tensor,
    b: torch.Tensor
) -> torch.Tensor:
    """
    Compute the residual r = b - Ax.

    Args:
        A: Matrix (dense, sparse), LinearOperator or callable
        x: Solution vector
        b: Right-hand side vector

    Returns:
        Residual vector
    """
    op = aslinearoperator(A, n=b.shape[0])
    return b - op.matvec(x)


def compute_relative_residual(
    A: Union[LinearOperator, torch.Tensor, Callable],
    x: torch.Tensor,
    b: torch.Tensor
) -> float:
    """
    Compute the relative residual ||b - Ax|| / ||b||.

    Args:
        A: Matrix (dense, sparse), LinearOperator or callable
        x: Solution vector
        b: Right-hand side vector

    Returns:
        Relative residual (scalar)
    """
    residual = compute_residual(A, x, b)
    return (torch.norm(residual) / torch.norm(b)).item()

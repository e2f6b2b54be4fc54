#!/usr/bin/env python3
"""
Basic Usage Examples for PyTorch Trust-Region CG

This file demonstrates plain, preconditioned and trust-region solves, on
dense, sparse and matrix-free operators.
"""

import time
import torch

from pytorch_trust_cg import CGSolver, DiagonalOperator, cg, get_available_devices
from pytorch_trust_cg.utils import (
    compute_relative_residual,
    create_indefinite_diagonal,
    create_poisson_2d_sparse_coo,
    create_spd_matrix,
)

device = 'cuda' if 'cuda' in get_available_devices() else 'cpu'


def example_unconstrained():
    """Plain CG on a dense SPD matrix"""
    print("\nUnconstrained CG")
    print("-" * 40)

    n = 100
    torch.manual_seed(42)
    A = create_spd_matrix(n, device=device)
    x_true = torch.randn(n, dtype=torch.float64, device=device)
    b = A @ x_true

    x, stats = cg(A, b, atol=0.0, rtol=1e-10)
    error = torch.norm(x - x_true).item()
    print(f"Matrix size: {n}x{n}")
    print(f"CG: converged={stats.converged}, iterations={stats.niter}, error={error:.2e}")
    print(f"Status: {stats.status}")


def example_preconditioned():
    """Jacobi-preconditioned CG on a badly scaled matrix"""
    print("\nPreconditioned CG")
    print("-" * 40)

    n = 200
    torch.manual_seed(0)
    scale = torch.logspace(0, 3, n, dtype=torch.float64, device=device)
    A = scale[:, None] * create_spd_matrix(n, device=device) * scale[None, :]
    b = torch.ones(n, dtype=torch.float64, device=device)

    solver = CGSolver(atol=0.0, rtol=1e-8, itmax=5 * n)
    for name, M in [("none", None), ("jacobi", DiagonalOperator.jacobi(A))]:
        start = time.time()
        x, stats = solver.solve(A, b, M=M)
        elapsed = time.time() - start
        print(f"M={name:7s} iterations={stats.niter:4d}  "
              f"relative residual={compute_relative_residual(A, x, b):.2e}  time={elapsed:.4f}s")


def example_trust_region():
    """Steihaug-Toint CG on a sparse Poisson problem and an indefinite matrix"""
    print("\nTrust-Region CG")
    print("-" * 40)

    A = create_poisson_2d_sparse_coo(20, 20, device=device)
    g = torch.ones(400, dtype=torch.float64, device=device)
    for radius in [0.1, 1.0, 100.0]:
        s, stats = cg(A, g, radius=radius)
        print(f"radius={radius:6.1f}  ||s||={torch.norm(s).item():.4f}  "
              f"iterations={stats.niter:3d}  status: {stats.status}")

    # Negative curvature: the step goes straight to the boundary
    H = create_indefinite_diagonal([-1.0, 2.0, 3.0], device=device)
    s, stats = cg(H, torch.ones(3, dtype=torch.float64, device=device), radius=0.5, verbose=True)
    print(f"Indefinite model: s={s.tolist()}, status: {stats.status}")


def example_matrix_free():
    """CG with a function-based operator"""
    print("\nMatrix-free CG")
    print("-" * 40)

    def laplacian_1d(v):
        y = 2.0 * v
        y[:-1] -= v[1:]
        y[1:] -= v[:-1]
        return y

    b = torch.ones(500, dtype=torch.float64, device=device)
    records = []
    x, stats = cg(laplacian_1d, b, atol=0.0, rtol=1e-10, callback=records.append)
    worst = min(r.curvature for r in records)
    print(f"iterations={stats.niter}, smallest curvature={worst:.2e}, "
          f"final residual={stats.residuals[-1]:.2e}")


if __name__ == "__main__":
    print(f"Device: {device}")
    example_unconstrained()
    example_preconditioned()
    example_trust_region()
    example_matrix_free()

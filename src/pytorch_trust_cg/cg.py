#!/usr/bin/env python3
# Copyright 2025 Litianyu141
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Preconditioned Conjugate Gradient with an optional trust-region constraint.

With ``radius > 0`` this is the Steihaug-Toint truncated CG method: the
iteration stops on the sphere ||x|| = radius as soon as a step would leave
the region or the operator shows non-positive curvature along the search
direction. The method does not verify that A is definite.
"""

import math
import warnings
import torch
from typing import Any, Callable, Optional, Tuple, Union

from .boundary import to_boundary
from .kernels import axpy_, dot, scal_
from .operators import IdentityOperator, LinearOperator, aslinearoperator
from .stats import CGIterationRecord, CGStats, CGStatus

Operator = Union[LinearOperator, torch.Tensor, Callable[[torch.Tensor], torch.Tensor]]


def _as_vector(b: Any) -> torch.Tensor:
    if not isinstance(b, torch.Tensor):
        b = torch.as_tensor(b)
    if b.ndim != 1:
        raise ValueError(f'right-hand side must be a 1D vector, got shape: {tuple(b.shape)}')
    if not (torch.is_floating_point(b) or torch.is_complex(b)):
        b = b.to(torch.get_default_dtype())
    return b


def _working_dtype(b: torch.Tensor, *operators: LinearOperator) -> torch.dtype:
    dtype = b.dtype
    for op in operators:
        if op.dtype is not None:
            dtype = torch.promote_types(dtype, op.dtype)
    return dtype


def _print_header() -> None:
    print(f"{'iter':>5s}  {'‖res‖':>7s}  {'curv':>8s}  {'CGstep':>7s}  {'step':>7s}")


def _print_record(record: CGIterationRecord) -> None:
    print(
        f"{record.iteration:5d}  {record.residual_norm:7.1e}  {record.curvature:8.1e}  "
        f"{record.cg_step:7.1e}  {record.step:7.1e}"
    )


def cg(A: Operator, b: Any, M: Optional[Operator] = None, *,
       atol: float = 1e-8, rtol: float = 1e-6, itmax: int = 0, radius: float = 0.0,
       callback: Optional[Callable[[CGIterationRecord], Any]] = None,
       verbose: bool = False) -> Tuple[torch.Tensor, CGStats]:
    """
    Solve the symmetric linear system Ax = b with the conjugate gradient method.

    The method does not abort if A is not definite. Without a trust region,
    negative curvature steps are taken as computed.

    Parameters
    ----------
    A : LinearOperator, tensor or function
        Symmetric n x n operator: a dense or sparse 2D tensor, a
        LinearOperator, or a function computing A(v).
    b : tensor
        Right-hand side of length n.
    M : LinearOperator, tensor or function, optional
        Symmetric positive definite preconditioner approximating A^{-1}.
        Defaults to the identity.
    atol, rtol : float
        Stop when ||r||_M <= atol + rtol * ||r0||_M, where ||r||_M^2 = <r, M r>
        and r0 = b.
    itmax : int
        Maximum number of iterations; 0 means 2n.
    radius : float
        Trust-region radius. A non-positive value disables the constraint.
    callback : callable, optional
        Called once per iteration with a CGIterationRecord.
    verbose : bool
        Print an iteration table.

    Returns
    -------
    x : tensor
        Approximate solution, with ||x|| <= radius when a radius is given.
    stats : CGStats
        Convergence flag, residual history and status.

    Raises
    ------
    ValueError
        If the dimensions of A, M and b disagree or a tolerance is negative.
    """
    b = _as_vector(b)
    n = b.shape[0]

    A_op = aslinearoperator(A, n=n)
    m, ncols = A_op.shape
    if not (m == ncols == n):
        raise ValueError(f'inconsistent problem size: A is {m} x {ncols}, b has length {n}')
    if M is None:
        M_op = IdentityOperator(n, dtype=b.dtype, device=b.device)
    else:
        M_op = aslinearoperator(M, n=n)
    if M_op.shape != (n, n):
        raise ValueError(f'preconditioner must be {n} x {n}, got {M_op.shape[0]} x {M_op.shape[1]}')

    if atol < 0 or rtol < 0:
        raise ValueError(f'tolerances must be non-negative, got atol={atol}, rtol={rtol}')
    if itmax < 0:
        raise ValueError(f'itmax must be non-negative, got {itmax}')
    if callback is not None and not callable(callback):
        raise TypeError(f'callback must be callable: {callback}')

    dtype = _working_dtype(b, A_op, M_op)
    b = b.to(dtype)
    # Tensor operators are cast once so their products match the work vectors
    if isinstance(A, torch.Tensor) and A.dtype != dtype:
        A_op = aslinearoperator(A.to(dtype))
    if isinstance(M, torch.Tensor) and M.dtype != dtype:
        M_op = aslinearoperator(M.to(dtype))
    if verbose:
        print(f"system of {m} equations and {n} variables")

    # Initial state
    x = torch.zeros_like(b)
    r = b.clone()
    z = M_op.matvec(r)
    p = z.clone()
    gamma = dot(r, z)
    if gamma == 0:
        return x, CGStats(converged=True, inconsistent=False, residuals=[0.0],
                          status=CGStatus.ZERO_RESIDUAL.value)

    iteration = 0
    if itmax == 0:
        itmax = 2 * n
    if verbose:
        print(f"maximum number of iterations set to {itmax}")

    rNorm = math.sqrt(gamma)
    residuals = [rNorm]
    eps = atol + rtol * rNorm
    constrained = radius > 0.0

    solved = rNorm <= eps
    tired = iteration >= itmax
    on_boundary = False
    if verbose:
        _print_header()

    while not (solved or tired):
        Ap = A_op.matvec(p)
        pAp = dot(p, Ap)

        cg_step = gamma / pAp if pAp != 0.0 else math.inf
        alpha = cg_step

        # Move along p to the boundary if the step leaves the trust region
        # or the curvature is non-positive.
        if constrained:
            sigma = max(to_boundary(x, p, radius))
            if pAp <= 0.0 or cg_step > sigma:
                alpha = sigma
                on_boundary = True
        elif pAp == 0.0:
            warnings.warn(
                f'zero curvature along the search direction at iteration {iteration}; '
                f'skipping the step', RuntimeWarning)
            alpha = 0.0

        record = CGIterationRecord(iteration, rNorm, pAp, cg_step, alpha)
        if verbose:
            _print_record(record)
        if callback is not None:
            callback(record)

        axpy_(alpha, p, x)
        axpy_(-alpha, Ap, r)
        z = M_op.matvec(r)
        gamma_next = dot(r, z)
        rNorm = math.sqrt(gamma_next)
        residuals.append(rNorm)

        solved = rNorm <= eps or on_boundary
        if not solved:
            beta = gamma_next / gamma
            gamma = gamma_next
            scal_(beta, p)
            axpy_(1.0, z, p)

        iteration += 1
        tired = iteration >= itmax

    if on_boundary:
        status = CGStatus.ON_BOUNDARY
    elif tired:
        status = CGStatus.MAX_ITERATIONS
    else:
        status = CGStatus.SOLVED

    stats = CGStats(converged=solved, inconsistent=False, residuals=residuals,
                    status=status.value)
    return x, stats

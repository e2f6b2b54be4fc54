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
Configured CG Solver Interface

This module wraps :func:`pytorch_trust_cg.cg.cg` in a small object that holds
default tolerances, iteration budget and trust-region radius, so that callers
solving many related systems (e.g. the inner subproblems of a trust-region
optimizer) configure the solver once.

Example:
    >>> from pytorch_trust_cg import CGSolver
    >>>
    >>> solver = CGSolver(rtol=1e-10)
    >>> x, stats = solver.solve(A, b)
    >>>
    >>> # Trust-region subproblem with the same defaults
    >>> step, stats = solver.trust_region(H, -g, radius=delta)
    >>> print(stats.status)
"""

import torch
from typing import Any, Callable, Dict, Optional, Tuple

from .cg import Operator, cg
from .stats import CGIterationRecord, CGStats


def _validate_settings(atol: float, rtol: float, itmax: int) -> None:
    if atol < 0:
        raise ValueError(f"atol must be non-negative, got {atol}")
    if rtol < 0:
        raise ValueError(f"rtol must be non-negative, got {rtol}")
    if itmax < 0:
        raise ValueError(f"itmax must be non-negative, got {itmax}")


class CGSolver:
    """
    Conjugate gradient solver with stored defaults.

    Attributes:
        atol: Default absolute tolerance
        rtol: Default relative tolerance (relative to the initial residual)
        itmax: Default iteration budget (0 means twice the problem size)
        radius: Default trust-region radius (non-positive disables it)
        verbose: Whether to print the iteration table

    Example:
        >>> solver = CGSolver(atol=0.0, rtol=1e-8)
        >>> x, stats = solver.solve(A, b, M=DiagonalOperator.jacobi(A))
        >>> print(f"Converged: {stats.converged}, Iterations: {stats.niter}")
    """

    def __init__(
        self,
        atol: float = 1e-8,
        rtol: float = 1e-6,
        itmax: int = 0,
        radius: float = 0.0,
        verbose: bool = False
    ):
        """
        Initialize the solver.

        Args:
            atol: Absolute tolerance
            rtol: Relative tolerance
            itmax: Maximum number of iterations (0 for 2n)
            radius: Trust-region radius (0 for an unconstrained solve)
            verbose: Whether to print debug information
        """
        _validate_settings(atol, rtol, itmax)
        self.atol = atol
        self.rtol = rtol
        self.itmax = itmax
        self.radius = radius
        self.verbose = verbose

    @property
    def settings(self) -> Dict[str, Any]:
        """Current defaults as keyword arguments for :func:`cg`."""
        return {
            'atol': self.atol,
            'rtol': self.rtol,
            'itmax': self.itmax,
            'radius': self.radius,
            'verbose': self.verbose,
        }

    def solve(
        self,
        A: Operator,
        b: torch.Tensor,
        M: Optional[Operator] = None,
        callback: Optional[Callable[[CGIterationRecord], Any]] = None,
        **overrides
    ) -> Tuple[torch.Tensor, CGStats]:
        """
        Solve the symmetric linear system Ax = b.

        Args:
            A: Symmetric operator (tensor, LinearOperator or callable)
            b: Right-hand side vector
            M: SPD preconditioner (optional)
            callback: Per-iteration observer (optional)
            **overrides: Per-call values for atol, rtol, itmax, radius, verbose

        Returns:
            Tuple of (solution tensor, CGStats)
        """
        unknown = set(overrides) - set(self.settings)
        if unknown:
            raise TypeError(f"Unknown solver settings: {sorted(unknown)}")

        kwargs = self.settings
        kwargs.update(overrides)
        if kwargs['verbose']:
            print(f"Solving with {self!r}")
        return cg(A, b, M, callback=callback, **kwargs)

    def trust_region(
        self,
        A: Operator,
        b: torch.Tensor,
        radius: float,
        **kwargs
    ) -> Tuple[torch.Tensor, CGStats]:
        """Shortcut for a Steihaug-Toint solve constrained to ||x|| <= radius."""
        if radius <= 0:
            raise ValueError(f"trust-region radius must be positive, got {radius}")
        return self.solve(A, b, radius=radius, **kwargs)

    def __repr__(self) -> str:
        return (
            f"CGSolver(atol={self.atol}, rtol={self.rtol}, "
            f"itmax={self.itmax}, radius={self.radius})"
        )


# Convenience functions for direct use without creating a CGSolver instance

_default_solver: Optional[CGSolver] = None


def _get_default_solver() -> CGSolver:
    """Get or create the default solver instance."""
    global _default_solver
    if _default_solver is None:
        _default_solver = CGSolver()
    return _default_solver


def solve(A: Operator, b: torch.Tensor, **kwargs) -> Tuple[torch.Tensor, CGStats]:
    """
    Solve Ax = b using the shared default solver.

    Example:
        >>> from pytorch_trust_cg import solve
        >>> x, stats = solve(A, b, rtol=1e-10)
    """
    return _get_default_solver().solve(A, b, **kwargs)


def trust_region_cg(A: Operator, b: torch.Tensor, radius: float, **kwargs) -> Tuple[torch.Tensor, CGStats]:
    """Solve Ax = b restricted to ||x|| <= radius using the shared default solver."""
    return _get_default_solver().trust_region(A, b, radius, **kwargs)

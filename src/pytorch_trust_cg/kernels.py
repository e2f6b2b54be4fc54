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
Vector kernels used by the CG iteration.

Three BLAS-1 style primitives (dot, axpy, scal) plus a norm helper. The
in-place variants follow PyTorch's trailing-underscore convention and return
the mutated tensor for convenience.
"""

import math
import torch


def _check_lengths(u: torch.Tensor, v: torch.Tensor) -> None:
    if u.shape != v.shape:
        raise ValueError(
            f'vectors must have matching shapes: {tuple(u.shape)} vs {tuple(v.shape)}')


def dot(u: torch.Tensor, v: torch.Tensor) -> float:
    """Real part of the inner product u^H v, as a Python float.

    Complex inputs use ``torch.vdot`` so the first argument is conjugated;
    the imaginary part vanishes for the Hermitian forms CG works with and is
    discarded.
    """
    _check_lengths(u, v)
    if u.dtype != v.dtype:
        dtype = torch.promote_types(u.dtype, v.dtype)
        u, v = u.to(dtype), v.to(dtype)
    if torch.is_complex(u):
        return torch.vdot(u, v).real.item()
    return torch.dot(u, v).item()


def norm(u: torch.Tensor) -> float:
    """Euclidean norm built on :func:`dot`."""
    return math.sqrt(dot(u, u))


def axpy_(alpha: float, u: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
    """v <- v + alpha * u, in place."""
    _check_lengths(u, v)
    return v.add_(u, alpha=alpha)


def scal_(beta: float, u: torch.Tensor) -> torch.Tensor:
    """u <- beta * u, in place."""
    return u.mul_(beta)

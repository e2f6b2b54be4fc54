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
Linear operators for matrix-free solves.

The solver only needs "apply to a vector" plus the operator's dimensions, so
dense tensors, sparse tensors (COO or compressed layouts) and plain callables
are all wrapped into a :class:`LinearOperator`. Symmetry (and, for
preconditioners, positive definiteness) is part of the caller's contract and
is never verified here.

Example:
    >>> import torch
    >>> from pytorch_trust_cg.operators import aslinearoperator, DiagonalOperator
    >>>
    >>> A = torch.diag(torch.tensor([1.0, 4.0, 9.0], dtype=torch.float64))
    >>> op = aslinearoperator(A)
    >>> op.shape
    (3, 3)
    >>> M = DiagonalOperator.jacobi(A)   # 1 / diag(A)
    >>> M @ torch.ones(3, dtype=torch.float64)
    tensor([1.0000, 0.2500, 0.1111], dtype=torch.float64)
"""

import torch
from typing import Callable, Optional, Tuple, Union


class LinearOperator:
    """
    An m x n linear map known only through its action on vectors.

    Attributes:
        shape: (rows, cols) of the operator
        symmetric: Whether the caller declares the operator symmetric
        dtype: Element type the operator works in, if known
        device: Device the operator lives on, if known
    """

    def __init__(
        self,
        shape: Tuple[int, int],
        matvec: Callable[[torch.Tensor], torch.Tensor],
        symmetric: bool = True,
        dtype: Optional[torch.dtype] = None,
        device: Optional[torch.device] = None
    ):
        if len(shape) != 2:
            raise ValueError(f'linear operator shape must be 2D, got: {shape}')
        m, n = int(shape[0]), int(shape[1])
        if m < 0 or n < 0:
            raise ValueError(f'linear operator shape must be non-negative, got: {shape}')
        if not callable(matvec):
            raise TypeError(f'matvec must be callable: {matvec}')

        self.shape = (m, n)
        self.symmetric = symmetric
        self.dtype = dtype
        self.device = device
        self._matvec = matvec

    @property
    def nrows(self) -> int:
        return self.shape[0]

    @property
    def ncols(self) -> int:
        return self.shape[1]

    def matvec(self, v: torch.Tensor) -> torch.Tensor:
        """Apply the operator to a vector of length ``ncols``."""
        return self._matvec(v)

    def __matmul__(self, v: torch.Tensor) -> torch.Tensor:
        return self.matvec(v)

    def __call__(self, v: torch.Tensor) -> torch.Tensor:
        return self.matvec(v)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(shape={self.shape}, "
            f"symmetric={self.symmetric}, dtype={self.dtype})"
        )


class IdentityOperator(LinearOperator):
    """The n x n identity, used as the default preconditioner.

    Returns a copy of its input so the caller always receives a fresh vector.
    """

    def __init__(
        self,
        n: int,
        dtype: Optional[torch.dtype] = None,
        device: Optional[torch.device] = None
    ):
        super().__init__((n, n), torch.clone, symmetric=True, dtype=dtype, device=device)


class DiagonalOperator(LinearOperator):
    """Elementwise scaling by a fixed diagonal."""

    def __init__(self, diagonal: torch.Tensor):
        if diagonal.ndim != 1:
            raise ValueError(f'diagonal must be 1D, got {diagonal.ndim}D')
        self.diagonal = diagonal
        n = diagonal.shape[0]
        super().__init__(
            (n, n),
            lambda v: v * self.diagonal,
            symmetric=True,
            dtype=diagonal.dtype,
            device=diagonal.device
        )

    @classmethod
    def jacobi(cls, A: torch.Tensor) -> 'DiagonalOperator':
        """
        Build the Jacobi preconditioner 1 / diag(A).

        Args:
            A: Square matrix (dense or sparse) whose diagonal is positive

        Returns:
            DiagonalOperator approximating A^{-1}
        """
        d = _extract_diagonal(A)
        real_d = d.real if torch.is_complex(d) else d
        if (real_d <= 0).any():
            raise ValueError('Jacobi preconditioner requires a positive diagonal')
        return cls(1.0 / d)


def _extract_diagonal(A: torch.Tensor) -> torch.Tensor:
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f'expected a square matrix, but has shape: {tuple(A.shape)}')
    if A.layout == torch.strided:
        return torch.diagonal(A).clone()

    coo = A if A.layout == torch.sparse_coo else A.to_sparse_coo()
    coo = coo.coalesce()
    rows, cols = coo.indices()
    on_diag = rows == cols
    d = torch.zeros(A.shape[0], dtype=A.dtype, device=A.device)
    d[rows[on_diag]] = coo.values()[on_diag]
    return d


def _tensor_matvec(A: torch.Tensor) -> Callable[[torch.Tensor], torch.Tensor]:
    if A.layout == torch.sparse_coo:
        def sparse_mv(v):
            return torch.sparse.mm(A, v.unsqueeze(-1)).squeeze(-1)
        return sparse_mv

    if A.layout != torch.strided:
        # CSR / CSC / BSR layouts
        def compressed_mv(v):
            return (A @ v.unsqueeze(-1)).squeeze(-1)
        return compressed_mv

    def dense_mv(v):
        return torch.mv(A, v)
    return dense_mv


def aslinearoperator(
    A: Union[LinearOperator, torch.Tensor, Callable[[torch.Tensor], torch.Tensor]],
    n: Optional[int] = None,
    symmetric: bool = True
) -> LinearOperator:
    """
    Normalize an argument for computing matrix-vector products.

    Args:
        A: A LinearOperator (returned as is), a 2D tensor (dense or sparse),
            or a callable computing ``A(v)``
        n: Dimension to assume for a callable, which has no shape of its own
        symmetric: Symmetry flag recorded on newly built operators

    Returns:
        LinearOperator wrapping A
    """
    if isinstance(A, LinearOperator):
        return A
    elif isinstance(A, torch.Tensor):
        if A.ndim != 2:
            raise ValueError(
                f'linear operator must be a 2D matrix, but has shape: {tuple(A.shape)}')
        return LinearOperator(
            tuple(A.shape), _tensor_matvec(A),
            symmetric=symmetric, dtype=A.dtype, device=A.device
        )
    elif callable(A):
        if n is None:
            raise ValueError('the dimension n is required to wrap a callable operator')
        return LinearOperator((n, n), A, symmetric=symmetric)
    else:
        raise TypeError(
            f'linear operator must be a LinearOperator, tensor or function: {A}')

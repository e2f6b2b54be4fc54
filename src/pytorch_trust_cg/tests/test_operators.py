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
Test the linear-operator wrappers and the Jacobi preconditioner.
"""

import pytest
import torch

from pytorch_trust_cg.operators import (
    DiagonalOperator,
    IdentityOperator,
    LinearOperator,
    aslinearoperator,
)
from pytorch_trust_cg.utils import check_sparse_csr_available, create_tridiagonal_sparse_coo


def test_dense_tensor_operator():
    A = torch.tensor([[2.0, 1.0], [1.0, 3.0]], dtype=torch.float64)
    v = torch.tensor([1.0, -1.0], dtype=torch.float64)

    op = aslinearoperator(A)

    assert op.shape == (2, 2)
    assert op.dtype == torch.float64
    assert op.symmetric
    assert torch.equal(op.matvec(v), A @ v)
    assert torch.equal(op @ v, A @ v)
    assert torch.equal(op(v), A @ v)


def test_sparse_coo_operator_matches_dense():
    A = create_tridiagonal_sparse_coo(6)
    v = torch.arange(6, dtype=torch.float64)

    op = aslinearoperator(A)

    assert op.shape == (6, 6)
    assert torch.allclose(op @ v, A.to_dense() @ v)


@pytest.mark.skipif(not check_sparse_csr_available(), reason="CSR products unsupported")
def test_sparse_csr_operator_matches_dense():
    dense = create_tridiagonal_sparse_coo(5).to_dense()
    v = torch.linspace(0.0, 1.0, 5, dtype=torch.float64)

    op = aslinearoperator(dense.to_sparse_csr())

    assert torch.allclose(op @ v, dense @ v)


def test_callable_requires_dimension():
    with pytest.raises(ValueError):
        aslinearoperator(lambda v: v)

    op = aslinearoperator(lambda v: 3.0 * v, n=4)
    assert op.shape == (4, 4)
    assert op.dtype is None
    assert torch.equal(op @ torch.ones(4), torch.full((4,), 3.0))


def test_linear_operator_is_returned_unchanged():
    op = LinearOperator((3, 3), lambda v: v)
    assert aslinearoperator(op) is op


def test_non_matrix_tensor_raises():
    with pytest.raises(ValueError):
        aslinearoperator(torch.ones(3))


def test_unsupported_type_raises():
    with pytest.raises(TypeError):
        aslinearoperator(42)


def test_invalid_shapes_raise():
    with pytest.raises(ValueError):
        LinearOperator((3,), lambda v: v)
    with pytest.raises(ValueError):
        LinearOperator((-1, 3), lambda v: v)
    with pytest.raises(TypeError):
        LinearOperator((3, 3), "not callable")


def test_rectangular_operator_dimensions():
    op = aslinearoperator(torch.ones(2, 5))
    assert (op.nrows, op.ncols) == (2, 5)


def test_identity_returns_fresh_copy():
    v = torch.tensor([1.0, 2.0])
    op = IdentityOperator(2)

    w = op @ v

    assert torch.equal(w, v)
    assert w is not v
    w.zero_()
    assert torch.equal(v, torch.tensor([1.0, 2.0]))


def test_diagonal_operator_scales_elementwise():
    op = DiagonalOperator(torch.tensor([1.0, 2.0, 4.0], dtype=torch.float64))

    result = op @ torch.ones(3, dtype=torch.float64)

    assert op.shape == (3, 3)
    assert torch.equal(result, torch.tensor([1.0, 2.0, 4.0], dtype=torch.float64))


def test_diagonal_operator_requires_vector():
    with pytest.raises(ValueError):
        DiagonalOperator(torch.eye(2))


def test_jacobi_from_dense():
    A = torch.tensor([[4.0, 1.0], [1.0, 2.0]], dtype=torch.float64)

    M = DiagonalOperator.jacobi(A)

    assert torch.equal(M.diagonal, torch.tensor([0.25, 0.5], dtype=torch.float64))


def test_jacobi_from_sparse_matches_dense():
    A = create_tridiagonal_sparse_coo(7, diag_val=3.0)

    M_sparse = DiagonalOperator.jacobi(A)
    M_dense = DiagonalOperator.jacobi(A.to_dense())

    assert torch.allclose(M_sparse.diagonal, M_dense.diagonal)
    assert torch.allclose(M_sparse.diagonal, torch.full((7,), 1.0 / 3.0, dtype=torch.float64))


def test_jacobi_does_not_alias_matrix():
    A = torch.diag(torch.tensor([2.0, 5.0], dtype=torch.float64))
    M = DiagonalOperator.jacobi(A)
    A.zero_()
    assert torch.equal(M.diagonal, torch.tensor([0.5, 0.2], dtype=torch.float64))


def test_jacobi_rejects_non_positive_diagonal():
    with pytest.raises(ValueError):
        DiagonalOperator.jacobi(torch.diag(torch.tensor([1.0, 0.0])))
    with pytest.raises(ValueError):
        DiagonalOperator.jacobi(torch.diag(torch.tensor([1.0, -2.0])))


def test_jacobi_rejects_non_square():
    with pytest.raises(ValueError):
        DiagonalOperator.jacobi(torch.ones(2, 3))


def test_repr():
    assert repr(IdentityOperator(3)) == "IdentityOperator(shape=(3, 3), symmetric=True, dtype=None)"


if __name__ == '__main__':
    raise SystemExit(pytest.main([__file__, '-v']))

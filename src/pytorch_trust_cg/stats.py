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
Result bookkeeping for the CG solver: outcome tags, solve statistics and the
per-iteration diagnostic record.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple


class CGStatus(Enum):
    """Possible outcomes of a CG solve."""
    ZERO_RESIDUAL = "x = 0 is a zero-residual solution"
    ON_BOUNDARY = "on trust-region boundary"
    MAX_ITERATIONS = "maximum number of iterations exceeded"
    SOLVED = "solution good enough given atol and rtol"


@dataclass
class CGStats:
    """Statistics returned alongside the solution."""
    converged: bool                                        # Stopping test met (includes reaching the boundary)
    inconsistent: bool                                     # Reserved, never computed
    residuals: List[float] = field(default_factory=list)   # Residual norms, initial norm first
    status: str = "unknown"                                # One of the CGStatus values

    @property
    def niter(self) -> int:
        """Number of iterations performed."""
        return max(len(self.residuals) - 1, 0)

    @property
    def on_boundary(self) -> bool:
        return self.status == CGStatus.ON_BOUNDARY.value

    def __str__(self) -> str:
        final = self.residuals[-1] if self.residuals else float('nan')
        return (
            f"CG stats\n"
            f"  converged: {self.converged}\n"
            f"  inconsistent: {self.inconsistent}\n"
            f"  iterations: {self.niter}\n"
            f"  final residual: {final:.2e}\n"
            f"  status: {self.status}"
        )


class CGIterationRecord(NamedTuple):
    """
    Diagnostic snapshot of one CG iteration, taken before x and r are updated.

    ``cg_step`` is the unconstrained step gamma / pAp; it is ``inf`` when the
    curvature is exactly zero and is never used in that case. ``step`` is the
    step actually taken along p.
    """
    iteration: int
    residual_norm: float
    curvature: float
    cg_step: float
    step: float

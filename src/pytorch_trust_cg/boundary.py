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
Step lengths to the trust-region boundary.
"""

import math
import torch
from typing import Tuple

from .kernels import dot


def to_boundary(x: torch.Tensor, p: torch.Tensor, radius: float) -> Tuple[float, float]:
    """
    Compute the steps sigma such that ||x + sigma * p|| = radius.

    The steps are the roots of the scalar quadratic
    (p.p) sigma^2 + 2 (x.p) sigma + (x.x - radius^2) = 0, computed in the
    cancellation-free form q = -(x.p + sign(x.p) sqrt(disc)), roots q / (p.p)
    and c / q.

    Args:
        x: Current iterate, inside the trust region
        p: Search direction
        radius: Trust-region radius, positive

    Returns:
        Tuple (sigma_min, sigma_max) in ascending order

    Raises:
        ValueError: If radius or p.p is not positive, or the quadratic has no
            two distinct real roots
    """
    if radius <= 0:
        raise ValueError(f'trust-region radius must be positive, got {radius}')

    pp = dot(p, p)
    if pp <= 0:
        raise ValueError('search direction must be nonzero to reach the boundary')
    xp = dot(x, p)
    c = dot(x, x) - radius * radius

    # Reduced discriminant of the half-b form
    disc = xp * xp - pp * c
    if disc <= 0:
        raise ValueError(
            f'no boundary crossing along the search direction (discriminant {disc:.3e})')

    q = -(xp + math.copysign(math.sqrt(disc), xp))
    roots = (q / pp, c / q)
    return min(roots), max(roots)

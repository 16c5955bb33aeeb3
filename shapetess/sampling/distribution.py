# SPDX-FileCopyrightText: Copyright (c) 2023 - 2026 NVIDIA CORPORATION & AFFILIATES.
# SPDX-FileCopyrightText: All rights reserved.
# SPDX-License-Identifier: Apache-2.0
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

"""Element-weighted cumulative distributions for surface sampling.

To draw points uniformly per unit length (lines) or per unit area
(triangles), an element must be chosen with probability proportional to its
measure. The distribution stores the normalized prefix sum of the element
measures, i.e. the inverse-CDF table consumed by
:func:`~shapetess.sampling.sample_elements`, along with the raw total so
callers can compute sampling pdfs (``1 / weight``).
"""

import logging
import warnings
from dataclasses import dataclass

import torch

from shapetess.elements import ElementKind, Elements, select_elements
from shapetess.errors import EmptyDistribution
from shapetess.geometry._measures import element_measures

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ElementDistribution:
    """Cumulative distribution over the elements of a shape.

    Attributes
    ----------
    kind : {"points", "lines", "triangles"}
        Element kind the distribution was built over.
    cdf : torch.Tensor
        Shape ``(n_elements,)``. Non-decreasing, last entry 1.
    weight : float
        Sum of the raw element weights: point count, total length or total
        area.
    """

    kind: ElementKind
    cdf: torch.Tensor
    weight: float

    @property
    def n_elements(self) -> int:
        return self.cdf.shape[0]

    @property
    def pdf(self) -> float:
        """Density of a uniformly sampled point (``1 / weight``)."""
        return 1.0 / self.weight

    def element_probabilities(self) -> torch.Tensor:
        """Return the probability of selecting each element."""
        return torch.diff(self.cdf, prepend=self.cdf.new_zeros(1))


def build_cdf(weights: torch.Tensor) -> tuple[torch.Tensor, float]:
    """Turn raw element weights into a normalized cumulative distribution.

    Parameters
    ----------
    weights : torch.Tensor
        Non-negative weights, shape ``(n_elements,)``.

    Returns
    -------
    cdf : torch.Tensor
        Shape ``(n_elements,)``; ``cdf[-1] == 1``.
    total : float
        Sum of ``weights``.

    Raises
    ------
    EmptyDistribution
        If ``weights`` is empty or sums to zero.

    Examples
    --------
    >>> cdf, total = build_cdf(torch.tensor([1.0, 3.0]))
    >>> cdf.tolist(), total
    ([0.25, 1.0], 4.0)
    """
    if weights.numel() == 0:
        raise EmptyDistribution("Cannot build a distribution over zero elements.")

    cdf = torch.cumsum(weights, dim=0)
    total = float(cdf[-1])
    if not total > 0:
        raise EmptyDistribution(
            f"Cannot build a distribution with total weight {total}; "
            f"all {len(weights)} elements are degenerate."
        )

    n_degenerate = int((weights == 0).sum())
    if n_degenerate > 0:
        warnings.warn(
            f"{n_degenerate} of {len(weights)} elements have zero weight "
            "and are selected with zero probability.",
            stacklevel=3,
        )

    return cdf / cdf[-1], total


def build_distribution(
    elements: Elements,
    positions: torch.Tensor | None = None,
) -> ElementDistribution:
    """Build the sampling distribution of a single element array.

    Parameters
    ----------
    elements : Elements
        Points, lines or triangles.
    positions : torch.Tensor or None
        Vertex positions, shape ``(n_vertices, n_spatial_dims)``. Not needed
        for points, which all weigh 1.

    Returns
    -------
    ElementDistribution
        CDF over ``elements`` in input order, plus the total weight.

    Raises
    ------
    EmptyDistribution
        If there are no elements or their total weight is zero.
    IndexOutOfRange
        If an element references a vertex outside ``positions``.

    Examples
    --------
    >>> from shapetess.elements import Lines
    >>> positions = torch.tensor([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [4.0, 0.0, 0.0]])
    >>> dist = build_distribution(Lines(torch.tensor([[0, 1], [1, 2]])), positions)
    >>> dist.cdf.tolist(), dist.weight
    ([0.25, 1.0], 4.0)
    """
    if elements.n_elements == 0:
        raise EmptyDistribution(
            f"Cannot build a distribution over zero {elements.kind}."
        )

    if positions is None:
        if elements.kind != "points":
            raise ValueError(
                f"Building a distribution over {elements.kind} requires positions."
            )
        weights = torch.ones(elements.n_elements, device=elements.device)
    else:
        elements.validate_vertex_ids(positions.shape[0])
        weights = element_measures(elements, positions)

    cdf, total = build_cdf(weights)
    logger.debug(
        "Built %s distribution over %d elements with total weight %g.",
        elements.kind,
        elements.n_elements,
        total,
    )
    return ElementDistribution(kind=elements.kind, cdf=cdf, weight=total)


def sample_shape_cdf(
    positions: torch.Tensor,
    points: torch.Tensor | None = None,
    lines: torch.Tensor | None = None,
    triangles: torch.Tensor | None = None,
) -> tuple[torch.Tensor, float]:
    """Build the CDF of whichever one of points/lines/triangles is populated.

    Parameters
    ----------
    positions : torch.Tensor
        Vertex positions, shape ``(n_vertices, n_spatial_dims)``.
    points, lines, triangles : torch.Tensor or None
        Element arrays; exactly one must be non-empty.

    Returns
    -------
    cdf : torch.Tensor
        Shape ``(n_elements,)``.
    weight : float
        Point count, total length or total area.

    Raises
    ------
    InvalidElementSelection
        If none, or more than one, element array is non-empty.
    """
    elements = select_elements(points=points, lines=lines, triangles=triangles)
    distribution = build_distribution(elements, positions)
    return distribution.cdf, distribution.weight

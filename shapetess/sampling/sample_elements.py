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

"""Inverse-CDF sampling of element references.

Given an :class:`~shapetess.sampling.ElementDistribution` and uniform random
numbers, pick an element with probability proportional to its weight and a
coordinate inside it that is uniform over the element:

- points: no coordinate;
- lines: ``t = uvrn`` (uniform along the segment);
- triangles: ``(u, v) -> (1 - sqrt(u), v * sqrt(u))``, the area-preserving
  map from the unit square onto the barycentric triangle.

Random numbers are supplied by the caller, so sampling is deterministic for
given draws and works with any sequence (pseudo-random or low-discrepancy).
"""

from dataclasses import dataclass

import torch

from shapetess.elements import ElementKind
from shapetess.errors import EmptyDistribution, InvalidElementSelection
from shapetess.sampling.distribution import ElementDistribution


@dataclass(frozen=True, eq=False)
class ElementSample:
    """Element references produced by sampling.

    Attributes
    ----------
    kind : {"points", "lines", "triangles"}
        Element kind the ids refer to.
    element_ids : torch.Tensor
        Selected element ids, shape ``batch_shape``.
    uv : torch.Tensor or None
        ``None`` for points, ``t`` with shape ``batch_shape`` for lines,
        ``(u, v)`` with shape ``(*batch_shape, 2)`` for triangles. For
        triangles the barycentric weights are ``(1 - u - v, u, v)``.
    """

    kind: ElementKind
    element_ids: torch.Tensor
    uv: torch.Tensor | None


def find_elements(cdf: torch.Tensor, ern: torch.Tensor | float) -> torch.Tensor:
    """Return the smallest ``i`` with ``cdf[i] >= ern`` for each draw.

    Binary search over the sorted CDF, O(log n) per draw. The result is
    clamped to the last element so draws just below 1 that exceed a
    rounded ``cdf[-1]`` still map to the last element.

    Parameters
    ----------
    cdf : torch.Tensor
        Non-decreasing CDF, shape ``(n_elements,)``.
    ern : torch.Tensor or float
        Uniform draws in ``[0, 1)``, any shape.

    Returns
    -------
    torch.Tensor
        Element ids, same shape as ``ern``, dtype int64.

    Examples
    --------
    >>> cdf = torch.tensor([0.25, 0.5, 1.0])
    >>> find_elements(cdf, torch.tensor([0.0, 0.25, 0.3, 0.9999])).tolist()
    [0, 0, 1, 2]
    """
    if cdf.numel() == 0:
        raise EmptyDistribution("Cannot sample from an empty distribution.")
    ern = torch.as_tensor(ern, dtype=cdf.dtype, device=cdf.device)
    ids = torch.searchsorted(cdf, ern.reshape(-1), right=False)
    return ids.clamp(max=len(cdf) - 1).reshape(ern.shape)


def sample_uniform_triangle(uvrn: torch.Tensor) -> torch.Tensor:
    """Map uniform square draws to uniform barycentric coordinates.

    ``(u, v) -> (1 - sqrt(u), v * sqrt(u))``. The resulting weights
    ``(1 - u' - v', u', v')`` are all in ``[0, 1]`` and are uniformly
    distributed over the triangle's area.

    Parameters
    ----------
    uvrn : torch.Tensor
        Uniform draws in ``[0, 1)^2``, shape ``(..., 2)``.

    Returns
    -------
    torch.Tensor
        Barycentric ``(u', v')``, shape ``(..., 2)``.

    Examples
    --------
    >>> sample_uniform_triangle(torch.tensor([0.25, 0.5])).tolist()
    [0.5, 0.25]
    """
    sqrt_u = torch.sqrt(uvrn[..., 0])
    return torch.stack([1 - sqrt_u, uvrn[..., 1] * sqrt_u], dim=-1)


def _as_draws(
    uvrn: torch.Tensor | float | tuple[float, float] | None,
    kind: ElementKind,
    like: torch.Tensor,
) -> torch.Tensor:
    if uvrn is None:
        raise ValueError(f"Sampling {kind} requires `uvrn` draws, got None.")
    return torch.as_tensor(uvrn, dtype=like.dtype, device=like.device)


def sample_elements(
    distribution: ElementDistribution,
    ern: torch.Tensor | float,
    uvrn: torch.Tensor | float | tuple[float, float] | None = None,
) -> ElementSample:
    """Sample element references from a distribution.

    Parameters
    ----------
    distribution : ElementDistribution
        Distribution from :func:`~shapetess.sampling.build_distribution`.
    ern : torch.Tensor or float
        Uniform draws in ``[0, 1)`` selecting the element, shape
        ``batch_shape``.
    uvrn : torch.Tensor or float or tuple or None
        Uniform draws for the coordinate inside the element. Ignored for
        points. For lines, shape ``batch_shape`` (or ``(*batch_shape, 2)``,
        in which case the first component is used). For triangles, shape
        ``(*batch_shape, 2)``.

    Returns
    -------
    ElementSample
        Element ids and coordinates.

    Examples
    --------
    >>> from shapetess.elements import Triangles
    >>> from shapetess.sampling import build_distribution
    >>> positions = torch.tensor([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    >>> dist = build_distribution(Triangles(torch.tensor([[0, 1, 2]])), positions)
    >>> sample = sample_elements(dist, 0.5, (0.25, 0.5))
    >>> int(sample.element_ids), sample.uv.tolist()
    (0, [0.5, 0.25])
    """
    cdf = distribution.cdf
    element_ids = find_elements(cdf, ern)

    if distribution.kind == "points":
        return ElementSample(kind="points", element_ids=element_ids, uv=None)

    draws = _as_draws(uvrn, distribution.kind, cdf)

    if distribution.kind == "lines":
        if draws.shape != element_ids.shape:
            if draws.shape[-1:] != (2,):
                raise ValueError(
                    f"Line draws must have shape {tuple(element_ids.shape)} or "
                    f"{(*element_ids.shape, 2)}, but got {draws.shape=}."
                )
            draws = draws[..., 0]
        return ElementSample(kind="lines", element_ids=element_ids, uv=draws)

    if draws.shape != (*element_ids.shape, 2):
        raise ValueError(
            f"Triangle draws must have shape {(*element_ids.shape, 2)}, "
            f"but got {draws.shape=}."
        )
    return ElementSample(
        kind="triangles",
        element_ids=element_ids,
        uv=sample_uniform_triangle(draws),
    )


def sample_shape(
    ern: torch.Tensor | float,
    uvrn: torch.Tensor | tuple[float, float] | None = None,
    point_cdf: torch.Tensor | None = None,
    line_cdf: torch.Tensor | None = None,
    triangle_cdf: torch.Tensor | None = None,
) -> ElementSample:
    """Sample from whichever one of three CDFs is non-empty.

    Parameters
    ----------
    ern : torch.Tensor or float
        Uniform draws selecting the element.
    uvrn : torch.Tensor or tuple or None
        Uniform draws for the in-element coordinate, shape
        ``(*batch_shape, 2)``. Lines use the first component.
    point_cdf, line_cdf, triangle_cdf : torch.Tensor or None
        CDFs from :func:`~shapetess.sampling.sample_shape_cdf`; exactly one
        must be non-empty.

    Returns
    -------
    ElementSample
        Element ids and coordinates.

    Raises
    ------
    InvalidElementSelection
        If none, or more than one, CDF is non-empty.
    """
    given = {
        "points": point_cdf,
        "lines": line_cdf,
        "triangles": triangle_cdf,
    }
    populated = [k for k, cdf in given.items() if cdf is not None and cdf.numel() > 0]
    if len(populated) != 1:
        raise InvalidElementSelection(
            f"Exactly one of point_cdf/line_cdf/triangle_cdf must be non-empty, "
            f"but got {populated if populated else 'none'}."
        )

    kind = populated[0]
    ### The raw weight is not needed for sampling
    distribution = ElementDistribution(kind=kind, cdf=given[kind], weight=1.0)
    return sample_elements(distribution, ern, uvrn)

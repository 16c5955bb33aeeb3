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

"""Per-element measures: count, length, area."""

import torch

from shapetess.elements import Elements


def triangle_cross(
    v0: torch.Tensor, v1: torch.Tensor, v2: torch.Tensor
) -> torch.Tensor:
    """Return ``(v1 - v0) x (v2 - v0)`` for 3D triangles.

    Parameters
    ----------
    v0, v1, v2 : torch.Tensor
        Corner positions, shape ``(n_triangles, 3)``.

    Returns
    -------
    torch.Tensor
        Unnormalized normals (twice the area in magnitude), shape
        ``(n_triangles, 3)``.
    """
    return torch.linalg.cross(v1 - v0, v2 - v0)


def line_lengths(v0: torch.Tensor, v1: torch.Tensor) -> torch.Tensor:
    """Euclidean length of each segment ``v0 -> v1``."""
    return torch.linalg.vector_norm(v1 - v0, dim=-1)


def triangle_areas(
    v0: torch.Tensor, v1: torch.Tensor, v2: torch.Tensor
) -> torch.Tensor:
    """Area of each triangle, for 2D or 3D positions."""
    n_spatial_dims = v0.shape[-1]
    if n_spatial_dims == 3:
        return torch.linalg.vector_norm(triangle_cross(v0, v1, v2), dim=-1) / 2
    if n_spatial_dims == 2:
        e1 = v1 - v0
        e2 = v2 - v0
        return (e1[:, 0] * e2[:, 1] - e1[:, 1] * e2[:, 0]).abs() / 2
    raise NotImplementedError(
        f"Triangle areas are only implemented for 2D and 3D positions, "
        f"got {n_spatial_dims=}."
    )


def element_measures(elements: Elements, positions: torch.Tensor) -> torch.Tensor:
    """Return the sampling weight of each element.

    ==========  =======================================
    Kind        Weight
    ==========  =======================================
    points      1
    lines       ``|p1 - p0|``
    triangles   ``|(p1 - p0) x (p2 - p0)| / 2``
    ==========  =======================================

    Parameters
    ----------
    elements : Elements
        Element array of a single kind.
    positions : torch.Tensor
        Vertex positions, shape ``(n_vertices, n_spatial_dims)``.

    Returns
    -------
    torch.Tensor
        Weights, shape ``(n_elements,)``, dtype of ``positions``.
    """
    if elements.kind == "points":
        return torch.ones(
            elements.n_elements, dtype=positions.dtype, device=positions.device
        )

    corners = positions[elements.vertex_indices()]  # (n_elements, k, n_spatial_dims)
    if elements.kind == "lines":
        return line_lengths(corners[:, 0], corners[:, 1])
    return triangle_areas(corners[:, 0], corners[:, 1], corners[:, 2])

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

"""Smoothed per-vertex normals (tangents for lines).

Each element adds a direction to every vertex it touches and the sums are
normalized:

- points add ``(0, 0, 1)``;
- lines add their tangent ``p1 - p0``;
- triangles add their face normal ``(p1 - p0) x (p2 - p0)``.

With ``weighted=True`` the line and triangle contributions keep their
magnitude (length and twice the area), so larger elements dominate; with
``weighted=False`` each contribution is normalized first and every incident
element counts the same.
"""

import torch
import torch.nn.functional as F

from shapetess.elements import Lines, Points, Triangles
from shapetess.geometry._measures import triangle_cross
from shapetess.utilities._tolerances import safe_eps


def _scatter_to_vertices(
    accumulated: torch.Tensor,
    corner_ids: torch.Tensor,
    directions: torch.Tensor,
) -> None:
    """Add ``directions[i]`` to every vertex in ``corner_ids[i]``, in place."""
    n_vertices_per_element = corner_ids.shape[1]
    index = corner_ids.reshape(-1, 1).expand(-1, accumulated.shape[1])
    src = directions.unsqueeze(1).expand(-1, n_vertices_per_element, -1)
    accumulated.scatter_add_(dim=0, index=index, src=src.reshape(-1, accumulated.shape[1]))


def compute_normals(
    positions: torch.Tensor,
    points: torch.Tensor | None = None,
    lines: torch.Tensor | None = None,
    triangles: torch.Tensor | None = None,
    weighted: bool = True,
) -> torch.Tensor:
    """Compute smoothed vertex normals for a shape.

    Unlike sampling, all three element kinds may be given together.

    Parameters
    ----------
    positions : torch.Tensor
        Vertex positions, shape ``(n_vertices, 3)``.
    points : torch.Tensor or None
        Point indices, shape ``(n_points,)``.
    lines : torch.Tensor or None
        Lines, shape ``(n_lines, 2)``.
    triangles : torch.Tensor or None
        Triangles, shape ``(n_triangles, 3)``.
    weighted : bool
        Weight contributions by length/area (True) or uniformly (False).

    Returns
    -------
    torch.Tensor
        Unit normals, shape ``(n_vertices, 3)``. Vertices touched by no
        element get a zero vector.

    Raises
    ------
    ValueError
        If ``positions`` is not ``(n_vertices, 3)``.
    IndexOutOfRange
        If an element references a vertex outside ``positions``.

    Examples
    --------
    >>> positions = torch.tensor([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    >>> compute_normals(positions, triangles=torch.tensor([[0, 1, 2]])).tolist()
    [[0.0, 0.0, 1.0], [0.0, 0.0, 1.0], [0.0, 0.0, 1.0]]
    """
    if positions.ndim != 2 or positions.shape[1] != 3:
        raise ValueError(
            f"`positions` must have shape (n_vertices, 3), but got {positions.shape=}."
        )
    n_vertices = positions.shape[0]
    eps = safe_eps(positions.dtype)

    accumulated = torch.zeros_like(positions)

    if points is not None and len(points) > 0:
        elements = Points(torch.as_tensor(points, device=positions.device))
        elements.validate_vertex_ids(n_vertices)
        up = positions.new_tensor([0.0, 0.0, 1.0]).expand(elements.n_elements, 3)
        _scatter_to_vertices(accumulated, elements.vertex_indices(), up)

    if lines is not None and len(lines) > 0:
        elements = Lines(torch.as_tensor(lines, device=positions.device))
        elements.validate_vertex_ids(n_vertices)
        ids = elements.vertex_indices()
        tangents = positions[ids[:, 1]] - positions[ids[:, 0]]
        if not weighted:
            tangents = F.normalize(tangents, dim=-1, eps=eps)
        _scatter_to_vertices(accumulated, ids, tangents)

    if triangles is not None and len(triangles) > 0:
        elements = Triangles(torch.as_tensor(triangles, device=positions.device))
        elements.validate_vertex_ids(n_vertices)
        ids = elements.vertex_indices()
        face_normals = triangle_cross(
            positions[ids[:, 0]], positions[ids[:, 1]], positions[ids[:, 2]]
        )
        if not weighted:
            face_normals = F.normalize(face_normals, dim=-1, eps=eps)
        _scatter_to_vertices(accumulated, ids, face_normals)

    return F.normalize(accumulated, dim=-1, eps=eps)

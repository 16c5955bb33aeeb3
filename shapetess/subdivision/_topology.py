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

"""Topology of one level of edge-based subdivision.

Every distinct undirected edge receives one new vertex. With ``n`` original
vertices and edge ids from an :class:`~shapetess.utilities.EdgeMap`, the
vertex on edge ``(a, b)`` is ``m(a, b) = n + id(a, b)``, so new vertices
occupy exactly ``[n, n + n_edges)``. Each line becomes two lines and each
triangle four::

            v2                        v2
           /  \\                      /  \\
          /    \\                   m20 - m12
         /      \\       ->         / \\   / \\
        /        \\               /   \\ /   \\
      v0 -------- v1            v0 -- m01 -- v1
"""

import logging

import torch

from shapetess.elements import Lines, Triangles
from shapetess.utilities._edge_map import EdgeMap, make_edge_map, triangle_edges

logger = logging.getLogger(__name__)


def _as_elements(
    array: torch.Tensor | None,
    element_type: type[Lines] | type[Triangles],
    device: torch.device,
) -> torch.Tensor:
    """Return ``array`` as a validated ``(n, k)`` int64 tensor (possibly empty)."""
    if array is None:
        return torch.zeros(
            (0, element_type.n_vertices_per_element), dtype=torch.long, device=device
        )
    return element_type(torch.as_tensor(array, device=device)).indices.long()


def split_lines(lines: torch.Tensor, midpoints: torch.Tensor) -> torch.Tensor:
    """Split each line ``(a, b)`` into ``(a, m)`` and ``(m, b)``.

    Parameters
    ----------
    lines : torch.Tensor
        Lines, shape ``(n_lines, 2)``.
    midpoints : torch.Tensor
        New vertex id of each line's edge, shape ``(n_lines,)``.

    Returns
    -------
    torch.Tensor
        Child lines, shape ``(n_lines * 2, 2)``; children of line ``i`` are
        rows ``2i`` and ``2i + 1``.
    """
    return torch.stack(
        [lines[:, 0], midpoints, midpoints, lines[:, 1]], dim=1
    ).reshape(-1, 2)


def split_triangles(triangles: torch.Tensor, midpoints: torch.Tensor) -> torch.Tensor:
    """Split each triangle into three corner triangles and a center triangle.

    Parameters
    ----------
    triangles : torch.Tensor
        Triangles ``(v0, v1, v2)``, shape ``(n_triangles, 3)``.
    midpoints : torch.Tensor
        New vertex ids of the edges ``(v0,v1), (v1,v2), (v2,v0)``, shape
        ``(n_triangles, 3)``.

    Returns
    -------
    torch.Tensor
        Child triangles, shape ``(n_triangles * 4, 3)``. For triangle ``i``,
        rows ``4i .. 4i+2`` are the corners
        ``(v_k, m(v_k, v_k+1), m(v_k, v_k+2))`` and row ``4i + 3`` is the
        center ``(m01, m12, m20)``.
    """
    ### m(v_k, v_k+2) is the edge ending at v_k, i.e. the previous column
    corners = torch.stack(
        [triangles, midpoints, midpoints.roll(1, dims=1)], dim=-1
    )  # (n_triangles, 3, 3)
    center = midpoints.unsqueeze(1)  # (n_triangles, 1, 3)
    return torch.cat([corners, center], dim=1).reshape(-1, 3)


def split_edges(
    n_vertices: int,
    lines: torch.Tensor | None = None,
    triangles: torch.Tensor | None = None,
    edge_map: EdgeMap | None = None,
) -> tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """Subdivide lines and triangles by splitting every edge once.

    Parameters
    ----------
    n_vertices : int
        Number of vertices the elements index into.
    lines : torch.Tensor or None
        Lines, shape ``(n_lines, 2)``.
    triangles : torch.Tensor or None
        Triangles, shape ``(n_triangles, 3)``.
    edge_map : EdgeMap or None
        Precomputed edge map. When omitted one is built with
        :func:`~shapetess.utilities.make_edge_map`; passing that same map
        produces identical output.

    Returns
    -------
    tess_lines : torch.Tensor
        Shape ``(n_lines * 2, 2)``.
    tess_triangles : torch.Tensor
        Shape ``(n_triangles * 4, 3)``.
    edges : torch.Tensor
        Shape ``(n_edges, 2)``. ``edges[i]`` holds the original endpoints of
        the edge whose new vertex is ``n_vertices + i``.

    Raises
    ------
    IndexOutOfRange
        If an element references a vertex outside ``[0, n_vertices)``.
    EdgeNotFound
        If a supplied ``edge_map`` lacks an edge of the input elements.

    Examples
    --------
    >>> tess_lines, tess_triangles, edges = split_edges(
    ...     3, triangles=torch.tensor([[0, 1, 2]])
    ... )
    >>> edges.tolist()
    [[0, 1], [1, 2], [0, 2]]
    >>> tess_triangles.tolist()
    [[0, 3, 5], [1, 4, 3], [2, 5, 4], [3, 4, 5]]
    """
    device = next(
        (a.device for a in (lines, triangles) if isinstance(a, torch.Tensor)),
        torch.device("cpu") if edge_map is None else edge_map.device,
    )
    lines = _as_elements(lines, Lines, device)
    triangles = _as_elements(triangles, Triangles, device)

    Lines(lines).validate_vertex_ids(n_vertices)
    Triangles(triangles).validate_vertex_ids(n_vertices)

    if edge_map is None:
        edge_map = make_edge_map(lines, triangles, device=device)

    line_midpoints = n_vertices + edge_map.lookup_many(lines)
    triangle_midpoints = n_vertices + edge_map.lookup_many(
        triangle_edges(triangles)
    ).reshape(-1, 3)

    tess_lines = split_lines(lines, line_midpoints)
    tess_triangles = split_triangles(triangles, triangle_midpoints)
    edges = edge_map.edges.to(device)

    logger.debug(
        "Split %d lines and %d triangles along %d edges (%d -> %d vertices).",
        len(lines),
        len(triangles),
        len(edges),
        n_vertices,
        n_vertices + len(edges),
    )
    return tess_lines, tess_triangles, edges

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

"""Tessellation of a shape together with its per-vertex attributes.

Wraps :func:`~shapetess.subdivision.split_edges`: after the elements are
split, every attribute that is present is grown to cover the new midpoint
vertices (average of the two edge endpoints) and normals are re-normalized,
which is the standard smoothing step after subdivision.
"""

import logging

import torch
import torch.nn.functional as F
from tensordict import TensorDict

from shapetess.subdivision._data import interpolate_vertex_data_to_edges
from shapetess.subdivision._topology import split_edges
from shapetess.utilities._edge_map import EdgeMap
from shapetess.utilities._tolerances import safe_eps

logger = logging.getLogger(__name__)

NORMAL_KEY = "normal"


def _split_requested(
    vertex_data: TensorDict | dict[str, torch.Tensor],
) -> tuple[dict[str, torch.Tensor], dict[str, torch.Tensor]]:
    """Separate populated attributes from empty ("not requested") ones."""
    if isinstance(vertex_data, TensorDict):
        return dict(vertex_data.items()), {}
    requested = {k: v for k, v in vertex_data.items() if v.numel() > 0}
    unused = {k: v for k, v in vertex_data.items() if v.numel() == 0}
    return requested, unused


def _infer_n_vertices(
    vertex_data: TensorDict | dict[str, torch.Tensor],
    requested: dict[str, torch.Tensor],
    n_vertices: int | None,
) -> int:
    if n_vertices is not None:
        return n_vertices
    if isinstance(vertex_data, TensorDict) and vertex_data.batch_dims > 0:
        return vertex_data.batch_size[0]
    if requested:
        return next(iter(requested.values())).shape[0]
    raise ValueError(
        "Cannot infer the vertex count from empty vertex data; pass `n_vertices`."
    )


def renormalize_normals(vertex_data: TensorDict) -> TensorDict:
    """Return a copy of ``vertex_data`` with unit-length ``"normal"`` vectors.

    The input TensorDict is left unchanged; other attributes are shared with
    it, not copied.
    """
    if NORMAL_KEY in vertex_data.keys():
        vertex_data = vertex_data.clone(recurse=False)
        normals = vertex_data[NORMAL_KEY]
        vertex_data[NORMAL_KEY] = F.normalize(
            normals, dim=-1, eps=safe_eps(normals.dtype)
        )
    return vertex_data


def tessellate(
    vertex_data: TensorDict | dict[str, torch.Tensor],
    lines: torch.Tensor | None = None,
    triangles: torch.Tensor | None = None,
    n_levels: int = 1,
    edge_map: EdgeMap | None = None,
    n_vertices: int | None = None,
) -> tuple[torch.Tensor, torch.Tensor, TensorDict | dict[str, torch.Tensor]]:
    """Split every edge of a shape and interpolate its vertex attributes.

    Parameters
    ----------
    vertex_data : TensorDict or dict[str, torch.Tensor]
        Per-vertex attributes such as ``"position"``, ``"normal"``,
        ``"texcoord"``, ``"color"`` and ``"radius"``. In a plain dict, an
        empty tensor marks an attribute as unused; it is returned empty.
    lines : torch.Tensor or None
        Lines, shape ``(n_lines, 2)``.
    triangles : torch.Tensor or None
        Triangles, shape ``(n_triangles, 3)``.
    n_levels : int
        Number of times to split. Each level doubles line count and
        quadruples triangle count.
    edge_map : EdgeMap or None
        Precomputed edge map for the input elements. Only valid with
        ``n_levels == 1``.
    n_vertices : int or None
        Vertex count. Inferred from ``vertex_data`` when omitted.

    Returns
    -------
    tess_lines : torch.Tensor
        Shape ``(n_lines * 2**n_levels, 2)``.
    tess_triangles : torch.Tensor
        Shape ``(n_triangles * 4**n_levels, 3)``.
    tess_vertex_data : TensorDict or dict[str, torch.Tensor]
        Same container type as ``vertex_data``. Every populated attribute has
        one row per vertex of the tessellated shape.

    Examples
    --------
    >>> vertex_data = {
    ...     "position": torch.tensor(
    ...         [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]
    ...     ),
    ...     "color": torch.empty(0, 3),
    ... }
    >>> lines, triangles, data = tessellate(
    ...     vertex_data, triangles=torch.tensor([[0, 1, 2]])
    ... )
    >>> triangles.shape, data["position"].shape, data["color"].shape
    (torch.Size([4, 3]), torch.Size([6, 3]), torch.Size([0, 3]))
    """
    if n_levels < 1:
        raise ValueError(f"n_levels must be at least 1, got {n_levels=}")
    if edge_map is not None and n_levels != 1:
        raise ValueError(
            f"A precomputed edge_map only describes the input elements; "
            f"it cannot be used with {n_levels=}."
        )

    requested, unused = _split_requested(vertex_data)
    n = _infer_n_vertices(vertex_data, requested, n_vertices)

    device = next(
        (a.device for a in (lines, triangles) if isinstance(a, torch.Tensor)),
        None,
    )
    data = TensorDict(requested, batch_size=torch.Size([n]), device=device)

    for level in range(n_levels):
        lines, triangles, edges = split_edges(
            n,
            lines=lines,
            triangles=triangles,
            edge_map=edge_map if level == 0 else None,
        )
        data = interpolate_vertex_data_to_edges(data, edges, n)
        data = renormalize_normals(data)
        n += len(edges)
        logger.debug("Tessellation level %d/%d: %d vertices.", level + 1, n_levels, n)

    if isinstance(vertex_data, TensorDict):
        return lines, triangles, data
    return lines, triangles, {**dict(data.items()), **unused}

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

"""Vertex attribute interpolation for edge subdivision.

New vertices sit on edge midpoints, so every per-vertex attribute of a new
vertex is the average of the attribute at the edge's two endpoints.
"""

import logging

import torch
from tensordict import TensorDict

logger = logging.getLogger(__name__)


def average_over_edges(values: torch.Tensor, edges: torch.Tensor) -> torch.Tensor:
    """Append edge-midpoint values to a per-vertex attribute.

    Only floating point and complex attributes can be averaged. Integer or
    boolean attributes (ids, flags) receive zeros for the new vertices.

    Parameters
    ----------
    values : torch.Tensor
        Per-vertex values, shape ``(n_vertices, *feature_shape)``.
    edges : torch.Tensor
        Edge endpoints, shape ``(n_edges, 2)``.

    Returns
    -------
    torch.Tensor
        Shape ``(n_vertices + n_edges, *feature_shape)``; the first
        ``n_vertices`` rows are ``values`` unchanged.

    Examples
    --------
    >>> radius = torch.tensor([1.0, 3.0, 5.0])
    >>> average_over_edges(radius, torch.tensor([[0, 1], [1, 2]])).tolist()
    [1.0, 3.0, 5.0, 2.0, 4.0]
    """
    if values.dtype.is_floating_point or values.dtype.is_complex:
        edge_values = values[edges].mean(dim=1)
    else:
        logger.debug(
            "Attribute with dtype %s cannot be averaged; new vertices get zeros.",
            values.dtype,
        )
        edge_values = torch.zeros(
            (len(edges), *values.shape[1:]),
            dtype=values.dtype,
            device=values.device,
        )
    return torch.cat([values, edge_values], dim=0)


def interpolate_vertex_data_to_edges(
    vertex_data: TensorDict,
    edges: torch.Tensor,
    n_original_vertices: int,
) -> TensorDict:
    """Grow every attribute in ``vertex_data`` by the edge midpoint values.

    Parameters
    ----------
    vertex_data : TensorDict
        Per-vertex attributes, batch_size ``(n_original_vertices,)``.
    edges : torch.Tensor
        Edge endpoints, shape ``(n_edges, 2)``.
    n_original_vertices : int
        Number of vertices before subdivision.

    Returns
    -------
    TensorDict
        Attributes with batch_size ``(n_original_vertices + n_edges,)``.

    Examples
    --------
    >>> vertex_data = TensorDict(
    ...     {"radius": torch.tensor([1.0, 3.0, 5.0])}, batch_size=[3]
    ... )
    >>> grown = interpolate_vertex_data_to_edges(
    ...     vertex_data, torch.tensor([[0, 1], [1, 2]]), 3
    ... )
    >>> grown["radius"].tolist()
    [1.0, 3.0, 5.0, 2.0, 4.0]
    """
    n_total_vertices = n_original_vertices + len(edges)

    if len(vertex_data.keys()) == 0:
        return TensorDict(
            {},
            batch_size=torch.Size([n_total_vertices]),
            device=vertex_data.device,
        )

    return vertex_data.apply(
        lambda tensor: average_over_edges(tensor, edges.to(tensor.device)),
        batch_size=torch.Size([n_total_vertices]),
    )

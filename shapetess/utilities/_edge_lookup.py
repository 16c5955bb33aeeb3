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

"""Vectorized matching of undirected edges against a reference edge list.

Used by :class:`~shapetess.utilities.EdgeMap` to resolve whole element
arrays to edge ids in one pass instead of one dictionary lookup per edge.
"""

import torch


def canonicalize_edges(edges: torch.Tensor) -> torch.Tensor:
    """Sort each ``(a, b)`` row so that the smaller vertex id comes first.

    Parameters
    ----------
    edges : torch.Tensor
        Edges, shape ``(n_edges, 2)``.

    Returns
    -------
    torch.Tensor
        Canonical edges ``(min(a, b), max(a, b))``, shape ``(n_edges, 2)``.
    """
    return torch.stack(
        [edges.min(dim=-1).values, edges.max(dim=-1).values],
        dim=-1,
    )


def find_edges_in_reference(
    reference_edges: torch.Tensor,
    query_edges: torch.Tensor,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Find the row of each query edge within a reference edge list.

    Both inputs are canonicalized internally, so ``(b, a)`` matches a
    reference ``(a, b)``. Sorting the reference costs O(n log n) and each
    query O(log n).

    Parameters
    ----------
    reference_edges : torch.Tensor
        Reference edges, shape ``(n_ref, 2)``.
    query_edges : torch.Tensor
        Edges to look up, shape ``(n_query, 2)``.

    Returns
    -------
    indices : torch.Tensor
        Shape ``(n_query,)``. Row of each query edge in ``reference_edges``.
        Undefined where ``matches`` is False.
    matches : torch.Tensor
        Shape ``(n_query,)`` bool. True where the query edge was found.

    Examples
    --------
    >>> ref = torch.tensor([[0, 1], [1, 2], [0, 2]])
    >>> query = torch.tensor([[2, 1], [3, 4], [2, 0]])
    >>> indices, matches = find_edges_in_reference(ref, query)
    >>> indices[matches].tolist(), matches.tolist()
    ([1, 2], [True, False, True])
    """
    device = reference_edges.device

    ### Handle empty edge cases
    if len(reference_edges) == 0 or len(query_edges) == 0:
        return (
            torch.zeros(len(query_edges), dtype=torch.long, device=device),
            torch.zeros(len(query_edges), dtype=torch.bool, device=device),
        )

    sorted_reference = canonicalize_edges(reference_edges).long()
    sorted_query = canonicalize_edges(query_edges).long()

    ### Integer key per edge: v0 * (max_vertex + 1) + v1
    max_vertex = (
        max(int(sorted_reference.max()), int(sorted_query.max())) + 1
    )
    reference_hash = sorted_reference[:, 0] * max_vertex + sorted_reference[:, 1]
    query_hash = sorted_query[:, 0] * max_vertex + sorted_query[:, 1]

    reference_hash_sorted, sort_indices = torch.sort(reference_hash)
    positions = torch.searchsorted(reference_hash_sorted, query_hash)

    ### Queries past the largest key land one beyond the end
    positions = positions.clamp(max=len(reference_hash_sorted) - 1)

    matches = reference_hash_sorted[positions] == query_hash
    indices = sort_indices[positions]

    return indices, matches


def unique_edges_in_first_occurrence_order(
    edges: torch.Tensor,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Deduplicate undirected edges, ordering them by first appearance.

    ``torch.unique`` returns rows in sorted order; this re-ranks them so the
    edge that appears first in ``edges`` gets id 0, the next new edge id 1,
    and so on.

    Parameters
    ----------
    edges : torch.Tensor
        Edges in insertion order, shape ``(n_edges, 2)``.

    Returns
    -------
    unique_edges : torch.Tensor
        Canonical unique edges in first-occurrence order, shape
        ``(n_unique, 2)``.
    inverse : torch.Tensor
        Shape ``(n_edges,)``. ``unique_edges[inverse[i]]`` is the canonical
        form of ``edges[i]``.

    Examples
    --------
    >>> edges = torch.tensor([[2, 1], [0, 1], [1, 2]])
    >>> unique, inverse = unique_edges_in_first_occurrence_order(edges)
    >>> unique.tolist(), inverse.tolist()
    ([[1, 2], [0, 1]], [0, 1, 0])
    """
    device = edges.device
    if len(edges) == 0:
        return (
            torch.zeros((0, 2), dtype=torch.long, device=device),
            torch.zeros(0, dtype=torch.long, device=device),
        )

    canonical = canonicalize_edges(edges).long()
    sorted_unique, sorted_inverse = torch.unique(
        canonical, dim=0, return_inverse=True
    )
    n_unique = len(sorted_unique)

    ### First row index at which each sorted-unique edge appears
    row_ids = torch.arange(len(canonical), device=device)
    first_occurrence = torch.full(
        (n_unique,), len(canonical), dtype=torch.long, device=device
    ).scatter_reduce(0, sorted_inverse, row_ids, reduce="amin")

    ### Rank unique edges by first occurrence
    order = torch.argsort(first_occurrence)
    rank = torch.empty_like(order)
    rank[order] = torch.arange(n_unique, device=device)

    return sorted_unique[order], rank[sorted_inverse]

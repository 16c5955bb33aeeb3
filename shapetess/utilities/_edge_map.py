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

"""Dictionary of undirected edges with dense, insertion-ordered ids.

Subdivision introduces one new vertex per distinct undirected edge. Two
triangles sharing an edge see it with opposite orientation, ``(a, b)`` and
``(b, a)``; the edge map stores the canonical form ``(min, max)`` so both
resolve to the same id, and therefore to the same new vertex.
"""

from typing import Iterator

import torch

from shapetess.errors import EdgeNotFound
from shapetess.utilities._edge_lookup import (
    canonicalize_edges,
    find_edges_in_reference,
    unique_edges_in_first_occurrence_order,
)


class EdgeMap:
    """Map from canonical undirected edges to ids ``0, 1, 2, ...``.

    Ids are assigned in first-insertion order. Inserting an edge that is
    already present (in either orientation) is a no-op. There is no removal.

    Parameters
    ----------
    device : torch.device or str
        Device of the tensors returned by :attr:`edges` and
        :meth:`lookup_many`.

    Examples
    --------
    >>> edge_map = EdgeMap()
    >>> edge_map.insert((3, 1))
    >>> edge_map.insert((1, 3))
    >>> len(edge_map), edge_map[(1, 3)]
    (1, 0)
    """

    def __init__(self, device: torch.device | str = "cpu"):
        self.device = torch.device(device)
        self._ids: dict[tuple[int, int], int] = {}
        self._edges: torch.Tensor | None = None

    @staticmethod
    def _canonical(edge) -> tuple[int, int]:
        a, b = (int(v) for v in edge)
        return (a, b) if a <= b else (b, a)

    def __len__(self) -> int:
        return len(self._ids)

    def size(self) -> int:
        return len(self._ids)

    def __contains__(self, edge) -> bool:
        return self.has_edge(edge)

    def __iter__(self) -> Iterator[tuple[tuple[int, int], int]]:
        """Yield ``(canonical_edge, id)`` pairs in id order."""
        return iter(self._ids.items())

    def __getitem__(self, edge) -> int:
        return self.lookup(edge)

    def __repr__(self) -> str:
        return f"EdgeMap(n_edges={len(self)}, device={self.device})"

    def has_edge(self, edge) -> bool:
        return self._canonical(edge) in self._ids

    def insert(self, edge) -> None:
        """Insert an edge, assigning it the next id if it is new."""
        key = self._canonical(edge)
        if key not in self._ids:
            self._ids[key] = len(self._ids)
            self._edges = None

    def lookup(self, edge) -> int:
        """Return the id of ``edge`` in either orientation.

        Raises
        ------
        EdgeNotFound
            If the edge has never been inserted.
        """
        key = self._canonical(edge)
        try:
            return self._ids[key]
        except KeyError:
            raise EdgeNotFound(key) from None

    def update(self, edges: torch.Tensor) -> None:
        """Insert every row of ``edges`` in order.

        Equivalent to calling :meth:`insert` on each row, but deduplicates
        on the tensor side so only genuinely new edges reach the dictionary.

        Parameters
        ----------
        edges : torch.Tensor
            Edges, shape ``(n_edges, 2)``.
        """
        if len(edges) == 0:
            return
        unique_edges, _ = unique_edges_in_first_occurrence_order(edges)

        ### Drop edges the map already holds
        if len(self._ids) > 0:
            _, present = find_edges_in_reference(
                self._edge_tensor().to(unique_edges.device), unique_edges
            )
            unique_edges = unique_edges[~present]

        for a, b in unique_edges.tolist():
            self._ids[(a, b)] = len(self._ids)
        self._edges = None

    def lookup_many(self, edges: torch.Tensor) -> torch.Tensor:
        """Return the id of every row of ``edges``.

        Parameters
        ----------
        edges : torch.Tensor
            Edges in either orientation, shape ``(n_edges, 2)``.

        Returns
        -------
        torch.Tensor
            Edge ids, shape ``(n_edges,)``, dtype int64, on ``edges.device``.

        Raises
        ------
        EdgeNotFound
            If any row has not been inserted; the first missing edge is
            reported.
        """
        reference = self._edge_tensor().to(edges.device)
        ids, matches = find_edges_in_reference(reference, edges)
        if not torch.compiler.is_compiling() and not bool(matches.all()):
            first_missing = int(torch.nonzero(~matches)[0])
            missing = canonicalize_edges(edges[first_missing : first_missing + 1])
            raise EdgeNotFound(tuple(missing[0].tolist()))
        return ids

    def _edge_tensor(self) -> torch.Tensor:
        """Cached id-ordered edge tensor shared by the bulk lookups."""
        if self._edges is None:
            ordered = [None] * len(self._ids)
            for edge, edge_id in self._ids.items():
                ordered[edge_id] = edge
            self._edges = torch.tensor(
                ordered, dtype=torch.long, device=self.device
            ).reshape(-1, 2)
        return self._edges

    @property
    def edges(self) -> torch.Tensor:
        """Canonical edges ordered by id, shape ``(n_edges, 2)``.

        ``edges[i]`` holds the endpoints of the edge with id ``i``. The
        returned tensor is a copy; writing to it leaves the map unchanged.
        """
        return self._edge_tensor().clone()


def triangle_edges(triangles: torch.Tensor) -> torch.Tensor:
    """Return the edges of each triangle as ``(v0,v1), (v1,v2), (v2,v0)``.

    Parameters
    ----------
    triangles : torch.Tensor
        Triangles, shape ``(n_triangles, 3)``.

    Returns
    -------
    torch.Tensor
        Directed edges, shape ``(n_triangles * 3, 2)``, grouped per triangle.
    """
    return torch.stack([triangles, triangles.roll(-1, dims=1)], dim=-1).reshape(
        -1, 2
    )


def make_edge_map(
    lines: torch.Tensor | None = None,
    triangles: torch.Tensor | None = None,
    device: torch.device | str | None = None,
) -> EdgeMap:
    """Build an :class:`EdgeMap` from line and triangle arrays.

    Every line is inserted first, in order, followed by the three edges of
    each triangle taken as consecutive corner pairs
    ``(v0, v1), (v1, v2), (v2, v0)``.

    Parameters
    ----------
    lines : torch.Tensor or None
        Lines, shape ``(n_lines, 2)``.
    triangles : torch.Tensor or None
        Triangles, shape ``(n_triangles, 3)``.
    device : torch.device or str or None
        Device for the map. Defaults to the device of the inputs.

    Returns
    -------
    EdgeMap
        Map holding every distinct undirected edge.

    Examples
    --------
    >>> edge_map = make_edge_map(triangles=torch.tensor([[0, 1, 2]]))
    >>> edge_map.edges.tolist()
    [[0, 1], [1, 2], [0, 2]]
    """
    candidates = []
    if lines is not None and len(lines) > 0:
        candidates.append(lines.reshape(-1, 2).long())
    if triangles is not None and len(triangles) > 0:
        candidates.append(triangle_edges(triangles.reshape(-1, 3).long()))

    if device is None:
        device = candidates[0].device if candidates else "cpu"

    edge_map = EdgeMap(device=device)
    if candidates:
        edge_map.update(torch.cat(candidates, dim=0))
    return edge_map

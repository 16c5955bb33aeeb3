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

"""Tests for the topology of edge-based subdivision."""

import pytest
import torch

from shapetess.errors import EdgeNotFound, IndexOutOfRange
from shapetess.subdivision import split_edges, split_lines, split_triangles
from shapetess.utilities import EdgeMap, make_edge_map


class TestSingleTriangle:
    """The canonical one-triangle split."""

    def test_edges_and_children(self, device):
        triangles = torch.tensor([[0, 1, 2]], device=device)
        tess_lines, tess_triangles, edges = split_edges(3, triangles=triangles)

        assert edges.tolist() == [[0, 1], [1, 2], [0, 2]]
        assert tess_triangles.tolist() == [
            [0, 3, 5],
            [1, 4, 3],
            [2, 5, 4],
            [3, 4, 5],
        ]
        assert tess_lines.shape == (0, 2)
        assert tess_triangles.device.type == device

    def test_new_vertices_are_contiguous(self):
        _, tess_triangles, edges = split_edges(3, triangles=torch.tensor([[0, 1, 2]]))
        new_ids = tess_triangles[tess_triangles >= 3].unique()
        assert new_ids.tolist() == list(range(3, 3 + len(edges)))


class TestSharedEdges:
    def test_square_shares_diagonal(self):
        triangles = torch.tensor([[0, 1, 2], [0, 2, 3]])
        _, tess_triangles, edges = split_edges(4, triangles=triangles)

        ### 5 distinct edges -> 4 + 5 vertices
        assert len(edges) == 5
        assert int(tess_triangles.max()) == 4 + 5 - 1
        assert tess_triangles.shape == (8, 3)

        ### Both triangles reference the same midpoint on the diagonal (0, 2)
        diagonal = 4 + edges.tolist().index([0, 2])
        assert (tess_triangles[:4] == diagonal).any()
        assert (tess_triangles[4:] == diagonal).any()

    def test_vertex_count(self):
        """Output references exactly n + n_edges vertices."""
        triangles = torch.tensor([[0, 1, 2], [2, 1, 3], [3, 1, 4]])
        _, tess_triangles, edges = split_edges(5, triangles=triangles)
        assert tess_triangles.unique().tolist() == list(range(5 + len(edges)))


class TestLines:
    def test_polyline(self):
        lines = torch.tensor([[0, 1], [1, 2]])
        tess_lines, tess_triangles, edges = split_edges(3, lines=lines)
        assert edges.tolist() == [[0, 1], [1, 2]]
        assert tess_lines.tolist() == [[0, 3], [3, 1], [1, 4], [4, 2]]
        assert tess_triangles.shape == (0, 3)

    def test_lines_and_triangles_share_edges(self):
        lines = torch.tensor([[1, 0]])
        triangles = torch.tensor([[0, 1, 2]])
        tess_lines, tess_triangles, edges = split_edges(
            3, lines=lines, triangles=triangles
        )
        assert len(edges) == 3
        assert tess_lines.tolist() == [[1, 3], [3, 0]]
        assert tess_triangles[0].tolist() == [0, 3, 5]


class TestPrecomputedEdgeMap:
    def test_identical_output(self):
        lines = torch.tensor([[0, 3]])
        triangles = torch.tensor([[0, 1, 2], [0, 2, 3]])
        edge_map = make_edge_map(lines, triangles)

        built = split_edges(4, lines=lines, triangles=triangles)
        given = split_edges(4, lines=lines, triangles=triangles, edge_map=edge_map)

        for a, b in zip(built, given):
            assert torch.equal(a, b)

    def test_edge_map_survives_writes_to_output(self):
        triangles = torch.tensor([[0, 1, 2]])
        edge_map = make_edge_map(triangles=triangles)

        _, _, edges = split_edges(3, triangles=triangles, edge_map=edge_map)
        edges[0] = torch.tensor([7, 9])

        assert edge_map.edges.tolist() == [[0, 1], [1, 2], [0, 2]]
        again = split_edges(3, triangles=triangles, edge_map=edge_map)
        assert again[2].tolist() == [[0, 1], [1, 2], [0, 2]]

    def test_missing_edge_raises(self):
        edge_map = EdgeMap()
        edge_map.update(torch.tensor([[0, 1], [1, 2]]))
        with pytest.raises(EdgeNotFound):
            split_edges(3, triangles=torch.tensor([[0, 1, 2]]), edge_map=edge_map)


class TestValidation:
    def test_out_of_range_vertex(self):
        with pytest.raises(IndexOutOfRange):
            split_edges(2, triangles=torch.tensor([[0, 1, 2]]))

    def test_wrong_rank(self):
        with pytest.raises(ValueError):
            split_edges(3, triangles=torch.tensor([0, 1, 2]))

    def test_nothing_to_split(self):
        tess_lines, tess_triangles, edges = split_edges(3)
        assert tess_lines.shape == (0, 2)
        assert tess_triangles.shape == (0, 3)
        assert edges.shape == (0, 2)


class TestSplitPrimitives:
    def test_split_lines(self):
        children = split_lines(torch.tensor([[7, 9]]), torch.tensor([12]))
        assert children.tolist() == [[7, 12], [12, 9]]

    def test_split_triangles(self):
        children = split_triangles(
            torch.tensor([[10, 11, 12]]), torch.tensor([[20, 21, 22]])
        )
        assert children.tolist() == [
            [10, 20, 22],
            [11, 21, 20],
            [12, 22, 21],
            [20, 21, 22],
        ]

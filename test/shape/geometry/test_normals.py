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

"""Tests for smoothed vertex normals."""

import pytest
import torch

from shapetess.errors import IndexOutOfRange
from shapetess.geometry import compute_normals, element_measures, triangle_areas
from shapetess.elements import Lines


class TestComputeNormals:
    def test_flat_square(self, unit_square):
        positions, triangles = unit_square
        normals = compute_normals(positions, triangles=triangles)
        expected = torch.tensor([0.0, 0.0, 1.0], device=positions.device).expand(4, 3)
        assert torch.allclose(normals, expected)

    def test_orientation_follows_winding(self, unit_triangle):
        positions, triangles = unit_triangle
        normals = compute_normals(positions, triangles=triangles.flip(-1))
        assert torch.allclose(normals[:, 2], -torch.ones(3, device=positions.device))

    @pytest.mark.parametrize("weighted", [True, False])
    def test_unit_length(self, weighted):
        generator = torch.Generator().manual_seed(0)
        positions = torch.rand(20, 3, generator=generator)
        triangles = torch.stack(
            [torch.arange(18), torch.arange(1, 19), torch.arange(2, 20)], dim=-1
        )
        normals = compute_normals(positions, triangles=triangles, weighted=weighted)
        lengths = torch.linalg.vector_norm(normals, dim=-1)
        assert torch.allclose(lengths, torch.ones(20), atol=1e-5)

    def test_weighting_changes_result(self):
        ### A large triangle in z=0 and a small one in x=0 share vertex 0
        positions = torch.tensor(
            [
                [0.0, 0.0, 0.0],
                [10.0, 0.0, 0.0],
                [0.0, 10.0, 0.0],
                [0.0, 1.0, 0.0],
                [0.0, 0.0, 1.0],
            ]
        )
        triangles = torch.tensor([[0, 1, 2], [0, 3, 4]])
        weighted = compute_normals(positions, triangles=triangles)
        uniform = compute_normals(positions, triangles=triangles, weighted=False)

        assert torch.allclose(
            uniform[0], torch.tensor([1.0, 0.0, 1.0]) / 2**0.5, atol=1e-6
        )
        assert weighted[0, 2] > weighted[0, 0]

    def test_lines_give_tangents(self):
        positions = torch.tensor([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [2.0, 2.0, 0.0]])
        normals = compute_normals(positions, lines=torch.tensor([[0, 1], [1, 2]]))
        assert torch.allclose(normals[0], torch.tensor([1.0, 0.0, 0.0]))
        assert torch.allclose(normals[1], torch.tensor([1.0, 1.0, 0.0]) / 2**0.5)
        assert torch.allclose(normals[2], torch.tensor([0.0, 1.0, 0.0]))

    def test_points_face_up(self):
        positions = torch.rand(3, 3)
        normals = compute_normals(positions, points=torch.tensor([0, 2]))
        assert normals.tolist() == [[0.0, 0.0, 1.0], [0.0, 0.0, 0.0], [0.0, 0.0, 1.0]]

    def test_untouched_vertex_is_zero(self, unit_triangle):
        positions, triangles = unit_triangle
        positions = torch.cat([positions, positions.new_ones(1, 3)])
        normals = compute_normals(positions, triangles=triangles)
        assert normals.shape == (4, 3)
        assert bool((normals[3] == 0).all())

    def test_positions_must_be_3d(self):
        with pytest.raises(ValueError, match="positions"):
            compute_normals(torch.zeros(3, 2), triangles=torch.tensor([[0, 1, 2]]))

    def test_vertex_out_of_range(self):
        with pytest.raises(IndexOutOfRange):
            compute_normals(torch.zeros(3, 3), lines=torch.tensor([[0, 3]]))


class TestMeasures:
    def test_triangle_areas_2d_and_3d(self):
        v0 = torch.tensor([[0.0, 0.0, 0.0]])
        v1 = torch.tensor([[2.0, 0.0, 0.0]])
        v2 = torch.tensor([[0.0, 3.0, 0.0]])
        assert float(triangle_areas(v0, v1, v2)) == pytest.approx(3.0)
        assert float(
            triangle_areas(v0[:, :2], v1[:, :2], v2[:, :2])
        ) == pytest.approx(3.0)

    def test_unsupported_dimension(self):
        with pytest.raises(NotImplementedError):
            triangle_areas(torch.zeros(1, 4), torch.zeros(1, 4), torch.zeros(1, 4))

    def test_line_measures(self):
        positions = torch.tensor([[0.0, 0.0, 0.0], [0.0, 3.0, 4.0]])
        lengths = element_measures(Lines(torch.tensor([[0, 1], [1, 0]])), positions)
        assert lengths.tolist() == [5.0, 5.0]

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

"""Tests for the Shape container and its delegating methods."""

import pytest
import torch
from tensordict import TensorDict

from shapetess import Shape
from shapetess.errors import IndexOutOfRange, InvalidElementSelection
from shapetess.elements import Triangles

### Helper Functions ###


def make_square(device="cpu") -> Shape:
    return Shape(
        vertex_data={
            "position": torch.tensor(
                [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]],
                device=device,
            ),
            "texcoord": torch.tensor(
                [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]], device=device
            ),
        },
        triangles=torch.tensor([[0, 1, 2], [0, 2, 3]], device=device),
    )


class TestConstruction:
    def test_defaults_are_empty(self):
        shape = make_square()
        assert shape.n_vertices == 4
        assert shape.n_triangles == 2
        assert shape.points.shape == (0,)
        assert shape.lines.shape == (0, 2)
        assert isinstance(shape.vertex_data, TensorDict)

    def test_tensordict_input(self):
        vertex_data = TensorDict({"radius": torch.ones(3)}, batch_size=[3])
        shape = Shape(vertex_data=vertex_data, points=torch.tensor([0, 2]))
        assert shape.n_vertices == 3
        assert shape.n_points == 2

    def test_vertex_count_without_data(self):
        shape = Shape(triangles=torch.tensor([[0, 1, 2]]), n_vertices=3)
        assert shape.n_vertices == 3
        with pytest.raises(ValueError, match="n_vertices"):
            Shape(triangles=torch.tensor([[0, 1, 2]]))

    def test_vertex_count_mismatch(self):
        with pytest.raises(ValueError, match="does not match"):
            Shape(vertex_data={"position": torch.zeros(3, 3)}, n_vertices=4)

    def test_empty_attributes_are_dropped(self):
        shape = Shape(
            vertex_data={"color": torch.empty(0, 3), "position": torch.eye(3)},
            triangles=torch.tensor([[0, 1, 2]]),
        )
        assert shape.n_vertices == 3
        assert "color" not in shape.vertex_data.keys()
        assert torch.equal(shape.positions, torch.eye(3))

    def test_vertex_out_of_range(self):
        with pytest.raises(IndexOutOfRange):
            Shape(
                vertex_data={"position": torch.zeros(3, 3)},
                lines=torch.tensor([[0, 3]]),
            )

    def test_missing_position(self):
        shape = Shape(vertex_data={"radius": torch.ones(2)}, points=torch.tensor([0, 1]))
        with pytest.raises(ValueError, match="position"):
            shape.positions

    def test_elements_variant(self):
        assert isinstance(make_square().elements, Triangles)

    def test_elements_exclusive(self):
        shape = Shape(
            vertex_data={"position": torch.zeros(3, 3)},
            points=torch.tensor([0]),
            lines=torch.tensor([[1, 2]]),
        )
        with pytest.raises(InvalidElementSelection):
            shape.elements


class TestDelegation:
    def test_tessellate(self, device):
        tessellated = make_square(device).tessellate(n_levels=2)
        assert tessellated.n_triangles == 32
        assert tessellated.n_vertices == 25
        assert tessellated.vertex_data["texcoord"].shape == (25, 2)
        assert tessellated.triangles.device.type == device

    def test_tessellate_keeps_points(self):
        shape = Shape(
            vertex_data={"position": torch.zeros(3, 3)},
            points=torch.tensor([2]),
            lines=torch.tensor([[0, 1]]),
        )
        tessellated = shape.tessellate()
        assert tessellated.points.tolist() == [2]
        assert tessellated.lines.tolist() == [[0, 3], [3, 1]]

    def test_compute_normals(self):
        normals = make_square().compute_normals()
        assert torch.allclose(normals, torch.tensor([0.0, 0.0, 1.0]).expand(4, 3))

    def test_sample_and_interpolate(self, device):
        shape = make_square(device)
        distribution = shape.build_distribution()
        assert distribution.weight == pytest.approx(1.0)

        generator = torch.Generator().manual_seed(0)
        ern = torch.rand(64, generator=generator)
        uvrn = torch.rand(64, 2, generator=generator)
        samples = shape.sample(ern, uvrn, distribution=distribution)

        attributes = shape.interpolate(samples)
        positions = attributes["position"]
        assert positions.shape == (64, 3)
        assert bool((positions[:, :2] >= -1e-6).all())
        assert bool((positions[:, :2] <= 1 + 1e-6).all())
        ### texcoord equals xy on this square
        assert torch.allclose(attributes["texcoord"], positions[:, :2], atol=1e-6)

    def test_sample_and_interpolate_batched(self):
        shape = make_square()
        generator = torch.Generator().manual_seed(1)
        samples = shape.sample(
            torch.rand(4, 5, generator=generator),
            torch.rand(4, 5, 2, generator=generator),
        )
        attributes = shape.interpolate(samples)
        assert attributes.batch_size == torch.Size([4, 5])
        assert attributes["position"].shape == (4, 5, 3)
        assert shape.interpolate(samples, key="texcoord").shape == (4, 5, 2)

    def test_interpolate_single_key(self):
        shape = make_square()
        samples = shape.sample(torch.tensor([0.1]), torch.tensor([[0.0, 0.0]]))
        value = shape.interpolate(samples, key="texcoord")
        assert value.tolist() == [[1.0, 0.0]]

    def test_sample_points(self):
        shape = Shape(
            vertex_data={"position": torch.eye(3)}, points=torch.tensor([0, 1, 2])
        )
        samples = shape.sample(torch.tensor([0.5]))
        assert samples.uv is None
        assert shape.interpolate(samples, key="position").tolist() == [[0.0, 1.0, 0.0]]

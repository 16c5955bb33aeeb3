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

"""Tests for inverse-CDF element sampling."""

import pytest
import torch

from shapetess.elements import Lines, Points, Triangles
from shapetess.errors import EmptyDistribution, InvalidElementSelection
from shapetess.sampling import (
    ElementDistribution,
    build_distribution,
    find_elements,
    sample_elements,
    sample_shape,
    sample_uniform_triangle,
)


class TestFindElements:
    def test_boundaries(self):
        cdf = torch.tensor([0.25, 0.5, 1.0])
        assert int(find_elements(cdf, 0.0)) == 0
        assert int(find_elements(cdf, 0.25)) == 0
        assert int(find_elements(cdf, 0.2500001)) == 1
        assert int(find_elements(cdf, 1.0 - 1e-7)) == 2

    def test_rounding_at_top_is_clamped(self):
        cdf = torch.tensor([0.5, 0.9999999])
        assert int(find_elements(cdf, 0.99999999)) == 1
        assert int(find_elements(cdf, 1.0)) == 1

    def test_skips_zero_weight_elements(self):
        cdf = torch.tensor([0.5, 0.5, 1.0])
        assert find_elements(cdf, torch.tensor([0.5, 0.50001])).tolist() == [0, 2]

    def test_batched_shape(self, device):
        cdf = torch.tensor([0.5, 1.0], device=device)
        ids = find_elements(cdf, torch.full((4, 2), 0.75, device=device))
        assert ids.shape == (4, 2)
        assert bool((ids == 1).all())

    def test_empty(self):
        with pytest.raises(EmptyDistribution):
            find_elements(torch.zeros(0), 0.5)


class TestUniformTriangle:
    def test_known_value(self):
        uv = sample_uniform_triangle(torch.tensor([0.25, 0.5]))
        assert torch.allclose(uv, torch.tensor([0.5, 0.25]))

    def test_barycentrics_are_valid(self):
        generator = torch.Generator().manual_seed(0)
        uv = sample_uniform_triangle(torch.rand(1000, 2, generator=generator))
        weights = torch.stack([1 - uv[:, 0] - uv[:, 1], uv[:, 0], uv[:, 1]], dim=-1)
        assert bool((weights >= -1e-6).all())
        assert bool((weights <= 1 + 1e-6).all())

    def test_corners(self):
        uv = sample_uniform_triangle(torch.tensor([[0.0, 0.7], [1.0, 0.0], [1.0, 1.0]]))
        assert torch.allclose(
            uv, torch.tensor([[1.0, 0.0], [0.0, 0.0], [0.0, 1.0]])
        )


class TestSampleElements:
    def test_points_have_no_coordinate(self):
        distribution = build_distribution(Points(torch.tensor([0, 1, 2, 3])))
        sample = sample_elements(distribution, torch.tensor([0.1, 0.6]))
        assert sample.kind == "points"
        assert sample.element_ids.tolist() == [0, 2]
        assert sample.uv is None

    def test_lines_take_first_component(self):
        positions = torch.tensor([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [3.0, 0.0, 0.0]])
        distribution = build_distribution(
            Lines(torch.tensor([[0, 1], [1, 2]])), positions
        )
        sample = sample_elements(
            distribution, torch.tensor([0.2, 0.9]), torch.tensor([[0.3, 0.8], [0.6, 0.1]])
        )
        assert sample.element_ids.tolist() == [0, 1]
        assert torch.allclose(sample.uv, torch.tensor([0.3, 0.6]))

    def test_lines_scalar_draws(self):
        positions = torch.tensor([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        distribution = build_distribution(Lines(torch.tensor([[0, 1]])), positions)
        sample = sample_elements(distribution, 0.5, 0.25)
        assert int(sample.element_ids) == 0
        assert float(sample.uv) == 0.25

    def test_triangles(self, unit_square):
        positions, triangles = unit_square
        distribution = build_distribution(Triangles(triangles), positions)
        sample = sample_elements(
            distribution,
            torch.tensor([0.0, 0.99]),
            torch.tensor([[0.25, 0.5], [1.0, 0.0]]),
        )
        assert sample.element_ids.tolist() == [0, 1]
        assert torch.allclose(
            sample.uv,
            torch.tensor([[0.5, 0.25], [0.0, 0.0]], device=positions.device),
        )

    def test_triangles_require_uv(self, unit_triangle):
        positions, triangles = unit_triangle
        distribution = build_distribution(Triangles(triangles), positions)
        with pytest.raises(ValueError, match="uvrn"):
            sample_elements(distribution, 0.5)
        with pytest.raises(ValueError, match="Triangle draws"):
            sample_elements(distribution, torch.tensor([0.5, 0.5]), (0.1, 0.2))

    def test_sampling_frequency_follows_area(self):
        positions = torch.tensor(
            [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [3.0, 0.0, 0.0], [0.0, 3.0, 0.0]]
        )
        triangles = torch.tensor([[0, 1, 2], [0, 3, 4]])
        distribution = build_distribution(Triangles(triangles), positions)
        ern = (torch.arange(10000) + 0.5) / 10000
        uvrn = torch.full((10000, 2), 0.5)
        sample = sample_elements(distribution, ern, uvrn)
        ### Areas 0.5 and 4.5
        fraction = (sample.element_ids == 0).float().mean()
        assert abs(float(fraction) - 0.1) < 1e-3


class TestSampleShape:
    def test_dispatches_on_triangle_cdf(self):
        sample = sample_shape(
            torch.tensor([0.3, 0.7]),
            torch.tensor([[0.25, 0.5], [0.25, 0.5]]),
            point_cdf=torch.zeros(0),
            triangle_cdf=torch.tensor([0.5, 1.0]),
        )
        assert sample.kind == "triangles"
        assert sample.element_ids.tolist() == [0, 1]
        assert torch.allclose(sample.uv[0], torch.tensor([0.5, 0.25]))

    def test_dispatches_on_line_cdf(self):
        sample = sample_shape(0.9, (0.4, 0.8), line_cdf=torch.tensor([0.5, 1.0]))
        assert sample.kind == "lines"
        assert int(sample.element_ids) == 1
        assert float(sample.uv) == pytest.approx(0.4)

    def test_dispatches_on_point_cdf(self):
        sample = sample_shape(0.1, point_cdf=torch.tensor([0.5, 1.0]))
        assert sample.kind == "points"
        assert sample.uv is None

    @pytest.mark.parametrize(
        "cdfs",
        [
            {},
            {"point_cdf": torch.tensor([1.0]), "line_cdf": torch.tensor([1.0])},
        ],
    )
    def test_exactly_one_cdf(self, cdfs):
        with pytest.raises(InvalidElementSelection):
            sample_shape(0.5, (0.5, 0.5), **cdfs)

    def test_manual_distribution(self):
        distribution = ElementDistribution(
            kind="lines", cdf=torch.tensor([1.0]), weight=2.0
        )
        assert distribution.n_elements == 1
        assert distribution.pdf == 0.5

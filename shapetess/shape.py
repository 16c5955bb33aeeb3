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

"""Container tying element arrays to per-vertex attributes."""

from typing import TYPE_CHECKING

import torch
from tensordict import TensorDict, tensorclass

from shapetess.elements import Elements, Lines, Points, Triangles, select_elements

if TYPE_CHECKING:
    from shapetess.sampling import ElementDistribution, ElementSample


@tensorclass(tensor_only=True)
class Shape:
    r"""An indexed shape: points, lines and triangles over shared vertices.

    Vertex attributes live in ``vertex_data``, a TensorDict with batch size
    ``(n_vertices,)``. The conventional keys are:

    ============  ==================  =====================================
    Key           Shape               Meaning
    ============  ==================  =====================================
    position      ``(n_vertices, 3)``  vertex position
    normal        ``(n_vertices, 3)``  unit normal (tangent for lines)
    texcoord      ``(n_vertices, 2)``  texture coordinate
    color         ``(n_vertices, 3)``  vertex color
    radius        ``(n_vertices,)``    radius of points and lines
    ============  ==================  =====================================

    Any key may be absent. Other floating attributes are carried along by
    every operation in the same way.

    Element arrays default to empty. A shape may hold several kinds at once
    (e.g. for :meth:`tessellate`), but the sampling and interpolation
    methods require exactly one populated kind.

    Parameters
    ----------
    vertex_data : TensorDict or dict[str, torch.Tensor] or None
        Per-vertex attributes.
    points : torch.Tensor or None
        Point indices, shape ``(n_points,)``.
    lines : torch.Tensor or None
        Lines, shape ``(n_lines, 2)``.
    triangles : torch.Tensor or None
        Triangles, shape ``(n_triangles, 3)``.
    n_vertices : int or None
        Vertex count, required only when ``vertex_data`` is empty.

    Examples
    --------
    >>> import torch
    >>> shape = Shape(
    ...     vertex_data={
    ...         "position": torch.tensor(
    ...             [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]
    ...         )
    ...     },
    ...     triangles=torch.tensor([[0, 1, 2]]),
    ... )
    >>> shape.tessellate().n_triangles
    4
    """

    points: torch.Tensor  # shape: (n_points,)
    lines: torch.Tensor  # shape: (n_lines, 2)
    triangles: torch.Tensor  # shape: (n_triangles, 3)
    vertex_data: TensorDict

    def __init__(
        self,
        vertex_data: TensorDict | dict[str, torch.Tensor] | None = None,
        points: torch.Tensor | None = None,
        lines: torch.Tensor | None = None,
        triangles: torch.Tensor | None = None,
        n_vertices: int | None = None,
    ) -> None:
        if vertex_data is None:
            vertex_data = {}
        if not isinstance(vertex_data, TensorDict):
            ### Empty tensors mark unused attributes
            vertex_data = {k: v for k, v in vertex_data.items() if v.numel() > 0}

        device = None
        if isinstance(vertex_data, TensorDict):
            device = vertex_data.device
        else:
            device = next(
                (v.device for v in vertex_data.values()),
                next(
                    (
                        a.device
                        for a in (points, lines, triangles)
                        if isinstance(a, torch.Tensor)
                    ),
                    None,
                ),
            )
        if device is None:
            device = torch.device("cpu")

        ### Assign element arrays, defaulting to empty
        self.points = Points(
            torch.zeros(0, dtype=torch.long, device=device)
            if points is None
            else torch.as_tensor(points, device=device)
        ).indices
        self.lines = Lines(
            torch.zeros((0, 2), dtype=torch.long, device=device)
            if lines is None
            else torch.as_tensor(lines, device=device)
        ).indices
        self.triangles = Triangles(
            torch.zeros((0, 3), dtype=torch.long, device=device)
            if triangles is None
            else torch.as_tensor(triangles, device=device)
        ).indices

        ### Infer the vertex count
        if isinstance(vertex_data, TensorDict) and vertex_data.batch_dims > 0:
            inferred = vertex_data.batch_size[0]
        elif len(vertex_data.keys()) > 0:
            inferred = next(iter(vertex_data.values())).shape[0]
        elif n_vertices is not None:
            inferred = n_vertices
        else:
            raise ValueError(
                "Cannot infer the vertex count from empty `vertex_data`; "
                "pass `n_vertices`."
            )
        if n_vertices is not None and n_vertices != inferred:
            raise ValueError(
                f"`n_vertices` does not match `vertex_data`: "
                f"{n_vertices=} but vertex_data has {inferred} rows."
            )

        if isinstance(vertex_data, TensorDict):
            vertex_data.batch_size = torch.Size([inferred])
        else:
            vertex_data = TensorDict(
                dict(vertex_data),
                batch_size=torch.Size([inferred]),
                device=device,
            )
        self.vertex_data = vertex_data

        if not torch.compiler.is_compiling():
            Points(self.points).validate_vertex_ids(self.n_vertices)
            Lines(self.lines).validate_vertex_ids(self.n_vertices)
            Triangles(self.triangles).validate_vertex_ids(self.n_vertices)

    @property
    def n_vertices(self) -> int:
        return self.vertex_data.batch_size[0]

    @property
    def n_points(self) -> int:
        return self.points.shape[0]

    @property
    def n_lines(self) -> int:
        return self.lines.shape[0]

    @property
    def n_triangles(self) -> int:
        return self.triangles.shape[0]

    @property
    def positions(self) -> torch.Tensor:
        if "position" not in self.vertex_data.keys():
            raise ValueError("This shape has no 'position' vertex attribute.")
        return self.vertex_data["position"]

    @property
    def elements(self) -> Elements:
        """The single populated element array.

        Raises
        ------
        InvalidElementSelection
            If the shape holds none, or more than one kind, of elements.
        """
        return select_elements(
            points=self.points, lines=self.lines, triangles=self.triangles
        )

    def tessellate(self, n_levels: int = 1) -> "Shape":
        """Split every line and triangle edge, interpolating vertex data.

        Points keep their vertex ids. See
        :func:`~shapetess.subdivision.tessellate`.
        """
        from shapetess.subdivision import tessellate

        lines, triangles, vertex_data = tessellate(
            self.vertex_data,
            lines=self.lines,
            triangles=self.triangles,
            n_levels=n_levels,
        )
        return Shape(
            vertex_data=vertex_data,
            points=self.points,
            lines=lines,
            triangles=triangles,
        )

    def compute_normals(self, weighted: bool = True) -> torch.Tensor:
        """Smoothed vertex normals from all element arrays.

        See :func:`~shapetess.geometry.compute_normals`.
        """
        from shapetess.geometry import compute_normals

        return compute_normals(
            self.positions,
            points=self.points,
            lines=self.lines,
            triangles=self.triangles,
            weighted=weighted,
        )

    def build_distribution(self) -> "ElementDistribution":
        """Sampling distribution over the shape's single element kind."""
        from shapetess.sampling import build_distribution

        elements = self.elements
        positions = self.positions if elements.kind != "points" else None
        return build_distribution(elements, positions)

    def sample(
        self,
        ern: torch.Tensor | float,
        uvrn: torch.Tensor | tuple[float, float] | None = None,
        distribution: "ElementDistribution | None" = None,
    ) -> "ElementSample":
        """Sample element references, proportional to length/area.

        Pass a ``distribution`` from :meth:`build_distribution` to avoid
        rebuilding it on every call.
        """
        from shapetess.sampling import sample_elements

        if distribution is None:
            distribution = self.build_distribution()
        return sample_elements(distribution, ern, uvrn)

    def interpolate(
        self,
        samples: "ElementSample",
        key: str | None = None,
    ) -> torch.Tensor | TensorDict:
        """Evaluate vertex data at sampled element references.

        Parameters
        ----------
        samples : ElementSample
            References from :meth:`sample`.
        key : str or None
            Attribute to interpolate; all attributes when None.
        """
        from shapetess.geometry import interpolate_at_samples

        vertex_data = self.vertex_data if key is None else self.vertex_data[key]
        return interpolate_at_samples(self.elements, vertex_data, samples)

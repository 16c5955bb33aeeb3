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

"""Shapes generated by evaluating callbacks over a regular parameter grid.

Callbacks are vectorized: they receive every parameter value at once, as a
tensor of shape ``(n_vertices, 2)`` (surfaces and lines) or
``(n_vertices,)`` (points), and return one row per vertex.
"""

from typing import Callable

import torch

from shapetess.shape import Shape

UVFunction = Callable[[torch.Tensor], torch.Tensor]


def _check_steps(**steps: int) -> None:
    for name, value in steps.items():
        if value < 1:
            raise ValueError(f"{name} must be at least 1, got {name}={value}")


def uv_grid(
    usteps: int,
    vsteps: int,
    dtype: torch.dtype | None = None,
    device: torch.device | str = "cpu",
) -> torch.Tensor:
    """Return ``(i / usteps, j / vsteps)`` for every grid vertex.

    Vertex ``(i, j)`` is row ``j * (usteps + 1) + i``.

    Returns
    -------
    torch.Tensor
        Shape ``((usteps + 1) * (vsteps + 1), 2)``.
    """
    u = torch.arange(usteps + 1, dtype=dtype, device=device) / usteps
    v = torch.arange(vsteps + 1, dtype=dtype, device=device) / vsteps
    vv, uu = torch.meshgrid(v, u, indexing="ij")
    return torch.stack([uu.reshape(-1), vv.reshape(-1)], dim=-1)


def grid_triangles(
    usteps: int,
    vsteps: int,
    device: torch.device | str = "cpu",
) -> torch.Tensor:
    """Triangulate a ``usteps x vsteps`` vertex grid.

    Each cell with corners ``a=(i,j)``, ``b=(i+1,j)``, ``c=(i,j+1)``,
    ``d=(i+1,j+1)`` becomes two triangles. The diagonal alternates in a
    checkerboard: ``(a,b,d), (d,c,a)`` when ``i + j`` is odd, else
    ``(a,b,c), (d,c,b)``.

    Returns
    -------
    torch.Tensor
        Shape ``(usteps * vsteps * 2, 3)``; cell ``(i, j)`` owns rows
        ``2 * (j * usteps + i)`` and the one after it.
    """
    jj, ii = torch.meshgrid(
        torch.arange(vsteps, device=device),
        torch.arange(usteps, device=device),
        indexing="ij",
    )
    stride = usteps + 1
    a = jj * stride + ii
    b = a + 1
    c = a + stride
    d = c + 1

    odd = ((ii + jj) % 2 == 1).unsqueeze(-1)
    first = torch.where(
        odd, torch.stack([a, b, d], dim=-1), torch.stack([a, b, c], dim=-1)
    )
    second = torch.where(
        odd, torch.stack([d, c, a], dim=-1), torch.stack([d, c, b], dim=-1)
    )
    return torch.stack([first, second], dim=2).reshape(-1, 3)


def make_uv_surface(
    usteps: int,
    vsteps: int,
    position_fn: UVFunction,
    normal_fn: UVFunction,
    texcoord_fn: UVFunction,
    dtype: torch.dtype | None = None,
    device: torch.device | str = "cpu",
) -> Shape:
    """Triangulate a parametric surface.

    Parameters
    ----------
    usteps, vsteps : int
        Number of grid cells along u and v.
    position_fn, normal_fn, texcoord_fn : callable
        Map ``uv`` of shape ``(n, 2)`` to positions ``(n, 3)``, normals
        ``(n, 3)`` and texture coordinates ``(n, 2)``.
    dtype : torch.dtype or None
        Dtype of the parameter grid; defaults to torch's default dtype.
    device : torch.device or str
        Compute device.

    Returns
    -------
    Shape
        ``(usteps + 1) * (vsteps + 1)`` vertices and
        ``2 * usteps * vsteps`` triangles.

    Examples
    --------
    >>> shape = make_uv_surface(
    ...     2, 1,
    ...     lambda uv: torch.nn.functional.pad(uv, (0, 1)),
    ...     lambda uv: torch.tensor([0.0, 0.0, 1.0]).expand(len(uv), 3),
    ...     lambda uv: uv,
    ... )
    >>> shape.n_vertices, shape.n_triangles
    (6, 4)
    """
    _check_steps(usteps=usteps, vsteps=vsteps)
    uv = uv_grid(usteps, vsteps, dtype=dtype, device=device)
    return Shape(
        vertex_data={
            "position": position_fn(uv),
            "normal": normal_fn(uv),
            "texcoord": texcoord_fn(uv),
        },
        triangles=grid_triangles(usteps, vsteps, device=device),
    )


def make_lines(
    usteps: int,
    n_lines: int,
    position_fn: UVFunction,
    tangent_fn: UVFunction,
    texcoord_fn: UVFunction,
    radius_fn: UVFunction,
    dtype: torch.dtype | None = None,
    device: torch.device | str = "cpu",
) -> Shape:
    """Generate ``n_lines`` parametric polylines of ``usteps`` segments each.

    Vertex ``i`` of line ``j`` is evaluated at
    ``uv = (i / usteps, j / (n_lines - 1))`` (``v = 0`` for a single line).
    Tangents are stored under the ``"normal"`` key, the slot line shapes use
    for their shading direction.

    Returns
    -------
    Shape
        ``(usteps + 1) * n_lines`` vertices and ``usteps * n_lines`` lines.
    """
    _check_steps(usteps=usteps, n_lines=n_lines)

    u = torch.arange(usteps + 1, dtype=dtype, device=device) / usteps
    v = torch.arange(n_lines, dtype=dtype, device=device) / max(n_lines - 1, 1)
    vv, uu = torch.meshgrid(v, u, indexing="ij")
    uv = torch.stack([uu.reshape(-1), vv.reshape(-1)], dim=-1)

    jj, ii = torch.meshgrid(
        torch.arange(n_lines, device=device),
        torch.arange(usteps, device=device),
        indexing="ij",
    )
    start = (jj * (usteps + 1) + ii).reshape(-1)
    lines = torch.stack([start, start + 1], dim=-1)

    return Shape(
        vertex_data={
            "position": position_fn(uv),
            "normal": tangent_fn(uv),
            "texcoord": texcoord_fn(uv),
            "radius": radius_fn(uv),
        },
        lines=lines,
    )


def make_points(
    n_points: int,
    position_fn: UVFunction,
    normal_fn: UVFunction,
    texcoord_fn: UVFunction,
    radius_fn: UVFunction,
    dtype: torch.dtype | None = None,
    device: torch.device | str = "cpu",
) -> Shape:
    """Generate ``n_points`` parametric points.

    Point ``i`` is evaluated at ``u = i / (n_points - 1)`` (``u = 0`` for a
    single point) and references vertex ``i``.

    Returns
    -------
    Shape
        ``n_points`` vertices and ``n_points`` points.
    """
    _check_steps(n_points=n_points)
    u = torch.arange(n_points, dtype=dtype, device=device) / max(n_points - 1, 1)
    return Shape(
        vertex_data={
            "position": position_fn(u),
            "normal": normal_fn(u),
            "texcoord": texcoord_fn(u),
            "radius": radius_fn(u),
        },
        points=torch.arange(n_points, device=device),
    )

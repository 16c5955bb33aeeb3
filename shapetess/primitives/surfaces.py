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

"""Standard parametric surfaces: spheres, quads and cubes.

Every surface is generated in a local frame at unit size, then scaled by
``scale`` and placed with ``frame`` (see :mod:`shapetess.transformations`).
Vertex data holds ``position``, ``normal`` and ``texcoord``.
"""

import logging
import math
from typing import Literal, Sequence

import torch
import torch.nn.functional as F

from shapetess.primitives.parametric import make_uv_surface
from shapetess.shape import Shape
from shapetess.transformations import transform_direction, transform_point
from shapetess.utilities import safe_eps

logger = logging.getLogger(__name__)

SurfaceKind = Literal[
    "uvsphere",
    "uvflippedsphere",
    "uvquad",
    "uvcube",
    "uvspherecube",
    "uvspherizedcube",
    "uvflipcapsphere",
]

### Face frames of the cube: x axis, y axis, z axis, origin
_CUBE_FACES = (
    ((1, 0, 0), (0, 1, 0), (0, 0, 1), (0, 0, 1)),
    ((-1, 0, 0), (0, 1, 0), (0, 0, -1), (0, 0, -1)),
    ((-1, 0, 0), (0, 0, 1), (0, 1, 0), (0, 1, 0)),
    ((1, 0, 0), (0, 0, 1), (0, -1, 0), (0, -1, 0)),
    ((0, 1, 0), (0, 0, 1), (1, 0, 0), (1, 0, 0)),
    ((0, -1, 0), (0, 0, 1), (-1, 0, 0), (-1, 0, 0)),
)


def _sphere_direction(theta: torch.Tensor, phi: torch.Tensor) -> torch.Tensor:
    return torch.stack(
        [theta.cos() * phi.sin(), theta.sin() * phi.sin(), phi.cos()], dim=-1
    )


def _constant(value: Sequence[float]):
    def fn(uv: torch.Tensor) -> torch.Tensor:
        return torch.tensor(value, dtype=uv.dtype, device=uv.device).expand(
            uv.shape[0], len(value)
        )

    return fn


def _uvsphere(level: int, dtype, device) -> Shape:
    def direction(uv):
        return _sphere_direction(2 * math.pi * uv[:, 0], math.pi * (1 - uv[:, 1]))

    return make_uv_surface(
        2 ** (level + 2),
        2 ** (level + 1),
        direction,
        direction,
        lambda uv: uv,
        dtype=dtype,
        device=device,
    )


def _uvflippedsphere(level: int, dtype, device) -> Shape:
    def direction(uv):
        return _sphere_direction(2 * math.pi * uv[:, 0], math.pi * uv[:, 1])

    return make_uv_surface(
        2 ** (level + 2),
        2 ** (level + 1),
        direction,
        lambda uv: -direction(uv),
        lambda uv: torch.stack([uv[:, 0], 1 - uv[:, 1]], dim=-1),
        dtype=dtype,
        device=device,
    )


def _uvquad(level: int, dtype, device) -> Shape:
    steps = 2**level
    return make_uv_surface(
        steps,
        steps,
        lambda uv: F.pad(2 * uv - 1, (0, 1)),
        _constant((0.0, 0.0, 1.0)),
        lambda uv: uv,
        dtype=dtype,
        device=device,
    )


def _uvcube(level: int, dtype, device) -> Shape:
    """Six quads, one per face, with unshared vertices along the seams."""
    quad = _uvquad(level, dtype, device)
    positions, normals, texcoords, triangles = [], [], [], []
    for i, face in enumerate(_CUBE_FACES):
        face_frame = torch.tensor(face, dtype=quad.positions.dtype, device=device)
        positions.append(transform_point(face_frame, quad.positions))
        normals.append(transform_direction(face_frame, quad.vertex_data["normal"]))
        texcoords.append(quad.vertex_data["texcoord"])
        triangles.append(quad.triangles + i * quad.n_vertices)
    return Shape(
        vertex_data={
            "position": torch.cat(positions),
            "normal": torch.cat(normals),
            "texcoord": torch.cat(texcoords),
        },
        triangles=torch.cat(triangles),
    )


def _uvspherecube(level: int, dtype, device) -> Shape:
    cube = _uvcube(level, dtype, device)
    directions = F.normalize(cube.positions, dim=-1, eps=safe_eps(cube.positions.dtype))
    cube.vertex_data["position"] = directions
    cube.vertex_data["normal"] = directions.clone()
    return cube


def _uvspherizedcube(level: int, dtype, device, amount: float) -> Shape:
    cube = _uvcube(level, dtype, device)
    if amount == 0:
        return cube
    positions = cube.positions
    directions = F.normalize(positions, dim=-1, eps=safe_eps(positions.dtype))
    cube.vertex_data["position"] = positions * (1 - amount) + directions * amount
    cube.vertex_data["normal"] = cube.compute_normals()
    return cube


def _uvflipcapsphere(level: int, dtype, device, cap: float) -> Shape:
    """Sphere whose caps beyond ``|z| > cap`` are folded back inward."""
    sphere = _uvsphere(level, dtype, device)
    if cap == 1:
        return sphere
    positions = sphere.positions.clone()
    normals = sphere.vertex_data["normal"].clone()
    z = positions[:, 2].clone()

    upper = z > cap
    lower = z < -cap
    positions[:, 2] = torch.where(upper, 2 * cap - z, z)
    positions[:, 2] = torch.where(lower, -2 * cap - z, positions[:, 2])
    flip = (upper | lower).unsqueeze(-1)
    normals[:, :2] = torch.where(flip, -normals[:, :2], normals[:, :2])

    sphere.vertex_data["position"] = positions
    sphere.vertex_data["normal"] = normals
    return sphere


def make_standard_surface(
    kind: SurfaceKind,
    level: int = 0,
    params: Sequence[float] = (0.0, 0.0, 0.0, 0.0),
    frame: torch.Tensor | None = None,
    scale: float = 1.0,
    dtype: torch.dtype | None = None,
    device: torch.device | str = "cpu",
) -> Shape:
    r"""Generate a named triangulated surface.

    Parameters
    ----------
    kind : str
        One of:

        - ``"uvsphere"``: ``2^(level+2) x 2^(level+1)`` lat-long sphere.
        - ``"uvflippedsphere"``: same sphere with inward normals and
          texture v flipped.
        - ``"uvquad"``: ``2^level x 2^level`` grid on ``[-1, 1]^2`` at
          ``z = 0``.
        - ``"uvcube"``: six quads forming the cube ``[-1, 1]^3``.
        - ``"uvspherecube"``: cube vertices projected onto the unit sphere.
        - ``"uvspherizedcube"``: cube blended towards the sphere by
          ``params[0]``, with smoothed normals.
        - ``"uvflipcapsphere"``: sphere with caps beyond ``|z| > params[0]``
          mirrored inward.
    level : int
        Refinement level, at least 0.
    params : sequence of float
        Kind-specific parameters; only ``params[0]`` is read.
    frame : torch.Tensor or None
        ``(4, 3)`` placement frame; identity when None.
    scale : float
        Uniform scale applied before ``frame``.
    dtype : torch.dtype or None
        Floating dtype; defaults to torch's default dtype.
    device : torch.device or str
        Compute device.

    Returns
    -------
    Shape
        A triangle shape with ``position``, ``normal`` and ``texcoord``.

    Raises
    ------
    ValueError
        If ``kind`` is unknown or ``level`` is negative.

    Examples
    --------
    >>> sphere = make_standard_surface("uvsphere", level=0)
    >>> sphere.n_vertices, sphere.n_triangles
    (15, 16)
    """
    if level < 0:
        raise ValueError(f"level must be non-negative, got {level=}")
    if dtype is None:
        dtype = torch.get_default_dtype()

    ### Build at unit size in the local frame
    if kind == "uvsphere":
        shape = _uvsphere(level, dtype, device)
    elif kind == "uvflippedsphere":
        shape = _uvflippedsphere(level, dtype, device)
    elif kind == "uvquad":
        shape = _uvquad(level, dtype, device)
    elif kind == "uvcube":
        shape = _uvcube(level, dtype, device)
    elif kind == "uvspherecube":
        shape = _uvspherecube(level, dtype, device)
    elif kind == "uvspherizedcube":
        shape = _uvspherizedcube(level, dtype, device, float(params[0]))
    elif kind == "uvflipcapsphere":
        shape = _uvflipcapsphere(level, dtype, device, float(params[0]))
    else:
        raise ValueError(
            f"Unknown surface {kind=!r}. Expected one of "
            f"{list(SurfaceKind.__args__)}."
        )
    logger.debug(
        "Generated %s at level %d: %d vertices, %d triangles",
        kind,
        level,
        shape.n_vertices,
        shape.n_triangles,
    )

    ### Scale and place
    if frame is not None or scale != 1.0:
        if frame is None:
            frame = torch.eye(4, 3, dtype=dtype, device=device)
        shape.vertex_data["position"] = transform_point(
            frame, scale * shape.positions
        )
        shape.vertex_data["normal"] = transform_direction(
            frame, shape.vertex_data["normal"]
        )
    return shape

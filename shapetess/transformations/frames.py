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

"""Rigid frames for placing generated shapes.

A frame is a ``(4, 3)`` tensor whose rows are the x, y and z axes followed
by the origin. Points are mapped as ``p.x * x + p.y * y + p.z * z + o`` and
directions ignore the origin.
"""

import torch


def make_frame(
    x: tuple[float, float, float] = (1.0, 0.0, 0.0),
    y: tuple[float, float, float] = (0.0, 1.0, 0.0),
    z: tuple[float, float, float] = (0.0, 0.0, 1.0),
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0),
    dtype: torch.dtype | None = None,
    device: torch.device | str = "cpu",
) -> torch.Tensor:
    """Build a frame from its axes and origin.

    Returns
    -------
    torch.Tensor
        Frame of shape ``(4, 3)``.
    """
    return torch.tensor([x, y, z, origin], dtype=dtype, device=device)


def identity_frame(
    dtype: torch.dtype | None = None,
    device: torch.device | str = "cpu",
) -> torch.Tensor:
    return make_frame(dtype=dtype, device=device)


def _check_frame(frame: torch.Tensor) -> None:
    if frame.shape != (4, 3):
        raise ValueError(
            f"`frame` must have shape (4, 3) (x, y, z axes and origin), "
            f"but got {frame.shape=}."
        )


def transform_direction(frame: torch.Tensor, directions: torch.Tensor) -> torch.Tensor:
    """Rotate directions, shape ``(..., 3)``, into ``frame``."""
    _check_frame(frame)
    return directions @ frame[:3].to(directions.dtype)


def transform_point(frame: torch.Tensor, points: torch.Tensor) -> torch.Tensor:
    """Map points, shape ``(..., 3)``, into ``frame``."""
    return transform_direction(frame, points) + frame[3].to(points.dtype)

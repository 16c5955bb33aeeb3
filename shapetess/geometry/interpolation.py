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

"""Evaluation of vertex attributes at a point inside an element.

An element reference ``(element id, coordinate)`` locates a point on a
shape. Attributes are interpolated linearly over the element:

- points: the vertex value itself (no coordinate);
- lines: ``(1 - t) * a + t * b``;
- triangles: ``(1 - u - v) * a + u * b + v * c``.

Both endpoints of a line use the same scalar ``t``, so the weights always
sum to one.
"""

from typing import TYPE_CHECKING

import torch
from tensordict import TensorDict

from shapetess.elements import Elements
from shapetess.errors import InvalidElementSelection

if TYPE_CHECKING:
    from shapetess.sampling.sample_elements import ElementSample


def barycentric_weights(
    elements: Elements,
    uv: torch.Tensor | None,
    n_samples: int,
    dtype: torch.dtype,
    device: torch.device,
) -> torch.Tensor:
    """Return per-vertex interpolation weights for each sample.

    Parameters
    ----------
    elements : Elements
        Element array; only its kind is used.
    uv : torch.Tensor or None
        ``None`` for points, ``(n_samples,)`` for lines (``t``; a 2-column
        tensor uses its first column), ``(n_samples, 2)`` for triangles.
    n_samples : int
        Number of samples.
    dtype : torch.dtype
        Floating dtype of the weights.
    device : torch.device
        Device of the weights.

    Returns
    -------
    torch.Tensor
        Shape ``(n_samples, n_vertices_per_element)``; rows sum to one.
    """
    if elements.kind == "points":
        return torch.ones((n_samples, 1), dtype=dtype, device=device)

    if uv is None:
        raise ValueError(
            f"Interpolating over {elements.kind} requires a coordinate, got uv=None."
        )
    uv = torch.as_tensor(uv, dtype=dtype, device=device)

    if elements.kind == "lines":
        t = uv.reshape(n_samples, -1)[:, 0]
        return torch.stack([1 - t, t], dim=-1)

    uv = uv.reshape(n_samples, 2)
    u, v = uv[:, 0], uv[:, 1]
    return torch.stack([1 - u - v, u, v], dim=-1)


def interpolate_vertex_data(
    elements: Elements,
    vertex_data: torch.Tensor | TensorDict,
    element_ids: torch.Tensor | int,
    uv: torch.Tensor | float | None = None,
) -> torch.Tensor | TensorDict:
    """Interpolate a vertex attribute at element references.

    Parameters
    ----------
    elements : Elements
        The element array the references point into.
    vertex_data : torch.Tensor or TensorDict
        Per-vertex values, shape ``(n_vertices, *feature_shape)``. A
        TensorDict (batch_size ``(n_vertices,)``) interpolates every
        attribute at once.
    element_ids : torch.Tensor or int
        Element ids, shape ``batch_shape`` (any shape, or a scalar).
    uv : torch.Tensor or float or None
        Element coordinates, see :func:`barycentric_weights`; ``(*batch_shape,)``
        for lines and ``(*batch_shape, 2)`` for triangles.

    Returns
    -------
    torch.Tensor or TensorDict
        Interpolated values, shape ``(*batch_shape, *feature_shape)``.

    Raises
    ------
    IndexOutOfRange
        If an element id is outside ``[0, n_elements)``, or an element
        references a vertex outside ``vertex_data``.

    Examples
    --------
    >>> from shapetess.elements import Triangles
    >>> triangles = Triangles(torch.tensor([[0, 1, 2]]))
    >>> colors = torch.eye(3)
    >>> interpolate_vertex_data(triangles, colors, 0, torch.tensor([0.25, 0.5])).tolist()
    [0.25, 0.25, 0.5]
    """
    n_vertices = vertex_data.batch_size[0] if isinstance(
        vertex_data, TensorDict
    ) else vertex_data.shape[0]
    device = elements.device

    element_ids = torch.as_tensor(element_ids, dtype=torch.long, device=device)
    batch_shape = element_ids.shape
    element_ids = element_ids.reshape(-1)
    n_samples = len(element_ids)

    elements.validate_element_ids(element_ids)
    elements.validate_vertex_ids(n_vertices)

    corner_ids = elements.vertex_indices()[element_ids]  # (n_samples, k)

    def interpolate_tensor(values: torch.Tensor) -> torch.Tensor:
        corner_values = values[corner_ids]  # (n_samples, k, *feature_shape)
        if elements.kind == "points":
            return corner_values[:, 0]
        dtype = values.dtype if values.dtype.is_floating_point else torch.float32
        weights = barycentric_weights(elements, uv, n_samples, dtype, values.device)
        weights = weights.reshape(
            *weights.shape, *([1] * (corner_values.ndim - 2))
        )
        return (corner_values * weights).sum(dim=1)

    if isinstance(vertex_data, TensorDict):
        result = vertex_data.apply(
            interpolate_tensor, batch_size=torch.Size([n_samples])
        )
    else:
        result = interpolate_tensor(vertex_data)

    ### Restore the batch shape of the ids
    if len(batch_shape) == 0:
        return result[0]
    if isinstance(result, TensorDict):
        return result.reshape(*batch_shape)
    return result.reshape(*batch_shape, *result.shape[1:])


def interpolate_at_samples(
    elements: Elements,
    vertex_data: torch.Tensor | TensorDict,
    samples: "ElementSample",
) -> torch.Tensor | TensorDict:
    """Interpolate ``vertex_data`` at the element references in ``samples``.

    Shorthand for :func:`interpolate_vertex_data` with the ids and
    coordinates returned by :func:`~shapetess.sampling.sample_elements`.
    """
    if samples.kind != elements.kind:
        raise InvalidElementSelection(
            f"Samples of {samples.kind} cannot be interpolated over {elements.kind}."
        )
    return interpolate_vertex_data(
        elements, vertex_data, samples.element_ids, samples.uv
    )

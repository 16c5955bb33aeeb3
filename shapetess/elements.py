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

"""Element arrays as a tagged variant.

A shape references its vertices through one of three element kinds:

=============  ==================  ==============================
Kind           Tensor shape        Sampling weight
=============  ==================  ==============================
``Points``     ``(n_elements,)``   1 per point
``Lines``      ``(n_elements, 2)`` segment length
``Triangles``  ``(n_elements, 3)`` triangle area
=============  ==================  ==============================

Functions that operate on a single kind at a time (distributions, sampling,
interpolation) take an :class:`Elements` instance, so the "exactly one kind"
rule holds by construction. :func:`select_elements` converts the older
convention of three optional arrays, of which exactly one is populated, into
the variant and rejects anything else.
"""

from dataclasses import dataclass
from typing import ClassVar, Literal

import torch

from shapetess.errors import IndexOutOfRange, InvalidElementSelection

ElementKind = Literal["points", "lines", "triangles"]


@dataclass(frozen=True, eq=False)
class Elements:
    """Base class for :class:`Points`, :class:`Lines` and :class:`Triangles`.

    Attributes
    ----------
    indices : torch.Tensor
        Integer vertex indices. Shape ``(n_elements,)`` for points and
        ``(n_elements, n_vertices_per_element)`` otherwise.
    """

    kind: ClassVar[ElementKind]
    n_vertices_per_element: ClassVar[int]

    indices: torch.Tensor

    def __post_init__(self):
        if type(self) is Elements:
            raise TypeError(
                "Elements is abstract; use Points, Lines or Triangles instead."
            )
        if not isinstance(self.indices, torch.Tensor):
            object.__setattr__(
                self, "indices", torch.as_tensor(self.indices, dtype=torch.int64)
            )
        if torch.compiler.is_compiling():
            return
        if torch.is_floating_point(self.indices):
            raise TypeError(
                f"{type(self).__name__} indices must have an int-like dtype, "
                f"but got {self.indices.dtype=}."
            )
        if self.n_vertices_per_element == 1:
            ### Accept (n, 1) for points and flatten it
            if self.indices.ndim == 2 and self.indices.shape[1] == 1:
                object.__setattr__(self, "indices", self.indices[:, 0])
            if self.indices.ndim != 1:
                raise ValueError(
                    f"Points indices must have shape (n_elements,), "
                    f"but got {self.indices.shape=}."
                )
        else:
            expected = self.n_vertices_per_element
            ### An empty list converts to shape (0,); reshape it
            if self.indices.numel() == 0:
                object.__setattr__(
                    self, "indices", self.indices.reshape(0, expected)
                )
            if self.indices.ndim != 2 or self.indices.shape[1] != expected:
                raise ValueError(
                    f"{type(self).__name__} indices must have shape "
                    f"(n_elements, {expected}), but got {self.indices.shape=}."
                )

    @property
    def n_elements(self) -> int:
        return self.indices.shape[0]

    @property
    def device(self) -> torch.device:
        return self.indices.device

    def __len__(self) -> int:
        return self.n_elements

    def vertex_indices(self) -> torch.Tensor:
        """Return indices as ``(n_elements, n_vertices_per_element)``."""
        return self.indices.reshape(self.n_elements, self.n_vertices_per_element)

    def validate_vertex_ids(self, n_vertices: int) -> None:
        """Raise :class:`IndexOutOfRange` if any vertex id is outside
        ``[0, n_vertices)``."""
        if self.n_elements == 0 or torch.compiler.is_compiling():
            return
        lo = int(self.indices.min())
        hi = int(self.indices.max())
        if lo < 0 or hi >= n_vertices:
            raise IndexOutOfRange(
                f"{type(self).__name__} reference vertex ids in [{lo}, {hi}], "
                f"outside the valid range [0, {n_vertices})."
            )

    def validate_element_ids(self, element_ids: torch.Tensor) -> None:
        """Raise :class:`IndexOutOfRange` if any element id is outside
        ``[0, n_elements)``."""
        if element_ids.numel() == 0 or torch.compiler.is_compiling():
            return
        lo = int(element_ids.min())
        hi = int(element_ids.max())
        if lo < 0 or hi >= self.n_elements:
            raise IndexOutOfRange(
                f"Element ids in [{lo}, {hi}] are outside the valid range "
                f"[0, {self.n_elements}) for {type(self).__name__}."
            )


@dataclass(frozen=True, eq=False)
class Points(Elements):
    """Isolated vertices; each element is a single vertex id."""

    kind: ClassVar[ElementKind] = "points"
    n_vertices_per_element: ClassVar[int] = 1


@dataclass(frozen=True, eq=False)
class Lines(Elements):
    """Line segments given as ``(v0, v1)`` vertex id pairs."""

    kind: ClassVar[ElementKind] = "lines"
    n_vertices_per_element: ClassVar[int] = 2


@dataclass(frozen=True, eq=False)
class Triangles(Elements):
    """Triangles given as ``(v0, v1, v2)`` vertex id triples."""

    kind: ClassVar[ElementKind] = "triangles"
    n_vertices_per_element: ClassVar[int] = 3


ELEMENT_TYPES: dict[ElementKind, type[Elements]] = {
    "points": Points,
    "lines": Lines,
    "triangles": Triangles,
}


def _is_populated(array) -> bool:
    if array is None:
        return False
    if isinstance(array, Elements):
        return array.n_elements > 0
    if isinstance(array, torch.Tensor):
        return array.numel() > 0
    return len(array) > 0


def select_elements(
    points: torch.Tensor | Elements | None = None,
    lines: torch.Tensor | Elements | None = None,
    triangles: torch.Tensor | Elements | None = None,
) -> Elements:
    """Return the single populated element array as an :class:`Elements`.

    Parameters
    ----------
    points, lines, triangles : torch.Tensor or Elements or None
        Element arrays. Exactly one must be non-empty.

    Returns
    -------
    Elements
        The populated array wrapped in its variant type.

    Raises
    ------
    InvalidElementSelection
        If none, or more than one, of the arrays is non-empty.

    Examples
    --------
    >>> import torch
    >>> elements = select_elements(lines=torch.tensor([[0, 1], [1, 2]]))
    >>> elements.kind, elements.n_elements
    ('lines', 2)
    """
    given = {
        "points": points,
        "lines": lines,
        "triangles": triangles,
    }
    populated = [kind for kind, array in given.items() if _is_populated(array)]

    if len(populated) != 1:
        raise InvalidElementSelection(
            f"Exactly one of points/lines/triangles must be non-empty, "
            f"but got {populated if populated else 'none'}."
        )

    kind = populated[0]
    array = given[kind]
    element_type = ELEMENT_TYPES[kind]
    if isinstance(array, Elements):
        if not isinstance(array, element_type):
            raise InvalidElementSelection(
                f"Expected {element_type.__name__} for {kind!r}, "
                f"but got {type(array).__name__}."
            )
        return array
    return element_type(torch.as_tensor(array))

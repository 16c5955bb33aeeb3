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

"""Exception types raised by shapetess.

Every error here signals a violated precondition (a programming-contract
violation), never a transient condition. Each class also derives from the
closest builtin so that callers catching ``ValueError``/``KeyError``/
``IndexError`` keep working.
"""


class ShapeError(Exception):
    """Base class for all shapetess errors."""


class InvalidElementSelection(ShapeError, ValueError):
    """Zero, or more than one, of points/lines/triangles was supplied where
    exactly one element kind is required."""


class EdgeNotFound(ShapeError, KeyError):
    """An edge was looked up in an :class:`~shapetess.utilities.EdgeMap` that
    does not contain it."""

    def __init__(self, edge: tuple[int, int]):
        self.edge = edge
        super().__init__(edge)

    def __str__(self) -> str:
        return f"Edge {self.edge} is not present in the edge map."


class EmptyDistribution(ShapeError, ValueError):
    """A distribution was requested over zero elements, or over elements whose
    total weight is zero."""


class IndexOutOfRange(ShapeError, IndexError):
    """An element id or vertex id lies outside the bounds implied by the
    element or attribute arrays."""

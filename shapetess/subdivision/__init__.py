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

"""Edge-based subdivision of line and triangle shapes.

Subdivision works by:
1. Collecting the distinct undirected edges into an edge map
2. Adding one new vertex per edge, numbered after the original vertices
3. Splitting each line into 2 lines and each triangle into 4 triangles
4. Averaging vertex attributes onto the new vertices (tessellate only)

Example:
    >>> import torch
    >>> from shapetess.subdivision import split_edges
    >>> lines, triangles, edges = split_edges(3, triangles=torch.tensor([[0, 1, 2]]))
    >>> assert len(triangles) == 4 and len(edges) == 3
"""

from shapetess.subdivision._data import (
    average_over_edges,
    interpolate_vertex_data_to_edges,
)
from shapetess.subdivision._topology import split_edges, split_lines, split_triangles
from shapetess.subdivision.tessellate import renormalize_normals, tessellate

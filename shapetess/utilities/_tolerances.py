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

"""Dtype-aware numerical floors for shape computations.

Normalizing an accumulated normal or dividing by a segment length needs a
floor that never activates on real geometry but still keeps the result
finite for degenerate input (coincident vertices, zero-area triangles).
A fixed ``1e-10`` is too coarse for float64 shapes at small scale, so the
floor is derived from the dtype instead:

==========  =============
dtype       ``safe_eps``
==========  =============
float32     ~3.3e-10
float64     ~1.2e-77
==========  =============
"""

import torch


def safe_eps(dtype: torch.dtype) -> float:
    """Return a small positive floor for divisions in the given dtype.

    Parameters
    ----------
    dtype : torch.dtype
        The floating-point dtype of the quantity being divided.

    Returns
    -------
    float
        ``torch.finfo(dtype).tiny ** 0.25``.
    """
    return torch.finfo(dtype).tiny ** 0.25

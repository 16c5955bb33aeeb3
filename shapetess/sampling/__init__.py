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

"""Sampling points on shapes proportional to length or area.

This module provides:
- Element-weighted cumulative distributions (count, length, area)
- Inverse-CDF selection of elements from caller-supplied uniform draws
- The area-preserving square-to-triangle map for uniform triangle sampling
"""

from shapetess.sampling.distribution import (
    ElementDistribution,
    build_cdf,
    build_distribution,
    sample_shape_cdf,
)
from shapetess.sampling.sample_elements import (
    ElementSample,
    find_elements,
    sample_elements,
    sample_shape,
    sample_uniform_triangle,
)

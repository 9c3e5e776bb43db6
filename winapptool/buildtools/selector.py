# Copyright 2025 Roger Cibrian
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

"""Installed version selection.

A pure function of its inputs: no I/O and no hidden state.
"""

from __future__ import annotations

from collections.abc import Iterable

from winapptool.cache.index import InstalledPackageVersion
from winapptool.versioning import DottedVersion, try_parse_dotted_version


def select_version(
    versions: Iterable[InstalledPackageVersion],
    pinned: DottedVersion | str | None = None,
) -> InstalledPackageVersion | None:
    """Select exactly one installed version, or None.

    Args:
        versions: Installed versions of a single package.
        pinned: Exact version requested by project configuration. A pin
            never falls back to the latest version.

    Returns:
        The exact pinned match when a pin is given, otherwise the highest
        version. None when nothing matches or the set is empty. A pin that
        is not a numeric dotted version matches nothing.

    Example:
        ```python
        select_version(installed)                     # latest
        select_version(installed, "10.0.22000.1742")  # exact or None
        ```
    """
    candidates = list(versions)

    if isinstance(pinned, str):
        pinned = pinned.strip() or None

    if pinned is not None:
        if isinstance(pinned, DottedVersion):
            wanted = pinned
        else:
            wanted = try_parse_dotted_version(pinned)
        if wanted is None:
            return None
        for candidate in candidates:
            if candidate.version == wanted:
                return candidate
        return None

    if not candidates:
        return None
    return max(candidates, key=lambda v: v.version)

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

"""Dotted version parsing and comparison for winapptool.

This module is format-agnostic: it does NOT touch the filesystem. It only
parses and compares the purely numeric dotted versions used by NuGet
package folders (10.0.26100.1742) and SDK bin folders (10.0.26100.0).

Comparison rules:
    - Components compare numerically, never lexically (9 < 10).
    - Shorter tuples are padded with zeros (10.0 == 10.0.0.0).
    - Any non-numeric component makes the text unparsable; callers skip
      such entries instead of guessing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import functools
import re

_NUMERIC_DOTTED = re.compile(r"^\d+(\.\d+)*$")


def _pad_equal(
    a: tuple[int, ...], b: tuple[int, ...]
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Pad tuples with zeros so they align for element-wise comparison."""
    n = max(len(a), len(b))
    return a + (0,) * (n - len(a)), b + (0,) * (n - len(b))


def _strip_trailing_zeros(parts: tuple[int, ...]) -> tuple[int, ...]:
    end = len(parts)
    while end > 1 and parts[end - 1] == 0:
        end -= 1
    return parts[:end]


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class DottedVersion:
    """An ordered tuple of non-negative integers.

    Equality and hashing honour zero padding, so "10.0" and "10.0.0.0" are
    the same version. The original text is kept for display.

    Attributes:
        parts: Numeric components (e.g., (10, 0, 26100, 1742)).
        text: Version text as it was parsed.
    """

    parts: tuple[int, ...]
    text: str = field(default="")

    def __post_init__(self) -> None:
        if not self.parts:
            raise ValueError("a dotted version needs at least one component")
        if any(p < 0 for p in self.parts):
            raise ValueError(f"negative version component in {self.parts!r}")
        if not self.text:
            object.__setattr__(self, "text", ".".join(str(p) for p in self.parts))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DottedVersion):
            return NotImplemented
        a, b = _pad_equal(self.parts, other.parts)
        return a == b

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, DottedVersion):
            return NotImplemented
        a, b = _pad_equal(self.parts, other.parts)
        return a < b

    def __hash__(self) -> int:
        return hash(_strip_trailing_zeros(self.parts))

    def __str__(self) -> str:
        return self.text


def try_parse_dotted_version(text: str) -> DottedVersion | None:
    """Parse a purely numeric dotted version, returning None on failure.

    Args:
        text: Candidate version text (e.g., "10.0.26100.1742").

    Returns:
        The parsed version, or None if the text has any non-numeric
        component, an empty component, or is empty.

    Example:
        ```python
        try_parse_dotted_version("10.0.26100.1")   # DottedVersion((10, 0, 26100, 1))
        try_parse_dotted_version("1.8.0-preview")  # None
        ```
    """
    candidate = text.strip()
    if not _NUMERIC_DOTTED.match(candidate):
        return None
    return DottedVersion(tuple(int(p) for p in candidate.split(".")), candidate)


def parse_dotted_version(text: str) -> DottedVersion:
    """Parse a purely numeric dotted version.

    Raises:
        ValueError: If the text is not a numeric dotted version.
    """
    version = try_parse_dotted_version(text)
    if version is None:
        raise ValueError(f"not a numeric dotted version: {text!r}")
    return version


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns -1 if a < b, 0 if equal, 1 if a > b.

    Registry versions may carry a prerelease suffix ("1.2.0-preview1"); the
    suffix is ignored for ordering, and non-numeric components count as 0.
    """
    aa = _lenient_parts(a)
    bb = _lenient_parts(b)
    aa, bb = _pad_equal(aa, bb)
    return (aa > bb) - (aa < bb)


def _lenient_parts(text: str) -> tuple[int, ...]:
    core = text.strip().split("-", 1)[0].split("+", 1)[0]
    nums = [int(p) if p.isdigit() else 0 for p in core.split(".") if p]
    return tuple(nums) if nums else (0,)

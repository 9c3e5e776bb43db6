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

"""Public API return types for winapptool.

This module defines dataclasses for return values from public API functions:
locating a tool, running a tool, and updating the build tools package.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Note:
    Only public API return types belong in this module. Domain types
    (like DottedVersion and InstalledPackageVersion) stay co-located with
    their related logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

Architecture = Literal["x64", "arm64", "x86"]


@dataclass(frozen=True)
class ToolBinary:
    """A located build tool executable.

    Resolved per lookup and never cached, because installed packages can
    change between calls.

    Attributes:
        tool_file_name: File name that matched (e.g., "mt.exe").
        resolved_path: Absolute path to the executable.
        architecture: Architecture directory the tool was found in.
    """

    tool_file_name: str
    resolved_path: Path
    architecture: Architecture


@dataclass(frozen=True)
class ToolExecutionResult:
    """Result of one build tool invocation.

    Attributes:
        exit_code: Process exit code.
        stdout: Complete captured standard output.
        stderr: Complete captured standard error.
    """

    exit_code: int
    stdout: str
    stderr: str


@dataclass(frozen=True)
class UpdateResult:
    """Result from ensuring (or force-updating) the build tools package.

    Attributes:
        package_name: Package that was ensured.
        version: Selected installed version string.
        root_path: Package root directory in the cache.
        installed: True if the installer ran during this call.
    """

    package_name: str
    version: str
    root_path: Path
    installed: bool

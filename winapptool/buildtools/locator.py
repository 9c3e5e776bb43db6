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

"""Tool binary location inside an installed package.

BuildTools packages ship their executables in an SDK-versioned,
architecture-segmented layout:

    <packageRoot>/bin/<sdkVersion>/<arch>/<toolFileName>
    e.g. .../bin/10.0.26100.0/x64/makeappx.exe

Design Principles:
    - The highest numeric <sdkVersion> directory wins
    - The host architecture is tried first, then x64, x86, arm64
    - "mt" resolves to the same file as "mt.exe"
    - A miss returns None; the caller decides whether that is an error

Example:
    ```python
    from winapptool.buildtools.locator import locate_tool

    binary = locate_tool(installed_version, "signtool")
    if binary is not None:
        print(binary.resolved_path)
    ```
"""

from __future__ import annotations

from pathlib import Path
import platform

from winapptool.cache.index import InstalledPackageVersion
from winapptool.logging import Logger, get_global_logger
from winapptool.results import Architecture, ToolBinary
from winapptool.versioning import DottedVersion, try_parse_dotted_version

BIN_DIR_NAME = "bin"

# Extensions that already make a name executable on Windows
KNOWN_EXECUTABLE_EXTENSIONS = (".exe", ".com", ".bat", ".cmd")
# Appended, in order, to names that carry none of the above
DEFAULT_EXTENSIONS = (".exe", ".cmd", ".bat")

FALLBACK_ARCHITECTURES: tuple[Architecture, ...] = ("x64", "x86", "arm64")

_MACHINE_TO_ARCH: dict[str, Architecture] = {
    "amd64": "x64",
    "x86_64": "x64",
    "x64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "armv8": "arm64",
    "x86": "x86",
    "i386": "x86",
    "i486": "x86",
    "i586": "x86",
    "i686": "x86",
}


def host_architecture(machine: str | None = None) -> Architecture:
    """Map the host machine type to a package architecture directory name.

    Args:
        machine: Machine string to map. Default: platform.machine().

    Returns:
        "x64", "arm64" or "x86". Unknown machines map to "x64".
    """
    value = (machine if machine is not None else platform.machine()).strip().lower()
    return _MACHINE_TO_ARCH.get(value, "x64")


def candidate_file_names(tool_file_name: str) -> list[str]:
    """Return the file names to try for a tool, in order.

    Example:
        ```python
        candidate_file_names("mt")       # ["mt", "mt.exe", "mt.cmd", "mt.bat"]
        candidate_file_names("mt.exe")   # ["mt.exe"]
        ```
    """
    names = [tool_file_name]
    suffix = Path(tool_file_name).suffix.lower()
    if suffix not in KNOWN_EXECUTABLE_EXTENSIONS:
        names.extend(tool_file_name + ext for ext in DEFAULT_EXTENSIONS)
    return names


def latest_sdk_dir(bin_dir: Path) -> Path | None:
    """Return the highest <sdkVersion> directory under bin/, if any."""
    best: tuple[DottedVersion, Path] | None = None
    try:
        entries = list(bin_dir.iterdir())
    except OSError:
        return None

    for entry in entries:
        version = try_parse_dotted_version(entry.name)
        if version is None or not entry.is_dir():
            continue
        if best is None or version > best[0]:
            best = (version, entry)
    return best[1] if best else None


def architecture_order(preferred: Architecture) -> list[Architecture]:
    """Return architectures to probe: preferred first, then the fallbacks."""
    return [preferred] + [a for a in FALLBACK_ARCHITECTURES if a != preferred]


def locate_tool(
    installed: InstalledPackageVersion,
    tool_file_name: str,
    architecture: Architecture | None = None,
    logger: Logger | None = None,
) -> ToolBinary | None:
    """Find a tool binary inside an installed package version.

    Args:
        installed: Package version to search.
        tool_file_name: Tool name, with or without extension ("mt", "mt.exe").
        architecture: Preferred architecture. Default: host architecture.
        logger: Logger for diagnostics. Default: the global logger.

    Returns:
        The located ToolBinary, or None when no candidate exists.
    """
    if logger is None:
        logger = get_global_logger()

    sdk_dir = latest_sdk_dir(installed.root_path / BIN_DIR_NAME)
    if sdk_dir is None:
        logger.debug(
            "BUILDTOOLS", f"No SDK version folder under {installed.root_path / BIN_DIR_NAME}"
        )
        return None

    preferred = architecture or host_architecture()
    names = candidate_file_names(tool_file_name)

    for arch in architecture_order(preferred):
        arch_dir = sdk_dir / arch
        if not arch_dir.is_dir():
            continue
        for name in names:
            candidate = arch_dir / name
            if candidate.is_file():
                logger.debug("BUILDTOOLS", f"Found {name} ({arch}): {candidate}")
                return ToolBinary(
                    tool_file_name=name,
                    resolved_path=candidate.resolve(),
                    architecture=arch,
                )

    logger.debug("BUILDTOOLS", f"{tool_file_name} not found under {sdk_dir}")
    return None

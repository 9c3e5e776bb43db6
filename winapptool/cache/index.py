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

"""Installed package discovery for winapptool.

Installed packages live in `<cacheRoot>/packages/<PackageName>.<version>`.
The version is encoded in the directory name, so discovery is a parse step:
parse_package_dir_name() is the only place that knows the naming
convention, and list_versions() turns a directory snapshot into typed
InstalledPackageVersion entries.

Example:
    ```python
    from winapptool.cache.index import list_versions

    for entry in list_versions(cache_root, "Microsoft.Windows.SDK.BuildTools"):
        print(entry.version, entry.root_path)
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from winapptool.cache.location import PACKAGES_DIR_NAME
from winapptool.versioning import DottedVersion, try_parse_dotted_version


@dataclass(frozen=True)
class InstalledPackageVersion:
    """One installed version of a package in the cache.

    Attributes:
        name: Package name as found on disk.
        version: Parsed version from the directory name.
        root_path: Package root directory.
    """

    name: str
    version: DottedVersion
    root_path: Path


def parse_package_dir_name(
    dir_name: str, package_name: str | None = None
) -> tuple[str, DottedVersion] | None:
    """Split a package directory name into (name, version).

    With package_name, the directory must start with "<package_name>."
    (case-insensitive) and the whole remainder must be a version. Without
    it, the version is the longest run of trailing all-numeric
    dot-separated segments and everything before it is the package name.

    Args:
        dir_name: Directory name such as
            "Microsoft.Windows.SDK.BuildTools.10.0.26100.1742".
        package_name: Expected package name, when known.

    Returns:
        (name, version), or None when there is no numeric suffix or no name.

    Example:
        ```python
        parse_package_dir_name("Microsoft.Windows.SDK.CPP.x64.10.0.26100.1")
        # ("Microsoft.Windows.SDK.CPP.x64", DottedVersion(10.0.26100.1))
        parse_package_dir_name("Foo.2.1.0", "Foo.2")
        # ("Foo.2", DottedVersion(1.0))
        parse_package_dir_name("README")  # None
        ```
    """
    if package_name is not None:
        prefix_len = len(package_name) + 1
        if not package_name or len(dir_name) <= prefix_len:
            return None
        if dir_name[:prefix_len].casefold() != f"{package_name}.".casefold():
            return None
        version = try_parse_dotted_version(dir_name[prefix_len:])
        if version is None:
            return None
        return dir_name[: prefix_len - 1], version

    segments = dir_name.split(".")
    split_at = len(segments)
    while split_at > 0 and segments[split_at - 1].isdigit():
        split_at -= 1

    if split_at == len(segments) or split_at == 0:
        return None

    name = ".".join(segments[:split_at])
    version = try_parse_dotted_version(".".join(segments[split_at:]))
    if not name or version is None:
        return None
    return name, version


def list_versions(cache_root: Path, package_name: str) -> list[InstalledPackageVersion]:
    """List installed versions of a package, oldest first.

    The result is a snapshot taken at call time; nothing is cached between
    calls. Entries whose names do not parse, belong to another package, or
    are not directories are skipped silently.

    Args:
        cache_root: Cache root directory (the parent of "packages").
        package_name: Package name, compared case-insensitively.

    Returns:
        Installed versions sorted ascending, at most one per distinct
        version. Empty when the packages directory does not exist.
    """
    packages_dir = Path(cache_root) / PACKAGES_DIR_NAME
    if not packages_dir.is_dir():
        return []

    found: dict[DottedVersion, InstalledPackageVersion] = {}

    try:
        entries = sorted(packages_dir.iterdir(), key=lambda p: p.name)
    except OSError:
        return []

    for entry in entries:
        parsed = parse_package_dir_name(entry.name, package_name)
        if parsed is None or not entry.is_dir():
            continue
        name, version = parsed
        # First directory wins for duplicate versions (e.g., 1.0 vs 1.0.0)
        found.setdefault(version, InstalledPackageVersion(name, version, entry))

    return sorted(found.values(), key=lambda v: v.version)

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

"""Explicit cache management operations (get-path, move, clear).

These are the only operations that relocate or delete installed packages.
The resolver and the build tools lookup never do.
"""

from __future__ import annotations

from pathlib import Path
import shutil

from winapptool.cache.location import PACKAGES_DIR_NAME, CacheLocationResolver
from winapptool.exceptions import CacheError
from winapptool.logging import get_global_logger


def get_packages_path(resolver: CacheLocationResolver) -> Path:
    """Return the packages directory of the current cache root."""
    return resolver.packages_dir()


def move_cache(resolver: CacheLocationResolver, new_root: Path) -> Path:
    """Move the package cache to a new root and persist the pointer.

    Args:
        resolver: Resolver describing the current cache location.
        new_root: New cache root. Must be absent or empty.

    Returns:
        The new packages directory (new_root/packages).

    Raises:
        CacheError: If the target is not empty, is the current root, or the
            move fails.
    """
    logger = get_global_logger()

    new_root = Path(new_root).expanduser().resolve()
    current_packages = resolver.packages_dir()
    new_packages = new_root / PACKAGES_DIR_NAME

    if new_root == resolver.resolve().resolve():
        raise CacheError(f"Cache is already located at {new_root}")

    if new_root.exists():
        if not new_root.is_dir():
            raise CacheError(f"Target is not a directory: {new_root}")
        if any(new_root.iterdir()):
            raise CacheError(
                f"Target directory is not empty: {new_root}. "
                "Please use an empty directory or create a new one."
            )
    else:
        new_root.mkdir(parents=True)
        logger.verbose("CACHE", f"Created directory: {new_root}")

    if current_packages.is_dir():
        logger.verbose("CACHE", f"Moving packages {current_packages} -> {new_packages}")
        try:
            shutil.move(str(current_packages), str(new_packages))
        except OSError as err:
            raise CacheError(f"Failed to move packages: {err}") from err
    else:
        logger.verbose("CACHE", "No existing packages to move")

    try:
        resolver.set_pointer(new_root)
    except OSError as err:
        raise CacheError(
            f"Packages were moved, but the cache location could not be saved: {err}"
        ) from err

    return new_packages


def clear_cache(resolver: CacheLocationResolver) -> bool:
    """Delete the packages directory of the current cache root.

    Returns:
        True if something was removed, False if there was nothing to clear.

    Raises:
        CacheError: If the directory exists but cannot be removed.
    """
    packages_dir = resolver.packages_dir()
    if not packages_dir.exists():
        return False

    get_global_logger().verbose("CACHE", f"Clearing cache at: {packages_dir}")
    try:
        shutil.rmtree(packages_dir)
    except OSError as err:
        raise CacheError(f"Failed to clear cache at {packages_dir}: {err}") from err
    return True

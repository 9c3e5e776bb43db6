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

"""Package cache location and discovery for winapptool.

Public API:

- CacheLocationResolver: Resolve the cache root (override > env > pointer > default)
- InstalledPackageVersion: One installed package version
- list_versions: Snapshot installed versions of a package
- parse_package_dir_name: Split "<Name>.<version>" directory names
- move_cache / clear_cache / get_packages_path: Explicit cache management

Example:

    from winapptool.cache import CacheLocationResolver, list_versions

    root = CacheLocationResolver().resolve()
    versions = list_versions(root, "Microsoft.Windows.SDK.BuildTools")

"""

from .index import InstalledPackageVersion, list_versions, parse_package_dir_name
from .location import CACHE_DIRECTORY_ENV, CacheLocationResolver
from .manage import clear_cache, get_packages_path, move_cache

__all__ = [
    "CACHE_DIRECTORY_ENV",
    "CacheLocationResolver",
    "InstalledPackageVersion",
    "clear_cache",
    "get_packages_path",
    "list_versions",
    "move_cache",
    "parse_package_dir_name",
]

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

"""Package installation boundary.

The orchestrator only knows the PackageInstaller protocol: "install this
package at this version (or the latest)", reported as True/False or an
InstallationError. NugetInstaller is the default implementation used by the
CLI; it fetches packages from the public NuGet v3 flat container.

Key Features (NugetInstaller):
- Resolve "latest" to the highest stable version from the registry index
- Skip the download when `<Name>.<version>` is already in the cache
- Download the .nupkg and extract it to packages/<Name>.<version>
- Remove a partially extracted directory on failure

Example:
    ```python
    import asyncio
    from winapptool.cache import CacheLocationResolver
    from winapptool.buildtools.installer import NugetInstaller

    installer = NugetInstaller(CacheLocationResolver())
    asyncio.run(installer.install("Microsoft.Windows.SDK.BuildTools", None))
    ```

Note:
    The flat container serves lower-cased ids and versions; the package
    directory keeps the caller's casing so it matches `nuget install`.
"""

from __future__ import annotations

import asyncio
import functools
from pathlib import Path
import shutil
from typing import Protocol
import zipfile

import requests

from winapptool.cache.location import CacheLocationResolver
from winapptool.exceptions import InstallationError, NetworkError
from winapptool.logging import Logger, get_global_logger
from winapptool.versioning import compare_versions

NUGET_FLAT_CONTAINER = "https://api.nuget.org/v3-flatcontainer"


class PackageInstaller(Protocol):
    """Protocol for the external package installer collaborator."""

    async def install(self, package_name: str, version: str | None) -> bool:
        """Install a package.

        Args:
            package_name: Package to install.
            version: Exact version, or None for the latest available.

        Returns:
            True on success, False on failure. Implementations may raise
            InstallationError instead of returning False.
        """
        ...


def fetch_latest_version(
    package_name: str,
    include_prerelease: bool = False,
    session: requests.Session | None = None,
    timeout: float = 30,
) -> str:
    """Query the NuGet flat container for the newest version of a package.

    Args:
        package_name: NuGet package id.
        include_prerelease: If True, consider versions with a "-" suffix.
        session: Optional requests session.
        timeout: Request timeout in seconds.

    Returns:
        Newest version string (e.g., "10.0.26100.1742").

    Raises:
        NetworkError: If the request fails or no usable version is listed.
    """
    http = session or requests
    url = f"{NUGET_FLAT_CONTAINER}/{package_name.lower()}/index.json"

    try:
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as err:
        raise NetworkError(f"Failed to query versions of {package_name}: {err}") from err
    except ValueError as err:
        raise NetworkError(f"Invalid version index for {package_name}: {err}") from err

    versions = data.get("versions") if isinstance(data, dict) else None
    if not isinstance(versions, list):
        raise NetworkError(f"No versions found for {package_name}")

    candidates = [v for v in versions if isinstance(v, str) and v.strip()]
    if not include_prerelease:
        candidates = [v for v in candidates if "-" not in v]
    if not candidates:
        raise NetworkError(f"No versions found for {package_name}")

    return max(candidates, key=functools.cmp_to_key(compare_versions))


def download_package(
    package_name: str,
    version: str,
    packages_dir: Path,
    session: requests.Session | None = None,
    timeout: float = 300,
) -> Path:
    """Download a .nupkg and extract it to packages_dir/<Name>.<version>.

    Returns:
        Path to the extracted package directory.

    Raises:
        NetworkError: If the download fails.
        InstallationError: If the archive cannot be written or extracted.
            Nothing is left at packages_dir/<Name>.<version> in that case.
    """
    http = session or requests
    package_id = package_name.lower()
    version_id = version.lower()
    url = f"{NUGET_FLAT_CONTAINER}/{package_id}/{version_id}/{package_id}.{version_id}.nupkg"

    try:
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as err:
        raise NetworkError(f"Failed to download {package_name} {version}: {err}") from err

    packages_dir.mkdir(parents=True, exist_ok=True)
    target_dir = packages_dir / f"{package_name}.{version}"
    # Extracted beside the target, renamed into place only when complete
    staging_dir = packages_dir / f"{package_name}.{version}.partial"
    archive = packages_dir / f"{package_name}.{version}.nupkg"

    try:
        shutil.rmtree(staging_dir, ignore_errors=True)
        archive.write_bytes(response.content)
        with zipfile.ZipFile(archive, "r") as zf:
            zf.extractall(staging_dir)
        staging_dir.rename(target_dir)
    except zipfile.BadZipFile as err:
        shutil.rmtree(staging_dir, ignore_errors=True)
        raise InstallationError(package_name, version, f"invalid package archive: {err}") from err
    except OSError as err:
        shutil.rmtree(staging_dir, ignore_errors=True)
        raise InstallationError(package_name, version, f"could not extract package: {err}") from err
    finally:
        if archive.exists():
            archive.unlink()

    return target_dir


class NugetInstaller:
    """Install packages from nuget.org into the cache.

    Args:
        resolver: Cache location resolver; packages land in its packages dir.
        include_prerelease: Consider prerelease versions for "latest".
        session: Optional requests session (tests inject one).
        logger: Logger for diagnostics. Default: the global logger.
    """

    def __init__(
        self,
        resolver: CacheLocationResolver,
        include_prerelease: bool = False,
        session: requests.Session | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.resolver = resolver
        self.include_prerelease = include_prerelease
        self.session = session
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    async def install(self, package_name: str, version: str | None) -> bool:
        """Install a package, blocking I/O runs in a worker thread.

        Raises:
            InstallationError: If the registry or archive cannot be used.
        """
        return await asyncio.to_thread(self.install_sync, package_name, version)

    def install_sync(self, package_name: str, version: str | None) -> bool:
        """Synchronous body of install()."""
        try:
            if version is None:
                self.logger.verbose("INSTALL", f"Resolving latest version of {package_name}...")
                version = fetch_latest_version(
                    package_name, self.include_prerelease, session=self.session
                )

            packages_dir = self.resolver.packages_dir()
            expected = packages_dir / f"{package_name}.{version}"
            if expected.is_dir():
                self.logger.verbose("INSTALL", f"{package_name} {version} already present")
                return True

            self.logger.verbose("INSTALL", f"Installing {package_name} {version}...")
            target = download_package(package_name, version, packages_dir, session=self.session)
        except (NetworkError, OSError) as err:
            raise InstallationError(package_name, version, str(err)) from err

        self.logger.verbose("INSTALL", f"[OK] {package_name} {version} -> {target}")
        return True

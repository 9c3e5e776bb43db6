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

"""Build tools orchestration: "ensure tool X is available, then run it".

Lookup flow (a small state machine):

    RESOLVING --found--> RESOLVED
        |
        +--missing--> INSTALLING --> RESOLVING (once) --found--> RESOLVED
                                                  |
                                                  +--missing--> FAILED

The installer runs at most once per request. When the tool is still missing
after that, the request fails with ToolNotFoundAfterInstallError (install
succeeded) or InstallationError (install failed). Nothing is cached between
requests because installed packages can change underneath the process.

Example:
    ```python
    import asyncio
    from winapptool.buildtools import BuildToolsOrchestrator

    orchestrator = BuildToolsOrchestrator()
    result = asyncio.run(orchestrator.run("makeappx", ["pack", "/?"]))
    print(result.stdout)
    ```
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from pathlib import Path
from typing import TextIO

from winapptool.buildtools.installer import NugetInstaller, PackageInstaller
from winapptool.buildtools.locator import locate_tool
from winapptool.buildtools.runner import run_tool, tool_environment
from winapptool.buildtools.selector import select_version
from winapptool.cache.index import InstalledPackageVersion, list_versions
from winapptool.cache.location import CacheLocationResolver
from winapptool.config import default_config_path, load_winapp_config
from winapptool.exceptions import (
    InstallationError,
    ToolNotFoundAfterInstallError,
    VersionNotFoundError,
)
from winapptool.logging import Logger, get_global_logger
from winapptool.results import Architecture, ToolBinary, ToolExecutionResult, UpdateResult

BUILD_TOOLS_PACKAGE = "Microsoft.Windows.SDK.BuildTools"


class LookupState(Enum):
    """States of a single ensure-available request."""

    RESOLVING = "resolving"
    INSTALLING = "installing"
    RESOLVED = "resolved"
    FAILED = "failed"


class BuildToolsOrchestrator:
    """Facade over cache resolution, selection, location, install, and run.

    Args:
        resolver: Cache location resolver. Default: a fresh resolver.
        installer: Package installer. Default: NugetInstaller on the resolver.
        config_path: winapp.yaml holding version pins. Default: ./winapp.yaml
            at call time. Read on every lookup.
        package_name: Package that provides the tools.
        architecture: Preferred architecture. Default: host architecture.
        logger: Logger for diagnostics. Default: the global logger.
    """

    def __init__(
        self,
        resolver: CacheLocationResolver | None = None,
        installer: PackageInstaller | None = None,
        config_path: Path | None = None,
        package_name: str = BUILD_TOOLS_PACKAGE,
        architecture: Architecture | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.resolver = resolver or CacheLocationResolver()
        self.installer = installer or NugetInstaller(self.resolver)
        self.config_path = config_path
        self.package_name = package_name
        self.architecture = architecture
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    def pinned_version(self) -> str | None:
        """Return the pin for the owning package from winapp.yaml, if any."""
        path = self.config_path if self.config_path is not None else default_config_path()
        return load_winapp_config(path).get_version(self.package_name)

    def select_installed(self, pinned: str | None) -> InstalledPackageVersion | None:
        """Resolve the cache root and select an installed package version."""
        cache_root = self.resolver.resolve()
        versions = list_versions(cache_root, self.package_name)
        selected = select_version(versions, pinned)
        if selected is None:
            wanted = f"pinned {pinned}" if pinned else "any version"
            self.logger.debug(
                "BUILDTOOLS",
                f"{self.package_name}: {wanted} not installed under {cache_root}",
            )
        return selected

    def _lookup(self, tool_file_name: str, pinned: str | None) -> ToolBinary | None:
        selected = self.select_installed(pinned)
        if selected is None:
            return None
        return locate_tool(selected, tool_file_name, self.architecture, logger=self.logger)

    def get_tool_path(self, tool_file_name: str) -> ToolBinary | None:
        """Look up a tool in the current cache without installing anything."""
        return self._lookup(tool_file_name, self.pinned_version())

    async def _install(self, version: str | None) -> bool:
        """Run the installer once, reporting failure instead of raising it."""
        target = f"pinned version {version}" if version else "latest version"
        self.logger.verbose("BUILDTOOLS", f"Installing {self.package_name} ({target})...")
        try:
            succeeded = bool(await self.installer.install(self.package_name, version))
        except InstallationError as err:
            self.logger.verbose("BUILDTOOLS", f"Installation failed: {err}")
            return False
        if not succeeded:
            self.logger.verbose("BUILDTOOLS", "Installer reported failure")
        return succeeded

    async def ensure_tool_available(
        self, tool_file_name: str, *, force_latest: bool = False
    ) -> ToolBinary:
        """Return a tool binary, installing the owning package at most once.

        Args:
            tool_file_name: Tool name, with or without extension.
            force_latest: Ignore any pin and install the latest version
                before looking up, even when a local version exists.

        Returns:
            The located tool binary.

        Raises:
            InstallationError: Installation failed and the tool is missing.
            ToolNotFoundAfterInstallError: Installation ran and the tool is
                still missing.
        """
        pinned = None if force_latest else self.pinned_version()
        state = LookupState.INSTALLING if force_latest else LookupState.RESOLVING
        installs = 0
        install_ok = True
        binary: ToolBinary | None = None

        while state not in (LookupState.RESOLVED, LookupState.FAILED):
            if state is LookupState.RESOLVING:
                binary = self._lookup(tool_file_name, pinned)
                if binary is not None:
                    state = LookupState.RESOLVED
                elif installs == 0:
                    state = LookupState.INSTALLING
                else:
                    state = LookupState.FAILED
            elif state is LookupState.INSTALLING:
                install_ok = await self._install(pinned)
                installs += 1
                state = LookupState.RESOLVING

        if state is LookupState.FAILED or binary is None:
            if not install_ok:
                raise InstallationError(
                    self.package_name, pinned, f"'{tool_file_name}' is not available"
                )
            raise ToolNotFoundAfterInstallError(tool_file_name, self.package_name)

        self.logger.verbose("BUILDTOOLS", f"Using {binary.resolved_path}")
        return binary

    async def ensure_build_tools(self, *, force_latest: bool = False) -> UpdateResult:
        """Make sure the owning package is installed.

        Args:
            force_latest: Ignore the pin and install the newest version even
                when a version is already present (update flow).

        Returns:
            UpdateResult describing the selected installed version.

        Raises:
            InstallationError: Installation failed and nothing is selectable.
            VersionNotFoundError: Installation reported success but no
                matching version is installed.
        """
        pinned = None if force_latest else self.pinned_version()

        if not force_latest:
            existing = self.select_installed(pinned)
            if existing is not None:
                return UpdateResult(
                    self.package_name, str(existing.version), existing.root_path, False
                )

        install_ok = await self._install(pinned)
        selected = self.select_installed(pinned)
        if selected is None:
            if not install_ok:
                raise InstallationError(self.package_name, pinned)
            raise VersionNotFoundError(self.package_name, pinned)

        return UpdateResult(self.package_name, str(selected.version), selected.root_path, True)

    async def run(
        self,
        tool_file_name: str,
        arguments: str | Sequence[str] | None = None,
        print_errors: bool = True,
        *,
        error_stream: TextIO | None = None,
        cwd: Path | None = None,
    ) -> ToolExecutionResult:
        """Ensure a tool is available, then run it.

        The tool's own directory is prepended to PATH so tools that call
        their siblings (e.g., makeappx -> makepri) find them.

        Raises:
            InvalidToolExecutionError: If the tool exits non-zero.
            InstallationError / ToolNotFoundAfterInstallError: As for
                ensure_tool_available().
        """
        binary = await self.ensure_tool_available(tool_file_name)
        return await run_tool(
            binary.resolved_path,
            arguments,
            print_errors,
            error_stream=error_stream,
            cwd=cwd,
            env=tool_environment(binary.resolved_path.parent),
            logger=self.logger,
        )

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

"""Exception hierarchy for winapptool.

This module defines a custom exception hierarchy that allows callers to
distinguish between the different ways a build tool request can fail:

- ConfigError: winapp.yaml could not be parsed or has an invalid shape
- CacheError: An explicit cache management operation (move) failed
- NetworkError: The package registry could not be reached
- VersionNotFoundError: No installed package version satisfies the request
- ToolNotFoundError: A package version is installed but lacks the tool
- ToolNotFoundAfterInstallError: Installation ran and the tool is still absent
- InstallationError: The package installer reported failure
- InvalidToolExecutionError: The tool ran but exited with a non-zero code

All exceptions inherit from WinappError, allowing users to catch every
winapptool error with a single except clause if needed.

Resolving the cache location never raises: it always degrades to the
default directory, so there is no exception type for it.

Example:
    Distinguishing "couldn't fetch" from "fetched but still missing":
        ```python
        from winapptool.exceptions import (
            InstallationError,
            ToolNotFoundAfterInstallError,
        )

        try:
            binary = await orchestrator.ensure_tool_available("makeappx")
        except InstallationError as e:
            print(f"Install failed: {e}")
        except ToolNotFoundAfterInstallError as e:
            print(f"Tool missing from package: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "WinappError",
    "ConfigError",
    "CacheError",
    "NetworkError",
    "VersionNotFoundError",
    "ToolNotFoundError",
    "ToolNotFoundAfterInstallError",
    "InstallationError",
    "InvalidToolExecutionError",
]


class WinappError(Exception):
    """Base exception for all winapptool errors."""

    pass


class ConfigError(WinappError):
    """Raised for winapp.yaml problems.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors)
    - A top level that is not a mapping
    - A `packages` value that is not a list of {name, version} entries
    """

    pass


class CacheError(WinappError):
    """Raised when an explicit cache management operation fails.

    Only `cache move` style operations raise this. Reading the cache
    location never does.
    """

    pass


class NetworkError(WinappError):
    """Raised when the package registry cannot be queried or downloaded from."""

    pass


class VersionNotFoundError(WinappError):
    """Raised when no installed version satisfies a pin or "latest" request.

    Attributes:
        package_name: Package that was searched for.
        pinned_version: Pinned version that was requested, if any.
    """

    def __init__(self, package_name: str, pinned_version: str | None = None) -> None:
        self.package_name = package_name
        self.pinned_version = pinned_version
        if pinned_version:
            message = f"{package_name} {pinned_version} is not installed"
        else:
            message = f"No installed version of {package_name} found"
        super().__init__(message)


class ToolNotFoundError(WinappError, FileNotFoundError):
    """Raised when a build tool binary cannot be found in a package.

    Inherits from FileNotFoundError so callers that only care about
    "file not found" semantics can catch the builtin type.

    Attributes:
        tool_name: Tool file name that was requested (e.g., "mt.exe").
        package_name: Package that was expected to provide the tool.
    """

    def __init__(self, tool_name: str, package_name: str) -> None:
        self.tool_name = tool_name
        self.package_name = package_name
        super().__init__(f"Could not find '{tool_name}' in {package_name}")

    def __str__(self) -> str:
        return self.args[0]


class ToolNotFoundAfterInstallError(ToolNotFoundError):
    """Raised when the tool is still missing after an installation attempt.

    This is terminal: the orchestrator installs at most once per request.
    """

    def __init__(self, tool_name: str, package_name: str) -> None:
        super().__init__(tool_name, package_name)
        self.args = (
            f"Could not find '{tool_name}' in {package_name} "
            f"even after installing the package",
        )


class InstallationError(WinappError):
    """Raised when the package installer reports failure.

    Attributes:
        package_name: Package that failed to install.
        version: Requested version, or None for "latest".
    """

    def __init__(
        self, package_name: str, version: str | None = None, reason: str = ""
    ) -> None:
        self.package_name = package_name
        self.version = version
        target = f"{package_name} {version}" if version else f"{package_name} (latest)"
        message = f"Failed to install {target}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class InvalidToolExecutionError(WinappError):
    """Raised when a build tool exits with a non-zero code.

    Captured output is attached verbatim so the caller can decide what to
    show. This error is never retried automatically.

    Attributes:
        tool_name: Name of the executed tool.
        exit_code: Process exit code.
        stdout: Captured standard output.
        stderr: Captured standard error.
        process_id: Operating system process id of the child.
    """

    def __init__(
        self,
        tool_name: str,
        exit_code: int,
        stdout: str,
        stderr: str,
        process_id: int | None = None,
    ) -> None:
        self.tool_name = tool_name
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.process_id = process_id
        super().__init__(f"{tool_name} execution failed with exit code {exit_code}")

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

"""Build tools lookup, installation, and execution for winapptool.

Public API:

- BuildToolsOrchestrator: Ensure a tool is installed, then locate or run it
- locate_tool: Find a tool binary inside an installed package version
- select_version: Pick the pinned or latest installed version
- run_tool: Run a tool binary and capture its output
- NugetInstaller / PackageInstaller: Default installer and its protocol

Example:

    import asyncio
    from winapptool.buildtools import BuildToolsOrchestrator

    binary = asyncio.run(BuildToolsOrchestrator().ensure_tool_available("mt"))

"""

from .installer import NugetInstaller, PackageInstaller, fetch_latest_version
from .locator import host_architecture, locate_tool
from .orchestrator import BUILD_TOOLS_PACKAGE, BuildToolsOrchestrator, LookupState
from .runner import run_tool
from .selector import select_version

__all__ = [
    "BUILD_TOOLS_PACKAGE",
    "BuildToolsOrchestrator",
    "LookupState",
    "NugetInstaller",
    "PackageInstaller",
    "fetch_latest_version",
    "host_architecture",
    "locate_tool",
    "run_tool",
    "select_version",
]

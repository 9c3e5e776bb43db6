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

"""
winapptool - Windows app build tools on demand

A Python CLI and library that makes Windows SDK build tools (makeappx,
signtool, mt, makepri, ...) available on a workstation by resolving them
from a local package cache, installing the owning NuGet package when they
are missing, and running them with captured output.

winapptool provides:
  - Cache root resolution (override, environment variable, pointer file)
  - Installed version discovery and pinned/latest selection
  - Tool location across SDK versions and architectures
  - Install-once-then-retry orchestration
  - Asynchronous tool execution with captured stdout/stderr

Quick Start
-----------
Run a build tool (installing the build tools package if needed):

    $ winapp tool makeappx pack /d msix /p app.msix

Print where a tool lives:

    $ winapp get-tool-path signtool

For full CLI documentation:

    $ winapp --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
buildtools : package
    Selection, location, installation, execution, and orchestration.
cache : package
    Cache root resolution, installed package listing, cache management.
config : package
    winapp.yaml loading (pinned package versions).
versioning : package
    Numeric dotted version parsing and comparison.

Public API
----------
The primary interface is the CLI, but key classes are exported for
programmatic use:

    from winapptool import BuildToolsOrchestrator, CacheLocationResolver

For more details, see the individual module docstrings.

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "winapptool - Windows SDK build tools on demand"

# Re-export commonly used classes for convenience
from winapptool.buildtools import BuildToolsOrchestrator, locate_tool, select_version
from winapptool.cache import CacheLocationResolver, list_versions
from winapptool.config import load_winapp_config
from winapptool.versioning import DottedVersion

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "BuildToolsOrchestrator",
    "CacheLocationResolver",
    "DottedVersion",
    "list_versions",
    "load_winapp_config",
    "locate_tool",
    "select_version",
]

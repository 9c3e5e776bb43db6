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

"""Project configuration for winapptool.

Public API:

- load_winapp_config: Load winapp.yaml (pinned package versions)
- save_winapp_config: Write winapp.yaml
- WinappConfig / PackagePin: Parsed configuration types

Example:

    from winapptool.config import load_winapp_config

    pinned = load_winapp_config().get_version("Microsoft.Windows.SDK.BuildTools")

"""

from .loader import (
    CONFIG_FILE_NAME,
    PackagePin,
    WinappConfig,
    default_config_path,
    load_winapp_config,
    save_winapp_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "PackagePin",
    "WinappConfig",
    "default_config_path",
    "load_winapp_config",
    "save_winapp_config",
]

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

"""Project configuration (winapp.yaml) loading for winapptool.

A project pins package versions in a `winapp.yaml` file in its working
directory:

    packages:
      - name: Microsoft.Windows.SDK.BuildTools
        version: 10.0.26100.1742

A package without an entry is not pinned and resolves to the latest
installed version.

Error Handling:
    - A missing file is not an error: it yields an empty configuration
    - ConfigError: YAML parse errors, a non-mapping top level, or a
      malformed `packages` list
    - All errors are chained with "from err" for better debugging

Example:
    ```python
    from pathlib import Path
    from winapptool.config import load_winapp_config

    cfg = load_winapp_config(Path("winapp.yaml"))
    print(cfg.get_version("Microsoft.Windows.SDK.BuildTools"))
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from winapptool.exceptions import ConfigError

CONFIG_FILE_NAME = "winapp.yaml"


@dataclass
class PackagePin:
    """A pinned package version."""

    name: str
    version: str


@dataclass
class WinappConfig:
    """Parsed winapp.yaml contents.

    Attributes:
        packages: Pinned package versions in file order.
    """

    packages: list[PackagePin] = field(default_factory=list)

    def get_version(self, name: str) -> str | None:
        """Return the pinned version for a package (case-insensitive), if any."""
        wanted = name.casefold()
        for pin in self.packages:
            if pin.name.casefold() == wanted:
                return pin.version or None
        return None

    def set_version(self, name: str, version: str) -> None:
        """Pin a package to a version, replacing an existing pin."""
        wanted = name.casefold()
        for pin in self.packages:
            if pin.name.casefold() == wanted:
                pin.version = version
                return
        self.packages.append(PackagePin(name=name, version=version))


def default_config_path(working_dir: Path | None = None) -> Path:
    """Return the winapp.yaml path for a working directory (default: cwd)."""
    return (working_dir or Path.cwd()) / CONFIG_FILE_NAME


def _load_yaml_file(p: Path) -> Any:
    """Load a YAML file and return the parsed Python object.

    Raises:
        ConfigError: For invalid YAML (parse error) with chained context.
    """
    try:
        with p.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err


def _parse_packages(raw: Any, source: Path) -> list[PackagePin]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError(f"'packages' must be a list in {source}")

    pins: list[PackagePin] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ConfigError(f"packages[{index}] must be a mapping in {source}")
        name = item.get("name")
        version = item.get("version")
        if not name or version is None:
            raise ConfigError(
                f"packages[{index}] requires 'name' and 'version' in {source}"
            )
        # YAML reads unquoted 10.0 as a float
        pins.append(PackagePin(name=str(name).strip(), version=str(version).strip()))
    return pins


def load_winapp_config(path: Path | None = None) -> WinappConfig:
    """Load winapp.yaml, returning an empty config when it does not exist.

    Args:
        path: Config file path. Default: ./winapp.yaml.

    Returns:
        Parsed configuration.

    Raises:
        ConfigError: On YAML parse errors or an invalid structure.
    """
    config_path = path if path is not None else default_config_path()
    if not config_path.is_file():
        return WinappConfig()

    data = _load_yaml_file(config_path)
    if data is None:
        return WinappConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"top-level YAML must be a mapping (dict): {config_path}")

    return WinappConfig(packages=_parse_packages(data.get("packages"), config_path))


def save_winapp_config(config: WinappConfig, path: Path | None = None) -> Path:
    """Write the configuration back to winapp.yaml.

    Returns:
        The path that was written.
    """
    config_path = path if path is not None else default_config_path()
    data = {
        "packages": [{"name": p.name, "version": p.version} for p in config.packages]
    }
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, default_flow_style=False)
    return config_path

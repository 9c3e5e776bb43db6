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

"""Cache root resolution for winapptool.

The cache root is the directory holding installed tool packages
(`<cacheRoot>/packages/<PackageName>.<version>/...`). Exactly one source
decides where it lives, checked in this order:

1. An explicit override set on the resolver instance (test isolation)
2. The WINAPP_CLI_CACHE_DIRECTORY environment variable
3. A pointer persisted in the global configuration directory
   (`~/.winapp/cache_location.txt`, then `~/.winapp/cache-config.json`)
4. The default `~/.winapp`

Sources are never merged. A pointer that is empty, whitespace-only,
unreadable, or malformed counts as absent.

Example:
    Isolate a test run from the real user cache:
        ```python
        from winapptool.cache import CacheLocationResolver

        resolver = CacheLocationResolver(override=tmp_path / "cache")
        assert resolver.resolve() == tmp_path / "cache"
        ```

Note:
    resolve() never raises and has no side effects. Only set_pointer()
    writes to disk.
"""

from __future__ import annotations

from collections.abc import Mapping
import json
import os
from pathlib import Path

from winapptool.logging import Logger, get_global_logger

CACHE_DIRECTORY_ENV = "WINAPP_CLI_CACHE_DIRECTORY"
GLOBAL_DIR_NAME = ".winapp"
POINTER_FILE_NAME = "cache_location.txt"
POINTER_JSON_NAME = "cache-config.json"
PACKAGES_DIR_NAME = "packages"

# Keys accepted in cache-config.json (both spellings have shipped)
_POINTER_JSON_KEYS = ("CustomCacheLocation", "CustomCachePath")


class CacheLocationResolver:
    """Resolve the cache root directory.

    Args:
        override: Cache root that wins over every other source.
        environ: Environment mapping to read. Default: os.environ at
            resolve time.
        user_profile: User profile directory. Default: Path.home().
        logger: Logger for diagnostics. Default: the global logger.
    """

    def __init__(
        self,
        override: Path | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        user_profile: Path | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.override = Path(override) if override is not None else None
        self._environ = environ
        self._user_profile = user_profile
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    def global_config_dir(self) -> Path:
        """Return the fixed global configuration directory (~/.winapp)."""
        profile = self._user_profile if self._user_profile is not None else Path.home()
        return Path(profile) / GLOBAL_DIR_NAME

    def resolve(self) -> Path:
        """Return the cache root, applying the fixed precedence."""
        if self.override is not None:
            self.logger.debug("CACHE", f"Using instance override: {self.override}")
            return self.override

        environ = self._environ if self._environ is not None else os.environ
        env_value = environ.get(CACHE_DIRECTORY_ENV, "").strip()
        if env_value:
            self.logger.debug("CACHE", f"Using {CACHE_DIRECTORY_ENV}: {env_value}")
            return Path(env_value)

        pointer = self.read_pointer()
        if pointer is not None:
            self.logger.debug("CACHE", f"Using persisted cache location: {pointer}")
            return pointer

        return self.global_config_dir()

    def packages_dir(self) -> Path:
        """Return the packages subtree of the resolved cache root."""
        return self.resolve() / PACKAGES_DIR_NAME

    def read_pointer(self) -> Path | None:
        """Read the persisted cache location, or None if there is none usable."""
        global_dir = self.global_config_dir()

        text = self._read_text(global_dir / POINTER_FILE_NAME)
        if text is not None and text.strip():
            return Path(text.strip())

        text = self._read_text(global_dir / POINTER_JSON_NAME)
        if text is None:
            return None
        try:
            data = json.loads(text)
        except ValueError as err:
            self.logger.warning("CACHE", f"Ignoring malformed {POINTER_JSON_NAME}: {err}")
            return None
        if not isinstance(data, dict):
            return None
        for key in _POINTER_JSON_KEYS:
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return Path(value.strip())
        return None

    def set_pointer(self, cache_root: Path) -> Path:
        """Persist a cache location pointer.

        Args:
            cache_root: New cache root to record.

        Returns:
            Path to the written pointer file.
        """
        global_dir = self.global_config_dir()
        global_dir.mkdir(parents=True, exist_ok=True)
        pointer_file = global_dir / POINTER_FILE_NAME
        pointer_file.write_text(str(Path(cache_root).resolve()), encoding="utf-8")
        self.logger.verbose("CACHE", f"Cache location recorded in {pointer_file}")
        return pointer_file

    def _read_text(self, path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8-sig")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as err:
            self.logger.debug("CACHE", f"Could not read {path}: {err}")
            return None


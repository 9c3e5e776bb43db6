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

"""Diagnostic output for winapptool.

Library code reports what it is doing through a small Logger protocol so it
never writes to the terminal on its own. The CLI installs a DefaultLogger
for the chosen verbosity; everything else falls back to the global logger,
which is silent until configured.

Messages carry a bracketed area prefix: CACHE, BUILDTOOLS, INSTALL, RUN.

Levels:
- verbose: High-level progress (--verbose)
- debug: Lookup details such as probed directories (--debug, implies verbose)
- warning: Always shown

Diagnostics go to stderr so commands like `winapp get-tool-path` keep a
clean stdout that scripts can capture.

Example:
    ```python
    from winapptool.logging import get_logger, set_global_logger

    set_global_logger(get_logger(verbose=True))
    ```
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Logger(Protocol):
    """Protocol for logger implementations."""

    def verbose(self, prefix: str, message: str) -> None:
        """Report progress, e.g. verbose("INSTALL", "Downloading ...")."""
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Report lookup details, e.g. debug("BUILDTOOLS", "Found mt.exe (x64)")."""
        ...

    def warning(self, prefix: str, message: str) -> None:
        """Report a problem the caller should see regardless of verbosity."""
        ...


class DefaultLogger:
    """Logger that writes prefixed lines to a text stream.

    Args:
        verbose: Show verbose messages.
        debug: Show debug messages (implies verbose).
        stream: Destination. Default: sys.stderr at write time.
    """

    def __init__(
        self, verbose: bool = False, debug: bool = False, stream: TextIO | None = None
    ) -> None:
        self.show_verbose = verbose or debug
        self.show_debug = debug
        self._stream = stream

    def _write(self, line: str) -> None:
        stream = self._stream if self._stream is not None else sys.stderr
        print(line, file=stream)

    def verbose(self, prefix: str, message: str) -> None:
        if self.show_verbose:
            self._write(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        if self.show_debug:
            self._write(f"[{prefix}] [DEBUG] {message}")

    def warning(self, prefix: str, message: str) -> None:
        self._write(f"[{prefix}] [WARNING] {message}")


class SilentLogger:
    """Logger that discards everything."""

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass

    def warning(self, prefix: str, message: str) -> None:
        pass


_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Return a DefaultLogger for the requested verbosity."""
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Replace the logger used by library code that was not given one.

    The CLI calls this once per command. Tests usually pass a logger
    explicitly instead.
    """
    global _global_logger
    _global_logger = logger

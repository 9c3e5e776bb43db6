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

"""Build tool process execution.

Runs a located tool binary as a child process and captures its output.

Design Principles:
    - stdout and stderr are read line by line while the process runs
    - Both pipes are fully drained before waiting for exit, so a chatty
      tool cannot stall on a full pipe
    - A non-zero exit raises InvalidToolExecutionError with the captured
      output attached; it is never retried
    - print_errors only controls whether stderr is echoed to the caller's
      error stream; the error is raised either way
    - Cancelling the awaiting task kills the child (best effort), waits
      briefly for it to exit, then re-raises asyncio.CancelledError

Example:
    ```python
    import asyncio
    from winapptool.buildtools.runner import run_tool

    result = asyncio.run(run_tool(tool_path, ["pack", "/d", "msix", "/p", "app.msix"]))
    print(result.stdout)
    ```
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
import os
from pathlib import Path
import shlex
import sys
from typing import TextIO

from winapptool.exceptions import InvalidToolExecutionError
from winapptool.logging import Logger, get_global_logger
from winapptool.results import ToolExecutionResult


def split_arguments(arguments: str | Sequence[str] | None) -> list[str]:
    """Normalize tool arguments into a token list.

    A single string is treated as an already-quoted command line and split
    with shlex (quotes group tokens, backslashes in Windows paths survive).
    """
    if arguments is None:
        return []
    if isinstance(arguments, str):
        lexer = shlex.shlex(arguments, posix=True)
        lexer.whitespace_split = True
        lexer.escape = ""
        return list(lexer)
    return [str(a) for a in arguments]


def quote_arguments(arguments: Sequence[str]) -> str:
    """Join tokens into one command line, quoting tokens that contain spaces."""
    return " ".join(f'"{a}"' if (" " in a and not a.startswith('"')) else a for a in arguments)


_READ_CHUNK = 64 * 1024
_REAP_TIMEOUT = 5.0


async def _drain(stream: asyncio.StreamReader | None, lines: list[str]) -> None:
    """Read a pipe to EOF, appending each complete line as it arrives.

    Reads in chunks rather than readline() so a single huge line cannot
    exceed the StreamReader limit.
    """
    if stream is None:
        return
    pending = b""
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            break
        pending += chunk
        *complete, pending = pending.split(b"\n")
        for raw in complete:
            lines.append((raw + b"\n").decode("utf-8", errors="replace"))
    if pending:
        lines.append(pending.decode("utf-8", errors="replace"))


async def run_tool(
    tool_path: Path,
    arguments: str | Sequence[str] | None = None,
    print_errors: bool = True,
    *,
    error_stream: TextIO | None = None,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    logger: Logger | None = None,
) -> ToolExecutionResult:
    """Run a build tool and capture its output.

    Args:
        tool_path: Path to the executable.
        arguments: Argument tokens, or one pre-quoted command-line string.
        print_errors: If True, write captured stderr to error_stream as soon
            as a failure is detected. Default is True.
        error_stream: Caller's diagnostic channel. Default: sys.stderr at
            call time.
        cwd: Working directory for the child. Default: current directory.
        env: Environment for the child. Default: inherited.
        logger: Logger for diagnostics. Default: the global logger.

    Returns:
        ToolExecutionResult with exit_code 0 and the complete captured text.

    Raises:
        InvalidToolExecutionError: If the tool exits with a non-zero code.
        FileNotFoundError: If the executable does not exist.
        asyncio.CancelledError: If the awaiting task is cancelled.
    """
    if logger is None:
        logger = get_global_logger()

    tool_path = Path(tool_path)
    args = split_arguments(arguments)
    logger.verbose("RUN", f"Running: {tool_path.name} {quote_arguments(args)}".rstrip())

    process = await asyncio.create_subprocess_exec(
        str(tool_path),
        *args,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
    )

    stdout_lines: list[str] = []
    stderr_lines: list[str] = []
    try:
        await asyncio.gather(
            _drain(process.stdout, stdout_lines),
            _drain(process.stderr, stderr_lines),
        )
        exit_code = await process.wait()
    except asyncio.CancelledError:
        _kill_quietly(process)
        await _reap(process)
        logger.debug("RUN", f"Cancelled {tool_path.name} (pid {process.pid})")
        raise

    stdout = "".join(stdout_lines)
    stderr = "".join(stderr_lines)

    for line in stdout_lines:
        logger.debug("RUN", line.rstrip("\r\n"))

    if exit_code != 0:
        if print_errors and stderr:
            stream = error_stream if error_stream is not None else sys.stderr
            stream.write(stderr if stderr.endswith("\n") else stderr + "\n")
            stream.flush()
        raise InvalidToolExecutionError(
            tool_path.name, exit_code, stdout, stderr, process_id=process.pid
        )

    return ToolExecutionResult(exit_code=exit_code, stdout=stdout, stderr=stderr)


def _kill_quietly(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        pass


async def _reap(process: asyncio.subprocess.Process) -> None:
    """Wait briefly for a killed child to exit so it is not left unreaped."""
    try:
        await asyncio.wait_for(asyncio.shield(process.wait()), timeout=_REAP_TIMEOUT)
    except (asyncio.TimeoutError, ProcessLookupError, OSError):
        pass


def tool_environment(extra_path: Path | None = None) -> dict[str, str]:
    """Return a copy of os.environ with extra_path prepended to PATH."""
    env = dict(os.environ)
    if extra_path is not None:
        env["PATH"] = os.pathsep.join(filter(None, [str(extra_path), env.get("PATH", "")]))
    return env

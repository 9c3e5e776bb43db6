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

"""Command-line interface for winapptool.

This module provides the main CLI entry point for the winapp tool, offering
commands for running Windows SDK build tools and managing the package cache.

Commands:

    tool: Run a build tool, installing the build tools package if needed
    get-tool-path: Print the full path of a build tool
    update: Install the latest build tools package
    cache: Show, move, or clear the package cache

Example:
    Run a build tool:
        ```bash
        $ winapp tool makeappx pack /d msix /p app.msix
        ```

    Locate a build tool:
        ```bash
        $ winapp get-tool-path signtool
        ```

    Move the package cache:
        ```bash
        $ winapp cache move D:\\winapp-cache
        ```

    Enable debug output:
        ```bash
        $ winapp get-tool-path mt --debug
        ```

Exit Codes:

- 0: Success
- 1: Error (configuration, installation, lookup, or tool failure)

Note:
    The CLI uses argparse for command parsing (stdlib, zero dependencies).
    Each command has its own handler function (cmd_<command>).
    Async library calls are driven with asyncio.run() per command.
    Verbose mode shows full tracebacks on errors for debugging.
    Debug mode implies verbose mode.

"""

from __future__ import annotations

import argparse
import asyncio
from importlib.metadata import version
from pathlib import Path
import sys

from winapptool.buildtools import BuildToolsOrchestrator
from winapptool.cache import CacheLocationResolver, clear_cache, get_packages_path, move_cache
from winapptool.config import default_config_path, load_winapp_config, save_winapp_config
from winapptool.exceptions import InvalidToolExecutionError, WinappError
from winapptool.logging import get_logger, set_global_logger


def _configure_logger(args: argparse.Namespace) -> None:
    set_global_logger(get_logger(verbose=args.verbose, debug=args.debug))


def _report_error(err: Exception, args: argparse.Namespace) -> int:
    """Print an error (with traceback in verbose mode) and return exit code 1."""
    print(f"Error: {err}")
    if args.verbose or args.debug:
        import traceback

        traceback.print_exc()
    return 1


def _confirm(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N]: ").strip().lower()
    return answer in ("y", "yes")


def cmd_tool(args: argparse.Namespace) -> int:
    """Handler for 'winapp tool' command.

    Ensures the requested tool is available (installing the build tools
    package once if it is missing), runs it with the remaining arguments,
    and echoes its captured standard output and standard error.

    Args:
        args: Parsed command-line arguments containing the tool name, the
            tool arguments, and output flags.

    Returns:
        Exit code (0 when the tool succeeded, 1 otherwise).

    Note:
        The tool's stderr is echoed to stderr whether or not it succeeds.

    """
    _configure_logger(args)
    orchestrator = BuildToolsOrchestrator()

    try:
        result = asyncio.run(orchestrator.run(args.tool, args.tool_args))
    except InvalidToolExecutionError as err:
        if err.stdout:
            print(err.stdout, end="")
        return _report_error(err, args)
    except WinappError as err:
        return _report_error(err, args)

    if result.stdout:
        print(result.stdout, end="")
    if result.stderr:
        sys.stderr.write(result.stderr)
    return 0


def cmd_get_tool_path(args: argparse.Namespace) -> int:
    """Handler for 'winapp get-tool-path' command.

    Args:
        args: Parsed command-line arguments containing the tool name.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    _configure_logger(args)
    orchestrator = BuildToolsOrchestrator()

    try:
        binary = asyncio.run(orchestrator.ensure_tool_available(args.tool))
    except WinappError as err:
        return _report_error(err, args)

    print(binary.resolved_path)
    return 0


def cmd_update(args: argparse.Namespace) -> int:
    """Handler for 'winapp update' command.

    Installs the latest build tools package, ignoring any version pinned in
    winapp.yaml, and reports the version now selected. An existing winapp.yaml
    is rewritten to pin the installed version.

    Args:
        args: Parsed command-line arguments containing output flags.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    _configure_logger(args)
    orchestrator = BuildToolsOrchestrator()

    print(f"Updating {orchestrator.package_name} to the latest version...")
    print()

    try:
        result = asyncio.run(orchestrator.ensure_build_tools(force_latest=True))
        config_path = default_config_path()
        if config_path.is_file():
            config = load_winapp_config(config_path)
            config.set_version(result.package_name, result.version)
            save_winapp_config(config, config_path)
            print(f"Pinned {result.package_name} {result.version} in {config_path}")
            print()
    except WinappError as err:
        return _report_error(err, args)

    print("=" * 70)
    print("UPDATE RESULTS")
    print("=" * 70)
    print(f"Package:         {result.package_name}")
    print(f"Version:         {result.version}")
    print(f"Location:        {result.root_path}")
    print("=" * 70)
    print()
    print("[SUCCESS] Build tools are up to date!")

    return 0


def cmd_cache_get_path(args: argparse.Namespace) -> int:
    """Handler for 'winapp cache get-path' command."""
    _configure_logger(args)
    packages_dir = get_packages_path(CacheLocationResolver())

    print(packages_dir)
    if not packages_dir.exists():
        print("(directory does not exist yet)")
    return 0


def cmd_cache_move(args: argparse.Namespace) -> int:
    """Handler for 'winapp cache move' command.

    Moves the packages directory to a new cache root and records the new
    location in the pointer file so later runs find it.

    Args:
        args: Parsed command-line arguments containing the target path and
            the --force flag.

    Returns:
        Exit code (0 for success or cancellation, 1 for failure).

    """
    _configure_logger(args)
    resolver = CacheLocationResolver()
    target = Path(args.path).expanduser().resolve()

    print(f"Current cache location: {resolver.resolve()}")
    print(f"New cache location:     {target}")
    print()

    if not args.force and not _confirm("Move the package cache?"):
        print("Cancelled.")
        return 0

    try:
        new_packages = move_cache(resolver, target)
    except WinappError as err:
        return _report_error(err, args)

    print(f"[SUCCESS] Packages are now stored in: {new_packages}")
    return 0


def cmd_cache_clear(args: argparse.Namespace) -> int:
    """Handler for 'winapp cache clear' command.

    Args:
        args: Parsed command-line arguments containing the --force flag.

    Returns:
        Exit code (0 for success or cancellation, 1 for failure).

    """
    _configure_logger(args)
    resolver = CacheLocationResolver()
    packages_dir = resolver.packages_dir()

    if not packages_dir.exists():
        print(f"Nothing to clear: {packages_dir} does not exist")
        return 0

    if not args.force and not _confirm(f"Delete all packages in {packages_dir}?"):
        print("Cancelled.")
        return 0

    try:
        clear_cache(resolver)
    except WinappError as err:
        return _report_error(err, args)

    print(f"[SUCCESS] Cleared package cache: {packages_dir}")
    return 0


def _add_output_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the winapp CLI."""
    parser = argparse.ArgumentParser(
        prog="winapp",
        description="winapp - Windows SDK build tools on demand",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"winapp {version('winapptool')}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'tool' command
    parser_tool = subparsers.add_parser(
        "tool",
        aliases=["run-buildtool"],
        help="Run a build tool (installs build tools if missing)",
        description="Run a Windows SDK build tool such as makeappx, signtool, mt, or makepri.",
    )
    _add_output_flags(parser_tool)
    parser_tool.add_argument(
        "tool",
        help="Tool name, with or without extension (e.g., makeappx or mt.exe)",
    )
    parser_tool.add_argument(
        "tool_args",
        nargs=argparse.REMAINDER,
        help="Arguments passed through to the tool",
    )
    parser_tool.set_defaults(func=cmd_tool)

    # 'get-tool-path' command
    parser_path = subparsers.add_parser(
        "get-tool-path",
        help="Print the full path of a build tool",
        description="Locate a build tool, installing build tools if missing, and print its path.",
    )
    parser_path.add_argument(
        "tool",
        help="Tool name, with or without extension",
    )
    _add_output_flags(parser_path)
    parser_path.set_defaults(func=cmd_get_tool_path)

    # 'update' command
    parser_update = subparsers.add_parser(
        "update",
        help="Install the latest build tools package",
        description="Install the latest build tools package, ignoring pinned versions.",
    )
    _add_output_flags(parser_update)
    parser_update.set_defaults(func=cmd_update)

    # 'cache' command group
    parser_cache = subparsers.add_parser(
        "cache",
        help="Manage the package cache",
        description="Show, move, or clear the package cache.",
    )
    cache_commands = parser_cache.add_subparsers(
        dest="cache_command",
        help="Cache commands",
        required=True,
    )

    parser_get_path = cache_commands.add_parser(
        "get-path",
        help="Print the packages directory",
    )
    _add_output_flags(parser_get_path)
    parser_get_path.set_defaults(func=cmd_cache_get_path)

    parser_move = cache_commands.add_parser(
        "move",
        help="Move the package cache to a new directory",
    )
    parser_move.add_argument(
        "path",
        help="New cache root (must be empty or not exist)",
    )
    parser_move.add_argument(
        "--force",
        action="store_true",
        help="Do not ask for confirmation",
    )
    _add_output_flags(parser_move)
    parser_move.set_defaults(func=cmd_cache_move)

    parser_clear = cache_commands.add_parser(
        "clear",
        help="Delete all cached packages",
    )
    parser_clear.add_argument(
        "--force",
        action="store_true",
        help="Do not ask for confirmation",
    )
    _add_output_flags(parser_clear)
    parser_clear.set_defaults(func=cmd_cache_clear)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the winapp CLI.

    This function is registered as the 'winapp' console script in
    pyproject.toml.
    """
    parser = build_parser()

    # Parse and dispatch
    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

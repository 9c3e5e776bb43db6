"""
Pytest configuration and shared fixtures for winapptool tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from winapptool.cache.location import CacheLocationResolver

BUILD_TOOLS = "Microsoft.Windows.SDK.BuildTools"


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def cache_root(tmp_test_dir: Path) -> Path:
    """Provide an (initially empty) cache root directory."""
    root = tmp_test_dir / "cache"
    root.mkdir()
    return root


@pytest.fixture
def resolver(cache_root: Path, tmp_test_dir: Path) -> CacheLocationResolver:
    """
    Provide a cache resolver bound to the temporary cache root.

    The user profile points inside tmp_path so pointer files written by
    tests never touch the real home directory.
    """
    return CacheLocationResolver(
        cache_root,
        environ={},
        user_profile=tmp_test_dir / "profile",
    )


@pytest.fixture
def make_package(cache_root: Path):
    """
    Factory fixture for creating fake installed packages.

    Usage:
        root = make_package("10.0.26100.1", tools={"x64": ["mt.exe"]})

    Creates packages/<name>.<version>/bin/<sdk_version>/<arch>/<tool> with a
    small placeholder file for each tool.
    """

    def _create(
        version: str,
        tools: dict[str, list[str]] | None = None,
        name: str = BUILD_TOOLS,
        sdk_version: str = "10.0.26100.0",
    ) -> Path:
        root = cache_root / "packages" / f"{name}.{version}"
        root.mkdir(parents=True, exist_ok=True)
        for arch, files in (tools or {}).items():
            arch_dir = root / "bin" / sdk_version / arch
            arch_dir.mkdir(parents=True, exist_ok=True)
            for file_name in files:
                (arch_dir / file_name).write_bytes(b"MZ")
        return root

    return _create


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("winapp.yaml", {"packages": []})
    """

    def _create(filename: str, data: Any) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create

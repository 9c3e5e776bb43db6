"""
Tests for winapptool.buildtools.orchestrator module.

Tests the ensure-then-run flow including:
- Found locally without installing
- Install exactly once on an initial miss
- Installer failure vs. tool still missing after install
- Pinned versions and force-latest
- Package-level ensure (update flow)
- Running a located tool
"""

from __future__ import annotations

import asyncio
import sys

import pytest

from winapptool.buildtools.installer import NUGET_FLAT_CONTAINER, NugetInstaller
from winapptool.buildtools.orchestrator import BuildToolsOrchestrator
from winapptool.exceptions import (
    InstallationError,
    ToolNotFoundAfterInstallError,
    ToolNotFoundError,
    VersionNotFoundError,
)
from winapptool.results import ToolExecutionResult

pytestmark = pytest.mark.unit


class FakeInstaller:
    """Installer double that records calls and optionally creates a package."""

    def __init__(self, make_package, creates=None, result=True, error=None):
        self.make_package = make_package
        self.creates = creates or {}
        self.result = result
        self.error = error
        self.calls: list[tuple[str, str | None]] = []

    async def install(self, package_name, version):
        self.calls.append((package_name, version))
        if self.error is not None:
            raise self.error
        for pkg_version, tools in self.creates.items():
            self.make_package(pkg_version, tools=tools)
        return self.result


@pytest.fixture
def config_path(tmp_test_dir):
    return tmp_test_dir / "winapp.yaml"


@pytest.fixture
def make_orchestrator(resolver, config_path):
    def _create(installer):
        return BuildToolsOrchestrator(
            resolver=resolver,
            installer=installer,
            config_path=config_path,
            architecture="x64",
        )

    return _create


def pin(config_path, version):
    config_path.write_text(
        "packages:\n"
        "  - name: Microsoft.Windows.SDK.BuildTools\n"
        f"    version: \"{version}\"\n"
    )


class TestEnsureToolAvailable:
    """Tests for ensure_tool_available()."""

    def test_found_locally_no_install(self, make_package, make_orchestrator):
        """Test that an installed tool is returned without installing."""
        make_package("10.0.26100.1", tools={"x64": ["makeappx.exe"]})
        installer = FakeInstaller(make_package)

        binary = asyncio.run(make_orchestrator(installer).ensure_tool_available("makeappx"))

        assert binary.tool_file_name == "makeappx.exe"
        assert installer.calls == []

    def test_install_exactly_once_on_miss(self, make_package, make_orchestrator):
        """Test that an initial miss installs once and then finds the tool."""
        installer = FakeInstaller(
            make_package, creates={"10.0.26100.1742": {"x64": ["signtool.exe"]}}
        )

        binary = asyncio.run(make_orchestrator(installer).ensure_tool_available("signtool"))

        assert installer.calls == [("Microsoft.Windows.SDK.BuildTools", None)]
        assert "Microsoft.Windows.SDK.BuildTools.10.0.26100.1742" in binary.resolved_path.parts

    def test_still_missing_after_install(self, make_package, make_orchestrator):
        """Test the terminal error when install succeeds but the tool is absent."""
        installer = FakeInstaller(make_package, creates={"10.0.26100.1": {"x64": ["mt.exe"]}})

        with pytest.raises(ToolNotFoundAfterInstallError) as exc_info:
            asyncio.run(make_orchestrator(installer).ensure_tool_available("nosuchtool"))

        assert len(installer.calls) == 1
        assert "nosuchtool" in str(exc_info.value)
        assert "Microsoft.Windows.SDK.BuildTools" in str(exc_info.value)
        assert isinstance(exc_info.value, FileNotFoundError)
        assert isinstance(exc_info.value, ToolNotFoundError)

    def test_installer_returns_false(self, make_package, make_orchestrator):
        """Test that a reported install failure raises InstallationError."""
        installer = FakeInstaller(make_package, result=False)

        with pytest.raises(InstallationError):
            asyncio.run(make_orchestrator(installer).ensure_tool_available("mt"))

        assert len(installer.calls) == 1

    def test_installer_raises(self, make_package, make_orchestrator):
        """Test that an installer exception surfaces as InstallationError."""
        installer = FakeInstaller(
            make_package,
            error=InstallationError("Microsoft.Windows.SDK.BuildTools", None, "offline"),
        )

        with pytest.raises(InstallationError):
            asyncio.run(make_orchestrator(installer).ensure_tool_available("mt"))

        assert len(installer.calls) == 1

    def test_filesystem_error_from_default_installer(
        self, requests_mock, resolver, make_orchestrator, config_path, cache_root
    ):
        """Test that a cache filesystem failure surfaces as InstallationError."""
        version = "10.0.26100.1"
        pid = "microsoft.windows.sdk.buildtools"
        requests_mock.get(
            f"{NUGET_FLAT_CONTAINER}/{pid}/{version}/{pid}.{version}.nupkg",
            content=b"PK",
        )
        (cache_root / "packages").write_text("not a directory")
        pin(config_path, version)

        with pytest.raises(InstallationError):
            asyncio.run(make_orchestrator(NugetInstaller(resolver)).ensure_tool_available("mt"))

    def test_failed_install_but_tool_appears(self, make_package, make_orchestrator):
        """Test that a tool present after a failed install is still used."""
        installer = FakeInstaller(
            make_package, creates={"10.0.26100.1": {"x64": ["mt.exe"]}}, result=False
        )

        binary = asyncio.run(make_orchestrator(installer).ensure_tool_available("mt"))

        assert binary.tool_file_name == "mt.exe"

    def test_pinned_version_selected(self, make_package, make_orchestrator, config_path):
        """Test that a pin selects that version over a newer one."""
        make_package("10.0.22621.756", tools={"x64": ["mt.exe"]})
        make_package("10.0.26100.1742", tools={"x64": ["mt.exe"]})
        pin(config_path, "10.0.22621.756")
        installer = FakeInstaller(make_package)

        binary = asyncio.run(make_orchestrator(installer).ensure_tool_available("mt"))

        assert "Microsoft.Windows.SDK.BuildTools.10.0.22621.756" in binary.resolved_path.parts
        assert installer.calls == []

    def test_missing_pin_installs_pinned_version(
        self, make_package, make_orchestrator, config_path
    ):
        """Test that an uninstalled pin installs that exact version."""
        make_package("10.0.26100.1742", tools={"x64": ["mt.exe"]})
        pin(config_path, "10.0.22621.756")
        installer = FakeInstaller(
            make_package, creates={"10.0.22621.756": {"x64": ["mt.exe"]}}
        )

        binary = asyncio.run(make_orchestrator(installer).ensure_tool_available("mt"))

        assert installer.calls == [("Microsoft.Windows.SDK.BuildTools", "10.0.22621.756")]
        assert "Microsoft.Windows.SDK.BuildTools.10.0.22621.756" in binary.resolved_path.parts

    def test_force_latest_ignores_pin_and_installs(
        self, make_package, make_orchestrator, config_path
    ):
        """Test that force_latest installs latest even with a local match."""
        make_package("10.0.22621.756", tools={"x64": ["mt.exe"]})
        pin(config_path, "10.0.22621.756")
        installer = FakeInstaller(
            make_package, creates={"10.0.26100.1742": {"x64": ["mt.exe"]}}
        )

        binary = asyncio.run(
            make_orchestrator(installer).ensure_tool_available("mt", force_latest=True)
        )

        assert installer.calls == [("Microsoft.Windows.SDK.BuildTools", None)]
        assert "Microsoft.Windows.SDK.BuildTools.10.0.26100.1742" in binary.resolved_path.parts

    def test_get_tool_path_never_installs(self, make_package, make_orchestrator):
        """Test that a plain lookup does not call the installer."""
        installer = FakeInstaller(make_package, creates={"1.0": {"x64": ["mt.exe"]}})

        assert make_orchestrator(installer).get_tool_path("mt") is None
        assert installer.calls == []


class TestEnsureBuildTools:
    """Tests for ensure_build_tools()."""

    def test_existing_version_not_reinstalled(self, make_package, make_orchestrator):
        """Test that an installed package is reported without installing."""
        make_package("10.0.26100.1")
        installer = FakeInstaller(make_package)

        result = asyncio.run(make_orchestrator(installer).ensure_build_tools())

        assert result.version == "10.0.26100.1"
        assert result.installed is False
        assert installer.calls == []

    def test_force_latest_installs(self, make_package, make_orchestrator):
        """Test that the update flow installs and reports the newest version."""
        make_package("10.0.22621.756")
        installer = FakeInstaller(make_package, creates={"10.0.26100.1742": {}})

        result = asyncio.run(make_orchestrator(installer).ensure_build_tools(force_latest=True))

        assert installer.calls == [("Microsoft.Windows.SDK.BuildTools", None)]
        assert result.version == "10.0.26100.1742"
        assert result.installed is True

    def test_nothing_installed_after_success(self, make_package, make_orchestrator):
        """Test VersionNotFoundError when a successful install leaves nothing."""
        installer = FakeInstaller(make_package)

        with pytest.raises(VersionNotFoundError):
            asyncio.run(make_orchestrator(installer).ensure_build_tools())

    def test_install_failure(self, make_package, make_orchestrator):
        """Test InstallationError when the installer fails."""
        installer = FakeInstaller(make_package, result=False)

        with pytest.raises(InstallationError):
            asyncio.run(make_orchestrator(installer).ensure_build_tools())


class TestRun:
    """Tests for run()."""

    def test_run_located_tool(self, make_package, make_orchestrator, monkeypatch):
        """Test that run() executes the located binary and returns its output."""
        make_package("10.0.26100.1", tools={"x64": ["fake.exe"]})
        orchestrator = make_orchestrator(FakeInstaller(make_package))
        launched = []

        async def fake_run_tool(tool_path, arguments, print_errors, **kwargs):
            launched.append((tool_path, arguments, print_errors, kwargs["env"]["PATH"]))
            return ToolExecutionResult(0, "ok\n", "")

        monkeypatch.setattr(
            "winapptool.buildtools.orchestrator.run_tool", fake_run_tool
        )

        result = asyncio.run(orchestrator.run("fake", ["--flag"], print_errors=False))

        assert result.stdout == "ok\n"
        (tool_path, arguments, print_errors, path_var) = launched[0]
        assert tool_path.name == "fake.exe"
        assert arguments == ["--flag"]
        assert print_errors is False
        assert path_var.startswith(str(tool_path.parent))

    @pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shebang script")
    def test_run_real_process(self, make_package, make_orchestrator):
        """Test an end-to-end run of an executable found in the cache."""
        root = make_package("10.0.26100.1", tools={"x64": []})
        script = root / "bin" / "10.0.26100.0" / "x64" / "hello.cmd"
        script.write_text(f"#!{sys.executable}\nprint('hello from tool')\n")
        script.chmod(0o755)
        orchestrator = make_orchestrator(FakeInstaller(make_package))

        result = asyncio.run(orchestrator.run("hello"))

        assert result.stdout.strip() == "hello from tool"

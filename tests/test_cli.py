"""
Tests for winapptool.cli module.

Tests command dispatch and exit codes including:
- get-tool-path and tool (run) commands
- update with pin rewriting
- cache get-path, move, and clear
- Error reporting
"""

from __future__ import annotations

import sys

import pytest
import yaml

from winapptool import cli
from winapptool.cache.location import CACHE_DIRECTORY_ENV

pytestmark = pytest.mark.unit

BUILD_TOOLS = "Microsoft.Windows.SDK.BuildTools"


class FakeInstaller:
    def __init__(self, make_package, creates=None, result=True):
        self.make_package = make_package
        self.creates = creates or {}
        self.result = result
        self.calls = []

    async def install(self, package_name, version):
        self.calls.append((package_name, version))
        for pkg_version, tools in self.creates.items():
            self.make_package(pkg_version, tools=tools)
        return self.result


@pytest.fixture
def cli_env(monkeypatch, tmp_test_dir, cache_root):
    """Point the CLI at the temporary cache, home, and working directory."""
    home = tmp_test_dir / "home"
    home.mkdir()
    work = tmp_test_dir / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv(CACHE_DIRECTORY_ENV, str(cache_root))
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def use_installer(monkeypatch):
    """Replace the default NuGet installer with a fake."""

    def _use(installer):
        monkeypatch.setattr(
            "winapptool.buildtools.orchestrator.NugetInstaller",
            lambda resolver: installer,
        )
        return installer

    return _use


def run_cli(*argv: str) -> int:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(list(argv))
    return exc_info.value.code


class TestToolCommands:
    """Tests for get-tool-path and tool."""

    def test_get_tool_path(self, cli_env, make_package, use_installer, capsys):
        """Test that the resolved path is printed."""
        root = make_package("10.0.26100.1", tools={"x64": ["mt.exe"]})
        installer = use_installer(FakeInstaller(make_package))

        code = run_cli("get-tool-path", "mt")

        out = capsys.readouterr().out.strip()
        assert code == 0
        assert out.endswith("mt.exe")
        assert str(root.resolve()) in out
        assert installer.calls == []

    def test_get_tool_path_installs_once(self, cli_env, make_package, use_installer, capsys):
        """Test that a missing tool triggers a single install."""
        installer = use_installer(
            FakeInstaller(
                make_package,
                creates={"10.0.26100.1": {"x64": ["signtool.exe"]}},
            )
        )

        assert run_cli("get-tool-path", "signtool") == 0
        assert len(installer.calls) == 1

    def test_get_tool_path_failure(self, cli_env, make_package, use_installer, capsys):
        """Test that lookup failures print an error and exit 1."""
        use_installer(FakeInstaller(make_package, result=False))

        code = run_cli("get-tool-path", "mt")

        assert code == 1
        assert "Error: Failed to install" in capsys.readouterr().out

    @pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shebang script")
    def test_tool_runs_and_echoes_stdout(self, cli_env, make_package, use_installer, capsys):
        """Test that the tool command passes arguments and echoes stdout and stderr."""
        root = make_package("10.0.26100.1", tools={"x64": []})
        script = root / "bin" / "10.0.26100.0" / "x64" / "echoargs.cmd"
        script.write_text(
            f"#!{sys.executable}\nimport sys\nprint(' '.join(sys.argv[1:]))\n"
            "sys.stderr.write('SignTool Warning: x\\n')\n"
        )
        script.chmod(0o755)
        use_installer(FakeInstaller(make_package))

        code = run_cli("tool", "echoargs", "pack", "/d", "msix")

        captured = capsys.readouterr()
        assert code == 0
        assert captured.out.strip() == "pack /d msix"
        assert "SignTool Warning: x" in captured.err

    @pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shebang script")
    def test_tool_failure_exits_one(self, cli_env, make_package, use_installer, capsys):
        """Test that a failing tool yields exit code 1 and its stderr."""
        root = make_package("10.0.26100.1", tools={"x64": []})
        script = root / "bin" / "10.0.26100.0" / "x64" / "fail.cmd"
        script.write_text(
            f"#!{sys.executable}\nimport sys\nsys.stderr.write('nope\\n')\nsys.exit(2)\n"
        )
        script.chmod(0o755)
        use_installer(FakeInstaller(make_package))

        code = run_cli("run-buildtool", "fail")

        captured = capsys.readouterr()
        assert code == 1
        assert "exit code 2" in captured.out
        assert "nope" in captured.err


class TestUpdateCommand:
    """Tests for update."""

    def test_update_rewrites_pin(self, cli_env, make_package, use_installer, capsys):
        """Test that update installs latest and pins it in winapp.yaml."""
        make_package("10.0.22621.756")
        config = cli_env / "winapp.yaml"
        config.write_text(f"packages:\n  - name: {BUILD_TOOLS}\n    version: '10.0.22621.756'\n")
        installer = use_installer(
            FakeInstaller(make_package, creates={"10.0.26100.1742": {}})
        )

        code = run_cli("update")

        assert code == 0
        assert installer.calls == [(BUILD_TOOLS, None)]
        data = yaml.safe_load(config.read_text())
        assert data["packages"][0]["version"] == "10.0.26100.1742"
        assert "10.0.26100.1742" in capsys.readouterr().out

    def test_update_without_config(self, cli_env, make_package, use_installer):
        """Test that update does not create winapp.yaml."""
        use_installer(FakeInstaller(make_package, creates={"10.0.26100.1742": {}}))

        assert run_cli("update") == 0
        assert not (cli_env / "winapp.yaml").exists()


class TestCacheCommands:
    """Tests for cache get-path, move, and clear."""

    def test_get_path(self, cli_env, cache_root, capsys):
        """Test that the packages directory is printed."""
        assert run_cli("cache", "get-path") == 0
        assert str(cache_root / "packages") in capsys.readouterr().out

    def test_clear_force(self, cli_env, cache_root, make_package):
        """Test that clear --force deletes packages without prompting."""
        make_package("10.0.26100.1")

        assert run_cli("cache", "clear", "--force") == 0
        assert not (cache_root / "packages").exists()

    def test_clear_cancelled(self, cli_env, cache_root, make_package, monkeypatch):
        """Test that declining the prompt keeps packages."""
        make_package("10.0.26100.1")
        monkeypatch.setattr("builtins.input", lambda prompt: "n")

        assert run_cli("cache", "clear") == 0
        assert (cache_root / "packages").exists()

    def test_move_force(self, cli_env, tmp_test_dir, make_package, monkeypatch):
        """Test that move --force relocates packages and records the pointer."""
        make_package("10.0.26100.1")
        new_root = tmp_test_dir / "moved"

        assert run_cli("cache", "move", str(new_root), "--force") == 0
        assert (new_root / "packages" / f"{BUILD_TOOLS}.10.0.26100.1").is_dir()

        pointer = tmp_test_dir / "home" / ".winapp" / "cache_location.txt"
        assert pointer.read_text(encoding="utf-8") == str(new_root.resolve())

    def test_move_to_non_empty_fails(self, cli_env, tmp_test_dir, capsys):
        """Test that moving onto a non-empty directory exits 1."""
        busy = tmp_test_dir / "busy"
        busy.mkdir()
        (busy / "x").write_text("x")

        assert run_cli("cache", "move", str(busy), "--force") == 1
        assert "not empty" in capsys.readouterr().out

"""Tests for SelfRelauncher."""

from unittest.mock import MagicMock

import pytest

from trampoline.environment import EnvironmentPreserver
from trampoline.errors import RelaunchError
from trampoline.relauncher import SelfRelauncher
from trampoline.versions import Version


def _make_relauncher(environ: dict[str, str], execve: MagicMock | None = None) -> SelfRelauncher:
    return SelfRelauncher(
        EnvironmentPreserver(["PATH", "GEM_HOME", "GEM_PATH"]),
        environ=environ,
        program="/usr/bin/ruby",
        argv=["bundle", "install", "--jobs", "4"],
        execve=execve or MagicMock(),
    )


class TestChildEnvironment:
    """Tests for the environment handed to the relaunched process."""

    def test_restores_original_and_pins_version(self):
        """Test that startup mutations are undone and the pin marker is set."""
        environ = {
            "PATH": "/bundle/bin:/usr/bin",
            "BUNDLER_ORIG_PATH": "/usr/bin",
            "BUNDLER_ORIG_GEM_HOME": "BUNDLER_ENV_NIL_VALUE",
            "BUNDLER_ORIG_GEM_PATH": "BUNDLER_ENV_NIL_VALUE",
            "HOME": "/home/me",
        }

        env = _make_relauncher(environ).child_environment(Version("2.4.0"))

        assert env == {"PATH": "/usr/bin", "HOME": "/home/me", "BUNDLER_VERSION": "2.4.0"}

    def test_home_vars_keep_configured_values(self):
        """Test that GEM_HOME/GEM_PATH survive even when the originals were unset."""
        environ = {
            "GEM_HOME": "/vendor/bundle",
            "GEM_PATH": "/vendor/bundle:/usr/lib/gems",
            "BUNDLER_ORIG_GEM_HOME": "BUNDLER_ENV_NIL_VALUE",
            "BUNDLER_ORIG_GEM_PATH": "/usr/lib/gems",
        }

        env = _make_relauncher(environ).child_environment("2.4.0")

        assert env["GEM_HOME"] == "/vendor/bundle"
        assert env["GEM_PATH"] == "/vendor/bundle:/usr/lib/gems"

    def test_overrides_existing_pin_marker(self):
        """Test that the pin marker always names the target version."""
        env = _make_relauncher({"BUNDLER_VERSION": "1.17.3"}).child_environment("2.4.0")
        assert env["BUNDLER_VERSION"] == "2.4.0"

    def test_caller_environ_not_mutated(self):
        """Test that building the child environment leaves the source alone."""
        environ = {"PATH": "/x", "BUNDLER_ORIG_PATH": "/y"}
        _make_relauncher(environ).child_environment("2.4.0")
        assert environ == {"PATH": "/x", "BUNDLER_ORIG_PATH": "/y"}


class TestRelaunchWith:
    """Tests for relaunch_with()."""

    def test_execs_original_command(self):
        """Test that the same program and arguments are re-executed."""
        execve = MagicMock()
        relauncher = _make_relauncher({"PATH": "/usr/bin"}, execve)

        relauncher.relaunch_with(Version("2.4.0"))

        execve.assert_called_once_with(
            "/usr/bin/ruby",
            ["bundle", "install", "--jobs", "4"],
            {"PATH": "/usr/bin", "BUNDLER_VERSION": "2.4.0"},
        )

    def test_exec_failure_is_fatal(self):
        """Test that an OSError from exec becomes RelaunchError."""
        execve = MagicMock(side_effect=FileNotFoundError(2, "No such file or directory"))
        relauncher = _make_relauncher({}, execve)

        with pytest.raises(RelaunchError, match="/usr/bin/ruby") as exc_info:
            relauncher.relaunch_with("2.4.0")
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_defaults_to_running_interpreter(self, monkeypatch):
        """Test the default program and argument vector."""
        monkeypatch.setattr("trampoline.relauncher.sys.executable", "/opt/python")
        monkeypatch.setattr("trampoline.relauncher.sys.orig_argv", ["python", "-m", "tool"])
        execve = MagicMock()
        relauncher = SelfRelauncher(EnvironmentPreserver([]), environ={}, execve=execve)

        relauncher.relaunch_with("2.4.0")

        program, argv, _env = execve.call_args.args
        assert program == "/opt/python"
        assert argv == ["python", "-m", "tool"]

"""Re-executes the current process pinned to another tool version.

This is the only module that performs process replacement.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Mapping, Sequence
from typing import NoReturn

from trampoline.environment import EnvironmentPreserver, build_child_environment
from trampoline.errors import RelaunchError
from trampoline.logging import get_logger
from trampoline.versions import Version

log = get_logger("trampoline.relauncher")


class SelfRelauncher:
    """Replaces the running process with the same command under a pinned version."""

    def __init__(
        self,
        preserver: EnvironmentPreserver,
        pin_env_var: str = "BUNDLER_VERSION",
        home_env_vars: Sequence[str] = ("GEM_HOME", "GEM_PATH"),
        environ: Mapping[str, str] | None = None,
        program: str | None = None,
        argv: Sequence[str] | None = None,
        execve: Callable[[str, Sequence[str], Mapping[str, str]], NoReturn] = os.execve,
    ) -> None:
        self._preserver = preserver
        self._pin_env_var = pin_env_var
        self._home_env_vars = list(home_env_vars)
        self._environ = environ if environ is not None else os.environ
        self._program = program or sys.executable
        self._argv = list(argv) if argv is not None else list(sys.orig_argv)
        self._execve = execve

    def child_environment(self, version: Version | str) -> dict[str, str]:
        """Original environment, current home/path values, and the pin marker."""
        snapshot = dict(self._environ)

        overrides: dict[str, str | None] = {var: snapshot.get(var) for var in self._home_env_vars}
        overrides[self._pin_env_var] = str(version)

        return build_child_environment(self._preserver.restore(snapshot), overrides)

    def relaunch_with(self, version: Version | str) -> NoReturn:
        """Exec the original command line under *version*.

        Raises ``RelaunchError`` if the process could not be replaced.
        """
        env = self.child_environment(version)
        log.info("relauncher_restarting", version=str(version), program=self._program)

        sys.stdout.flush()
        sys.stderr.flush()

        try:
            self._execve(self._program, self._argv, env)
        except OSError as exc:
            log.error("relauncher_exec_failed", program=self._program, error=str(exc))
            raise RelaunchError(f"could not relaunch {self._program}: {exc}") from exc

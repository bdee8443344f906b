"""Installer adapter.

Installs a specific tool version by shelling out to the package manager's
install command, and looks up versions that are already installed. No
retries happen here; the caller owns the retry and fallback policy.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from trampoline.errors import InstallError
from trampoline.logging import get_logger
from trampoline.versions import Version

log = get_logger("trampoline.installer")

_GEM_PATH_TIMEOUT = 30


@dataclass(frozen=True)
class InstalledInfo:
    """A locally installed tool version."""

    name: str
    version: str
    spec_path: Path


class Installer(Protocol):
    def install(self, name: str, version: Version | str) -> None: ...

    def find_installed(self, name: str, version: Version | str) -> InstalledInfo | None: ...


class GemCommandInstaller:
    """Installs versions with ``gem install NAME --version VERSION``."""

    def __init__(
        self,
        command: Sequence[str] = ("gem", "install"),
        home_env_vars: Sequence[str] = ("GEM_HOME", "GEM_PATH"),
        environ: Mapping[str, str] | None = None,
        timeout: float = 600.0,
    ) -> None:
        self._command = list(command)
        self._home_env_vars = list(home_env_vars)
        self._environ = environ if environ is not None else os.environ
        self._timeout = timeout
        self._default_dirs: list[Path] | None = None

    def install(self, name: str, version: Version | str) -> None:
        """Install *name* at exactly *version*; raises ``InstallError``."""
        argv = [*self._command, name, "--version", str(version)]
        log.info("installer_installing", package=name, version=str(version))
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                env=dict(self._environ),
                check=False,
            )
        except FileNotFoundError as exc:
            raise InstallError(f"install command not found: {argv[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            raise InstallError(f"installing {name} {version} timed out after {self._timeout}s") from exc
        except OSError as exc:
            raise InstallError(f"could not run install command: {exc}") from exc

        if proc.returncode != 0:
            log.debug(
                "installer_command_failed",
                cmd=argv,
                returncode=proc.returncode,
                stderr=proc.stderr[:500],
            )
            raise InstallError(
                f"installing {name} {version} failed with exit code {proc.returncode}: "
                f"{proc.stderr.strip()[:200]}"
            )
        log.info("installer_installed", package=name, version=str(version))

    def gem_dirs(self) -> list[Path]:
        """Directories searched for installed versions, in priority order.

        ``GEM_HOME`` then ``GEM_PATH`` entries; with neither set, the path
        reported by ``gem environment gempath``.
        """
        dirs: list[Path] = []
        for var in self._home_env_vars:
            for entry in self._environ.get(var, "").split(os.pathsep):
                if entry and Path(entry) not in dirs:
                    dirs.append(Path(entry))
        if dirs:
            return dirs
        if self._default_dirs is None:
            self._default_dirs = self._query_gem_path()
        return list(self._default_dirs)

    def _query_gem_path(self) -> list[Path]:
        argv = [self._command[0], "environment", "gempath"]
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=_GEM_PATH_TIMEOUT,
                env=dict(self._environ),
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            log.debug("installer_gem_path_unavailable", cmd=argv, error=str(exc))
            return []

        if proc.returncode != 0:
            log.debug("installer_gem_path_unavailable", cmd=argv, returncode=proc.returncode)
            return []

        dirs: list[Path] = []
        for entry in proc.stdout.strip().split(os.pathsep):
            if entry and Path(entry) not in dirs:
                dirs.append(Path(entry))
        return dirs

    def find_installed(self, name: str, version: Version | str) -> InstalledInfo | None:
        filename = f"{name}-{version}.gemspec"
        for gem_dir in self.gem_dirs():
            spec_path = gem_dir / "specifications" / filename
            if spec_path.is_file():
                return InstalledInfo(name=name, version=str(version), spec_path=spec_path)
        return None

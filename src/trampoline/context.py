"""Project-context and platform detection."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from pathlib import Path

MANIFEST_NAMES = ("gems.rb", "Gemfile")


class ProjectContext:
    """Locates the project manifest and its lockfile.

    The manifest is ``$BUNDLE_GEMFILE`` when set, otherwise the first
    ``gems.rb`` or ``Gemfile`` found walking up from *cwd*.
    """

    def __init__(
        self,
        cwd: Path | str | None = None,
        environ: Mapping[str, str] | None = None,
        gemfile_env_var: str = "BUNDLE_GEMFILE",
    ) -> None:
        self._cwd = Path(cwd) if cwd is not None else Path.cwd()
        self._environ = environ if environ is not None else os.environ
        self._gemfile_env_var = gemfile_env_var

    def find_manifest(self) -> Path | None:
        explicit = self._environ.get(self._gemfile_env_var)
        if explicit:
            path = Path(explicit)
            if not path.is_absolute():
                path = self._cwd / path
            return path if path.is_file() else None

        for directory in (self._cwd, *self._cwd.parents):
            for name in MANIFEST_NAMES:
                candidate = directory / name
                if candidate.is_file():
                    return candidate
        return None

    def in_project_context(self) -> bool:
        return self.find_manifest() is not None

    def lockfile_path(self) -> Path | None:
        """``gems.locked`` next to ``gems.rb``, otherwise ``<manifest>.lock``."""
        manifest = self.find_manifest()
        if manifest is None:
            return None
        if manifest.name == "gems.rb":
            return manifest.with_name("gems.locked")
        return manifest.with_name(f"{manifest.name}.lock")


def supports_version_trampolining(enabled: bool = True) -> bool:
    """True when this platform can replace the running process image.

    On Windows ``os.execve`` spawns a child and exits instead of replacing
    the process, which breaks the host's console and exit status.
    """
    return enabled and hasattr(os, "execve") and sys.platform != "win32"

"""Reads the tool version recorded in a project's lockfile."""

from __future__ import annotations

from pathlib import Path

from trampoline.logging import get_logger

log = get_logger("trampoline.lockfile")

BUNDLED_WITH = "BUNDLED WITH"


class Lockfile:
    """A project lockfile; only the ``BUNDLED WITH`` section is read."""

    def __init__(self, path: Path | str | None) -> None:
        self._path = Path(path) if path is not None else None

    @property
    def path(self) -> Path | None:
        return self._path

    def bundled_with(self) -> str | None:
        """Version string of the ``BUNDLED WITH`` section, or None.

        The section is the last one in the file::

            BUNDLED WITH
               2.4.0
        """
        if self._path is None or not self._path.is_file():
            return None

        try:
            contents = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.debug("lockfile_unreadable", path=str(self._path), error=str(exc))
            return None
        if BUNDLED_WITH not in contents:
            return None

        value = contents.split(BUNDLED_WITH)[-1].strip()
        if not value:
            log.debug("lockfile_bundled_with_empty", path=str(self._path))
            return None
        return value.splitlines()[0].strip()

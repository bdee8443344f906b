"""Process environment snapshots.

The host saves the variables it is about to adjust during startup as
``BUNDLER_ORIG_<NAME>`` backups (``BUNDLER_ENV_NIL_VALUE`` for variables that
were unset). Restoring a snapshot undoes those adjustments so a relaunched
process sees the environment the user started with.

All functions here take and return plain mappings; nothing reads or mutates
``os.environ`` implicitly.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

DEFAULT_PREFIX = "BUNDLER_ORIG_"
DEFAULT_NIL_VALUE = "BUNDLER_ENV_NIL_VALUE"


class EnvironmentPreserver:
    """Backs up and restores a fixed set of environment variables."""

    def __init__(
        self,
        keys: Iterable[str],
        prefix: str = DEFAULT_PREFIX,
        nil_value: str = DEFAULT_NIL_VALUE,
    ) -> None:
        self._keys = list(keys)
        self._prefix = prefix
        self._nil_value = nil_value

    def backup(self, environ: Mapping[str, str]) -> dict[str, str]:
        """Return *environ* plus backups of every preserved key.

        Existing backups win, so an already-relaunched process keeps the
        values saved by its first ancestor.
        """
        env = dict(environ)
        for key in self._keys:
            backup_key = self._prefix + key
            if backup_key in env:
                continue
            env[backup_key] = environ.get(key, self._nil_value)
        return env

    def restore(self, environ: Mapping[str, str]) -> dict[str, str]:
        """Return *environ* with backed-up values put back and backups dropped."""
        env = dict(environ)
        for backup_key, value in environ.items():
            if not backup_key.startswith(self._prefix):
                continue
            key = backup_key[len(self._prefix) :]
            del env[backup_key]
            if value == self._nil_value:
                env.pop(key, None)
            else:
                env[key] = value
        return env


def build_child_environment(
    saved_snapshot: Mapping[str, str],
    overrides: Mapping[str, str | None],
) -> dict[str, str]:
    """Copy *saved_snapshot* and apply *overrides*; ``None`` removes a key."""
    env = dict(saved_snapshot)
    for key, value in overrides.items():
        if value is None:
            env.pop(key, None)
        else:
            env[key] = value
    return env

"""Decides which tool version the current process should be running."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from functools import cached_property
from typing import TYPE_CHECKING

from packaging.version import InvalidVersion

from trampoline.context import supports_version_trampolining
from trampoline.logging import get_logger
from trampoline.versions import Version, VersionRequirement

if TYPE_CHECKING:
    from trampoline.context import ProjectContext
    from trampoline.feed import VersionFeedClient
    from trampoline.lockfile import Lockfile

log = get_logger("trampoline.resolver")


class VersionResolver:
    """Resolves target versions for auto-switch, locked install and update.

    The current version, lockfile version and feed listing are each read
    at most once per instance.
    """

    def __init__(
        self,
        current_version: Version | str,
        *,
        lockfile: Lockfile,
        context: ProjectContext,
        feed: VersionFeedClient,
        package_name: str = "bundler",
        pin_env_var: str = "BUNDLER_VERSION",
        environ: Mapping[str, str] | None = None,
        supports_trampolining: Callable[[], bool] = supports_version_trampolining,
    ) -> None:
        self._current_version = Version.coerce(current_version)
        self._lockfile = lockfile
        self._context = context
        self._feed = feed
        self._package_name = package_name
        self._pin_env_var = pin_env_var
        self._environ = environ if environ is not None else os.environ
        self._supports_trampolining = supports_trampolining

    @property
    def current_version(self) -> Version:
        return self._current_version

    @cached_property
    def lockfile_version(self) -> Version | None:
        raw = self._lockfile.bundled_with()
        if raw is None:
            return None
        try:
            return Version(raw)
        except InvalidVersion:
            log.debug("resolver_lockfile_version_invalid", value=raw)
            return None

    @cached_property
    def versions(self) -> list[Version]:
        """Published versions, oldest first. ``FetchError`` propagates."""
        return list(self._feed.versions(self._package_name))

    def running(self, version: Version) -> bool:
        return version == self._current_version

    def running_older_than(self, version: Version) -> bool:
        return self._current_version < version

    def needs_auto_switch(self) -> bool:
        """Whether the lockfile asks for a different, released version."""
        if self._pin_env_var in self._environ:
            return False
        if not self._supports_trampolining():
            return False
        if not self._context.in_project_context():
            return False

        locked = self.lockfile_version
        return locked is not None and locked.released and not self.running(locked)

    def resolve_for_update(self, requirement: VersionRequirement | str) -> Version | None:
        """Highest published version satisfying *requirement*, if switching to it is due.

        Specific requirements may select an older version than the running
        one; range requirements never do. Development builds are never
        returned.
        """
        requirement = VersionRequirement.coerce(requirement)
        if not self.versions:
            return None

        resolved = next(
            (v for v in reversed(self.versions) if requirement.satisfied_by(v)),
            None,
        )
        if resolved is None:
            log.debug("resolver_no_matching_version", requirement=str(requirement))
            return None

        if requirement.is_specific():
            needs_update = not self.running(resolved)
        else:
            needs_update = self.running_older_than(resolved)

        if not (resolved.released and needs_update):
            return None
        return resolved

"""Installs and switches to the tool version a project needs.

Three entry points share one flow: decide on a target version, install it
when needed, then relaunch under it. A failed install is logged and the
current process carries on under the running version; a failed relaunch
is fatal and propagates.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING

from trampoline.config import Settings, get_settings
from trampoline.context import ProjectContext, supports_version_trampolining
from trampoline.environment import EnvironmentPreserver
from trampoline.feed import VersionFeedClient
from trampoline.installer import GemCommandInstaller
from trampoline.lockfile import Lockfile
from trampoline.logging import get_logger
from trampoline.relauncher import SelfRelauncher
from trampoline.resolver import VersionResolver

if TYPE_CHECKING:
    from trampoline.installer import Installer
    from trampoline.versions import Version, VersionRequirement

log = get_logger("trampoline.manager")


class Decision(Enum):
    """Outcome of a workflow."""

    NO_ACTION = "no_action"
    INSTALL_FAILED = "install_failed"
    # Only observed when process replacement is stubbed out
    RELAUNCHED = "relaunched"


class SelfManager:
    """Orchestrates version switching for the running tool.

    Typical use, early in the host's startup::

        manager = SelfManager.from_settings(current_version=TOOL_VERSION)
        manager.restart_with_locked_bundler_if_needed()
    """

    def __init__(
        self,
        resolver: VersionResolver,
        installer: Installer,
        relauncher: SelfRelauncher,
        package_name: str = "bundler",
        tool_name: str = "Bundler",
    ) -> None:
        self._resolver = resolver
        self._installer = installer
        self._relauncher = relauncher
        self._package_name = package_name
        self._tool_name = tool_name

    @classmethod
    def from_settings(
        cls,
        current_version: Version | str,
        settings: Settings | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> SelfManager:
        """Build a manager with the default collaborators."""
        settings = settings or get_settings()
        environ = environ if environ is not None else os.environ

        context = ProjectContext(environ=environ, gemfile_env_var=settings.gemfile_env_var)
        resolver = VersionResolver(
            current_version,
            lockfile=Lockfile(context.lockfile_path()),
            context=context,
            feed=VersionFeedClient(settings.feed_url, timeout=settings.feed_timeout),
            package_name=settings.package_name,
            pin_env_var=settings.pin_env_var,
            environ=environ,
            supports_trampolining=lambda: supports_version_trampolining(
                settings.trampolining_enabled
            ),
        )
        installer = GemCommandInstaller(
            command=settings.install_command,
            home_env_vars=settings.home_env_vars,
            environ=environ,
            timeout=settings.install_timeout,
        )
        relauncher = SelfRelauncher(
            EnvironmentPreserver(
                settings.preserved_env_keys,
                prefix=settings.original_env_prefix,
                nil_value=settings.original_env_nil_value,
            ),
            pin_env_var=settings.pin_env_var,
            home_env_vars=settings.home_env_vars,
            environ=environ,
        )
        return cls(
            resolver,
            installer,
            relauncher,
            package_name=settings.package_name,
            tool_name=settings.tool_name,
        )

    @property
    def resolver(self) -> VersionResolver:
        return self._resolver

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    def restart_with_locked_bundler_if_needed(self) -> Decision:
        """Relaunch under the lockfile version if it is already installed."""
        if not self._resolver.needs_auto_switch():
            return Decision.NO_ACTION

        locked = self._resolver.lockfile_version
        if locked is None or self._installer.find_installed(self._package_name, locked) is None:
            log.debug("manager_locked_version_not_installed", version=str(locked))
            return Decision.NO_ACTION

        self._relauncher.relaunch_with(locked)
        return Decision.RELAUNCHED

    def install_locked_bundler_and_restart_with_it_if_needed(self) -> Decision:
        """Install the lockfile version and relaunch under it."""
        if not self._resolver.needs_auto_switch():
            return Decision.NO_ACTION

        locked = self._resolver.lockfile_version
        if locked is None:
            return Decision.NO_ACTION

        current = self._resolver.current_version
        log.info(
            "manager_lockfile_version_mismatch",
            message=(
                f"{self._tool_name} {current} is running, but your lockfile was generated "
                f"with {locked}. Installing {self._tool_name} {locked} and restarting "
                "using that version."
            ),
            current=str(current),
            locked=str(locked),
        )
        return self._install_and_restart_with(locked)

    def update_bundler_and_restart_with_it_if_needed(
        self, target: VersionRequirement | str
    ) -> Decision:
        """Install the best version matching *target* and relaunch under it.

        ``FetchError`` from the version feed propagates.
        """
        version = self._resolver.resolve_for_update(target)
        if version is None:
            return Decision.NO_ACTION

        log.info(
            "manager_updating",
            message=f"Updating {self._tool_name} to {version}.",
            version=str(version),
        )
        return self._install_and_restart_with(version)

    # ------------------------------------------------------------------
    # Install, then relaunch
    # ------------------------------------------------------------------

    def _install_and_restart_with(self, version: Version) -> Decision:
        current = self._resolver.current_version
        try:
            self._installer.install(self._package_name, version)
        except Exception as exc:
            log.debug("manager_install_error", version=str(version), exc_info=exc)
            log.warning(
                "manager_install_failed",
                message=(
                    f"There was an error installing {self._tool_name} {version}, "
                    "rerun with the `--verbose` flag for more details. "
                    f"Going on using {self._tool_name} {current}."
                ),
                version=str(version),
                current=str(current),
                error=str(exc),
            )
            return Decision.INSTALL_FAILED

        self._relauncher.relaunch_with(version)
        return Decision.RELAUNCHED

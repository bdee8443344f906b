"""Exceptions raised by trampoline."""


class TrampolineError(Exception):
    """Base class for trampoline errors."""


class FetchError(TrampolineError):
    """Raised when the remote version feed cannot be read."""


class InstallError(TrampolineError):
    """Raised when installing a tool version fails."""


class RelaunchError(TrampolineError):
    """Raised when replacing the current process fails."""

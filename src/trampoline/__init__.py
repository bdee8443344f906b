"""Lockfile-driven self-switching for package-manager CLIs.

Decides whether the running tool must switch to the version recorded in a
project's lockfile (or to an explicitly requested one), installs that version
when needed, and re-executes the current process under it.
"""

__version__ = "0.1.0"

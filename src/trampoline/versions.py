"""Version parsing, ordering and requirement matching.

Versions are parsed with :mod:`packaging`; requirements use the Gem-style
constraint syntax understood by the managed tool (``"2.4.0"``, ``">= 2.3"``,
``"~> 2.3"``, ``">= 2.0, < 3"``) and are translated to a
:class:`packaging.specifiers.SpecifierSet` for matching.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field

from packaging.specifiers import SpecifierSet
from packaging.version import Version as _PackagingVersion

# "OP VERSION" or a bare version (implicit "=")
_CLAUSE_RE = re.compile(
    r"^\s*(?:(?P<op>~>|>=|<=|!=|=|>|<)\s*)?" r"(?P<version>[0-9][0-9A-Za-z.\-_]*)\s*$"
)

# Gem operator -> packaging operator, for everything except "~>"
_OPERATORS = {
    "=": "==",
    "!=": "!=",
    ">": ">",
    ">=": ">=",
    "<": "<",
    "<=": "<=",
}

_RANGE_OPERATORS = frozenset({">", ">="})


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A tool version.

    Keeps the text it was parsed from so that ``str(version)`` round-trips
    exactly (``"2.5.0.dev"`` rather than the normalised ``"2.5.0.dev0"``).
    """

    text: str
    parsed: _PackagingVersion = field(init=False, repr=False)

    def __post_init__(self) -> None:
        text = self.text.strip()
        object.__setattr__(self, "text", text)
        object.__setattr__(self, "parsed", _PackagingVersion(text))

    @classmethod
    def coerce(cls, value: Version | str) -> Version:
        """Return *value* as a ``Version``, parsing strings."""
        if isinstance(value, Version):
            return value
        return cls(value)

    @property
    def released(self) -> bool:
        """False for development builds (a ``.dev`` segment), True otherwise."""
        return not self.parsed.is_devrelease

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.parsed == other.parsed

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.parsed < other.parsed

    def __hash__(self) -> int:
        return hash(self.parsed)

    def __str__(self) -> str:
        return self.text


def _pessimistic_upper_bound(version: Version) -> str:
    """Upper bound for ``~> version``: ``2.3.1 -> 2.4``, ``2.3 -> 3``, ``2 -> 3``."""
    release = list(version.parsed.release)
    if len(release) > 1:
        release.pop()
    release[-1] += 1
    return ".".join(str(part) for part in release)


@dataclass(frozen=True)
class VersionRequirement:
    """A version constraint: a specific version or a range.

    Raises ``ValueError`` for constraint strings that do not parse.
    """

    text: str
    clauses: tuple[tuple[str, Version], ...] = field(init=False, repr=False)
    specifier: SpecifierSet = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        parts = [part for part in self.text.split(",") if part.strip()] or [">= 0"]

        clauses: list[tuple[str, Version]] = []
        specifiers: list[str] = []
        for part in parts:
            m = _CLAUSE_RE.match(part)
            if m is None:
                raise ValueError(f"invalid version requirement: {self.text!r}")
            op = m.group("op") or "="
            version = Version(m.group("version"))
            clauses.append((op, version))
            if op == "~>":
                specifiers.append(f">={version.parsed}")
                specifiers.append(f"<{_pessimistic_upper_bound(version)}")
            else:
                specifiers.append(f"{_OPERATORS[op]}{version.parsed}")

        object.__setattr__(self, "clauses", tuple(clauses))
        object.__setattr__(self, "specifier", SpecifierSet(",".join(specifiers)))

    @classmethod
    def coerce(cls, value: VersionRequirement | str) -> VersionRequirement:
        """Return *value* as a ``VersionRequirement``, parsing strings."""
        if isinstance(value, VersionRequirement):
            return value
        return cls(value)

    def is_specific(self) -> bool:
        """True unless this is a single ``>`` or ``>=`` clause."""
        if len(self.clauses) > 1:
            return True
        return self.clauses[0][0] not in _RANGE_OPERATORS

    @property
    def names_development_version(self) -> bool:
        return any(not version.released for _op, version in self.clauses)

    def satisfied_by(self, version: Version) -> bool:
        """Whether *version* meets every clause.

        Pre-releases such as ``rc1`` match like any other version;
        development builds only match when a clause names one.
        """
        if not version.released and not self.names_development_version:
            return False
        return self.specifier.contains(version.parsed, prereleases=True)

    def __str__(self) -> str:
        return ", ".join(f"{op} {version}" for op, version in self.clauses)

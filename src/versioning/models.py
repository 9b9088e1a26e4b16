"""Data models for version ordering and version ranges."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple


class TokenClass(Enum):
    """Character class of a version token."""
    ALPHA = "alpha"
    NUMERIC = "numeric"


class RangeKind(Enum):
    """Shape of a version range key."""
    DEFAULT = "default"  # "" - applies from the earliest known version
    SINGLE = "single"  # v
    CLOSED = "closed"  # [v1,v2]
    OPEN = "open"  # [v1,)


@dataclass(frozen=True)
class Component:
    """One token of a version together with its qualifier depth."""
    depth: int  # incremented for every '-' crossed, '.' keeps the depth
    token: str  # lower-cased


@dataclass(frozen=True)
class Version:
    """A version source string and its decomposition into components."""
    source: str
    components: Tuple[Component, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return self.source


@dataclass(frozen=True)
class VersionRange:
    """A contiguous span of an artifact's ordered versions."""
    kind: RangeKind
    first: Optional[str] = None
    last: Optional[str] = None

    @classmethod
    def default(cls) -> "VersionRange":
        return cls(RangeKind.DEFAULT)

    @classmethod
    def single(cls, version: str) -> "VersionRange":
        return cls(RangeKind.SINGLE, version, version)

    @classmethod
    def closed(cls, first: str, last: str) -> "VersionRange":
        return cls(RangeKind.CLOSED, first, last)

    @classmethod
    def open(cls, first: str) -> "VersionRange":
        return cls(RangeKind.OPEN, first)

    @classmethod
    def spanning(cls, first: str, last: str) -> "VersionRange":
        """Explicit range over [first, last], collapsing to a single version."""
        if first == last:
            return cls.single(first)
        return cls.closed(first, last)

    def __str__(self) -> str:
        if self.kind == RangeKind.DEFAULT:
            return ""
        if self.kind == RangeKind.SINGLE:
            return str(self.first)
        if self.kind == RangeKind.CLOSED:
            return f"[{self.first},{self.last}]"
        return f"[{self.first},)"

    def covers(self, version: Version, claimed: Iterable["VersionRange"] = ()) -> bool:
        """Return True if `version` falls within this range.

        A DEFAULT range covers every version that none of the `claimed`
        sibling ranges covers.
        """
        # Imported here: maven imports this module for its types.
        from .maven import compare_versions, componentize  # pylint: disable=import-outside-toplevel

        if self.kind == RangeKind.DEFAULT:
            return not any(
                other.covers(version) for other in claimed if other.kind != RangeKind.DEFAULT
            )
        if self.kind == RangeKind.SINGLE:
            return version.source == self.first
        lower = compare_versions(componentize(str(self.first)), version) <= 0
        if self.kind == RangeKind.OPEN:
            return lower
        return lower and compare_versions(version, componentize(str(self.last))) <= 0


def expand_ranges(ranges: List[VersionRange], versions: List[Version]) -> List[List[str]]:
    """Re-expand each range into the member versions it covers, in order."""
    return [
        [v.source for v in versions if r.covers(v, ranges)]
        for r in ranges
    ]

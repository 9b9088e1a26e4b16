"""Data models for keysmap entries and canonical keysmap lines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from common.errors import KeysmapInvariantError
from versioning.models import Version, VersionRange

FINGERPRINT_LENGTH = 20


class FingerprintKind(Enum):
    """The four mutually exclusive fingerprint states."""
    UNSET = "unset"  # not yet observed; never written
    CONCRETE = "concrete"
    NO_SIGNATURE = "noSig"
    NO_KEY = "noKey"


@dataclass(frozen=True)
class Fingerprint:
    """Expected signing key state; only CONCRETE carries a 20-byte value."""
    kind: FingerprintKind
    value: bytes = b""

    def __post_init__(self) -> None:
        if self.kind == FingerprintKind.CONCRETE:
            if len(self.value) != FINGERPRINT_LENGTH:
                raise KeysmapInvariantError(
                    f"BUG: concrete fingerprint must be {FINGERPRINT_LENGTH} bytes, got {len(self.value)}"
                )
        elif self.value:
            raise KeysmapInvariantError(f"BUG: {self.kind.value} fingerprint cannot carry a value")

    @classmethod
    def concrete(cls, value: bytes) -> "Fingerprint":
        """Build a Concrete fingerprint; all-zero bytes are the no-signature sentinel."""
        if value == bytes(FINGERPRINT_LENGTH):
            return NO_SIGNATURE
        return cls(FingerprintKind.CONCRETE, bytes(value))

    @property
    def is_concrete(self) -> bool:
        return self.kind == FingerprintKind.CONCRETE

    @property
    def is_set(self) -> bool:
        return self.kind != FingerprintKind.UNSET


UNSET = Fingerprint(FingerprintKind.UNSET)
NO_SIGNATURE = Fingerprint(FingerprintKind.NO_SIGNATURE)
NO_KEY = Fingerprint(FingerprintKind.NO_KEY)


@dataclass(frozen=True, order=True)
class Identifier:
    """A `group:artifact` pair. Orders by its rendered string."""
    key: str = field(init=False, repr=False)
    group: str = field(compare=False)
    artifact: str = field(compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", f"{self.group}:{self.artifact}")

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class KeysmapEntry:
    """One parsed `group:artifact:version = value` fact."""
    identifier: Identifier
    version: Version
    fingerprint: Fingerprint


@dataclass
class Keysmap:
    """Parsed keysmap: identifier -> version string -> fingerprint.

    Iteration helpers are sorted; dict order is never relied upon for output.
    """
    artifacts: Dict[Identifier, Dict[str, Fingerprint]] = field(default_factory=dict)
    groups: Set[str] = field(default_factory=set)
    identifiers: Set[Identifier] = field(default_factory=set)

    def add(self, entry: KeysmapEntry) -> bool:
        """Record an entry. Returns True if it replaced an earlier value."""
        self.groups.add(entry.identifier.group)
        self.identifiers.add(entry.identifier)
        versions = self.artifacts.setdefault(entry.identifier, {})
        replaced = entry.version.source in versions
        versions[entry.version.source] = entry.fingerprint
        return replaced

    def sorted_groups(self) -> List[str]:
        return sorted(self.groups)

    def sorted_identifiers(self, group: Optional[str] = None) -> List[Identifier]:
        return sorted(i for i in self.identifiers if group is None or i.group == group)

    def group_fingerprints(self, group: str) -> List[Fingerprint]:
        """All fingerprints recorded under a group, in deterministic order."""
        return [
            fpr
            for identifier in self.sorted_identifiers(group)
            for _, fpr in sorted(self.artifacts[identifier].items())
        ]

    def __len__(self) -> int:
        return sum(len(v) for v in self.artifacts.values())


@dataclass(frozen=True)
class CanonicalLine:
    """One canonical output fact.

    `artifact` is None for a whole-group line; `version_range` is None for an
    artifact-level line (whole-artifact collapse, default range or multi-key
    summary).
    """
    group: str
    artifact: Optional[str] = None
    version_range: Optional[VersionRange] = None
    fingerprints: Tuple[Fingerprint, ...] = ()

    @property
    def key(self) -> str:
        key = self.group
        if self.artifact is not None:
            key += ":" + self.artifact
            if self.version_range is not None and str(self.version_range):
                key += ":" + str(self.version_range)
        return key

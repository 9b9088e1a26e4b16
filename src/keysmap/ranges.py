"""Range canonicalization of a parsed keysmap.

For every group, either collapse the whole group into a single line (all
artifacts and versions share one fingerprint state) or compact each
artifact's ordered versions into maximal runs of equal state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from common.errors import KeysmapInvariantError
from common.logging_utils import extra_context, is_debug_enabled
from versioning.maven import compare_versions, order_versions
from versioning.models import RangeKind, Version, VersionRange

from .models import UNSET, CanonicalLine, Fingerprint, Identifier, Keysmap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionRun:
    """A maximal run of consecutive versions sharing one fingerprint state."""
    versions: Tuple[Version, ...]
    fingerprint: Fingerprint
    version_range: VersionRange

    @property
    def explicit_range(self) -> VersionRange:
        """The run's range spelled out with both of its bounds."""
        return VersionRange.spanning(self.versions[0].source, self.versions[-1].source)


def expect_fingerprint_set(fingerprint: Fingerprint) -> None:
    if not fingerprint.is_set:
        raise KeysmapInvariantError("BUG: fingerprint should not be the 'unset' marker")


def shared_fingerprint(fingerprints: Iterable[Fingerprint]) -> Fingerprint:
    """Return the state shared by all fingerprints, or UNSET if they differ or are empty."""
    shared = UNSET
    for fpr in fingerprints:
        if not shared.is_set:
            shared = fpr
        elif fpr != shared:
            return UNSET
    return shared


def _equal_classes(ordered: List[Version]) -> List[List[Version]]:
    """Split ordered versions into classes that compare equal (`1`, `1.0`, `1-ga`)."""
    classes: List[List[Version]] = []
    for version in ordered:
        if classes and compare_versions(classes[-1][-1], version) == 0:
            classes[-1].append(version)
        else:
            classes.append([version])
    return classes


def _run_units(versions: Dict[str, Fingerprint]) -> List[Tuple[Tuple[Version, ...], bool]]:
    """Return `(members, pinned)` units in Maven order.

    A class of equal versions sharing one state is a single unit. A class
    whose members disagree is split into pinned single-version units, since
    no range bound can tell its members apart.
    """
    units: List[Tuple[Tuple[Version, ...], bool]] = []
    for members in _equal_classes(order_versions(versions)):
        if len({versions[v.source] for v in members}) == 1:
            units.append((tuple(members), False))
        else:
            units.extend(((v,), True) for v in members)
    return units


def artifact_runs(versions: Dict[str, Fingerprint]) -> List[VersionRun]:
    """Compact an artifact's versions into runs of equal fingerprint state.

    The run starting at the earliest version gets the default range, a final
    run starting later is open-ended, and other runs are a single version or a
    closed range. Versions that compare equal to a sibling with another state
    always get a single-version line of their own; no run starts or ends on
    them.
    """
    units = _run_units(versions)
    runs: List[VersionRun] = []
    i = 0
    while i < len(units):
        members, pinned = units[i]
        fingerprint = versions[members[0].source]
        j = i + 1
        if not pinned:
            while j < len(units) and not units[j][1] and versions[units[j][0][0].source] == fingerprint:
                members += units[j][0]
                j += 1
        if pinned:
            version_range = VersionRange.single(members[0].source)
        elif i == 0:
            version_range = VersionRange.default()
        elif j == len(units):
            version_range = VersionRange.open(members[0].source)
        else:
            version_range = VersionRange.spanning(members[0].source, members[-1].source)
        runs.append(VersionRun(members, fingerprint, version_range))
        i = j
    return runs


def _line_range(version_range: VersionRange) -> Optional[VersionRange]:
    # The default range is rendered as an artifact-level line.
    return None if version_range.kind == RangeKind.DEFAULT else version_range


def canonicalize_artifact(identifier: Identifier, versions: Dict[str, Fingerprint]) -> List[CanonicalLine]:
    """Canonical lines for one artifact.

    An artifact whose runs carry more than one distinct key fingerprint is
    reported as a single line listing those fingerprints (sorted by raw
    bytes). Runs without a signature or without a known key are never folded
    into that list and keep an explicit range line of their own.
    """
    runs = artifact_runs(versions)
    keys = sorted({run.fingerprint for run in runs if run.fingerprint.is_concrete}, key=lambda f: f.value)
    lines: List[CanonicalLine] = []
    if len(keys) > 1:
        if is_debug_enabled(logger):
            logger.debug(
                "%s used %d distinct keys",
                identifier,
                len(keys),
                extra=extra_context(event="multi_key", component="canonicalize", count=len(keys)),
            )
        lines.append(CanonicalLine(identifier.group, identifier.artifact, None, tuple(keys)))
        for run in runs:
            if not run.fingerprint.is_concrete:
                lines.append(CanonicalLine(identifier.group, identifier.artifact, run.explicit_range, (run.fingerprint,)))
        return lines

    for run in runs:
        expect_fingerprint_set(run.fingerprint)
        lines.append(
            CanonicalLine(identifier.group, identifier.artifact, _line_range(run.version_range), (run.fingerprint,))
        )
    return lines


def canonicalize_group(group: str, keysmap: Keysmap) -> List[CanonicalLine]:
    """Canonical lines for one group, collapsing the group when possible."""
    group_fingerprint = shared_fingerprint(keysmap.group_fingerprints(group))
    if group_fingerprint.is_set:
        return [CanonicalLine(group, None, None, (group_fingerprint,))]
    lines: List[CanonicalLine] = []
    for identifier in keysmap.sorted_identifiers(group):
        lines.extend(canonicalize_artifact(identifier, keysmap.artifacts[identifier]))
    return lines


def canonicalize(keysmap: Keysmap) -> Iterator[CanonicalLine]:
    """Yield canonical lines for every group in ascending order."""
    for group in keysmap.sorted_groups():
        yield from canonicalize_group(group, keysmap)

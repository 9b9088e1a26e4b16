"""Keysmap line parsing.

Input lines follow `<group>:<artifact>:<version> = <value>`, where value is
`0x<40 hex digits>`, `noKey`, `noSig` or empty. Canonical output lines can be
read back with parse_canonical_line().
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Tuple

from common.errors import MalformedLineError
from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants
from versioning.maven import componentize
from versioning.models import VersionRange

from .models import (
    FINGERPRINT_LENGTH,
    NO_KEY,
    NO_SIGNATURE,
    Fingerprint,
    Identifier,
    Keysmap,
    KeysmapEntry,
    CanonicalLine,
)

logger = logging.getLogger(__name__)

_NAME = r"[A-Za-z0-9._-]+"
_VERSION = r"[A-Za-z0-9][A-Za-z0-9._-]*"
_HEX_VALUE = r"0x[0-9A-Fa-f]*"

KEYSMAP_LINE = re.compile(
    rf"^({_NAME}):({_NAME}):({_VERSION})\s*=\s*"
    rf"(?:0x([0-9A-Fa-f]*)|({Constants.TOKEN_NO_KEY})|({Constants.TOKEN_NO_SIG}))?$"
)
CANONICAL_LINE = re.compile(
    rf"^({_NAME})(?::({_NAME})(?::({_VERSION}|\[{_VERSION},{_VERSION}\]|\[{_VERSION},\)))?)?"
    rf"\s*=\s*(.*)$"
)
_RANGE = re.compile(rf"^\[({_VERSION}),({_VERSION})?[\])]$")
_EMPTY_COMPONENT = re.compile(r"[.-]{2}")


def decode_fingerprint(hex_digits: str, line: str) -> Fingerprint:
    """Decode exactly 40 hex digits into a fingerprint."""
    if len(hex_digits) != 2 * FINGERPRINT_LENGTH:
        raise MalformedLineError(line, f"Incorrect length for key fingerprint: {len(hex_digits)} hex digits")
    return Fingerprint.concrete(bytes.fromhex(hex_digits))


def _decode_value(value: str, line: str) -> Fingerprint:
    value = value.strip()
    if not value or value == Constants.TOKEN_NO_SIG:
        return NO_SIGNATURE
    if value == Constants.TOKEN_NO_KEY:
        return NO_KEY
    if re.fullmatch(_HEX_VALUE, value):
        return decode_fingerprint(value[2:], line)
    raise MalformedLineError(line, f"Unrecognized fingerprint value {value!r}")


def _is_skippable(line: str) -> bool:
    return not line or line.startswith(Constants.COMMENT_PREFIX)


def parse_line(line: str) -> Optional[KeysmapEntry]:
    """Parse one input line.

    Returns:
        KeysmapEntry, or None for blank and comment lines.

    Raises:
        MalformedLineError: if the line does not match the grammar or carries
            a fingerprint of the wrong length.
    """
    line = line.strip()
    if _is_skippable(line):
        return None
    match = KEYSMAP_LINE.match(line)
    if match is None:
        raise MalformedLineError(line, "Line does not match format")
    group, artifact, version, hex_digits, no_key, _no_sig = match.groups()
    if _EMPTY_COMPONENT.search(version):
        raise MalformedLineError(line, "Version has an empty component")

    if hex_digits is not None:
        fingerprint = decode_fingerprint(hex_digits, line)
    elif no_key is not None:
        fingerprint = NO_KEY
    else:
        fingerprint = NO_SIGNATURE
    return KeysmapEntry(
        identifier=Identifier(group, artifact),
        version=componentize(version),
        fingerprint=fingerprint,
    )


def read_keysmap(lines: Iterable[str]) -> Keysmap:
    """Read all lines into a Keysmap, skipping malformed lines with a warning."""
    keysmap = Keysmap()
    skipped = 0
    for lineno, line in enumerate(lines, start=1):
        try:
            entry = parse_line(line)
        except MalformedLineError as e:
            skipped += 1
            logger.warning(
                "Line %d: %s: %s",
                lineno,
                e.reason,
                e.line,
                extra=extra_context(event="parse_error", component="parser", line_number=lineno),
            )
            continue
        if entry is None:
            continue
        if keysmap.add(entry) and is_debug_enabled(logger):
            logger.debug(
                "Line %d overrides earlier value for %s:%s",
                lineno,
                entry.identifier,
                entry.version,
                extra=extra_context(event="duplicate", component="parser", line_number=lineno),
            )
    logger.info(
        "Read %d entries in %d groups (%d lines skipped)",
        len(keysmap),
        len(keysmap.groups),
        skipped,
    )
    return keysmap


def _parse_range(text: Optional[str]) -> Optional[VersionRange]:
    if text is None:
        return None
    match = _RANGE.match(text)
    if match is None:
        return VersionRange.single(text)
    first, last = match.groups()
    if last is None:
        return VersionRange.open(first)
    return VersionRange.closed(first, last)


def _split_values(value: str, line: str) -> Tuple[Fingerprint, ...]:
    parts = [p for p in (v.strip() for v in value.split(",")) if p]
    if len(parts) <= 1:
        return (_decode_value(value, line),)
    fingerprints = tuple(_decode_value(p, line) for p in parts)
    if not all(f.is_concrete for f in fingerprints):
        raise MalformedLineError(line, "Fingerprint lists may only contain key fingerprints")
    return fingerprints


def parse_canonical_line(line: str) -> CanonicalLine:
    """Parse one line of canonical output back into a CanonicalLine.

    Raises:
        MalformedLineError: if the line does not match the output grammar.
    """
    line = line.strip()
    match = CANONICAL_LINE.match(line)
    if match is None:
        raise MalformedLineError(line, "Line does not match canonical format")
    group, artifact, range_text, value = match.groups()
    return CanonicalLine(
        group=group,
        artifact=artifact,
        version_range=_parse_range(range_text),
        fingerprints=_split_values(value, line),
    )

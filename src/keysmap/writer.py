"""Rendering canonical keysmap lines."""

from __future__ import annotations

import logging
from typing import Iterable, TextIO

from common.errors import KeysmapInvariantError
from constants import Constants

from .models import CanonicalLine, Fingerprint, FingerprintKind

logger = logging.getLogger(__name__)


def format_fingerprint(fingerprint: Fingerprint) -> str:
    if fingerprint.kind == FingerprintKind.CONCRETE:
        return Constants.FINGERPRINT_PREFIX + fingerprint.value.hex().upper()
    if fingerprint.kind == FingerprintKind.NO_KEY:
        return Constants.TOKEN_NO_KEY
    if fingerprint.kind == FingerprintKind.NO_SIGNATURE:
        return ""
    raise KeysmapInvariantError("BUG: fingerprint should not be the 'unset' marker")


def format_line(line: CanonicalLine) -> str:
    """Render `<key> = <value>`; a missing signature renders as `<key> =`."""
    value = Constants.FINGERPRINT_SEPARATOR.join(format_fingerprint(f) for f in line.fingerprints)
    if not value:
        return f"{line.key} ="
    return f"{line.key} = {value}"


def write_keysmap(lines: Iterable[CanonicalLine], stream: TextIO) -> int:
    """Write canonical lines to `stream`. Returns the number of lines written."""
    count = 0
    for line in lines:
        if not line.fingerprints:
            logger.debug("Skipping %s: no fingerprints collected", line.key)
            continue
        stream.write(format_line(line) + "\n")
        count += 1
    return count

"""Keysmap parsing, range canonicalization and rendering."""

from .ranges import canonicalize
from .models import (
    NO_KEY,
    NO_SIGNATURE,
    UNSET,
    CanonicalLine,
    Fingerprint,
    FingerprintKind,
    Identifier,
    Keysmap,
    KeysmapEntry,
)
from .parser import parse_canonical_line, parse_line, read_keysmap
from .writer import format_line, write_keysmap

__all__ = [
    "NO_KEY",
    "NO_SIGNATURE",
    "UNSET",
    "CanonicalLine",
    "Fingerprint",
    "FingerprintKind",
    "Identifier",
    "Keysmap",
    "KeysmapEntry",
    "canonicalize",
    "format_line",
    "parse_canonical_line",
    "parse_line",
    "read_keysmap",
    "write_keysmap",
]

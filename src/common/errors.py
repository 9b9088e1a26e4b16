"""Exception hierarchy shared by the keysmap parser, comparator and writer."""

from __future__ import annotations


class KeysmapError(Exception):
    """Base class for all keysmap canonicalization errors."""


class MalformedLineError(KeysmapError, ValueError):
    """A keysmap line could not be decoded. Recoverable: the line is skipped."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"{reason}: {line}")
        self.line = line
        self.reason = reason


class KeysmapInvariantError(KeysmapError, AssertionError):
    """A programming defect. Never caught below the CLI entrypoint."""


class VersionInvariantError(KeysmapInvariantError):
    """A version token the comparator cannot classify."""

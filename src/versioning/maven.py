"""Maven version ordering.

Implements the ordering rules of Maven's ComparableVersion
(https://maven.apache.org/ref/3.6.3/maven-artifact/xref/org/apache/maven/artifact/versioning/ComparableVersion.html):

1. components are all-alpha or all-numeric;
2. separators are '-', '.' and the implicit alpha/numeric transition;
3. well-known qualifiers (case insensitive) order as
   alpha/a < beta/b < milestone/m < rc/cr < snapshot < ""/ga/final/release < sp,
   unknown qualifiers come after known qualifiers, in lexical order;
4. a component preceded by '-' is less important than one preceded by '.'.
"""

from __future__ import annotations

import string
from functools import cmp_to_key
from typing import Iterable, List, Sequence, Tuple

from common.errors import VersionInvariantError

from .models import Component, TokenClass, Version

# Offset applied to numerics > 0 so that "sp" and unknown labels fit below
# them on the same integer line.
EXTRAORDINARY_LABEL_OFFSET = 2

SEPARATORS = ".-"
QUALIFIER_SEPARATOR = "-"

_QUALIFIER_VALUES = {
    "a": -5,
    "alpha": -5,
    "b": -4,
    "beta": -4,
    "m": -3,
    "milestone": -3,
    "rc": -2,
    "cr": -2,
    "snapshot": -1,
    "": 0,
    "ga": 0,
    "final": 0,
    "release": 0,
    "sp": 1,
}

_ALPHA_CHARS = frozenset(string.ascii_letters + "_")
_NUMERIC_CHARS = frozenset(string.digits)


def classify(token: str) -> TokenClass:
    """Classify a non-empty token by its trailing character."""
    char = token[-1]
    if char in _NUMERIC_CHARS:
        return TokenClass.NUMERIC
    if char in _ALPHA_CHARS:
        return TokenClass.ALPHA
    raise VersionInvariantError(f"BUG: unknown token type {char!r} in {token!r}")


def valuate(token: str) -> int:
    """Determine a symbolic value for a token, for mixed numeric/alpha comparison."""
    if not token:
        return 0
    if classify(token) == TokenClass.NUMERIC:
        num = int(token)
        if num == 0:
            return 0
        # numerics > 0 always outrank alpha components
        return num + EXTRAORDINARY_LABEL_OFFSET
    return _QUALIFIER_VALUES.get(token.lower(), EXTRAORDINARY_LABEL_OFFSET)


def componentize(source: str) -> Version:
    """Split a version string into components.

    Raises:
        VersionInvariantError: on an empty component between separators or an
            unclassifiable character.
    """
    components: List[Component] = []
    depth = 0
    current = ""
    for char in source:
        if char in SEPARATORS:
            if not current:
                raise VersionInvariantError(
                    f"BUG: separator {char!r} does not terminate a component in {source!r}"
                )
            components.append(Component(depth, current.lower()))
            current = ""
            if char == QUALIFIER_SEPARATOR:
                depth += 1
            continue
        if current and classify(current) != classify(char):
            # implicit separation
            components.append(Component(depth, current.lower()))
            current = ""
        current += char
    if current:
        components.append(Component(depth, current.lower()))
    return Version(source=source, components=tuple(components))


def _padded(components: Sequence[Component], length: int) -> Tuple[Component, ...]:
    depth = components[-1].depth if components else 0
    padding = (Component(depth, ""),) * (length - len(components))
    return tuple(components) + padding


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _compare_across_depth(shallow_value: int, deep_value: int) -> int:
    """Compare a shallower component against a deeper one, from the shallow side."""
    if shallow_value < 0:
        return -1
    if deep_value < 0:
        return 1
    if shallow_value > 0:
        return 1
    if deep_value > 0:
        return -1
    return 0


def _compare_components(left: Component, right: Component) -> int:
    left_value = valuate(left.token)
    right_value = valuate(right.token)
    if left.depth < right.depth:
        return _compare_across_depth(left_value, right_value)
    if left.depth > right.depth:
        return -_compare_across_depth(right_value, left_value)
    if left_value != right_value:
        return _sign(left_value - right_value)
    if left_value == EXTRAORDINARY_LABEL_OFFSET and left.token != right.token:
        return -1 if left.token < right.token else 1
    return 0


def compare_versions(left: Version, right: Version) -> int:
    """Three-way comparison of two versions: -1, 0 or 1."""
    length = max(len(left.components), len(right.components))
    for a, b in zip(_padded(left.components, length), _padded(right.components, length)):
        result = _compare_components(a, b)
        if result:
            return result
    return 0


def _compare_strict(left: Version, right: Version) -> int:
    result = compare_versions(left, right)
    if result:
        return result
    # equal under Maven rules, e.g. "1" and "1.0"
    return -1 if left.source < right.source else int(left.source > right.source)


def order_versions(sources: Iterable[str]) -> List[Version]:
    """Sort version strings in ascending Maven order."""
    return sorted((componentize(s) for s in sources), key=cmp_to_key(_compare_strict))

"""Maven version ordering."""

from .maven import compare_versions, componentize, order_versions, valuate
from .models import Component, RangeKind, Version, VersionRange

__all__ = [
    "Component",
    "RangeKind",
    "Version",
    "VersionRange",
    "compare_versions",
    "componentize",
    "order_versions",
    "valuate",
]

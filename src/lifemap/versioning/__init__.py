"""Maven version ordering and version range semantics."""

from .ranges import InvalidVersionRange, VersionRange, compare_versions, parse_version_range

__all__ = [
    "InvalidVersionRange",
    "VersionRange",
    "compare_versions",
    "parse_version_range",
]

"""Maven version range parsing and containment.

Supports bracket notation (``[1.0,2.0)``, ``(,1.0]``, ``[1.5,)``), exact
ranges (``[1.2]``), unions (``(,1.0],[1.2,)``) and bare versions. A bare
version is a soft recommendation and, as in Maven, contains every version.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

from packaging import version as pep440

_QUALIFIER_ORDER = ["alpha", "beta", "milestone", "rc", "snapshot", "", "sp"]
_QUALIFIER_ALIASES = {
    "a": "alpha",
    "b": "beta",
    "m": "milestone",
    "cr": "rc",
    "ga": "",
    "final": "",
    "release": "",
}
_RELEASE_RANK = _QUALIFIER_ORDER.index("")
_TOKEN_RE = re.compile(r"\d+|[a-z]+")


class InvalidVersionRange(ValueError):
    """Raised when a version range specification cannot be parsed."""


def _maven_item(token: str) -> Tuple[int, int, str]:
    if token.isdigit():
        return (1, int(token), "")
    qualifier = _QUALIFIER_ALIASES.get(token, token)
    if qualifier in _QUALIFIER_ORDER:
        return (0, _QUALIFIER_ORDER.index(qualifier), "")
    return (0, len(_QUALIFIER_ORDER), qualifier)


def _maven_compare(left: str, right: str) -> int:
    """Compare two versions with Maven-style tokenized ordering."""
    left_items = [_maven_item(t) for t in _TOKEN_RE.findall(left.lower())]
    right_items = [_maven_item(t) for t in _TOKEN_RE.findall(right.lower())]
    for idx in range(max(len(left_items), len(right_items))):
        a = left_items[idx] if idx < len(left_items) else None
        b = right_items[idx] if idx < len(right_items) else None
        # A missing item pads as 0 against a number and as a release against a qualifier
        if a is None:
            a = (1, 0, "") if b[0] == 1 else (0, _RELEASE_RANK, "")
        if b is None:
            b = (1, 0, "") if a[0] == 1 else (0, _RELEASE_RANK, "")
        if a != b:
            return -1 if a < b else 1
    return 0


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1 as ``left`` sorts before, equal to or after ``right``.

    PEP 440 ordering is used when both strings parse; anything else (SNAPSHOT
    builds, ``.RELEASE`` suffixes) falls back to Maven-style token ordering.
    Never raises.
    """
    try:
        a = pep440.Version(left)
        b = pep440.Version(right)
    except pep440.InvalidVersion:
        return _maven_compare(left, right)
    if a == b:
        return 0
    return -1 if a < b else 1


@dataclass(frozen=True)
class Restriction:
    """One bracketed interval of a range. ``None`` bounds are unbounded."""

    lower: Optional[str]
    lower_inclusive: bool
    upper: Optional[str]
    upper_inclusive: bool

    def contains(self, candidate: str) -> bool:
        if self.lower is not None:
            cmp = compare_versions(candidate, self.lower)
            if cmp < 0 or (cmp == 0 and not self.lower_inclusive):
                return False
        if self.upper is not None:
            cmp = compare_versions(candidate, self.upper)
            if cmp > 0 or (cmp == 0 and not self.upper_inclusive):
                return False
        return True


EVERYTHING = Restriction(None, False, None, False)


@dataclass(frozen=True)
class VersionRange:
    """A parsed version range."""

    spec: str
    restrictions: Tuple[Restriction, ...]
    recommended: Optional[str] = None

    def contains(self, candidate: str) -> bool:
        """Return True when ``candidate`` falls in any restriction."""
        return any(r.contains(candidate) for r in self.restrictions)

    def __str__(self) -> str:
        return self.spec


def _parse_restriction(spec: str) -> Restriction:
    lower_inclusive = spec.startswith("[")
    upper_inclusive = spec.endswith("]")
    inner = spec[1:-1].strip()

    if "," not in inner:
        if not inner:
            raise InvalidVersionRange(f"Empty range '{spec}'")
        if not (lower_inclusive and upper_inclusive):
            raise InvalidVersionRange(f"Single version must be surrounded by []: '{spec}'")
        return Restriction(inner, True, inner, True)

    parts = inner.split(",")
    if len(parts) != 2:
        raise InvalidVersionRange(f"Range cannot have more than two bounds: '{spec}'")
    lower = parts[0].strip() or None
    upper = parts[1].strip() or None
    if lower is not None and upper is not None and compare_versions(upper, lower) < 0:
        raise InvalidVersionRange(f"Range defies version ordering: '{spec}'")
    return Restriction(lower, lower_inclusive, upper, upper_inclusive)


@lru_cache(maxsize=512)
def parse_version_range(spec: str) -> VersionRange:
    """Parse a Maven version range specification.

    Args:
        spec: Range specification, e.g. "[1.0,2.0)" or "1.2"

    Returns:
        VersionRange

    Raises:
        InvalidVersionRange: when the specification is malformed.
    """
    if spec is None or not spec.strip():
        raise InvalidVersionRange("Version range must not be blank")

    process = spec.strip()
    restrictions: List[Restriction] = []
    while process.startswith("[") or process.startswith("("):
        close_paren = process.find(")")
        close_bracket = process.find("]")
        index = close_bracket
        if close_bracket < 0 or (0 <= close_paren < close_bracket):
            index = close_paren
        if index < 0:
            raise InvalidVersionRange(f"Unbounded range: '{spec}'")

        restriction = _parse_restriction(process[:index + 1])
        if restrictions:
            previous = restrictions[-1]
            if (previous.upper is None or restriction.lower is None
                    or compare_versions(restriction.lower, previous.upper) < 0):
                raise InvalidVersionRange(f"Ranges overlap: '{spec}'")
        restrictions.append(restriction)

        process = process[index + 1:].strip()
        if process.startswith(","):
            process = process[1:].strip()

    if process:
        if restrictions:
            raise InvalidVersionRange(f"Only fully-qualified sets allowed in multiple set scenario: '{spec}'")
        if any(ch in process for ch in "[]()"):
            raise InvalidVersionRange(f"Unbalanced range: '{spec}'")
        return VersionRange(spec=spec.strip(), restrictions=(EVERYTHING,), recommended=process)

    return VersionRange(spec=spec.strip(), restrictions=tuple(restrictions))

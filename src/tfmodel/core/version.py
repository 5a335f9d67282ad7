"""Version constraint strings such as ``">= 1.0, < 2.0"`` or ``"~> 3.14"``.

A constraint string is a comma-separated conjunction. Each part is an
optional operator followed by a version; a bare version is an exact match.
"""

import re

from tfmodel.errors import ConstraintParseError
from tfmodel.models import Constraint, Range, Version

_VERSION_PATTERN = (
    r"v?(?P<segments>[0-9]+(?:\.[0-9]+)*?)"
    r"(?:-(?P<numeric_pre>[0-9]+[0-9A-Za-z\-~]*(?:\.[0-9A-Za-z\-~]+)*)"
    r"|-?(?P<alpha_pre>[A-Za-z\-~]+[0-9A-Za-z\-~]*(?:\.[0-9A-Za-z\-~]+)*))?"
    r"(?:\+(?P<metadata>[0-9A-Za-z\-~]+(?:\.[0-9A-Za-z\-~]+)*))?"
)
_VERSION_RE = re.compile(rf"\s*{_VERSION_PATTERN}\s*")
_CONSTRAINT_RE = re.compile(rf"\s*(?P<operator>~>|>=|<=|!=|=|>|<)?\s*(?P<version>{_VERSION_PATTERN})\s*")


def _version_from_match(match: re.Match[str], original: str) -> Version:
    segments = [int(part) for part in match.group("segments").split(".")]
    specified = len(segments)
    segments.extend([0] * (3 - len(segments)))
    return Version(
        segments=tuple(segments),
        specified=specified,
        prerelease=match.group("numeric_pre") or match.group("alpha_pre") or "",
        metadata=match.group("metadata") or "",
        original=original.strip(),
    )


def parse_version(text: str) -> Version:
    match = _VERSION_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"Malformed version: {text}")
    return _version_from_match(match, text)


def parse_constraints(text: str, subject: Range | None = None) -> tuple[Constraint, ...]:
    """Parse a constraint string into an ordered tuple of constraints.

    Raises ConstraintParseError carrying the grammar's own message, e.g.
    ``Malformed constraint: not-a-version``.
    """
    constraints: list[Constraint] = []
    for part in text.split(","):
        match = _CONSTRAINT_RE.fullmatch(part)
        if match is None:
            raise ConstraintParseError(
                "Invalid version constraint",
                f"This string does not use correct version constraint syntax. Malformed constraint: {part}",
                subject,
            )
        version = _version_from_match(match, match.group("version"))
        constraints.append(Constraint(operator=match.group("operator") or "", version=version))
    return tuple(constraints)


def _compare_prerelease_parts(left: str, right: str) -> int:
    if left == right:
        return 0
    if left.isdigit() and right.isdigit():
        return (int(left) > int(right)) - (int(left) < int(right))
    if left.isdigit():
        return -1
    if right.isdigit():
        return 1
    return (left > right) - (left < right)


def _compare_prereleases(left: str, right: str) -> int:
    left_parts = left.split(".")
    right_parts = right.split(".")
    for a, b in zip(left_parts, right_parts, strict=False):
        result = _compare_prerelease_parts(a, b)
        if result:
            return result
    return (len(left_parts) > len(right_parts)) - (len(left_parts) < len(right_parts))


def compare_versions(left: Version, right: Version) -> int:
    """Return -1, 0 or 1. Build metadata does not take part in ordering."""
    width = max(len(left.segments), len(right.segments))
    left_segments = left.segments + (0,) * (width - len(left.segments))
    right_segments = right.segments + (0,) * (width - len(right.segments))
    if left_segments != right_segments:
        return -1 if left_segments < right_segments else 1
    if left.prerelease == right.prerelease:
        return 0
    if not left.prerelease:
        return 1
    if not right.prerelease:
        return -1
    return _compare_prereleases(left.prerelease, right.prerelease)


def _prerelease_check(version: Version, constraint: Version) -> bool:
    if constraint.prerelease and version.prerelease:
        # a prerelease constraint only admits prereleases of the same base version
        return constraint.segments == version.segments
    return not version.prerelease or bool(constraint.prerelease)


def _pessimistic(version: Version, constraint: Version) -> bool:
    if not _prerelease_check(version, constraint) or (constraint.prerelease and not version.prerelease):
        return False
    if compare_versions(version, constraint) < 0:
        return False
    width = len(constraint.segments)
    if width > len(version.segments):
        return False
    for i in range(constraint.specified - 1):
        if version.segments[i] != constraint.segments[i]:
            return False
    return constraint.segments[width - 1] <= version.segments[width - 1]


def check_constraint(constraint: Constraint, version: Version) -> bool:
    target = constraint.version
    op = constraint.operator
    if op == "!=":
        return compare_versions(version, target) != 0
    if op == "~>":
        return _pessimistic(version, target)
    if not _prerelease_check(version, target):
        return False
    result = compare_versions(version, target)
    return {
        "": result == 0,
        "=": result == 0,
        ">": result > 0,
        "<": result < 0,
        ">=": result >= 0,
        "<=": result <= 0,
    }[op]


def check_constraints(constraints: tuple[Constraint, ...], version: Version | str) -> bool:
    """Return True when ``version`` satisfies every constraint."""
    if isinstance(version, str):
        version = parse_version(version)
    return all(check_constraint(constraint, version) for constraint in constraints)

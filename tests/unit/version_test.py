"""Unit tests for version constraint parsing and checking."""

import pytest

from tfmodel.core.version import check_constraints, compare_versions, parse_constraints, parse_version
from tfmodel.errors import ConstraintParseError


class TestParseConstraints:
    def test_bare_version_is_exact_match(self) -> None:
        (constraint,) = parse_constraints("3.14.2")
        assert constraint.operator == ""
        assert constraint.version.segments == (3, 14, 2)
        assert constraint.version.specified == 3
        assert str(constraint) == "= 3.14.2"

    def test_conjunction_keeps_order(self) -> None:
        constraints = parse_constraints(">= 1.0, < 2.0")
        assert [c.operator for c in constraints] == [">=", "<"]
        assert [c.version.segments for c in constraints] == [(1, 0, 0), (2, 0, 0)]
        assert [c.version.specified for c in constraints] == [2, 2]

    @pytest.mark.parametrize("operator", ["=", "!=", ">", "<", ">=", "<=", "~>"])
    def test_every_operator(self, operator: str) -> None:
        (constraint,) = parse_constraints(f"{operator}1.2")
        assert constraint.operator == operator

    def test_prerelease_and_metadata(self) -> None:
        (constraint,) = parse_constraints("v1.2.3-beta.1+build.5")
        assert constraint.version.segments == (1, 2, 3)
        assert constraint.version.prerelease == "beta.1"
        assert constraint.version.metadata == "build.5"
        assert str(constraint.version) == "v1.2.3-beta.1+build.5"

    @pytest.mark.parametrize("text", ["not-a-version", "", "1.0 2.0", ">= 1.0,", "=> 1.0"])
    def test_malformed_constraint_raises(self, text: str) -> None:
        with pytest.raises(ConstraintParseError) as exc_info:
            parse_constraints(text)
        assert exc_info.value.summary == "Invalid version constraint"
        assert "Malformed constraint:" in exc_info.value.detail

    def test_error_names_the_bad_part(self) -> None:
        with pytest.raises(ConstraintParseError) as exc_info:
            parse_constraints("not-a-version")
        assert exc_info.value.detail.endswith("Malformed constraint: not-a-version")


class TestCompareVersions:
    @pytest.mark.parametrize(
        ("left", "right", "expected"),
        [
            ("1.0", "1.0.0", 0),
            ("1.0.0+build", "1.0.0", 0),
            ("1.2.0", "1.10.0", -1),
            ("2.0.0", "1.99.99", 1),
            ("1.0.0-alpha", "1.0.0", -1),
            ("1.0.0-alpha.1", "1.0.0-alpha.2", -1),
            ("1.0.0-2", "1.0.0-alpha", -1),
            ("1.0.0-beta", "1.0.0-alpha", 1),
        ],
    )
    def test_ordering(self, left: str, right: str, expected: int) -> None:
        assert compare_versions(parse_version(left), parse_version(right)) == expected

    def test_parse_version_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_version("latest")


class TestCheckConstraints:
    @pytest.mark.parametrize(
        ("constraint", "version", "expected"),
        [
            (">= 1.0, < 2.0", "1.5.0", True),
            (">= 1.0, < 2.0", "2.0.0", False),
            ("1.2.3", "1.2.3", True),
            ("1.2.3", "1.2.4", False),
            ("!= 1.0", "1.0.0", False),
            ("~> 1.2", "1.5.0", True),
            ("~> 1.2", "2.0.0", False),
            ("~> 1.2.3", "1.2.9", True),
            ("~> 1.2.3", "1.3.0", False),
            ("~> 1.2.3", "1.2.2", False),
            (">= 1.0", "1.1.0-beta", False),
            (">= 1.1.0-alpha", "1.1.0-beta", True),
        ],
    )
    def test_check(self, constraint: str, version: str, expected: bool) -> None:
        assert check_constraints(parse_constraints(constraint), version) is expected

"""Shared fixtures and helpers for tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from tfmodel.core.ast import parse_document_from_source
from tfmodel.models import Document, Position, Range

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def parse() -> Callable[..., Document]:
    """Return a helper that parses inline source into a Document."""

    def _parse(content: str, filename: str = "main.tf", syntax: str | None = None) -> Document:
        return parse_document_from_source(content.encode("utf-8"), filename, syntax)

    return _parse


@pytest.fixture
def make_range() -> Callable[..., Range]:
    """Return a helper building a Range from (line, column) pairs."""

    def _make(start: tuple[int, int], end: tuple[int, int], filename: str = "main.tf") -> Range:
        return Range(
            filename=filename,
            start=Position(line=start[0], column=start[1]),
            end=Position(line=end[0], column=end[1]),
        )

    return _make

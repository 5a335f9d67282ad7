"""Tests for the extraction CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tfmodel.cli.app import app

runner = CliRunner()

MAIN_TF = """
module "vpc" {
  source  = "terraform-aws-modules/vpc/aws"
  version = "3.14.2"
}

locals {
  env = "prod"
}

resource "aws_instance" "web" {}
"""


@pytest.fixture
def main_tf(tmp_path: Path) -> Path:
    path = tmp_path / "main.tf"
    path.write_text(MAIN_TF)
    return path


@pytest.mark.parametrize(
    "args",
    [[], ["modules"], ["locals"], ["providers"]],
    ids=["root", "modules", "locals", "providers"],
)
def test_short_help_flag(args: list[str]) -> None:
    result = runner.invoke(app, [*args, "-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_modules_table(main_tf: Path) -> None:
    result = runner.invoke(app, ["modules", str(main_tf)])

    assert result.exit_code == 0
    assert "vpc" in result.output
    assert "3.14.2" in result.output
    assert "(1 rows)" in result.output


def test_locals_table(main_tf: Path) -> None:
    result = runner.invoke(app, ["locals", str(main_tf)])

    assert result.exit_code == 0
    assert "env" in result.output
    assert "(1 rows)" in result.output


def test_providers_json(main_tf: Path) -> None:
    result = runner.invoke(app, ["providers", "--json", str(main_tf)])

    assert result.exit_code == 0
    records = json.loads(result.output)
    assert [r["name"] for r in records] == ["aws"]
    start = records[0]["def_range"]["start"]
    assert (start["line"], start["column"]) == (11, 1)


def test_modules_json_serializes_expressions(main_tf: Path) -> None:
    result = runner.invoke(app, ["modules", "--json", str(main_tf)])

    assert result.exit_code == 0
    (record,) = json.loads(result.output)
    assert record["source"] == "terraform-aws-modules/vpc/aws"
    assert record["source_attr"]["expr"] == '"terraform-aws-modules/vpc/aws"'
    assert record["version"][0]["operator"] == ""


def test_error_diagnostics_set_exit_code(tmp_path: Path) -> None:
    path = tmp_path / "main.tf"
    path.write_text('module "m" {\n  source  = "./m"\n  version = "nope"\n}\n')

    result = runner.invoke(app, ["modules", str(path)])

    assert result.exit_code == 1
    assert "Invalid version constraint" in result.output


def test_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["locals", str(tmp_path / "absent.tf")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_syntax_option_forces_json(tmp_path: Path) -> None:
    path = tmp_path / "config.txt"
    path.write_text('{"locals": {"a": 1}}')

    result = runner.invoke(app, ["locals", "--syntax", "json", str(path)])

    assert result.exit_code == 0
    assert "(1 rows)" in result.output


def test_invalid_log_level(main_tf: Path) -> None:
    result = runner.invoke(app, ["--log-level", "chatty", "locals", str(main_tf)])

    assert result.exit_code == 2

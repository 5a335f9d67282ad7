"""Integration tests: extraction over a module directory on disk, files and CLI together."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tfmodel.cli.app import app
from tfmodel.core.ast import parse_document_from_file
from tfmodel.core.module_calls import get_module_calls
from tfmodel.core.provider_refs import get_provider_refs

runner = CliRunner()

MAIN_TF = """\
terraform {
  required_version = ">= 1.8"
}

module "network" {
  source  = "terraform-aws-modules/vpc/aws"
  version = ">= 5.0, < 6.0"
  providers = {
    aws = aws.west
  }
}
"""

PROVIDERS_TF = """\
provider "aws" {
  alias  = "west"
  region = "us-west-2"
}

check "health" {
  data "http_request" "ping" {}
}
"""

OUTPUTS_TF_JSON = r"""{
  "output": {
    "started": {
      "value": "${provider::time::rfc3339_parse(\"2024-01-01T00:00:00Z\")}"
    }
  }
}
"""


@pytest.fixture
def module_dir(tmp_path: Path) -> Path:
    (tmp_path / "main.tf").write_text(MAIN_TF)
    (tmp_path / "providers.tf").write_text(PROVIDERS_TF)
    (tmp_path / "outputs.tf.json").write_text(OUTPUTS_TF_JSON)
    (tmp_path / "README.md").write_text("# not configuration\n")
    return tmp_path


def test_documents_parse_from_disk(module_dir: Path) -> None:
    doc = parse_document_from_file(str(module_dir / "main.tf"))

    calls, diags = get_module_calls(doc)

    assert doc.syntax == "hcl"
    assert doc.diagnostics == []
    assert diags == []
    assert [(c.name, c.source) for c in calls] == [("network", "terraform-aws-modules/vpc/aws")]


def test_json_document_from_disk(module_dir: Path) -> None:
    doc = parse_document_from_file(str(module_dir / "outputs.tf.json"))

    refs, diags = get_provider_refs(doc)

    assert doc.syntax == "json"
    assert diags == []
    assert list(refs) == ["time"]
    assert refs["time"].def_range.filename == str(module_dir / "outputs.tf.json")


def test_cli_scans_directory(module_dir: Path) -> None:
    result = runner.invoke(app, ["providers", "--json", str(module_dir)])

    assert result.exit_code == 0
    records = json.loads(result.output)
    by_file = {(Path(r["def_range"]["filename"]).name, r["name"]) for r in records}
    assert by_file == {
        ("main.tf", "aws"),
        ("outputs.tf.json", "time"),
        ("providers.tf", "aws"),
        ("providers.tf", "http"),
    }


def test_cli_modules_over_directory(module_dir: Path) -> None:
    result = runner.invoke(app, ["modules", "--json", str(module_dir)])

    assert result.exit_code == 0
    (record,) = json.loads(result.output)
    assert record["name"] == "network"
    assert [c["operator"] for c in record["version"]] == [">=", "<"]

"""Unit tests for module call extraction."""

from collections.abc import Callable

from tfmodel.core.module_calls import get_module_calls
from tfmodel.models import Document, Range


def test_local_module(parse: Callable[..., Document], make_range: Callable[..., Range]) -> None:
    doc = parse(
        """
module "server" {
  source = "./server"
}"""
    )

    calls, diags = get_module_calls(doc)

    assert diags == []
    assert len(calls) == 1
    call = calls[0]
    assert call.name == "server"
    assert call.def_range == make_range((2, 1), (2, 16))
    assert call.source == "./server"
    assert call.source_attr.name == "source"
    assert call.source_attr.range == make_range((3, 3), (3, 22))
    assert call.source_attr.name_range == make_range((3, 3), (3, 9))
    assert call.source_attr.expr.range == make_range((3, 12), (3, 22))
    assert call.version is None
    assert call.version_attr is None


def test_registry_module_with_version(parse: Callable[..., Document], make_range: Callable[..., Range]) -> None:
    doc = parse(
        """
module "vpc" {
  source  = "terraform-aws-modules/vpc/aws"
  version = "3.14.2"
}"""
    )

    calls, diags = get_module_calls(doc)

    assert diags == []
    (call,) = calls
    assert call.def_range == make_range((2, 1), (2, 13))
    assert call.source == "terraform-aws-modules/vpc/aws"
    assert call.source_attr.range == make_range((3, 3), (3, 44))
    assert call.version is not None
    assert [str(c) for c in call.version] == ["= 3.14.2"]
    assert call.version_attr is not None
    assert call.version_attr.range == make_range((4, 3), (4, 21))
    assert call.version_attr.name_range == make_range((4, 3), (4, 10))


def test_calls_keep_declaration_order(parse: Callable[..., Document]) -> None:
    doc = parse(
        """
module "b" {
  source = "./b"
}
module "a" {
  source = "./a"
}
module "c" {
  source = "./c"
}"""
    )

    calls, _ = get_module_calls(doc)

    assert [call.name for call in calls] == ["b", "a", "c"]


def test_invalid_version_keeps_call(parse: Callable[..., Document], make_range: Callable[..., Range]) -> None:
    doc = parse(
        """
module "m" {
  source  = "./m"
  version = "not-a-version"
}"""
    )

    calls, diags = get_module_calls(doc)

    (call,) = calls
    assert call.version is None
    assert call.version_attr is not None
    assert len(diags) == 1
    assert diags[0].kind == "ConstraintParseError"
    assert diags[0].summary == "Invalid version constraint"
    assert "Malformed constraint: not-a-version" in diags[0].detail
    assert diags[0].subject == make_range((4, 13), (4, 28))


def test_dynamic_version_is_a_schema_error(parse: Callable[..., Document]) -> None:
    doc = parse(
        """
module "m" {
  source  = "./m"
  version = var.module_version
}"""
    )

    calls, diags = get_module_calls(doc)

    (call,) = calls
    assert call.version is None
    assert call.version_attr is not None
    assert [d.kind for d in diags] == ["ConfigSchemaError"]


def test_missing_source_omits_call(parse: Callable[..., Document]) -> None:
    doc = parse(
        """
module "broken" {
  version = "1.0.0"
}
module "ok" {
  source = "./ok"
}"""
    )

    calls, diags = get_module_calls(doc)

    assert [call.name for call in calls] == ["ok"]
    assert [d.summary for d in diags] == ["Missing required argument"]


def test_dynamic_source_omits_call(parse: Callable[..., Document]) -> None:
    doc = parse(
        """
module "broken" {
  source = "${path.module}/child"
}"""
    )

    calls, diags = get_module_calls(doc)

    assert calls == []
    assert [d.kind for d in diags] == ["ConfigSchemaError"]


def test_module_without_label_is_skipped(parse: Callable[..., Document]) -> None:
    doc = parse(
        """
module {
  source = "./x"
}"""
    )

    calls, diags = get_module_calls(doc)

    assert calls == []
    assert [d.summary for d in diags] == ["Missing name for module"]


def test_json_module(parse: Callable[..., Document], make_range: Callable[..., Range]) -> None:
    doc = parse(
        """{
  "module": {
    "vpc": {
      "source": "terraform-aws-modules/vpc/aws",
      "version": ">= 3.0, < 4.0"
    }
  }
}""",
        filename="main.tf.json",
    )

    calls, diags = get_module_calls(doc)

    assert diags == []
    (call,) = calls
    assert call.name == "vpc"
    assert call.def_range == make_range((3, 12), (3, 13), filename="main.tf.json")
    assert call.source == "terraform-aws-modules/vpc/aws"
    assert call.version is not None
    assert [c.operator for c in call.version] == [">=", "<"]


def test_no_modules(parse: Callable[..., Document]) -> None:
    calls, diags = get_module_calls(parse('resource "aws_instance" "x" {}\n'))

    assert calls == []
    assert diags == []

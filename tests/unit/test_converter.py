"""Tests for HCL to JSON conversion.

Covers:
- Blocks: nesting by labels, collapse of repeated blocks, conflicts
- Literals and unary folding
- ${...} placeholders for whole-value expressions
- @@@{...}@@@ placeholders and rebuilt directives inside strings
- Collections and object keys
- Error paths and determinism
"""

from __future__ import annotations

import json

import pytest

from hcljson.core.convert import hcl_to_json
from hcljson.core.errors import ConversionError, EvaluationError, StructuralConflict

# ============================================================================
# Blocks
# ============================================================================


class TestBlocks:
    """Blocks nest by type and labels."""

    def test_block_without_labels(self, convert) -> None:
        assert convert("T {\n  a = 1\n}\n") == {"T": {"a": 1}}

    def test_labels_nest(self, convert) -> None:
        result = convert('resource "aws_instance" "web" {\n  ami = "abc"\n}\n')
        assert result == {"resource": {"aws_instance": {"web": {"ami": "abc"}}}}

    def test_empty_block(self, convert) -> None:
        assert convert('locals "x" {}\n') == {"locals": {"x": {}}}

    def test_repeated_block_becomes_array(self, convert) -> None:
        result = convert("T {\n  a = 1\n}\nT {\n  a = 2\n}\n")
        assert result == {"T": [{"a": 1}, {"a": 2}]}

    def test_third_block_appends(self, convert) -> None:
        result = convert("T {\n  a = 1\n}\nT {\n  a = 2\n}\nT {\n  a = 3\n}\n")
        assert result == {"T": [{"a": 1}, {"a": 2}, {"a": 3}]}

    def test_shared_label_prefix(self, convert) -> None:
        result = convert('resource "a" "x" {}\nresource "a" "y" {}\n')
        assert result == {"resource": {"a": {"x": {}, "y": {}}}}

    def test_nested_blocks_and_attributes(self, convert) -> None:
        result = convert("a {\n  b {\n    c = 1\n  }\n  d = 2\n}\n")
        assert result == {"a": {"b": {"c": 1}, "d": 2}}

    def test_full_document(self, convert, resource_hcl: str) -> None:
        assert convert(resource_hcl) == {
            "resource": {
                "aws_instance": {
                    "web": {
                        "ami": "${var.ami}",
                        "instance_type": "t2.micro",
                        "count": 2,
                        "name": "web-@@@{var.env}@@@",
                        "tags": {"Name": "web"},
                    }
                }
            },
            "variable": {"region": {"default": "us-east-1"}},
        }


class TestStructuralConflicts:
    """Colliding keys raise StructuralConflict instead of overwriting."""

    def test_attribute_and_block_with_same_name(self) -> None:
        with pytest.raises(StructuralConflict) as exc_info:
            hcl_to_json(b'foo = 1\nfoo "x" {}\n')
        assert exc_info.value.path == ["foo"]

    def test_label_path_through_array(self) -> None:
        source = b'a "x" {}\na "x" {}\na "x" "y" {}\n'
        with pytest.raises(StructuralConflict) as exc_info:
            hcl_to_json(source)
        assert exc_info.value.path == ["a", "x", "y"]
        assert "Unable to convert Block to JSON: a.x.y" in str(exc_info.value)

    def test_conflict_inside_block_has_full_path(self) -> None:
        source = b'outer "o" {\n  foo = 1\n  foo {}\n}\n'
        with pytest.raises(StructuralConflict) as exc_info:
            hcl_to_json(source)
        assert exc_info.value.path == ["outer", "o", "foo"]


# ============================================================================
# Literals and unary operators
# ============================================================================


class TestLiterals:
    """Literal values become JSON scalars."""

    def test_scalars(self, convert) -> None:
        result = convert('s = "hello"\nn = 42\nf = 3.14\nt = true\nz = null\n')
        assert result == {"s": "hello", "n": 42, "f": 3.14, "t": True, "z": None}

    def test_integral_number_encodes_as_integer(self) -> None:
        assert hcl_to_json(b"x = 1.0\n") == b'{"x":1}\n'

    def test_big_integer_keeps_precision(self) -> None:
        assert hcl_to_json(b"x = 12345678901234567890123\n") == b'{"x":12345678901234567890123}\n'

    def test_long_fraction_keeps_every_digit(self) -> None:
        source = b"x = 3.14159265358979323846264338327950288\n"
        assert hcl_to_json(source) == b'{"x":3.14159265358979323846264338327950288}\n'

    def test_negated_fraction_keeps_every_digit(self) -> None:
        source = b"x = -0.1000000000000000000001\n"
        assert hcl_to_json(source) == b'{"x":-0.1000000000000000000001}\n'

    def test_interpolated_fraction_keeps_every_digit(self, convert) -> None:
        result = convert('x = "v${0.1000000000000000000001}"\n')
        assert result == {"x": "v0.1000000000000000000001"}

    def test_escaped_interpolation_is_literal(self, convert) -> None:
        assert convert('x = "$${foo}"\n') == {"x": "${foo}"}

    def test_non_ascii_text(self) -> None:
        assert hcl_to_json('x = "é ${b}"\n') == '{"x":"é @@@{b}@@@"}\n'.encode()


class TestUnaryFolding:
    """Unary operators on literals are evaluated."""

    def test_negate_number(self, convert) -> None:
        assert convert("x = -1\n") == {"x": -1}

    def test_negate_fraction(self, convert) -> None:
        assert convert("x = -1.5\n") == {"x": -1.5}

    def test_not_bool(self, convert) -> None:
        assert convert("x = !true\n") == {"x": False}

    def test_negate_numeric_string(self, convert) -> None:
        assert convert('x = -"5"\n') == {"x": -5}

    def test_not_bool_string(self, convert) -> None:
        assert convert('x = !"false"\n') == {"x": True}

    def test_negate_non_numeric_string(self) -> None:
        with pytest.raises(EvaluationError) as exc_info:
            hcl_to_json(b'x = -"abc"\n')
        assert exc_info.value.path == ["x"]

    def test_negate_bool(self) -> None:
        with pytest.raises(EvaluationError):
            hcl_to_json(b"x = -true\n")

    def test_not_null(self) -> None:
        with pytest.raises(EvaluationError):
            hcl_to_json(b"x = !null\n")

    def test_non_literal_operand_is_kept(self, convert) -> None:
        assert convert("x = -var.n\n") == {"x": "${-var.n}"}

    def test_error_path_includes_block(self) -> None:
        source = b'resource "a" "b" {\n  x = -"abc"\n}\n'
        with pytest.raises(EvaluationError) as exc_info:
            hcl_to_json(source)
        assert exc_info.value.path == ["resource", "a", "b", "x"]
        assert str(exc_info.value).startswith("resource.a.b.x: ")


# ============================================================================
# Placeholders
# ============================================================================


class TestWholeValuePlaceholders:
    """Expressions that need evaluation are kept as ${source}."""

    def test_traversal(self, convert) -> None:
        assert convert("x = var.x\n") == {"x": "${var.x}"}

    def test_index(self, convert) -> None:
        assert convert("x = aws_instance.web[0].id\n") == {"x": "${aws_instance.web[0].id}"}

    def test_function_call(self, convert) -> None:
        assert convert('x = upper("a")\n') == {"x": '${upper("a")}'}

    def test_binary(self, convert) -> None:
        assert convert("x = 1 + 2\n") == {"x": "${1 + 2}"}

    def test_conditional(self, convert) -> None:
        assert convert("x = a ? 1 : 2\n") == {"x": "${a ? 1 : 2}"}

    def test_for_expression(self, convert) -> None:
        result = convert("x = [for s in var.l : upper(s)]\n")
        assert result == {"x": "${[for s in var.l : upper(s)]}"}

    def test_splat(self, convert) -> None:
        assert convert("x = aws_instance.web.*.id\n") == {"x": "${aws_instance.web.*.id}"}

    def test_multiline_source_is_verbatim(self, convert) -> None:
        assert convert("x = max(\n  1,\n  2,\n)\n") == {"x": "${max(\n  1,\n  2,\n)}"}

    def test_single_interpolation_string(self, convert) -> None:
        assert convert('x = "${var.a}"\n') == {"x": "${var.a}"}

    def test_single_interpolated_literal(self, convert) -> None:
        assert convert('x = "${8080}"\n') == {"x": 8080}


class TestTemplates:
    """Strings with interpolations and directives are rebuilt as text."""

    def test_embedded_expression(self, convert) -> None:
        """Padding inside ${ } is not part of the expression, so it is not copied."""
        assert convert('x = "a ${ var.b } c"\n') == {"x": "a @@@{var.b}@@@ c"}

    def test_adjacent_expressions(self, convert) -> None:
        assert convert('x = "${a}${b}"\n') == {"x": "@@@{a}@@@@@@{b}@@@"}

    def test_interpolated_literals_are_inlined(self, convert) -> None:
        assert convert('x = "port ${8080} ${true}"\n') == {"x": "port 8080 true"}

    def test_null_interpolation(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            hcl_to_json(b'x = "a ${null}"\n')
        assert exc_info.value.path == ["x"]

    def test_nested_template(self, convert) -> None:
        assert convert('x = "a ${"b ${c}"} d"\n') == {"x": "a b @@@{c}@@@ d"}

    def test_strip_markers(self, convert) -> None:
        assert convert('x = "a ${~ b ~} c"\n') == {"x": "a@@@{b}@@@c"}

    def test_if_else(self, convert) -> None:
        result = convert('x = "%{ if var.on }yes%{ else }no%{ endif }"\n')
        assert result == {"x": "%{if var.on}yes%{else}no%{endif}"}

    def test_if_without_else(self, convert) -> None:
        result = convert('x = "%{ if c }yes%{ endif }"\n')
        assert result == {"x": "%{if c}yes%{endif}"}

    def test_for_with_key(self, convert) -> None:
        result = convert('x = "%{ for k, v in var.m }${k}=${v};%{ endfor }"\n')
        assert result == {"x": "%{for k, v in var.m}@@@{k}@@@=@@@{v}@@@;%{endfor}"}

    def test_for_without_key(self, convert) -> None:
        result = convert('x = "%{ for v in var.l }[${v}]%{ endfor }"\n')
        assert result == {"x": "%{for v in var.l}[@@@{v}@@@]%{endfor}"}

    def test_heredoc(self, convert) -> None:
        assert convert("x = <<EOT\nhello ${name}\nEOT\n") == {"x": "hello @@@{name}@@@\n"}

    def test_flush_heredoc(self, convert) -> None:
        assert convert("x = <<-EOT\n    a\n      b\n    EOT\n") == {"x": "a\n  b\n"}


# ============================================================================
# Collections
# ============================================================================


class TestCollections:
    """Tuples and objects convert element by element."""

    def test_tuple(self, convert) -> None:
        result = convert('x = [1, "two", true, null, var.x]\n')
        assert result == {"x": [1, "two", True, None, "${var.x}"]}

    def test_object_keys(self, convert) -> None:
        result = convert('tags = {\n  Name = "web"\n  "env" = var.env\n}\n')
        assert result == {"tags": {"Name": "web", "env": "${var.env}"}}

    def test_object_last_key_wins(self, convert) -> None:
        assert convert("x = {a = 1, a = 2}\n") == {"x": {"a": 2}}

    def test_interpolated_key(self, convert) -> None:
        assert convert('x = {"${var.k}" = 1}\n') == {"x": {"@@@{var.k}@@@": 1}}

    def test_nested_collections(self, convert) -> None:
        result = convert("x = {\n  list = [1, [2, 3]]\n  obj = {y = -2}\n}\n")
        assert result == {"x": {"list": [1, [2, 3]], "obj": {"y": -2}}}


# ============================================================================
# Output
# ============================================================================


class TestOutput:
    """Encoded output is stable."""

    def test_deterministic(self, resource_hcl: str) -> None:
        first = hcl_to_json(resource_hcl.encode(), "main.tf")
        second = hcl_to_json(resource_hcl.encode(), "main.tf")
        assert first == second

    def test_keys_sorted(self) -> None:
        assert hcl_to_json(b"b = 1\na = 2\n") == b'{"a":2,"b":1}\n'

    def test_html_characters_unescaped(self) -> None:
        assert b"<a & b>" in hcl_to_json(b'x = "<a & b>"\n')

    def test_output_is_valid_json(self, resource_hcl: str) -> None:
        json.loads(hcl_to_json(resource_hcl))

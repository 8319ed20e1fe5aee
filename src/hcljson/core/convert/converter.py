"""
HCL syntax tree to JSON conversion.

Walks a parsed body and produces the JSON form of the document:
- Blocks become nested objects keyed by type and labels; repeated blocks
  at the same path collapse into an array.
- Literal values (and unary operators on literals) are emitted as JSON
  scalars.
- Any other whole-value expression is kept as source text: ``${expr}``.
- Templates are rebuilt as strings; expressions embedded in them are kept
  as ``@@@{expr}@@@`` and directives as ``%{if ...}``/``%{for ...}``.
"""

from __future__ import annotations

import logging
from typing import Any

from hcljson.core.convert.source import SourceBuffer
from hcljson.core.convert.values import apply_unary, to_json_value, to_string
from hcljson.core.errors import ConversionError, StructuralConflict
from hcljson.core.ir.syntax import (
    Block,
    Body,
    Conditional,
    Expression,
    ForLoop,
    LiteralValue,
    Object,
    ScopeTraversal,
    Template,
    TemplateJoin,
    TemplateWrap,
    Tuple,
    UnaryOp,
)

logger = logging.getLogger(__name__)

JsonObject = dict[str, Any]


class Converter:
    """Converts the bodies and expressions of one document."""

    def __init__(self, source: SourceBuffer) -> None:
        self.source = source

    # -- Bodies and blocks --

    def convert_body(self, body: Body) -> JsonObject:
        """Convert all blocks, then all attributes, of ``body`` into one object."""
        out: JsonObject = {}

        for block in body.blocks:
            logger.debug("Convert block: type=%r labels=%r", block.type_name, block.labels)
            try:
                self.convert_block(block, out)
            except ConversionError as e:
                e.add_path(block.type_name, *block.labels)
                raise

        for name, attr in body.attributes.items():
            logger.debug("Convert attribute: %s", name)
            if name in out:
                raise StructuralConflict(
                    f"Attribute {name!r} conflicts with a block of the same name",
                    path=[name],
                )
            try:
                out[name] = self.convert_expression(attr.expr)
            except ConversionError as e:
                e.add_path(name)
                raise
            except (ValueError, TypeError) as e:
                raise ConversionError(f"Unable to convert expression: {e}", path=[name]) from e

        return out

    def convert_block(self, block: Block, out: JsonObject) -> None:
        """Merge ``block`` into ``out`` at the path given by its type and labels.

        A block ``resource "aws_instance" "web" { ... }`` lands at
        ``out["resource"]["aws_instance"]["web"]``. Intermediate levels are
        shared between blocks; the final level becomes a list when a second
        block with the same path is converted.
        """
        key = block.type_name
        cursor = out
        for label in block.labels:
            cursor = self._descend(cursor, key, block)
            key = label

        value = self.convert_body(block.body)

        if key not in cursor:
            cursor[key] = value
        elif isinstance(cursor[key], dict):
            cursor[key] = [cursor[key], value]
        elif isinstance(cursor[key], list):
            cursor[key].append(value)
        else:
            raise self._conflict(block)

    def _descend(self, cursor: JsonObject, key: str, block: Block) -> JsonObject:
        """Return the object at ``cursor[key]``, creating it when absent."""
        if key not in cursor:
            child: JsonObject = {}
            cursor[key] = child
            return child
        existing = cursor[key]
        if not isinstance(existing, dict):
            raise self._conflict(block)
        return existing

    def _conflict(self, block: Block) -> StructuralConflict:
        path = ".".join([block.type_name, *block.labels])
        return StructuralConflict(f"Unable to convert Block to JSON: {path}")

    # -- Expressions --

    def convert_expression(self, expr: Expression) -> Any:
        """Convert a whole-value expression to a JSON value or ``${...}`` text."""
        logger.debug("Convert %s at %s", type(expr).__name__, expr.src_range)

        if isinstance(expr, LiteralValue):
            return to_json_value(expr.value)

        if isinstance(expr, UnaryOp):
            return self.convert_unary(expr)

        if isinstance(expr, Template):
            return self.convert_template(expr)

        if isinstance(expr, TemplateWrap):
            return self.convert_expression(expr.wrapped)

        if isinstance(expr, Tuple):
            return [self.convert_expression(item) for item in expr.exprs]

        if isinstance(expr, Object):
            result: JsonObject = {}
            for item in expr.items:
                key = self.convert_key(item.key_expr)
                result[key] = self.convert_expression(item.value_expr)
            return result

        return self.wrap_expr(expr)

    def convert_unary(self, expr: UnaryOp) -> Any:
        """Fold ``expr`` when its operand is a literal, otherwise keep it as ``${...}``."""
        if not isinstance(expr.operand, LiteralValue):
            return self.wrap_expr(expr)
        return to_json_value(apply_unary(expr.op, expr.operand.value))

    # -- Templates --

    def convert_template(self, expr: Template) -> str:
        if expr.is_string_literal:
            return to_string(expr.parts[0].value)  # type: ignore[union-attr]
        return "".join(self.convert_string_part(part) for part in expr.parts)

    def convert_string_part(self, expr: Expression) -> str:
        """Convert one template part to the text it contributes."""
        if isinstance(expr, LiteralValue):
            return to_string(expr.value)
        if isinstance(expr, Template):
            return self.convert_template(expr)
        if isinstance(expr, TemplateWrap):
            return self.convert_string_part(expr.wrapped)
        if isinstance(expr, Conditional):
            return self.convert_template_conditional(expr)
        if isinstance(expr, TemplateJoin):
            return self.convert_template_for(expr.loop)
        return self.wrap_expr_in_string(expr)

    def convert_key(self, key_expr: Expression) -> str:
        """Resolve an object key without evaluating it.

        Bare identifiers keep their source spelling; anything else is
        treated as template text.
        """
        if isinstance(key_expr, ScopeTraversal):
            return self.source.source_text(key_expr.src_range)
        return self.convert_string_part(key_expr)

    def convert_template_conditional(self, expr: Conditional) -> str:
        condition = self.source.source_text(expr.condition.src_range)
        true_result = self.convert_string_part(expr.true_result)
        false_result = self.convert_string_part(expr.false_result)

        parts = ["%{if ", condition, "}", true_result]
        if false_result:
            parts.extend(["%{else}", false_result])
        parts.append("%{endif}")
        return "".join(parts)

    def convert_template_for(self, expr: ForLoop) -> str:
        parts = ["%{for "]
        if expr.key_var:
            parts.extend([expr.key_var, ", "])
        parts.extend(
            [
                expr.value_var,
                " in ",
                self.source.source_text(expr.collection.src_range),
                "}",
                self.convert_string_part(expr.value_expr),
                "%{endfor}",
            ]
        )
        return "".join(parts)

    # -- Placeholders --

    def wrap_expr(self, expr: Expression) -> str:
        """Placeholder for an unevaluated whole-value expression."""
        return "${" + self.source.source_text(expr.src_range) + "}"

    def wrap_expr_in_string(self, expr: Expression) -> str:
        """Placeholder for an unevaluated expression embedded in a string.

        Uses a marker distinct from ``${...}`` so that substituting the
        string back into HCL source does not touch ``${`` text that was
        already literal.
        """
        return "@@@{" + self.source.source_text(expr.src_range) + "}@@@"

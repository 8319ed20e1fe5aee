"""
Syntax tree types for HCL native-syntax documents.

The reader in ``hcljson.core.hclsyntax`` builds these nodes; the converter
in ``hcljson.core.convert`` only reads them. Every node records the byte
range it was parsed from so the converter can copy source text verbatim.

Expression shapes:
- Literals: 42, "text" (when it has no interpolation), true, null
- Unary operators: -x, !x
- Templates: "a ${b} c", "%{if c}x%{endif}", heredocs
- Collections: [a, b], {k = v}
- Conditionals: c ? a : b
- For expressions: [for v in xs: v], {for k, v in m: k => v}
- Traversals: var.name, aws_instance.web[0].id
- Calls and operators: max(a, b), a + b
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Source locations
# ---------------------------------------------------------------------------


class SourcePos(BaseModel):
    """A position in a source file."""

    line: int = Field(description="Line number (1-indexed)")
    column: int = Field(description="Column number in characters (1-indexed)")
    byte: int = Field(description="Byte offset (0-indexed)")

    model_config = ConfigDict(frozen=True)


class SourceRange(BaseModel):
    """A half-open byte range ``[start.byte, end.byte)`` in a named file."""

    filename: str
    start: SourcePos
    end: SourcePos

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if self.start.line == self.end.line:
            return f"{self.filename}:{self.start.line},{self.start.column}-{self.end.column}"
        return (
            f"{self.filename}:{self.start.line},{self.start.column}"
            f"-{self.end.line},{self.end.column}"
        )

    def through(self, other: SourceRange) -> SourceRange:
        """Range from the start of this range to the end of ``other``."""
        return SourceRange(filename=self.filename, start=self.start, end=other.end)


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class Severity(StrEnum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """A problem reported by the reader."""

    severity: Severity = Severity.ERROR
    summary: str
    detail: str = ""
    subject: SourceRange | None = None

    model_config = ConfigDict(frozen=True)

    def format(self) -> str:
        text = self.summary
        if self.detail:
            text = f"{text}; {self.detail}"
        if self.subject is not None:
            return f"{self.subject}: {text}"
        return text


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class UnaryOperator(StrEnum):
    """Unary operators."""

    NEGATE = "-"
    NOT = "!"


class BinaryOperator(StrEnum):
    """Binary operators."""

    # Arithmetic
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    # Comparison
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    # Logical
    AND = "&&"
    OR = "||"


# ---------------------------------------------------------------------------
# Expression nodes
# ---------------------------------------------------------------------------


class LiteralValue(BaseModel):
    """
    A literal scalar: number, string, bool, or null.

    Integral numbers are ``int``; other numbers are kept as the exact
    ``Decimal`` written in the source.
    """

    value: int | Decimal | str | bool | None = Field(description="The literal value")
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class UnaryOp(BaseModel):
    """Unary operation: op operand."""

    op: UnaryOperator
    operand: Expression
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class BinaryOp(BaseModel):
    """Binary operation: left op right."""

    op: BinaryOperator
    left: Expression
    right: Expression
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class Template(BaseModel):
    """
    A string template: literal text interleaved with interpolations and
    ``%{...}`` directives, in source order.
    """

    parts: list[Expression] = Field(default_factory=list)
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)

    @property
    def is_string_literal(self) -> bool:
        """True when the template is a single string literal part."""
        return (
            len(self.parts) == 1
            and isinstance(self.parts[0], LiteralValue)
            and isinstance(self.parts[0].value, str)
        )


class TemplateWrap(BaseModel):
    """A template holding exactly one interpolation and nothing else: ``"${x}"``."""

    wrapped: Expression
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class TemplateJoin(BaseModel):
    """The ``%{for}`` template directive; joins the loop's results into a string."""

    loop: ForLoop
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class Tuple(BaseModel):
    """Tuple constructor: [a, b, c]."""

    exprs: list[Expression] = Field(default_factory=list)
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class ObjectItem(BaseModel):
    """One ``key = value`` item of an object constructor."""

    key_expr: Expression
    value_expr: Expression

    model_config = ConfigDict(frozen=True)


class Object(BaseModel):
    """Object constructor: {a = 1, "b" = 2}."""

    items: list[ObjectItem] = Field(default_factory=list)
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class Conditional(BaseModel):
    """Conditional: condition ? true_result : false_result."""

    condition: Expression
    true_result: Expression
    false_result: Expression
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class ForLoop(BaseModel):
    """
    For expression.

    ``key_expr`` is set only for object-producing loops
    (``{for k, v in m: k => v}``); template loops leave it unset.
    """

    key_var: str = ""
    value_var: str
    collection: Expression
    key_expr: Expression | None = None
    value_expr: Expression
    condition: Expression | None = None
    grouped: bool = False
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class ScopeTraversal(BaseModel):
    """
    Reference rooted at a variable name: ``var.region``, ``each.key``.

    ``path`` holds the root name and any attribute/index steps, as written.
    """

    path: list[str]
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)

    @property
    def root_name(self) -> str:
        return self.path[0]


class RelativeTraversal(BaseModel):
    """Attribute or legacy index steps applied to a non-variable expression."""

    source: Expression
    path: list[str]
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class Index(BaseModel):
    """Index operation: collection[key]."""

    collection: Expression
    key: Expression
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class Splat(BaseModel):
    """Splat operation: ``source.*.attr`` or ``source[*].attr``."""

    source: Expression
    each: Expression | None = None
    full: bool = False
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class FunctionCall(BaseModel):
    """Function call: name(arg1, arg2, ...), optionally expanding the final argument."""

    name: str
    args: list[Expression] = Field(default_factory=list)
    expand_final: bool = False
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class Parentheses(BaseModel):
    """A parenthesized expression; the range includes both parentheses."""

    expr: Expression
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expression = (
    LiteralValue
    | UnaryOp
    | BinaryOp
    | Template
    | TemplateWrap
    | TemplateJoin
    | Tuple
    | Object
    | Conditional
    | ForLoop
    | ScopeTraversal
    | RelativeTraversal
    | Index
    | Splat
    | FunctionCall
    | Parentheses
)


# ---------------------------------------------------------------------------
# Structural nodes
# ---------------------------------------------------------------------------


class Attribute(BaseModel):
    """An attribute definition: name = expr."""

    name: str
    expr: Expression
    src_range: SourceRange
    name_range: SourceRange

    model_config = ConfigDict(frozen=True)


class Block(BaseModel):
    """A block: type_name "label" ... { body }."""

    type_name: str
    labels: list[str] = Field(default_factory=list)
    body: Body
    type_range: SourceRange
    label_ranges: list[SourceRange] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class Body(BaseModel):
    """The blocks and attributes at one nesting level."""

    blocks: list[Block] = Field(default_factory=list)
    attributes: dict[str, Attribute] = Field(default_factory=dict)
    src_range: SourceRange

    model_config = ConfigDict(frozen=True)


class File(BaseModel):
    """A parsed document: the raw source bytes plus its root body."""

    filename: str
    source: bytes
    body: Body

    model_config = ConfigDict(frozen=True)


# Rebuild models for recursive forward references
for _model in (
    UnaryOp,
    BinaryOp,
    Template,
    TemplateWrap,
    TemplateJoin,
    Tuple,
    ObjectItem,
    Object,
    Conditional,
    ForLoop,
    RelativeTraversal,
    Index,
    Splat,
    FunctionCall,
    Parentheses,
    Attribute,
    Block,
    Body,
    File,
):
    _model.model_rebuild()

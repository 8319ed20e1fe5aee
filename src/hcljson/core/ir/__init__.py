"""
Intermediate representation for parsed HCL documents.

Re-exports the syntax tree types so callers can write ``ir.Block``,
``ir.Template`` and so on.
"""

from .syntax import (
    Attribute,
    BinaryOp,
    BinaryOperator,
    Block,
    Body,
    Conditional,
    Diagnostic,
    Expression,
    File,
    ForLoop,
    FunctionCall,
    Index,
    LiteralValue,
    Object,
    ObjectItem,
    Parentheses,
    RelativeTraversal,
    ScopeTraversal,
    Severity,
    SourcePos,
    SourceRange,
    Splat,
    Template,
    TemplateJoin,
    TemplateWrap,
    Tuple,
    UnaryOp,
    UnaryOperator,
)

__all__ = [
    "Attribute",
    "BinaryOp",
    "BinaryOperator",
    "Block",
    "Body",
    "Conditional",
    "Diagnostic",
    "Expression",
    "File",
    "ForLoop",
    "FunctionCall",
    "Index",
    "LiteralValue",
    "Object",
    "ObjectItem",
    "Parentheses",
    "RelativeTraversal",
    "ScopeTraversal",
    "Severity",
    "SourcePos",
    "SourceRange",
    "Splat",
    "Template",
    "TemplateJoin",
    "TemplateWrap",
    "Tuple",
    "UnaryOp",
    "UnaryOperator",
]

"""
Canonical export of expressions.

Operators are always written in their normalized spelling, so a document
using ``and``/``or``/``not`` comes back as ``all_of``/``any_of``/``none_of``.
"""

from __future__ import annotations

from typing import Any, Dict, List, TextIO

from ..document import encode
from ..models import Expression, Feature


def export(expr: Expression) -> Dict[str, List[Any]]:
    """
    Convert an expression into a plain single-entry mapping.

    Cannot fail: Expression only admits Feature and Expression operands.
    """
    items: List[Any] = []
    for operand in expr.operands:
        if isinstance(operand, Feature):
            items.append(operand.token)
        else:
            items.append(export(operand))
    return {expr.key: items}


def to_yaml(expr: Expression) -> str:
    """Render an expression as canonical YAML text."""
    return encode(export(expr))


def save(expr: Expression, stream: TextIO) -> None:
    """Write an expression as canonical YAML to a stream."""
    encode(export(expr), stream)

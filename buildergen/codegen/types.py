"""Render type expressions back into Go source text."""

from __future__ import annotations

from typing import List

from ..models import (
    Identifier,
    MappingOf,
    PointerTo,
    QualifiedName,
    SequenceOf,
    TypeExpr,
    UnsupportedType,
)

UNSUPPORTED_PREFIX = "unsupported-"


def render_type(expr: TypeExpr) -> str:
    """Return the Go spelling of ``expr``.

    Unknown shapes never raise; they render as ``unsupported-<tag>`` so a single
    odd field cannot abort generation for the rest of the file.
    """
    if isinstance(expr, Identifier):
        return expr.name
    if isinstance(expr, PointerTo):
        return "*" + render_type(expr.element)
    if isinstance(expr, QualifiedName):
        return f"{expr.package}.{expr.name}"
    if isinstance(expr, SequenceOf):
        return f"[{expr.length or ''}]{render_type(expr.element)}"
    if isinstance(expr, MappingOf):
        return f"map[{render_type(expr.key)}]{render_type(expr.value)}"
    if isinstance(expr, UnsupportedType):
        return f"{UNSUPPORTED_PREFIX}{expr.tag}"
    return f"{UNSUPPORTED_PREFIX}{type(expr).__name__}"


def unsupported_shapes(expr: TypeExpr) -> List[UnsupportedType]:
    """Collect every unsupported node reachable from ``expr``."""
    if isinstance(expr, UnsupportedType):
        return [expr]
    if isinstance(expr, (PointerTo, SequenceOf)):
        return unsupported_shapes(expr.element)
    if isinstance(expr, MappingOf):
        return unsupported_shapes(expr.key) + unsupported_shapes(expr.value)
    if isinstance(expr, (Identifier, QualifiedName)):
        return []
    return [UnsupportedType(tag=type(expr).__name__)]


__all__ = ["UNSUPPORTED_PREFIX", "render_type", "unsupported_shapes"]

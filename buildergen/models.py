"""Core data models shared by the scanner, the synthesizer and the driver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Identifier:
    """A bare type name such as ``string`` or ``RestartPolicy``."""

    name: str


@dataclass(frozen=True)
class PointerTo:
    element: "TypeExpr"


@dataclass(frozen=True)
class QualifiedName:
    """A type referenced through a package selector, e.g. ``v1.Time``."""

    package: str
    name: str


@dataclass(frozen=True)
class SequenceOf:
    """A slice, or a fixed-size array when ``length`` is set."""

    element: "TypeExpr"
    length: Optional[str] = None


@dataclass(frozen=True)
class MappingOf:
    key: "TypeExpr"
    value: "TypeExpr"


@dataclass(frozen=True)
class UnsupportedType:
    """Any type shape the renderer does not understand (interfaces, channels, ...)."""

    tag: str
    text: str = ""


TypeExpr = Union[Identifier, PointerTo, QualifiedName, SequenceOf, MappingOf, UnsupportedType]


@dataclass(frozen=True)
class ImportSpec:
    """One import as declared; ``path`` keeps its quotes."""

    path: str
    alias: Optional[str] = None

    def __str__(self) -> str:
        if self.alias:
            return f"{self.alias} {self.path}"
        return self.path


@dataclass(frozen=True)
class Field:
    """A named struct member."""

    name: str
    type: TypeExpr


@dataclass(frozen=True)
class EmbeddedRelation:
    """An unnamed (promoted) struct member."""

    type: TypeExpr

    @property
    def name(self) -> Optional[str]:
        """Selector name of a qualified embedded type (``ObjectMeta`` for ``metav1.ObjectMeta``)."""
        if isinstance(self.type, QualifiedName):
            return self.type.name
        return None


Member = Union[Field, EmbeddedRelation]


@dataclass(frozen=True)
class AnnotatedType:
    """A struct declaration selected by the builder marker."""

    name: str
    members: Tuple[Member, ...] = ()

    @property
    def fields(self) -> Tuple[Field, ...]:
        return tuple(member for member in self.members if isinstance(member, Field))

    @property
    def embedded(self) -> Tuple[EmbeddedRelation, ...]:
        return tuple(member for member in self.members if isinstance(member, EmbeddedRelation))


@dataclass(frozen=True)
class SourceUnit:
    """Everything the synthesizer needs from one parsed source file."""

    package: str
    imports: Tuple[ImportSpec, ...] = ()
    types: Dict[str, AnnotatedType] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.types


@dataclass(frozen=True)
class GenerationWarning:
    """Degraded output that did not abort generation."""

    type_name: str
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.type_name}: {self.message}"


@dataclass
class GeneratedUnit:
    """Synthesized builder source for one input file."""

    package: str
    imports: Tuple[ImportSpec, ...]
    blocks: List[str]
    source: str
    warnings: List[GenerationWarning] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        return self.source.encode("utf-8")


__all__ = [
    "AnnotatedType",
    "EmbeddedRelation",
    "Field",
    "GeneratedUnit",
    "GenerationWarning",
    "Identifier",
    "ImportSpec",
    "MappingOf",
    "Member",
    "PointerTo",
    "QualifiedName",
    "SequenceOf",
    "SourceUnit",
    "TypeExpr",
    "UnsupportedType",
]

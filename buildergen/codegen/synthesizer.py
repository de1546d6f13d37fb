"""Synthesizes functional-option builders from scanned source units."""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..config import Conventions, ObjectMetaOption
from ..logging import get_logger
from ..models import (
    AnnotatedType,
    EmbeddedRelation,
    Field,
    GeneratedUnit,
    GenerationWarning,
    QualifiedName,
    SourceUnit,
)
from .constants import (
    GO_KEYWORDS,
    OPTION_KIND_APPEND,
    OPTION_KIND_ASSIGN,
    OPTION_KIND_MAP_ENTRY,
    RECEIVER_NAME,
    WARNING_DUPLICATE_FUNCTION,
    WARNING_INERT_EMBEDDED,
    WARNING_UNSUPPORTED_TYPE,
)
from .types import render_type, unsupported_shapes


class GenerationError(RuntimeError):
    """Raised when synthesis is asked to run without any annotated types."""


@dataclass(frozen=True)
class _OptionView:
    """Template context for a single ``With*`` function."""

    function: str
    member: str
    kind: str
    type: str
    parameter: str
    summary: str

    @property
    def signature(self) -> str:
        return f"{self.parameter} {self.type}"

    @property
    def key(self) -> str:
        return self._parameter_names()[0]

    @property
    def value(self) -> str:
        return self._parameter_names()[-1]

    def _parameter_names(self) -> List[str]:
        return [name.strip() for name in self.parameter.split(",") if name.strip()]


def go_string(value: object) -> str:
    """Quote ``value`` as a Go interpreted string literal."""
    return json.dumps(str(value), ensure_ascii=False)


def parameter_name(field_name: str) -> str:
    """Lower-case a field name into a parameter name that still compiles."""
    candidate = field_name.lower()
    if candidate in GO_KEYWORDS or candidate == RECEIVER_NAME:
        return candidate + "_"
    return candidate


class BuilderSynthesizer:
    """Renders constructors and option functions for every annotated type."""

    def __init__(
        self,
        conventions: Conventions | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        self.conventions = conventions or Conventions()
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = self._create_env(self.templates_dir)
        self.logger = get_logger("synthesizer")

    def synthesize(self, unit: SourceUnit) -> GeneratedUnit:
        """Return the generated builder file for ``unit``."""
        if unit.is_empty:
            raise GenerationError(f"package {unit.package} has no annotated struct types to generate")

        blocks: List[str] = []
        warnings: List[GenerationWarning] = []
        emitted: Set[str] = set()

        for annotated in unit.types.values():
            self.logger.debug("Generating builders for %s.%s", unit.package, annotated.name)
            for function, block in self._type_blocks(annotated, warnings):
                if function in emitted:
                    warnings.append(
                        GenerationWarning(
                            type_name=annotated.name,
                            code=WARNING_DUPLICATE_FUNCTION,
                            message=f"{function} is declared more than once in package {unit.package}",
                        )
                    )
                emitted.add(function)
                blocks.append(block)

        source = self._env.get_template("unit.go.j2").render(
            package=unit.package,
            imports=[str(spec) for spec in unit.imports],
            blocks=blocks,
        )
        return GeneratedUnit(
            package=unit.package,
            imports=unit.imports,
            blocks=blocks,
            source=source.rstrip("\n") + "\n",
            warnings=warnings,
        )

    def _type_blocks(
        self, annotated: AnnotatedType, warnings: List[GenerationWarning]
    ) -> Iterator[Tuple[str, str]]:
        yield self._render_constructor(annotated.name)
        for member in annotated.members:
            if isinstance(member, Field):
                block = self._render_field_option(annotated.name, member, warnings)
                if block is not None:
                    yield block
            else:
                yield from self._render_embedded_options(annotated.name, member, warnings)

    def _render_constructor(self, type_name: str) -> Tuple[str, str]:
        conventions = self.conventions
        function = f"{conventions.constructor_prefix}{type_name}"
        type_meta: Optional[Dict[str, str]] = None
        if conventions.wants_type_meta(type_name):
            type_meta = {
                "field": conventions.type_meta_field,
                "type": conventions.type_meta_type,
                "kind": type_name,
                "api_version": conventions.api_version,
            }
        block = self._env.get_template("constructor.go.j2").render(
            constructor=function,
            type_name=type_name,
            type_meta=type_meta,
            receiver=RECEIVER_NAME,
        )
        return function, block

    def _render_field_option(
        self, type_name: str, field: Field, warnings: List[GenerationWarning]
    ) -> Optional[Tuple[str, str]]:
        if field.name == "_":
            return None
        rendered = render_type(field.type)
        for shape in unsupported_shapes(field.type):
            warnings.append(
                GenerationWarning(
                    type_name=type_name,
                    code=WARNING_UNSUPPORTED_TYPE,
                    message=(
                        f"field {field.name} has unsupported type {shape.text or shape.tag}; "
                        f"emitted {rendered}"
                    ),
                )
            )
        option = _OptionView(
            function=f"{self.conventions.option_prefix}{field.name}",
            member=field.name,
            kind=OPTION_KIND_ASSIGN,
            type=rendered,
            parameter=parameter_name(field.name),
            summary=f"sets the {field.name} of a {type_name}",
        )
        return option.function, self._render_option(type_name, option)

    def _render_embedded_options(
        self, type_name: str, relation: EmbeddedRelation, warnings: List[GenerationWarning]
    ) -> Iterator[Tuple[str, str]]:
        if not (
            isinstance(relation.type, QualifiedName)
            and relation.name == self.conventions.object_meta_relation
        ):
            warnings.append(
                GenerationWarning(
                    type_name=type_name,
                    code=WARNING_INERT_EMBEDDED,
                    message=f"embedded {render_type(relation.type)} has no builder convention; no options emitted",
                )
            )
            return
        for meta_option in self.conventions.resolved_object_meta_options():
            option = self._meta_option_view(type_name, meta_option)
            yield option.function, self._render_option(type_name, option)

    @staticmethod
    def _meta_option_view(type_name: str, meta_option: ObjectMetaOption) -> _OptionView:
        return _OptionView(
            function=meta_option.function,
            member=meta_option.member,
            kind=meta_option.kind,
            type=meta_option.type,
            parameter=meta_option.parameter,
            summary=meta_option.summary.format(type=type_name, member=meta_option.member),
        )

    def _render_option(self, type_name: str, option: _OptionView) -> str:
        return self._env.get_template("option.go.j2").render(
            option=option,
            type_name=type_name,
            receiver=RECEIVER_NAME,
            guard_nil_maps=self.conventions.guard_nil_maps,
            map_entry=OPTION_KIND_MAP_ENTRY,
            append=OPTION_KIND_APPEND,
        )

    @staticmethod
    def _create_env(templates_dir: Path) -> Environment:
        directories = [str(templates_dir)]
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        env.filters["go_string"] = go_string
        return env


__all__ = ["BuilderSynthesizer", "GenerationError", "go_string", "parameter_name"]

"""Configuration loading for buildergen (.buildergen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from .codegen.constants import (
    DEFAULT_API_VERSION,
    DEFAULT_CONSTRUCTOR_PREFIX,
    DEFAULT_MARKER,
    DEFAULT_OBJECT_META_RELATION,
    DEFAULT_OPTION_PREFIX,
    DEFAULT_OUTPUT_SUFFIX,
    DEFAULT_SKIP_TYPE_META_SUBSTRINGS,
    DEFAULT_SOURCE_SUFFIX,
    DEFAULT_TIME_TYPE,
    DEFAULT_TYPE_META_FIELD,
    DEFAULT_TYPE_META_TYPE,
    OPTION_KIND_APPEND,
    OPTION_KIND_ASSIGN,
    OPTION_KIND_MAP_ENTRY,
    OPTION_KINDS,
)

CONFIG_FILENAME = ".buildergen.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class ObjectMetaOption:
    """One option emitted for an embedded ObjectMeta relation.

    ``summary`` is the doc-comment tail; ``{type}`` is replaced with the owning
    type name.
    """

    function: str
    member: str
    kind: str
    type: str
    parameter: str = "value"
    summary: str = "sets the {member} of the {type}"


def default_object_meta_options(time_type: str = DEFAULT_TIME_TYPE) -> Tuple[ObjectMetaOption, ...]:
    return (
        ObjectMetaOption("WithName", "Name", OPTION_KIND_ASSIGN, "string", "name",
                         "sets the name of the {type}"),
        ObjectMetaOption("WithNamespace", "Namespace", OPTION_KIND_ASSIGN, "string", "namespace",
                         "sets the namespace of the {type}"),
        ObjectMetaOption("WithLabel", "Labels", OPTION_KIND_MAP_ENTRY, "string", "k, v",
                         "sets a label of the {type}"),
        ObjectMetaOption("WithAnnotation", "Annotations", OPTION_KIND_MAP_ENTRY, "string", "k, v",
                         "sets an annotation of the {type}"),
        ObjectMetaOption("WithFinalizer", "Finalizers", OPTION_KIND_APPEND, "string", "f",
                         "appends a finalizer to the {type}"),
        ObjectMetaOption("WithCreationTimestamp", "CreationTimestamp", OPTION_KIND_ASSIGN, time_type,
                         "timestamp", "sets the creation timestamp of the {type}"),
        ObjectMetaOption("WithDeletionTimestamp", "DeletionTimestamp", OPTION_KIND_ASSIGN,
                         f"*{time_type}", "timestamp", "sets the deletion timestamp of the {type}"),
    )


@dataclass(frozen=True)
class Conventions:
    """Naming and metadata conventions baked into generated builders."""

    marker: str = DEFAULT_MARKER
    constructor_prefix: str = DEFAULT_CONSTRUCTOR_PREFIX
    option_prefix: str = DEFAULT_OPTION_PREFIX
    api_version: str = DEFAULT_API_VERSION
    type_meta_field: str = DEFAULT_TYPE_META_FIELD
    type_meta_type: str = DEFAULT_TYPE_META_TYPE
    skip_type_meta_substrings: Tuple[str, ...] = DEFAULT_SKIP_TYPE_META_SUBSTRINGS
    object_meta_relation: str = DEFAULT_OBJECT_META_RELATION
    time_type: str = DEFAULT_TIME_TYPE
    guard_nil_maps: bool = True
    object_meta_options: Optional[Tuple[ObjectMetaOption, ...]] = None

    def resolved_object_meta_options(self) -> Tuple[ObjectMetaOption, ...]:
        if self.object_meta_options is not None:
            return self.object_meta_options
        return default_object_meta_options(self.time_type)

    def wants_type_meta(self, type_name: str) -> bool:
        """Top-level resources carry Kind/APIVersion; nested spec/status types do not."""
        return not any(marker in type_name for marker in self.skip_type_meta_substrings)


@dataclass
class BuilderConfig:
    """Represents the settings defined in .buildergen.yml."""

    root: Path
    conventions: Conventions = field(default_factory=Conventions)
    source_suffix: str = DEFAULT_SOURCE_SUFFIX
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX
    exclude_paths: List[str] = field(default_factory=list)

    def with_overrides(self, *, api_version: Optional[str] = None) -> "BuilderConfig":
        """Return a copy with command-line overrides applied."""
        if api_version is None:
            return self
        return replace(self, conventions=replace(self.conventions, api_version=api_version))


def load_config(config_path: Path) -> BuilderConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return BuilderConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    conventions = _parse_conventions(_as_dict(data.get("conventions")))

    return BuilderConfig(
        root=root,
        conventions=conventions,
        source_suffix=_as_str(data.get("source_suffix")) or DEFAULT_SOURCE_SUFFIX,
        output_suffix=_as_str(data.get("output_suffix")) or DEFAULT_OUTPUT_SUFFIX,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _parse_conventions(data: Dict[str, Any]) -> Conventions:
    defaults = Conventions()
    if not data:
        return defaults

    substrings = data.get("skip_type_meta_substrings")
    guard = _as_bool(data.get("guard_nil_maps"))
    options_data = data.get("object_meta_options")

    return Conventions(
        marker=_as_str(data.get("marker")) or defaults.marker,
        constructor_prefix=_as_str(data.get("constructor_prefix")) or defaults.constructor_prefix,
        option_prefix=_as_str(data.get("option_prefix")) or defaults.option_prefix,
        api_version=_as_str(data.get("api_version")) or defaults.api_version,
        type_meta_field=_as_str(data.get("type_meta_field")) or defaults.type_meta_field,
        type_meta_type=_as_str(data.get("type_meta_type")) or defaults.type_meta_type,
        skip_type_meta_substrings=(
            tuple(_as_str_list(substrings))
            if substrings is not None
            else defaults.skip_type_meta_substrings
        ),
        object_meta_relation=_as_str(data.get("object_meta_relation")) or defaults.object_meta_relation,
        time_type=_as_str(data.get("time_type")) or defaults.time_type,
        guard_nil_maps=defaults.guard_nil_maps if guard is None else guard,
        object_meta_options=(
            _parse_object_meta_options(options_data) if options_data is not None else None
        ),
    )


def _parse_object_meta_options(value: Any) -> Tuple[ObjectMetaOption, ...]:
    if not isinstance(value, list):
        raise ConfigError("conventions.object_meta_options must be a list")

    options: List[ObjectMetaOption] = []
    for index, entry in enumerate(value):
        if not isinstance(entry, dict):
            raise ConfigError(f"conventions.object_meta_options[{index}] must be a mapping")
        function = _as_str(entry.get("function"))
        member = _as_str(entry.get("member"))
        kind = _as_str(entry.get("kind")) or OPTION_KIND_ASSIGN
        type_text = _as_str(entry.get("type"))
        if not function or not member or not type_text:
            raise ConfigError(
                f"conventions.object_meta_options[{index}] requires function, member and type"
            )
        if kind not in OPTION_KINDS:
            allowed = ", ".join(sorted(OPTION_KINDS))
            raise ConfigError(
                f"conventions.object_meta_options[{index}] has unknown kind '{kind}' (expected one of {allowed})"
            )
        parameter = _as_str(entry.get("parameter")) or _default_parameter(kind)
        if kind == OPTION_KIND_MAP_ENTRY:
            names = [name.strip() for name in parameter.split(",")]
            if len(names) != 2 or not all(names):
                raise ConfigError(
                    f"conventions.object_meta_options[{index}] kind '{kind}' needs two parameter names "
                    f"(key, value), got '{parameter}'"
                )
        summary = _as_str(entry.get("summary")) or f"sets the {member} of the {{type}}"
        try:
            summary.format(type="T", member=member)
        except (KeyError, IndexError, ValueError) as exc:
            raise ConfigError(
                f"conventions.object_meta_options[{index}].summary may only use {{type}} and {{member}}"
            ) from exc
        options.append(
            ObjectMetaOption(
                function=function,
                member=member,
                kind=kind,
                type=type_text,
                parameter=parameter,
                summary=summary,
            )
        )
    return tuple(options)


def _default_parameter(kind: str) -> str:
    if kind == OPTION_KIND_MAP_ENTRY:
        return "k, v"
    return "value"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "BuilderConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "Conventions",
    "ObjectMetaOption",
    "default_object_meta_options",
    "load_config",
]

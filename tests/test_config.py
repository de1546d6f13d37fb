"""Tests for buildergen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from buildergen.config import (
    BuilderConfig,
    ConfigError,
    Conventions,
    ObjectMetaOption,
    default_object_meta_options,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, BuilderConfig)
    assert config.root == tmp_path.resolve()
    assert config.conventions == Conventions()
    assert config.output_suffix == "_builder.go"
    assert config.source_suffix == ".go"
    assert config.exclude_paths == []


def test_default_conventions_match_kubernetes_layout() -> None:
    conventions = Conventions()

    assert conventions.marker == "+builder"
    assert conventions.api_version == "stack.civo.com/v1alpha1"
    assert conventions.wants_type_meta("Pod")
    assert not conventions.wants_type_meta("PodSpec")
    assert not conventions.wants_type_meta("PodStatus")
    names = [option.function for option in conventions.resolved_object_meta_options()]
    assert names == [
        "WithName",
        "WithNamespace",
        "WithLabel",
        "WithAnnotation",
        "WithFinalizer",
        "WithCreationTimestamp",
        "WithDeletionTimestamp",
    ]


def test_time_type_flows_into_timestamp_options() -> None:
    options = {option.function: option for option in default_object_meta_options("metav1.Time")}

    assert options["WithCreationTimestamp"].type == "metav1.Time"
    assert options["WithDeletionTimestamp"].type == "*metav1.Time"


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".buildergen.yml").write_text(
        """
output_suffix: "_gen.go"
exclude_paths:
  - "hack/"
  - "*_test.go"
conventions:
  marker: "+gen:builder"
  constructor_prefix: "Make"
  option_prefix: "Set"
  api_version: "example.com/v1"
  type_meta_type: "metav1.TypeMeta"
  skip_type_meta_substrings: [Spec, Status, List]
  time_type: "metav1.Time"
  guard_nil_maps: false
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)
    conventions = config.conventions

    assert config.output_suffix == "_gen.go"
    assert config.exclude_paths == ["hack/", "*_test.go"]
    assert conventions.marker == "+gen:builder"
    assert conventions.constructor_prefix == "Make"
    assert conventions.option_prefix == "Set"
    assert conventions.api_version == "example.com/v1"
    assert conventions.type_meta_type == "metav1.TypeMeta"
    assert conventions.type_meta_field == "TypeMeta"
    assert conventions.skip_type_meta_substrings == ("Spec", "Status", "List")
    assert conventions.guard_nil_maps is False
    assert conventions.object_meta_options is None
    timestamps = [o.type for o in conventions.resolved_object_meta_options() if "Timestamp" in o.function]
    assert timestamps == ["metav1.Time", "*metav1.Time"]


def test_load_config_accepts_explicit_file(tmp_path: Path) -> None:
    config_file = tmp_path / "builders.yaml"
    config_file.write_text("conventions:\n  api_version: other.io/v1\n", encoding="utf-8")

    config = load_config(config_file)

    assert config.conventions.api_version == "other.io/v1"


def test_load_config_parses_object_meta_override(tmp_path: Path) -> None:
    (tmp_path / ".buildergen.yml").write_text(
        """
conventions:
  object_meta_options:
    - function: WithName
      member: Name
      type: string
      parameter: name
    - function: WithTag
      member: Tags
      kind: map_entry
      type: string
      summary: "tags the {type}"
""",
        encoding="utf-8",
    )

    options = load_config(tmp_path).conventions.resolved_object_meta_options()

    assert options == (
        ObjectMetaOption("WithName", "Name", "assign", "string", "name", "sets the Name of the {type}"),
        ObjectMetaOption("WithTag", "Tags", "map_entry", "string", "k, v", "tags the {type}"),
    )


def test_load_config_rejects_unknown_option_kind(tmp_path: Path) -> None:
    (tmp_path / ".buildergen.yml").write_text(
        "conventions:\n  object_meta_options:\n    - {function: WithX, member: X, type: int, kind: merge}\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigError, match="unknown kind"):
        load_config(tmp_path)


@pytest.mark.parametrize("parameter", ["k", "k, v, extra", "k,"])
def test_load_config_rejects_map_entry_without_key_and_value(tmp_path: Path, parameter: str) -> None:
    (tmp_path / ".buildergen.yml").write_text(
        "conventions:\n  object_meta_options:\n"
        f"    - {{function: WithTag, member: Tags, type: string, kind: map_entry, parameter: '{parameter}'}}\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigError, match="two parameter names"):
        load_config(tmp_path)


def test_load_config_rejects_bad_summary_placeholder(tmp_path: Path) -> None:
    (tmp_path / ".buildergen.yml").write_text(
        "conventions:\n  object_meta_options:\n    - {function: WithX, member: X, type: int, summary: 'sets {field}'}\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".buildergen.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_wraps_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".buildergen.yml").write_text("conventions: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


def test_with_overrides_replaces_api_version(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    overridden = config.with_overrides(api_version="apps.example.com/v1")

    assert overridden.conventions.api_version == "apps.example.com/v1"
    assert config.conventions.api_version == "stack.civo.com/v1alpha1"
    assert config.with_overrides() is config

"""Default generation conventions for Kubernetes-style API types."""

from __future__ import annotations

DEFAULT_MARKER = "+builder"
DEFAULT_CONSTRUCTOR_PREFIX = "New"
DEFAULT_OPTION_PREFIX = "With"
DEFAULT_API_VERSION = "stack.civo.com/v1alpha1"
DEFAULT_TYPE_META_FIELD = "TypeMeta"
DEFAULT_TYPE_META_TYPE = "v1.TypeMeta"
DEFAULT_SKIP_TYPE_META_SUBSTRINGS: tuple[str, ...] = ("Spec", "Status")
DEFAULT_OBJECT_META_RELATION = "ObjectMeta"
DEFAULT_TIME_TYPE = "v1.Time"
DEFAULT_SOURCE_SUFFIX = ".go"
DEFAULT_OUTPUT_SUFFIX = "_builder.go"

OPTION_KIND_ASSIGN = "assign"
OPTION_KIND_MAP_ENTRY = "map_entry"
OPTION_KIND_APPEND = "append"
OPTION_KINDS: frozenset[str] = frozenset(
    {OPTION_KIND_ASSIGN, OPTION_KIND_MAP_ENTRY, OPTION_KIND_APPEND}
)

# Variable name of the closure receiver in every generated option.
RECEIVER_NAME = "obj"

GO_KEYWORDS: frozenset[str] = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)

WARNING_UNSUPPORTED_TYPE = "unsupported_type"
WARNING_INERT_EMBEDDED = "inert_embedded_relation"
WARNING_DUPLICATE_FUNCTION = "duplicate_function"

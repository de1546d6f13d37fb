"""Generate functional-option builders for Go API types marked with ``+builder``."""

from .codegen.synthesizer import BuilderSynthesizer, GenerationError
from .codegen.types import render_type
from .config import BuilderConfig, ConfigError, Conventions, load_config
from .driver import FileDriver, FileOutcome, RunReport
from .scanner import AnnotationScanner, ParseError

__version__ = "0.1.0"

__all__ = [
    "AnnotationScanner",
    "BuilderConfig",
    "BuilderSynthesizer",
    "ConfigError",
    "Conventions",
    "FileDriver",
    "FileOutcome",
    "GenerationError",
    "ParseError",
    "RunReport",
    "load_config",
    "render_type",
]

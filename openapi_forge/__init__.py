"""Generate source code from OpenAPI schemas with swappable Jinja2 generators."""

from .errors import (
    ForgeError,
    FormatterError,
    GeneratorCloneError,
    InvalidGeneratorError,
    InvalidGeneratorReferenceError,
    SchemaError,
    SchemaFetchError,
    SchemaInvalidError,
    SchemaParseError,
    SchemaReadError,
    Violation,
)
from .log import Reporter
from .options import LogLevel, RunOptions
from .orchestrator import Counters, Orchestrator, RunResult, RunState, generate
from .transformers import DEFAULT_TRANSFORMERS

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_TRANSFORMERS",
    "Counters",
    "ForgeError",
    "FormatterError",
    "GeneratorCloneError",
    "InvalidGeneratorError",
    "InvalidGeneratorReferenceError",
    "LogLevel",
    "Orchestrator",
    "Reporter",
    "RunOptions",
    "RunResult",
    "RunState",
    "SchemaError",
    "SchemaFetchError",
    "SchemaInvalidError",
    "SchemaParseError",
    "SchemaReadError",
    "Violation",
    "generate",
]

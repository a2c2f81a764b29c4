"""Drive one generation run from references to a written output tree.

Stages run strictly in sequence; any failure jumps to cleanup, which always
releases a cloned generator before the run is reported as succeeded or failed.
Nothing raised inside a stage escapes ``Orchestrator.run``.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .engine import ExtensionRegistry, RenderSummary, TemplateEngine, prepare_output, render_templates
from .errors import SchemaInvalidError, Violation
from .loader import load_schema
from .locator import is_url
from .log import Reporter
from .options import OPTIONS_KEY, RunOptions
from .resolver import GeneratorDescriptor, resolve_generator, validate_generator
from .transformers import DEFAULT_TRANSFORMERS, Transformer, apply_transformers
from .validator import validate_schema

SchemaSource = str | Path | Mapping[str, Any]


class RunState(str, Enum):
    IDLE = "idle"
    RESOLVING_GENERATOR = "resolving_generator"
    VALIDATING_GENERATOR = "validating_generator"
    LOADING_SCHEMA = "loading_schema"
    VALIDATING_SCHEMA = "validating_schema"
    COMPUTING_COUNTERS = "computing_counters"
    TRANSFORMING = "transforming"
    LOADING_EXTENSIONS = "loading_extensions"
    PREPARING_OUTPUT = "preparing_output"
    RENDERING = "rendering"
    CLEANUP = "cleanup"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class Counters:
    model_count: int = 0
    endpoint_count: int = 0


@dataclass
class RunResult:
    state: RunState
    counters: Counters
    error: BaseException | None = None
    history: list[RunState] = field(default_factory=list)
    render: RenderSummary | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.SUCCEEDED


def count_discoveries(document: Mapping[str, Any]) -> Counters:
    """Count declared models and endpoints, failing clearly on a malformed document."""
    components = document.get("components")
    schemas = components.get("schemas") if isinstance(components, Mapping) else None
    if not isinstance(schemas, Mapping):
        raise SchemaInvalidError(
            [Violation("Schema has no 'components.schemas' mapping", ("components", "schemas"))]
        )
    paths = document.get("paths")
    if not isinstance(paths, Mapping):
        raise SchemaInvalidError([Violation("Schema has no 'paths' mapping", ("paths",))])
    return Counters(model_count=len(schemas), endpoint_count=len(paths))


class Orchestrator:
    def __init__(
        self,
        options: RunOptions,
        reporter: Reporter | None = None,
        transformers: Sequence[Transformer] = DEFAULT_TRANSFORMERS,
    ) -> None:
        self.options = options
        self.reporter = reporter or Reporter(options.log_level)
        self.transformers = tuple(transformers)
        self.state = RunState.IDLE
        self.history: list[RunState] = [RunState.IDLE]

    def _enter(self, state: RunState) -> None:
        self.state = state
        self.history.append(state)
        self.reporter.verbose(f"[{state.value}]")

    def run(self, schema: SchemaSource, generator: str | Path) -> RunResult:
        descriptor: GeneratorDescriptor | None = None
        counters = Counters()
        render: RenderSummary | None = None
        error: BaseException | None = None

        try:
            self._enter(RunState.RESOLVING_GENERATOR)
            if is_url(str(generator)):
                self.reporter.standard(f"Cloning generator from '{generator}'")
            descriptor = resolve_generator(generator, validate=False)
            if descriptor.owned:
                self.reporter.verbose(f"Cloned generator into temporary folder '{descriptor.root_path}'")

            self._enter(RunState.VALIDATING_GENERATOR)
            self.reporter.standard("Validating generator")
            validate_generator(descriptor)

            self._enter(RunState.LOADING_SCHEMA)
            document = self._load(schema)

            if not self.options.skip_validation:
                self._enter(RunState.VALIDATING_SCHEMA)
                self.reporter.standard("Validating schema")
                validate_schema(document)

            self._enter(RunState.COMPUTING_COUNTERS)
            counters = count_discoveries(document)
            self.reporter.verbose(f"Discovered {counters.model_count} models")
            self.reporter.verbose(f"Discovered {counters.endpoint_count} endpoints")

            self._enter(RunState.TRANSFORMING)
            self.reporter.verbose("Transforming schema")
            apply_transformers(document, self.transformers)
            document[OPTIONS_KEY] = self.options.as_template_data()

            self._enter(RunState.LOADING_EXTENSIONS)
            self.reporter.verbose("Loading helpers and partials")
            registry = ExtensionRegistry()
            registry.load(descriptor)
            engine = TemplateEngine(registry)

            self._enter(RunState.PREPARING_OUTPUT)
            output_dir = prepare_output(self.options.output, self.reporter)

            self._enter(RunState.RENDERING)
            render = render_templates(
                descriptor, document, self.options, engine, output_dir, self.reporter
            )
        except Exception as exc:
            error = exc
        finally:
            self._enter(RunState.CLEANUP)
            if descriptor is not None and descriptor.release():
                self.reporter.verbose(f"Removed temporary folder {descriptor.root_path}")

        if error is None:
            self._enter(RunState.SUCCEEDED)
            self.reporter.success(counters)
        else:
            self._enter(RunState.FAILED)
            self.reporter.failure(error)

        return RunResult(
            state=self.state,
            counters=counters,
            error=error,
            history=list(self.history),
            render=render,
        )

    def _load(self, schema: SchemaSource) -> dict[str, Any]:
        if isinstance(schema, Mapping):
            self.reporter.standard("Loading schema from in-memory document")
            # The run owns its document; the caller's object stays untouched.
            return copy.deepcopy(dict(schema))
        self.reporter.standard(f"Loading schema from '{schema}'")
        return load_schema(schema)


def generate(
    schema: SchemaSource,
    generator: str | Path,
    options: RunOptions | Mapping[str, Any] | None = None,
    *,
    transformers: Sequence[Transformer] = DEFAULT_TRANSFORMERS,
    reporter: Reporter | None = None,
) -> RunResult:
    """Generate source files for ``schema`` using ``generator``.

    Failures are reported and returned in ``RunResult.error``, never raised.
    """
    if options is None:
        options = RunOptions()
    elif not isinstance(options, RunOptions):
        options = RunOptions.from_mapping(options)
    return Orchestrator(options, reporter, transformers).run(schema, generator)

"""Render a generator's templates against a schema and write the output tree.

Each file under the generator's ``template/`` folder becomes one output file:
``*.j2`` files are rendered with Jinja2 (and reformatted where a formatter
exists for the target language), everything else is copied byte-for-byte.
"""

from __future__ import annotations

import importlib.util
import shutil
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any, Callable

import jinja2

from .errors import FormatterError, InvalidGeneratorError
from .formatters import format_source, language_for
from .helpers import BUILTIN_HELPERS
from .log import Reporter
from .options import RunOptions
from .resolver import GeneratorDescriptor

TEMPLATE_SUFFIX = ".j2"


def extension_name(path: Path) -> str:
    """Registration name: the file name with every extension stripped."""
    return path.name.split(".")[0]


@dataclass
class ExtensionRegistry:
    """Helpers and partials supplied by a generator, keyed by name."""

    helpers: dict[str, Callable[..., Any]] = field(default_factory=dict)
    partials: dict[str, str] = field(default_factory=dict)

    def register_helper(self, name: str, helper: Callable[..., Any]) -> None:
        self.helpers[name] = helper

    def register_partial(self, name: str, text: str) -> None:
        self.partials[name] = text

    def load(self, descriptor: GeneratorDescriptor) -> None:
        """Scan the generator's helpers/ and partials/ folders, if present."""
        for path in _listdir(descriptor.helpers_dir):
            if path.suffix != ".py":
                continue
            self.register_helper(extension_name(path), _load_helper(path))
        for path in _listdir(descriptor.partials_dir):
            self.register_partial(extension_name(path), path.read_text(encoding="utf-8"))


def _listdir(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.is_file())


def _load_helper(path: Path) -> Callable[..., Any]:
    """Import a helper module and return the callable named after the file."""
    name = extension_name(path)
    spec = importlib.util.spec_from_file_location(f"_openapi_forge_helper_{name}", path)
    if spec is None or spec.loader is None:
        raise InvalidGeneratorError(f"Cannot load helper module {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    helper = getattr(module, name, None)
    if not callable(helper):
        raise InvalidGeneratorError(
            f"Helper module {path} must define a callable named '{name}'"
        )
    return helper


class TemplateEngine:
    """Per-run Jinja2 environment with built-in and generator extensions."""

    def __init__(self, registry: ExtensionRegistry | None = None) -> None:
        self.registry = registry or ExtensionRegistry()
        self.env = jinja2.Environment(
            loader=jinja2.DictLoader(self.registry.partials),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Generator helpers go last so they win over built-ins of the same name
        for name, helper in {**BUILTIN_HELPERS, **self.registry.helpers}.items():
            self.env.filters[name] = helper
            self.env.globals[name] = helper

    def compile(self, source: str) -> jinja2.Template:
        return self.env.from_string(source)

    def render(self, source: str, context: dict[str, Any]) -> str:
        return self.compile(source).render(context)


class FileKind(str, Enum):
    RENDERABLE = "renderable"
    STATIC = "static"


@dataclass(frozen=True)
class TemplateFile:
    name: str
    path: Path

    @property
    def kind(self) -> FileKind:
        if self.name.endswith(TEMPLATE_SUFFIX):
            return FileKind.RENDERABLE
        return FileKind.STATIC

    @property
    def output_name(self) -> str:
        if self.kind is FileKind.RENDERABLE:
            return self.name[: -len(TEMPLATE_SUFFIX)]
        return self.name

    def is_excluded(self, pattern: str | None) -> bool:
        if not pattern:
            return False
        return fnmatchcase(self.path.name, pattern) or fnmatchcase(self.name, pattern)


@dataclass
class RenderSummary:
    rendered: list[str] = field(default_factory=list)
    copied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def list_templates(template_dir: Path) -> list[TemplateFile]:
    """Every file below template_dir, sorted by relative path."""
    files = [
        TemplateFile(name=path.relative_to(template_dir).as_posix(), path=path)
        for path in template_dir.rglob("*")
        if path.is_file()
    ]
    return sorted(files, key=lambda f: f.name)


def prepare_output(output: Path, reporter: Reporter) -> Path:
    """Create the output folder if needed; never clears existing contents."""
    output_dir = output.resolve()
    if output_dir.is_dir():
        reporter.verbose(f"Output folder already exists '{output_dir}'")
    else:
        output_dir.mkdir(parents=True, exist_ok=True)
        reporter.verbose(f"Creating output folder '{output_dir}'")
    return output_dir


def render_templates(
    descriptor: GeneratorDescriptor,
    document: dict[str, Any],
    options: RunOptions,
    engine: TemplateEngine,
    output_dir: Path,
    reporter: Reporter | None = None,
) -> RenderSummary:
    """Render or copy every template file into output_dir."""
    reporter = reporter or Reporter(options.log_level)
    summary = RenderSummary()
    templates = list_templates(descriptor.template_dir)
    reporter.standard(f"Iterating over {len(templates)} files")

    for template in templates:
        if template.is_excluded(options.exclude):
            reporter.verbose(f"Skipping excluded file {template.name}")
            summary.skipped.append(template.name)
            continue

        reporter.verbose(template.name)
        destination = output_dir / template.output_name
        destination.parent.mkdir(parents=True, exist_ok=True)

        if template.kind is FileKind.RENDERABLE:
            reporter.verbose("Populating template")
            source = template.path.read_text(encoding="utf-8")
            result = engine.render(source, document)
            if options.format_output:
                result = _format(result, template.output_name, reporter)
            reporter.verbose("Writing to output location")
            destination.write_text(result, encoding="utf-8")
            summary.rendered.append(template.output_name)
        else:
            reporter.verbose("Copying to output location")
            shutil.copyfile(template.path, destination)
            summary.copied.append(template.output_name)

    reporter.verbose("Iteration complete")
    return summary


def _format(text: str, name: str, reporter: Reporter) -> str:
    try:
        return format_source(text, language_for(name))
    except FormatterError as exc:
        reporter.verbose(f"Formatting skipped: {exc}")
        return text

"""Materialize a generator from a local directory or a remote git repository."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from . import locator
from .errors import GeneratorCloneError, InvalidGeneratorError, InvalidGeneratorReferenceError

REPOSITORY_SUFFIX = ".git"
TEMPLATE_DIR = "template"
HELPERS_DIR = "helpers"
PARTIALS_DIR = "partials"

TEMP_PREFIX = "openapi-forge-generator-"


@dataclass
class GeneratorDescriptor:
    """Where a generator's templates and extensions live.

    When ``owned`` is set, ``root_path`` is a temporary clone that the caller
    must hand back through ``release()``.
    """

    root_path: Path
    owned: bool = False
    _released: bool = field(default=False, repr=False)

    @property
    def template_dir(self) -> Path:
        return self.root_path / TEMPLATE_DIR

    @property
    def helpers_dir(self) -> Path:
        return self.root_path / HELPERS_DIR

    @property
    def partials_dir(self) -> Path:
        return self.root_path / PARTIALS_DIR

    def release(self) -> bool:
        """Delete an owned clone. Returns True only on the call that removed it."""
        if not self.owned or self._released:
            return False
        self._released = True
        shutil.rmtree(self.root_path)
        return True


def resolve_generator(reference: str | Path, validate: bool = True) -> GeneratorDescriptor:
    """Return a descriptor for a generator path or git URL.

    A remote generator is always checked before being handed back, so a clone
    that fails validation never outlives this call.
    """
    source = locator.resolve(reference)

    if source.is_remote:
        url = source.reference
        if not url.endswith(REPOSITORY_SUFFIX):
            raise InvalidGeneratorReferenceError(url)
        root = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
        descriptor = GeneratorDescriptor(root_path=root, owned=True)
        try:
            clone_repository(url, root)
            validate_generator(descriptor)
        except BaseException:
            descriptor.release()
            raise
        return descriptor

    descriptor = GeneratorDescriptor(root_path=Path(source.location))
    if validate:
        validate_generator(descriptor)
    return descriptor


def clone_repository(url: str, destination: Path) -> None:
    """Shallow-clone ``url`` into the existing, empty ``destination``."""
    try:
        subprocess.run(
            ["git", "clone", "--depth", "1", url, str(destination)],
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as exc:
        raise GeneratorCloneError(url, "git executable not found") from exc
    except subprocess.CalledProcessError as exc:
        raise GeneratorCloneError(url, exc.stderr or "") from exc


def validate_generator(descriptor: GeneratorDescriptor) -> None:
    root = descriptor.root_path
    if not root.is_dir():
        raise InvalidGeneratorError(
            f"Generator path {root} does not exist, check that the path points to a valid generator"
        )
    if not descriptor.template_dir.is_dir():
        raise InvalidGeneratorError(
            f"Generator path {root} does not contain a template folder,"
            " check that the path points to a valid generator"
        )

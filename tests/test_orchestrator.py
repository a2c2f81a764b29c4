"""End-to-end tests for a generation run."""

from __future__ import annotations

import copy
import logging
import shutil
from pathlib import Path

import pytest

from openapi_forge import resolver
from openapi_forge.errors import (
    InvalidGeneratorError,
    InvalidGeneratorReferenceError,
    SchemaInvalidError,
    SchemaReadError,
)
from openapi_forge.log import Reporter
from openapi_forge.options import LogLevel, RunOptions
from openapi_forge.orchestrator import Counters, RunState, count_discoveries, generate

REMOTE_GENERATOR = "https://github.com/org/generator.git"

MODELS_TEMPLATE = (
    "{% for name, model in components.schemas.items() %}\n"
    "class {{ model._name }}:\n"
    "    pass\n"
    "{% endfor %}\n"
)


@pytest.fixture
def fake_clone(monkeypatch, make_generator):
    """Stand in for git: copy a local generator and record the clone target."""
    source = make_generator({"a.py.j2": "a = 1\n"})
    targets: list[Path] = []

    def _clone(url, destination):
        targets.append(destination)
        shutil.copytree(source, destination, dirs_exist_ok=True)

    monkeypatch.setattr(resolver, "clone_repository", _clone)
    return targets


class TestGenerate:
    def test_success_report_counts(self, make_generator, schema_files, output_dir):
        root = make_generator({"static.txt": "unrelated\n"})
        result = generate(schema_files["json"], root, RunOptions(output=output_dir))
        assert result.succeeded, result.error
        assert result.counters == Counters(model_count=3, endpoint_count=5)

    def test_yaml_schema(self, make_generator, schema_files, output_dir):
        root = make_generator({"models.py.j2": MODELS_TEMPLATE})
        result = generate(str(schema_files["yaml"]), str(root), {"output": output_dir})
        assert result.succeeded, result.error
        assert "class Pet:" in (output_dir / "models.py").read_text()

    def test_in_memory_document_is_not_mutated(self, make_generator, petstore, output_dir):
        before = copy.deepcopy(petstore)
        root = make_generator({"models.py.j2": MODELS_TEMPLATE})
        result = generate(petstore, root, RunOptions(output=output_dir))
        assert result.succeeded, result.error
        assert petstore == before

    def test_options_are_visible_to_templates(self, make_generator, petstore, output_dir):
        root = make_generator({"opts.txt.j2": "{{ _options.exclude }} {{ _options.log_level }}\n"})
        result = generate(petstore, root, RunOptions(output=output_dir, exclude="*.md"))
        assert result.succeeded, result.error
        assert (output_dir / "opts.txt").read_text() == "*.md standard\n"

    def test_exclude(self, make_generator, petstore, output_dir):
        root = make_generator({"a.py.j2": "a = 1\n", "readme.md": "x", "b.py.j2": "b = 2\n"})
        result = generate(petstore, root, {"output": output_dir, "exclude": "*.md"})
        assert result.succeeded, result.error
        assert sorted(p.name for p in output_dir.iterdir()) == ["a.py", "b.py"]

    def test_state_history(self, make_generator, petstore, output_dir):
        result = generate(petstore, make_generator(), RunOptions(output=output_dir))
        assert result.history == [
            RunState.IDLE,
            RunState.RESOLVING_GENERATOR,
            RunState.VALIDATING_GENERATOR,
            RunState.LOADING_SCHEMA,
            RunState.VALIDATING_SCHEMA,
            RunState.COMPUTING_COUNTERS,
            RunState.TRANSFORMING,
            RunState.LOADING_EXTENSIONS,
            RunState.PREPARING_OUTPUT,
            RunState.RENDERING,
            RunState.CLEANUP,
            RunState.SUCCEEDED,
        ]

    def test_skip_validation_skips_state(self, make_generator, petstore, output_dir):
        del petstore["info"]
        result = generate(petstore, make_generator(), RunOptions(output=output_dir, skip_validation=True))
        assert result.succeeded, result.error
        assert RunState.VALIDATING_SCHEMA not in result.history

    def test_transformers_run_before_rendering(self, make_generator, petstore, output_dir):
        def add_banner(document):
            document["banner"] = "generated"

        root = make_generator({"banner.txt.j2": "{{ banner }}\n"})
        result = generate(petstore, root, RunOptions(output=output_dir), transformers=[add_banner])
        assert result.succeeded, result.error
        assert (output_dir / "banner.txt").read_text() == "generated\n"

    def test_openapi_31_boolean_schema(self, make_generator, output_dir):
        document = {
            "openapi": "3.1.0",
            "info": {"title": "Bags", "version": "1.0.0"},
            "paths": {
                "/bags": {"get": {"responses": {"200": {"description": "ok"}}}},
            },
            "components": {
                "schemas": {
                    "Bag": {
                        "type": "object",
                        "properties": {"anything": {"type": "array", "items": True}},
                    }
                }
            },
        }
        root = make_generator(
            {"types.txt.j2": "{{ components.schemas.Bag.properties.anything._type }}\n"}
        )
        result = generate(document, root, RunOptions(output=output_dir))
        assert result.succeeded, result.error
        assert RunState.VALIDATING_SCHEMA in result.history
        assert (output_dir / "types.txt").read_text() == "list[Any]\n"

    def test_counters_ignore_transformer_changes(self, make_generator, petstore, output_dir):
        def drop_models(document):
            document["components"]["schemas"].clear()

        result = generate(petstore, make_generator(), RunOptions(output=output_dir), transformers=[drop_models])
        assert result.counters == Counters(model_count=3, endpoint_count=5)


class TestFailures:
    def test_invalid_schema(self, make_generator, petstore, output_dir):
        del petstore["info"]
        result = generate(petstore, make_generator(), RunOptions(output=output_dir))
        assert result.state is RunState.FAILED
        assert isinstance(result.error, SchemaInvalidError)
        assert not output_dir.exists()

    def test_missing_schema_file(self, make_generator, tmp_path, output_dir):
        result = generate(tmp_path / "missing.json", make_generator(), RunOptions(output=output_dir))
        assert isinstance(result.error, SchemaReadError)
        assert result.history[-2:] == [RunState.CLEANUP, RunState.FAILED]

    def test_invalid_generator(self, make_generator, petstore, output_dir):
        root = make_generator(with_template_dir=False)
        result = generate(petstore, root, RunOptions(output=output_dir))
        assert isinstance(result.error, InvalidGeneratorError)
        assert RunState.VALIDATING_GENERATOR in result.history
        assert RunState.LOADING_SCHEMA not in result.history

    def test_malformed_schema_without_validation(self, make_generator, output_dir):
        document = {"openapi": "3.0.3", "paths": {}}
        result = generate(document, make_generator(), RunOptions(output=output_dir, skip_validation=True))
        assert isinstance(result.error, SchemaInvalidError)
        assert result.error.violations[0].path == ("components", "schemas")

    def test_unnamed_parameter_without_validation(self, caplog, make_generator, petstore, output_dir):
        caplog.set_level(logging.DEBUG, logger="openapi_forge")
        petstore["paths"]["/health"]["get"]["parameters"] = [{"in": "query"}]
        options = RunOptions(output=output_dir, skip_validation=True)
        result = generate(petstore, make_generator(), options)
        assert isinstance(result.error, SchemaInvalidError)
        assert result.error.violations[0].location == "/paths/~1health/get/parameters/0"
        assert "Schema validation failed with 1 error" in "\n".join(caplog.messages)

    def test_dangling_ref_without_validation(self, make_generator, petstore, output_dir):
        petstore["paths"]["/health"]["get"]["requestBody"] = {"$ref": "#/components/requestBodies/Nope"}
        options = RunOptions(output=output_dir, skip_validation=True)
        result = generate(petstore, make_generator(), options)
        assert isinstance(result.error, SchemaInvalidError)
        assert "#/components/requestBodies/Nope" in result.error.details()

    def test_transformer_error_passes_through(self, make_generator, petstore, output_dir):
        class TransformerBug(Exception):
            pass

        def broken(document):
            raise TransformerBug("bad transformer")

        result = generate(petstore, make_generator(), RunOptions(output=output_dir), transformers=[broken])
        assert isinstance(result.error, TransformerBug)
        assert str(result.error) == "bad transformer"

    def test_template_error_is_captured(self, make_generator, petstore, output_dir):
        root = make_generator({"bad.txt.j2": "{% for x in %}"})
        result = generate(petstore, root, RunOptions(output=output_dir))
        assert result.state is RunState.FAILED
        assert result.error is not None


class TestRemoteGeneratorCleanup:
    def test_temp_dir_removed_after_success(self, fake_clone, petstore, output_dir):
        result = generate(petstore, REMOTE_GENERATOR, RunOptions(output=output_dir))
        assert result.succeeded, result.error
        assert (output_dir / "a.py").is_file()
        assert len(fake_clone) == 1
        assert not fake_clone[0].exists()

    def test_temp_dir_removed_after_schema_failure(self, fake_clone, tmp_path, output_dir):
        result = generate(tmp_path / "missing.yaml", REMOTE_GENERATOR, RunOptions(output=output_dir))
        assert isinstance(result.error, SchemaReadError)
        assert not fake_clone[0].exists()

    def test_temp_dir_removed_after_transformer_failure(self, fake_clone, petstore, output_dir):
        def broken(document):
            raise RuntimeError("boom")

        result = generate(petstore, REMOTE_GENERATOR, RunOptions(output=output_dir), transformers=[broken])
        assert isinstance(result.error, RuntimeError)
        assert not fake_clone[0].exists()

    def test_non_git_reference(self, fake_clone, petstore, output_dir):
        result = generate(petstore, "https://github.com/org/generator", RunOptions(output=output_dir))
        assert isinstance(result.error, InvalidGeneratorReferenceError)
        assert fake_clone == []


class TestReporting:
    def _messages(self, caplog):
        return "\n".join(record.getMessage() for record in caplog.records)

    def test_success_summary(self, caplog, make_generator, petstore, output_dir):
        caplog.set_level(logging.DEBUG, logger="openapi_forge")
        generate(petstore, make_generator(), RunOptions(output=output_dir))
        text = self._messages(caplog)
        assert "SUCCESSFUL" in text
        assert "3 models" in text
        assert "5 endpoints" in text

    def test_failure_summary_mode(self, caplog, make_generator, tmp_path, output_dir):
        caplog.set_level(logging.DEBUG, logger="openapi_forge")
        generate(tmp_path / "missing.json", make_generator(), RunOptions(output=output_dir))
        text = self._messages(caplog)
        assert "FAILED" in text
        assert "missing.json" in text
        assert "Traceback" not in text

    def test_failure_verbose_mode(self, caplog, make_generator, petstore, output_dir):
        caplog.set_level(logging.DEBUG, logger="openapi_forge")
        del petstore["info"]
        options = RunOptions(output=output_dir, log_level=LogLevel.VERBOSE)
        generate(petstore, make_generator(), options)
        text = self._messages(caplog)
        assert "Traceback" in text
        assert "  - " in text

    def test_quiet_mode_only_reports_failures(self, caplog, make_generator, petstore, output_dir):
        caplog.set_level(logging.DEBUG, logger="openapi_forge")
        reporter = Reporter(LogLevel.QUIET)
        generate(petstore, make_generator(), RunOptions(output=output_dir), reporter=reporter)
        assert [r for r in caplog.records if r.name.startswith("openapi_forge")] == []


class TestCountDiscoveries:
    def test_counts(self, petstore):
        assert count_discoveries(petstore) == Counters(3, 5)

    def test_paths_must_be_mapping(self, petstore):
        petstore["paths"] = []
        with pytest.raises(SchemaInvalidError, match="1 error"):
            count_discoveries(petstore)

"""Tests for the main CLI module."""

import json
import sys
from pathlib import Path

import pytest
import yaml
from loguru import logger
from typer.testing import CliRunner

from specinliner.config import CONFIG_FILENAME
from specinliner.main import app, default_output_path

runner = CliRunner()

SPEC = {
    "openapi": "3.0.0",
    "info": {"title": "Test API", "version": "1.0.0"},
    "paths": {
        "/users": {
            "get": {
                "responses": {
                    "200": {
                        "description": "Success",
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/User"}
                            }
                        },
                    }
                }
            }
        }
    },
    "components": {
        "schemas": {
            "User": {"type": "object", "properties": {"id": {"type": "integer"}}},
        }
    },
}


@pytest.fixture(autouse=True)
def restore_logger():
    """The CLI reconfigures loguru; put the default sink back afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr)


def _write_spec(tmp_path: Path, spec: dict, name: str = "openapi.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(spec))
    return path


class TestDefaultOutputPath:
    """Test the default_output_path function."""

    def test_json(self, tmp_path):
        """Test .inlined is inserted before the extension."""
        assert default_output_path(tmp_path / "openapi.json") == tmp_path / "openapi.inlined.json"

    def test_yaml(self, tmp_path):
        """Test YAML keeps its suffix."""
        assert default_output_path(tmp_path / "api.yml") == tmp_path / "api.inlined.yml"


class TestInlineCommand:
    """Test the inline command."""

    def test_writes_default_output(self, tmp_path):
        """Test the inlined spec is written next to the input."""
        input_path = _write_spec(tmp_path, SPEC)

        result = runner.invoke(app, ["inline", str(input_path)])

        assert result.exit_code == 0, result.output
        assert "Success" in result.output
        written = json.loads((tmp_path / "openapi.inlined.json").read_text())
        schema = written["paths"]["/users"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]
        assert schema == SPEC["components"]["schemas"]["User"]
        assert written["components"] == {}

    def test_output_option(self, tmp_path):
        """Test --output chooses the destination."""
        input_path = _write_spec(tmp_path, SPEC)
        output_path = tmp_path / "build" / "bundled.json"

        result = runner.invoke(app, ["inline", str(input_path), "-o", str(output_path)])

        assert result.exit_code == 0, result.output
        assert output_path.exists()
        assert not (tmp_path / "openapi.inlined.json").exists()

    def test_input_untouched(self, tmp_path):
        """Test the original file is not rewritten."""
        input_path = _write_spec(tmp_path, SPEC)
        before = input_path.read_text()

        runner.invoke(app, ["inline", str(input_path)])

        assert input_path.read_text() == before

    def test_missing_input(self, tmp_path):
        """Test a missing file exits with code 1."""
        result = runner.invoke(app, ["inline", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        assert "Failed to inline spec" in result.output

    def test_reports_dangling_refs(self, tmp_path):
        """Test unresolved references are listed."""
        spec = {
            "paths": {"/m": {"get": {"responses": {"200": {"$ref": "#/components/responses/Gone"}}}}},
            "components": {},
        }
        input_path = _write_spec(tmp_path, spec)

        result = runner.invoke(app, ["inline", str(input_path)])

        assert result.exit_code == 0
        assert "Unresolved $ref" in result.output
        assert "#/components/responses/Gone" in result.output
        assert "Success" not in result.output

    def test_strict_flag(self, tmp_path):
        """Test --strict leaves a circular marker instead of a same-named response."""
        spec = {
            "paths": {"/p": {"get": {"responses": {"200": {"$ref": "#/components/schemas/Pet"}}}}},
            "components": {
                "schemas": {"Pet": {"properties": {"me": {"$ref": "#/components/schemas/Pet"}}}},
                "responses": {"Pet": {"description": "pet"}},
            },
        }
        input_path = _write_spec(tmp_path, spec)

        result = runner.invoke(app, ["inline", str(input_path), "--strict"])

        assert result.exit_code == 0, result.output
        assert "Circular reference" in result.output
        written = json.loads((tmp_path / "openapi.inlined.json").read_text())
        me = written["paths"]["/p"]["get"]["responses"]["200"]["properties"]["me"]
        assert me == {"reference": "#/components/schemas/Pet", "circular": True}

    def test_settings_file_applied(self, tmp_path):
        """Test recover_circular from .spec-inliner.yaml is honoured."""
        spec = {
            "paths": {"/p": {"get": {"responses": {"200": {"$ref": "#/components/schemas/Pet"}}}}},
            "components": {
                "schemas": {"Pet": {"properties": {"me": {"$ref": "#/components/schemas/Pet"}}}},
                "responses": {"Pet": {"description": "pet"}},
            },
        }
        input_path = _write_spec(tmp_path, spec)
        (tmp_path / CONFIG_FILENAME).write_text("recover_circular: false\n")

        runner.invoke(app, ["inline", str(input_path)])

        written = json.loads((tmp_path / "openapi.inlined.json").read_text())
        me = written["paths"]["/p"]["get"]["responses"]["200"]["properties"]["me"]
        assert me["circular"] is True

    def test_invalid_settings_file(self, tmp_path):
        """Test a bad config file exits with code 1."""
        input_path = _write_spec(tmp_path, SPEC)
        (tmp_path / CONFIG_FILENAME).write_text("log_level: LOUD\n")

        result = runner.invoke(app, ["inline", str(input_path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestCheckCommand:
    """Test the check command."""

    def test_all_resolve(self, tmp_path):
        """Test a clean spec exits 0."""
        input_path = _write_spec(tmp_path, SPEC)

        result = runner.invoke(app, ["check", str(input_path)])

        assert result.exit_code == 0, result.output
        assert "#/components/schemas/User" in result.output
        assert "1 reference(s), 0 unresolved" in result.output

    def test_dangling_exit_code(self, tmp_path):
        """Test an unresolved reference exits 1."""
        spec = {"paths": {"/m": {"get": {"responses": {"200": {"$ref": "#/components/responses/Gone"}}}}}}
        input_path = _write_spec(tmp_path, spec)

        result = runner.invoke(app, ["check", str(input_path)])

        assert result.exit_code == 1
        assert "1 reference(s), 1 unresolved" in result.output

    def test_does_not_write(self, tmp_path):
        """Test check never produces an output file."""
        input_path = _write_spec(tmp_path, SPEC)

        runner.invoke(app, ["check", str(input_path)])

        assert sorted(p.name for p in tmp_path.iterdir()) == ["openapi.json"]

    def test_missing_input(self, tmp_path):
        """Test a missing file exits with code 1."""
        result = runner.invoke(app, ["check", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "Failed to load spec" in result.output


class TestCheckConfiguration:
    """Settings errors in the check command."""

    def test_invalid_settings_file(self, tmp_path):
        """Test a bad config file is reported as such, not as a load failure."""
        input_path = _write_spec(tmp_path, SPEC)
        (tmp_path / CONFIG_FILENAME).write_text("log_level: LOUD\n")

        result = runner.invoke(app, ["check", str(input_path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert "Failed to load spec" not in result.output


class TestInitCommand:
    """Test the init command."""

    def test_creates_settings_file(self, tmp_path):
        """Test a settings file is written with the chosen options."""
        result = runner.invoke(app, ["init", str(tmp_path), "--strict", "--inline-on-save"])

        assert result.exit_code == 0, result.output
        assert "Created" in result.output
        data = yaml.safe_load((tmp_path / CONFIG_FILENAME).read_text())
        assert data == {"inline_components_on_save": True, "recover_circular": False}

    def test_defaults_write_empty_mapping(self, tmp_path):
        """Test plain init writes a file that loads back to defaults."""
        result = runner.invoke(app, ["init", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert yaml.safe_load((tmp_path / CONFIG_FILENAME).read_text()) == {}

    def test_preserves_existing_file(self, tmp_path):
        """Test an existing settings file is left untouched."""
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("recover_circular: false\n# keep me\n")

        result = runner.invoke(app, ["init", str(tmp_path), "--inline-on-save"])

        assert result.exit_code == 0, result.output
        assert "already exists" in result.output
        assert config_file.read_text() == "recover_circular: false\n# keep me\n"

    def test_init_settings_used_by_inline(self, tmp_path):
        """Test inline picks up the strict policy written by init."""
        runner.invoke(app, ["init", str(tmp_path), "--strict"])
        spec = {
            "paths": {"/p": {"get": {"responses": {"200": {"$ref": "#/components/schemas/Pet"}}}}},
            "components": {
                "schemas": {"Pet": {"properties": {"me": {"$ref": "#/components/schemas/Pet"}}}},
                "responses": {"Pet": {"description": "pet"}},
            },
        }
        input_path = _write_spec(tmp_path, spec)

        runner.invoke(app, ["inline", str(input_path)])

        written = json.loads((tmp_path / "openapi.inlined.json").read_text())
        me = written["paths"]["/p"]["get"]["responses"]["200"]["properties"]["me"]
        assert me == {"reference": "#/components/schemas/Pet", "circular": True}

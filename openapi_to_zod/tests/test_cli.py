import json

import click
import pytest
import yaml
from click.testing import CliRunner

from openapi_to_zod import __version__
from openapi_to_zod.cli import STARTER_CONFIG, cli, describe_invocation, generate

DOCUMENT = """
openapi: 3.0.3
components:
  schemas:
    User:
      type: object
      properties:
        id:
          type: string
      required: [id]
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def document(tmp_path):
    path = tmp_path / "api.yaml"
    path.write_text(DOCUMENT)
    return path


class TestGenerateCommand:
    def test_writes_output(self, runner, document, tmp_path):
        output = tmp_path / "schemas.ts"
        result = runner.invoke(cli, ["generate", str(document), str(output), "--mode", "strict", "--no-stats"])
        assert result.exit_code == 0, result.output
        content = output.read_text()
        assert "export const userSchema = z.strictObject({\n\tid: z.string()\n});" in content
        assert "Generation Statistics" not in content

    def test_generator_errors_exit_with_message(self, runner, tmp_path):
        empty = tmp_path / "empty.yaml"
        empty.write_text("openapi: 3.0.3\npaths: {}\n")
        result = runner.invoke(cli, ["generate", str(empty), str(tmp_path / "out.ts")])
        assert result.exit_code == 1
        assert "No schemas found in OpenAPI spec" in result.output

    def test_missing_input_is_a_usage_error(self, runner, tmp_path):
        result = runner.invoke(cli, ["generate", str(tmp_path / "missing.yaml"), str(tmp_path / "out.ts")])
        assert result.exit_code == 2

    def test_invalid_choice(self, runner, document, tmp_path):
        result = runner.invoke(cli, ["generate", str(document), str(tmp_path / "out.ts"), "--enum-type", "flags"])
        assert result.exit_code == 2


class TestBatchCommand:
    def write_config(self, tmp_path, specs):
        path = tmp_path / "openapi-to-zod.config.yaml"
        path.write_text(yaml.safe_dump({"executionMode": "sequential", "specs": specs}))
        return path

    def test_all_specs_succeed(self, runner, document, tmp_path):
        config = self.write_config(tmp_path, [{"input": "api.yaml", "output": "out/a.ts"}, {"input": "api.yaml", "output": "out/b.ts"}])
        result = runner.invoke(cli, ["batch", "--config", str(config)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "a.ts").exists()
        assert (tmp_path / "out" / "b.ts").exists()

    def test_any_failure_sets_exit_code(self, runner, document, tmp_path):
        config = self.write_config(tmp_path, [{"input": "missing.yaml", "output": "a.ts"}, {"input": "api.yaml", "output": "b.ts"}])
        result = runner.invoke(cli, ["batch", "-c", str(config), "--execution-mode", "parallel"])
        assert result.exit_code == 1
        assert not (tmp_path / "a.ts").exists()
        assert (tmp_path / "b.ts").exists()

    def test_invalid_config(self, runner, tmp_path):
        config = self.write_config(tmp_path, [])
        result = runner.invoke(cli, ["batch", "--config", str(config)])
        assert result.exit_code == 1
        assert "non-empty 'specs'" in result.output


class TestInitCommand:
    def test_writes_yaml_config_once(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(cli, ["init"])
            assert result.exit_code == 0, result.output
            assert "Created openapi-to-zod.config.yaml" in result.output
            with open("openapi-to-zod.config.yaml") as f:
                assert yaml.safe_load(f) == STARTER_CONFIG

            again = runner.invoke(cli, ["init"])
            assert again.exit_code == 1
            assert "File already exists" in again.output

            forced = runner.invoke(cli, ["init", "--force"])
            assert forced.exit_code == 0

    def test_json_format(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(cli, ["init", "--format", "json"])
            assert result.exit_code == 0, result.output
            with open("openapi-to-zod.config.json") as f:
                assert json.load(f) == STARTER_CONFIG


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


class TestDescribeInvocation:
    def test_without_context(self):
        assert describe_invocation(generate) == "openapi-to-zod"

    def test_defaults_are_omitted(self):
        with click.Context(generate) as ctx:
            ctx.params = {
                "input_path": "api.yaml",
                "output_path": "schemas.ts",
                "mode": "strict",
                "prefix": None,
                "no_stats": True,
                "use_describe": False,
                "enum_type": "zod",
            }
            result = describe_invocation(generate)
        assert result == "openapi-to-zod generate api.yaml schemas.ts --mode strict --no-stats"

import json
import logging
import sys
from pathlib import Path

import click
import yaml

from . import __version__
from .batch import execute_batch, get_batch_exit_code
from .config import EnumType, ExecutionMode, GeneratorOptions, ObjectMode, SchemaType, load_config
from .errors import GeneratorError
from .generator import OpenApiGenerator
from .writer import AtomicWriter

logger = logging.getLogger(__name__)

PROG_NAME = "openapi-to-zod"

STARTER_CONFIG = {
    "defaults": {
        "mode": "strict",
        "includeDescriptions": True,
        "showStats": False,
    },
    "specs": [
        {
            "input": "openapi.yaml",
            "output": "src/schemas.ts",
        },
    ],
}


def _choice(enum_cls) -> click.Choice:
    return click.Choice([member.value for member in enum_cls])


def describe_invocation(command: click.Command) -> str:
    """The running command as a shell line for debug logs; options left at their default are omitted."""
    ctx = click.get_current_context(silent=True)
    if ctx is None or not ctx.params:
        return PROG_NAME

    words = [PROG_NAME, command.name]
    flags = []
    for param in command.params:
        value = ctx.params.get(param.name)
        if value is None or value is False or value in ("", ()):
            continue
        if isinstance(param, click.Argument):
            words.append(str(value))
        elif value == param.default:
            continue
        elif param.is_flag:
            flags.append(param.opts[0])
        else:
            flags.extend([param.opts[0], str(value)])
    return " ".join(words + flags)


@click.group()
@click.version_option(__version__, prog_name=PROG_NAME)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every compilation step")
@click.option("--quiet", "-q", is_flag=True, default=False, help="Only log warnings and errors")
def cli(verbose, quiet):
    """Generate Zod v4 schemas and TypeScript types from OpenAPI documents."""
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


@cli.command()
@click.argument("input_path", metavar="INPUT", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.argument("output_path", metavar="OUTPUT", type=click.Path(dir_okay=False, resolve_path=True))
@click.option("--mode", type=_choice(ObjectMode), default=ObjectMode.NORMAL.value, help="Object openness")
@click.option("--prefix", default=None, help="Prefix for schema identifiers")
@click.option("--suffix", default=None, help="Suffix for schema identifiers")
@click.option("--no-descriptions", is_flag=True, default=False, help="Omit JSDoc comments")
@click.option("--use-describe", is_flag=True, default=False, help="Append .describe() with schema descriptions")
@click.option("--default-nullable", is_flag=True, default=False, help="Treat properties as nullable unless stated otherwise")
@click.option("--enum-type", type=_choice(EnumType), default=EnumType.ZOD.value, help="Representation of top-level enums")
@click.option("--schema-type", type=_choice(SchemaType), default=SchemaType.ALL.value, help="Filter readOnly/writeOnly properties")
@click.option("--no-stats", is_flag=True, default=False, help="Omit the statistics block")
@click.option("--date-time-regex", default=None, help="Custom regex for date-time strings")
def generate(
    input_path,
    output_path,
    mode,
    prefix,
    suffix,
    no_descriptions,
    use_describe,
    default_nullable,
    enum_type,
    schema_type,
    no_stats,
    date_time_regex,
):
    """Generate OUTPUT from the OpenAPI document INPUT."""
    logger.debug("Invocation: %s", describe_invocation(generate))
    try:
        options = GeneratorOptions.from_dict(
            {
                "input": input_path,
                "output": output_path,
                "mode": mode,
                "prefix": prefix,
                "suffix": suffix,
                "include_descriptions": not no_descriptions,
                "use_describe": use_describe,
                "default_nullable": default_nullable,
                "enum_type": enum_type,
                "schema_type": schema_type,
                "show_stats": not no_stats,
                "custom_date_time_format_regex": date_time_regex,
            }
        )
        OpenApiGenerator(options).generate()
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.option("--config", "-c", "config_path", required=True, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--execution-mode", type=_choice(ExecutionMode), default=None, help="Override the configured execution mode")
def batch(config_path, execution_mode):
    """Generate every spec listed in a configuration file."""
    logger.debug("Invocation: %s", describe_invocation(batch))
    try:
        config = load_config(config_path)
        mode = ExecutionMode(execution_mode) if execution_mode else config.execution_mode
        summary = execute_batch(config.specs, mode, config.batch_size)
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(get_batch_exit_code(summary))


@cli.command()
@click.option("--format", "config_format", type=click.Choice(["yaml", "json"]), default="yaml")
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing configuration file")
def init(config_format, force):
    """Write a starter configuration file to the current directory."""
    path = Path(f"openapi-to-zod.config.{config_format}")
    if config_format == "json":
        content = json.dumps(STARTER_CONFIG, indent=2) + "\n"
    else:
        content = yaml.safe_dump(STARTER_CONFIG, sort_keys=False)

    writer = AtomicWriter()
    try:
        if force:
            writer.write(path, content)
        else:
            writer.write_if_not_exists(path, content)
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Created {path}")


def main():
    cli()


if __name__ == "__main__":
    main()

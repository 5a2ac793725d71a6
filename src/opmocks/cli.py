import logging
import sys
from pathlib import Path
from typing import Any

import rich_click as click
import yaml
from graphql import GraphQLError, GraphQLSchema
from pydantic import ValidationError
from rich.traceback import install

from opmocks import __version__, log
from opmocks.config import GenerationConfig, load_generation_config
from opmocks.emit import OutputFormat, render
from opmocks.errors import ConfigurationError
from opmocks.loader import check_correct_schema, load_documents, load_schema, resolve_graphql_files
from opmocks.orchestrator import generate_mocks
from opmocks.shapes import GeneratedArtifact


class PathResolverOption(click.Option):
    def process_value(self, ctx: click.Context, value: Any) -> list[Path] | None:
        value = super().process_value(ctx, value)
        if not value:
            return None
        paths = set(value)
        return resolve_graphql_files(list(paths))


schema_option = click.option(
    "--schema",
    "-s",
    "schemas",
    type=click.Path(exists=True, path_type=Path),
    cls=PathResolverOption,
    required=True,
    multiple=True,
    help="The GraphQL schema file or directory containing schema files. Can be specified multiple times.",
)


documents_option = click.option(
    "--documents",
    "-d",
    "documents",
    type=click.Path(exists=True, path_type=Path),
    cls=PathResolverOption,
    required=True,
    multiple=True,
    help="GraphQL operation file or directory of operation files. Can be specified multiple times.",
)


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with scalar generators and naming options",
)


max_depth_option = click.option(
    "--max-depth",
    type=click.IntRange(min=0),
    help="Maximum nesting depth of generated shapes. Overrides the configuration file.",
)


def assert_correct_schema(schema: GraphQLSchema) -> None:
    schema_errors = check_correct_schema(schema)
    if schema_errors:
        log.error("Schema validation failed:")
        for error in schema_errors:
            log.error(error)
        log.error(f"Found {len(schema_errors)} validation error(s). Please fix the schema before generating.")
        sys.exit(1)


def load_config_or_exit(config_path: Path | None, max_depth: int | None, no_operation_suffix: bool) -> GenerationConfig:
    try:
        config = load_generation_config(config_path)
    except (OSError, TypeError, ValidationError, yaml.YAMLError) as e:
        log.error(f"Invalid configuration: {e}")
        sys.exit(1)

    if max_depth is not None:
        config.max_depth = max_depth
    if no_operation_suffix:
        config.naming.add_operation_suffix = False
    return config


def run_generation(
    schemas: list[Path], documents: list[Path], config: GenerationConfig
) -> list[GeneratedArtifact]:
    try:
        schema = load_schema(schemas)
        assert_correct_schema(schema)
        sources = load_documents(documents)
        return generate_mocks(schema, sources, config)
    except ConfigurationError as e:
        log.error(f"Configuration error: {e}")
        sys.exit(1)
    except GraphQLError as e:
        log.error(f"Failed to parse GraphQL input: {e}")
        sys.exit(1)


@click.group(context_settings={"auto_envvar_prefix": "opmocks"})
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    help="Log level",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Log file",
)
@click.version_option(__version__)
def cli(log_level: str, log_file: Path | None) -> None:
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level.upper())
    if log_level.upper() == "DEBUG":
        _ = install(show_locals=True)


@cli.command()
@schema_option
@documents_option
@config_option
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=True,
    help="Output file",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([output_format.value for output_format in OutputFormat], case_sensitive=False),
    default=OutputFormat.TYPESCRIPT.value,
    help="Output format",
    show_default=True,
)
@click.option(
    "--no-operation-suffix",
    is_flag=True,
    default=False,
    help="Do not append Query/Mutation/Subscription/Fragment to root shape names",
)
@max_depth_option
def generate(
    schemas: list[Path],
    documents: list[Path],
    config_path: Path | None,
    output: Path,
    output_format: str,
    no_operation_suffix: bool,
    max_depth: int | None,
) -> None:
    """Generate typed sample-value factories for GraphQL operations and fragments."""
    config = load_config_or_exit(config_path, max_depth, no_operation_suffix)
    artifacts = run_generation(schemas, documents, config)

    content = render(artifacts, OutputFormat(output_format.lower()))
    output.parent.mkdir(parents=True, exist_ok=True)
    _ = output.write_text(content, encoding="utf-8")

    log.success(f"Generated {len(artifacts)} artifact(s) to {output}")


@cli.command()
@schema_option
@documents_option
@config_option
@max_depth_option
def inspect(schemas: list[Path], documents: list[Path], config_path: Path | None, max_depth: int | None) -> None:
    """List the artifacts that would be generated, without writing any file."""
    config = load_config_or_exit(config_path, max_depth, no_operation_suffix=False)
    artifacts = run_generation(schemas, documents, config)

    if not artifacts:
        log.hint("No named operations or fragments found")
        return

    for artifact in artifacts:
        log.key_value(artifact.kind.value, f"{artifact.name} ([cyan]{artifact.factory_name}[/cyan])")
        if artifact.dependencies:
            log.hint(f"    depends on: {', '.join(artifact.dependencies)}")


if __name__ == "__main__":
    cli()

"""CLI entry point for apigen."""

import logging
from pathlib import Path

import click

from apigen.config import GeneratorConfig, load_config
from apigen.errors import ApiGenError
from apigen.generator.api import OpenApiSpec, to_api_module
from apigen.model.definitions import ApiModule

SPEC_PATHS = click.argument(
    "spec_paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
DOCS_OPTION = click.option("--docs", default=None, help="Documentation page path, relative to the generated code.")
STATIC_DIR_OPTION = click.option("--static-dir", default=None, help="Directory the OpenAPI documents are served from.")
CONFIG_OPTION = click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with generator settings.",
)


def _settings(config_path: Path | None, **overrides) -> GeneratorConfig:
    """Load the config file and apply command line overrides."""
    try:
        config = load_config(config_path)
    except ApiGenError as e:
        raise click.ClickException(str(e)) from e
    return config.model_copy(update={k: v for k, v in overrides.items() if v is not None})


def _compile(spec_paths: tuple[Path, ...], config: GeneratorConfig) -> ApiModule:
    """Read documents in the given order and compile them into one module."""
    specs = [
        OpenApiSpec(content=path.read_text(encoding="utf-8"), path=served_path)
        for path, served_path in zip(spec_paths, config.spec_paths(list(spec_paths)))
    ]
    try:
        return to_api_module(config.docs_path, specs)
    except ApiGenError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """apigen: compile OpenAPI documents into a server model."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@SPEC_PATHS
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file for the serialized model.")
@DOCS_OPTION
@STATIC_DIR_OPTION
@CONFIG_OPTION
def generate(spec_paths: tuple[Path, ...], output: Path | None, docs: str | None, static_dir: str | None, config_path: Path | None):
    """Compile OpenAPI documents (one per major version) into a model file."""
    config = _settings(config_path, output=output, docs_path=docs, static_dir=static_dir)
    if config.output is None:
        raise click.UsageError("Missing option '-o' / '--output'.")

    click.echo(f"Compiling {len(spec_paths)} document(s)...")
    module = _compile(spec_paths, config)

    config.output.parent.mkdir(parents=True, exist_ok=True)
    config.output.write_text(module.dump_yaml(), encoding="utf-8")
    click.echo(
        f"Found {len(module.api.definitions)} definitions, "
        f"{len(module.api.operations)} operations, {len(module.api.paths)} routes."
    )
    click.echo(f"Model saved to {config.output}")


@main.command()
@SPEC_PATHS
@DOCS_OPTION
@STATIC_DIR_OPTION
@CONFIG_OPTION
def check(spec_paths: tuple[Path, ...], docs: str | None, static_dir: str | None, config_path: Path | None):
    """Compile OpenAPI documents without writing anything."""
    config = _settings(config_path, docs_path=docs, static_dir=static_dir)
    module = _compile(spec_paths, config)

    for route in module.api.paths:
        click.echo(f"  {route.method.attribute.upper():6} {route.path} -> {route.operation}")
    click.echo(
        f"OK: {len(module.api.definitions)} definitions, "
        f"{len(module.api.operations)} operations, {len(module.api.paths)} routes."
    )

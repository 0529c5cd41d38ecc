"""
OXA Tree CLI

Command line tool to validate, inspect and migrate OXA documents
"""

import json
import sys
from typing import Dict, Optional, Tuple

import click

from . import __version__
from .config import (
    EngineConfig,
    build_registry,
    build_validator,
    configure_logging,
    load_config_from_env,
    load_config_from_file,
)
from .core.document import dumps, load_raw
from .core.errors import OxaError
from .core.nodes import Node
from .core.path import PathResolver
from .core.registry import SchemaRegistry
from .engine.promotion import demote, promote, promotion_mapping
from .engine.traversal import walk


def _parse_mapping(pairs: Tuple[str, ...]) -> Dict[str, str]:
    """Parse key=field pairs; a bare key maps to a field of the same name"""
    mapping = {}
    for pair in pairs:
        key, sep, field = pair.partition("=")
        if not key or (sep and not field):
            raise click.BadParameter(f"Expected key=field, got {pair!r}", param_hint="--map")
        mapping[key] = field or key
    return mapping


def _make_config(ctx: click.Context, schemas: Tuple[str, ...]) -> EngineConfig:
    config: EngineConfig = ctx.obj["config"]
    if schemas:
        config.schema_paths = [*config.schema_paths, *schemas]
    return config


def _load_node(document: str, config: EngineConfig, registry: SchemaRegistry) -> Node:
    result = build_validator(config, registry).validate(load_raw(document))
    return result.raise_if_invalid()


def _fail(error: OxaError) -> None:
    click.echo(f"Error: {error.message}", err=True)
    for violation in error.details.get("violations", []):
        location = PathResolver.format(tuple(violation["path"]))
        click.echo(f"  - {location}: {violation['kind']}: {violation['message']}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file (YAML or JSON)",
)
@click.option("--log-level", help="Log level, e.g. DEBUG")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], log_level: Optional[str]):
    """OXA Tree - validate and migrate OXA documents"""
    try:
        config = load_config_from_file(config_path) if config_path else load_config_from_env()
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--config") from e
    if log_level:
        config.log_level = log_level
    configure_logging(config)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--schemas", "-s",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Extra schema file to register",
)
@click.option(
    "--format", "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Report format",
)
@click.pass_context
def validate(ctx: click.Context, document: str, schemas: Tuple[str, ...], fmt: str):
    """Validate an OXA document"""
    config = _make_config(ctx, schemas)
    try:
        validator = build_validator(config)
        result = validator.validate(load_raw(document))
    except OxaError as e:
        _fail(e)
        return

    if fmt == "json":
        click.echo(
            json.dumps(
                {"valid": result.valid, "violations": result.to_report(), "warnings": result.warnings},
                indent=2,
                ensure_ascii=False,
            )
        )
    else:
        for warning in result.warnings:
            click.echo(f"Warning: {warning}", err=True)
        if result.valid:
            click.echo(f"Document is valid: {document}")
        else:
            click.echo(f"Validation failed: {len(result.violations)} violation(s)", err=True)
            for violation in result.violations:
                click.echo(f"  - {violation}", err=True)

    if not result.valid:
        sys.exit(1)


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--schemas", "-s",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Extra schema file to register",
)
@click.pass_context
def show(ctx: click.Context, document: str, schemas: Tuple[str, ...]):
    """Show the structure of an OXA document"""
    config = _make_config(ctx, schemas)
    try:
        tree = _load_node(document, config, build_registry(config))
    except OxaError as e:
        _fail(e)
        return

    click.echo(f"Document: {document}")
    for path, node in walk(tree):
        indent = "  " * len(path)
        line = f"{indent}{node.type}"
        if node.fields:
            attrs = ", ".join(
                f"{k}={v!r}" for k, v in node.fields.items() if not isinstance(v, tuple)
            )
            if attrs:
                line += f" ({attrs})"
        if node.value is not None:
            line += f": {node.value!r}"
        click.echo(line)


@cli.command()
@click.option(
    "--schemas", "-s",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Extra schema file to register",
)
@click.pass_context
def types(ctx: click.Context, schemas: Tuple[str, ...]):
    """List registered node types"""
    config = _make_config(ctx, schemas)
    try:
        registry = build_registry(config)
    except OxaError as e:
        _fail(e)
        return

    for schema in registry:
        children = (
            f" [{schema.child_content_class.value} children]" if schema.is_container else ""
        )
        click.echo(
            f"{schema.name} v{schema.version}: "
            f"{schema.category.value} {schema.content_class.value}{children}"
        )


def _migration_command(name: str, operation, help_text: str):
    @cli.command(name=name, help=help_text)
    @click.argument("document", type=click.Path(exists=True, dir_okay=False))
    @click.option("--type", "type_name", required=True, help="Node type to migrate")
    @click.option(
        "--map", "pairs",
        multiple=True,
        help="data key=field pair; defaults to the type's declared promotions",
    )
    @click.option(
        "--schemas", "-s",
        multiple=True,
        type=click.Path(exists=True, dir_okay=False),
        help="Extra schema file to register",
    )
    @click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file")
    @click.option(
        "--format", "fmt",
        type=click.Choice(["json", "yaml"]),
        default=None,
        help="Output format",
    )
    @click.pass_context
    def command(ctx, document, type_name, pairs, schemas, output, fmt):
        config = _make_config(ctx, schemas)
        fmt = fmt or config.default_format
        try:
            registry = build_registry(config)
            mapping = _parse_mapping(pairs) or promotion_mapping(registry.resolve(type_name))
            tree = _load_node(document, config, registry)
            migrated = operation(tree, type_name, mapping, registry)
        except OxaError as e:
            _fail(e)
            return

        text = dumps(migrated, fmt)
        if output:
            with open(output, "w", encoding="utf-8") as f:
                f.write(text)
            click.echo(f"Result saved to: {output}")
        else:
            click.echo(text)

    return command


promote_command = _migration_command(
    "promote", promote, "Move data keys of a node type to first-class fields"
)
demote_command = _migration_command(
    "demote", demote, "Move first-class fields of a node type back under data"
)


def main():
    """CLI entry point"""
    cli()


if __name__ == "__main__":
    main()

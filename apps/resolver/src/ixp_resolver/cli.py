"""CLI for checking definition files and resolving intents offline."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from ixp_core.errors import ConfigurationError, IxpError

from .config import settings
from .registry import ComponentRegistry, IntentRegistry
from .resolver import IntentResolver, find_unresolved_components

logger = logging.getLogger(__name__)

_path_option = click.Path(exists=False, dir_okay=False, path_type=Path)


def _load_registries(
    intents_path: Path | None, components_path: Path | None
) -> tuple[IntentRegistry, ComponentRegistry]:
    intents_path = intents_path or settings.intents_path
    components_path = components_path or settings.components_path
    if intents_path is None or components_path is None:
        msg = (
            "Both --intents and --components "
            "(or IXP_INTENTS_PATH / IXP_COMPONENTS_PATH) are required"
        )
        raise ConfigurationError(msg)
    return IntentRegistry(intents_path), ComponentRegistry(components_path)


@click.group()
def cli() -> None:
    """IXP intent resolver CLI."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(levelname)s: %(message)s",
    )


@cli.command("check")
@click.option("--intents", "intents_path", type=_path_option, help="Intent definitions JSON")
@click.option(
    "--components", "components_path", type=_path_option, help="Component definitions JSON"
)
def check(intents_path: Path | None, components_path: Path | None) -> None:
    """Load definition files and report dangling component references."""
    try:
        intents, components = _load_registries(intents_path, components_path)
    except ConfigurationError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)

    click.echo(f"Intents: {len(intents)} | Components: {len(components)}")
    unresolved = find_unresolved_components(intents, components)
    for intent in unresolved:
        click.echo(
            f"  Intent '{intent.name}' targets missing component '{intent.component}'",
            err=True,
        )
    if unresolved:
        sys.exit(1)
    click.echo("OK")


@cli.command("resolve")
@click.argument("name")
@click.option("--params", default="{}", help="Intent parameters as a JSON object")
@click.option("--intents", "intents_path", type=_path_option, help="Intent definitions JSON")
@click.option(
    "--components", "components_path", type=_path_option, help="Component definitions JSON"
)
@click.option("--json-output", is_flag=True, help="Output as JSON")
def resolve(
    name: str,
    params: str,
    intents_path: Path | None,
    components_path: Path | None,
    json_output: bool,
) -> None:
    """Resolve NAME to a component descriptor."""
    try:
        parameters = json.loads(params)
    except json.JSONDecodeError as exc:
        click.echo(f"Error: --params is not valid JSON: {exc}", err=True)
        sys.exit(1)

    try:
        intents, components = _load_registries(intents_path, components_path)
        resolver = IntentResolver(intents, components)
        descriptor = asyncio.run(
            resolver.resolve_intent({"name": name, "parameters": parameters})
        )
    except IxpError as exc:
        click.echo(f"Error [{exc.code}]: {exc.message}", err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(descriptor.to_json(), indent=2))
    else:
        click.echo(
            f"{name} -> {descriptor.component_definition.name} "
            f"({descriptor.export_name} from {descriptor.module_url}) "
            f"ttl={descriptor.ttl_seconds}s"
        )
        for key, value in descriptor.props.items():
            click.echo(f"  {key} = {json.dumps(value)}")

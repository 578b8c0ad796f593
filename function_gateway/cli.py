"""Admin CLI for the function gateway."""

from __future__ import annotations

import asyncio
import json
import sys

import click

from function_gateway.auth import sign as sign_key
from function_gateway.auth import verify as verify_key
from function_gateway.config import get_settings
from function_gateway.errors import GatewayError


def run_async(coro):
    """Run an async function in a new event loop."""
    return asyncio.run(coro)


def _build_registry(categories: str | None):
    from function_gateway.main import load_configured_builtins
    from function_gateway.registry import FunctionRegistry

    settings = get_settings()
    if categories is not None:
        settings = settings.model_copy(update={"builtin_categories": categories})
    registry = FunctionRegistry()
    load_configured_builtins(registry, settings)
    return registry


@click.group()
def cli():
    """Function gateway administration CLI."""
    pass


# --- Signed keys ---


@cli.command()
@click.option("--account-id", required=True, help="Account identifier to sign")
@click.option("--secret", envvar="SIGNING_SECRET", required=True, help="Signing secret (default: $SIGNING_SECRET)")
@click.option("--base-url", default=None, help="Print a ready-to-use URL for this gateway")
def sign(account_id: str, secret: str, base_url: str | None):
    """Print the signed key for an account.

    Keys never expire. Rotating the secret invalidates every key issued.
    """
    signature = sign_key(account_id, secret)
    click.echo(signature)
    if base_url:
        click.echo(f"{base_url.rstrip('/')}/functions?account_id={account_id}&signature={signature}")


@cli.command()
@click.option("--account-id", required=True, help="Account identifier")
@click.option("--signature", required=True, help="Signed key to check")
@click.option("--secret", envvar="SIGNING_SECRET", required=True, help="Signing secret (default: $SIGNING_SECRET)")
def verify(account_id: str, signature: str, secret: str):
    """Check a signed key. Exits non-zero when it does not match."""
    if verify_key(account_id, signature, secret):
        click.echo("valid")
        return
    click.echo("invalid", err=True)
    sys.exit(1)


# --- Functions ---


@cli.group()
def functions():
    """Inspect and call registered functions."""
    pass


@functions.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include hidden functions")
@click.option("--categories", default=None, help="Builtin categories to load (default: $BUILTIN_CATEGORIES)")
def list_functions(show_all: bool, categories: str | None):
    """List registered functions."""
    registry = _build_registry(categories)
    entries = registry.entries()
    if not show_all:
        entries = [e for e in entries if e.visible]
    if not entries:
        click.echo("No functions registered.")
        return

    click.echo(f"{'Name':<20} {'Category':<10} {'Visible':<8} {'Active':<7} Arguments")
    click.echo("-" * 78)
    for entry in entries:
        args = ", ".join(entry.schema.argument_names) or "-"
        category = entry.category or "-"
        click.echo(f"{entry.name:<20} {category:<10} {str(entry.visible):<8} {str(entry.active):<7} {args}")


@functions.command("call")
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Arguments as a JSON object")
@click.option("--categories", default=None, help="Builtin categories to load (default: $BUILTIN_CATEGORIES)")
def call_function(name: str, raw_args: str, categories: str | None):
    """Call a function locally, bypassing HTTP and auth."""
    try:
        args = json.loads(raw_args)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--args")

    registry = _build_registry(categories)
    try:
        result = run_async(registry.call_by_name(name, args))
    except GatewayError as e:
        click.echo(f"{e.kind}: {e.message}", err=True)
        sys.exit(1)
    click.echo(json.dumps(result, indent=2, default=str))


# --- Server ---


@cli.command()
def routes():
    """Print every route the gateway mounts."""
    from function_gateway.introspection import format_routes, list_routes
    from function_gateway.main import create_app
    from function_gateway.store import MemoryConfigStore

    app = create_app(registry=_build_registry(None), store=MemoryConfigStore())
    for line in format_routes(list_routes(app)):
        click.echo(line)


@cli.command()
@click.option("--host", default=None, help="Bind host (default: $HOST)")
@click.option("--port", default=None, type=int, help="Bind port (default: $PORT)")
def serve(host: str | None, port: int | None):
    """Run the gateway with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "function_gateway.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    cli()

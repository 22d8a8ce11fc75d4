"""CLI entry point for secret-lover.

Commands:
    - add: Store a secret, globally or for a project
    - get: Print a secret (project tier first, then global)
    - get-auth: Like get, but authenticate first
    - delete: Remove a secret
    - list: Names stored in one tier
    - list-all: Every secret with its project

Example::

    $ secret-lover add OPENAI_API_KEY --project webapp
    Value:
    OK
    $ secret-lover get-auth OPENAI_API_KEY --project webapp
    sk-...
    $ secret-lover list-all
    DATABASE_URL    global
    OPENAI_API_KEY  webapp
"""

import sys
from typing import NoReturn

import click
import structlog

from secret_lover.config.settings import SecretLoverSettings
from secret_lover.credentials import (
    CredentialError,
    CredentialStore,
    KeyringBackend,
    build_gate,
    format_records,
)
from secret_lover.exceptions import ConfigurationError
from secret_lover.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

project_option = click.option("--project", "-p", default=None, help="Project scope (default: global)")


@click.group()
@click.option("--config", default=None, help="Path to configuration file")
@click.option("--log-level", default=None, help="Logging level (overrides configuration)")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str | None) -> None:
    """secret-lover: project-scoped secrets in the system keyring."""
    try:
        settings = SecretLoverSettings.load(config)
        configure_logging(log_level or settings.log_level)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    backend = KeyringBackend(index_service=settings.index_service)
    store = CredentialStore(backend, namespace=settings.namespace, gate=build_gate(settings))
    ctx.obj = {"settings": settings, "store": store}


@cli.command()
@click.argument("name")
@click.argument("value", required=False)
@project_option
@click.pass_context
def add(ctx: click.Context, name: str, value: str | None, project: str | None) -> None:
    """Store a secret. Prompts for VALUE when it is omitted."""
    if value is None:
        value = click.prompt("Value", hide_input=True)

    try:
        ctx.obj["store"].add(name, value, project)
    except CredentialError as e:
        _fail(e)

    click.echo("OK")


@cli.command()
@click.argument("name")
@project_option
@click.pass_context
def get(ctx: click.Context, name: str, project: str | None) -> None:
    """Print a secret without authenticating."""
    try:
        value = ctx.obj["store"].get(name, project)
    except CredentialError as e:
        _fail(e)

    click.echo(value)


@cli.command(name="get-auth")
@click.argument("name")
@project_option
@click.pass_context
def get_auth(ctx: click.Context, name: str, project: str | None) -> None:
    """Authenticate, then print a secret.

    The mechanism comes from the "gate" setting. By default a configured
    gate_command is run, otherwise confirmation is asked on the terminal.
    Without a terminal or helper program the secret is printed unprompted.
    """
    try:
        value = ctx.obj["store"].get_with_gate(name, project)
    except CredentialError as e:
        _fail(e)

    click.echo(value)


@cli.command()
@click.argument("name")
@project_option
@click.pass_context
def delete(ctx: click.Context, name: str, project: str | None) -> None:
    """Delete a secret. Deleting a missing secret succeeds."""
    try:
        ctx.obj["store"].delete(name, project)
    except CredentialError as e:
        _fail(e)

    click.echo("OK")


@cli.command(name="list")
@project_option
@click.pass_context
def list_secrets(ctx: click.Context, project: str | None) -> None:
    """List secret names in one tier (global unless --project is given)."""
    try:
        names = ctx.obj["store"].list_names(project)
    except CredentialError as e:
        _fail(e)

    for name in names:
        click.echo(name)


@cli.command(name="list-all")
@click.pass_context
def list_all(ctx: click.Context) -> None:
    """List every secret with the project it belongs to."""
    try:
        records = ctx.obj["store"].list_all()
    except CredentialError as e:
        _fail(e)

    for line in format_records(records):
        click.echo(line)


def _fail(error: CredentialError) -> NoReturn:
    """Report a credential error on stderr and exit with status 1."""
    log.debug("command_failed", error=error.message, reference=error.reference)
    click.echo(click.style(f"Error: {error.message}", fg="red"), err=True)
    if error.suggestion:
        click.echo(click.style(f"Suggestion: {error.suggestion}", fg="yellow"), err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()

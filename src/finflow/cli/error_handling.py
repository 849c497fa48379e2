"""CLI error handling helpers."""

import click

from finflow.domain.errors import AmbiguousScopeError, DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, AmbiguousScopeError):
        click.echo("Re-run with --scope single or --scope series.", err=True)
    ctx.exit(1)

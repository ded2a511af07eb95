"""CLI error handling and output helpers."""

import json
from typing import Any

import click

from microcompta.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def echo_json(payload: Any) -> None:
    """Print a ``to_dict()`` payload as indented JSON."""
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))

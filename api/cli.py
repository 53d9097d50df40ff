"""Flask CLI commands for ledger maintenance."""

from __future__ import annotations

import logging

import click
from flask import Flask
from flask.cli import with_appcontext

from api.deps import get_identity_service

logger = logging.getLogger(__name__)


@click.command("purge-refresh-tokens")
@with_appcontext
def purge_refresh_tokens() -> None:
    """Delete every refresh token whose expiry has passed."""
    purged = get_identity_service().ledger.purge_expired()
    click.echo(f"Purged {purged} expired refresh token(s).")


def init_app(app: Flask) -> None:
    app.cli.add_command(purge_refresh_tokens)

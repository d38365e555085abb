#!/usr/bin/env python3
"""CLI entry point for the user store."""

import typer

from src.userstore.runtime.config.config_data import ConfigData, DatabaseConfig, LoggingConfig
from src.userstore.runtime.context import apply_overrides, load_config, set_config
from src.userstore.runtime.logging_setup import configure_logging

from .user_commands import users_app

app = typer.Typer(
    name="userstore",
    help="User store CLI - Manage users in the configured database",
    rich_markup_mode="rich",
)

app.add_typer(users_app, name="users")


@app.callback()
def main(
    database_url: str | None = typer.Option(
        None, "--database-url", help="Override the configured database URL"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override the configured log level"),
) -> None:
    """Load the configuration, apply command line overrides and configure logging."""
    set_config(load_config())

    overrides = {}
    if database_url:
        overrides["database"] = DatabaseConfig(url=database_url)
    if log_level:
        overrides["logging"] = LoggingConfig(level=log_level.upper())
    apply_overrides(ConfigData(**overrides))

    configure_logging()


if __name__ == "__main__":
    app()

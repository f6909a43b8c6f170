"""Main CLI application module."""

import typer

from src.profile_sync.runtime.logging_setup import configure_logging

from .profile_commands import init_db_command, pending_app, profile_app

app = typer.Typer(
    help="Profile sync administration",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def _setup() -> None:
    configure_logging()


app.command("init-db")(init_db_command)
app.add_typer(profile_app, name="profile")
app.add_typer(pending_app, name="pending")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

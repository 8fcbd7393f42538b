"""Main CLI application module."""

import typer

from .db_commands import init_db, list_users
from .server_commands import serve

app = typer.Typer(
    help="User service CLI - database setup, inspection and serving",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command(name="init-db")(init_db)
app.command(name="list-users")(list_users)
app.command(name="serve")(serve)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

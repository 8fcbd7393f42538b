"""Database CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from user_service.core.exceptions import UserServiceError
from user_service.core.services import DbSessionService, RedisService, UserService
from user_service.core.storage import build_record_cache
from user_service.entities.user import User, UserRepository
from user_service.runtime.context import get_config

console = Console()


def init_db() -> None:
    """Create the users table and its unique email index."""
    config = get_config()
    database_service = DbSessionService(config.database)
    try:
        database_service.create_all()
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database_service.dispose()

    console.print(f"[green]✅ Database ready at {config.database.sanitized_url}[/green]")


async def _fetch_page(offset: int, limit: int, order: str) -> list[User]:
    config = get_config()
    database_service = DbSessionService(config.database)
    redis_service = RedisService(config.redis)
    try:
        cache = await build_record_cache(redis_service.get_client())
        with database_service.session_scope() as session:
            service = UserService(
                UserRepository(session),
                cache,
                ttl_seconds=config.cache.ttl_seconds,
                track_page_keys=config.cache.track_page_keys,
            )
            return await service.find_all(offset=offset, limit=limit, order=order)
    finally:
        await redis_service.close()
        database_service.dispose()


def list_users(
    offset: int = typer.Option(0, "--offset", "-o", min=0, help="Rows to skip"),
    limit: int = typer.Option(20, "--limit", "-l", min=1, help="Maximum rows to show"),
    order: str = typer.Option("asc", "--order", help="Sort by id: asc or desc"),
) -> None:
    """Print one page of users, read through the cache like the API does."""
    try:
        users = asyncio.run(_fetch_page(offset, limit, order))
    except UserServiceError as e:
        console.print(f"[red]❌ Failed to list users: {e.message}[/red]")
        raise typer.Exit(code=1) from e

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Email", style="blue")
    table.add_column("Phone", style="magenta")
    table.add_column("Active", style="yellow")

    for user in users:
        name = " ".join(
            part for part in (user.first_name, user.middle_name, user.last_name) if part
        )
        table.add_row(
            str(user.id),
            name,
            user.email,
            user.phone,
            "✅" if user.is_active else "❌",
        )

    console.print(table)
    console.print(f"\n[green]Showing {len(users)} users[/green]")

"""Profile and pending-registration inspection commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from src.profile_sync.core.errors import StoreError
from src.profile_sync.core.services.database.db_session import DbSessionService
from src.profile_sync.core.services.profile.profile_store import ProfileStoreAdapter
from src.profile_sync.core.storage import PendingRegistrationCache, get_kv_storage
from src.profile_sync.runtime.init_db import init_db

console = Console()

profile_app = typer.Typer(help="Inspect stored profiles")
pending_app = typer.Typer(
    help="Inspect and clear pending registrations (Redis-backed storage only)"
)


def init_db_command() -> None:
    """Create the profiles table."""
    try:
        init_db()
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print("[green]✅ Database initialized[/green]")


@profile_app.command("show")
def show_profile(
    profile_id: str = typer.Argument(..., help="Identity id of the profile"),
) -> None:
    """Show the profile stored for an identity."""
    store = ProfileStoreAdapter(DbSessionService())

    try:
        profile = asyncio.run(store.read(profile_id))
    except StoreError as e:
        console.print(f"[red]❌ Failed to read profile: {e}[/red]")
        raise typer.Exit(code=1) from e

    if profile is None:
        console.print(f"[yellow]No profile found for '{profile_id}'[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title=f"Profile {profile.id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for field, value in profile.model_dump().items():
        table.add_row(field, "" if value is None else str(value))
    console.print(table)


async def _pending_cache() -> PendingRegistrationCache:
    return PendingRegistrationCache(await get_kv_storage())


@pending_app.command("show")
def show_pending(
    email: str = typer.Argument(..., help="Email the registration was submitted with"),
) -> None:
    """Show the pending registration cached for an email."""

    async def _read():
        return await (await _pending_cache()).read(email)

    pending = asyncio.run(_read())
    if pending is None:
        console.print(f"[yellow]No pending registration for '{email}'[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title=f"Pending registration {pending.email}")
    table.add_column("Nome", style="magenta")
    table.add_column("Data de nascimento", style="magenta")
    table.add_row(pending.nome or "", str(pending.data_nascimento or ""))
    console.print(table)


@pending_app.command("clear")
def clear_pending(
    email: str = typer.Argument(..., help="Email the registration was submitted with"),
) -> None:
    """Discard the pending registration cached for an email."""

    async def _clear():
        await (await _pending_cache()).clear(email)

    asyncio.run(_clear())
    console.print(f"[green]✅ Cleared pending registration for '{email}'[/green]")

"""EstateHub CLI: run the server and manage the database.

Usage:
    estatehub serve --port 5000                  # Run the API with uvicorn
    estatehub init-db                            # Create any missing tables
    estatehub set-role jane@example.com agent    # Promote / demote an account

Every command reads the same ESTATEHUB_* environment as the server;
--database-url overrides the database for one invocation.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from typing import Optional

import click

from estatehub import __version__
from estatehub.auth.jwt import ROLES
from estatehub.config import Settings, get_settings
from estatehub.db.engine import Database
from estatehub.errors import NotFound
from estatehub.services.user_service import UserService

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an async test) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="estatehub")
@click.option("--database-url", help="Override ESTATEHUB_DATABASE_URL")
@click.pass_context
def main(ctx: click.Context, database_url: Optional[str]):
    """EstateHub: real-estate listings backend."""
    settings = get_settings()
    if database_url:
        settings = settings.model_copy(update={"database_url": database_url})
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# ---------------------------------------------------------------------------
# estatehub serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: ESTATEHUB_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: ESTATEHUB_PORT)")
@click.option("--reload", is_flag=True, help="Restart on code changes (development)")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int], reload: bool):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = _settings(ctx)
    uvicorn.run(
        "estatehub.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# estatehub init-db
# ---------------------------------------------------------------------------


@main.command("init-db")
@click.pass_context
def init_db(ctx: click.Context):
    """Create any missing tables (use Alembic for real schema changes)."""
    _run(_init_db_impl(_settings(ctx)))
    click.secho("Database tables created.", fg="green")


async def _init_db_impl(settings: Settings):
    database = Database(settings.database_url)
    try:
        await database.create_all()
    finally:
        await database.dispose()


# ---------------------------------------------------------------------------
# estatehub set-role
# ---------------------------------------------------------------------------


@main.command("set-role")
@click.argument("email")
@click.argument("role", type=click.Choice(ROLES))
@click.pass_context
def set_role(ctx: click.Context, email: str, role: str):
    """Change the role of the account registered as EMAIL.

    Tokens issued before the change keep the old role until they expire.
    """
    found = _run(_set_role_impl(_settings(ctx), email, role))
    if not found:
        click.secho(f"No user with email {email}.", fg="red", err=True)
        sys.exit(1)
    click.secho(f"{email} is now {role}.", fg="green")


async def _set_role_impl(settings: Settings, email: str, role: str) -> bool:
    database = Database(settings.database_url)
    try:
        async with database.session_factory() as session:
            try:
                await UserService(session, settings).set_role(email, role)
            except NotFound:
                return False
        return True
    finally:
        await database.dispose()


if __name__ == "__main__":
    main()

"""Motorpool CLI — run the server and prepare the database.

Usage:
    motorpool serve                 # Run the API with uvicorn
    motorpool serve --reload        # Auto-reload for development
    motorpool init-db               # Create missing tables (no Alembic)
"""

import asyncio

import click

from motorpool.config import settings


@click.group()
def cli():
    """Motorpool — cars CRUD service."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: MOTORPOOL_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: MOTORPOOL_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "motorpool.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("init-db")
def init_db():
    """Create the users, cars and messages tables if they don't exist."""
    from motorpool.db.engine import Database

    async def _create():
        database = Database.from_settings(settings)
        try:
            await database.create_all()
        finally:
            await database.shutdown()

    asyncio.run(_create())
    click.echo("Tables created.")


def main():
    cli()


if __name__ == "__main__":
    main()

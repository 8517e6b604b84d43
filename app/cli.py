"""Command line entry point: serve the app, create the table, bootstrap .env."""

from pathlib import Path
from typing import Optional

import typer
import uvicorn
from loguru import logger

from app.core.config import settings
from app.core.env_file import write_default_env
from app.core.logging import configure_logging
from app.database.connection import Base, create_db_engine
from app.models.product import Product  # noqa: F401  registers the table on Base

cli = typer.Typer(help="Product catalog management commands")


@cli.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Listen address (defaults to HOST)"),
    port: Optional[int] = typer.Option(None, help="Listen port (defaults to PORT)"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the HTTP server."""
    host = host or settings.HOST
    port = port or settings.PORT
    logger.info("Server running on http://{}:{}", host, port)
    uvicorn.run("app.main:app", host=host, port=port, reload=reload, log_config=None)


@cli.command("init-db")
def init_db():
    """Create the products table if it does not exist."""
    configure_logging(settings)
    engine = create_db_engine(settings)
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()
    logger.info("Tables ready on {}", engine.url.render_as_string(hide_password=True))


@cli.command("create-env")
def create_env(
    path: Path = typer.Option(Path(".env"), help="Where to write the file"),
):
    """Write a default .env file unless one already exists."""
    configure_logging(settings)
    if write_default_env(path):
        logger.info(".env file created at {}", path)
        logger.info("Set DB_PASSWORD to your MySQL password if needed.")
    else:
        logger.info(".env file already exists at {}", path)


if __name__ == "__main__":
    cli()

import click
from sqlalchemy import delete

from aicompass.config import get_config
from aicompass.dbutils import get_sync_engine
from aicompass.log import logger
from aicompass.orm import Base


@click.group()
def cli():
    pass


@cli.command()
def migrate():
    """Create the database tables."""
    engine = get_sync_engine(get_config())
    Base.metadata.create_all(engine)
    engine.dispose()
    logger.info("Database migrated")


@cli.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
def clear(yes: bool):
    """Delete every conversation and message."""
    if not yes:
        click.confirm("This will delete all conversations. Continue?", abort=True)

    engine = get_sync_engine(get_config())
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(delete(table))
    engine.dispose()
    logger.info("All conversations cleared")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=9772, show_default=True, type=int)
def serve(host: str, port: int):
    """Run the API server."""
    import uvicorn

    uvicorn.run("aicompass.app:app", host=host, port=port)


@cli.command()
def ui():
    """Launch the Gradio UI."""
    from aicompass.ui.app import main

    main()


if __name__ == "__main__":
    cli()

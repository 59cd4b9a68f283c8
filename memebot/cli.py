"""CLI entry point for memebot."""

import sys

import typer
import uvicorn

from memebot.application import build_app, build_components
from memebot.commands import list_keywords, list_memes
from memebot.config import Settings, validate_environment_variables
from memebot.errors import MemeBotError
from memebot.logger import logger

app = typer.Typer(help="Reply to Slack messages with images picked by keyword.")


def _load_components(settings: Settings):
    try:
        return build_components(settings)
    except MemeBotError as e:
        logger.critical("Error loading memes: %s", e)
        sys.exit(1)


@app.command("list-keywords")
def list_keywords_command() -> None:
    """List the set of keywords without starting the bot."""
    validate_environment_variables(require_slack=False)
    components = _load_components(Settings.from_env())
    for line in list_keywords(components.index):
        typer.echo(line)


@app.command("list-memes")
def list_memes_command() -> None:
    """List all memes' URLs."""
    validate_environment_variables(require_slack=False)
    components = _load_components(Settings.from_env())
    for line in list_memes(components.index, components.item_server.url_for):
        typer.echo(line)


@app.command("serve")
def serve_command(
    serve_only: bool = typer.Option(False, "--serve-only", help="Run the image server without the bot"),
) -> None:
    """Run the image server and the Slack bot."""
    validate_environment_variables(require_slack=not serve_only)
    settings = Settings.from_env()
    try:
        fastapi_app = build_app(settings, serve_only=serve_only)
    except MemeBotError as e:
        logger.critical("Error starting memebot: %s", e)
        sys.exit(1)

    logger.info("Image server listening on port %d", settings.port)
    uvicorn.run(fastapi_app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    app()

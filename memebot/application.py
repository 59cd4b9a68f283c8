"""
Wires the repository, parsers, bot and HTTP server together from Settings.
"""
import random
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI
from slack_bolt.adapter.fastapi import SlackRequestHandler

from memebot.bot import MemeBot, MemeBotConfig
from memebot.config import Settings
from memebot.items import ItemIndex
from memebot.logger import logger
from memebot.metrics import InvocationCounter
from memebot.parsers import MessageParser, RegexpKeywordParser
from memebot.repository import FileSystemItemRepository
from memebot.selector import ItemSelector
from memebot.server import ItemServer, create_app
from memebot.slack import create_slack_app


@dataclass
class Components:
    repository: FileSystemItemRepository
    index: ItemIndex
    item_server: ItemServer
    bot: MemeBot
    counter: InvocationCounter


def build_components(settings: Settings, rng: Optional[random.Random] = None) -> Components:
    """
    Load the images and build everything the app needs.

    Raises:
        RepositoryLoadError: If the images directory can't be read
        InvalidPatternError: If the keyword pattern is unusable
    """
    rng = rng or random.Random()
    repository = FileSystemItemRepository(settings.images_dir, settings.image_extensions)
    index = repository.load()

    item_server = ItemServer(
        find_item=repository.find_item,
        public_host=settings.serve_host,
        display_port=settings.serve_display_port,
    )
    logger.info("Serving images on %s", item_server.base_url())

    keyword_parser = RegexpKeywordParser(settings.keyword_pattern, index.keywords(), rng=rng)
    logger.info("Matching keywords on %r", keyword_parser)

    bot = MemeBot(MemeBotConfig(
        parser=MessageParser(keyword_parser),
        selector=ItemSelector(repository, rng=rng),
        url_for=item_server.url_for,
        reply_timeout=settings.reply_timeout,
        parse_all_messages=settings.parse_all_messages,
    ))

    return Components(
        repository=repository,
        index=index,
        item_server=item_server,
        bot=bot,
        counter=InvocationCounter(),
    )


def build_app(settings: Settings, serve_only: bool = False) -> FastAPI:
    components = build_components(settings)

    slack_handler = None
    if not serve_only:
        slack_app = create_slack_app(
            components.bot,
            components.counter,
            token=settings.slack_bot_token,
            signing_secret=settings.slack_signing_secret,
        )
        slack_handler = SlackRequestHandler(slack_app)

    return create_app(components.item_server, slack_handler=slack_handler, counter=components.counter)

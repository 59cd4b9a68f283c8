"""
Turns an inbound message into a reply (or no reply).
"""
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from memebot.commands import get_help
from memebot.errors import NotFoundError
from memebot.logger import logger
from memebot.parsers import MessageParser
from memebot.selector import ItemSelector

DEFAULT_REPLY_TIMEOUT = 5.0


class ReplyOutcome(str, Enum):
    NO_REPLY = "no_reply"
    SENT = "sent"
    SUPPRESSED = "suppressed"


class ErrorHandler(ABC):
    @abstractmethod
    def on_no_item_found(self, keyword: str) -> str:
        pass

    @abstractmethod
    def on_phrase_not_understood(self, phrase: str, sample: str) -> str:
        pass


class DefaultErrorHandler(ErrorHandler):
    def on_no_item_found(self, keyword: str) -> str:
        return f"Sorry, I couldn't find a meme for “{keyword}”."

    def on_phrase_not_understood(self, phrase: str, sample: str) -> str:
        return f"Sorry, I'm not sure what you mean by:\n> {phrase}\nTry something like “{sample}”"


@dataclass
class MemeBotConfig:
    parser: MessageParser
    selector: ItemSelector
    # Builds the public URL of an item from its id.
    url_for: Callable[[str], str]
    error_handler: ErrorHandler = field(default_factory=DefaultErrorHandler)

    # If a reply isn't ready within this many seconds, it's dropped.
    reply_timeout: float = DEFAULT_REPLY_TIMEOUT

    # If true, keywords are matched on all messages, not just mentions.
    # "Not understood" replies are still only sent for mentions.
    parse_all_messages: bool = False

    def __post_init__(self) -> None:
        if self.parser is None:
            raise ValueError("parser must be specified")
        if self.selector is None:
            raise ValueError("selector must be specified")
        if self.reply_timeout <= 0:
            self.reply_timeout = DEFAULT_REPLY_TIMEOUT


class MemeBot:
    def __init__(self, config: MemeBotConfig, clock: Callable[[], float] = time.monotonic):
        self.config = config
        self._clock = clock

    def handle_message(self, bot_name: str, bot_id: str, text: str) -> Optional[str]:
        """
        Decide how to answer a message.

        Returns:
            The reply text, or None if the bot should stay silent
        """
        parsed = self.config.parser.parse_message(bot_name, bot_id, text)

        if not (self.config.parse_all_messages or parsed.mentioned):
            return None

        if parsed.help_requested:
            return get_help(self._sample(bot_name), self._known_keywords())

        if not parsed.keyword:
            if parsed.mentioned:
                return self.config.error_handler.on_phrase_not_understood(
                    text, self._sample(bot_name)
                )
            return None

        try:
            item = self.config.selector.find_item(parsed.keyword)
        except NotFoundError:
            if parsed.mentioned:
                # Only log when mentioned, to avoid leaking unaddressed messages to logs.
                logger.info("No meme found for keyword: %s", parsed.keyword)
                return self.config.error_handler.on_no_item_found(parsed.keyword)
            return None
        except Exception as e:
            if parsed.mentioned:
                logger.error("Error searching for '%s': %s", parsed.keyword, e)
                return self.config.error_handler.on_no_item_found(parsed.keyword)
            return None

        return self.config.url_for(item.id)

    def reply_to(
        self,
        bot_name: str,
        bot_id: str,
        text: str,
        send: Callable[[str], None],
        received_at: Optional[float] = None,
    ) -> ReplyOutcome:
        """
        Handle a message and send the reply, unless the reply deadline has
        already passed by the time it's ready.

        Args:
            send: Delivers the reply text to the chat
            received_at: Clock value when the message arrived (defaults to now)
        """
        start = received_at if received_at is not None else self._clock()
        deadline = start + self.config.reply_timeout

        reply = self.handle_message(bot_name, bot_id, text)
        if reply is None:
            return ReplyOutcome.NO_REPLY

        if self._clock() > deadline:
            logger.warning(
                "Reply deadline passed (timeout=%ss), not sending reply", self.config.reply_timeout
            )
            return ReplyOutcome.SUPPRESSED

        send(reply)
        return ReplyOutcome.SENT

    def _sample(self, bot_name: str) -> str:
        # Show how to mention the bot unless it listens to everything.
        user_name = "" if self.config.parse_all_messages else bot_name
        return self.config.parser.generate_sample(user_name)

    def _known_keywords(self) -> list[str]:
        try:
            return self.config.selector.repository.load().keywords()
        except Exception as e:
            logger.error("Couldn't list keywords for help: %s", e)
            return []

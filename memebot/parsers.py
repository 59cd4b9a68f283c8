"""
Message parsing: who was mentioned, what keyword was asked for, and whether
the user wants help.
"""
import random
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import rstr

from memebot.errors import InvalidPatternError

HELP_COMMAND = "help"


def is_help_request(text: str) -> bool:
    return text.lower() == HELP_COMMAND


@dataclass(frozen=True)
class InterpretedMessage:
    keyword: str = ""
    mentioned: bool = False
    help_requested: bool = False


class MentionParser(ABC):
    @abstractmethod
    def parse_mention(self, bot_name: str, bot_id: str, text: str) -> tuple[str, bool]:
        """
        If text starts by addressing the bot, return the text without the
        mention and True. Otherwise return text unchanged and False.
        """

    @abstractmethod
    def format_mention(self, user_name: str, text: str) -> str:
        """Format a mention of user_name the way a Slack client displays it."""


class KeywordParser(ABC):
    @abstractmethod
    def parse_keyword(self, text: str) -> tuple[str, bool]:
        """Return the keyword found in text and True, or '' and False."""

    @abstractmethod
    def generate_sample(self) -> str:
        """Return an example message accepted by parse_keyword."""


class SlackPrefixMentionParser(MentionParser):
    """
    Recognizes 'name foo bar', 'name: foo bar' and '<@ID>: foo bar'.
    """

    def parse_mention(self, bot_name: str, bot_id: str, text: str) -> tuple[str, bool]:
        for prefix in (bot_name, f"<@{bot_id}>"):
            if not prefix or not text.startswith(prefix):
                continue

            rest = text[len(prefix):]
            # Drop whatever is glued to the mention (e.g. ':') up to the next whitespace.
            for i, char in enumerate(rest):
                if char.isspace():
                    return rest[i:].strip(), True
            # Nothing but the mention.
            return "", True

        return text, False

    def format_mention(self, user_name: str, text: str) -> str:
        return f"@{user_name} {text}"


class RegexpKeywordParser(KeywordParser):
    """
    Extracts keywords with a case-insensitive regular expression.

    The keyword is the first non-empty capture group of the first match, so
    patterns with alternatives like '(foo)|(bar)' work. Sample phrases are
    generated from the pattern; when keywords are given, the text of the
    first capture group is replaced with one of them.
    """

    def __init__(
        self,
        pattern: str,
        keywords: Sequence[str] = (),
        rng: Optional[random.Random] = None,
    ):
        try:
            compiled = re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            raise InvalidPatternError(f"invalid keyword pattern /{pattern}/: {e}") from e

        if compiled.groups < 1:
            raise InvalidPatternError(
                f"keyword pattern must have at least 1 capturing group: /{pattern}/"
            )

        self.pattern = pattern
        self.regexp = compiled
        self.keywords = list(keywords)
        self._rng = rng or random.Random()
        self._generator = rstr.Rstr(self._rng)

    def __repr__(self) -> str:
        return f"RegexpKeywordParser(/{self.pattern}/i)"

    def parse_keyword(self, text: str) -> tuple[str, bool]:
        match = self.regexp.search(text)
        if match is None:
            return "", False

        for group in match.groups():
            if group:
                return group, True

        return "", False

    def generate_sample(self) -> str:
        sample = self._generator.xeger(self.regexp)
        if not self.keywords:
            return sample

        match = self.regexp.search(sample)
        if match is None or match.start(1) < 0:
            return sample

        keyword = self._rng.choice(self.keywords)
        return sample[:match.start(1)] + keyword + sample[match.end(1):]


class MessageParser:
    """
    Combines mention detection, help detection and keyword extraction.
    """

    def __init__(
        self,
        keyword_parser: KeywordParser,
        mention_parser: Optional[MentionParser] = None,
        help_parser: Optional[Callable[[str], bool]] = None,
    ):
        if keyword_parser is None:
            raise ValueError("keyword_parser must be specified")
        self.keyword_parser = keyword_parser
        self.mention_parser = mention_parser or SlackPrefixMentionParser()
        self.help_parser = help_parser or is_help_request

    def parse_message(self, bot_name: str, bot_id: str, text: str) -> InterpretedMessage:
        clean, mentioned = self.mention_parser.parse_mention(bot_name, bot_id, text)

        # Help is only recognized when the bot is addressed.
        if mentioned and self.help_parser(clean):
            return InterpretedMessage(mentioned=True, help_requested=True)

        keyword, matched = self.keyword_parser.parse_keyword(clean)
        if matched:
            return InterpretedMessage(keyword=keyword, mentioned=mentioned)

        return InterpretedMessage(mentioned=mentioned)

    def generate_sample(self, user_name: str = "") -> str:
        """Generate a sample message, formatted as a mention if user_name is set."""
        sample = self.keyword_parser.generate_sample()
        if user_name:
            sample = self.mention_parser.format_mention(user_name, sample)
        return sample

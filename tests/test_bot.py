"""Tests for the reply policy."""

from unittest.mock import Mock

from memebot.bot import MemeBot, MemeBotConfig, ReplyOutcome
from memebot.errors import NotFoundError, RepositoryLoadError
from memebot.items import ItemIndex
from memebot.parsers import MessageParser, RegexpKeywordParser
from test_items import make_item


def make_bot(
    pattern: str = r"^do (\w+)$",
    keywords: tuple = (),
    parse_all_messages: bool = False,
    clock=None,
) -> tuple[MemeBot, Mock]:
    selector = Mock()
    index = ItemIndex()
    index.add(make_item("keyword.jpg", "keyword"))
    selector.repository.load.return_value = index

    config = MemeBotConfig(
        parser=MessageParser(RegexpKeywordParser(pattern, list(keywords))),
        selector=selector,
        url_for=lambda item_id: f"http://{item_id}",
        parse_all_messages=parse_all_messages,
    )
    bot = MemeBot(config, clock=clock) if clock else MemeBot(config)
    return bot, selector


def test_parse_all_messages_without_mention() -> None:
    """Test unaddressed keyword hits reply, but errors stay silent."""
    bot, selector = make_bot(parse_all_messages=True)
    selector.find_item.return_value = make_item("keyword.jpg", "keyword")
    assert bot.handle_message("name", "id", "do keyword") == "http://keyword.jpg"
    selector.find_item.assert_called_once_with("keyword")

    bot, selector = make_bot(parse_all_messages=True)
    selector.find_item.side_effect = NotFoundError("nope")
    assert bot.handle_message("name", "id", "do keyword") is None

    bot, selector = make_bot(parse_all_messages=True)
    assert bot.handle_message("name", "id", "keyword") is None
    selector.find_item.assert_not_called()


def test_parse_all_messages_with_mention() -> None:
    bot, selector = make_bot(parse_all_messages=True)
    selector.find_item.return_value = make_item("keyword.jpg", "keyword")
    assert bot.handle_message("name", "id", "name do keyword") == "http://keyword.jpg"

    bot, selector = make_bot(parse_all_messages=True)
    selector.find_item.side_effect = NotFoundError("nope")
    assert bot.handle_message("name", "id", "name do keyword") == (
        "Sorry, I couldn't find a meme for “keyword”."
    )


def test_not_understood_sample_without_mention() -> None:
    """Test the sample doesn't mention the bot when it parses every message."""
    bot, _ = make_bot(keywords=("keyword",), parse_all_messages=True)

    assert bot.handle_message("name", "id", "name keyword") == (
        "Sorry, I'm not sure what you mean by:\n"
        "> name keyword\n"
        "Try something like “do keyword”"
    )


def test_not_understood_sample_with_mention() -> None:
    bot, _ = make_bot(keywords=("keyword",), parse_all_messages=False)

    assert bot.handle_message("name", "id", "name keyword") == (
        "Sorry, I'm not sure what you mean by:\n"
        "> name keyword\n"
        "Try something like “@name do keyword”"
    )


def test_require_mention() -> None:
    """Test unaddressed messages are ignored when mentions are required."""
    bot, selector = make_bot()
    selector.find_item.return_value = make_item("keyword.jpg", "keyword")
    assert bot.handle_message("name", "id", "name do keyword") == "http://keyword.jpg"
    assert bot.handle_message("name", "id", "<@id> do keyword") == "http://keyword.jpg"

    bot, selector = make_bot()
    selector.find_item.return_value = make_item("keyword.jpg", "keyword")
    assert bot.handle_message("name", "id", "do keyword") is None
    assert bot.handle_message("name", "id", "help") is None
    selector.find_item.assert_not_called()


def test_help() -> None:
    bot, selector = make_bot(keywords=("keyword",))

    reply = bot.handle_message("name", "id", "name help")

    assert "@name do keyword" in reply
    assert "`keyword`" in reply
    selector.find_item.assert_not_called()


def test_lookup_error_replies_not_found_when_mentioned() -> None:
    bot, selector = make_bot()
    selector.find_item.side_effect = RepositoryLoadError("unreadable")

    assert bot.handle_message("name", "id", "name do keyword") == (
        "Sorry, I couldn't find a meme for “keyword”."
    )


def test_reply_to_sends_reply() -> None:
    bot, selector = make_bot()
    selector.find_item.return_value = make_item("keyword.jpg", "keyword")
    send = Mock()

    outcome = bot.reply_to("name", "id", "name do keyword", send=send)

    assert outcome is ReplyOutcome.SENT
    send.assert_called_once_with("http://keyword.jpg")


def test_reply_to_no_reply() -> None:
    bot, _ = make_bot()
    send = Mock()

    assert bot.reply_to("name", "id", "do keyword", send=send) is ReplyOutcome.NO_REPLY
    send.assert_not_called()


def test_reply_to_drops_late_reply() -> None:
    """Test a reply ready after the deadline is never sent."""
    clock = Mock(side_effect=[0.0, 10.0])
    bot, selector = make_bot(clock=clock)
    selector.find_item.return_value = make_item("keyword.jpg", "keyword")
    send = Mock()

    outcome = bot.reply_to("name", "id", "name do keyword", send=send)

    assert outcome is ReplyOutcome.SUPPRESSED
    send.assert_not_called()


def test_reply_to_uses_received_at() -> None:
    clock = Mock(return_value=100.0)
    bot, selector = make_bot(clock=clock)
    selector.find_item.return_value = make_item("keyword.jpg", "keyword")
    send = Mock()

    assert bot.reply_to("name", "id", "name do keyword", send=send, received_at=90.0) is (
        ReplyOutcome.SUPPRESSED
    )
    assert bot.reply_to("name", "id", "name do keyword", send=send, received_at=99.0) is (
        ReplyOutcome.SENT
    )

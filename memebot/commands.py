"""
Text produced for users and operators: the help reply and the listings
printed by the CLI.
"""
from typing import Sequence

from memebot.items import ItemIndex
from memebot.logger import logger

MAX_HELP_KEYWORDS = 20


def get_help(sample: str, keywords: Sequence[str]) -> str:
    logger.debug("Help")
    lines = [
        "*How to use me:*",
        f"Send a message like “{sample}” and I'll reply with a matching meme.",
        "Memes are picked at random when several share a keyword.",
    ]
    if keywords:
        shown = ", ".join(f"`{kw}`" for kw in keywords[:MAX_HELP_KEYWORDS])
        more = len(keywords) - MAX_HELP_KEYWORDS
        if more > 0:
            shown += f" and {more} more"
        lines.append(f"*Known keywords ({len(keywords)}):* {shown}")
    else:
        lines.append("I don't know any keywords yet.")
    return "\n".join(lines)


def list_keywords(index: ItemIndex) -> list[str]:
    return [f"{kw} ({len(index.find_by_keyword(kw))})" for kw in index.keywords()]


def list_memes(index: ItemIndex, url_for) -> list[str]:
    return [f"{url_for(item.id)} ({','.join(item.keywords)})" for item in index.items()]

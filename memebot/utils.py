import base64
import hashlib
import os
import re
from typing import BinaryIO, Iterable

HASH_CHUNK_SIZE = 64 * 1024


def normalize_keyword(keyword: str) -> str:
    return keyword.casefold()


def make_extension_set(extensions: Iterable[str]) -> frozenset[str]:
    """
    Normalize a list of file extensions for case-insensitive matching.
    Accepts values with or without a leading dot ('jpg', '.PNG').
    """
    return frozenset(
        ext.strip().lstrip(".").lower() for ext in extensions if ext and ext.strip().lstrip(".")
    )


def get_normalized_extension(name: str) -> str:
    """Return the lower-cased extension of a file name, without the dot."""
    _, extension = os.path.splitext(name)
    return extension.lstrip(".").lower()


def parse_keywords(name: str) -> list[str]:
    """
    Derive the keywords of an image from its file name.

    The extension is dropped, the rest is split on commas and every segment
    is trimmed. Empty segments are discarded, so
    'foo bar, foobar ,  ,,.jpg' gives ['foo bar', 'foobar'].

    Args:
        name: The file name (not a path)

    Returns:
        Keywords in the order they appear in the name
    """
    name_without_extension, _ = os.path.splitext(name)
    keywords = []
    for segment in name_without_extension.split(","):
        segment = segment.strip()
        if segment:
            keywords.append(segment)
    return keywords


def generate_sha1_base64_hash(stream: BinaryIO) -> str:
    """
    Hash the whole stream with SHA1 and return the digest as URL-safe base64.
    """
    hasher = hashlib.sha1()
    for chunk in iter(lambda: stream.read(HASH_CHUNK_SIZE), b""):
        hasher.update(chunk)
    return base64.urlsafe_b64encode(hasher.digest()).decode("ascii")


def sanitize_slack_id(identifier: str | None, name: str = "identifier") -> str:
    """
    Validate Slack IDs (team_id, channel_id, user_id) before using them as keys.

    Args:
        identifier: The ID to sanitize
        name: Name of the identifier for error messages

    Returns:
        The stripped identifier

    Raises:
        ValueError: If identifier is empty or contains unexpected characters
    """
    if identifier is None:
        raise ValueError(f"{name} cannot be None")

    if not isinstance(identifier, str):
        raise ValueError(f"{name} must be a string, got {type(identifier).__name__}")

    identifier = identifier.strip()
    if not identifier:
        raise ValueError(f"{name} cannot be empty")

    # Slack IDs are uppercase alphanumeric, but we're lenient
    if not re.match(r"^[A-Za-z0-9_-]+$", identifier):
        raise ValueError(
            f"{name} contains invalid characters. "
            f"Only alphanumeric characters, hyphens, and underscores are allowed: {identifier}"
        )

    MAX_ID_LENGTH = 256
    if len(identifier) > MAX_ID_LENGTH:
        raise ValueError(f"{name} is too long (max {MAX_ID_LENGTH} characters): {len(identifier)}")

    return identifier

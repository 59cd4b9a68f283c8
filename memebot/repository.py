"""
Loads images from a flat directory into an ItemIndex.
"""
import os
from datetime import datetime, timezone
from typing import Iterable, Optional

from memebot.errors import HashError, RepositoryLoadError
from memebot.items import Item, ItemIndex
from memebot.logger import logger
from memebot.singleflight import SingleFlight
from memebot.utils import (
    generate_sha1_base64_hash,
    get_normalized_extension,
    make_extension_set,
    parse_keywords,
)

DEFAULT_IMAGE_EXTENSIONS = ("jpg", "png", "gif")


class FileSystemItemRepository:
    """
    Repository of images stored on disk, named like 'keyword1,keyword2.jpg'.

    The directory is scanned the first time load() is called. Later and
    concurrent calls share that single result (or error); restart the
    process to pick up new files.
    """

    def __init__(self, path: str, extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS):
        self.path = path
        self.extensions = make_extension_set(extensions)
        self._loader: SingleFlight[ItemIndex] = SingleFlight(self._load)

    def load(self) -> ItemIndex:
        """
        Return the index, scanning the directory on first use.

        Raises:
            RepositoryLoadError: If the directory couldn't be opened or listed
        """
        return self._loader.do()

    def find_item(self, item_id: str) -> Optional[Item]:
        try:
            index = self.load()
        except RepositoryLoadError:
            return None
        return index.find_by_id(item_id)

    def _load(self) -> ItemIndex:
        logger.info("Loading memes from %s", self.path)

        try:
            with os.scandir(self.path) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            logger.error("Error reading directory %s: %s", self.path, e)
            raise RepositoryLoadError(f"couldn't read directory {self.path}: {e}") from e

        index = ItemIndex()
        for entry in entries:
            if not self._is_image_file(entry):
                continue
            try:
                item = self._load_item(entry)
            except HashError as e:
                logger.warning("Couldn't load %s: %s", entry.name, e.cause)
                continue
            index.add(item)

        logger.info("Loaded %d memes (%d keywords)", len(index), len(index.keywords()))
        return index

    def _is_image_file(self, entry: os.DirEntry) -> bool:
        try:
            if not entry.is_file(follow_symlinks=True):
                return False
        except OSError:
            return False
        return get_normalized_extension(entry.name) in self.extensions

    def _load_item(self, entry: os.DirEntry) -> Item:
        path = os.path.join(self.path, entry.name)
        try:
            stat = os.stat(path)
            with open(path, "rb") as f:
                content_hash = generate_sha1_base64_hash(f)
        except OSError as e:
            raise HashError(path, e) from e

        _, extension = os.path.splitext(entry.name)
        return Item(
            # Keep the extension so the server can detect the content type.
            id=content_hash + extension,
            path=path,
            keywords=tuple(parse_keywords(entry.name)),
            size=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

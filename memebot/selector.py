import random
from typing import Optional

from memebot.errors import NotFoundError
from memebot.items import Item
from memebot.repository import FileSystemItemRepository


class ItemSelector:
    """Picks a random item for a keyword."""

    def __init__(self, repository: FileSystemItemRepository, rng: Optional[random.Random] = None):
        self.repository = repository
        self._rng = rng or random.Random()

    def find_item(self, keyword: str) -> Item:
        """
        Raises:
            NotFoundError: If no item has this keyword
            RepositoryLoadError: If the repository couldn't be loaded
        """
        matches = self.repository.load().find_by_keyword(keyword)
        if not matches:
            raise NotFoundError(f"no meme found for keyword: {keyword}")
        return self._rng.choice(matches)

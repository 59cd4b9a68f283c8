"""Items (images) and the keyword index built over them."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from memebot.utils import normalize_keyword


@dataclass(frozen=True)
class Item:
    """
    A single image. The id is the content hash plus the file extension, so
    byte-identical files share an id (and a URL).
    """

    id: str
    path: str
    keywords: tuple[str, ...]
    size: int
    last_modified: datetime

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Item id cannot be empty")


@dataclass
class ItemIndex:
    _by_keyword: dict[str, list[Item]] = field(default_factory=dict)
    _by_id: dict[str, Item] = field(default_factory=dict)
    _all: list[Item] = field(default_factory=list)

    def add(self, item: Item) -> None:
        self._all.append(item)
        self._by_id.setdefault(item.id, item)
        for keyword in dict.fromkeys(normalize_keyword(k) for k in item.keywords):
            self._by_keyword.setdefault(keyword, []).append(item)

    def find_by_keyword(self, keyword: str) -> list[Item]:
        """Case-insensitive lookup. Returns an empty list when nothing matches."""
        return list(self._by_keyword.get(normalize_keyword(keyword), []))

    def find_by_id(self, item_id: str) -> Optional[Item]:
        return self._by_id.get(item_id)

    def keywords(self) -> list[str]:
        return sorted(self._by_keyword)

    def items(self) -> list[Item]:
        return list(self._all)

    def __len__(self) -> int:
        return len(self._all)

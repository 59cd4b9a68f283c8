"""
Exceptions raised by the message parsers and the item repository.
"""


class MemeBotError(Exception):
    pass


class InvalidPatternError(MemeBotError):
    """The keyword pattern doesn't compile or has no capturing group."""


class RepositoryLoadError(MemeBotError):
    """The images directory couldn't be opened or listed."""


class NotFoundError(MemeBotError):
    """No item matches a keyword or an id."""


class HashError(MemeBotError):
    """A single file couldn't be read while computing its content hash."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"couldn't hash {path}: {cause}")
        self.path = path
        self.cause = cause

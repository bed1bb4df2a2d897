"""Shared types for URL readers."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Protocol, runtime_checkable

from url_readers.config import ConfigReader

if TYPE_CHECKING:
    from url_readers.reading.tree import ReadTreeResponse, ReadTreeResponseFactory

UrlPredicate = Callable[[str], bool]
TreeFilter = Callable[[str], bool]


@runtime_checkable
class UrlReader(Protocol):
    """Reads files and trees from one storage backend."""

    async def read(self, url: str) -> bytes:
        """Read the object at ``url``."""
        ...

    async def read_tree(
        self, url: str, filter: Optional[TreeFilter] = None
    ) -> "ReadTreeResponse":
        """Read every object below ``url``."""
        ...

    def describe(self) -> str:
        """Short human-readable description, safe for logs."""
        ...


@dataclass(frozen=True)
class UrlReaderPredicateTuple:
    """A reader paired with the predicate that selects it.

    Attributes:
        reader: The backend reader
        predicate: Returns True for URLs this reader is responsible for
    """

    reader: UrlReader
    predicate: UrlPredicate


class ReaderFactory(Protocol):
    """Builds zero or more reader/predicate pairs from configuration."""

    def __call__(
        self,
        *,
        config: ConfigReader,
        logger: logging.Logger,
        tree_response_factory: "ReadTreeResponseFactory",
    ) -> list[UrlReaderPredicateTuple]:
        ...

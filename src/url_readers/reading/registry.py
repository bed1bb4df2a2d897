"""Registry that dispatches URLs to the reader responsible for them."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from url_readers.config import ConfigReader, get_config_path
from url_readers.errors import NotAllowedError
from url_readers.reading.aws_s3 import AwsS3UrlReader
from url_readers.reading.gcs import GcsUrlReader
from url_readers.reading.tree import ReadTreeResponse, ReadTreeResponseFactory
from url_readers.reading.types import ReaderFactory, TreeFilter, UrlReader, UrlReaderPredicateTuple

logger = logging.getLogger(__name__)

DEFAULT_FACTORIES: tuple[ReaderFactory, ...] = (
    GcsUrlReader.factory,
    AwsS3UrlReader.factory,
)


class UrlReaderRegistry:
    """Ordered set of reader/predicate pairs.

    Entries are resolved in registration order and the first matching
    predicate wins. Once sealed, the registry is read-only; a changed
    configuration means building a new registry.
    """

    def __init__(self, entries: Iterable[UrlReaderPredicateTuple] = ()):
        self._entries: tuple[UrlReaderPredicateTuple, ...] = tuple(entries)
        self._sealed = False

    @property
    def entries(self) -> tuple[UrlReaderPredicateTuple, ...]:
        return self._entries

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[UrlReaderPredicateTuple]:
        return iter(self._entries)

    def register(self, entries: Iterable[UrlReaderPredicateTuple]) -> None:
        """Append entries after those already registered.

        Raises:
            RuntimeError: If the registry is sealed
        """
        if self._sealed:
            raise RuntimeError("Cannot register readers on a sealed registry")
        self._entries = self._entries + tuple(entries)

    def seal(self) -> "UrlReaderRegistry":
        """Mark the registry as built. Returns self."""
        self._sealed = True
        return self

    def resolve(self, url: str) -> Optional[UrlReader]:
        """Find the reader responsible for a URL.

        Args:
            url: URL to dispatch

        Returns:
            The first reader whose predicate matches, or None
        """
        for entry in self._entries:
            if entry.predicate(url):
                return entry.reader
        return None

    def _require(self, url: str) -> UrlReader:
        reader = self.resolve(url)
        if reader is None:
            raise NotAllowedError(
                f"Reading from '{url}' is not allowed. "
                "You may need to configure an integration for the target host."
            )
        return reader

    async def read(self, url: str) -> bytes:
        """Read a file through the reader responsible for ``url``.

        Raises:
            NotAllowedError: If no reader is responsible for the URL
        """
        return await self._require(url).read(url)

    async def read_tree(
        self, url: str, filter: Optional[TreeFilter] = None
    ) -> ReadTreeResponse:
        """Read a tree through the reader responsible for ``url``.

        Raises:
            NotAllowedError: If no reader is responsible for the URL
        """
        return await self._require(url).read_tree(url, filter=filter)

    def describe(self) -> list[str]:
        return [entry.reader.describe() for entry in self._entries]


def build_url_readers(
    config: ConfigReader,
    logger: Optional[logging.Logger] = None,
    factories: Sequence[ReaderFactory] = DEFAULT_FACTORIES,
    tree_response_factory: Optional[ReadTreeResponseFactory] = None,
) -> UrlReaderRegistry:
    """Build a sealed registry from configuration.

    Each factory contributes its pairs in order, so readers for earlier
    backend types take precedence over later ones for overlapping hosts.

    Args:
        config: Root configuration
        logger: Logger handed to the factories (defaults to this module's)
        factories: Reader factories to run
        tree_response_factory: Shared tree factory (created from config if None)

    Returns:
        The sealed registry
    """
    logger = logger or logging.getLogger(__name__)
    if tree_response_factory is None:
        tree_response_factory = ReadTreeResponseFactory.create(config)

    registry = UrlReaderRegistry()
    for factory in factories:
        registry.register(
            factory(config=config, logger=logger, tree_response_factory=tree_response_factory)
        )

    logger.info(f"Configured {len(registry)} URL readers: {', '.join(registry.describe()) or 'none'}")
    return registry.seal()


def get_url_readers(config_path: Optional[Path] = None) -> UrlReaderRegistry:
    """Process-wide registry for a config file.

    Built on first call and reused afterwards. Calls that resolve to the same
    config file share one registry. A missing config file means no
    integrations are configured.

    Args:
        config_path: Config file (defaults to settings, then the standard location)

    Returns:
        The sealed registry
    """
    from url_readers.settings import settings

    path = config_path or settings.URL_READERS_CONFIG or get_config_path()
    return _build_for_path(Path(path).expanduser().resolve())


@lru_cache(maxsize=None)
def _build_for_path(path: Path) -> UrlReaderRegistry:
    try:
        config = ConfigReader.from_file(path)
    except FileNotFoundError:
        logger.info(f"No config file at {path}; no integrations configured")
        config = ConfigReader()
    return build_url_readers(config)

"""Google Cloud Storage URL reader.

Reads objects addressed as ``https://storage.cloud.google.com/{bucket}/{key}``
(or the same layout on a configured proxy host) using a service account.
The storage client is created on first use, so building readers from
configuration never touches the network or parses key material.
"""

import asyncio
import hashlib
import logging
import threading
from functools import partial
from typing import Any, Callable, Optional
from urllib.parse import unquote, urlsplit

import requests
from google.api_core.exceptions import NotFound
from google.auth.exceptions import MalformedError, TransportError
from google.cloud import storage
from google.oauth2 import service_account

from url_readers.config import ConfigReader
from url_readers.errors import ConfigError, InputError, NotFoundError, ReaderConnectionError
from url_readers.integrations.gcs import GCS_HOST, GcsIntegrationConfig, read_gcs_integration_configs
from url_readers.reading.predicates import HostPredicate
from url_readers.reading.tree import ReadTreeResponse, ReadTreeResponseFactory
from url_readers.reading.types import TreeFilter, UrlReaderPredicateTuple

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


def parse_gcs_url(url: str, host: str = GCS_HOST) -> tuple[str, str]:
    """Parse a GCS URL into (bucket, key).

    Args:
        url: URL like https://storage.cloud.google.com/bucket/path/to/key
        host: Hostname the URL must use

    Returns:
        Tuple of (bucket, key); key is empty for a bucket root

    Raises:
        InputError: If the URL is not on ``host`` or names no bucket
    """
    parts = urlsplit(url)
    if parts.hostname != host.lower():
        raise InputError(f"Not a valid GCS URL: {url}")

    bucket, _, key = unquote(parts.path).lstrip("/").partition("/")
    if not bucket:
        raise InputError(f"GCS URL has no bucket: {url}")
    return bucket, key


class GcsUrlReader:
    """Reads files and trees from Google Cloud Storage.

    Attributes:
        integration: The integration this reader is bound to
    """

    def __init__(
        self,
        integration: GcsIntegrationConfig,
        tree_response_factory: ReadTreeResponseFactory,
    ):
        """Initialize the reader.

        Args:
            integration: Host and service account credentials
            tree_response_factory: Factory used to build read_tree results
        """
        self.integration = integration
        self._tree_response_factory = tree_response_factory
        self._client: Optional[storage.Client] = None
        self._client_lock = threading.Lock()

    @classmethod
    def factory(
        cls,
        *,
        config: ConfigReader,
        logger: logging.Logger,
        tree_response_factory: ReadTreeResponseFactory,
    ) -> list[UrlReaderPredicateTuple]:
        """Build one reader per valid ``integrations.gcs`` entry.

        Args:
            config: Root configuration
            logger: Logger for registration messages
            tree_response_factory: Shared tree response factory

        Returns:
            Reader/predicate pairs in configuration order
        """
        entries = []
        for integration in read_gcs_integration_configs(config):
            reader = cls(integration, tree_response_factory)
            entries.append(
                UrlReaderPredicateTuple(reader=reader, predicate=HostPredicate(integration.host))
            )
            logger.debug(f"Registered {reader.describe()}")
        return entries

    @property
    def client(self) -> storage.Client:
        """The storage client, created on first access."""
        with self._client_lock:
            if self._client is None:
                self._client = self._create_client()
            return self._client

    def _create_client(self) -> storage.Client:
        try:
            credentials = service_account.Credentials.from_service_account_info(
                {
                    "client_email": self.integration.client_email,
                    "private_key": self.integration.private_key,
                    "token_uri": GOOGLE_TOKEN_URI,
                }
            )
        except (ValueError, MalformedError) as e:
            raise ConfigError(
                f"Invalid service account credentials for {self.describe()}: {e}"
            ) from e

        client_options = None
        if self.integration.host != GCS_HOST:
            client_options = {"api_endpoint": f"https://{self.integration.host}"}

        return storage.Client(
            project=None,
            credentials=credentials,
            client_options=client_options,
        )

    async def _run(self, url: str, func: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking client call in the executor, mapping failures."""
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, partial(func, *args))
        except NotFound as e:
            raise NotFoundError(f"Unable to find GCS object at {url}") from e
        except (requests.exceptions.ConnectionError, TransportError) as e:
            raise ReaderConnectionError(f"Unable to reach GCS for {url}: {e}") from e

    def _download(self, bucket: str, key: str) -> bytes:
        return self.client.bucket(bucket).blob(key).download_as_bytes()

    def _list(self, bucket: str, prefix: str) -> list:
        return list(self.client.list_blobs(bucket, prefix=prefix or None))

    async def read(self, url: str) -> bytes:
        """Read one object.

        Args:
            url: Object URL

        Returns:
            Object content

        Raises:
            InputError: If the URL names no object
            NotFoundError: If the object does not exist
            ReaderConnectionError: If GCS cannot be reached
        """
        bucket, key = parse_gcs_url(url, self.integration.host)
        if not key or key.endswith("/"):
            raise InputError(f"GCS URL does not name an object: {url}")
        return await self._run(url, self._download, bucket, key)

    async def read_tree(
        self, url: str, filter: Optional[TreeFilter] = None
    ) -> ReadTreeResponse:
        """Read every object below a bucket or folder URL.

        Args:
            url: Bucket or folder URL
            filter: Optional predicate on paths relative to the folder

        Returns:
            Tree response over the matching objects

        Raises:
            NotFoundError: If nothing exists below the URL
            ReaderConnectionError: If GCS cannot be reached
        """
        bucket, key = parse_gcs_url(url, self.integration.host)
        prefix = key if not key or key.endswith("/") else f"{key}/"
        blobs = await self._run(url, self._list, bucket, prefix)

        files = []
        etags = []
        for blob in blobs:
            path = blob.name[len(prefix):]
            # Zero-byte folder placeholders
            if not path or path.endswith("/"):
                continue
            if filter is not None and not filter(path):
                continue
            files.append((path, partial(self._run, url, self._download, bucket, blob.name)))
            etags.append(blob.etag or "")

        if not files:
            raise NotFoundError(f"No GCS objects found below {url}")

        etag = hashlib.sha256("\n".join(etags).encode("utf-8")).hexdigest()
        return self._tree_response_factory.from_files(files, etag=etag)

    def describe(self) -> str:
        return f"gcs{{host={self.integration.host},authed={bool(self.integration.private_key)}}}"

    def __str__(self) -> str:
        return self.describe()

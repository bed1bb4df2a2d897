"""AWS S3 and S3-compatible URL reader.

Handles virtual-hosted URLs (``https://bucket.s3.us-east-1.amazonaws.com/key``),
path-style URLs (``https://s3.us-east-1.amazonaws.com/bucket/key``) and
custom endpoints such as Cloudflare R2 (``https://<account>.r2.cloudflarestorage.com/bucket/key``).
"""

import asyncio
import hashlib
import logging
import re
import threading
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Optional
from urllib.parse import unquote, urlsplit

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError
from botocore.exceptions import ConnectionError as BotoConnectionError

from url_readers.config import ConfigReader
from url_readers.errors import InputError, NotFoundError, ReaderConnectionError
from url_readers.integrations.aws_s3 import (
    AMAZON_AWS_HOST,
    AwsS3IntegrationConfig,
    read_aws_s3_integration_configs,
)
from url_readers.reading.predicates import url_hostname
from url_readers.reading.tree import ReadTreeResponse, ReadTreeResponseFactory
from url_readers.reading.types import TreeFilter, UrlReaderPredicateTuple

_AWS_S3_HOST_RE = re.compile(
    r"^(?:(?P<bucket>.+)\.)?s3(?:[.-][a-z0-9-]+)?\.amazonaws\.com$"
)
_NOT_FOUND_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}


@dataclass(frozen=True)
class S3Location:
    """Where an S3 URL points.

    Attributes:
        bucket: Bucket name
        key: Object key or folder prefix (may be empty)
    """

    bucket: str
    key: str


def _split_s3_hostname(
    hostname: str, integration: AwsS3IntegrationConfig
) -> tuple[bool, Optional[str]]:
    """Check a hostname against an integration.

    Returns:
        ``(accepted, bucket)``; bucket is set for virtual-hosted URLs and
        None when the bucket is the first path segment
    """
    host = integration.host.lower()

    if host == AMAZON_AWS_HOST:
        match = _AWS_S3_HOST_RE.match(hostname)
        if not match:
            return False, None
        return True, match.group("bucket")
    if hostname == host:
        return True, None
    if hostname.endswith(f".{host}") and not integration.s3_force_path_style:
        return True, hostname[: -len(host) - 1]
    return False, None


def parse_s3_url(url: str, integration: AwsS3IntegrationConfig) -> S3Location:
    """Parse an S3 URL into bucket and key.

    Args:
        url: Object or folder URL
        integration: Integration the URL belongs to

    Returns:
        The parsed location

    Raises:
        InputError: If the URL is not an S3 URL for this integration
    """
    parts = urlsplit(url)
    path = unquote(parts.path).lstrip("/")

    accepted, bucket = _split_s3_hostname(parts.hostname or "", integration)
    if not accepted:
        if integration.host.lower() == AMAZON_AWS_HOST:
            raise InputError(f"Not a valid AWS S3 URL: {url}")
        raise InputError(f"Not a valid S3 URL for {integration.host}: {url}")

    if bucket is None:
        bucket, _, path = path.partition("/")

    if not bucket:
        raise InputError(f"S3 URL has no bucket: {url}")
    return S3Location(bucket=bucket, key=path)


@dataclass(frozen=True)
class S3HostPredicate:
    """Matches URLs whose hostname ``parse_s3_url`` accepts for an integration.

    For AWS that is the S3 service hosts only. For custom endpoints it is the
    host itself, plus bucket subdomains unless path style is forced.
    """

    integration: AwsS3IntegrationConfig

    def __call__(self, url: str) -> bool:
        hostname = url_hostname(url)
        if hostname is None:
            return False
        accepted, _ = _split_s3_hostname(hostname, self.integration)
        return accepted


class AwsS3UrlReader:
    """Reads files and trees from an S3-compatible store.

    Attributes:
        integration: The integration this reader is bound to
    """

    def __init__(
        self,
        integration: AwsS3IntegrationConfig,
        tree_response_factory: ReadTreeResponseFactory,
    ):
        """Initialize the reader.

        Args:
            integration: Host, endpoint and credentials
            tree_response_factory: Factory used to build read_tree results
        """
        self.integration = integration
        self._tree_response_factory = tree_response_factory
        self._client: Any = None
        self._client_lock = threading.Lock()

    @classmethod
    def factory(
        cls,
        *,
        config: ConfigReader,
        logger: logging.Logger,
        tree_response_factory: ReadTreeResponseFactory,
    ) -> list[UrlReaderPredicateTuple]:
        """Build one reader per valid ``integrations.awsS3`` entry."""
        entries = []
        for integration in read_aws_s3_integration_configs(config):
            reader = cls(integration, tree_response_factory)
            entries.append(
                UrlReaderPredicateTuple(
                    reader=reader, predicate=S3HostPredicate(integration)
                )
            )
            logger.debug(f"Registered {reader.describe()}")
        return entries

    @property
    def client(self) -> Any:
        """The boto3 S3 client, created on first access."""
        with self._client_lock:
            if self._client is None:
                self._client = self._create_client()
            return self._client

    def _create_client(self) -> Any:
        boto_config = None
        if self.integration.s3_force_path_style:
            boto_config = BotoConfig(s3={"addressing_style": "path"})

        return boto3.client(
            "s3",
            endpoint_url=self.integration.endpoint,
            aws_access_key_id=self.integration.access_key_id,
            aws_secret_access_key=self.integration.secret_access_key,
            region_name=self.integration.region,
            config=boto_config,
        )

    async def _run(self, url: str, func: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking client call in the executor, mapping failures."""
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, partial(func, *args))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                raise NotFoundError(f"Unable to find S3 object at {url}") from e
            raise
        except BotoConnectionError as e:
            raise ReaderConnectionError(f"Unable to reach S3 for {url}: {e}") from e

    def _get_object(self, bucket: str, key: str) -> bytes:
        response = self.client.get_object(Bucket=bucket, Key=key)
        return response["Body"].read()

    def _list_objects(self, bucket: str, prefix: str) -> list[dict]:
        paginator = self.client.get_paginator("list_objects_v2")
        objects = []
        for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
            objects.extend(page.get("Contents", []))
        return objects

    async def read(self, url: str) -> bytes:
        """Read one object.

        Raises:
            InputError: If the URL names no object
            NotFoundError: If the object does not exist
            ReaderConnectionError: If the endpoint cannot be reached
        """
        location = parse_s3_url(url, self.integration)
        if not location.key or location.key.endswith("/"):
            raise InputError(f"S3 URL does not name an object: {url}")
        return await self._run(url, self._get_object, location.bucket, location.key)

    async def read_tree(
        self, url: str, filter: Optional[TreeFilter] = None
    ) -> ReadTreeResponse:
        """Read every object below a bucket or folder URL.

        Raises:
            NotFoundError: If nothing exists below the URL
            ReaderConnectionError: If the endpoint cannot be reached
        """
        location = parse_s3_url(url, self.integration)
        key = location.key
        prefix = key if not key or key.endswith("/") else f"{key}/"
        objects = await self._run(url, self._list_objects, location.bucket, prefix)

        files = []
        etags = []
        for obj in objects:
            path = obj["Key"][len(prefix):]
            if not path or path.endswith("/"):
                continue
            if filter is not None and not filter(path):
                continue
            files.append(
                (path, partial(self._run, url, self._get_object, location.bucket, obj["Key"]))
            )
            etags.append(obj.get("ETag", ""))

        if not files:
            raise NotFoundError(f"No S3 objects found below {url}")

        etag = hashlib.sha256("\n".join(etags).encode("utf-8")).hexdigest()
        return self._tree_response_factory.from_files(files, etag=etag)

    def describe(self) -> str:
        return f"awsS3{{host={self.integration.host},authed={self.integration.authed}}}"

    def __str__(self) -> str:
        return self.describe()

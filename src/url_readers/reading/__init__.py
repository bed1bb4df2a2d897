"""URL readers and the registry that dispatches to them."""

from .aws_s3 import AwsS3UrlReader, S3HostPredicate, parse_s3_url
from .gcs import GcsUrlReader, parse_gcs_url
from .predicates import HostPredicate
from .registry import DEFAULT_FACTORIES, UrlReaderRegistry, build_url_readers, get_url_readers
from .tree import ReadTreeResponse, ReadTreeResponseFactory, ReadTreeResponseFile
from .types import ReaderFactory, UrlReader, UrlReaderPredicateTuple

__all__ = [
    "AwsS3UrlReader",
    "S3HostPredicate",
    "parse_s3_url",
    "GcsUrlReader",
    "parse_gcs_url",
    "HostPredicate",
    "DEFAULT_FACTORIES",
    "UrlReaderRegistry",
    "build_url_readers",
    "get_url_readers",
    "ReadTreeResponse",
    "ReadTreeResponseFactory",
    "ReadTreeResponseFile",
    "ReaderFactory",
    "UrlReader",
    "UrlReaderPredicateTuple",
]

"""AWS S3 and S3-compatible (Cloudflare R2, MinIO) integration configuration."""

import logging
from dataclasses import dataclass
from typing import Optional

from url_readers.config import ConfigReader
from url_readers.errors import ConfigError

logger = logging.getLogger(__name__)

AMAZON_AWS_HOST = "amazonaws.com"
AWS_S3_CONFIG_KEY = "integrations.awsS3"


@dataclass(frozen=True)
class AwsS3IntegrationConfig:
    """One configured S3 endpoint.

    Attributes:
        host: Hostname (or parent domain) this integration serves
        endpoint: Endpoint URL passed to boto3; None for AWS itself
        access_key_id: Access key, or None to use the default credential chain
        secret_access_key: Secret key, or None to use the default credential chain
        region: Region name; None lets boto3 decide
        s3_force_path_style: Treat the first path segment as the bucket
    """

    host: str = AMAZON_AWS_HOST
    endpoint: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    region: Optional[str] = None
    s3_force_path_style: bool = False

    @property
    def authed(self) -> bool:
        return self.access_key_id is not None

    def __repr__(self) -> str:
        return (
            f"AwsS3IntegrationConfig(host={self.host!r}, endpoint={self.endpoint!r}, "
            f"region={self.region!r}, authed={self.authed})"
        )


def read_aws_s3_integration_config(config: ConfigReader) -> Optional[AwsS3IntegrationConfig]:
    """Extract one S3 integration entry.

    Access keys must be given together or not at all. Hosts other than
    amazonaws.com default to a path-style ``https://{host}`` endpoint.

    Args:
        config: Reader over a single ``integrations.awsS3`` element

    Returns:
        The integration config, or None if the entry is invalid
    """
    try:
        host = config.get_optional_string("host") or AMAZON_AWS_HOST
        endpoint = config.get_optional_string("endpoint")
        access_key_id = config.get_optional_string("accessKeyId")
        secret_access_key = config.get_optional_string("secretAccessKey")
        region = config.get_optional_string("region")
        force_path_style = config.get_optional_boolean("s3ForcePathStyle")
    except ConfigError as e:
        logger.info(f"Skipping awsS3 integration at {config.context}: {e}")
        return None

    if bool(access_key_id) != bool(secret_access_key):
        logger.info(
            f"Skipping awsS3 integration at {config.context}: "
            "accessKeyId and secretAccessKey must be set together"
        )
        return None

    if host != AMAZON_AWS_HOST:
        endpoint = endpoint or f"https://{host}"
        if force_path_style is None:
            force_path_style = True

    return AwsS3IntegrationConfig(
        host=host,
        endpoint=endpoint,
        access_key_id=access_key_id or None,
        secret_access_key=secret_access_key or None,
        region=region,
        s3_force_path_style=bool(force_path_style),
    )


def read_aws_s3_integration_configs(config: ConfigReader) -> list[AwsS3IntegrationConfig]:
    """Extract all valid S3 integration entries.

    Args:
        config: Root configuration

    Returns:
        Valid integration configs in configuration order

    Raises:
        ConfigError: If ``integrations.awsS3`` is present but not an array
    """
    entries = config.get_optional_config_array(AWS_S3_CONFIG_KEY) or []
    parsed = (read_aws_s3_integration_config(entry) for entry in entries)
    return [integration for integration in parsed if integration is not None]

"""Google Cloud Storage integration configuration."""

import logging
from dataclasses import dataclass
from typing import Optional

from url_readers.config import ConfigReader
from url_readers.errors import ConfigError

logger = logging.getLogger(__name__)

GCS_HOST = "storage.cloud.google.com"
GCS_CONFIG_KEY = "integrations.gcs"


@dataclass(frozen=True)
class GcsIntegrationConfig:
    """One configured set of GCS service account credentials.

    Attributes:
        client_email: Service account email
        private_key: PEM-encoded service account private key
        host: Hostname this integration serves
    """

    client_email: str
    private_key: str
    host: str = GCS_HOST

    def __repr__(self) -> str:
        return (
            f"GcsIntegrationConfig(host={self.host!r}, "
            f"client_email={self.client_email!r}, private_key='***')"
        )


def read_gcs_integration_config(config: ConfigReader) -> Optional[GcsIntegrationConfig]:
    """Extract one GCS integration entry.

    Args:
        config: Reader over a single ``integrations.gcs`` element

    Returns:
        The integration config, or None if a required field is missing or
        a field has the wrong type
    """
    try:
        host = config.get_optional_string("host") or GCS_HOST
        client_email = config.get_optional_string("clientEmail")
        private_key = config.get_optional_string("privateKey")
    except ConfigError as e:
        logger.info(f"Skipping gcs integration at {config.context}: {e}")
        return None

    if not client_email or not private_key:
        logger.info(
            f"Skipping gcs integration at {config.context}: "
            "clientEmail and privateKey are required"
        )
        return None

    return GcsIntegrationConfig(
        client_email=client_email,
        private_key=private_key,
        host=host,
    )


def read_gcs_integration_configs(config: ConfigReader) -> list[GcsIntegrationConfig]:
    """Extract all valid GCS integration entries.

    An absent ``integrations.gcs`` key means GCS is unused. Invalid entries
    are skipped without affecting the others.

    Args:
        config: Root configuration

    Returns:
        Valid integration configs in configuration order

    Raises:
        ConfigError: If ``integrations.gcs`` is present but not an array
    """
    entries = config.get_optional_config_array(GCS_CONFIG_KEY) or []
    parsed = (read_gcs_integration_config(entry) for entry in entries)
    return [integration for integration in parsed if integration is not None]

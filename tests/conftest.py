"""Shared fixtures for url-readers tests."""

import logging
import sys
from pathlib import Path

import pytest

# Add src to path for imports without an installed package
_src = Path(__file__).parent.parent / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from url_readers.config import ConfigReader  # noqa: E402
from url_readers.reading.tree import ReadTreeResponseFactory  # noqa: E402


@pytest.fixture
def void_logger():
    """Logger that discards everything."""
    logger = logging.getLogger("url_readers.tests.void")
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


@pytest.fixture
def tree_response_factory(tmp_path):
    """Tree response factory working in a temporary directory."""
    return ReadTreeResponseFactory(tmp_path / "work")


@pytest.fixture
def two_gcs_integrations_config():
    """Config with a default-host and a proxy-host GCS integration."""
    return ConfigReader(
        {
            "integrations": {
                "gcs": [
                    {
                        "privateKey": "--- BEGIN KEY ---- fakekey --- END KEY ---",
                        "clientEmail": "someone@example.com",
                    },
                    {
                        "host": "proxy.storage.cloud.google.com",
                        "privateKey": "--- BEGIN KEY ---- fakekey2 --- END KEY ---",
                        "clientEmail": "someone2@example.com",
                    },
                ]
            }
        }
    )

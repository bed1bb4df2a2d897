"""Backend integration configuration."""

from .aws_s3 import (
    AMAZON_AWS_HOST,
    AwsS3IntegrationConfig,
    read_aws_s3_integration_config,
    read_aws_s3_integration_configs,
)
from .gcs import (
    GCS_HOST,
    GcsIntegrationConfig,
    read_gcs_integration_config,
    read_gcs_integration_configs,
)

__all__ = [
    "AMAZON_AWS_HOST",
    "AwsS3IntegrationConfig",
    "read_aws_s3_integration_config",
    "read_aws_s3_integration_configs",
    "GCS_HOST",
    "GcsIntegrationConfig",
    "read_gcs_integration_config",
    "read_gcs_integration_configs",
]

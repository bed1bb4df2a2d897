"""Tests for S3 integration config extraction."""

from url_readers.config import ConfigReader
from url_readers.integrations.aws_s3 import (
    AMAZON_AWS_HOST,
    AwsS3IntegrationConfig,
    read_aws_s3_integration_config,
    read_aws_s3_integration_configs,
)


def test_defaults_to_aws():
    config = read_aws_s3_integration_config(ConfigReader({}))
    assert config == AwsS3IntegrationConfig()
    assert config.host == AMAZON_AWS_HOST
    assert config.endpoint is None
    assert not config.authed


def test_custom_host_gets_path_style_endpoint():
    config = read_aws_s3_integration_config(
        ConfigReader({"host": "minio.example.com", "accessKeyId": "id", "secretAccessKey": "secret"})
    )
    assert config.endpoint == "https://minio.example.com"
    assert config.s3_force_path_style is True
    assert config.authed


def test_explicit_endpoint_and_virtual_hosted_style():
    config = read_aws_s3_integration_config(
        ConfigReader(
            {"host": "objects.example.com", "endpoint": "http://localhost:9000", "s3ForcePathStyle": False}
        )
    )
    assert config.endpoint == "http://localhost:9000"
    assert config.s3_force_path_style is False


def test_half_configured_keys_skipped():
    assert read_aws_s3_integration_config(ConfigReader({"accessKeyId": "id"})) is None
    assert read_aws_s3_integration_config(ConfigReader({"secretAccessKey": "secret"})) is None


def test_wrong_type_skipped():
    assert read_aws_s3_integration_config(ConfigReader({"s3ForcePathStyle": "yes"})) is None


def test_repr_hides_secret():
    config = AwsS3IntegrationConfig(access_key_id="id", secret_access_key="top-secret")
    assert "top-secret" not in repr(config)


def test_list_skips_invalid_entries():
    configs = read_aws_s3_integration_configs(
        ConfigReader(
            {
                "integrations": {
                    "awsS3": [
                        {"host": "a.example.com"},
                        {"host": "b.example.com", "accessKeyId": "only-id"},
                        {"host": "c.example.com"},
                    ]
                }
            }
        )
    )
    assert [c.host for c in configs] == ["a.example.com", "c.example.com"]

"""Tests for the URL reader registry."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from url_readers.config import ConfigReader
from url_readers.errors import NotAllowedError
from url_readers.reading.aws_s3 import AwsS3UrlReader
from url_readers.reading.gcs import GcsUrlReader
from url_readers.reading.predicates import HostPredicate
from url_readers.reading.registry import UrlReaderRegistry, build_url_readers, get_url_readers
from url_readers.reading.types import UrlReaderPredicateTuple


def _entry(host, name):
    reader = MagicMock()
    reader.describe.return_value = name
    reader.read = AsyncMock(return_value=name.encode())
    reader.read_tree = AsyncMock(return_value=name)
    return UrlReaderPredicateTuple(reader=reader, predicate=HostPredicate(host))


class TestUrlReaderRegistry:
    """Tests for register and resolve."""

    def test_resolve_returns_first_match(self):
        first = _entry("a.example.com", "first")
        second = _entry("a.example.com", "second")
        registry = UrlReaderRegistry([first, second])

        assert registry.resolve("https://a.example.com/x") is first.reader

    def test_resolve_no_match_returns_none(self):
        registry = UrlReaderRegistry([_entry("a.example.com", "a")])
        assert registry.resolve("https://b.example.com/x") is None

    def test_empty_registry_resolves_nothing(self):
        assert UrlReaderRegistry().resolve("https://a.example.com") is None

    def test_register_preserves_order_across_calls(self):
        registry = UrlReaderRegistry()
        registry.register([_entry("a.com", "a1"), _entry("b.com", "b1")])
        registry.register([_entry("a.com", "a2"), _entry("c.com", "c1")])

        assert registry.describe() == ["a1", "b1", "a2", "c1"]
        assert registry.resolve("https://a.com").describe() == "a1"
        assert registry.resolve("https://c.com").describe() == "c1"

    def test_sealed_registry_rejects_register(self):
        registry = UrlReaderRegistry([_entry("a.com", "a")]).seal()

        assert registry.sealed
        with pytest.raises(RuntimeError, match="sealed"):
            registry.register([_entry("b.com", "b")])
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_read_delegates_to_resolved_reader(self):
        entry = _entry("a.com", "a")
        registry = UrlReaderRegistry([entry])

        assert await registry.read("https://a.com/bucket/key") == b"a"
        entry.reader.read.assert_awaited_once_with("https://a.com/bucket/key")

    @pytest.mark.asyncio
    async def test_read_tree_passes_filter(self):
        entry = _entry("a.com", "a")
        registry = UrlReaderRegistry([entry])
        only_yaml = lambda path: path.endswith(".yaml")  # noqa: E731

        await registry.read_tree("https://a.com/bucket", filter=only_yaml)
        entry.reader.read_tree.assert_awaited_once_with("https://a.com/bucket", filter=only_yaml)

    @pytest.mark.asyncio
    async def test_read_unresolved_raises_not_allowed(self):
        registry = UrlReaderRegistry([_entry("a.com", "a")])

        with pytest.raises(NotAllowedError, match="configure an integration"):
            await registry.read("https://google.com")

    @pytest.mark.asyncio
    async def test_read_tree_unresolved_raises_not_allowed(self):
        with pytest.raises(NotAllowedError):
            await UrlReaderRegistry().read_tree("https://google.com")


class TestBuildUrlReaders:
    """Tests for build_url_readers."""

    def test_two_gcs_integrations_scenario(self, two_gcs_integrations_config, void_logger):
        registry = build_url_readers(two_gcs_integrations_config, void_logger)
        first, second = registry.entries

        assert len(registry) == 2
        assert registry.sealed
        assert registry.resolve(
            "https://storage.cloud.google.com/team1/service1/catalog-info.yaml"
        ) is first.reader
        assert registry.resolve("https://proxy.storage.cloud.google.com/x") is second.reader
        assert registry.resolve("https://storage2.cloud.google.com") is None
        assert registry.resolve("https://google.com") is None

    def test_backend_types_in_factory_order(self, void_logger):
        config = ConfigReader(
            {
                "integrations": {
                    "awsS3": [{"host": "minio.example.com"}],
                    "gcs": [{"clientEmail": "a@example.com", "privateKey": "key"}],
                }
            }
        )
        registry = build_url_readers(config, void_logger)

        assert [type(entry.reader) for entry in registry] == [GcsUrlReader, AwsS3UrlReader]

    def test_duplicate_hosts_first_registered_wins(self, void_logger):
        config = ConfigReader(
            {
                "integrations": {
                    "gcs": [
                        {"clientEmail": "first@example.com", "privateKey": "key"},
                        {"clientEmail": "second@example.com", "privateKey": "key"},
                    ]
                }
            }
        )
        registry = build_url_readers(config, void_logger)

        reader = registry.resolve("https://storage.cloud.google.com/bucket/a")
        assert reader.integration.client_email == "first@example.com"

    def test_custom_factories(self, void_logger):
        entry = _entry("a.com", "custom")
        factory = MagicMock(return_value=[entry])
        config = ConfigReader({})

        registry = build_url_readers(config, void_logger, factories=[factory])

        assert registry.entries == (entry,)
        kwargs = factory.call_args.kwargs
        assert kwargs["config"] is config
        assert kwargs["logger"] is void_logger
        assert kwargs["tree_response_factory"] is not None

    def test_no_integrations(self, void_logger):
        assert len(build_url_readers(ConfigReader({}), void_logger)) == 0


class TestGetUrlReaders:
    """Tests for the process-wide registry."""

    def test_cached_per_config_path(self, tmp_path):
        config_path = tmp_path / "config.toml"
        config_path.write_text(
            '[[integrations.gcs]]\nclientEmail = "a@example.com"\nprivateKey = "key"\n'
        )

        registry = get_url_readers(config_path)

        assert len(registry) == 1
        assert get_url_readers(config_path) is registry

    def test_missing_config_means_no_readers(self, tmp_path):
        registry = get_url_readers(tmp_path / "missing.toml")
        assert len(registry) == 0

    def test_default_path_from_settings(self, tmp_path):
        config_path = tmp_path / "from-settings.toml"
        config_path.write_text('[[integrations.awsS3]]\nhost = "minio.example.com"\n')

        with patch("url_readers.settings.settings.URL_READERS_CONFIG", config_path):
            registry = get_url_readers()

        assert registry.describe() == ["awsS3{host=minio.example.com,authed=False}"]

    def test_call_forms_share_one_registry(self, tmp_path, monkeypatch):
        """Default, explicit None and the spelled-out default path build once."""
        config_dir = tmp_path / "xdg" / "url-readers"
        config_dir.mkdir(parents=True)
        (config_dir / "config.toml").write_text(
            '[[integrations.gcs]]\nclientEmail = "a@example.com"\nprivateKey = "key"\n'
        )
        monkeypatch.setattr("url_readers.settings.settings.URL_READERS_CONFIG", None)
        monkeypatch.setattr("url_readers.reading.registry.get_config_path", lambda: config_dir / "config.toml")

        with patch("url_readers.reading.registry.build_url_readers", wraps=build_url_readers) as mock_build:
            first = get_url_readers()
            second = get_url_readers(None)
            third = get_url_readers(config_path=None)
            fourth = get_url_readers(config_dir / "." / "config.toml")

        assert first is second is third is fourth
        assert len(first) == 1
        mock_build.assert_called_once()

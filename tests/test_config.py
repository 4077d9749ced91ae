import json

import pytest

from core.config import DEFAULT_UPSTREAM, Config, LimitSettings, UpstreamSettings, load_config
from core.exceptions import ConfigurationError


class TestUpstreamSettings:
    def test_default_origin(self):
        assert Config().upstream.base_url == DEFAULT_UPSTREAM

    def test_trailing_slash_is_stripped(self):
        assert UpstreamSettings(base_url="https://upstream.example/").base_url == (
            "https://upstream.example"
        )

    def test_path_prefix_allowed(self):
        settings = UpstreamSettings(base_url="http://localhost:9000/api/")

        assert settings.base_url == "http://localhost:9000/api"

    @pytest.mark.parametrize(
        "base_url",
        [
            "upstream.example",
            "ftp://upstream.example",
            "https://",
            "https://upstream.example/?key=1",
            "https://upstream.example/#frag",
        ],
    )
    def test_rejects_non_origins(self, base_url):
        with pytest.raises(ValueError):
            UpstreamSettings(base_url=base_url)


class TestLimitSettings:
    def test_everything_unset_by_default(self):
        limits = LimitSettings()

        assert limits.timeout is None
        assert limits.max_connections is None
        assert limits.max_keepalive_connections is None
        assert limits.keep_alive_timeout is None
        assert limits.max_body_size is None

    def test_negative_body_size_rejected(self):
        with pytest.raises(ValueError):
            LimitSettings(max_body_size=-1)

    def test_negative_keep_alive_rejected(self):
        with pytest.raises(ValueError):
            LimitSettings(keep_alive_timeout=-1)


class TestLoadConfig:
    def test_creates_default_file(self, tmp_path):
        config_file = tmp_path / "gemini-proxy" / "config.json"

        config = load_config(config_file)

        assert config == Config()
        assert json.loads(config_file.read_text())["upstream"]["base_url"] == DEFAULT_UPSTREAM

    def test_reads_existing_file(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(
            json.dumps(
                {
                    "proxy": {"port": 9090},
                    "upstream": {"base_url": "http://127.0.0.1:8000"},
                    "limits": {"timeout": 30, "max_body_size": 1024},
                }
            )
        )

        config = load_config(config_file)

        assert config.proxy.port == 9090
        assert config.upstream.base_url == "http://127.0.0.1:8000"
        assert config.limits.timeout == 30
        assert config.limits.max_body_size == 1024

    def test_corrupted_file_is_backed_up(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        config = load_config(config_file)

        assert config == Config()
        assert (tmp_path / "config.json.bak").read_text() == "{not json"

    def test_invalid_upstream_raises(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"upstream": {"base_url": "not a url"}}))

        with pytest.raises(ConfigurationError):
            load_config(config_file)

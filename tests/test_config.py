import json
import logging
import stat

import pytest
from pydantic import ValidationError

from middleman.core.errors import ConfigError
from middleman.shared import (
    GatewayConfig,
    load_config,
    load_gateway_config,
    read_gateway_config,
    save_gateway_config,
)
from middleman.shared import gateway_config as gateway_config_module
from middleman.shared.gateway_config import DEFAULT_BACKEND_URL, DEFAULT_LISTEN_PORT

TEST_KEY = "0123456789abcdef0123456789abcdef"


def test_service_config_loads():
    config = load_config()
    assert config.gateway.api_prefix == "/api"
    assert "/create-account" in config.gateway.routes
    assert config.gateway.backend_timeout > 0
    assert config.logging.level == logging.DEBUG


def test_service_config_specific_overrides(tmp_path):
    specific = tmp_path / "specific.toml"
    specific.write_text(
        "[gateway]\n"
        'api_prefix = "/v2/"\n'
        'routes = ["/create-account"]\n'
        "backend_timeout = 2.5\n"
    )

    config = load_config(specific_config_file=specific)
    assert config.gateway.api_prefix == "/v2"
    assert config.gateway.routes == ["/create-account"]
    assert config.gateway.backend_timeout == 2.5


def test_service_config_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.toml")


def test_service_config_rejects_bad_timeout(tmp_path):
    specific = tmp_path / "specific.toml"
    specific.write_text("[gateway]\nbackend_timeout = 0\n")

    with pytest.raises(ConfigError):
        load_config(specific_config_file=specific)


class TestGatewayConfigFile:
    def test_first_run_creates_config(self, tmp_path):
        path = tmp_path / "middleman_config.json"

        config = load_gateway_config(path)

        assert path.exists()
        assert len(config.key) == 32
        assert config.sftp_server_url == DEFAULT_BACKEND_URL
        assert config.listen_port == DEFAULT_LISTEN_PORT

        stored = json.loads(path.read_text())
        assert stored["encryption_key"] == config.encryption_key
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_second_run_reuses_key(self, tmp_path):
        path = tmp_path / "middleman_config.json"

        first = load_gateway_config(path)
        second = load_gateway_config(path)

        assert first == second

    def test_accepts_string_port(self, tmp_path):
        path = tmp_path / "middleman_config.json"
        path.write_text(
            json.dumps(
                {
                    "encryption_key": TEST_KEY,
                    "sftp_server_url": "http://localhost:4444/",
                    "listen_port": "8882",
                }
            )
        )

        config = load_gateway_config(path)
        assert config.listen_port == 8882
        assert config.sftp_server_url == "http://localhost:4444"

    @pytest.mark.parametrize("bad_key", ["short", TEST_KEY[:31], TEST_KEY + "x"])
    def test_bad_key_length_is_fatal(self, tmp_path, bad_key):
        path = tmp_path / "middleman_config.json"
        path.write_text(json.dumps({"encryption_key": bad_key}))

        with pytest.raises(ConfigError):
            load_gateway_config(path)

    def test_unparseable_file_is_fatal(self, tmp_path):
        path = tmp_path / "middleman_config.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError):
            load_gateway_config(path)

    def test_unreadable_path_is_fatal(self, tmp_path):
        # A directory exists but cannot be read as a file
        path = tmp_path / "middleman_config.json"
        path.mkdir()

        with pytest.raises(ConfigError):
            load_gateway_config(path)


def test_gateway_config_is_immutable():
    config = GatewayConfig(encryption_key=TEST_KEY)
    with pytest.raises(ValidationError):
        config.encryption_key = "f" * 32


def test_gateway_config_fingerprint():
    config = GatewayConfig(encryption_key=TEST_KEY)
    assert config.key_fingerprint == "01234567..."
    assert TEST_KEY not in config.key_fingerprint


class TestKeyFilePermissions:
    def test_key_file_is_created_owner_only(self, tmp_path, monkeypatch):
        # Without the final chmod the file must already be 0600
        monkeypatch.setattr(gateway_config_module.os, "chmod", lambda path, mode: None)
        path = tmp_path / "middleman_config.json"

        save_gateway_config(GatewayConfig(encryption_key=TEST_KEY), path)

        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert json.loads(path.read_text())["encryption_key"] == TEST_KEY

    def test_existing_file_is_tightened(self, tmp_path):
        path = tmp_path / "middleman_config.json"
        path.write_text("{}")
        path.chmod(0o644)

        save_gateway_config(GatewayConfig(encryption_key=TEST_KEY), path)

        assert stat.S_IMODE(path.stat().st_mode) == 0o600


class TestReadOnlyLoad:
    def test_missing_file_is_an_error(self, tmp_path):
        path = tmp_path / "middleman_config.json"

        with pytest.raises(ConfigError):
            read_gateway_config(path)

        assert not path.exists()

    def test_reads_existing_file(self, tmp_path):
        path = tmp_path / "middleman_config.json"
        created = load_gateway_config(path)

        assert read_gateway_config(path) == created

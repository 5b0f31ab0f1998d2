import os
from os import PathLike
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from middleman.core.envelope import KEY_SIZE, generate_key, key_fingerprint
from middleman.core.errors import ConfigError
from middleman.shared.logger import Logger

logger = Logger(__name__).get_logger()

DEFAULT_BACKEND_URL = "http://localhost:4444"
DEFAULT_LISTEN_PORT = 8882


class GatewayConfig(BaseModel):
    """
    Persisted gateway settings shared with the website callers.

    Built once at startup and handed to the app factory; never mutated while
    serving.
    """

    model_config = ConfigDict(frozen=True)

    encryption_key: str
    sftp_server_url: str = DEFAULT_BACKEND_URL
    listen_port: int = DEFAULT_LISTEN_PORT

    @field_validator("encryption_key")
    @classmethod
    def check_key_length(cls, value: str) -> str:
        length = len(value.encode())
        if length != KEY_SIZE:
            raise ValueError(f"encryption_key must be {KEY_SIZE} bytes, got {length}")
        return value

    @field_validator("sftp_server_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def key(self) -> bytes:
        return self.encryption_key.encode()

    @property
    def key_fingerprint(self) -> str:
        return key_fingerprint(self.encryption_key)


def save_gateway_config(gateway_config: GatewayConfig, path: PathLike) -> None:
    path = Path(path)
    try:
        # Created owner-only so the key is never readable by others, even briefly
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(gateway_config.model_dump_json(indent=2))
        # O_CREAT leaves the mode of an existing file alone
        os.chmod(path, 0o600)
    except OSError as e:
        raise ConfigError(f"Failed to save config {path}: {e}") from e


def read_gateway_config(path: PathLike) -> GatewayConfig:
    """Loads an existing gateway config; a missing file is a ConfigError."""
    path = Path(path)

    try:
        gateway_config = GatewayConfig.model_validate_json(path.read_bytes())
    except OSError as e:
        raise ConfigError(f"Failed to load config {path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Failed to parse config {path}: {e}") from e

    logger.info(
        "Loaded configuration. Encryption key: %s", gateway_config.key_fingerprint
    )
    return gateway_config


def load_gateway_config(path: PathLike) -> GatewayConfig:
    """
    Loads the gateway config, creating it with a fresh key on first run.

    The full key is logged once, when it is generated, so the operator can
    hand it to callers. Afterwards only its fingerprint is logged.
    """
    path = Path(path)

    if not path.exists():
        gateway_config = GatewayConfig(encryption_key=generate_key())
        save_gateway_config(gateway_config, path)
        logger.info("Created new configuration file: %s", path)
        logger.info("Generated encryption key: %s", gateway_config.encryption_key)
        logger.info(
            "Share this %s-character key with the website for secure communication!",
            KEY_SIZE,
        )
        return gateway_config

    return read_gateway_config(path)

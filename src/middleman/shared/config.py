from logging import CRITICAL, DEBUG, ERROR, INFO, WARNING
from os import PathLike
from pathlib import Path
from tomllib import TOMLDecodeError, load

from pydantic import BaseModel, ValidationError, field_validator

from middleman.core.errors import ConfigError

DEFAULT_CONFIG_PATH = Path("config.toml")


class General(BaseModel):
    title: str


class Logging(BaseModel):
    level: int

    @field_validator("level", mode="before")
    @classmethod
    def convert_log_level(cls, value):
        if isinstance(value, int):
            return value

        log_levels = {
            "DEBUG": DEBUG,
            "INFO": INFO,
            "WARNING": WARNING,
            "ERROR": ERROR,
            "CRITICAL": CRITICAL,
        }
        return log_levels.get(value.upper(), INFO)


class Paths(BaseModel):
    logs: str
    gateway_config: str = "middleman_config.json"


class Network(BaseModel):
    host: str = "127.0.0.1"
    allowed_origins: list[str] = ["*"]


class Gateway(BaseModel):
    api_prefix: str = "/api"
    routes: list[str] = ["/create-account", "/add-user", "/health"]
    backend_timeout: float = 10.0  # seconds, whole backend exchange
    disconnect_poll_interval: float = 0.1

    @field_validator("api_prefix")
    @classmethod
    def normalise_prefix(cls, value: str) -> str:
        value = value.rstrip("/")
        if value and not value.startswith("/"):
            raise ValueError("api_prefix must start with '/'")
        return value

    @field_validator("routes")
    @classmethod
    def check_routes(cls, value: list[str]) -> list[str]:
        for route in value:
            if not route.startswith("/"):
                raise ValueError(f"route {route!r} must start with '/'")
        return value

    @field_validator("backend_timeout", "disconnect_poll_interval")
    @classmethod
    def check_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value


class Config(BaseModel):
    general: General
    paths: Paths
    logging: Logging
    network: Network
    gateway: Gateway


def load_config(
    shared_config_file: PathLike = DEFAULT_CONFIG_PATH,
    specific_config_file: PathLike | None = None,
) -> Config:
    """Load and merge configurations from TOML files."""
    try:
        # Load shared config
        with Path(shared_config_file).open("rb") as f:
            config_data = load(f)

        # Load and merge specific config if provided
        if specific_config_file:
            with Path(specific_config_file).open("rb") as f:
                specific_data = load(f)
                config_data.update(specific_data)

        return Config(**config_data)

    except (OSError, TOMLDecodeError) as e:
        raise ConfigError(f"Failed to read service config: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Invalid service config: {e}") from e

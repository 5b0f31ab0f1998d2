from .config import Config, load_config
from .logger import Logger
from .gateway_config import (
    GatewayConfig,
    load_gateway_config,
    read_gateway_config,
    save_gateway_config,
)

__all__ = [
    "Config",
    "GatewayConfig",
    "Logger",
    "load_config",
    "load_gateway_config",
    "read_gateway_config",
    "save_gateway_config",
]

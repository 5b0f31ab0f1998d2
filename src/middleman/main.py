import argparse
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from middleman.core.backend import BackendClient
from middleman.core.errors import ConfigError
from middleman.core.gateway import Gateway
from middleman.routers import get_routers
from middleman.shared import (
    Config,
    GatewayConfig,
    Logger,
    load_config,
    load_gateway_config,
)
from middleman.shared.config import DEFAULT_CONFIG_PATH

logger = Logger(__name__).get_logger()

config = load_config()


# ================================================================================
#       FastAPI Setup
# ================================================================================
def create_app(gateway_config: GatewayConfig, service_config: Config = config) -> FastAPI:
    """Builds the app around an already loaded, immutable gateway config."""
    settings = service_config.gateway

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One pooled client for every forward; closed on shutdown
        async with httpx.AsyncClient() as http_client:
            backend = BackendClient(
                http_client,
                base_url=gateway_config.sftp_server_url,
                timeout=settings.backend_timeout,
            )
            app.state.gateway = Gateway(
                gateway_config,
                backend,
                api_prefix=settings.api_prefix,
                disconnect_poll_interval=settings.disconnect_poll_interval,
            )
            yield

    app = FastAPI(title="middleman", lifespan=lifespan)

    for router in get_routers(settings):
        app.include_router(router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=service_config.network.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


# ================================================================================
#       Command Line
# ================================================================================
def welcome(service_config: Config, gateway_config: GatewayConfig, host: str, port: int):
    # Log server banner
    for line in service_config.general.title.split("\n"):
        logger.info(line)

    logger.info("Middleman listening on %s:%s", host, port)
    logger.info("Forwarding to SFTP server: %s", gateway_config.sftp_server_url)
    logger.info("Ready to process encrypted requests...")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Relay encrypted API calls to the storage management service"
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="TOML service settings (default: config.toml)",
    )
    parser.add_argument(
        "--gateway-config",
        help="Path to the JSON file holding the shared key (created if missing)",
    )
    parser.add_argument("--host", help="Override network.host")
    parser.add_argument("--port", type=int, help="Override listen_port")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    try:
        service_config = load_config(args.config)
        gateway_config = load_gateway_config(
            args.gateway_config or service_config.paths.gateway_config
        )
    except ConfigError as e:
        logger.critical("Refusing to start: %s", e)
        return 1

    host = args.host or service_config.network.host
    port = args.port or gateway_config.listen_port
    welcome(service_config, gateway_config, host, port)

    import uvicorn

    uvicorn.run(create_app(gateway_config, service_config), host=host, port=port)
    return 0


if __name__ == "__main__":
    sys.exit(main())

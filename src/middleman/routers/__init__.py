from middleman.shared.config import Gateway as GatewaySettings

from .gateway import build_router
from .health import router as health_router

__all__ = ["get_routers"]


def get_routers(settings: GatewaySettings):
    return [build_router(settings), health_router]

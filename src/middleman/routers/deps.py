from fastapi import Request

from middleman.core.gateway import Gateway


def get_gateway(request: Request) -> Gateway:
    # Built by the app lifespan, see middleman.main.create_app
    return request.app.state.gateway

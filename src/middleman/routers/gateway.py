from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from middleman.core.errors import ClientDisconnectedError
from middleman.core.gateway import Gateway
from middleman.routers.deps import get_gateway
from middleman.shared import Logger
from middleman.shared.config import Gateway as GatewaySettings
from middleman.shared.http import seal_error_handler

logger = Logger(__name__).get_logger()

# nginx convention, nobody is left to read it
CLIENT_CLOSED_REQUEST = 499


async def relay_encrypted_request(
    request: Request,
    gateway: Annotated[Gateway, Depends(get_gateway)],
) -> Response:
    """
    input: {"data": base64(nonce || ciphertext || tag)}
    ==========================
    decrypt with the shared key
    forward plaintext to the backend (prefix stripped from the path)
    seal {success, message, data} from the backend reply
    ==========================
    output: {"data": envelope}, 200 on success, 400 otherwise
    """
    path = request.url.path
    body = await request.body()

    try:
        reply = await gateway.handle(path, body, request.is_disconnected)
    except ClientDisconnectedError as e:
        logger.warning("%s; backend call cancelled", e)
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    with seal_error_handler(path):
        sealed = gateway.seal_reply(reply)

    return JSONResponse(
        content=sealed.model_dump(),
        status_code=200 if reply.success else 400,
    )


def build_router(settings: GatewaySettings) -> APIRouter:
    """One POST-only route per configured backend route, under the API prefix."""
    router = APIRouter()

    # FastAPI answers 405 for other methods before the handler runs
    for route in settings.routes:
        router.add_api_route(
            settings.api_prefix + route,
            relay_encrypted_request,
            methods=["POST"],
            name=f"relay{route.replace('/', '_').replace('-', '_')}",
        )

    return router

from typing import Annotated

from fastapi import APIRouter, Depends

from middleman.core.gateway import Gateway
from middleman.models.schema import HealthStatus
from middleman.routers.deps import get_gateway

router = APIRouter()


@router.get("/health", response_model=HealthStatus)
async def health(gateway: Annotated[Gateway, Depends(get_gateway)]):
    """
    Plaintext liveness probe for operators on loopback.
    Shows only the key fingerprint, enough to confirm which key is loaded.
    """
    return HealthStatus(
        encryption_key=gateway.config.key_fingerprint,
        sftp_server=gateway.config.sftp_server_url,
    )

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from middleman.core.errors import BackendReplyError


class BackendReply(BaseModel):
    """
    Reply from the storage management service.

    Fields are optional so that a malformed reply is reported as a
    BackendReplyError by `from_body` instead of failing somewhere downstream.
    """

    model_config = ConfigDict(strict=True)

    success: bool | None = None
    message: str | None = None
    data: Any = None

    @classmethod
    def from_body(cls, body: bytes) -> "BackendReply":
        try:
            reply = cls.model_validate_json(body)
        except ValidationError as e:
            raise BackendReplyError(
                f"Failed to parse response: {e.error_count()} error(s): "
                + ", ".join(f"{err['loc']}: {err['type']}" for err in e.errors())
            ) from e

        missing = [name for name in ("success", "message") if getattr(reply, name) is None]
        if missing:
            raise BackendReplyError(f"Response missing field(s): {', '.join(missing)}")

        return reply


class GatewayReply(BaseModel):
    """Plaintext of every sealed response the middleman sends."""

    success: bool
    message: str
    data: Any = None


class HealthStatus(BaseModel):
    status: str = "healthy"
    service: str = "middleman"
    encryption_key: str
    sftp_server: str

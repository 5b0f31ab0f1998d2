from pydantic import BaseModel, ValidationError

from middleman.core.envelope import open_envelope, seal
from middleman.core.errors import TransportError


class EncryptedPayload(BaseModel):
    data: str  # Base64 envelope: nonce || ciphertext || tag

    @classmethod
    def parse(cls, body: bytes) -> "EncryptedPayload":
        """Parses an outer request/response body, raising TransportError."""
        try:
            return cls.model_validate_json(body)
        except ValidationError as e:
            raise TransportError(
                f"Invalid request format: {e.error_count()} error(s): "
                + ", ".join(err["type"] for err in e.errors())
            ) from e

    @classmethod
    def wrap(cls, plaintext: bytes, key: bytes) -> "EncryptedPayload":
        return cls(data=seal(plaintext, key))

    def unwrap(self, key: bytes) -> bytes:
        return open_envelope(self.data, key)

from .accounts import AddUserRequest, CreateAccountRequest
from .encrypted_payload import EncryptedPayload

__all__ = [
    "AddUserRequest",
    "CreateAccountRequest",
    "EncryptedPayload",
]

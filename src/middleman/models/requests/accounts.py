"""
Plaintext bodies understood by the storage management service.
The middleman never inspects them; callers seal them into an EncryptedPayload.
"""

from pydantic import BaseModel


class CreateAccountRequest(BaseModel):
    company_name: str
    company_email: str
    quota_gb: int
    password: str
    api_key: str = ""  # backend generates one when empty


class AddUserRequest(BaseModel):
    company_name: str
    api_key: str
    username: str
    user_email: str
    password: str

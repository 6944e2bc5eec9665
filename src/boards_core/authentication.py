# boards_core/authentication.py
import os
import secrets
from typing import Optional

from dotenv import load_dotenv
from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

load_dotenv()
# Shared key of the trusted caller that forwards user IDs to the boards API
SECRET_TOKEN: Optional[str] = os.getenv("SECRET_TOKEN")

API_KEY_NAME = "X-API-Key"
api_key_header = APIKeyHeader(
    name=API_KEY_NAME,
    description="Key of the service allowed to act on behalf of board users",
    auto_error=True,
)


def verify_token(x_token: str = Security(api_key_header)) -> str:
    """Reject the request unless it carries the configured key.

    With no key configured every request is refused.
    """
    if not SECRET_TOKEN or not secrets.compare_digest(x_token.encode(), SECRET_TOKEN.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing token",
        )
    return x_token

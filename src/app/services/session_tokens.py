import hashlib
import secrets
from typing import Tuple


def hash_token(token: str) -> str:
    """SHA-256 hex digest; the only form a session token is stored in"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def new_session_token() -> Tuple[str, str]:
    """
    Generate an opaque session token

    Returns:
        (token, token_hash) - token goes to the client, hash to the store
    """
    token = secrets.token_hex(32)
    return token, hash_token(token)

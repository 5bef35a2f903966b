from datetime import datetime

from fastapi import Response

from src.domain.base import utcnow


def set_session_cookie(
    response: Response, name: str, token: str, expires_at: datetime, secure: bool
) -> None:
    response.set_cookie(
        key=name,
        value=token,
        max_age=max(0, int((expires_at - utcnow()).total_seconds())),
        httponly=True,
        secure=secure,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, name: str, secure: bool) -> None:
    response.delete_cookie(key=name, path="/", httponly=True, secure=secure, samesite="lax")

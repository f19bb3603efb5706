from typing import Optional

from fastapi import Cookie, HTTPException, status
from jose import JWTError
import structlog

from dashboard.config import settings
from dashboard.schemas.auth import SessionUser
from dashboard.services.identity import decode_session_token

logger = structlog.get_logger()


async def get_current_user(
    session: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME),
) -> SessionUser:
    """FastAPI dependency: verify the session cookie and return the signed-in user."""
    if not session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "AUTH_REQUIRED", "message": "Sign in to continue"},
        )
    try:
        payload = decode_session_token(session)
        return SessionUser(
            user_id=payload["sub"],
            email=payload["email"],
            name=payload.get("name", ""),
        )
    except (JWTError, KeyError) as e:
        logger.warning("session_token_invalid", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "AUTH_TOKEN_INVALID", "message": "Invalid or expired session"},
        )

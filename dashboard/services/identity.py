"""
Credentials identity provider.

``sign_in`` checks submitted credentials against the ``users`` table and, on
success, issues a signed session token and the redirect that follows a
login. Failures surface as categorized ``AuthError`` subclasses.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from jose import jwt
from passlib.context import CryptContext
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from dashboard.actions.results import Redirect
from dashboard.config import settings
from dashboard.models.user import User
from dashboard.schemas.auth import CredentialsForm

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ---------- errors ----------

class AuthError(Exception):
    type = "AuthError"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.type)


class CredentialsSignin(AuthError):
    """The submitted credentials did not match a user."""
    type = "CredentialsSignin"


class CallbackRouteError(AuthError):
    """The provider failed while processing an otherwise well-formed sign-in."""
    type = "CallbackRouteError"


class InvalidProvider(AuthError):
    type = "InvalidProvider"


# ---------- password helpers ----------

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# ---------- session tokens ----------

def _secret() -> str:
    if not settings.AUTH_SECRET:
        raise RuntimeError("AUTH_SECRET is not configured")
    return settings.AUTH_SECRET


def create_session_token(user_id: str, email: str, name: str) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "email": email,
        "name": name,
        "iat": now,
        "exp": now + timedelta(seconds=settings.SESSION_MAX_AGE_SECONDS),
    }
    return jwt.encode(claims, _secret(), algorithm=settings.AUTH_ALGORITHM)


def decode_session_token(token: str) -> dict:
    """Decode and verify a session token. Raises JWTError on failure."""
    return jwt.decode(token, _secret(), algorithms=[settings.AUTH_ALGORITHM])


# ---------- sign-in ----------

def _redirect_target(value: Any) -> str:
    # Only same-site absolute paths are honoured.
    if isinstance(value, str) and value.startswith("/") and not value.startswith("//"):
        return value
    return settings.LOGIN_REDIRECT_PATH


async def get_user(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def sign_in(provider: str, form_data: Mapping[str, Any], *, db: AsyncSession) -> Redirect:
    if provider != "credentials":
        raise InvalidProvider(f"Unsupported provider: {provider}")

    try:
        credentials = CredentialsForm.model_validate(
            {"email": form_data.get("email"), "password": form_data.get("password")}
        )
    except ValidationError:
        raise CredentialsSignin()

    try:
        user = await get_user(db, credentials.email)
    except SQLAlchemyError as e:
        logger.error("user_lookup_failed", error=str(e))
        raise CallbackRouteError("Failed to fetch user") from e

    if user is None or not verify_password(credentials.password, user.password):
        logger.info("sign_in_rejected", email=credentials.email)
        raise CredentialsSignin()

    token = create_session_token(str(user.id), user.email, user.name)
    logger.info("user_signed_in", user_id=str(user.id))
    return Redirect(_redirect_target(form_data.get("redirectTo")), session_token=token)

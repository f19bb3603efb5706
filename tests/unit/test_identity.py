"""
Unit tests for dashboard/actions/auth.py and dashboard/services/identity.py

sign_in runs against an AsyncMock session; bcrypt verification is patched
so no hashing happens in the tests.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from jose import JWTError
from sqlalchemy.exc import OperationalError

from dashboard.actions.auth import authenticate
from dashboard.actions.results import Redirect
from dashboard.services.identity import (
    CallbackRouteError,
    CredentialsSignin,
    InvalidProvider,
    create_session_token,
    decode_session_token,
    sign_in,
)

CREDENTIALS = {"email": "user@nextmail.com", "password": "123456"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_user(email: str = "user@nextmail.com", name: str = "User"):
    u = MagicMock()
    u.id = uuid.uuid4()
    u.email = email
    u.name = name
    u.password = "$2b$12$hash"
    return u


def _lookup_returns(db_session, user):
    result = MagicMock()
    result.scalar_one_or_none.return_value = user
    db_session.execute.return_value = result


# ---------------------------------------------------------------------------
# authenticate
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_authenticate_returns_redirect_on_success(db_session):
    redirect = Redirect("/dashboard", session_token="tok")
    with patch("dashboard.actions.auth.sign_in", new_callable=AsyncMock, return_value=redirect) as mock_sign_in:
        result = await authenticate(None, CREDENTIALS, db=db_session)

    assert result is redirect
    mock_sign_in.assert_awaited_once_with("credentials", CREDENTIALS, db=db_session)


@pytest.mark.asyncio
async def test_authenticate_invalid_credentials_message(db_session):
    with patch("dashboard.actions.auth.sign_in", new_callable=AsyncMock, side_effect=CredentialsSignin()):
        result = await authenticate(None, CREDENTIALS, db=db_session)
    assert result == "Invalid credentials."


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [CallbackRouteError("db down"), InvalidProvider("github")])
async def test_authenticate_other_auth_errors_message(db_session, error):
    with patch("dashboard.actions.auth.sign_in", new_callable=AsyncMock, side_effect=error):
        result = await authenticate(None, CREDENTIALS, db=db_session)
    assert result == "Someting went wrong"


@pytest.mark.asyncio
async def test_authenticate_reraises_non_auth_errors(db_session):
    with patch("dashboard.actions.auth.sign_in", new_callable=AsyncMock, side_effect=ValueError("unexpected")):
        with pytest.raises(ValueError, match="unexpected"):
            await authenticate(None, CREDENTIALS, db=db_session)


# ---------------------------------------------------------------------------
# sign_in
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_sign_in_unknown_provider(db_session):
    with pytest.raises(InvalidProvider):
        await sign_in("github", CREDENTIALS, db=db_session)
    db_session.execute.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "form",
    [
        {},
        {"email": "not-an-email", "password": "123456"},
        {"email": "user@nextmail.com", "password": "12345"},
        {"email": "user@nextmail.com"},
    ],
)
async def test_sign_in_malformed_credentials(db_session, form):
    with pytest.raises(CredentialsSignin):
        await sign_in("credentials", form, db=db_session)
    db_session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_sign_in_unknown_user(db_session):
    _lookup_returns(db_session, None)
    with pytest.raises(CredentialsSignin):
        await sign_in("credentials", CREDENTIALS, db=db_session)


@pytest.mark.asyncio
async def test_sign_in_wrong_password(db_session):
    _lookup_returns(db_session, _make_user())
    with patch("dashboard.services.identity.verify_password", return_value=False):
        with pytest.raises(CredentialsSignin):
            await sign_in("credentials", CREDENTIALS, db=db_session)


@pytest.mark.asyncio
async def test_sign_in_lookup_failure_is_callback_error(db_session):
    db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("timeout"))
    with pytest.raises(CallbackRouteError):
        await sign_in("credentials", CREDENTIALS, db=db_session)


@pytest.mark.asyncio
async def test_sign_in_success_issues_session(db_session):
    user = _make_user()
    _lookup_returns(db_session, user)
    form = {**CREDENTIALS, "redirectTo": "/dashboard/invoices"}

    with patch("dashboard.services.identity.verify_password", return_value=True) as mock_verify:
        result = await sign_in("credentials", form, db=db_session)

    mock_verify.assert_called_once_with("123456", user.password)
    assert result.location == "/dashboard/invoices"
    claims = decode_session_token(result.session_token)
    assert claims["sub"] == str(user.id)
    assert claims["email"] == "user@nextmail.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("target", [None, "", "https://evil.example", "//evil.example/path"])
async def test_sign_in_ignores_offsite_redirects(db_session, target):
    _lookup_returns(db_session, _make_user())
    form = {**CREDENTIALS, "redirectTo": target}

    with patch("dashboard.services.identity.verify_password", return_value=True):
        result = await sign_in("credentials", form, db=db_session)

    assert result.location == "/dashboard"


# ---------------------------------------------------------------------------
# session tokens
# ---------------------------------------------------------------------------


def test_session_token_round_trip():
    token = create_session_token("u-1", "user@nextmail.com", "User")
    claims = decode_session_token(token)
    assert claims["sub"] == "u-1"
    assert claims["name"] == "User"


def test_tampered_session_token_rejected():
    header, payload, _ = create_session_token("u-1", "user@nextmail.com", "User").split(".")
    _, _, foreign_signature = create_session_token("u-2", "other@nextmail.com", "Other").split(".")
    with pytest.raises(JWTError):
        decode_session_token(f"{header}.{payload}.{foreign_signature}")

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.actions.auth import authenticate
from dashboard.config import settings
from dashboard.database import get_db

router = APIRouter()


@router.post("/login")
async def login(request: Request, db: AsyncSession = Depends(get_db)):
    """Credentials login form. Redirects with a session cookie, or returns the error message."""
    form = await request.form()
    result = await authenticate(None, form, db=db)

    if isinstance(result, str):
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"message": result})

    response = RedirectResponse(result.location, status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        result.session_token,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


@router.post("/logout")
async def logout():
    response = RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response

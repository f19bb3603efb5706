from typing import Any, Mapping, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.actions.results import Redirect
from dashboard.services.identity import AuthError, sign_in


async def authenticate(
    prev_state: Optional[str],
    form_data: Mapping[str, Any],
    *,
    db: AsyncSession,
) -> Union[Redirect, str]:
    """Sign in with submitted credentials; returns the post-login redirect or a user-facing error."""
    try:
        return await sign_in("credentials", form_data, db=db)
    except AuthError as error:
        if error.type == "CredentialsSignin":
            return "Invalid credentials."
        return "Someting went wrong"

"""
Outcomes of form actions.

An action either navigates (``Redirect``) or hands a state back to the form
(``ActionState``) carrying per-field errors and/or a top-level message.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import BaseModel


@dataclass(frozen=True)
class Redirect:
    location: str
    session_token: Optional[str] = None


class ActionState(BaseModel):
    errors: Optional[Dict[str, List[str]]] = None
    message: Optional[str] = None

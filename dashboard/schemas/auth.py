from pydantic import BaseModel, EmailStr, Field


class CredentialsForm(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class SessionUser(BaseModel):
    user_id: str
    email: str
    name: str

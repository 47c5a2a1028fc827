"""Request and response bodies for /api/auth."""

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "lowercase letter"),
    (re.compile(r"[A-Z]"), "uppercase letter"),
    (re.compile(r"\d"), "number"),
)


def validate_password_strength(v: str) -> str:
    """Require at least one lowercase letter, one uppercase letter and one digit."""
    missing = [label for pattern, label in _PASSWORD_RULES if not pattern.search(v)]
    if missing:
        raise ValueError(f"Password must contain at least one: {', '.join(missing)}")
    return v


class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=100)

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        return validate_password_strength(v)


class UserLogin(BaseModel):
    """Login is not validated beyond presence; bad credentials are a 401, not a 422."""

    email: str
    password: str


class UserInfo(BaseModel):
    """Public view of an account, returned by register, login and /me."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: str
    preferred_currency: str = "USD"
    preferred_language: str = "en"


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo

"""Schemas for user profile and preference endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from coinfolio.schemas.auth import validate_password_strength


class UserProfile(BaseModel):
    """Full profile of a user account."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: str
    is_active: bool
    preferred_currency: str
    preferred_language: str
    created_at: datetime


class CurrencyPreferenceUpdate(BaseModel):
    """Preferred display currency, stored upper-case (e.g. USD, EUR, BTC)."""

    currency: str

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if not 1 <= len(v) <= 8:
            raise ValueError("Currency code must be 1-8 characters")
        return v


class LanguagePreferenceUpdate(BaseModel):
    """Preferred UI language, stored lower-case (e.g. en, pt-br)."""

    language: str

    @field_validator("language")
    @classmethod
    def normalize_language(cls, v: str) -> str:
        v = v.strip().lower()
        if not 2 <= len(v) <= 10:
            raise ValueError("Language code must be 2-10 characters")
        return v


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=100)

    @field_validator("new_password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        return validate_password_strength(v)

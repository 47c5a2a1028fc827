"""Response bodies shared by every router."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """One problem with the request body or query, e.g. a single invalid field."""

    field: str | None = Field(None, description="Dotted location of the offending input, if any")
    message: str


class ErrorResponse(BaseModel):
    """Body of every domain error response.

    `error` is a stable machine-readable code (ValidationError,
    InsufficientBalance, PriceUnavailable, NotFound, Forbidden, Duplicate,
    OracleUnavailable, InternalError); `message` is for people.
    """

    error: str
    message: str
    path: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    details: list[ErrorDetail] | None = None


class MessageResponse(BaseModel):
    message: str

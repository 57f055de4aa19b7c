"""Pydantic schemas for Security model."""

from datetime import datetime

from pydantic import Field, model_validator

from wealth.schemas.common import CamelModel


class SecurityBase(CamelModel):
    """Base Security schema with common fields."""

    name: str = Field(..., min_length=1, max_length=200)
    isin: str | None = Field(None, max_length=20)
    symbol: str | None = Field(None, max_length=50)
    currency: str = Field("USD", max_length=10)


class SecurityCreate(SecurityBase):
    """Schema for creating a new Security; needs an ISIN or a symbol."""

    @model_validator(mode="after")
    def require_identifier(self) -> "SecurityCreate":
        if not (self.isin or "").strip() and not (self.symbol or "").strip():
            raise ValueError("Either isin or symbol is required")
        return self


class SecurityUpdate(CamelModel):
    """Schema for updating an existing Security."""

    name: str | None = Field(None, min_length=1, max_length=200)
    isin: str | None = Field(None, max_length=20)
    symbol: str | None = Field(None, max_length=50)
    currency: str | None = Field(None, max_length=10)


class Security(SecurityBase):
    """Schema for Security responses."""

    id: int
    created_at: datetime | None = None

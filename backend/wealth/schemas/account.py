"""Pydantic schemas for Account model."""

from datetime import datetime

from pydantic import Field

from wealth.schemas.common import CamelModel


class AccountBase(CamelModel):
    """Base Account schema with common fields."""

    name: str = Field(..., min_length=1, max_length=100)
    currency: str = Field("USD", min_length=3, max_length=3, description="ISO currency code")
    is_active: bool = True


class AccountCreate(AccountBase):
    """Schema for creating a new Account."""

    pass


class AccountUpdate(CamelModel):
    """Schema for updating an existing Account."""

    name: str | None = Field(None, min_length=1, max_length=100)
    currency: str | None = Field(None, min_length=3, max_length=3)
    is_active: bool | None = None


class Account(AccountBase):
    """Schema for Account responses."""

    id: int
    created_at: datetime | None = None

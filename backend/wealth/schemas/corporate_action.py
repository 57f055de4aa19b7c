"""Pydantic schemas for corporate actions."""

from datetime import date
from decimal import Decimal

from pydantic import Field, field_validator

from wealth.constants import CorporateActionType
from wealth.schemas.common import CamelModel


class CorporateActionBase(CamelModel):
    """Base corporate action schema.

    For SPLIT the ratio is new shares per old share; for BONUS it is bonus
    shares per share held.
    """

    security_id: int
    action_date: date
    action_type: str = Field(..., description="SPLIT, BONUS, RIGHTS, DIVIDEND or CAPITAL_REDUCTION")
    ratio: Decimal | None = Field(None, gt=0)
    price: Decimal | None = Field(None, ge=0)
    notes: str | None = None

    @field_validator("action_type")
    @classmethod
    def known_type(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in CorporateActionType.ALL:
            raise ValueError(f"Unknown corporate action type '{value}'")
        return value


class CorporateActionCreate(CorporateActionBase):
    """Schema for recording a corporate action."""

    pass


class CorporateActionUpdate(CorporateActionBase):
    """Schema for replacing a corporate action (all fields)."""

    pass


class CorporateAction(CorporateActionBase):
    """Schema for corporate action responses."""

    id: int

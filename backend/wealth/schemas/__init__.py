"""Pydantic schemas for API validation."""

from wealth.schemas.account import Account, AccountCreate, AccountUpdate
from wealth.schemas.common import (
    CamelModel,
    ErrorDetail,
    ErrorResponse,
    MessageResponse,
    Page,
    PageMeta,
)
from wealth.schemas.corporate_action import (
    CorporateAction,
    CorporateActionCreate,
    CorporateActionUpdate,
)
from wealth.schemas.holding import Holding
from wealth.schemas.imports import ImportResult, PreviewRow, TransactionImportRequest
from wealth.schemas.price import Price, PriceUpsert
from wealth.schemas.realized import ConsumedLot, RealizedRow, RealizedSummary
from wealth.schemas.security import Security, SecurityCreate, SecurityUpdate
from wealth.schemas.transaction import Transaction, TransactionCreate, TransactionReverse

__all__ = [
    "Account",
    "AccountCreate",
    "AccountUpdate",
    "CamelModel",
    "ConsumedLot",
    "CorporateAction",
    "CorporateActionCreate",
    "CorporateActionUpdate",
    "ErrorDetail",
    "ErrorResponse",
    "Holding",
    "ImportResult",
    "MessageResponse",
    "Page",
    "PageMeta",
    "Price",
    "PriceUpsert",
    "PreviewRow",
    "RealizedRow",
    "RealizedSummary",
    "Security",
    "SecurityCreate",
    "SecurityUpdate",
    "Transaction",
    "TransactionCreate",
    "TransactionImportRequest",
    "TransactionReverse",
]

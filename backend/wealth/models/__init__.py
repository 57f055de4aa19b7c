"""SQLAlchemy ORM models."""

from wealth.models.account import Account
from wealth.models.corporate_action import CorporateAction
from wealth.models.import_batch import ImportBatch
from wealth.models.security import Security
from wealth.models.security_price import SecurityPrice
from wealth.models.transaction import Transaction

__all__ = [
    "Account",
    "CorporateAction",
    "ImportBatch",
    "Security",
    "SecurityPrice",
    "Transaction",
]

"""Application constants to avoid magic strings."""

from decimal import Decimal

# Tolerance for "is this quantity zero" checks after repeated split divisions
QUANTITY_EPSILON = Decimal("0.000001")


class TransactionType:
    """Ledger transaction types."""

    BUY = "BUY"
    SELL = "SELL"
    DIVIDEND = "DIVIDEND"
    FEE = "FEE"
    SPLIT = "SPLIT"
    OTHER = "OTHER"

    ALL = (BUY, SELL, DIVIDEND, FEE, SPLIT, OTHER)
    # Types whose quantity must be strictly positive
    QUANTITY_REQUIRED = (BUY, SELL, SPLIT)
    # Types that can shrink an open position and therefore oversell a later SELL
    LOT_REDUCING = (SELL, SPLIT)


class CorporateActionType:
    """Corporate action types."""

    SPLIT = "SPLIT"
    BONUS = "BONUS"
    RIGHTS = "RIGHTS"
    DIVIDEND = "DIVIDEND"
    CAPITAL_REDUCTION = "CAPITAL_REDUCTION"

    ALL = (SPLIT, BONUS, RIGHTS, DIVIDEND, CAPITAL_REDUCTION)
    # Actions that change share counts of open lots
    LOT_ADJUSTING = (SPLIT, BONUS)


class DuplicatePolicy:
    """What an import does with a row that is already in the ledger."""

    REJECT = "reject"
    ALLOW = "allow"

    ALL = (REJECT, ALLOW)

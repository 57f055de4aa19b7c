"""Transaction content hashing for import deduplication.

Two rows hash the same when they describe the same trade: same reference,
date, type, account, security and amounts. A broker reference (``ref``
column) makes otherwise identical trades distinct.

Example usage in the import service:
    content_hash = compute_transaction_hash(
        external_txn_id=row.ref,
        txn_date=row.trade_date,
        txn_type=row.type,
        account=row.account_name,
        security=row.isin or row.symbol,
        quantity=row.quantity,
        price=row.price,
        fees=row.fees,
    )
    if content_hash in existing_hashes:
        ...
"""

import hashlib
from datetime import date
from decimal import Decimal


def compute_transaction_hash(
    external_txn_id: str | None,
    txn_date: date,
    txn_type: str,
    account: str,
    security: str,
    quantity: Decimal,
    price: Decimal | None,
    fees: Decimal,
) -> str:
    """Compute SHA256 hash of transaction identifying fields.

    Args:
        external_txn_id: Broker's transaction reference, if the CSV carries one
        txn_date: Trade date
        txn_type: Canonical transaction type (BUY, SELL, ...)
        account: Account name (case-insensitive)
        security: ISIN, or symbol when no ISIN is known (case-insensitive)
        quantity: Transaction quantity (normalized to 8 decimals)
        price: Price per unit (normalized, or None)
        fees: Transaction fees

    Returns:
        64-character SHA256 hex digest
    """
    # Normalize values for consistent hashing
    components = [
        (external_txn_id or "").strip(),
        txn_date.isoformat(),
        txn_type.upper(),
        account.strip().lower(),
        security.strip().upper(),
        f"{quantity:.8f}",
        f"{price:.8f}" if price is not None else "null",
        f"{fees:.8f}",
    ]

    content = "|".join(components)
    return hashlib.sha256(content.encode()).hexdigest()

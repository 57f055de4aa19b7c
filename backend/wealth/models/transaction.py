"""Transaction model - the append-only ledger."""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from wealth.database import Base

if TYPE_CHECKING:
    from wealth.models.account import Account
    from wealth.models.import_batch import ImportBatch
    from wealth.models.security import Security


class Transaction(Base):
    """Immutable ledger entry.

    Rows are never updated in place. A mistake is corrected by appending a
    reversal row whose ``reverses_id`` points at the original.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_position", "account_id", "security_id"),
        Index("idx_transactions_date", "trade_date"),
        Index("idx_transactions_batch", "import_batch_id"),
        Index("idx_transactions_content_hash", "content_hash"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    trade_date: Mapped[date] = mapped_column(Date)
    type: Mapped[str] = mapped_column(String(20))  # BUY, SELL, DIVIDEND, FEE, SPLIT, OTHER
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"))
    security_id: Mapped[int] = mapped_column(ForeignKey("securities.id"))
    quantity: Mapped[Decimal] = mapped_column(Numeric(20, 8))  # split ratio for SPLIT
    price: Mapped[Decimal] = mapped_column(Numeric(20, 8), default=Decimal("0"))
    fees: Mapped[Decimal] = mapped_column(Numeric(20, 8), default=Decimal("0"))
    notes: Mapped[str | None] = mapped_column(Text)
    import_batch_id: Mapped[int | None] = mapped_column(
        ForeignKey("import_batches.id", ondelete="SET NULL")
    )
    content_hash: Mapped[str | None] = mapped_column(String(64))
    reverses_id: Mapped[int | None] = mapped_column(ForeignKey("transactions.id"), unique=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    # Relationships
    account: Mapped["Account"] = relationship(back_populates="transactions")
    security: Mapped["Security"] = relationship(back_populates="transactions")
    import_batch: Mapped["ImportBatch | None"] = relationship(back_populates="transactions")

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, type='{self.type}', date={self.trade_date}, quantity={self.quantity})>"

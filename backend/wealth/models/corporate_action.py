"""Corporate Action model for splits, bonus issues, rights, etc."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from wealth.database import Base


class CorporateAction(Base):
    """
    Track corporate actions affecting open positions.

    Only SPLIT and BONUS change lot quantities during replay:
    - SPLIT: ratio = new shares per old share (2.0 = 2:1 split, 0.5 = 1:2 reverse split)
    - BONUS: ratio = bonus shares per share held (1.0 = 1:1 bonus)
    RIGHTS, DIVIDEND and CAPITAL_REDUCTION are recorded for reference.
    """

    __tablename__ = "corporate_actions"
    __table_args__ = (
        Index("idx_corporate_actions_security", "security_id"),
        Index("idx_corporate_actions_date", "action_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    security_id: Mapped[int] = mapped_column(ForeignKey("securities.id", ondelete="CASCADE"))
    action_date: Mapped[date] = mapped_column(Date)
    action_type: Mapped[str] = mapped_column(String(50))
    ratio: Mapped[Decimal | None] = mapped_column(Numeric(15, 8))
    price: Mapped[Decimal | None] = mapped_column(Numeric(20, 8))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    # Relationships
    security: Mapped["Security"] = relationship(back_populates="corporate_actions")

    def __repr__(self) -> str:
        return f"<CorporateAction(type={self.action_type}, security_id={self.security_id}, {self.action_date})>"

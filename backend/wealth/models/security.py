"""Security model - the instrument master (stocks, funds, bonds...)."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from wealth.database import Base

if TYPE_CHECKING:
    from wealth.models.corporate_action import CorporateAction
    from wealth.models.security_price import SecurityPrice
    from wealth.models.transaction import Transaction


class Security(Base):
    """Security identified by ISIN and/or exchange symbol."""

    __tablename__ = "securities"
    __table_args__ = (
        Index("idx_securities_symbol", "symbol"),
        Index("idx_securities_isin", "isin"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    isin: Mapped[str | None] = mapped_column(String(20), unique=True)
    symbol: Mapped[str | None] = mapped_column(String(50))
    name: Mapped[str] = mapped_column(String(200))
    currency: Mapped[str] = mapped_column(String(10), default="USD")
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    # Relationships
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="security")
    prices: Mapped[list["SecurityPrice"]] = relationship(
        back_populates="security", cascade="all, delete-orphan"
    )
    corporate_actions: Mapped[list["CorporateAction"]] = relationship(
        back_populates="security", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Security(id={self.id}, symbol='{self.symbol}', isin='{self.isin}')>"

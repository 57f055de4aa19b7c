"""Import batch model - groups the transactions written by one CSV import."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from wealth.database import Base

if TYPE_CHECKING:
    from wealth.models.transaction import Transaction


class ImportBatch(Base):
    """One committed import; referenced by every transaction it created."""

    __tablename__ = "import_batches"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    source: Mapped[str] = mapped_column(String(50), default="csv")
    row_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    # Relationships
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="import_batch")

    def __repr__(self) -> str:
        return f"<ImportBatch(id={self.id}, source='{self.source}', rows={self.row_count})>"

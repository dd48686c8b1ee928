from __future__ import annotations
"""SQLAlchemy model for commission ledger transactions."""
from typing import TYPE_CHECKING
from sqlalchemy import Integer, String, DateTime, Float, Enum, ForeignKey, Text, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column

if TYPE_CHECKING:  # pragma: no cover
    from .users import User
from sqlalchemy.sql import func
from app.database import Base
from .enums import TransactionType, TransactionStatus, ReferenceModel

class Transaction(Base):
    """Ledger entry owned by an agent.

    ``reference_id`` + ``reference_model`` point back at the originating click
    or withdrawal without a foreign key, so the ledger never embeds either.
    """
    __tablename__ = "transactions"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    type: Mapped[TransactionType] = mapped_column(Enum(TransactionType), default=TransactionType.EARNINGS)
    amount: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[TransactionStatus] = mapped_column(Enum(TransactionStatus), default=TransactionStatus.PENDING, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reference_model: Mapped[ReferenceModel | None] = mapped_column(Enum(ReferenceModel), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)
    processed_at: Mapped[DateTime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="transactions")

    __table_args__ = (
        Index("ix_transactions_reference", "reference_model", "reference_id"),
    )

from __future__ import annotations
"""SQLAlchemy model for storefront users (shoppers, agents and admins)."""
from typing import TYPE_CHECKING
from sqlalchemy import Integer, String, DateTime, Boolean, Float, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column

if TYPE_CHECKING:  # pragma: no cover
    from .transactions import Transaction
from sqlalchemy.sql import func
from app.database import Base
from .enums import UserRole

class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    api_key: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), default=UserRole.USER, index=True)

    # Agents hand out referral codes; stored upper-cased.
    referral_code: Mapped[str | None] = mapped_column(String, unique=True, nullable=True, index=True)
    # Permanent referrer captured at sign-up.
    referred_by_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    balance: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    total_earnings: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    referred_by: Mapped["User | None"] = relationship("User", remote_side=[id])
    transactions: Mapped[list["Transaction"]] = relationship("Transaction", back_populates="user")

    __table_args__ = (
        CheckConstraint("balance >= 0", name="user_balance_non_negative"),
    )

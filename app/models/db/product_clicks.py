from __future__ import annotations
"""SQLAlchemy model for tracked product clicks."""
from typing import TYPE_CHECKING
from sqlalchemy import Integer, String, DateTime, Float, Enum, ForeignKey
from sqlalchemy.orm import relationship, Mapped, mapped_column

if TYPE_CHECKING:  # pragma: no cover
    from .users import User
from sqlalchemy.sql import func
from app.database import Base
from .enums import MatchSource

class ProductClick(Base):
    __tablename__ = "product_clicks"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # Null for guest clicks.
    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    asin: Mapped[str] = mapped_column(String(10), index=True)
    product_name: Mapped[str] = mapped_column(String)
    input_category: Mapped[str | None] = mapped_column(String, nullable=True)
    category: Mapped[str] = mapped_column(String, default="Uncategorized", index=True)
    price: Mapped[float] = mapped_column(Float, default=0.0)
    image_url: Mapped[str | None] = mapped_column(String, nullable=True)
    product_url: Mapped[str | None] = mapped_column(String, nullable=True)
    agent_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    # Fraction in [0, 1]; only admin overrides change it after creation.
    commission_rate: Mapped[float] = mapped_column(Float, default=0.02)
    matched_by: Mapped[MatchSource] = mapped_column(Enum(MatchSource), default=MatchSource.DEFAULT)

    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)

    user: Mapped["User | None"] = relationship("User", foreign_keys=[user_id])
    agent: Mapped["User | None"] = relationship("User", foreign_keys=[agent_id])

from __future__ import annotations
"""SQLAlchemy model for commission category rules."""
from typing import Any
from sqlalchemy import Integer, String, DateTime, Float, Enum, JSON, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from app.database import Base
from .enums import CategoryStatus

class Category(Base):
    """A canonical category with its commission percentage (0-100).

    ``search_index`` holds one value of the catalog API's fixed search-index
    vocabulary; ``search_queries`` is a list of free-text synonyms used when
    matching click categories and product names.
    """
    __tablename__ = "categories"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    search_index: Mapped[str] = mapped_column(String, default="All", index=True)
    search_queries: Mapped[list[Any]] = mapped_column(JSON, default=list)
    percentage: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    status: Mapped[CategoryStatus] = mapped_column(Enum(CategoryStatus), default=CategoryStatus.ACTIVE, index=True)

    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    __table_args__ = (
        CheckConstraint("percentage >= 0 AND percentage <= 100", name="category_percentage_range"),
    )

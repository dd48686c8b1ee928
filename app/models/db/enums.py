"""Central Enum definitions for core domain states.

These replace scattered string literals to ensure consistency across
DB models, schemas, and business logic.
"""
from __future__ import annotations
import enum


class UserRole(str, enum.Enum):
    USER = "USER"
    AGENT = "AGENT"
    ADMIN = "ADMIN"


class CategoryStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class TransactionType(str, enum.Enum):
    EARNINGS = "earnings"
    PAYOUT = "payout"
    ADJUSTMENT = "adjustment"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ReferenceModel(str, enum.Enum):
    """Discriminator for a transaction's back-reference (id only, no FK)."""
    PRODUCT_CLICK = "ProductClick"
    WITHDRAWAL = "Withdrawal"


class MatchSource(str, enum.Enum):
    """Which step of category resolution produced the click's category."""
    EXPLICIT = "explicit"
    SMART_MAP = "smart_map"
    PRODUCT_TERM = "product_term"
    KEYWORD_SWEEP = "keyword_sweep"
    DEFAULT = "default"


__all__ = [
    "UserRole",
    "CategoryStatus",
    "TransactionType",
    "TransactionStatus",
    "ReferenceModel",
    "MatchSource",
]

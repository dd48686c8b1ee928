"""Read access to commission category rules.

Resolution works on a ``RuleBook``: frozen ``CategoryRule`` snapshots of the
active categories, loaded once per click. Only ``load_rule_book`` touches the
session, so the matching chain stays pure and testable without a database.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from sqlalchemy.orm import Session

from app.models.db import Category
from app.models.db.enums import CategoryStatus


@dataclass(frozen=True)
class CategoryRule:
    id: int
    name: str
    search_index: str
    percentage: float
    search_queries: tuple[str, ...] = ()

    @property
    def fraction(self) -> float:
        return self.percentage / 100

    @classmethod
    def from_model(cls, category: Category) -> "CategoryRule":
        queries = tuple(str(q) for q in (category.search_queries or []) if q)
        return cls(
            id=category.id,
            name=category.name,
            search_index=category.search_index or "All",
            percentage=float(category.percentage or 0),
            search_queries=queries,
        )


class RuleBook:
    """Lookups over active rules, in creation order."""

    def __init__(self, rules: Iterable[CategoryRule]):
        self._rules: tuple[CategoryRule, ...] = tuple(rules)

    def __len__(self) -> int:
        return len(self._rules)

    def list_active(self) -> Sequence[CategoryRule]:
        return self._rules

    def find_by_name_index_or_synonym(self, text: str) -> CategoryRule | None:
        """Exact case-insensitive match on name, then search index, then any synonym."""
        needle = (text or "").strip().lower()
        if not needle:
            return None
        for rule in self._rules:
            if rule.name.lower() == needle:
                return rule
        for rule in self._rules:
            if rule.search_index.lower() == needle:
                return rule
        for rule in self._rules:
            if any(q.strip().lower() == needle for q in rule.search_queries):
                return rule
        return None

    def find_by_search_index(self, search_index: str) -> CategoryRule | None:
        return next((r for r in self._rules if r.search_index == search_index), None)

    def find_by_hint(self, hint: str) -> CategoryRule | None:
        """First rule whose name contains ``hint`` or whose search index equals it."""
        lowered = hint.lower()
        return next(
            (r for r in self._rules if lowered in r.name.lower() or r.search_index == hint),
            None,
        )


def load_rule_book(session: Session) -> RuleBook:
    categories = (
        session.query(Category)
        .filter(Category.status == CategoryStatus.ACTIVE)
        .order_by(Category.id)
        .all()
    )
    return RuleBook(CategoryRule.from_model(c) for c in categories)


__all__ = ["CategoryRule", "RuleBook", "load_rule_book"]

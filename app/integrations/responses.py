"""Shape checks for successful catalog payloads."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class SearchPage:
    items: list[dict[str, Any]]
    total_count: int


def parse_search_result(payload: dict[str, Any]) -> SearchPage | None:
    """Items and total count from a SearchItems payload; None when ``SearchResult`` is absent."""
    result = payload.get("SearchResult")
    if not isinstance(result, dict):
        return None
    items = result.get("Items") or []
    return SearchPage(items=list(items), total_count=int(result.get("TotalResultCount") or 0))


def items_of(payload: dict[str, Any]) -> list[dict[str, Any]] | None:
    result = payload.get("ItemsResult")
    if not isinstance(result, dict) or not isinstance(result.get("Items"), list):
        return None
    return result["Items"]


def first_item(payload: dict[str, Any]) -> dict[str, Any] | None:
    items = items_of(payload)
    return items[0] if items else None


def item_title(item: dict[str, Any]) -> str | None:
    return ((item.get("ItemInfo") or {}).get("Title") or {}).get("DisplayValue")


__all__ = ["SearchPage", "parse_search_result", "items_of", "first_item", "item_title"]

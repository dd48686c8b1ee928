"""Category & commission-rate resolution for a product click.

Matchers run in a fixed order, from the most precise signal (an explicit
category the shopper's page carried) down to free-text inference over the
product name:

    explicit -> smart map -> product-name term hints -> keyword sweep -> default

The first rule with a positive percentage wins. A matched rule whose
percentage is 0 supplies the canonical name but not a rate; the chain keeps
looking and, if nothing better turns up, that name is kept with the default
rate. All text matching is word-boundary anchored, regex-escaped and
case-insensitive so ``led`` never matches inside ``sealed``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional

from app.config import COMMISSION_SETTINGS
from app.integrations.search_index import WILDCARD_INDEX, resolve_search_index
from app.models.db.enums import MatchSource
from app.services.category_rules import CategoryRule, RuleBook

# product-name term -> category hint (a rule name fragment or a search index)
PRODUCT_TERM_HINTS: dict[str, str] = {
    # Electronics & TV
    "tv": "Electronics",
    "television": "Electronics",
    "televisions": "Electronics",
    "smart televisions": "Electronics",
    "led tv": "Electronics",
    "smart led tv": "Electronics",
    "led": "Electronics",
    "lcd": "Electronics",
    "monitor": "Electronics",
    "phone": "Electronics",
    "mobile": "Electronics",
    "tablet": "Electronics",
    "camera": "Electronics",
    "headphone": "Electronics",
    "earphone": "Electronics",
    "speaker": "Electronics",
    "laptop": "Computers",
    "computer": "Computers",
    "macbook": "Computers",
    "keyboard": "Computers",
    "mouse": "Computers",
    # Watches
    "watch": "Watches",
    "clock": "Watches",
    "timepiece": "Watches",
    # Home & appliances
    "fridge": "Appliances",
    "refrigerator": "Appliances",
    "washing machine": "Appliances",
    "ac": "Appliances",
    "air conditioner": "Appliances",
    "microwave": "Appliances",
    "kitchen": "HomeAndKitchen",
    "home": "HomeAndKitchen",
    "furniture": "Furniture",
    # Beauty & personal care
    "soap": "Beauty",
    "shampoo": "Beauty",
    "cream": "Beauty",
    "makeup": "Beauty",
    "perfume": "Beauty",
    "hair": "Beauty",
    # Fashion
    "shirt": "Fashion",
    "pant": "Fashion",
    "jeans": "Fashion",
    "shoe": "Shoes",
    "sandal": "Shoes",
    "sneaker": "Shoes",
    "bag": "Luggage",
    "luggage": "Luggage",
    "wallet": "Luggage",
    # Grocery
    "fresh": "GroceryAndGourmetFood",
    "vegetable": "GroceryAndGourmetFood",
    "fruit": "GroceryAndGourmetFood",
    "food": "GroceryAndGourmetFood",
    "snack": "GroceryAndGourmetFood",
    "chocolate": "GroceryAndGourmetFood",
    "oil": "GroceryAndGourmetFood",
    "rice": "GroceryAndGourmetFood",
    "tea": "GroceryAndGourmetFood",
    "coffee": "GroceryAndGourmetFood",
}


@dataclass(frozen=True)
class CategoryResolution:
    category: str
    commission_rate: float
    matched_by: MatchSource
    rule_id: Optional[int] = None


@dataclass(frozen=True)
class ClickContext:
    input_category: Optional[str]
    product_name: str


Matcher = Callable[[ClickContext, RuleBook], Optional[CategoryRule]]


def contains_word(text: str, phrase: str) -> bool:
    """Word-boundary, case-insensitive containment of a literal phrase."""
    if not text or not phrase:
        return False
    return re.search(rf"\b{re.escape(phrase)}\b", text, re.IGNORECASE) is not None


def is_placeholder(category: Optional[str]) -> bool:
    if not category or not category.strip():
        return True
    placeholders = {str(p).lower() for p in COMMISSION_SETTINGS["placeholder_categories"]}  # type: ignore[union-attr]
    return category.strip().lower() in placeholders


def match_explicit(ctx: ClickContext, rules: RuleBook) -> Optional[CategoryRule]:
    if is_placeholder(ctx.input_category):
        return None
    return rules.find_by_name_index_or_synonym(ctx.input_category or "")


def match_smart_map(ctx: ClickContext, rules: RuleBook) -> Optional[CategoryRule]:
    if is_placeholder(ctx.input_category):
        return None
    search_index = resolve_search_index(ctx.input_category)
    if search_index == WILDCARD_INDEX:
        return None
    return rules.find_by_search_index(search_index)


def match_product_terms(ctx: ClickContext, rules: RuleBook) -> Optional[CategoryRule]:
    """First hinted term in the product name that maps onto an active rule."""
    for term, hint in PRODUCT_TERM_HINTS.items():
        if not contains_word(ctx.product_name, term):
            continue
        rule = rules.find_by_hint(hint)
        if rule is not None:
            return rule
    return None


def match_keyword_sweep(ctx: ClickContext, rules: RuleBook) -> Optional[CategoryRule]:
    min_len = int(COMMISSION_SETTINGS["min_keyword_length"])  # type: ignore[call-overload]
    for rule in rules.list_active():
        for keyword in (rule.name, *rule.search_queries):
            if not keyword or len(keyword) < min_len:
                continue
            if contains_word(ctx.product_name, keyword):
                return rule
    return None


MATCHERS: list[tuple[MatchSource, Matcher]] = [
    (MatchSource.EXPLICIT, match_explicit),
    (MatchSource.SMART_MAP, match_smart_map),
    (MatchSource.PRODUCT_TERM, match_product_terms),
    (MatchSource.KEYWORD_SWEEP, match_keyword_sweep),
]


def resolve_category(
    input_category: Optional[str],
    product_name: str,
    rules: RuleBook,
) -> CategoryResolution:
    """Canonical category name + commission fraction for a click. Never raises."""
    ctx = ClickContext(input_category=input_category, product_name=product_name or "")
    default_rate = float(COMMISSION_SETTINGS["default_rate"])  # type: ignore[arg-type]
    name_only: Optional[tuple[MatchSource, CategoryRule]] = None

    for source, matcher in MATCHERS:
        rule = matcher(ctx, rules)
        if rule is None:
            continue
        if rule.percentage > 0:
            return CategoryResolution(
                category=rule.name,
                commission_rate=rule.fraction,
                matched_by=source,
                rule_id=rule.id,
            )
        if name_only is None:
            name_only = (source, rule)

    if name_only is not None:
        source, rule = name_only
        return CategoryResolution(
            category=rule.name,
            commission_rate=default_rate,
            matched_by=source,
            rule_id=rule.id,
        )

    return CategoryResolution(
        category=str(COMMISSION_SETTINGS["default_category"]),
        commission_rate=default_rate,
        matched_by=MatchSource.DEFAULT,
    )


__all__ = [
    "PRODUCT_TERM_HINTS",
    "CategoryResolution",
    "MATCHERS",
    "contains_word",
    "is_placeholder",
    "resolve_category",
]

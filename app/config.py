"""Core application configuration & tunable commission rules.

Everything that may evolve without touching service logic lives here: catalog
API settings (marketplace, timeouts, requested resource sets) and the
commission defaults applied when no category rule matches. Values are module
constants read from the environment once at import; tests monkeypatch the
dicts directly when they need different values.
"""
from __future__ import annotations

import json
import os
from typing import Final


def _resources_from_env(var: str, default: list[str]) -> list[str]:
	raw = os.getenv(var)
	if not raw or not raw.strip():
		return list(default)
	return [str(r) for r in json.loads(raw)]


# ------------------------- Product Advertising API ------------------------ #
DEFAULT_MARKETPLACE: Final[str] = "www.amazon.in"

_SEARCH_RESOURCES = [
	"Images.Primary.Large",
	"ItemInfo.Title",
	"ItemInfo.Features",
	"ItemInfo.TechnicalInfo",
	"Offers.Listings.Price",
	"Offers.Listings.Condition",
	"Offers.Listings.DeliveryInfo.IsPrimeEligible",
	"CustomerReviews.StarRating",
	"CustomerReviews.Count",
	"BrowseNodeInfo.BrowseNodes",
	"ItemInfo.Classifications",
]

PAAPI_SETTINGS: dict[str, object] = {
	"marketplace": os.getenv("AWS_MARKETPLACE", DEFAULT_MARKETPLACE),
	# Explicit region wins over the marketplace-derived one.
	"region_override": os.getenv("AWS_REGION") or None,
	"timeout_seconds": float(os.getenv("PAAPI_TIMEOUT_SECONDS", "30")),
	"partner_type": "Associates",
	"default_item_count": 10,
	"max_item_page": 10,
	"search_resources": _resources_from_env("AWS_SEARCH_RESOURCES", _SEARCH_RESOURCES),
	"get_items_resources": _resources_from_env(
		"AWS_GETITEMS_RESOURCES",
		_SEARCH_RESOURCES + ["ItemInfo.ContentInfo", "ItemInfo.ProductInfo"],
	),
	"browse_node_resources": ["BrowseNodes.Ancestor", "BrowseNodes.Children"],
}

# ------------------------------- Commission ------------------------------- #
COMMISSION_SETTINGS: dict[str, object] = {
	# Fraction applied when no category rule supplies a positive percentage.
	"default_rate": 0.02,
	"default_category": "Uncategorized",
	# Input categories treated as "no category given".
	"placeholder_categories": ["Uncategorized", "Unknown"],
	# Keyword sweep ignores rule names / synonyms shorter than this.
	"min_keyword_length": 3,
	"pending_description": "Pending Commission ({percent:.2f}%): {product_name}",
	"override_description": "Commission ({percent:.2f}%): {product_name} [Updated]",
	"manual_description": "Commission ({percent:.2f}%): {product_name} [Manual Update]",
	"backfill_description": "Commission ({percent:.2f}%): {product_name} [Admin Created]",
}

# Number of recent clicks used to seed personalized product searches.
PERSONALIZATION_RECENT_CLICKS: int = int(os.getenv("PERSONALIZATION_RECENT_CLICKS", "5"))

__all__ = [
	"DEFAULT_MARKETPLACE",
	"PAAPI_SETTINGS",
	"COMMISSION_SETTINGS",
	"PERSONALIZATION_RECENT_CLICKS",
]

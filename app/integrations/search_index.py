"""Free-text category label -> catalog search index.

``SMART_MAP`` is ordered data; resolution never raises and always returns a
member of ``SEARCH_INDEX_VOCABULARY``.
"""
from __future__ import annotations

WILDCARD_INDEX = "All"

SMART_MAP: dict[str, str] = {
    # Electronics & gadgets
    "Electronics": "Electronics",
    "Mobiles": "Electronics",
    "Tablets": "Electronics",
    "Laptops": "Computers",
    "Computers": "Computers",
    "Cameras": "Electronics",
    "Headphones": "Electronics",
    "Accessories": "Electronics",
    "Smart Home": "Electronics",
    "Wearables": "Electronics",
    "TV": "Electronics",
    "Television": "Electronics",
    "Televisions": "Electronics",
    "Smart Televisions": "Electronics",
    "LED TV": "Electronics",
    "Smart LED TV": "Electronics",
    # Fashion
    "Fashion": "Fashion",
    "Men": "Apparel",
    "Women": "Apparel",
    "Kids": "Apparel",
    "Clothing": "Apparel",
    "Shoes": "Shoes",
    "Watches": "Watches",
    "Jewelry": "Jewelry",
    "Bags": "Apparel",
    # Home & living
    "Home": "HomeAndKitchen",
    "Kitchen": "HomeAndKitchen",
    "Furniture": "Furniture",
    "Decor": "HomeAndKitchen",
    "Appliances": "Appliances",
    "Garden": "GardenAndOutdoor",
    "Tools": "ToolsAndHomeImprovement",
    # Essentials
    "Beauty": "Beauty",
    "Health": "HealthPersonalCare",
    "Personal Care": "HealthPersonalCare",
    "Groceries": "GroceryAndGourmetFood",
    "Baby": "Baby",
    "Pet Supplies": "PetSupplies",
    # Entertainment
    "Books": "Books",
    "Toys": "ToysAndGames",
    "Games": "VideoGames",
    "Video Games": "VideoGames",
    "Music": "Music",
    "Movies": "MoviesAndTV",
    "Sports": "SportsAndOutdoors",
    "Fitness": "SportsAndOutdoors",
    # Auto
    "Automotive": "Automotive",
    "Car Accessories": "Automotive",
    # Others
    "Gift Cards": "GiftCards",
    "Office": "OfficeProducts",
    "Industrial": "Industrial",
}

SEARCH_INDEX_VOCABULARY: frozenset[str] = frozenset(SMART_MAP.values()) | {WILDCARD_INDEX, "Luggage"}

_LOWER_KEYS: dict[str, str] = {key.lower(): key for key in SMART_MAP}
# Stable sort keeps table order among equal lengths.
_KEYS_LONGEST_FIRST: list[str] = sorted(SMART_MAP, key=len, reverse=True)


def resolve_search_index(label: str | None) -> str:
    """Map a human category label to a search index.

    Exact key, then case-insensitive key, then the longest key contained in
    the label, then ``All``.
    """
    if not label:
        return WILDCARD_INDEX

    if label in SMART_MAP:
        return SMART_MAP[label]

    lowered = label.lower()
    key = _LOWER_KEYS.get(lowered)
    if key is not None:
        return SMART_MAP[key]

    for key in _KEYS_LONGEST_FIRST:
        if key.lower() in lowered:
            return SMART_MAP[key]

    return WILDCARD_INDEX


__all__ = ["SMART_MAP", "SEARCH_INDEX_VOCABULARY", "WILDCARD_INDEX", "resolve_search_index"]

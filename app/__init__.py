"""Affiliate storefront backend.

Catalog proxy for the Product Advertising API, click tracking with category
inference, and the agent commission ledger.
"""

__all__: list[str] = []

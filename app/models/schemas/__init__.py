from .base import ResponseBase, Pagination
from .products import ItemsRequest, BrowseNodesRequest, SearchIndexResolution
from .clicks import ClickTrack, ClickRead, ClickWithCommissionRead, CommissionOverride
from .transactions import TransactionRead, TransactionStatusUpdate, TransactionForClick

__all__ = [
    # Base
    "ResponseBase",
    "Pagination",

    # Catalog
    "ItemsRequest",
    "BrowseNodesRequest",
    "SearchIndexResolution",

    # Clicks
    "ClickTrack",
    "ClickRead",
    "ClickWithCommissionRead",
    "CommissionOverride",

    # Ledger
    "TransactionRead",
    "TransactionStatusUpdate",
    "TransactionForClick",
]

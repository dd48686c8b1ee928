from .users import User
from .categories import Category
from .product_clicks import ProductClick
from .transactions import Transaction

__all__ = [
    "User",
    "Category",
    "ProductClick",
    "Transaction",
]

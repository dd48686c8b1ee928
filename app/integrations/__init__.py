"""Outbound integrations: the signed Product Advertising API client."""
from .credentials import Credentials
from .paapi import ProductAdvertisingClient, SearchOptions
from .results import ErrorKind, Failure, RemoteResult, Success
from .search_index import resolve_search_index

__all__ = [
    "Credentials",
    "ProductAdvertisingClient",
    "SearchOptions",
    "ErrorKind",
    "Failure",
    "RemoteResult",
    "Success",
    "resolve_search_index",
]

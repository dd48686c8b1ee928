"""
Product Advertising API 5.0 client.
Signs every request with SigV4, sends it over aiohttp and folds every outcome
(network errors, HTTP errors, HTML error pages, errors embedded in 200
responses) into a ``Success`` / ``Failure`` result.
"""
import asyncio
import json
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import aiohttp

from app.config import PAAPI_SETTINGS
from app.integrations.credentials import Credentials
from app.integrations.results import (
    ErrorKind,
    Failure,
    RemoteResult,
    Success,
    kind_for_remote_code,
    kind_for_status,
)
from app.integrations.signing import build_headers, sign_request
from app.utils import get_logger
from app.utils.time import amz_timestamp, elapsed_ms

logger = get_logger(__name__)

_TITLE_RE = re.compile(r"<title>(.*?)</title>", re.IGNORECASE | re.DOTALL)


@dataclass
class SearchOptions:
    search_index: str = "All"
    item_count: Optional[int] = None
    item_page: Optional[int] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    brand: Optional[str] = None
    resources: Optional[List[str]] = field(default=None)


def _is_html(text: str) -> bool:
    return text.lstrip()[:9].upper() == "<!DOCTYPE"


def _html_title(text: str) -> Optional[str]:
    match = _TITLE_RE.search(text)
    if match:
        title = match.group(1).strip()
        return title or None
    return None


def normalize_response(status: int, text: str) -> RemoteResult:
    """Classify a raw (status, body) pair from the remote API."""
    if _is_html(text):
        kind = kind_for_status(status)
        return Failure(
            message=_html_title(text) or "Catalog API returned an unexpected HTML response",
            code=f"HTTP_{status}",
            http_status=status if status >= 400 else kind.default_status,
            kind=kind,
        )

    try:
        data: Any = json.loads(text) if text and text.strip() else None
    except ValueError:
        data = None

    if status >= 400:
        kind = kind_for_status(status)
        if isinstance(data, dict):
            errors = data.get("Errors") or []
            first = errors[0] if isinstance(errors, list) and errors and isinstance(errors[0], dict) else {}
            return Failure(
                message=str(first.get("Message") or data.get("message") or f"Catalog API request failed with status {status}"),
                code=str(first.get("Code") or f"HTTP_{status}"),
                http_status=status,
                kind=kind,
                detail=data,
            )
        return Failure(
            message=(text or "").strip()[:500] or f"Catalog API request failed with status {status}",
            code=f"HTTP_{status}",
            http_status=status,
            kind=kind,
        )

    if not isinstance(data, dict):
        return Failure(
            message="Catalog API returned a response that is not a JSON object",
            code="InvalidResponse",
            http_status=ErrorKind.INVALID_RESPONSE.default_status,
            kind=ErrorKind.INVALID_RESPONSE,
        )

    errors = data.get("Errors")
    if isinstance(errors, list) and errors:
        first = errors[0] if isinstance(errors[0], dict) else {"Message": str(errors[0])}
        kind = kind_for_remote_code(first.get("Code"))
        return Failure(
            message=str(first.get("Message") or first.get("Code") or "Catalog API reported an error"),
            code=str(first.get("Code") or kind.value),
            http_status=kind.default_status,
            kind=kind,
            detail=data,
        )

    return Success(payload=data)


class ProductAdvertisingClient:
    """Signed client for SearchItems, GetItems and GetBrowseNodes.

    Credentials are injected; build them with ``Credentials.from_env()`` at
    startup and hand fakes in tests.
    """

    def __init__(self, credentials: Credentials, timeout: Optional[float] = None):
        self.credentials = credentials
        self.timeout = float(timeout if timeout is not None else PAAPI_SETTINGS["timeout_seconds"])  # type: ignore[arg-type]
        self.partner_type = str(PAAPI_SETTINGS["partner_type"])
        logger.info(
            "Catalog client initialized",
            marketplace=credentials.marketplace,
            region=credentials.region,
            base_url=credentials.base_url,
            has_credentials=credentials.is_complete,
        )

    def _base_payload(self) -> Dict[str, Any]:
        return {
            "PartnerTag": self.credentials.partner_tag,
            "PartnerType": self.partner_type,
            "Marketplace": self.credentials.marketplace,
        }

    async def search_items(self, keywords: str, options: Optional[SearchOptions] = None) -> RemoteResult:
        options = options or SearchOptions()
        payload: Dict[str, Any] = {
            "Keywords": keywords,
            "SearchIndex": options.search_index or "All",
            "ItemCount": int(options.item_count or PAAPI_SETTINGS["default_item_count"]),  # type: ignore[call-overload]
            **self._base_payload(),
            "Resources": options.resources or list(PAAPI_SETTINGS["search_resources"]),  # type: ignore[call-overload]
        }
        if options.item_page:
            max_page = int(PAAPI_SETTINGS["max_item_page"])  # type: ignore[call-overload]
            payload["ItemPage"] = min(max(int(options.item_page), 1), max_page)
        if options.min_price is not None:
            payload["MinPrice"] = int(options.min_price)
        if options.max_price is not None:
            payload["MaxPrice"] = int(options.max_price)
        if options.brand:
            payload["Brand"] = options.brand

        logger.debug("SearchItems payload built", keywords=keywords, search_index=payload["SearchIndex"])
        return await self._make_request("SearchItems", payload)

    async def get_items(
        self,
        item_ids: Union[str, Sequence[str]],
        resources: Optional[List[str]] = None,
    ) -> RemoteResult:
        ids = [item_ids] if isinstance(item_ids, str) else list(item_ids)
        payload = {
            "ItemIds": ids,
            "ItemIdType": "ASIN",
            **self._base_payload(),
            "Resources": resources or list(PAAPI_SETTINGS["get_items_resources"]),  # type: ignore[call-overload]
        }
        return await self._make_request("GetItems", payload)

    async def get_browse_nodes(
        self,
        browse_node_ids: Union[str, Sequence[str]],
        resources: Optional[List[str]] = None,
    ) -> RemoteResult:
        ids = [browse_node_ids] if isinstance(browse_node_ids, str) else list(browse_node_ids)
        payload = {
            "BrowseNodeIds": ids,
            **self._base_payload(),
            "Resources": resources or list(PAAPI_SETTINGS["browse_node_resources"]),  # type: ignore[call-overload]
        }
        return await self._make_request("GetBrowseNodes", payload)

    async def _send(self, url: str, headers: Dict[str, str], body: str) -> Tuple[int, str]:
        """POST the signed body and return (status, text). Overridden in tests."""
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(url, data=body.encode("utf-8"), headers=headers) as response:
                return response.status, await response.text()

    async def _make_request(self, operation: str, payload: Dict[str, Any]) -> RemoteResult:
        missing = self.credentials.missing()
        if missing:
            logger.error("Catalog API credentials not configured", operation=operation, missing=missing)
            return Failure(
                message=f"Catalog API credentials not configured. Missing: {', '.join(missing)}",
                code="MissingCredentials",
                http_status=ErrorKind.MISSING_CREDENTIALS.default_status,
                kind=ErrorKind.MISSING_CREDENTIALS,
            )

        start_time = time.time()
        operation_path = f"/{operation.lower()}"
        url = f"{self.credentials.base_url.rstrip('/')}{operation_path}"

        try:
            body = json.dumps(payload, separators=(",", ":"))
            signed = sign_request(
                "POST",
                f"{self.credentials.base_path}{operation_path}",
                build_headers(operation, amz_timestamp()),
                body,
                self.credentials.host,
                self.credentials,
            )
            logger.info(
                "Catalog API request",
                operation=operation,
                url=url,
                marketplace=self.credentials.marketplace,
                region=self.credentials.region,
            )
            status, text = await self._send(url, signed.headers, signed.body)
        except asyncio.TimeoutError:
            logger.error("Catalog API request timed out", operation=operation, timeout=self.timeout)
            return Failure(
                message="Request to the catalog API timed out. Please try again later.",
                code="TimeoutError",
                http_status=504,
                kind=ErrorKind.TIMEOUT_ERROR,
            )
        except aiohttp.ClientError as e:
            logger.error("Catalog API network error", operation=operation, error=str(e))
            return Failure(
                message="Unable to reach the catalog API. Please check your network connection.",
                code="NetworkError",
                http_status=503,
                kind=ErrorKind.NETWORK_ERROR,
                detail={"error": str(e)},
            )
        except Exception as e:
            logger.error("Catalog API request failed", operation=operation, error=str(e), exc_info=True)
            return Failure(
                message=str(e) or "Unknown error occurred while calling the catalog API",
                code="RequestError",
                http_status=500,
                kind=ErrorKind.UNKNOWN_ERROR,
            )

        result = normalize_response(status, text)
        duration_ms = elapsed_ms(start_time)
        if isinstance(result, Success):
            logger.info("Catalog API response received", operation=operation, status_code=status, duration_ms=round(duration_ms, 2))
        else:
            logger.warning(
                "Catalog API returned failure",
                operation=operation,
                status_code=status,
                error_code=result.code,
                error_kind=result.kind.value,
                duration_ms=round(duration_ms, 2),
            )
        return result


__all__ = ["ProductAdvertisingClient", "SearchOptions", "normalize_response"]

"""
Product catalog endpoints: search, detail, multi-item lookup and browse nodes.
All remote calls go through the signed catalog client; its failures are
returned as a uniform error envelope rather than raised.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request
from sqlalchemy.orm import Session
import time
from app.api.deps import get_db, get_catalog_client, get_current_user
from app.api.errors import failure_response
from app.config import PERSONALIZATION_RECENT_CLICKS
from app.integrations import ProductAdvertisingClient, SearchOptions, resolve_search_index
from app.integrations.results import ErrorKind, Failure
from app.integrations.responses import first_item, items_of, parse_search_result
from app.models.db import User
from app.models.schemas import ResponseBase, ItemsRequest, BrowseNodesRequest, SearchIndexResolution
from app.services.commission_engine import is_valid_asin, recent_clicks
from app.utils import get_logger, log_performance

router = APIRouter()
logger = get_logger(__name__)

def _invalid_shape(message: str) -> Failure:
    return Failure(
        message=message,
        code="InvalidResponse",
        http_status=ErrorKind.INVALID_RESPONSE.default_status,
        kind=ErrorKind.INVALID_RESPONSE,
    )

async def _search(
    client: ProductAdvertisingClient,
    keywords: str,
    options: SearchOptions,
    request_id: str,
    operation: str,
    extra: dict,
):
    start_time = time.time()
    result = await client.search_items(keywords, options)
    if isinstance(result, Failure):
        return failure_response(result, request_id)

    page = parse_search_result(result.payload)
    if page is None:
        logger.warning("Search response missing SearchResult", keywords=keywords, request_id=request_id)
        return failure_response(_invalid_shape("Invalid response from catalog API: SearchResult not found"), request_id)

    log_performance(
        operation=operation,
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"result_count": len(page.items), "search_index": options.search_index},
    )
    return ResponseBase(
        message="Products retrieved successfully",
        data={
            **extra,
            "keywords": keywords,
            "search_index": options.search_index,
            "total_count": page.total_count,
            "items": page.items,
        },
    )

@router.get(
    "/",
    response_model=ResponseBase,
    summary="Search products",
    description="Keyword search against the catalog API with optional index, price and brand filters"
)
async def search_products(
    request: Request,
    keywords: str = Query(..., min_length=1),
    search_index: str = Query("All", alias="searchIndex"),
    item_count: int = Query(10, ge=1, le=10, alias="itemCount"),
    page: int = Query(1, ge=1, le=10),
    min_price: Optional[int] = Query(None, ge=0, alias="minPrice"),
    max_price: Optional[int] = Query(None, ge=0, alias="maxPrice"),
    brand: Optional[str] = None,
    client: ProductAdvertisingClient = Depends(get_catalog_client),
):
    request_id = request.headers.get("X-Request-ID", "unknown")
    logger.info("Product search started", keywords=keywords, search_index=search_index, page=page, request_id=request_id)

    options = SearchOptions(
        search_index=search_index,
        item_count=item_count,
        item_page=page,
        min_price=min_price,
        max_price=max_price,
        brand=brand,
    )
    return await _search(client, keywords, options, request_id, "search_products", {"page": page})

@router.get(
    "/category/{category}",
    response_model=ResponseBase,
    summary="Search products in a category",
    description="Free-text category label is mapped onto a catalog search index before searching"
)
async def products_by_category(
    category: str,
    request: Request,
    keywords: Optional[str] = None,
    item_count: int = Query(10, ge=1, le=10, alias="itemCount"),
    min_price: Optional[int] = Query(None, ge=0, alias="minPrice"),
    max_price: Optional[int] = Query(None, ge=0, alias="maxPrice"),
    brand: Optional[str] = None,
    client: ProductAdvertisingClient = Depends(get_catalog_client),
):
    request_id = request.headers.get("X-Request-ID", "unknown")
    search_index = resolve_search_index(category)
    logger.info("Category search started", category=category, search_index=search_index, request_id=request_id)

    options = SearchOptions(
        search_index=search_index,
        item_count=item_count,
        min_price=min_price,
        max_price=max_price,
        brand=brand,
    )
    return await _search(
        client, keywords or category, options, request_id, "products_by_category", {"category": category}
    )

@router.get(
    "/personalized",
    response_model=ResponseBase,
    summary="Personalized products",
    description="Search seeded from the caller's most recent product clicks"
)
async def personalized_products(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: ProductAdvertisingClient = Depends(get_catalog_client),
):
    request_id = request.headers.get("X-Request-ID", "unknown")
    clicks = recent_clicks(db, current_user.id, limit=PERSONALIZATION_RECENT_CLICKS)

    keywords = "Recommended"
    search_index = "All"
    if clicks:
        latest = clicks[0]
        search_index = resolve_search_index(latest.category)
        keywords = " ".join(latest.product_name.split()[:3]) or "Recommended"

    logger.info(
        "Personalized search",
        user_id=current_user.id,
        history_size=len(clicks),
        keywords=keywords,
        search_index=search_index,
        request_id=request_id
    )
    return await _search(
        client,
        keywords,
        SearchOptions(search_index=search_index, item_count=10),
        request_id,
        "personalized_products",
        {"based_on_clicks": len(clicks)},
    )

@router.get(
    "/search-index/resolve",
    response_model=SearchIndexResolution,
    summary="Resolve search index",
    description="Map a free-text category label onto the catalog's search-index vocabulary"
)
async def resolve_index(category: str = Query("", max_length=200)) -> SearchIndexResolution:
    return SearchIndexResolution(category=category, search_index=resolve_search_index(category))

@router.post(
    "/items",
    response_model=ResponseBase,
    summary="Get multiple products",
    description="Look up to ten ASINs in one catalog call"
)
async def get_products_by_asins(
    payload: ItemsRequest,
    request: Request,
    client: ProductAdvertisingClient = Depends(get_catalog_client),
):
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID", "unknown")
    logger.info("Multi-item lookup", item_count=len(payload.item_ids), request_id=request_id)

    result = await client.get_items(payload.item_ids)
    if isinstance(result, Failure):
        return failure_response(result, request_id)

    items = items_of(result.payload)
    if items is None:
        return failure_response(_invalid_shape("Invalid response from catalog API: ItemsResult.Items not found"), request_id)

    log_performance(
        operation="get_products_by_asins",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"requested": len(payload.item_ids), "returned": len(items)}
    )
    return ResponseBase(
        message="Items retrieved successfully",
        data={"items": items, "errors": result.payload.get("Errors") or []},
    )

@router.post(
    "/browse-nodes",
    response_model=ResponseBase,
    summary="Get browse nodes",
    description="Category hierarchy metadata (ancestors and children) for browse node ids"
)
async def get_browse_nodes(
    payload: BrowseNodesRequest,
    request: Request,
    client: ProductAdvertisingClient = Depends(get_catalog_client),
):
    request_id = request.headers.get("X-Request-ID", "unknown")
    result = await client.get_browse_nodes(payload.browse_node_ids)
    if isinstance(result, Failure):
        return failure_response(result, request_id)

    nodes = (result.payload.get("BrowseNodesResult") or {}).get("BrowseNodes") or []
    return ResponseBase(message="Browse nodes retrieved successfully", data={"browse_nodes": nodes})

@router.get(
    "/{asin}",
    response_model=ResponseBase,
    summary="Get product details",
    description="Single item detail by ASIN"
)
async def get_product(
    asin: str,
    request: Request,
    client: ProductAdvertisingClient = Depends(get_catalog_client),
):
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID", "unknown")

    if not is_valid_asin(asin):
        logger.warning("Invalid ASIN requested", asin=asin, request_id=request_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid ASIN format. ASIN must be 10 alphanumeric characters"
        )

    result = await client.get_items(asin)
    if isinstance(result, Failure):
        return failure_response(result, request_id)

    item = first_item(result.payload)
    if item is None:
        logger.info("Product not found in catalog", asin=asin, request_id=request_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product {asin} not found"
        )

    log_performance(
        operation="get_product",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"asin": asin}
    )
    return ResponseBase(message="Product retrieved successfully", data={"item": item})

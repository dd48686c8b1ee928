"""
API v1 router initialization and setup.
"""
from fastapi import APIRouter
from .endpoints import products, analytics, admin

api_router = APIRouter()

api_router.include_router(
    products.router,
    prefix="/products",
    tags=["products"]
)

api_router.include_router(
    analytics.router,
    prefix="/analytics",
    tags=["analytics"]
)

api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["admin"]
)

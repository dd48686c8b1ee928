"""
Pydantic schemas for click tracking and commission overrides.
"""
from datetime import datetime
from typing import Optional, Union
from pydantic import BaseModel, Field, ConfigDict
from ..db.enums import MatchSource

class ClickTrack(BaseModel):
    """Click payload sent by the storefront when a shopper opens a product.

    ``price`` may be a number or a display string such as ``"₹1,299.00"``.
    Required-field checks happen in the engine so guests get a clear message.
    """
    asin: Optional[str] = None
    product_name: Optional[str] = Field(None, alias="productName")
    category: Optional[str] = None
    price: Union[float, str, None] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    product_url: Optional[str] = Field(None, alias="productUrl")
    referral_code: Optional[str] = Field(None, alias="referralCode")

    model_config = ConfigDict(populate_by_name=True, json_schema_extra={
        "example": {
            "asin": "B0C1234567",
            "productName": "Samsung 55-inch Smart LED TV",
            "category": "Televisions",
            "price": "₹42,990",
            "referralCode": "AGENT42",
        }
    })

class ClickRead(BaseModel):
    id: int
    user_id: Optional[int]
    asin: str
    product_name: str
    input_category: Optional[str]
    category: str
    price: float
    image_url: Optional[str]
    product_url: Optional[str]
    agent_id: Optional[int]
    commission_rate: float
    matched_by: MatchSource
    created_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

class ClickWithCommissionRead(ClickRead):
    commission_status: str = Field(description="pending, completed, failed or none")
    commission_amount: float = 0.0
    transaction_id: Optional[int] = None

class CommissionOverride(BaseModel):
    """Admin override; ``commission_rate`` is a percentage (5 means 5%)."""
    commission_rate: Union[float, str] = Field(alias="commissionRate")

    model_config = ConfigDict(populate_by_name=True)

"""
Pydantic schemas for commission ledger transactions.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from ..db.enums import TransactionType, TransactionStatus, ReferenceModel

class TransactionRead(BaseModel):
    id: int
    user_id: int
    type: TransactionType
    amount: float
    status: TransactionStatus
    description: Optional[str]
    reference_id: Optional[int]
    reference_model: Optional[ReferenceModel]
    notes: Optional[str] = None
    created_at: Optional[datetime]
    processed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class TransactionStatusUpdate(BaseModel):
    status: TransactionStatus
    notes: Optional[str] = Field(None, max_length=1000)

class TransactionForClick(BaseModel):
    click_id: int = Field(gt=0, alias="clickId")

    model_config = ConfigDict(populate_by_name=True)

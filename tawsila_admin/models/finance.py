# tawsila_admin/models/finance.py
from typing import Literal, Optional

from pydantic import BaseModel, Field


class TransactionFilters(BaseModel):
    """Plain query parameters accepted by the transaction list endpoints"""
    page: Optional[int] = None
    per_page: Optional[int] = None
    type: Optional[Literal["credit", "debit"]] = None
    category: Optional[str] = None
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    wallet_id: Optional[int] = None


class CreateSettlementRequest(BaseModel):
    period_from: str  # YYYY-MM-DD
    period_to: str  # YYYY-MM-DD, the platform refuses future dates
    notes: Optional[str] = Field(default=None, max_length=1000)


class CreateAdjustmentRequest(BaseModel):
    type: Literal["credit", "debit"]
    amount: float = Field(gt=0)
    description: str = Field(min_length=1)

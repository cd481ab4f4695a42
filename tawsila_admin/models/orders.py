# tawsila_admin/models/orders.py
from typing import List, Optional

from pydantic import BaseModel, Field


class CreateOrderCustomer(BaseModel):
    name: str = Field(min_length=1)
    mobile: str = Field(min_length=1)
    email: Optional[str] = None
    address: str = Field(min_length=1)
    address_notes: Optional[str] = None
    governorate_id: Optional[int] = None
    city_id: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class CreateOrderItem(BaseModel):
    product_name: str = Field(min_length=1)
    product_sku: Optional[str] = None
    product_description: Optional[str] = None
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)
    weight: Optional[float] = None
    notes: Optional[str] = None


class CreateOrderRequest(BaseModel):
    customer: CreateOrderCustomer
    items: List[CreateOrderItem] = Field(min_length=1)
    payment_method: Optional[str] = None
    vendor_notes: Optional[str] = None


class AcceptOrderRequest(BaseModel):
    inventory_id: int


class RejectOrderRequest(BaseModel):
    reason: Optional[str] = None


class AssignAgentRequest(BaseModel):
    agent_id: int
    notes: Optional[str] = None


class ImportRow(BaseModel):
    """One previewed import row as edited in the UI"""
    row_id: str
    order_ref: str = ""
    customer_name: str = ""
    customer_mobile: str = ""
    customer_address: str = ""
    governorate: str = ""
    city: str = ""
    product_name: str = ""
    quantity: int = 1
    unit_price: float = 0.0
    payment_method: str = "cash"
    vendor_notes: str = ""
    governorate_id: Optional[int] = None
    city_id: Optional[int] = None


class ImportOrdersRequest(BaseModel):
    rows: List[ImportRow] = Field(min_length=1)
    approve_duplicates: bool = False

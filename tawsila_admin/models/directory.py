# tawsila_admin/models/directory.py
from typing import Literal, Optional

from pydantic import BaseModel, Field


class CreateVendorRequest(BaseModel):
    name_en: str = Field(min_length=1)
    name_ar: str = Field(min_length=1)
    email: Optional[str] = None
    mobile: str = Field(min_length=1)
    contact_person: str
    description_en: str = ""
    description_ar: str = ""
    address: str
    governorate_id: int
    city_id: int
    latitude: str
    longitude: str
    commercial_registration: Optional[str] = None
    tax_number: Optional[str] = None
    status: Literal["active", "inactive"] = "active"
    secret_key: str


class UpdateVendorRequest(BaseModel):
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    contact_person: Optional[str] = None
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    address: Optional[str] = None
    governorate_id: Optional[int] = None
    city_id: Optional[int] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    commercial_registration: Optional[str] = None
    tax_number: Optional[str] = None
    status: Optional[Literal["active", "inactive"]] = None
    secret_key: Optional[str] = None


class CreateInventoryRequest(BaseModel):
    name_en: str = Field(min_length=1)
    name_ar: str = Field(min_length=1)
    phone: str
    address: str
    governorate_id: int
    city_id: int
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: Optional[str] = None


class UpdateInventoryRequest(BaseModel):
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    governorate_id: Optional[int] = None
    city_id: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: Optional[str] = None

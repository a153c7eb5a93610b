"""
Wire models for the HTTP surface. Field names follow the JSON the form posts.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Transaction request / response
# ---------------------------------------------------------------------------

class ItemIn(_Wire):
    name: str = ""
    quantity: Optional[Decimal] = Field(None, description="gallons or liters")
    price: Optional[Decimal] = Field(None, description="unit price")
    pump: Optional[int] = None
    qty: Optional[int] = Field(None, description="discrete multiplier, or dollars for a cash advance")


class StoreDataIn(_Wire):
    store_code: str = Field("", alias="storeCode")
    address: str = ""
    city_state: str = Field("", alias="cityState")
    phone: str = ""


class GenerateReceiptRequest(_Wire):
    company_id: Optional[int] = Field(None, alias="companyId")
    company_name: Optional[str] = Field(None, alias="companyName")
    company_address: Optional[str] = Field(None, alias="companyAddress")
    design_id: Optional[int] = Field(None, alias="designId")
    store_id: Optional[int] = Field(None, alias="storeId")
    country: Optional[str] = None
    payment_method: Optional[str] = Field(None, alias="paymentMethod")
    items: list[ItemIn] = Field(default_factory=list)
    vehicle_id: Optional[str] = Field(None, alias="vehicleId")
    dl_number: Optional[str] = Field(None, alias="dlNumber")
    driver_company_name: Optional[str] = Field(None, alias="driverCompanyName")
    check_number: Optional[str] = Field(None, alias="checkNumber")
    check_number_confirm: Optional[str] = Field(None, alias="checkNumberConfirm")
    driver_first_name: Optional[str] = Field(None, alias="driverFirstName")
    driver_last_name: Optional[str] = Field(None, alias="driverLastName")
    card_last4: Optional[str] = Field(None, alias="cardLast4")
    card_entry_method: Optional[str] = Field(None, alias="cardEntryMethod")
    copy_type: Optional[str] = Field(None, alias="copyType")
    include_signature: bool = Field(False, alias="includeSignature")
    date: Optional[datetime] = None
    store_data: Optional[StoreDataIn] = Field(None, alias="storeData")


class GenerateReceiptResponse(_Wire):
    success: bool = True
    receipt_number: str = Field(..., serialization_alias="receiptNumber")
    file_name: str = Field(..., serialization_alias="fileName")
    download_url: str = Field(..., serialization_alias="downloadUrl")
    design: str
    template: str = ""


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class CompanyIn(_Wire):
    name: str
    address: str = ""
    email: str = ""
    phone: str = ""
    country: str
    design_id: int = Field(0, alias="designId")


class CompanyUpdate(_Wire):
    name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    design_id: Optional[int] = Field(None, alias="designId")


class CompanyOut(_Wire):
    id: int
    name: str
    address: str
    email: str
    phone: str
    country: str
    design_id: int = Field(..., serialization_alias="designId")
    design_name: str = Field(..., serialization_alias="designName")
    business_type: str = Field(..., serialization_alias="businessType")
    merchant_key: str = Field(..., serialization_alias="merchantKey")


class StoreOut(_Wire):
    id: int
    company_id: int = Field(..., serialization_alias="companyId")
    store_code: str = Field(..., serialization_alias="storeCode")
    address: str
    city_state: str = Field(..., serialization_alias="cityState")
    phone: str
    items: str = ""


class FieldProfileOut(_Wire):
    merchant_key: str = Field(..., serialization_alias="merchantKey")
    jurisdiction: str
    payment_method: str = Field(..., serialization_alias="paymentMethod")
    template: str
    tax_convention: str = Field(..., serialization_alias="taxConvention")
    fields: dict[str, str]
    labels: dict[str, str]
    extended: list[str]

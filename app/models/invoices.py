# app/models/invoices.py

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.errors import ValidationError


# ---- Inbound ----

class LineItemIn(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: Optional[int] = None
    description: str = Field(min_length=1)
    # matches the scale of the billings.qty / billings.rate columns
    qty: Decimal = Field(decimal_places=4)
    rate: Decimal = Field(decimal_places=4)
    unit: str = Field(min_length=1)


class CreateInvoiceRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    title: str = Field(min_length=1)
    customer_name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    billing_date: Union[date, datetime, str]
    items: List[LineItemIn] = Field(min_length=1)
    tax: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("tax", "total_tax", "gst"),
    )
    packaging: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("packaging", "packing"),
    )

    @field_validator("tax", "packaging", mode="before")
    @classmethod
    def _blank_is_zero(cls, value):
        if value is None or value == "":
            return Decimal("0")
        return value

    @field_validator("billing_date", mode="before")
    @classmethod
    def _billing_date_present(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("billing_date is required")
        return value


class AmendInvoiceRequest(CreateInvoiceRequest):
    items_to_delete: List[int] = Field(
        default_factory=list,
        validation_alias=AliasChoices("items_to_delete", "billing_to_delete"),
    )
    # Accepted for compatibility; the stored value is always recomputed
    grand_total: Optional[Decimal] = None

    @field_validator("items_to_delete", mode="before")
    @classmethod
    def _deletions_list(cls, value):
        if value is None or not isinstance(value, list):
            return []
        return value


class SearchFilter(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    customer_name: Optional[str] = None
    start_date: Optional[Union[date, datetime, str]] = None
    end_date: Optional[Union[date, datetime, str]] = None

    @field_validator("customer_name", "start_date", "end_date", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


# ---- Outbound ----

# Decimal in Python, a plain JSON number on the wire
Number = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CustomerOut(BaseModel):
    id: Optional[int] = None
    title: Optional[str] = None
    name: Optional[str] = None
    location: Optional[str] = None


class BillingDetailOut(BaseModel):
    id: int
    grand_total: Number
    tax: Number
    packaging: Number
    total: Number
    billing_date: date
    created_at: datetime
    updated_at: datetime


class LineItemOut(BaseModel):
    id: int
    description: str
    qty: Number
    rate: Number
    amount: Number
    unit: str
    created_at: datetime
    updated_at: datetime


class InvoiceView(BaseModel):
    customer: CustomerOut
    billing_detail: BillingDetailOut
    billings: List[LineItemOut]


class InvoiceListOut(BaseModel):
    bills: List[InvoiceView]


class SearchResult(BaseModel):
    total_grand_total: Number = Field(serialization_alias="totalGrandTotal")
    invoices: List[InvoiceView] = Field(serialization_alias="bills")


class WriteOut(BaseModel):
    message: str
    id: int


def parse_payload(model, data):
    """Validate ``data`` into ``model``, raising the billing ValidationError on failure."""
    if isinstance(data, model):
        return data
    if data is None:
        data = {}
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"]) or "body"
            problems.append(f"{location}: {error['msg']}")
        raise ValidationError("; ".join(problems)) from exc

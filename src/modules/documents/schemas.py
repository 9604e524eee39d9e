"""Schemas for the documents module."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from src.core.documents.types import DocumentType
from src.modules.documents.models import DocumentStatus
from src.shared.schemas.base import BaseSchema, MoneyAmount


class LineItemInput(BaseSchema):
    """Line item as supplied on create/update (replaces the whole set)."""

    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(..., ge=0, max_digits=15, decimal_places=3, allow_inf_nan=False)
    unit: str | None = Field(None, max_length=50)
    unit_price: Decimal = Field(..., ge=0, max_digits=15, decimal_places=4, allow_inf_nan=False)


class DocumentCreate(BaseSchema):
    """Schema for creating a document."""

    doc_type: DocumentType
    project_id: int
    reference_id: int | None = None
    vat_rate: Decimal | None = Field(None, ge=0, le=1, allow_inf_nan=False)
    wht_rate: Decimal | None = Field(None, ge=0, le=1, allow_inf_nan=False)
    due_date: date | None = None
    notes: str | None = None
    vendor_name: str | None = Field(None, max_length=300)
    vendor_tax_id: str | None = Field(None, max_length=20)
    line_items: list[LineItemInput] = Field(default_factory=list)


class DocumentUpdate(BaseSchema):
    """Schema for updating a document. doc_type and doc_number never change."""

    vat_rate: Decimal | None = Field(None, ge=0, le=1, allow_inf_nan=False)
    wht_rate: Decimal | None = Field(None, ge=0, le=1, allow_inf_nan=False)
    status: DocumentStatus | None = None
    due_date: date | None = None
    notes: str | None = None
    vendor_name: str | None = Field(None, max_length=300)
    vendor_tax_id: str | None = Field(None, max_length=20)
    line_items: list[LineItemInput] | None = None


class LineItemResponse(BaseSchema):
    """Schema for line item response."""

    id: int
    description: str
    quantity: Decimal
    unit: str
    unit_price: Decimal
    line_total: MoneyAmount


class DocumentResponse(BaseSchema):
    """Schema for document response."""

    id: int
    doc_type: str
    doc_number: str
    project_id: int
    reference_id: int | None
    subtotal: MoneyAmount
    vat_rate: Decimal
    vat_amount: MoneyAmount
    wht_rate: Decimal
    wht_amount: MoneyAmount
    net_total: MoneyAmount
    status: str
    due_date: date | None
    notes: str | None
    vendor_name: str | None
    vendor_tax_id: str | None
    created_by_id: int
    created_at: datetime
    updated_at: datetime
    line_items: list[LineItemResponse] = Field(default_factory=list)


class DocumentFilters(BaseSchema):
    """Filters for listing documents."""

    doc_type: DocumentType | None = None
    project_id: int | None = None
    status: DocumentStatus | None = None
    date_from: date | None = None
    date_to: date | None = None
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1, le=100)

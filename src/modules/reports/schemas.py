"""Schemas for tax and dashboard reports."""

from datetime import date, datetime
from enum import StrEnum

from pydantic import Field

from src.shared.schemas.base import BaseSchema, MoneyAmount


class WhtForm(StrEnum):
    """Revenue Department withholding forms."""

    PND3 = "PND3"
    PND53 = "PND53"
    FIFTY_BIS = "50BIS"


class TaxReportRow(BaseSchema):
    """One document line in a VAT or WHT report."""

    id: int
    doc_type: str
    doc_number: str
    project_id: int
    project_name: str | None = None
    vendor_name: str | None = None
    vendor_tax_id: str | None = None
    status: str
    subtotal: MoneyAmount
    vat_amount: MoneyAmount
    wht_amount: MoneyAmount
    net_total: MoneyAmount
    created_at: datetime


class VatReport(BaseSchema):
    """VAT sales or purchase register for a period."""

    period: str | None = None
    documents: list[TaxReportRow] = Field(default_factory=list)
    total_subtotal: MoneyAmount
    total_vat: MoneyAmount


class WhtReport(BaseSchema):
    """Withholding tax register for a period."""

    period: str | None = None
    report_type: WhtForm = WhtForm.PND3
    documents: list[TaxReportRow] = Field(default_factory=list)
    total_subtotal: MoneyAmount
    total_wht: MoneyAmount


class CashFlowMonth(BaseSchema):
    month: str
    cash_in: MoneyAmount
    cash_out: MoneyAmount


class ExpenseByCategory(BaseSchema):
    category: str
    total: MoneyAmount


class RecentActivityRow(BaseSchema):
    id: int
    doc_type: str
    doc_number: str
    net_total: MoneyAmount
    status: str
    project_id: int
    created_at: datetime


class SummaryReport(BaseSchema):
    """Dashboard totals."""

    as_at_date: date
    outstanding_receivables: MoneyAmount
    outstanding_payables: MoneyAmount
    monthly_income: MoneyAmount
    monthly_expense: MoneyAmount
    monthly_profit: MoneyAmount
    vat_payable: MoneyAmount
    wht_payable: MoneyAmount
    overdue_count: int
    cash_flow: list[CashFlowMonth] = Field(default_factory=list)
    expense_by_category: list[ExpenseByCategory] = Field(default_factory=list)
    recent_activity: list[RecentActivityRow] = Field(default_factory=list)

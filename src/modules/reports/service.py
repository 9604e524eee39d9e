"""Service for tax registers and dashboard summary."""

import re
from collections import defaultdict
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.models import User
from src.core.documents.types import (
    EXPENSE_REPORT_TYPES,
    PURCHASE_TYPES,
    RECEIVABLE_TYPES,
    SALES_TYPES,
    DocumentType,
)
from src.core.exceptions import ValidationError
from src.modules.documents.models import Document, DocumentStatus
from src.modules.projects.access import assigned_project_ids, ensure_project_access
from src.modules.projects.models import Project
from src.modules.reports.schemas import (
    CashFlowMonth,
    ExpenseByCategory,
    RecentActivityRow,
    SummaryReport,
    TaxReportRow,
    VatReport,
    WhtForm,
    WhtReport,
)
from src.shared.utils.money import ZERO, round_money

PERIOD_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")
CLOSED_STATUSES = (DocumentStatus.PAID.value, DocumentStatus.CANCELLED.value)
CASH_FLOW_MONTHS = 12
RECENT_ACTIVITY_LIMIT = 10


def _values(types: tuple[DocumentType, ...]) -> list[str]:
    return [t.value for t in types]


def _month_start(year: int, month: int) -> datetime:
    return datetime(year, month, 1, tzinfo=timezone.utc)


def _add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def parse_period(period: str) -> tuple[datetime, datetime]:
    """'2025-03' -> [2025-03-01, 2025-04-01)."""
    match = PERIOD_RE.match(period)
    if not match:
        raise ValidationError("Period must be in YYYY-MM format", field="period")
    year, month = int(match.group(1)), int(match.group(2))
    return _month_start(year, month), _month_start(*_add_months(year, month, 1))


class ReportsService:
    """Build report data scoped to the caller's projects."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _scoped(
        self, query: Select, user: User, project_id: int | None = None
    ) -> Select:
        if project_id is not None:
            await ensure_project_access(self.db, user, project_id)
            return query.where(Document.project_id == project_id)
        if not user.is_admin:
            return query.where(Document.project_id.in_(assigned_project_ids(user)))
        return query

    async def _sum(self, column, user: User, project_id: int | None, *conditions) -> Decimal:
        query = select(func.coalesce(func.sum(column), 0)).where(*conditions)
        query = await self._scoped(query, user, project_id)
        value = await self.db.scalar(query)
        return round_money(value or 0)

    async def _register(
        self,
        user: User,
        period: str | None,
        *conditions,
    ) -> list[TaxReportRow]:
        query = (
            select(Document, Project.name)
            .outerjoin(Project, Project.id == Document.project_id)
            .where(Document.status != DocumentStatus.CANCELLED.value, *conditions)
        )
        if period:
            start, end = parse_period(period)
            query = query.where(Document.created_at >= start, Document.created_at < end)
        query = await self._scoped(query, user)
        query = query.order_by(Document.created_at, Document.id)

        result = await self.db.execute(query)
        return [
            TaxReportRow(
                id=document.id,
                doc_type=document.doc_type,
                doc_number=document.doc_number,
                project_id=document.project_id,
                project_name=project_name,
                vendor_name=document.vendor_name,
                vendor_tax_id=document.vendor_tax_id,
                status=document.status,
                subtotal=document.subtotal,
                vat_amount=document.vat_amount,
                wht_amount=document.wht_amount,
                net_total=document.net_total,
                created_at=document.created_at,
            )
            for document, project_name in result.all()
        ]

    async def vat_sales(self, user: User, period: str | None = None) -> VatReport:
        """Output VAT: invoices, tax invoices and receipts."""
        rows = await self._register(
            user, period, Document.doc_type.in_(_values(SALES_TYPES))
        )
        return VatReport(
            period=period,
            documents=rows,
            total_subtotal=round_money(sum((r.subtotal for r in rows), ZERO)),
            total_vat=round_money(sum((r.vat_amount for r in rows), ZERO)),
        )

    async def vat_purchase(self, user: User, period: str | None = None) -> VatReport:
        """Input VAT: purchase orders and vendor payments."""
        rows = await self._register(
            user, period, Document.doc_type.in_(_values(PURCHASE_TYPES))
        )
        return VatReport(
            period=period,
            documents=rows,
            total_subtotal=round_money(sum((r.subtotal for r in rows), ZERO)),
            total_vat=round_money(sum((r.vat_amount for r in rows), ZERO)),
        )

    async def wht(
        self, user: User, period: str | None = None, form: WhtForm = WhtForm.PND3
    ) -> WhtReport:
        """Every document with withholding tax, for PND3/PND53/50BIS filing."""
        rows = await self._register(user, period, Document.wht_amount > 0)
        return WhtReport(
            period=period,
            report_type=form,
            documents=rows,
            total_subtotal=round_money(sum((r.subtotal for r in rows), ZERO)),
            total_wht=round_money(sum((r.wht_amount for r in rows), ZERO)),
        )

    async def summary(
        self,
        user: User,
        project_id: int | None = None,
        as_at_date: date | None = None,
    ) -> SummaryReport:
        """
        Dashboard summary.

        Receivables/payables are open (not PAID or CANCELLED) documents.
        Monthly income/expense count PAID documents created in the month of
        as_at_date. Cash flow covers the last 12 months including the current one.
        """
        as_at = as_at_date or datetime.now(timezone.utc).date()
        month_start = _month_start(as_at.year, as_at.month)
        month_end = _month_start(*_add_months(as_at.year, as_at.month, 1))
        not_cancelled = Document.status != DocumentStatus.CANCELLED.value
        is_open = Document.status.not_in(CLOSED_STATUSES)
        in_month = (Document.created_at >= month_start, Document.created_at < month_end)
        paid = Document.status == DocumentStatus.PAID.value

        receivables = await self._sum(
            Document.net_total, user, project_id,
            Document.doc_type.in_(_values(RECEIVABLE_TYPES)), is_open,
        )
        payables = await self._sum(
            Document.net_total, user, project_id,
            Document.doc_type.in_(_values(PURCHASE_TYPES)), is_open,
        )
        monthly_income = await self._sum(
            Document.net_total, user, project_id,
            Document.doc_type.in_(_values(SALES_TYPES)), paid, *in_month,
        )
        monthly_expense = await self._sum(
            Document.net_total, user, project_id,
            Document.doc_type.in_(_values(PURCHASE_TYPES)), paid, *in_month,
        )
        vat_sales = await self._sum(
            Document.vat_amount, user, project_id,
            Document.doc_type.in_(_values(SALES_TYPES)), not_cancelled,
        )
        vat_purchase = await self._sum(
            Document.vat_amount, user, project_id,
            Document.doc_type.in_(_values(PURCHASE_TYPES)), not_cancelled,
        )
        wht_payable = await self._sum(Document.wht_amount, user, project_id, not_cancelled)

        overdue_query = await self._scoped(
            select(func.count(Document.id)).where(Document.due_date < as_at, is_open),
            user,
            project_id,
        )
        overdue_count = await self.db.scalar(overdue_query) or 0

        return SummaryReport(
            as_at_date=as_at,
            outstanding_receivables=receivables,
            outstanding_payables=payables,
            monthly_income=monthly_income,
            monthly_expense=monthly_expense,
            monthly_profit=round_money(monthly_income - monthly_expense),
            vat_payable=round_money(vat_sales - vat_purchase),
            wht_payable=wht_payable,
            overdue_count=overdue_count,
            cash_flow=await self._cash_flow(user, project_id, as_at),
            expense_by_category=await self._expense_by_category(user, project_id),
            recent_activity=await self._recent_activity(user, project_id),
        )

    async def _cash_flow(
        self, user: User, project_id: int | None, as_at: date
    ) -> list[CashFlowMonth]:
        start = _month_start(*_add_months(as_at.year, as_at.month, -(CASH_FLOW_MONTHS - 1)))
        query = select(Document.doc_type, Document.net_total, Document.created_at).where(
            Document.status != DocumentStatus.CANCELLED.value,
            Document.created_at >= start,
        )
        query = await self._scoped(query, user, project_id)
        result = await self.db.execute(query)

        by_month: dict[str, dict[str, Decimal]] = defaultdict(
            lambda: {"cash_in": ZERO, "cash_out": ZERO}
        )
        sales = set(_values(SALES_TYPES))
        purchases = set(_values(PURCHASE_TYPES))
        for doc_type, net_total, created_at in result.all():
            bucket = by_month[created_at.strftime("%Y-%m")]
            if doc_type in sales:
                bucket["cash_in"] += net_total
            elif doc_type in purchases:
                bucket["cash_out"] += net_total

        return [
            CashFlowMonth(
                month=month,
                cash_in=round_money(totals["cash_in"]),
                cash_out=round_money(totals["cash_out"]),
            )
            for month, totals in sorted(by_month.items())
        ]

    async def _expense_by_category(
        self, user: User, project_id: int | None
    ) -> list[ExpenseByCategory]:
        query = (
            select(Document.doc_type, func.coalesce(func.sum(Document.net_total), 0))
            .where(
                Document.doc_type.in_(_values(EXPENSE_REPORT_TYPES)),
                Document.status != DocumentStatus.CANCELLED.value,
            )
            .group_by(Document.doc_type)
        )
        query = await self._scoped(query, user, project_id)
        result = await self.db.execute(query.order_by(Document.doc_type))
        return [
            ExpenseByCategory(category=doc_type, total=round_money(total or 0))
            for doc_type, total in result.all()
        ]

    async def _recent_activity(
        self, user: User, project_id: int | None
    ) -> list[RecentActivityRow]:
        query = await self._scoped(select(Document), user, project_id)
        query = query.order_by(Document.created_at.desc(), Document.id.desc()).limit(
            RECENT_ACTIVITY_LIMIT
        )
        result = await self.db.execute(query)
        return [
            RecentActivityRow(
                id=d.id,
                doc_type=d.doc_type,
                doc_number=d.doc_number,
                net_total=d.net_total,
                status=d.status,
                project_id=d.project_id,
                created_at=d.created_at,
            )
            for d in result.scalars().all()
        ]

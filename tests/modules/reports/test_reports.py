from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.models import User
from src.core.documents import DocumentType
from src.core.exceptions import AuthorizationError, ValidationError
from src.modules.documents.models import Document, DocumentStatus
from src.modules.documents.schemas import DocumentCreate, LineItemInput
from src.modules.documents.service import DocumentService
from src.modules.projects.models import Project
from src.modules.reports.schemas import WhtForm
from src.modules.reports.service import ReportsService, parse_period

AS_AT = date(2025, 3, 20)


async def _book(
    db_session: AsyncSession,
    user: User,
    project_id: int,
    doc_type: DocumentType,
    lines: list[tuple[str, str]],
    *,
    created: datetime,
    status: DocumentStatus,
    vat: str = "0.07",
    wht: str = "0",
    due: date | None = None,
) -> Document:
    """Create a document through the service, then backdate it."""
    document = await DocumentService(db_session).create_document(
        DocumentCreate(
            doc_type=doc_type,
            project_id=project_id,
            vat_rate=Decimal(vat),
            wht_rate=Decimal(wht),
            due_date=due,
            line_items=[
                LineItemInput(description=f"Line {i}", quantity=Decimal(qty), unit_price=Decimal(price))
                for i, (qty, price) in enumerate(lines, start=1)
            ],
        ),
        user,
    )
    document.status = status.value
    document.created_at = created
    await db_session.commit()
    return document


def _at(month: int, day: int) -> datetime:
    return datetime(2025, month, day, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
async def ledger(
    db_session: AsyncSession, admin_user: User, project: Project, other_project: Project
) -> dict[str, Document]:
    """A month of activity on the main project plus one invoice elsewhere."""
    return {
        "invoice": await _book(
            db_session, admin_user, project.id, DocumentType.INVOICE, [("1", "100000")],
            created=_at(3, 5), status=DocumentStatus.APPROVED, wht="0.03", due=date(2025, 3, 10),
        ),
        "tax_invoice": await _book(
            db_session, admin_user, project.id, DocumentType.TAX_INVOICE, [("1", "50000")],
            created=_at(3, 12), status=DocumentStatus.PAID,
        ),
        "po": await _book(
            db_session, admin_user, project.id, DocumentType.PO, [("200", "165"), ("500", "280")],
            created=_at(3, 8), status=DocumentStatus.PENDING, due=date(2025, 4, 30),
        ),
        "vendor_payment": await _book(
            db_session, admin_user, project.id, DocumentType.VENDOR_PAYMENT, [("1", "20000")],
            created=_at(3, 15), status=DocumentStatus.PAID, wht="0.03",
        ),
        "cancelled": await _book(
            db_session, admin_user, project.id, DocumentType.INVOICE, [("1", "999")],
            created=_at(3, 18), status=DocumentStatus.CANCELLED,
        ),
        "advance": await _book(
            db_session, admin_user, project.id, DocumentType.ADVANCE, [("1", "5000")],
            created=_at(3, 1), status=DocumentStatus.DRAFT, vat="0",
        ),
        "other": await _book(
            db_session, admin_user, other_project.id, DocumentType.INVOICE, [("1", "10000")],
            created=_at(2, 10), status=DocumentStatus.APPROVED,
        ),
    }


class TestParsePeriod:
    def test_valid_period(self):
        start, end = parse_period("2025-03")

        assert start == datetime(2025, 3, 1, tzinfo=timezone.utc)
        assert end == datetime(2025, 4, 1, tzinfo=timezone.utc)

    def test_december_rolls_over(self):
        _, end = parse_period("2024-12")
        assert end == datetime(2025, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("period", ["2025-13", "2025-3", "March", "2025/03", ""])
    def test_invalid_period(self, period):
        with pytest.raises(ValidationError) as exc_info:
            parse_period(period)

        assert exc_info.value.details["field"] == "period"


class TestTaxRegisters:
    """VAT sales, VAT purchase and WHT registers."""

    async def test_vat_sales_for_period(self, db_session: AsyncSession, admin_user: User, ledger):
        report = await ReportsService(db_session).vat_sales(admin_user, "2025-03")

        assert [row.doc_number for row in report.documents] == [
            ledger["invoice"].doc_number,
            ledger["tax_invoice"].doc_number,
        ]
        assert report.total_subtotal == Decimal("150000.00")
        assert report.total_vat == Decimal("10500.00")
        assert report.documents[0].project_name == "Sukhumvit 55 Residence"

    async def test_vat_sales_all_time_excludes_cancelled(
        self, db_session: AsyncSession, admin_user: User, ledger
    ):
        report = await ReportsService(db_session).vat_sales(admin_user)

        assert len(report.documents) == 3
        assert ledger["cancelled"].doc_number not in {row.doc_number for row in report.documents}
        assert report.total_subtotal == Decimal("160000.00")
        assert report.total_vat == Decimal("11200.00")

    async def test_vat_purchase(self, db_session: AsyncSession, admin_user: User, ledger):
        report = await ReportsService(db_session).vat_purchase(admin_user, "2025-03")

        assert {row.doc_type for row in report.documents} == {"PO", "VENDOR_PAYMENT"}
        assert report.total_subtotal == Decimal("193000.00")
        assert report.total_vat == Decimal("13510.00")

    async def test_wht_register(self, db_session: AsyncSession, admin_user: User, ledger):
        report = await ReportsService(db_session).wht(admin_user, "2025-03", WhtForm.PND53)

        assert report.report_type == WhtForm.PND53
        assert [row.doc_number for row in report.documents] == [
            ledger["invoice"].doc_number,
            ledger["vendor_payment"].doc_number,
        ]
        assert report.total_subtotal == Decimal("120000.00")
        assert report.total_wht == Decimal("3600.00")

    async def test_empty_period(self, db_session: AsyncSession, admin_user: User, ledger):
        report = await ReportsService(db_session).vat_sales(admin_user, "2024-01")

        assert report.documents == []
        assert report.total_vat == Decimal("0.00")

    async def test_registers_scoped_to_assigned_projects(
        self,
        db_session: AsyncSession,
        viewer_user: User,
        other_project: Project,
        assign,
        ledger,
    ):
        await assign(viewer_user, other_project)

        report = await ReportsService(db_session).vat_sales(viewer_user)

        assert [row.doc_number for row in report.documents] == [ledger["other"].doc_number]
        assert report.total_subtotal == Decimal("10000.00")
        assert report.total_vat == Decimal("700.00")


class TestSummary:
    """Dashboard summary figures."""

    async def test_summary_totals(self, db_session: AsyncSession, admin_user: User, ledger):
        summary = await ReportsService(db_session).summary(admin_user, as_at_date=AS_AT)

        assert summary.as_at_date == AS_AT
        assert summary.outstanding_receivables == Decimal("114700.00")
        assert summary.outstanding_payables == Decimal("185110.00")
        assert summary.monthly_income == Decimal("53500.00")
        assert summary.monthly_expense == Decimal("21400.00")
        assert summary.monthly_profit == Decimal("32100.00")
        assert summary.vat_payable == Decimal("-2310.00")
        assert summary.wht_payable == Decimal("3600.00")
        assert summary.overdue_count == 1

    async def test_cash_flow_by_month(self, db_session: AsyncSession, admin_user: User, ledger):
        summary = await ReportsService(db_session).summary(admin_user, as_at_date=AS_AT)

        assert [(m.month, m.cash_in, m.cash_out) for m in summary.cash_flow] == [
            ("2025-02", Decimal("10700.00"), Decimal("0.00")),
            ("2025-03", Decimal("157500.00"), Decimal("206510.00")),
        ]

    async def test_expense_by_category(self, db_session: AsyncSession, admin_user: User, ledger):
        summary = await ReportsService(db_session).summary(admin_user, as_at_date=AS_AT)

        assert [(e.category, e.total) for e in summary.expense_by_category] == [
            ("ADVANCE", Decimal("5000.00")),
            ("PO", Decimal("185110.00")),
            ("VENDOR_PAYMENT", Decimal("21400.00")),
        ]

    async def test_recent_activity_newest_first(
        self, db_session: AsyncSession, admin_user: User, ledger
    ):
        summary = await ReportsService(db_session).summary(admin_user, as_at_date=AS_AT)

        assert len(summary.recent_activity) == 7
        assert summary.recent_activity[0].doc_number == ledger["cancelled"].doc_number
        assert summary.recent_activity[-1].doc_number == ledger["other"].doc_number

    async def test_summary_for_one_project(
        self, db_session: AsyncSession, admin_user: User, other_project: Project, ledger
    ):
        summary = await ReportsService(db_session).summary(
            admin_user, project_id=other_project.id, as_at_date=AS_AT
        )

        assert summary.outstanding_receivables == Decimal("10700.00")
        assert summary.outstanding_payables == Decimal("0.00")
        assert summary.monthly_income == Decimal("0.00")
        assert summary.vat_payable == Decimal("700.00")
        assert summary.overdue_count == 0
        assert len(summary.recent_activity) == 1

    async def test_summary_for_unassigned_project(
        self, db_session: AsyncSession, viewer_user: User, project: Project, ledger
    ):
        with pytest.raises(AuthorizationError):
            await ReportsService(db_session).summary(viewer_user, project_id=project.id)


class TestReportsApi:
    """Tests for the reports endpoints."""

    async def test_summary_endpoint(
        self, client: AsyncClient, admin_user: User, auth_headers, ledger
    ):
        response = await client.get(
            "/api/v1/reports/summary",
            params={"as_at_date": "2025-03-20"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["as_at_date"] == "2025-03-20"
        assert Decimal(data["outstanding_receivables"]) == Decimal("114700.00")
        assert data["overdue_count"] == 1

    async def test_vat_sales_endpoint(
        self, client: AsyncClient, admin_user: User, auth_headers, ledger
    ):
        response = await client.get(
            "/api/v1/reports/vat-sales",
            params={"period": "2025-03"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["period"] == "2025-03"
        assert Decimal(data["total_vat"]) == Decimal("10500.00")

    async def test_wht_endpoint_form_type(
        self, client: AsyncClient, admin_user: User, auth_headers, ledger
    ):
        response = await client.get(
            "/api/v1/reports/wht",
            params={"period": "2025-03", "type": "50BIS"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        assert response.json()["data"]["report_type"] == "50BIS"
        assert Decimal(response.json()["data"]["total_wht"]) == Decimal("3600.00")

    async def test_invalid_period(self, client: AsyncClient, admin_user: User, auth_headers):
        response = await client.get(
            "/api/v1/reports/vat-purchase",
            params={"period": "2025-13"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "period"

    async def test_reports_require_authentication(self, client: AsyncClient):
        response = await client.get("/api/v1/reports/summary")
        assert response.status_code == 401

"""API endpoints for tax registers and the dashboard summary."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import CurrentUser
from src.core.database.session import get_db
from src.modules.reports.schemas import SummaryReport, VatReport, WhtForm, WhtReport
from src.modules.reports.service import ReportsService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/summary", response_model=ApiResponse[SummaryReport])
async def get_summary(
    current_user: CurrentUser,
    project_id: int | None = Query(None),
    as_at_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Receivables, payables, VAT/WHT position, cash flow and recent activity."""
    service = ReportsService(db)
    data = await service.summary(current_user, project_id=project_id, as_at_date=as_at_date)
    return ApiResponse(success=True, data=data)


@router.get("/vat-sales", response_model=ApiResponse[VatReport])
async def get_vat_sales(
    current_user: CurrentUser,
    period: str | None = Query(None, description="YYYY-MM"),
    db: AsyncSession = Depends(get_db),
):
    """Output VAT register."""
    service = ReportsService(db)
    return ApiResponse(success=True, data=await service.vat_sales(current_user, period))


@router.get("/vat-purchase", response_model=ApiResponse[VatReport])
async def get_vat_purchase(
    current_user: CurrentUser,
    period: str | None = Query(None, description="YYYY-MM"),
    db: AsyncSession = Depends(get_db),
):
    """Input VAT register."""
    service = ReportsService(db)
    return ApiResponse(success=True, data=await service.vat_purchase(current_user, period))


@router.get("/wht", response_model=ApiResponse[WhtReport])
async def get_wht(
    current_user: CurrentUser,
    period: str | None = Query(None, description="YYYY-MM"),
    form: WhtForm = Query(WhtForm.PND3, alias="type"),
    db: AsyncSession = Depends(get_db),
):
    """Withholding tax register (PND3, PND53, 50BIS)."""
    service = ReportsService(db)
    return ApiResponse(success=True, data=await service.wht(current_user, period, form))

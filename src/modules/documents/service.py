"""Service layer for documents: numbering, totals and persistence in one unit of work."""

import logging
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.models import User
from src.core.config import settings
from src.core.documents.number_generator import allocate_document_number
from src.core.exceptions import AppException, NotFoundError, StorageUnavailableError
from src.modules.documents.financials import FinancialBreakdown, compute_financials
from src.modules.documents.models import Document, DocumentStatus, LineItem
from src.modules.documents.schemas import (
    DocumentCreate,
    DocumentFilters,
    DocumentUpdate,
    LineItemInput,
)
from src.modules.projects.access import assigned_project_ids, ensure_project_access
from src.modules.projects.models import Project

logger = logging.getLogger(__name__)


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class DocumentService:
    """Service for project documents."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_document(self, data: DocumentCreate, created_by: User) -> Document:
        """
        Create a document with its line items.

        The project, the referenced document and the totals are checked
        before a number is allocated, so bad input never touches the counter.
        Allocation, the document row and its line items share one transaction:
        on failure nothing is kept, including the counter increment.
        """
        await ensure_project_access(self.db, created_by, data.project_id)
        if await self.db.get(Project, data.project_id) is None:
            raise NotFoundError("Project", data.project_id)
        if data.reference_id is not None and await self.db.get(Document, data.reference_id) is None:
            raise NotFoundError("Document", data.reference_id)

        vat_rate = data.vat_rate if data.vat_rate is not None else settings.default_vat_rate
        wht_rate = data.wht_rate if data.wht_rate is not None else settings.default_wht_rate
        breakdown = compute_financials(data.line_items, vat_rate, wht_rate, data.doc_type)

        try:
            allocated = await allocate_document_number(self.db, data.doc_type)

            document = Document(
                doc_type=data.doc_type.value,
                doc_number=allocated.formatted,
                project_id=data.project_id,
                reference_id=data.reference_id,
                vat_rate=vat_rate,
                wht_rate=wht_rate,
                status=DocumentStatus.DRAFT.value,
                due_date=data.due_date,
                notes=data.notes,
                vendor_name=data.vendor_name,
                vendor_tax_id=data.vendor_tax_id,
                created_by_id=created_by.id,
            )
            self._apply_breakdown(document, breakdown)
            document.lines = self._build_lines(data.line_items, breakdown)
            self.db.add(document)
            await self.db.flush()
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Failed to create %s document", data.doc_type.value)
            raise StorageUnavailableError("Failed to create document, please retry") from exc
        except AppException:
            await self.db.rollback()
            raise

        logger.info(
            "Created %s %s (net %s) for project %s",
            document.doc_type,
            document.doc_number,
            document.net_total,
            document.project_id,
        )
        return await self._get_by_id(document.id)

    async def update_document(
        self, document_id: int, data: DocumentUpdate, updated_by: User
    ) -> Document:
        """
        Update a document and recompute its totals.

        A supplied line item set replaces the stored one; otherwise the stored
        lines are re-totalled with the (possibly new) rates. The number and
        type never change.
        """
        document = await self._get_by_id(document_id)
        await ensure_project_access(self.db, updated_by, document.project_id)

        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        update_data.pop("line_items", None)
        vat_rate = update_data.pop("vat_rate", document.vat_rate)
        wht_rate = update_data.pop("wht_rate", document.wht_rate)

        source_lines = data.line_items if data.line_items is not None else document.lines
        breakdown = compute_financials(source_lines, vat_rate, wht_rate, document.doc_type)

        try:
            for field, value in update_data.items():
                setattr(document, field, value)
            document.vat_rate = vat_rate
            document.wht_rate = wht_rate
            self._apply_breakdown(document, breakdown)

            if data.line_items is not None:
                document.lines.clear()
                await self.db.flush()
                document.lines.extend(self._build_lines(data.line_items, breakdown))
            else:
                for line, line_total in zip(document.lines, breakdown.line_totals):
                    line.line_total = line_total

            await self.db.flush()
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Failed to update document %s", document_id)
            raise StorageUnavailableError("Failed to update document, please retry") from exc

        logger.info("Updated %s (net %s)", document.doc_number, document.net_total)
        return await self._get_by_id(document_id)

    async def get_document(self, document_id: int, user: User) -> Document:
        """Get a document the user is allowed to see."""
        document = await self._get_by_id(document_id)
        await ensure_project_access(self.db, user, document.project_id)
        return document

    async def list_documents(
        self, filters: DocumentFilters, user: User
    ) -> tuple[list[Document], int]:
        """List documents with filters, newest first."""
        query = select(Document)

        if filters.doc_type:
            query = query.where(Document.doc_type == filters.doc_type.value)
        if filters.project_id:
            query = query.where(Document.project_id == filters.project_id)
        if filters.status:
            query = query.where(Document.status == filters.status.value)
        if filters.date_from:
            query = query.where(Document.created_at >= _day_start(filters.date_from))
        if filters.date_to:
            query = query.where(
                Document.created_at < _day_start(filters.date_to + timedelta(days=1))
            )
        if not user.is_admin:
            query = query.where(Document.project_id.in_(assigned_project_ids(user)))

        total = await self.db.scalar(select(func.count()).select_from(query.subquery()))
        query = query.order_by(Document.created_at.desc(), Document.id.desc())
        query = query.offset((filters.page - 1) * filters.limit).limit(filters.limit)

        result = await self.db.execute(query)
        return list(result.scalars().all()), total or 0

    async def delete_document(self, document_id: int) -> None:
        """Delete a document and its line items."""
        document = await self._get_by_id(document_id)
        doc_number = document.doc_number
        try:
            await self.db.delete(document)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Failed to delete document %s", document_id)
            raise StorageUnavailableError("Failed to delete document, please retry") from exc
        logger.info("Deleted %s", doc_number)

    async def _get_by_id(self, document_id: int) -> Document:
        result = await self.db.execute(
            select(Document)
            .where(Document.id == document_id)
            .execution_options(populate_existing=True)
        )
        document = result.scalar_one_or_none()
        if not document:
            raise NotFoundError("Document", document_id)
        return document

    @staticmethod
    def _apply_breakdown(document: Document, breakdown: FinancialBreakdown) -> None:
        document.subtotal = breakdown.subtotal
        document.vat_amount = breakdown.vat_amount
        document.wht_amount = breakdown.wht_amount
        document.net_total = breakdown.net_total

    @staticmethod
    def _build_lines(
        items: list[LineItemInput], breakdown: FinancialBreakdown
    ) -> list[LineItem]:
        return [
            LineItem(
                description=item.description,
                quantity=item.quantity,
                unit=item.unit or settings.default_line_unit,
                unit_price=item.unit_price,
                line_total=line_total,
            )
            for item, line_total in zip(items, breakdown.line_totals)
        ]

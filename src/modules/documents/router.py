"""API endpoints for project documents."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import AdminUser, CurrentUser, EditorUser
from src.core.database.session import get_db
from src.core.documents.types import DocumentType
from src.modules.documents.models import Document, DocumentStatus
from src.modules.documents.schemas import (
    DocumentCreate,
    DocumentFilters,
    DocumentResponse,
    DocumentUpdate,
    LineItemResponse,
)
from src.modules.documents.service import DocumentService
from src.shared.schemas.base import ApiResponse, PaginatedResponse

router = APIRouter(prefix="/documents", tags=["Documents"])


def _document_to_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        doc_type=document.doc_type,
        doc_number=document.doc_number,
        project_id=document.project_id,
        reference_id=document.reference_id,
        subtotal=document.subtotal,
        vat_rate=document.vat_rate,
        vat_amount=document.vat_amount,
        wht_rate=document.wht_rate,
        wht_amount=document.wht_amount,
        net_total=document.net_total,
        status=document.status,
        due_date=document.due_date,
        notes=document.notes,
        vendor_name=document.vendor_name,
        vendor_tax_id=document.vendor_tax_id,
        created_by_id=document.created_by_id,
        created_at=document.created_at,
        updated_at=document.updated_at,
        line_items=[LineItemResponse.model_validate(line) for line in document.lines],
    )


@router.post(
    "",
    response_model=ApiResponse[DocumentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_document(
    data: DocumentCreate,
    current_user: EditorUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a document; the number and totals are assigned server-side."""
    service = DocumentService(db)
    document = await service.create_document(data, current_user)
    return ApiResponse(
        success=True,
        message="Document created successfully",
        data=_document_to_response(document),
    )


@router.get(
    "",
    response_model=ApiResponse[PaginatedResponse[DocumentResponse]],
)
async def list_documents(
    current_user: CurrentUser,
    doc_type: DocumentType | None = Query(None, alias="type"),
    project_id: int | None = Query(None),
    status: DocumentStatus | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """List documents visible to the caller."""
    service = DocumentService(db)
    filters = DocumentFilters(
        doc_type=doc_type,
        project_id=project_id,
        status=status,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    documents, total = await service.list_documents(filters, current_user)
    return ApiResponse(
        success=True,
        data=PaginatedResponse.create(
            items=[_document_to_response(d) for d in documents],
            total=total,
            page=page,
            limit=limit,
        ),
    )


@router.get(
    "/{document_id}",
    response_model=ApiResponse[DocumentResponse],
)
async def get_document(
    document_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Get a document with its line items."""
    service = DocumentService(db)
    document = await service.get_document(document_id, current_user)
    return ApiResponse(success=True, data=_document_to_response(document))


@router.put(
    "/{document_id}",
    response_model=ApiResponse[DocumentResponse],
)
async def update_document(
    document_id: int,
    data: DocumentUpdate,
    current_user: EditorUser,
    db: AsyncSession = Depends(get_db),
):
    """Update a document and recompute its totals."""
    service = DocumentService(db)
    document = await service.update_document(document_id, data, current_user)
    return ApiResponse(
        success=True,
        message="Document updated successfully",
        data=_document_to_response(document),
    )


@router.delete(
    "/{document_id}",
    response_model=ApiResponse[None],
)
async def delete_document(
    document_id: int,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Delete a document (admin only)."""
    service = DocumentService(db)
    await service.delete_document(document_id)
    return ApiResponse(success=True, message="Document deleted", data=None)

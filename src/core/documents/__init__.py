from src.core.documents.models import DocumentSequence
from src.core.documents.number_generator import (
    AllocatedNumber,
    DocumentNumberGenerator,
    allocate_document_number,
    format_document_number,
    get_document_number,
)
from src.core.documents.types import (
    DocumentCategory,
    DocumentType,
    category_for,
    document_prefix,
)

__all__ = [
    "DocumentSequence",
    "AllocatedNumber",
    "DocumentNumberGenerator",
    "allocate_document_number",
    "format_document_number",
    "get_document_number",
    "DocumentCategory",
    "DocumentType",
    "category_for",
    "document_prefix",
]

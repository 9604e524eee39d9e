"""Document types, their numbering prefixes and their accounting category."""

from decimal import Decimal
from enum import StrEnum

from src.shared.utils.money import round_money

FALLBACK_PREFIX = "DOC"


class DocumentCategory(StrEnum):
    """Which side of the books a document sits on."""

    INCOME = "income"
    EXPENSE = "expense"

    def net_total(self, subtotal: Decimal, vat_amount: Decimal, wht_amount: Decimal) -> Decimal:
        # Expense-side WHT is kept for withholding certificates only.
        if self is DocumentCategory.INCOME:
            return round_money(subtotal + vat_amount - wht_amount)
        return round_money(subtotal + vat_amount)


class DocumentType(StrEnum):
    """Document type enumeration."""

    QUOTATION = "QUOTATION"
    INVOICE = "INVOICE"
    TAX_INVOICE = "TAX_INVOICE"
    RECEIPT = "RECEIPT"
    PO = "PO"
    VENDOR_PAYMENT = "VENDOR_PAYMENT"
    ADVANCE = "ADVANCE"
    CLEARANCE = "CLEARANCE"

    @property
    def prefix(self) -> str:
        return DOCUMENT_PREFIXES[self]

    @property
    def category(self) -> DocumentCategory:
        return DOCUMENT_CATEGORIES[self]


DOCUMENT_PREFIXES: dict[DocumentType, str] = {
    DocumentType.QUOTATION: "QT",
    DocumentType.INVOICE: "INV",
    DocumentType.TAX_INVOICE: "TIV",
    DocumentType.RECEIPT: "RCT",
    DocumentType.PO: "PO",
    DocumentType.VENDOR_PAYMENT: "VP",
    DocumentType.ADVANCE: "ADV",
    DocumentType.CLEARANCE: "CLR",
}

DOCUMENT_CATEGORIES: dict[DocumentType, DocumentCategory] = {
    DocumentType.QUOTATION: DocumentCategory.INCOME,
    DocumentType.INVOICE: DocumentCategory.INCOME,
    DocumentType.TAX_INVOICE: DocumentCategory.INCOME,
    DocumentType.RECEIPT: DocumentCategory.INCOME,
    DocumentType.PO: DocumentCategory.EXPENSE,
    DocumentType.VENDOR_PAYMENT: DocumentCategory.EXPENSE,
    DocumentType.ADVANCE: DocumentCategory.EXPENSE,
    DocumentType.CLEARANCE: DocumentCategory.EXPENSE,
}

# Groupings used by tax and cash-flow reports
SALES_TYPES = (DocumentType.INVOICE, DocumentType.TAX_INVOICE, DocumentType.RECEIPT)
RECEIVABLE_TYPES = (DocumentType.INVOICE, DocumentType.TAX_INVOICE)
PURCHASE_TYPES = (DocumentType.PO, DocumentType.VENDOR_PAYMENT)
EXPENSE_REPORT_TYPES = (DocumentType.PO, DocumentType.VENDOR_PAYMENT, DocumentType.ADVANCE)


def _coerce(doc_type: "DocumentType | str") -> DocumentType | None:
    if isinstance(doc_type, DocumentType):
        return doc_type
    try:
        return DocumentType(doc_type)
    except ValueError:
        return None


def document_prefix(doc_type: DocumentType | str) -> str:
    """Numbering prefix for a document type; unknown types share ``DOC``."""
    known = _coerce(doc_type)
    return known.prefix if known is not None else FALLBACK_PREFIX


def category_for(doc_type: DocumentType | str) -> DocumentCategory:
    """Accounting category; anything outside the income set books as expense."""
    known = _coerce(doc_type)
    return known.category if known is not None else DocumentCategory.EXPENSE

"""Subtotal, VAT, WHT and net total for a set of line items."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from src.core.documents.types import DocumentType, category_for
from src.shared.utils.money import ZERO, round_money, to_decimal


@dataclass(frozen=True)
class FinancialBreakdown:
    """Money fields stored on a document, plus per-line totals in input order."""

    subtotal: Decimal
    vat_amount: Decimal
    wht_amount: Decimal
    net_total: Decimal
    line_totals: tuple[Decimal, ...] = ()


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def compute_line_total(quantity: Any, unit_price: Any, field: str = "line_items") -> Decimal:
    qty = to_decimal(quantity, f"{field}.quantity")
    price = to_decimal(unit_price, f"{field}.unit_price")
    return round_money(qty * price)


def compute_financials(
    line_items: Iterable[Any],
    vat_rate: Any,
    wht_rate: Any,
    doc_type: DocumentType | str,
) -> FinancialBreakdown:
    """
    Derive the money fields of a document.

    Line items may be dicts, pydantic schemas or ORM rows; each needs
    ``quantity`` and ``unit_price``. Every line is rounded half-up to cents
    before summing, VAT and WHT are taken on the subtotal, and the net total
    follows the document type's category. Negative values are computed as-is.

    Raises:
        InvalidInputError: a quantity, unit price or rate is not a finite number.
    """
    vat = to_decimal(vat_rate, "vat_rate")
    wht = to_decimal(wht_rate, "wht_rate")

    line_totals = tuple(
        compute_line_total(
            _field(item, "quantity"),
            _field(item, "unit_price"),
            field=f"line_items.{index}",
        )
        for index, item in enumerate(line_items)
    )

    subtotal = sum(line_totals, ZERO)
    vat_amount = round_money(subtotal * vat)
    wht_amount = round_money(subtotal * wht)
    net_total = category_for(doc_type).net_total(subtotal, vat_amount, wht_amount)

    return FinancialBreakdown(
        subtotal=subtotal,
        vat_amount=vat_amount,
        wht_amount=wht_amount,
        net_total=net_total,
        line_totals=line_totals,
    )

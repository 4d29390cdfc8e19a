# app/billing/aggregator.py
"""
Rebuild nested invoice views from flat rows.

Summary rows come from billing_details LEFT JOIN customers and carry the
labels produced by ``app.billing.finder.summary_select``; line-item rows come
from ``billings`` with the labels of ``app.billing.finder.line_item_select``.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Mapping

from app.billing.totals import line_amount
from app.models.invoices import (
    BillingDetailOut,
    CustomerOut,
    InvoiceView,
    LineItemOut,
)


def _row_to_line_item(row: Mapping) -> LineItemOut:
    return LineItemOut(
        id=row["billing_id"],
        description=row["description"],
        qty=row["qty"],
        rate=row["rate"],
        amount=line_amount(row["qty"], row["rate"]),
        unit=row["unit"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_invoice(row: Mapping, items: List[LineItemOut]) -> InvoiceView:
    return InvoiceView(
        customer=CustomerOut(
            id=row["customer_id"],
            title=row["customer_title"],
            name=row["customer_name"],
            location=row["location"],
        ),
        billing_detail=BillingDetailOut(
            id=row["billing_detail_id"],
            grand_total=row["grand_total"],
            tax=row["tax"],
            packaging=row["packaging"],
            total=row["total"],
            billing_date=row["billing_date"],
            created_at=row["detail_created_at"],
            updated_at=row["detail_updated_at"],
        ),
        billings=items,
    )


def aggregate(summary_rows: Iterable[Mapping], line_item_rows: Iterable[Mapping]) -> List[InvoiceView]:
    """
    Nest line items under their summary by customer_id.

    Every summary row yields one view, with ``billings=[]`` when it has no
    items. Items keep the order they arrive in.
    """
    items_by_customer: Dict[int, List[LineItemOut]] = defaultdict(list)
    for row in line_item_rows:
        items_by_customer[row["customer_id"]].append(_row_to_line_item(row))

    return [
        # copy so two summaries of one customer never share a list
        _row_to_invoice(row, list(items_by_customer.get(row["customer_id"], [])))
        for row in summary_rows
    ]

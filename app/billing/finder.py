# app/billing/finder.py

from decimal import Decimal
from typing import List, Union

from sqlalchemy import and_, func, select

from app.billing.aggregator import aggregate
from app.billing.dates import normalize_billing_date
from app.db.schema import billing_details, billings, customers
from app.db.store import LedgerStore
from app.errors import NotFound
from app.models.invoices import InvoiceView, SearchFilter, SearchResult, parse_payload


def summary_select():
    return (
        select(
            billing_details.c.id.label("billing_detail_id"),
            billing_details.c.customer_id,
            billing_details.c.grand_total,
            billing_details.c.tax,
            billing_details.c.packaging,
            billing_details.c.total,
            billing_details.c.billing_date,
            billing_details.c.created_at.label("detail_created_at"),
            billing_details.c.updated_at.label("detail_updated_at"),
            customers.c.title.label("customer_title"),
            customers.c.customer_name,
            customers.c.location,
        )
        .select_from(billing_details.outerjoin(customers))
        .order_by(billing_details.c.id)
    )


def line_item_select():
    return (
        select(
            billings.c.id.label("billing_id"),
            billings.c.customer_id,
            billings.c.description,
            billings.c.qty,
            billings.c.rate,
            billings.c.unit,
            billings.c.created_at,
            billings.c.updated_at,
        )
        .order_by(billings.c.id)
    )


class InvoiceFinder:
    def __init__(self, store: LedgerStore):
        self.store = store

    def find_all(self) -> List[InvoiceView]:
        """
        Every invoice with all of its line items. Empty list when there are none.
        """
        summaries = self.store.execute(summary_select()).rows
        if not summaries:
            return []
        items = self.store.execute(line_item_select()).rows
        return aggregate(summaries, items)

    def find_by_id(self, summary_id: int) -> InvoiceView:
        stmt = summary_select().where(billing_details.c.id == summary_id)
        summaries = self.store.execute(stmt).rows

        if not summaries:
            raise NotFound("Billing detail not found")

        items = self.store.execute(
            line_item_select().where(billings.c.customer_id == summaries[0]["customer_id"])
        ).rows
        return aggregate(summaries, items)[0]

    def search(self, filters: Union[SearchFilter, dict, None] = None) -> SearchResult:
        """
        Invoices matching every filter that is present, plus their grand total sum.

        Absent filters add no condition at all. Customer name is an exact,
        case-insensitive match; the date bounds are inclusive.
        """
        filters = parse_payload(SearchFilter, filters)

        conditions = []
        if filters.customer_name is not None:
            conditions.append(
                func.lower(customers.c.customer_name) == func.lower(filters.customer_name)
            )
        if filters.start_date is not None:
            start = normalize_billing_date(filters.start_date, field="start_date")
            conditions.append(billing_details.c.billing_date >= start)
        if filters.end_date is not None:
            end = normalize_billing_date(filters.end_date, field="end_date")
            conditions.append(billing_details.c.billing_date <= end)

        stmt = summary_select()
        if conditions:
            stmt = stmt.where(and_(*conditions))

        summaries = self.store.execute(stmt).rows
        if not summaries:
            raise NotFound("Billing detail not found")

        customer_ids = sorted({row["customer_id"] for row in summaries})
        items = self.store.execute(
            line_item_select().where(billings.c.customer_id.in_(customer_ids))
        ).rows

        total_grand_total = sum(
            (row["grand_total"] or Decimal("0") for row in summaries),
            Decimal("0"),
        )

        return SearchResult(
            total_grand_total=total_grand_total,
            invoices=aggregate(summaries, items),
        )

# app/billing/writer.py
"""
Invoice writes: create and amend, each as one all-or-nothing transaction.

An invoice spans three tables: the customer row, its line items in
``billings`` and one ``billing_details`` summary. Totals on the summary are
always recomputed from the line items as persisted, never taken from input.
"""

import logging
from typing import List, Mapping, Union

from sqlalchemy import delete, insert, select, update

from app.billing.dates import normalize_billing_date
from app.billing.totals import compute_totals, round_money
from app.db.schema import billing_details, billings, customers
from app.db.store import LedgerStore
from app.errors import BillingError, NotFound, TransactionFailure
from app.models.invoices import (
    AmendInvoiceRequest,
    CreateInvoiceRequest,
    LineItemIn,
    parse_payload,
)

logger = logging.getLogger(__name__)


def _item_values(item: LineItemIn) -> dict:
    return {
        "description": item.description,
        "qty": item.qty,
        "rate": item.rate,
        "unit": item.unit,
    }


class InvoiceWriter:
    def __init__(self, store: LedgerStore):
        self.store = store

    # ---- create ----

    def create(self, data: Union[CreateInvoiceRequest, Mapping]) -> int:
        """
        Insert customer, line items and summary for a new invoice.

        Returns the id of the new billing_details row.
        """
        request = parse_payload(CreateInvoiceRequest, data)
        billing_date = normalize_billing_date(request.billing_date)

        try:
            with self.store.transaction():
                customer_id = self.store.execute(
                    insert(customers).values(
                        title=request.title,
                        customer_name=request.customer_name,
                        location=request.location,
                    )
                ).inserted_id

                self.store.execute(
                    insert(billings),
                    [
                        {"customer_id": customer_id, **_item_values(item)}
                        for item in request.items
                    ],
                )

                persisted = self._persisted_items(customer_id)
                total, grand_total = compute_totals(persisted, request.tax, request.packaging)

                summary_id = self.store.execute(
                    insert(billing_details).values(
                        billing_id=persisted[0]["id"] if persisted else None,
                        customer_id=customer_id,
                        grand_total=grand_total,
                        tax=round_money(request.tax),
                        packaging=round_money(request.packaging),
                        total=total,
                        billing_date=billing_date,
                    )
                ).inserted_id
        except BillingError:
            raise
        except Exception as exc:
            logger.exception("Invoice creation for %r rolled back", request.customer_name)
            raise TransactionFailure("Could not create billing") from exc

        logger.info(
            "Created invoice %s for customer %s: %s items, grand total %s",
            summary_id, customer_id, len(request.items), grand_total,
        )
        return summary_id

    # ---- amend ----

    def amend(self, summary_id: int, data: Union[AmendInvoiceRequest, Mapping]) -> int:
        """
        Update an invoice in place and reconcile its line items.

        Items listed in ``items_to_delete`` are removed, items with an id are
        updated, items without one are inserted. Every item statement is
        scoped to the invoice's customer, so ids owned by another invoice are
        silently left alone. Totals are recomputed afterwards.
        """
        request = parse_payload(AmendInvoiceRequest, data)
        billing_date = normalize_billing_date(request.billing_date)

        try:
            with self.store.transaction():
                customer_id = self._customer_for(summary_id)

                self.store.execute(
                    update(customers)
                    .where(customers.c.id == customer_id)
                    .values(
                        title=request.title,
                        customer_name=request.customer_name,
                        location=request.location,
                    )
                )

                self._reconcile_items(customer_id, request.items, request.items_to_delete)

                persisted = self._persisted_items(customer_id)
                total, grand_total = compute_totals(persisted, request.tax, request.packaging)
                if request.grand_total is not None and round_money(request.grand_total) != grand_total:
                    logger.warning(
                        "Invoice %s: ignoring client grand_total %s, recomputed %s",
                        summary_id, request.grand_total, grand_total,
                    )

                self.store.execute(
                    update(billing_details)
                    .where(billing_details.c.id == summary_id)
                    .values(
                        grand_total=grand_total,
                        tax=round_money(request.tax),
                        packaging=round_money(request.packaging),
                        total=total,
                        billing_date=billing_date,
                    )
                )
        except BillingError:
            raise
        except Exception as exc:
            logger.exception("Amendment of invoice %s rolled back", summary_id)
            raise TransactionFailure("Could not update billing") from exc

        logger.info(
            "Amended invoice %s: %s items now, grand total %s",
            summary_id, len(persisted), grand_total,
        )
        return summary_id

    # ---- helpers ----

    def _customer_for(self, summary_id: int) -> int:
        rows = self.store.execute(
            select(billing_details.c.customer_id).where(billing_details.c.id == summary_id)
        ).rows
        if not rows:
            raise NotFound("Billing detail not found")
        return rows[0]["customer_id"]

    def _reconcile_items(self, customer_id: int, items: List[LineItemIn], to_delete: List[int]) -> None:
        if to_delete:
            self.store.execute(
                delete(billings).where(
                    billings.c.id.in_(to_delete),
                    billings.c.customer_id == customer_id,
                )
            )

        new_rows = []
        for item in items:
            if item.id is not None:
                self.store.execute(
                    update(billings)
                    .where(billings.c.id == item.id, billings.c.customer_id == customer_id)
                    .values(**_item_values(item))
                )
            else:
                new_rows.append({"customer_id": customer_id, **_item_values(item)})

        if new_rows:
            self.store.execute(insert(billings), new_rows)

    def _persisted_items(self, customer_id: int) -> List[dict]:
        return self.store.execute(
            select(billings.c.id, billings.c.qty, billings.c.rate)
            .where(billings.c.customer_id == customer_id)
            .order_by(billings.c.id)
        ).rows
# app/api/invoices.py

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from app.billing.finder import InvoiceFinder
from app.billing.writer import InvoiceWriter
from app.db.store import LedgerStore, get_store
from app.models.invoices import (
    InvoiceListOut,
    InvoiceView,
    SearchResult,
    WriteOut,
)

router = APIRouter(tags=["billing"])

# Bodies are taken as plain JSON objects; the billing core validates them so
# that a bad payload is a 400 with a readable message rather than a 422.


@router.post("/create-billing", response_model=WriteOut, status_code=201)
def create_billing(
    payload: Dict[str, Any] = Body(...),
    store: LedgerStore = Depends(get_store),
) -> WriteOut:
    summary_id = InvoiceWriter(store).create(payload)
    return WriteOut(message="Billing has been created.", id=summary_id)


@router.get("/get-bills", response_model=InvoiceListOut)
def list_billings(store: LedgerStore = Depends(get_store)) -> InvoiceListOut:
    """
    Return every invoice with its customer and line items.
    """
    return InvoiceListOut(bills=InvoiceFinder(store).find_all())


@router.get("/get-bill/{summary_id}", response_model=InvoiceView)
def get_billing(summary_id: int, store: LedgerStore = Depends(get_store)) -> InvoiceView:
    return InvoiceFinder(store).find_by_id(summary_id)


@router.post("/search-bill", response_model=SearchResult)
def search_billings(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    store: LedgerStore = Depends(get_store),
) -> SearchResult:
    """
    Filter invoices by customer_name, start_date and end_date (all optional, ANDed).
    """
    return InvoiceFinder(store).search(payload or {})


@router.put("/update-bill/{summary_id}", response_model=WriteOut)
def update_billing(
    summary_id: int,
    payload: Dict[str, Any] = Body(...),
    store: LedgerStore = Depends(get_store),
) -> WriteOut:
    InvoiceWriter(store).amend(summary_id, payload)
    return WriteOut(message="Records updated successfully", id=summary_id)

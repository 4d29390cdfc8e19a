# app/__init__.py
"""
Billing ledger backend: customers, itemized invoices and their summaries.

Serve the HTTP surface with:
    uvicorn app:app --reload
"""

from .main import app

__all__ = ["app"]

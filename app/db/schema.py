# app/db/schema.py

from datetime import datetime, timezone

from sqlalchemy import (
    MetaData, Table, Column, Integer, String,
    Numeric, Date, DateTime, ForeignKey, CheckConstraint, Text
)

metadata = MetaData()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _timestamps():
    return [
        Column("created_at", DateTime, nullable=False, default=utcnow),
        Column("updated_at", DateTime, nullable=False, default=utcnow, onupdate=utcnow),
    ]


customers = Table(
    "customers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String, nullable=False),
    Column("customer_name", String, nullable=False),
    Column("location", Text, nullable=False),
    *_timestamps(),
    sqlite_autoincrement=True,
)

# One row per line item; amount is always qty * rate and never stored.
# Ids are never reused so a stale item id cannot hit a newer row.
billings = Table(
    "billings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("customer_id", Integer, ForeignKey("customers.id"), nullable=False, index=True),
    Column("description", Text, nullable=False),
    Column("qty", Numeric(18, 4), nullable=False),
    Column("rate", Numeric(18, 4), nullable=False),
    Column("unit", String, nullable=False),
    *_timestamps(),
    sqlite_autoincrement=True,
)

billing_details = Table(
    "billing_details",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("billing_id", Integer, nullable=True),
    Column("customer_id", Integer, ForeignKey("customers.id"), nullable=False, index=True),
    Column("grand_total", Numeric(18, 2), nullable=False),
    Column("tax", Numeric(18, 2), nullable=False),
    Column("packaging", Numeric(18, 2), nullable=False),
    Column("total", Numeric(18, 2), nullable=False),
    Column("billing_date", Date, nullable=False),
    *_timestamps(),
    CheckConstraint("tax >= 0", name="ck_billing_details_tax_nonneg"),
    CheckConstraint("packaging >= 0", name="ck_billing_details_packaging_nonneg"),
    sqlite_autoincrement=True,
)

"""
Tests for billing date normalization.
"""

from datetime import date, datetime, timezone

import pytest

from app.billing.dates import normalize_billing_date
from app.errors import ValidationError


@pytest.fixture(autouse=True)
def no_billing_zone(monkeypatch):
    monkeypatch.setattr("app.billing.dates.BILLING_TIMEZONE", "")


class TestNormalizeBillingDate:
    """Tests for normalize_billing_date."""

    @pytest.mark.parametrize("value", [
        "2024-03-15",
        " 2024-03-15 ",
        "03/15/2024",
        "03/15/24",
        "03/15/2024 10:30",
        "2024-03-15T10:30:00",
        "2024-03-15T18:30:00.000Z",
        "2024-03-15T23:30:00+05:30",
        "2024-03-15T00:00:00+05:30",
        "15-03-2024",
        "2024/03/15",
    ])
    def test_accepted_strings(self, value):
        assert normalize_billing_date(value) == date(2024, 3, 15)

    def test_offset_date_is_kept(self):
        """Midnight in India is the 15th, whatever the server zone."""
        assert normalize_billing_date("2024-03-15T00:00:00+05:30") == date(2024, 3, 15)
        assert normalize_billing_date("2024-03-16T02:00:00Z") == date(2024, 3, 16)

    def test_configured_zone_converts(self, monkeypatch):
        monkeypatch.setattr("app.billing.dates.BILLING_TIMEZONE", "America/New_York")
        assert normalize_billing_date("2024-03-16T02:00:00Z") == date(2024, 3, 15)

    def test_naive_datetime_keeps_its_date(self):
        assert normalize_billing_date(datetime(2024, 3, 16, 2, 0)) == date(2024, 3, 16)

    def test_aware_datetime_keeps_its_date(self):
        value = datetime(2024, 3, 16, 2, 0, tzinfo=timezone.utc)
        assert normalize_billing_date(value) == date(2024, 3, 16)

    def test_date_passes_through(self):
        assert normalize_billing_date(date(2024, 3, 15)) == date(2024, 3, 15)

    def test_other_timezone(self, monkeypatch):
        monkeypatch.setattr("app.billing.dates.BILLING_TIMEZONE", "Asia/Kolkata")
        assert normalize_billing_date("2024-03-15T20:00:00Z") == date(2024, 3, 16)

    @pytest.mark.parametrize("value", ["", "   ", "someday", "2024-13-45", None, 20240315])
    def test_rejected(self, value):
        with pytest.raises(ValidationError):
            normalize_billing_date(value)

    def test_error_names_field(self):
        with pytest.raises(ValidationError) as excinfo:
            normalize_billing_date("nope", field="start_date")
        assert "start_date" in excinfo.value.message

# app/errors.py
"""
Failure taxonomy of the billing core.

Every error carries a public message that is safe to hand back to API
callers. Internal causes are chained (``raise ... from exc``) and logged,
never put in the message.
"""


class BillingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BillingError):
    """Missing or malformed input, detected before any write."""

    status_code = 400


class NotFound(BillingError):
    status_code = 404


class TransactionFailure(BillingError):
    """A statement inside a unit of work failed and everything was rolled back."""

    status_code = 500


class StoreUnavailable(BillingError):
    status_code = 503

"""
Error taxonomy for the billing core.

- NotFoundError: referenced invoice/customer/counter is missing
- ConflictError: a store transaction could not commit within its retry budget
- ValidationError: caller data violates an invariant, raised before any write
- StoreError: I/O failure from the document store
"""


class BillingError(Exception):
    """Base class for all billing core errors."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFoundError(BillingError):
    pass


class ConflictError(BillingError):
    pass


class ValidationError(BillingError):
    pass


class StoreError(BillingError):
    pass

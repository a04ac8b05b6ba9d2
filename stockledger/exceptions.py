"""
Exceptions for Stockledger.

All errors are StockError with a structured code for programmatic handling.
"""

from typing import Any


class BaseError(Exception):
    """
    Exception carrying a code, a message and context data.

    Subclasses declare ``_default_messages`` keyed by code; an explicit
    message passed by the raise site wins over the default.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"


class StockError(BaseError):
    """
    Structured exception for stock operations.

    Usage:
        try:
            stock.allocate_fefo(product, 10)
        except StockError as e:
            if e.code == 'INSUFFICIENT_STOCK':
                print(f"Only {e.available} available")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'INVALID_QUANTITY': 'Requested quantity must be greater than zero',
        'INSUFFICIENT_STOCK': 'Insufficient stock',
        'ALLOCATION_DISCREPANCY': 'Stock allocation failed due to a discrepancy. Please try again.',
        'DATA_ACCESS': 'Failed to read the stock ledger',
        'LOT_REQUIRED': 'Lot is required for all stock movements',
        'LOT_MISMATCH': 'Lot does not belong to this product',
        'LOCATION_INACTIVE': 'Location not found or inactive',
        'REASON_REQUIRED': 'Reason is required',
    }

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)

    @property
    def is_retryable(self) -> bool:
        """Only ledger discrepancies may go away on a second attempt."""
        return self.code == 'ALLOCATION_DISCREPANCY'

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: v if isinstance(v, (int, str, type(None))) else str(v)
                for k, v in self.data.items()
            }
        }

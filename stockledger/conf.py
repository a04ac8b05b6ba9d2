"""
Stockledger configuration.

Usage in settings.py:
    STOCKLEDGER = {
        "LOCK_ON_ALLOCATE": True,
        "REQUIRE_LOT": True,
        "RECEIPT_LOT_PREFIX": "RCV-",
        "DISCREPANCY_RETRIES": 1,
        "UPDATE_STOCK_CACHE": True,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class StockledgerSettings:
    """Stockledger configuration settings."""

    # Lock the product row while allocating (SELECT ... FOR UPDATE)
    LOCK_ON_ALLOCATE: bool = True

    # Manual movements must name a lot
    REQUIRE_LOT: bool = True

    # Prefix for lot codes generated on receipt
    RECEIPT_LOT_PREFIX: str = "RCV-"

    # Whole-sale retries after an allocation discrepancy (0 = never retry)
    DISCREPANCY_RETRIES: int = 1

    # Keep Product.stock_quantity in step with the ledger
    UPDATE_STOCK_CACHE: bool = True


def get_stockledger_settings() -> StockledgerSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKLEDGER", {})
    return StockledgerSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockledgerSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stockledger_settings(), name)


stockledger_settings = _LazySettings()

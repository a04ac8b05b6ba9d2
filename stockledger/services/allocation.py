"""
FEFO allocation — which lots a requested quantity is taken from.

Allocation only plans. Turning a plan into ledger rows is done by
StockMovements.issue_fefo inside the same transaction.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable

from django.db import transaction

from stockledger.conf import stockledger_settings
from stockledger.exceptions import StockError
from stockledger.models.product import Product
from stockledger.services.queries import LotBalance, StockQueries, _read_error, product_pk

logger = logging.getLogger('stockledger')


@dataclass(frozen=True)
class Allocation:
    """Take ``quantity`` units from lot ``lot_id``."""

    lot_id: uuid.UUID
    quantity: int


def is_positive_quantity(quantity) -> bool:
    """Strictly positive integer (bools are not quantities)."""
    return isinstance(quantity, int) and not isinstance(quantity, bool) and quantity > 0


def lock_product(product_id, using: str | None = None) -> None:
    """
    Row-lock the product for the rest of the current transaction.

    Every movement write updates this row too, so holding the lock
    serializes allocations and debits of the same product.
    No-op on backends without SELECT ... FOR UPDATE.

    Raises:
        StockError('DATA_ACCESS'): If the lock query fails
    """
    try:
        list(
            Product.objects.using(using)
            .select_for_update()
            .filter(pk=product_id)
            .values_list('pk', flat=True)
        )
    except Exception as exc:
        logger.exception(f"Error locking product {product_id}")
        raise _read_error(exc, 'stock', product_id) from exc


def plan_fefo(lots: Iterable[LotBalance], quantity: int, product_id=None) -> list[Allocation]:
    """
    Greedy walk over FEFO-ordered lots.

    Takes min(remaining, balance) from each lot until the request is met.
    Lots that are not needed get no entry.

    Raises:
        StockError('ALLOCATION_DISCREPANCY'): If the lots cannot cover the
            quantity (unlotted stock, or a write slipped in between reads)
    """
    allocations = []
    remaining = quantity

    for lot in lots:
        if remaining <= 0:
            break
        if lot.balance <= 0:
            continue

        take = min(remaining, lot.balance)
        allocations.append(Allocation(lot_id=lot.lot_id, quantity=take))
        remaining -= take

    if remaining > 0:
        logger.error(
            f"Stock discrepancy for product {product_id}. "
            f"Could not allocate {remaining} of {quantity} units."
        )
        raise StockError('ALLOCATION_DISCREPANCY', product_id=str(product_id))

    return allocations


class StockAllocation:
    """FEFO allocation planning."""

    @classmethod
    def allocate_fefo(cls, product, quantity: int, using: str | None = None) -> list[Allocation]:
        """
        Plan which lots ``quantity`` units of ``product`` come from.

        1. Rejects non-positive quantities before touching the database
        2. Checks the product total covers the request
        3. Walks lots with balance, soonest expiry first

        Returns:
            Allocations whose quantities sum exactly to ``quantity``

        Raises:
            StockError('INVALID_QUANTITY'): quantity is not a positive int
            StockError('INSUFFICIENT_STOCK'): total stock < quantity
            StockError('ALLOCATION_DISCREPANCY'): lots can't cover a total
                that claimed to be sufficient
            StockError('DATA_ACCESS'): ledger read failed

        Concurrency:
            - Runs under transaction.atomic() (savepoint when nested)
            - Locks the product row when LOCK_ON_ALLOCATE is set
            - Callers must write the debits in the same transaction
        """
        if not is_positive_quantity(quantity):
            logger.warning(f"Rejected allocation of {quantity!r} for product {product_pk(product)}")
            raise StockError('INVALID_QUANTITY', requested=quantity)

        product_id = product_pk(product)
        logger.debug(f"Allocating {quantity} of product {product_id} using FEFO")

        with transaction.atomic(using=using):
            if stockledger_settings.LOCK_ON_ALLOCATE:
                lock_product(product_id, using=using)

            total = StockQueries.product_stock(product_id, using=using)
            if total < quantity:
                logger.warning(
                    f"Insufficient stock for product {product_id}. "
                    f"Requested: {quantity}, Available: {total}"
                )
                raise StockError(
                    'INSUFFICIENT_STOCK',
                    f"Insufficient stock for product {product_id}. "
                    f"Requested: {quantity}, Available: {total}",
                    product_id=str(product_id),
                    requested=quantity,
                    available=total,
                )

            lots = StockQueries.lots_with_balance(product_id, using=using)
            allocations = plan_fefo(lots, quantity, product_id)

        logger.info(
            "stock.allocate_fefo",
            extra={
                "product": str(product_id),
                "qty": quantity,
                "lots": [str(a.lot_id) for a in allocations],
            },
        )
        return allocations

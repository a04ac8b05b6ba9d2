"""
Stock checkout — debit a whole sale in one transaction.

Usage:
    reference = StockMovement.make_reference(ReferenceKind.TRANSACTION, sale.pk)
    stock.sell([(milk, 2), (bread, 1)], location=store, reference=reference)
"""

import logging
from typing import Iterable

from django.db import transaction

from stockledger.conf import stockledger_settings
from stockledger.exceptions import StockError
from stockledger.models.location import Location
from stockledger.services.allocation import is_positive_quantity
from stockledger.services.movements import StockMovements
from stockledger.services.queries import product_pk

logger = logging.getLogger('stockledger')


class StockCheckout:
    """Sale-level stock debits."""

    @classmethod
    def sell(cls, lines: Iterable[tuple], location: Location | None = None,
             reference: str = '', user=None, using: str | None = None):
        """
        Debit every line of a sale using FEFO.

        Lines are (product, quantity) pairs, processed in order inside one
        transaction: a failing line rolls back all of them. A product listed
        twice sees the debits of its earlier line.

        Outside an ambient transaction an ALLOCATION_DISCREPANCY retries the
        whole sale up to DISCREPANCY_RETRIES times. Inside one it propagates,
        since the caller's transaction is already tainted.

        Returns:
            All created movements

        Raises:
            StockError('INVALID_QUANTITY'): Before any I/O, for a bad line
            StockError('LOCATION_INACTIVE'): Location missing or inactive
            StockError('INSUFFICIENT_STOCK'): A line can't be covered
            StockError('ALLOCATION_DISCREPANCY'): Retries exhausted
        """
        lines = [(product, quantity) for product, quantity in lines]
        for product, quantity in lines:
            if not is_positive_quantity(quantity):
                raise StockError(
                    'INVALID_QUANTITY',
                    requested=quantity,
                    product_id=str(product_pk(product)),
                )

        retries = stockledger_settings.DISCREPANCY_RETRIES
        if transaction.get_connection(using).in_atomic_block:
            retries = 0

        attempt = 0
        while True:
            try:
                return cls._sell_once(lines, location, reference, user, using)
            except StockError as exc:
                if not exc.is_retryable or attempt >= retries:
                    raise
                attempt += 1
                logger.warning(
                    f"Sale {reference or '-'} hit an allocation discrepancy, "
                    f"retrying ({attempt}/{retries})"
                )

    @classmethod
    def _sell_once(cls, lines, location, reference, user, using):
        with transaction.atomic(using=using):
            if location is not None:
                active = Location.objects.using(using).filter(
                    pk=location.pk,
                    is_active=True,
                ).exists()
                if not active:
                    raise StockError('LOCATION_INACTIVE', location=str(location))

            moves = []
            for product, quantity in lines:
                moves.extend(StockMovements.issue_fefo(
                    quantity,
                    product,
                    location=location,
                    reference=reference,
                    user=user,
                    using=using,
                ))

        logger.info(
            "stock.sell",
            extra={
                "reference": reference,
                "lines": len(lines),
                "moves": len(moves),
                "location": str(location),
            },
        )
        return moves

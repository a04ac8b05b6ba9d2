"""
Stock queries — read-only operations.

Every balance is derived from the movement ledger on each call.
Product.stock_quantity is never read here.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date

from django.db import DatabaseError
from django.db.models import F, Sum
from django.db.models.functions import Coalesce

from stockledger.exceptions import StockError
from stockledger.models.lot import ProductLot
from stockledger.models.movement import StockMovement

logger = logging.getLogger('stockledger')


def product_pk(product):
    """Accept a Product instance or its identifier."""
    return getattr(product, 'pk', product)


@dataclass(frozen=True)
class LotBalance:
    """A lot together with its derived balance."""

    lot_id: uuid.UUID
    lot_code: str
    product_id: uuid.UUID
    expires_on: date | None
    balance: int


def _read_error(exc: Exception, subject: str, product_id) -> StockError:
    """Wrap a failed ledger read, keeping the product id for traceability."""
    if isinstance(exc, DatabaseError):
        message = f"Failed to get {subject} for product {product_id}: {exc}"
    else:
        message = f"An unknown error occurred while getting {subject} for product {product_id}"
    return StockError('DATA_ACCESS', message, product_id=str(product_id))


class StockQueries:
    """Read-only stock query methods."""

    @classmethod
    def product_stock(cls, product, using: str | None = None) -> int:
        """
        Total on-hand quantity of a product.

        Sums every movement of the product across all lots and all
        locations. A product without movements has 0 stock.

        Args:
            product: Product object or its UUID
            using: Database alias (joins the ambient transaction on it)

        Raises:
            StockError('DATA_ACCESS'): If the ledger cannot be read
        """
        product_id = product_pk(product)
        try:
            total = StockMovement.objects.using(using).filter(
                product_id=product_id,
            ).aggregate(
                t=Coalesce(Sum('quantity'), 0)
            )['t']
        except Exception as exc:
            logger.exception(f"Error getting product stock for {product_id}")
            raise _read_error(exc, 'stock', product_id) from exc

        total = int(total or 0)
        logger.debug(f"Total stock for product {product_id} is {total}")
        return total

    @classmethod
    def lots_with_balance(cls, product, using: str | None = None) -> list[LotBalance]:
        """
        Lots of a product holding positive stock, in FEFO order.

        Ordering: expires_on ascending, lots without expiry last.
        Ties: oldest lot first, then lot id.

        The balance filter is applied to the summed movements (HAVING),
        so a lot whose receipts were fully sold never shows up.

        Raises:
            StockError('DATA_ACCESS'): If the ledger cannot be read
        """
        product_id = product_pk(product)
        try:
            rows = list(
                ProductLot.objects.using(using)
                .filter(product_id=product_id)
                .in_stock()
                .order_by(F('expires_on').asc(nulls_last=True), 'created_at', 'pk')
                .values('pk', 'lot_code', 'product_id', 'expires_on', 'balance')
            )
        except Exception as exc:
            logger.exception(f"Error getting lots with balance for {product_id}")
            raise _read_error(exc, 'lots', product_id) from exc

        lots = [
            LotBalance(
                lot_id=row['pk'],
                lot_code=row['lot_code'],
                product_id=row['product_id'],
                expires_on=row['expires_on'],
                balance=int(row['balance']),
            )
            for row in rows
        ]
        logger.debug(f"Found {len(lots)} lots with positive balance for product {product_id}")
        return lots

    @classmethod
    def location_stock(cls, product, location, lot: ProductLot | None = None,
                       using: str | None = None) -> int:
        """
        On-hand quantity of a product at one location.

        Args:
            product: Product object or its UUID
            location: Location object or id (None = movements without location)
            lot: Restrict to one lot (None = all lots)
        """
        product_id = product_pk(product)
        qs = StockMovement.objects.using(using).filter(
            product_id=product_id,
            location=location,
        )
        if lot is not None:
            qs = qs.filter(lot=lot)

        try:
            total = qs.aggregate(t=Coalesce(Sum('quantity'), 0))['t']
        except Exception as exc:
            logger.exception(f"Error getting location stock for {product_id}")
            raise _read_error(exc, 'location stock', product_id) from exc
        return int(total or 0)

    @classmethod
    def lot_balance(cls, lot: ProductLot, using: str | None = None) -> int:
        """Summed movements of a single lot."""
        try:
            total = StockMovement.objects.using(using).filter(
                lot_id=lot.pk,
            ).aggregate(
                t=Coalesce(Sum('quantity'), 0)
            )['t']
        except Exception as exc:
            logger.exception(f"Error getting balance of lot {lot.pk}")
            raise _read_error(exc, 'lot balance', lot.product_id) from exc
        return int(total or 0)

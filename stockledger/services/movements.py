"""
Stock movements — state-changing operations (receive, record, adjust,
transfer, issue_fefo).

All methods use transaction.atomic() with appropriate locking and only
ever insert ledger rows.
"""

import logging
import secrets

from django.db import transaction

from stockledger.conf import stockledger_settings
from stockledger.exceptions import StockError
from stockledger.models.enums import MovementType
from stockledger.models.lot import ProductLot
from stockledger.models.movement import StockMovement
from stockledger.services.allocation import StockAllocation, is_positive_quantity, lock_product
from stockledger.services.queries import StockQueries, product_pk

logger = logging.getLogger('stockledger')


def _generate_lot_code() -> str:
    return f"{stockledger_settings.RECEIPT_LOT_PREFIX}{secrets.token_hex(5).upper()}"


class StockMovements:
    """State-changing stock movement methods."""

    @classmethod
    def receive(cls, quantity, product, lot_code='', expires_on=None,
                location=None, reference='', user=None, using=None, **metadata):
        """
        Stock entry.

        Reuses the product's lot with ``lot_code`` or creates it (blank
        codes get a generated one). A new expiry date overwrites the
        existing lot's. Creates one RECEIPT movement with positive quantity.

        Concurrency:
            - Runs under transaction.atomic()
            - Locks an existing lot with select_for_update()
        """
        if not is_positive_quantity(quantity):
            raise StockError('INVALID_QUANTITY', requested=quantity)

        product_id = product_pk(product)

        with transaction.atomic(using=using):
            lot = None
            if lot_code:
                lot = ProductLot.objects.using(using).select_for_update().filter(
                    product_id=product_id,
                    lot_code=lot_code,
                ).first()

            if lot is None:
                lot = ProductLot.objects.db_manager(using).create(
                    product_id=product_id,
                    lot_code=lot_code or _generate_lot_code(),
                    expires_on=expires_on,
                )
            elif expires_on is not None and lot.expires_on != expires_on:
                lot.expires_on = expires_on
                lot.save(update_fields=['expires_on'])

            movement = StockMovement.objects.db_manager(using).create(
                product_id=product_id,
                lot=lot,
                location=location,
                movement_type=MovementType.RECEIPT,
                quantity=quantity,
                reference=reference,
                user=user,
                metadata=metadata,
            )

        logger.info(
            "stock.receive",
            extra={
                "product": str(product_id),
                "qty": quantity,
                "lot": lot.lot_code,
                "location": str(location),
                "reference": reference,
            },
        )
        return movement

    @classmethod
    def record(cls, quantity, product, movement_type, lot=None, location=None,
               reference='', user=None, using=None, **metadata):
        """
        Manual movement of any type.

        The sign follows the type: RECEIPT/RETURN inbound, SALE outbound,
        ADJUSTMENT/TRANSFER as given.

        Raises:
            StockError('INVALID_QUANTITY'): If quantity is zero or not an int
            StockError('LOT_REQUIRED'): If no lot and REQUIRE_LOT is set
            StockError('LOT_MISMATCH'): If the lot belongs to another product
            StockError('INSUFFICIENT_STOCK'): If an outbound movement exceeds
                the lot balance

        Concurrency:
            - Runs under transaction.atomic()
            - Outbound: locks the product row, verifies the lot after lock
        """
        movement_type = MovementType(movement_type)
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity == 0:
            raise StockError('INVALID_QUANTITY', 'Quantity cannot be zero', requested=quantity)

        product_id = product_pk(product)

        if lot is None and stockledger_settings.REQUIRE_LOT:
            raise StockError('LOT_REQUIRED', product_id=str(product_id))

        if lot is not None and str(lot.product_id) != str(product_id):
            raise StockError('LOT_MISMATCH', lot=lot.lot_code, product_id=str(product_id))

        signed = movement_type.signed(quantity)

        with transaction.atomic(using=using):
            if signed < 0 and lot is not None:
                lock_product(product_id, using=using)
                balance = StockQueries.lot_balance(lot, using=using)
                if balance < -signed:
                    logger.warning(
                        f"Insufficient stock in lot {lot.lot_code}. "
                        f"Requested: {-signed}, Available: {balance}"
                    )
                    raise StockError(
                        'INSUFFICIENT_STOCK',
                        f"Insufficient stock in lot {lot.lot_code}. "
                        f"Requested: {-signed}, Available: {balance}",
                        product_id=str(product_id),
                        requested=-signed,
                        available=balance,
                    )

            movement = StockMovement.objects.db_manager(using).create(
                product_id=product_id,
                lot=lot,
                location=location,
                movement_type=movement_type,
                quantity=signed,
                reference=reference,
                user=user,
                metadata=metadata,
            )

        logger.info(
            "stock.record",
            extra={
                "product": str(product_id),
                "type": movement_type.value,
                "qty": signed,
                "reference": reference,
            },
        )
        return movement

    @classmethod
    def adjust(cls, lot, new_quantity, reason, location=None, user=None, using=None):
        """
        Inventory count correction for a lot.

        Writes the ADJUSTMENT delta new_quantity - current balance.
        Returns None when the count already matches.

        Raises:
            StockError('REASON_REQUIRED'): If reason is empty
            StockError('INVALID_QUANTITY'): If new_quantity is negative
        """
        if not reason:
            raise StockError('REASON_REQUIRED')

        if not isinstance(new_quantity, int) or isinstance(new_quantity, bool) or new_quantity < 0:
            raise StockError('INVALID_QUANTITY', 'Counted quantity cannot be negative',
                             requested=new_quantity)

        with transaction.atomic(using=using):
            lock_product(lot.product_id, using=using)
            delta = new_quantity - StockQueries.lot_balance(lot, using=using)

            if delta == 0:
                return None

            move = StockMovement.objects.db_manager(using).create(
                product_id=lot.product_id,
                lot=lot,
                location=location,
                movement_type=MovementType.ADJUSTMENT,
                quantity=delta,
                reference=reason,
                user=user,
            )

        logger.info(
            "stock.adjust",
            extra={
                "lot": lot.lot_code,
                "delta": delta,
                "reason": reason,
            },
        )
        return move

    @classmethod
    def transfer(cls, quantity, lot, from_location, to_location,
                 reference='', user=None, using=None):
        """
        Move lot stock between locations.

        Writes two TRANSFER movements (out of from_location, into
        to_location); the product total does not change.

        Raises:
            StockError('INVALID_QUANTITY'): If quantity <= 0
            StockError('LOCATION_INACTIVE'): If to_location is inactive
            StockError('INSUFFICIENT_STOCK'): If from_location holds less
                of the lot than requested
        """
        if not is_positive_quantity(quantity):
            raise StockError('INVALID_QUANTITY', requested=quantity)

        if not to_location.is_active:
            raise StockError('LOCATION_INACTIVE', location=to_location.code)

        with transaction.atomic(using=using):
            lock_product(lot.product_id, using=using)
            available = StockQueries.location_stock(
                lot.product_id, from_location, lot=lot, using=using,
            )
            if available < quantity:
                raise StockError(
                    'INSUFFICIENT_STOCK',
                    f"Insufficient stock of lot {lot.lot_code} at {from_location}. "
                    f"Requested: {quantity}, Available: {available}",
                    product_id=str(lot.product_id),
                    requested=quantity,
                    available=available,
                )

            moves = [
                StockMovement.objects.db_manager(using).create(
                    product_id=lot.product_id,
                    lot=lot,
                    location=location,
                    movement_type=MovementType.TRANSFER,
                    quantity=signed,
                    reference=reference,
                    user=user,
                )
                for location, signed in ((from_location, -quantity), (to_location, quantity))
            ]

        logger.info(
            "stock.transfer",
            extra={
                "lot": lot.lot_code,
                "qty": quantity,
                "from": str(from_location),
                "to": str(to_location),
            },
        )
        return moves

    @classmethod
    def issue_fefo(cls, quantity, product, location=None, reference='', user=None,
                   movement_type=MovementType.SALE, using=None):
        """
        Stock exit following FEFO.

        Plans the allocation and writes one negative movement per
        allocated lot, in one transaction.

        Returns:
            Created movements, in allocation order

        Raises:
            Everything StockAllocation.allocate_fefo raises

        Concurrency:
            - Runs under transaction.atomic()
            - The product lock taken by allocation is held until the
              debits are written
        """
        movement_type = MovementType(movement_type)
        product_id = product_pk(product)

        with transaction.atomic(using=using):
            allocations = StockAllocation.allocate_fefo(product_id, quantity, using=using)

            moves = [
                StockMovement.objects.db_manager(using).create(
                    product_id=product_id,
                    lot_id=allocation.lot_id,
                    location=location,
                    movement_type=movement_type,
                    quantity=-allocation.quantity,
                    reference=reference,
                    user=user,
                )
                for allocation in allocations
            ]

        logger.info(
            "stock.issue_fefo",
            extra={
                "product": str(product_id),
                "qty": quantity,
                "moves": len(moves),
                "reference": reference,
            },
        )
        return moves

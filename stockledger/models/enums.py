"""
Enums for Stockledger models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class MovementType(models.TextChoices):
    """
    Why stock changed hands.

    RECEIPT:    Goods received from a supplier (always inbound)
    RETURN:     Customer return back into stock (always inbound)
    SALE:       Sold at the counter or kiosk (always outbound)
    ADJUSTMENT: Count correction, either direction
    TRANSFER:   Leg of an inter-location move, either direction
    """
    RECEIPT = 'RECEIPT', _('Receipt')
    RETURN = 'RETURN', _('Return')
    SALE = 'SALE', _('Sale')
    ADJUSTMENT = 'ADJUSTMENT', _('Adjustment')
    TRANSFER = 'TRANSFER', _('Transfer')

    def signed(self, quantity: int) -> int:
        """Apply this type's direction to a quantity."""
        if self in (MovementType.RECEIPT, MovementType.RETURN):
            return abs(quantity)
        if self == MovementType.SALE:
            return -abs(quantity)
        return quantity


class ReferenceKind(models.TextChoices):
    """Prefix of a movement reference (``<kind>:<id>``)."""
    TRANSACTION = 'tx', _('Sale transaction')
    PURCHASE_ORDER = 'po', _('Purchase order')

"""
StockMovement model — Immutable ledger of quantity changes.
"""

import uuid

from django.conf import settings
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockledger.conf import stockledger_settings
from stockledger.models.enums import MovementType, ReferenceKind


class StockMovementQuerySet(models.QuerySet):
    """QuerySet that refuses bulk rewrites of the ledger."""

    def update(self, **kwargs):
        raise ValueError(
            "Stock movements are immutable. "
            "To correct, create a new movement with the inverse quantity."
        )

    def delete(self):
        raise ValueError(
            "Stock movements are immutable. "
            "To reverse, create a new movement with the inverse quantity."
        )


class StockMovement(models.Model):
    """
    Immutable record of a quantity change.

    Rules:
    - NEVER update() or delete()
    - Corrections are new movements with the inverse quantity
    - Bumps the Product.stock_quantity cache atomically on save()

    The sum of movements for a product (or a lot) is its balance.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('Product'),
    )
    lot = models.ForeignKey(
        'stockledger.ProductLot',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name=_('Lot'),
        help_text=_('Empty = unlotted stock'),
    )
    location = models.ForeignKey(
        'stockledger.Location',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name=_('Location'),
    )

    movement_type = models.CharField(
        max_length=20,
        choices=MovementType.choices,
        verbose_name=_('Type'),
    )
    quantity = models.IntegerField(
        verbose_name=_('Quantity'),
        help_text=_('Positive = inbound, Negative = outbound'),
    )

    # External reference (tx:<id>, po:<id>, free text)
    reference = models.CharField(
        max_length=255,
        blank=True,
        default='',
        verbose_name=_('Reference'),
    )
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))

    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Created at'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('User'),
    )

    objects = StockMovementQuerySet.as_manager()

    class Meta:
        verbose_name = _('Stock movement')
        verbose_name_plural = _('Stock movements')
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['product', 'created_at'], name='stockledger_product_e1a2b3_idx'),
            models.Index(fields=['lot', 'created_at'], name='stockledger_lot_id_4c5d6e_idx'),
            models.Index(fields=['product', 'location'], name='stockledger_product_7f8a9b_idx'),
        ]

    @staticmethod
    def make_reference(kind: ReferenceKind | str, pk) -> str:
        """Build a reference tag such as ``tx:981`` or ``po:12``."""
        return f"{ReferenceKind(kind).value}:{pk}"

    def save(self, *args, **kwargs):
        """Save movement and update the product cache atomically."""
        if not self._state.adding:
            raise ValueError(
                "Stock movements are immutable. "
                "To correct, create a new movement with the inverse quantity."
            )

        if not self.quantity:
            raise ValueError("Movement quantity cannot be zero")

        # product_id may still be the caller's string until the row is saved
        if self.lot_id is not None and str(self.lot.product_id) != str(self.product_id):
            raise ValueError("Lot does not belong to the movement's product")

        with transaction.atomic(using=kwargs.get('using')):
            super().save(*args, **kwargs)

            if stockledger_settings.UPDATE_STOCK_CACHE:
                # Import here to avoid circular import
                from stockledger.models.product import Product

                Product.objects.using(self._state.db).filter(pk=self.product_id).update(
                    stock_quantity=F('stock_quantity') + self.quantity,
                    updated_at=timezone.now(),
                )

    def delete(self, *args, **kwargs):
        """Prevent deletion — movements are immutable."""
        raise ValueError(
            "Stock movements are immutable. "
            "To reverse, create a new movement with the inverse quantity."
        )

    def __str__(self) -> str:
        signal = '+' if self.quantity > 0 else ''
        return f"{signal}{self.quantity} {self.movement_type} | {self.reference}"

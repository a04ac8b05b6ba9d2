"""
Product model — What is stocked.
"""

import logging
import uuid

from django.db import models
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

logger = logging.getLogger('stockledger')


class Product(models.Model):
    """
    A stocked product, identified by a stable UUID.

    stock_quantity is a denormalized cache kept for display and legacy
    readers. The movement ledger is the only source of truth; use
    recalculate() to bring the cache back in line with it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    barcode = models.CharField(
        max_length=64,
        blank=True,
        default='',
        db_index=True,
        verbose_name=_('Barcode'),
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))

    # Display cache (updated by StockMovement.save)
    stock_quantity = models.IntegerField(
        default=0,
        verbose_name=_('Stock quantity'),
        help_text=_('Cached total. The movement ledger is authoritative.'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Product')
        verbose_name_plural = _('Products')
        ordering = ['name']

    def recalculate(self) -> int:
        """
        Recalculate stock_quantity from the movement ledger.

        Use for:
        - Integrity audit
        - Correction after detected drift

        Returns:
            Ledger total
        """
        total = self.movements.aggregate(
            t=Coalesce(Sum('quantity'), 0)
        )['t']

        if total != self.stock_quantity:
            old = self.stock_quantity
            self.stock_quantity = total
            self.save(update_fields=['stock_quantity', 'updated_at'])

            logger.warning(
                f"Product {self.pk} recalculated: {old} → {total} "
                f"(diff: {total - old})"
            )

        return total

    def __str__(self) -> str:
        return self.name

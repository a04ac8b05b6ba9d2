"""
ProductLot model — receipt batches of a product with their own expiry.

A lot's balance is never stored. It is the sum of the movements booked
against it, so a lot "closes" by itself once its movements sum to zero.

Usage:
    lot = ProductLot.objects.create(
        product=milk,
        lot_code="L-2024-0115",
        expires_on=date(2024, 1, 15),
    )

    stock.receive(50, milk, lot_code=lot.lot_code)
    ProductLot.objects.for_product(milk).in_stock()
"""

import uuid
from datetime import date

from django.db import models
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _


class ProductLotQuerySet(models.QuerySet):
    """Custom QuerySet for ProductLot with convenience filters."""

    def for_product(self, product):
        """Filter lots for a product (instance or id)."""
        return self.filter(product_id=getattr(product, 'pk', product))

    def expiring_before(self, day):
        """Lots expiring on or before the given date."""
        return self.filter(expires_on__lte=day, expires_on__isnull=False)

    def expired(self):
        """Lots past their expiry date."""
        return self.filter(expires_on__lt=date.today())

    def with_balance(self):
        """Annotate each lot with the sum of its movements."""
        return self.annotate(balance=Coalesce(Sum('movements__quantity'), 0))

    def in_stock(self):
        """Lots whose summed movements are strictly positive (HAVING)."""
        return self.with_balance().filter(balance__gt=0)


class ProductLot(models.Model):
    """
    Receipt batch of a product.

    Key use cases:
    - FEFO depletion: soonest expiry is sold first
    - Unexpiring stock (expires_on=None) is sold last
    - Recall: "find all movements of lot X"
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    lot_code = models.CharField(
        max_length=50,
        verbose_name=_('Lot code'),
        help_text=_('Human-readable code, unique per product.'),
    )
    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.PROTECT,
        related_name='lots',
        verbose_name=_('Product'),
    )
    expires_on = models.DateField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Expires on'),
        help_text=_('Last day the lot can be sold. Empty = does not expire.'),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created at'))

    objects = ProductLotQuerySet.as_manager()

    class Meta:
        verbose_name = _('Product lot')
        verbose_name_plural = _('Product lots')
        ordering = ['expires_on', 'created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'lot_code'],
                name='unique_lot_code_per_product',
            ),
        ]

    @property
    def is_expired(self) -> bool:
        """Is this lot past its expiry date?"""
        if self.expires_on is None:
            return False
        return date.today() > self.expires_on

    def __str__(self) -> str:
        expiry = f" (exp:{self.expires_on})" if self.expires_on else ""
        return f"Lot {self.lot_code}{expiry}"

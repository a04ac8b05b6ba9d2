"""
Location model — Where stock is sold or kept.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Location(models.Model):
    """
    A store, warehouse or kiosk that movements can be booked against.

    Locations are stable entities, created during system setup. Inactive
    locations keep their history but cannot take new sales.

    Examples:
        Location.objects.create(code='main-store', name='Main Store')
        Location.objects.create(code='warehouse', name='Back Warehouse')
    """

    code = models.SlugField(
        unique=True,
        max_length=50,
        verbose_name=_('Code'),
        help_text=_('Unique identifier (e.g. main-store, warehouse)'),
    )
    name = models.CharField(
        max_length=100,
        verbose_name=_('Name'),
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name=_('Active'),
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_('Metadata'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Location')
        verbose_name_plural = _('Locations')
        ordering = ['code']

    def __str__(self) -> str:
        return self.name

"""
Management command to reconcile the product stock cache with the ledger.

Usage:
    python manage.py reconcile_stock
    python manage.py reconcile_stock --dry-run
    python manage.py reconcile_stock --product 4f0c...
"""

from django.core.management.base import BaseCommand
from django.db.models import Sum
from django.db.models.functions import Coalesce

from stockledger.models import Product


class Command(BaseCommand):
    """Reconcile Product.stock_quantity with the movement ledger."""

    help = 'Recomputes cached product stock from the movement ledger'

    def add_arguments(self, parser):
        parser.add_argument(
            '--product',
            help='Only reconcile the product with this UUID'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would change without saving'
        )

    def handle(self, *args, **options):
        products = Product.objects.all()
        if options['product']:
            products = products.filter(pk=options['product'])

        if options['dry_run']:
            drifted = [
                p for p in products.annotate(ledger=Coalesce(Sum('movements__quantity'), 0))
                if p.ledger != p.stock_quantity
            ]
            for product in drifted:
                self.stdout.write(f'{product}: {product.stock_quantity} -> {product.ledger}')
            self.stdout.write(f'{len(drifted)} product(s) would be corrected')
            return

        count = 0
        for product in products:
            before = product.stock_quantity
            if product.recalculate() != before:
                count += 1

        self.stdout.write(
            self.style.SUCCESS(f'{count} product(s) corrected')
        )

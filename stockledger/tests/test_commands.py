"""
Tests for the reconcile_stock management command.
"""

from io import StringIO

import pytest
from django.core.management import call_command

from stockledger.models import Product


pytestmark = pytest.mark.django_db


def _drift(product, value):
    Product.objects.filter(pk=product.pk).update(stock_quantity=value)


def test_reconcile_fixes_drifted_cache(product, other_product, make_lot):
    """Drifted products are rewritten from the ledger."""
    make_lot(product, 'L1', 12)
    make_lot(other_product, 'B1', 3)
    _drift(product, 99)
    out = StringIO()

    call_command('reconcile_stock', stdout=out)

    product.refresh_from_db()
    other_product.refresh_from_db()
    assert product.stock_quantity == 12
    assert other_product.stock_quantity == 3
    assert '1 product(s) corrected' in out.getvalue()


def test_reconcile_dry_run(product, make_lot):
    """Dry run reports without saving."""
    make_lot(product, 'L1', 12)
    _drift(product, 99)
    out = StringIO()

    call_command('reconcile_stock', '--dry-run', stdout=out)

    product.refresh_from_db()
    assert product.stock_quantity == 99
    assert '99 -> 12' in out.getvalue()
    assert '1 product(s) would be corrected' in out.getvalue()


def test_reconcile_single_product(product, other_product, make_lot):
    """--product limits the run to one product."""
    make_lot(product, 'L1', 12)
    make_lot(other_product, 'B1', 3)
    _drift(product, 0)
    _drift(other_product, 0)

    call_command('reconcile_stock', '--product', str(product.pk), stdout=StringIO())

    product.refresh_from_db()
    other_product.refresh_from_db()
    assert product.stock_quantity == 12
    assert other_product.stock_quantity == 0

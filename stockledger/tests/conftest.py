"""
Pytest fixtures for Stockledger tests.
"""

from datetime import date, timedelta

import pytest
from django.contrib.auth import get_user_model

from stockledger.models import Location, MovementType, Product, ProductLot, StockMovement


User = get_user_model()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='cashier',
        password='testpass123'
    )


@pytest.fixture
def product(db):
    """Create a perishable test product."""
    return Product.objects.create(name='Whole Milk 1L', barcode='7790001000011')


@pytest.fixture
def other_product(db):
    """Create a second product to check isolation."""
    return Product.objects.create(name='Sourdough Bread', barcode='7790001000028')


@pytest.fixture
def store(db):
    """Main store location."""
    return Location.objects.create(code='main-store', name='Main Store')


@pytest.fixture
def warehouse(db):
    """Back warehouse location."""
    return Location.objects.create(code='warehouse', name='Back Warehouse')


@pytest.fixture
def closed_store(db):
    """Inactive location."""
    return Location.objects.create(code='old-kiosk', name='Old Kiosk', is_active=False)


@pytest.fixture
def make_lot(db):
    """
    Factory: lot with an opening balance booked as a RECEIPT movement.

        lot = make_lot(product, 'L1', 100, date(2024, 1, 15))
    """
    def _make_lot(product, lot_code, balance=0, expires_on=None, location=None):
        lot = ProductLot.objects.create(
            product=product,
            lot_code=lot_code,
            expires_on=expires_on,
        )
        if balance:
            StockMovement.objects.create(
                product=product,
                lot=lot,
                location=location,
                movement_type=MovementType.RECEIPT,
                quantity=balance,
                reference='po:seed',
            )
        return lot

    return _make_lot


@pytest.fixture
def today():
    """Return today's date."""
    return date.today()


@pytest.fixture
def next_week():
    """Return the date a week from today."""
    return date.today() + timedelta(days=7)

"""
Tests for stock.sell(): whole-sale debits, rollback and retry.
"""

from datetime import date
from unittest.mock import patch

import pytest
from django.db import transaction

from stockledger import stock, StockError
from stockledger.models import MovementType, ReferenceKind, StockMovement
from stockledger.services.allocation import StockAllocation


class TestStockSell:
    """Tests for stock.sell() inside the test transaction."""

    pytestmark = pytest.mark.django_db

    def test_sell_debits_every_line(self, product, other_product, make_lot, store):
        """Each line is debited FEFO with the sale reference."""
        make_lot(product, 'M1', 10, date(2024, 1, 1))
        make_lot(product, 'M2', 10, date(2024, 2, 1))
        make_lot(other_product, 'B1', 5)
        reference = StockMovement.make_reference(ReferenceKind.TRANSACTION, 981)

        moves = stock.sell([(product, 12), (other_product, 2)], location=store,
                           reference=reference)

        assert [m.quantity for m in moves] == [-10, -2, -2]
        assert {m.reference for m in moves} == {'tx:981'}
        assert stock.product_stock(product) == 8
        assert stock.product_stock(other_product) == 3

    def test_sell_rolls_back_all_lines(self, product, other_product, make_lot):
        """A failing line undoes the lines before it."""
        make_lot(product, 'M1', 10)
        make_lot(other_product, 'B1', 1)

        with pytest.raises(StockError) as exc:
            stock.sell([(product, 5), (other_product, 2)])

        assert exc.value.code == 'INSUFFICIENT_STOCK'
        assert not StockMovement.objects.filter(movement_type=MovementType.SALE).exists()
        assert stock.product_stock(product) == 10

    def test_same_product_twice(self, product, make_lot):
        """The second line sees the first line's debits."""
        make_lot(product, 'M1', 10)

        with pytest.raises(StockError) as exc:
            stock.sell([(product, 6), (product, 6)])

        assert exc.value.code == 'INSUFFICIENT_STOCK'
        assert exc.value.available == 4

    def test_lines_by_string_identifier(self, product, make_lot):
        """Lines may name products by id."""
        make_lot(product, 'M1', 10)

        [move] = stock.sell([(str(product.pk), 3)])

        assert move.quantity == -3
        assert stock.product_stock(product) == 7

    def test_invalid_line_before_io(self, product, django_assert_num_queries):
        """Bad quantities are refused before the database is touched."""
        with django_assert_num_queries(0):
            with pytest.raises(StockError) as exc:
                stock.sell([(product, 1), (product, 0)])

        assert exc.value.code == 'INVALID_QUANTITY'

    def test_inactive_location(self, product, make_lot, closed_store):
        """Sales can't be booked at an inactive location."""
        make_lot(product, 'M1', 10)

        with pytest.raises(StockError) as exc:
            stock.sell([(product, 1)], location=closed_store)

        assert exc.value.code == 'LOCATION_INACTIVE'

    def test_no_retry_inside_ambient_transaction(self, product, make_lot):
        """Inside the caller's transaction a discrepancy propagates at once."""
        make_lot(product, 'M1', 10)

        with patch.object(
            StockAllocation, 'allocate_fefo',
            side_effect=StockError('ALLOCATION_DISCREPANCY'),
        ) as allocate:
            with pytest.raises(StockError) as exc:
                stock.sell([(product, 1)])

        assert exc.value.code == 'ALLOCATION_DISCREPANCY'
        assert allocate.call_count == 1

    def test_joins_ambient_transaction(self, product, make_lot):
        """Debits roll back with the caller's transaction."""
        make_lot(product, 'M1', 10)

        with pytest.raises(RuntimeError):
            with transaction.atomic():
                stock.sell([(product, 3)])
                raise RuntimeError('payment declined')

        assert stock.product_stock(product) == 10


@pytest.mark.django_db(transaction=True)
class TestStockSellRetry:
    """Retry needs real commits, so these run outside the test transaction."""

    def test_retries_discrepancy_once(self, product, make_lot):
        """A transient discrepancy is retried and the sale goes through."""
        make_lot(product, 'M1', 10)
        real_allocate = StockAllocation.allocate_fefo
        calls = []

        def flaky(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                raise StockError('ALLOCATION_DISCREPANCY')
            return real_allocate(*args, **kwargs)

        with patch.object(StockAllocation, 'allocate_fefo', side_effect=flaky):
            moves = stock.sell([(product, 4)], reference='tx:2')

        assert len(calls) == 2
        assert [m.quantity for m in moves] == [-4]
        assert stock.product_stock(product) == 6

    def test_gives_up_after_retries(self, product, make_lot, settings):
        """Persistent discrepancies surface after DISCREPANCY_RETRIES."""
        settings.STOCKLEDGER = {'DISCREPANCY_RETRIES': 2}
        make_lot(product, 'M1', 10)

        with patch.object(
            StockAllocation, 'allocate_fefo',
            side_effect=StockError('ALLOCATION_DISCREPANCY'),
        ) as allocate:
            with pytest.raises(StockError) as exc:
                stock.sell([(product, 1)])

        assert exc.value.is_retryable
        assert allocate.call_count == 3

    def test_insufficient_stock_not_retried(self, product, make_lot):
        """Only discrepancies are retried."""
        make_lot(product, 'M1', 1)

        with patch.object(
            StockAllocation, 'allocate_fefo', wraps=StockAllocation.allocate_fefo,
        ) as allocate:
            with pytest.raises(StockError) as exc:
                stock.sell([(product, 2)])

        assert exc.value.code == 'INSUFFICIENT_STOCK'
        assert allocate.call_count == 1

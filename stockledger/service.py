"""
Stock Service — The single public interface for all stock operations.

Usage:
    from stockledger import stock, StockError

    stock.receive(100, milk, lot_code="L-0115", expires_on=jan_15)
    stock.product_stock(milk)             # 100
    stock.lots_with_balance(milk)         # [LotBalance(..., balance=100)]
    stock.allocate_fefo(milk, 30)         # [Allocation(lot_id=..., quantity=30)]
    stock.issue_fefo(30, milk, reference="tx:981")
"""

from stockledger.services import StockAllocation, StockCheckout, StockMovements, StockQueries


class Stock(StockQueries, StockAllocation, StockMovements, StockCheckout):
    """
    Single interface for all stock operations.

    Queries (product_stock, lots_with_balance, location_stock, lot_balance)
    never lock and never write. allocate_fefo plans without writing.
    Writers (receive, record, adjust, transfer, issue_fefo, sell) run under
    transaction.atomic() and only insert movements.

    Every method accepts ``using`` (database alias). Calling them inside
    an open transaction.atomic() block makes them part of that transaction.
    """

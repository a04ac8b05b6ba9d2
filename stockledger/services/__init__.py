"""
Stock services — modular organization of stock operations.

    from stockledger.services import StockQueries, StockAllocation, StockMovements, StockCheckout
"""

from stockledger.services.allocation import Allocation, StockAllocation, plan_fefo
from stockledger.services.checkout import StockCheckout
from stockledger.services.movements import StockMovements
from stockledger.services.queries import LotBalance, StockQueries

__all__ = [
    'Allocation',
    'LotBalance',
    'StockQueries',
    'StockAllocation',
    'StockMovements',
    'StockCheckout',
    'plan_fefo',
]

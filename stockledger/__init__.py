"""
Django Stockledger — event-sourced stock ledger with FEFO lot allocation.

Usage:
    from stockledger import stock, StockError

    stock.receive(100, milk, lot_code="L-0112", expires_on=jan_12)
    stock.product_stock(milk)        # 100
    stock.allocate_fefo(milk, 30)    # [Allocation(lot_id=..., quantity=30)]
    stock.sell([(milk, 30)], location=store, reference="tx:981")
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'stock':
        from stockledger.service import Stock
        return Stock
    elif name == 'StockError':
        from stockledger.exceptions import StockError
        return StockError
    elif name == 'Allocation':
        from stockledger.services.allocation import Allocation
        return Allocation
    elif name == 'LotBalance':
        from stockledger.services.queries import LotBalance
        return LotBalance
    elif name == 'Product':
        from stockledger.models.product import Product
        return Product
    elif name == 'Location':
        from stockledger.models.location import Location
        return Location
    elif name == 'ProductLot':
        from stockledger.models.lot import ProductLot
        return ProductLot
    elif name == 'StockMovement':
        from stockledger.models.movement import StockMovement
        return StockMovement
    elif name == 'MovementType':
        from stockledger.models.enums import MovementType
        return MovementType
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'stock',
    'StockError',
    'Allocation',
    'LotBalance',
    'Product',
    'Location',
    'ProductLot',
    'StockMovement',
    'MovementType',
]

__version__ = '0.1.0'

"""
Stockledger Models.

Core models for stock management:
- Product: What is stocked (with a display-only quantity cache)
- Location: Where stock is sold or kept
- ProductLot: Receipt batch with its own expiry
- StockMovement: Immutable ledger of changes
"""

from stockledger.models.enums import MovementType, ReferenceKind
from stockledger.models.location import Location
from stockledger.models.lot import ProductLot
from stockledger.models.movement import StockMovement
from stockledger.models.product import Product

__all__ = [
    'MovementType',
    'ReferenceKind',
    'Product',
    'Location',
    'ProductLot',
    'StockMovement',
]

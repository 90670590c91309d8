"""
Almoxarife Models.

Core models for the supply ledger:
- Product: What is tracked (individual or collective)
- Movement: Immutable ledger of purchases, deliveries, returns, disposals
"""

from almoxarife.models.enums import Category, HolderKind, MovementKind
from almoxarife.models.movement import Movement
from almoxarife.models.product import Product

__all__ = [
    'Category',
    'HolderKind',
    'MovementKind',
    'Product',
    'Movement',
]

from .auth import User
from .catalog import Product
from .carts import Cart, CartLine
from .sales import Sale, SaleLine

__all__ = [
    'User',
    'Product',
    'Cart', 'CartLine',
    'Sale', 'SaleLine',
]

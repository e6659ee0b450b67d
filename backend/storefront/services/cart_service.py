# Overview: Per-user cart operations; lines are validated against live stock but never reserve it.

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import InsufficientStockError, NotFoundError
from ..extensions import db
from ..models import Cart, CartLine, Product
from ..time_utils import utcnow
from ..validation import require_quantity
from .products_service import get_product


def _find_cart(user_id: int) -> Cart | None:
    return db.session.query(Cart).filter(Cart.user_id == user_id).first()


def get_cart(user_id: int) -> Cart:
    """Return the user's cart, creating an empty one on first access."""
    cart = _find_cart(user_id)
    if cart:
        return cart

    cart = Cart(user_id=user_id)
    db.session.add(cart)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request created it first; at most one cart per user
        db.session.rollback()
        cart = _find_cart(user_id)
    return cart


def _require_cart(user_id: int) -> Cart:
    cart = _find_cart(user_id)
    if not cart:
        raise NotFoundError("Cart not found")
    return cart


def _touch(cart: Cart) -> None:
    cart.updated_at = utcnow()


def add_line(user_id: int, product_id: int, quantity: int = 1) -> Cart:
    """
    Add a product, merging with an existing line for the same product.

    The resulting line quantity must not exceed current stock; on failure the
    cart is left untouched.
    """
    quantity = require_quantity(quantity)
    product = get_product(product_id)

    try:
        cart = _merge_line(user_id, product, quantity)
    except IntegrityError:
        # A concurrent add inserted the same product first; merge into its line
        db.session.rollback()
        cart = _merge_line(user_id, product, quantity)

    current_app.logger.info("Cart user=%s add product=%s qty=%s", user_id, product.id, quantity)
    return cart


def _merge_line(user_id: int, product: Product, quantity: int) -> Cart:
    cart = get_cart(user_id)

    line = cart.find_line(product.id)
    new_quantity = quantity + (line.quantity if line else 0)
    if new_quantity > product.stock:
        raise InsufficientStockError(product.name, requested=new_quantity, available=product.stock, product_id=product.id)

    if line:
        line.quantity = new_quantity
    else:
        cart.lines.append(CartLine(product_id=product.id, quantity=quantity))
    _touch(cart)
    db.session.commit()
    return cart


def update_line(user_id: int, product_id: int, quantity: int) -> Cart:
    """Replace the quantity of an existing line."""
    quantity = require_quantity(quantity)
    cart = _require_cart(user_id)

    line = cart.find_line(product_id)
    if not line:
        raise NotFoundError("Product not in cart")

    product = get_product(product_id)
    if quantity > product.stock:
        raise InsufficientStockError(product.name, requested=quantity, available=product.stock, product_id=product.id)

    line.quantity = quantity
    _touch(cart)
    db.session.commit()
    return cart


def remove_line(user_id: int, product_id: int) -> Cart:
    """Drop the line for product_id. Removing an absent product is a no-op."""
    cart = get_cart(user_id)

    line = cart.find_line(product_id)
    if line:
        cart.lines.remove(line)
        _touch(cart)
        db.session.commit()
    return cart


def clear_cart(user_id: int) -> Cart:
    cart = get_cart(user_id)
    cart.lines.clear()
    _touch(cart)
    db.session.commit()
    return cart

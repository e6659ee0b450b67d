"""
Sales Service - all-or-nothing sale creation

WHY: A sale both writes a Sale record and takes stock out of every product
it names. Either all of that happens or none of it does: each line is an
atomic conditional decrement inside one session transaction, and any
failure rolls the whole transaction back before the error propagates.
"""

from decimal import Decimal

from flask import current_app

from ..errors import NotFoundError, PermissionDeniedError, ValidationError
from ..extensions import db
from ..models import Sale, SaleLine, User
from ..models.sales import SALE_STATUSES, SALE_STATUS_PENDING
from ..roles import STAFF_ROLES, is_allowed
from ..validation import require_id, require_quantity
from .products_service import decrement_stock


def _parse_requested_lines(items) -> list[tuple[int, int]]:
    if not isinstance(items, list) or not items:
        raise ValidationError("products must be a non-empty list")

    requested = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"products[{i}] must be an object")
        # "product" is the key older clients send
        product_id = require_id(item.get("product_id", item.get("product")), f"products[{i}].product_id")
        quantity = require_quantity(item.get("quantity"), f"products[{i}].quantity")
        requested.append((product_id, quantity))
    return requested


def create_sale(user_id: int, items) -> Sale:
    """
    Create a sale from [{product_id, quantity}, ...] in request order.

    For each line: decrement stock (fails NotFound / InsufficientStock) and
    capture the product's current price. total = sum(price * quantity).
    Nothing is persisted unless every line succeeds.
    """
    requested = _parse_requested_lines(items)

    try:
        sale = Sale(user_id=user_id, status=SALE_STATUS_PENDING)
        total = Decimal("0")

        for product_id, quantity in requested:
            product = decrement_stock(product_id, quantity)
            unit_price = Decimal(product.price)
            sale.lines.append(SaleLine(
                product_id=product.id,
                quantity=quantity,
                unit_price=unit_price,
            ))
            total += unit_price * quantity

        sale.total = total
        db.session.add(sale)
        db.session.commit()
    except Exception:
        # Undo every decrement applied so far
        db.session.rollback()
        raise

    current_app.logger.info(
        "Created sale id=%s user=%s lines=%s total=%s", sale.id, user_id, len(requested), sale.total
    )
    return sale


def get_sale(sale_id: int) -> Sale:
    sale = db.session.get(Sale, sale_id)
    if not sale:
        raise NotFoundError("Sale not found")
    return sale


def get_sale_for(sale_id: int, requester: User) -> Sale:
    """Staff see every sale; anyone else only their own."""
    sale = get_sale(sale_id)
    if not is_allowed(requester.role, STAFF_ROLES) and sale.user_id != requester.id:
        current_app.logger.warning("User id=%s denied access to sale id=%s", requester.id, sale_id)
        raise PermissionDeniedError("Not authorized")
    return sale


def list_for_user(user_id: int) -> list[Sale]:
    return (
        db.session.query(Sale)
        .filter(Sale.user_id == user_id)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .all()
    )


def list_all() -> list[Sale]:
    return db.session.query(Sale).order_by(Sale.created_at.desc(), Sale.id.desc()).all()


def update_status(sale_id: int, status) -> Sale:
    if status not in SALE_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(SALE_STATUSES)}")

    sale = get_sale(sale_id)
    previous = sale.status
    sale.status = status
    db.session.commit()
    current_app.logger.info("Sale id=%s status %s -> %s", sale.id, previous, status)
    return sale

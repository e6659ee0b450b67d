# backend/storefront/services/products_service.py
"""
Products Service

Catalog CRUD plus the one stock mutation the system performs:
decrement_stock(), a single conditional UPDATE that cannot oversell.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy import update

from ..errors import InsufficientStockError, NotFoundError
from ..extensions import db
from ..models import CartLine, Product
from ..validation import ModelValidationPolicy, enforce_rules_product, validate_payload

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price", "stock", "image", "category"},
    required_on_create={"name", "price"},
)

PRODUCT_MUTABLE_FIELDS = PRODUCT_POLICY.writable_fields


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products() -> list[Product]:
    """All products, no pagination."""
    return db.session.query(Product).order_by(Product.id.asc()).all()


def get_product(product_id: int) -> Product:
    p = db.session.get(Product, product_id)
    if not p:
        raise NotFoundError("Product not found")
    return p


def create_product(payload: dict) -> Product:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)

    p = Product()
    apply_product_patch(p, patch)
    if p.stock is None:
        p.stock = 0

    db.session.add(p)
    db.session.commit()
    current_app.logger.info("Created product id=%s name=%s", p.id, p.name)
    return p


def update_product(product_id: int, payload: dict) -> Product:
    """
    Partial update: every key present in the payload is applied, including
    falsy values such as stock=0 or description="".
    """
    p = get_product(product_id)

    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    enforce_rules_product(patch)

    apply_product_patch(p, patch)
    db.session.commit()
    current_app.logger.info(
        "Updated product id=%s fields=%s", p.id, ",".join(sorted(patch.keys()))
    )
    return p


def delete_product(product_id: int) -> None:
    """Hard delete; the product also drops out of every cart."""
    p = get_product(product_id)
    db.session.query(CartLine).filter(CartLine.product_id == p.id).delete(synchronize_session=False)
    db.session.delete(p)
    db.session.commit()
    current_app.logger.info("Deleted product id=%s", product_id)


def decrement_stock(product_id: int, quantity: int) -> Product:
    """
    Atomically take `quantity` units out of stock.

    Emits UPDATE products SET stock = stock - :q WHERE id = :id AND stock >= :q.
    The check and the write are one statement, so concurrent sales cannot
    both pass the check. Does not commit; the caller owns the transaction.

    Raises NotFoundError or InsufficientStockError (nothing is written).
    """
    result = db.session.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )

    p = db.session.get(Product, product_id, populate_existing=True)
    if p is None:
        raise NotFoundError(f"Product {product_id} not found")
    if result.rowcount != 1:
        raise InsufficientStockError(p.name, requested=quantity, available=p.stock, product_id=p.id)
    return p

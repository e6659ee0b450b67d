# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/storefront/routes/products.py
"""
Product catalog routes.

Reads are public. Writes require the SuperUser or Admin role.
"""
from flask import Blueprint, jsonify

from ..decorators import require_auth, require_roles
from ..roles import STAFF_ROLES
from ..services import products_service
from . import json_body

products_bp = Blueprint("products", __name__, url_prefix="/products")


@products_bp.get("")
def list_products():
    """List all products (no pagination)."""
    return jsonify([p.to_dict() for p in products_service.list_products()])


@products_bp.get("/<int:product_id>")
def get_product(product_id: int):
    return jsonify(products_service.get_product(product_id).to_dict())


@products_bp.post("")
@require_auth
@require_roles(*STAFF_ROLES)
def create_product_route():
    """
    Create a new product.

    Required: name, price. Optional: description, stock, image, category.
    """
    product = products_service.create_product(json_body())
    return jsonify(product.to_dict()), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_roles(*STAFF_ROLES)
def update_product_route(product_id: int):
    """Partial update: only the fields present in the body change."""
    product = products_service.update_product(product_id, json_body())
    return jsonify(product.to_dict()), 200


@products_bp.delete("/<int:product_id>")
@require_auth
@require_roles(*STAFF_ROLES)
def delete_product_route(product_id: int):
    products_service.delete_product(product_id)
    return jsonify({"message": "Product deleted successfully"}), 200

# Overview: Flask API routes for the caller's own cart.

from flask import Blueprint, g, jsonify

from ..decorators import require_auth
from ..services import cart_service
from ..validation import require_id
from . import json_body

cart_bp = Blueprint("cart", __name__, url_prefix="/cart")


@cart_bp.get("")
@require_auth
def get_cart_route():
    return jsonify(cart_service.get_cart(g.current_user.id).to_dict())


@cart_bp.post("/add")
@require_auth
def add_to_cart_route():
    """Request body: {"product_id" (or "productId"), "quantity" (default 1)}"""
    data = json_body()
    product_id = require_id(data.get("product_id", data.get("productId")), "product_id")
    cart = cart_service.add_line(g.current_user.id, product_id, data.get("quantity", 1))
    return jsonify(cart.to_dict())


@cart_bp.put("/update/<int:product_id>")
@require_auth
def update_cart_route(product_id: int):
    """Request body: {"quantity"}"""
    data = json_body()
    cart = cart_service.update_line(g.current_user.id, product_id, data.get("quantity"))
    return jsonify(cart.to_dict())


@cart_bp.delete("/remove/<int:product_id>")
@require_auth
def remove_from_cart_route(product_id: int):
    cart = cart_service.remove_line(g.current_user.id, product_id)
    return jsonify(cart.to_dict())


@cart_bp.delete("/clear")
@require_auth
def clear_cart_route():
    cart = cart_service.clear_cart(g.current_user.id)
    return jsonify({"message": "Cart cleared successfully", "cart": cart.to_dict()})

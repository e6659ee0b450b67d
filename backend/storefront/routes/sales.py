# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/storefront/routes/sales.py
"""Sales API routes with role enforcement"""

from flask import Blueprint, g, jsonify

from ..decorators import require_auth, require_roles
from ..roles import STAFF_ROLES
from ..services import sales_service
from . import json_body


sales_bp = Blueprint("sales", __name__, url_prefix="/sales")


@sales_bp.get("")
@require_auth
@require_roles(*STAFF_ROLES)
def list_sales_route():
    """Every sale, newest first. SuperUser / Admin only."""
    return jsonify([s.to_dict() for s in sales_service.list_all()])


@sales_bp.get("/my-sales")
@require_auth
def my_sales_route():
    return jsonify([s.to_dict() for s in sales_service.list_for_user(g.current_user.id)])


@sales_bp.get("/<int:sale_id>")
@require_auth
def get_sale_route(sale_id: int):
    """Owner, Admin or SuperUser; anyone else gets 403."""
    return jsonify(sales_service.get_sale_for(sale_id, g.current_user).to_dict())


@sales_bp.post("")
@require_auth
def create_sale_route():
    """
    Create a sale for the caller.

    Request body: {"products": [{"product_id": 1, "quantity": 2}, ...]}
    """
    data = json_body()
    sale = sales_service.create_sale(g.current_user.id, data.get("products"))
    return jsonify(sale.to_dict()), 201


@sales_bp.put("/<int:sale_id>/status")
@require_auth
@require_roles(*STAFF_ROLES)
def update_status_route(sale_id: int):
    """Request body: {"status": "pending" | "completed" | "cancelled"}"""
    data = json_body()
    sale = sales_service.update_status(sale_id, data.get("status"))
    return jsonify(sale.to_dict())

from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..time_utils import to_utc_z
from .catalog import to_money


class Cart(db.Model):
    """
    One mutable cart per user.

    Lines hold (product, quantity) only. Prices are read live from the
    product at serialization time; a cart never snapshots price.
    """
    __tablename__ = "carts"
    __table_args__ = (
        db.UniqueConstraint("user_id", name="uq_carts_user"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    user = db.relationship("User", back_populates="cart")
    lines = db.relationship(
        "CartLine",
        back_populates="cart",
        order_by="CartLine.id",
        cascade="all, delete-orphan",
    )

    def find_line(self, product_id: int) -> "CartLine | None":
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def to_dict(self) -> dict:
        lines = [line.to_dict() for line in self.lines]
        total = sum((line.subtotal() for line in self.lines), Decimal("0"))
        return {
            "id": self.id,
            "user_id": self.user_id,
            "products": lines,
            "item_count": sum(line.quantity for line in self.lines),
            "total": to_money(total),
            "updated_at": to_utc_z(self.updated_at),
        }


class CartLine(db.Model):
    __tablename__ = "cart_lines"
    __table_args__ = (
        # Quantities merge; a product appears at most once per cart
        db.UniqueConstraint("cart_id", "product_id", name="uq_cart_lines_cart_product"),
        db.CheckConstraint("quantity >= 1", name="ck_cart_lines_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    cart_id = db.Column(db.Integer, db.ForeignKey("carts.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    cart = db.relationship("Cart", back_populates="lines")
    product = db.relationship("Product")

    def subtotal(self) -> Decimal:
        return Decimal(self.product.price) * self.quantity

    def to_dict(self) -> dict:
        return {
            "product": self.product.to_dict(),
            "quantity": self.quantity,
            "unit_price": to_money(self.product.price),
            "subtotal": to_money(self.subtotal()),
        }

from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .catalog import to_money

SALE_STATUS_PENDING = "pending"
SALE_STATUS_COMPLETED = "completed"
SALE_STATUS_CANCELLED = "cancelled"

SALE_STATUSES = (SALE_STATUS_PENDING, SALE_STATUS_COMPLETED, SALE_STATUS_CANCELLED)


class Sale(db.Model):
    """
    Sale transaction record.

    Immutable once written except for status. user_id and the line
    product_id values are plain references (no foreign key): a sale outlives
    deletion of its user or products and keeps the captured unit prices.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_user_created", "user_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False)

    status = db.Column(db.String(16), nullable=False, default=SALE_STATUS_PENDING, index=True)
    total = db.Column(db.Numeric(12, 2), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    user = db.relationship(
        "User",
        primaryjoin="foreign(Sale.user_id) == User.id",
        viewonly=True,
    )
    lines = db.relationship(
        "SaleLine",
        back_populates="sale",
        order_by="SaleLine.id",
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "user": self.user.to_summary() if self.user else None,
            "products": [line.to_dict() for line in self.lines],
            "total": to_money(self.total),
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class SaleLine(db.Model):
    __tablename__ = "sale_lines"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_sale_lines_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)

    # Price captured at sale time; later product price changes never touch it
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)

    sale = db.relationship("Sale", back_populates="lines")
    product = db.relationship(
        "Product",
        primaryjoin="foreign(SaleLine.product_id) == Product.id",
        viewonly=True,
    )

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product": self.product.to_dict() if self.product else None,
            "quantity": self.quantity,
            "price": to_money(self.unit_price),
            "subtotal": to_money(self.unit_price * self.quantity),
        }

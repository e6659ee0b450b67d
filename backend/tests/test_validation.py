"""
Payload validation tests for the model-driven policy layer.
"""

from decimal import Decimal

import pytest

from storefront.errors import ValidationError
from storefront.models import Product, User
from storefront.roles import Role
from storefront.services.products_service import PRODUCT_POLICY
from storefront.services.users_service import USER_POLICY
from storefront.validation import (
    MAX_INT,
    enforce_rules_product,
    enforce_rules_user,
    require_id,
    require_quantity,
    validate_payload,
)


class TestValidatePayload:

    def test_create_requires_fields(self):
        with pytest.raises(ValidationError, match="Missing required fields: name"):
            validate_payload(model=Product, payload={"price": 1}, policy=PRODUCT_POLICY, partial=False)

    def test_partial_keeps_falsy_values(self):
        patch = validate_payload(
            model=Product,
            payload={"stock": 0, "description": "", "image": None},
            policy=PRODUCT_POLICY,
            partial=True,
        )
        assert patch == {"stock": 0, "description": "", "image": None}

    def test_price_becomes_two_place_decimal(self):
        patch = validate_payload(model=Product, payload={"price": "3.5"}, policy=PRODUCT_POLICY, partial=True)
        assert patch["price"] == Decimal("3.50")

    @pytest.mark.parametrize("price", [True, "NaN", "Infinity", [], {}])
    def test_non_numeric_price_rejected(self, price):
        with pytest.raises(ValidationError):
            validate_payload(model=Product, payload={"price": price}, policy=PRODUCT_POLICY, partial=True)

    def test_name_length_limit(self):
        with pytest.raises(ValidationError, match="exceeds max length 255"):
            validate_payload(model=Product, payload={"name": "x" * 256}, policy=PRODUCT_POLICY, partial=True)

    def test_non_nullable_cannot_be_null(self):
        with pytest.raises(ValidationError, match="name cannot be null"):
            validate_payload(model=Product, payload={"name": None}, policy=PRODUCT_POLICY, partial=True)

    def test_role_coerced_to_enum(self):
        patch = validate_payload(model=User, payload={"role": "Admin"}, policy=USER_POLICY, partial=True)
        assert patch["role"] is Role.ADMIN

    def test_role_must_be_known(self):
        with pytest.raises(ValidationError, match="role must be one of"):
            validate_payload(model=User, payload={"role": "admin"}, policy=USER_POLICY, partial=True)

    @pytest.mark.parametrize("stock", [MAX_INT + 1, -(MAX_INT + 1), "99999999999"])
    def test_integer_beyond_column_range_rejected(self, stock):
        with pytest.raises(ValidationError, match="stock is out of range"):
            validate_payload(model=Product, payload={"stock": stock}, policy=PRODUCT_POLICY, partial=True)

    def test_integer_at_column_limit_accepted(self):
        patch = validate_payload(model=Product, payload={"stock": str(MAX_INT)}, policy=PRODUCT_POLICY, partial=True)
        assert patch["stock"] == MAX_INT


class TestBusinessRules:

    def test_negative_stock(self):
        with pytest.raises(ValidationError):
            enforce_rules_product({"stock": -1})

    def test_price_ceiling(self):
        with pytest.raises(ValidationError):
            enforce_rules_product({"price": Decimal("10000000000.00")})

    def test_email_normalized(self):
        patch = {"email": "  Mixed@Case.COM "}
        enforce_rules_user(patch)
        assert patch["email"] == "mixed@case.com"

    @pytest.mark.parametrize("email", ["plain", "@nohost", "nouser@"])
    def test_bad_email(self, email):
        with pytest.raises(ValidationError):
            enforce_rules_user({"email": email})


class TestLineItemFields:

    @pytest.mark.parametrize("value", [1, 2, 1000])
    def test_valid_quantity(self, value):
        assert require_quantity(value) == value

    @pytest.mark.parametrize("value", [0, -3, 2.0, "2", None, False])
    def test_invalid_quantity(self, value):
        with pytest.raises(ValidationError):
            require_quantity(value)

    @pytest.mark.parametrize("value", [0, -1, "1", None, True])
    def test_invalid_id(self, value):
        with pytest.raises(ValidationError):
            require_id(value, "product_id")

    def test_quantity_upper_bound(self):
        assert require_quantity(MAX_INT) == MAX_INT
        with pytest.raises(ValidationError, match="cannot exceed"):
            require_quantity(MAX_INT + 1)

    @pytest.mark.parametrize("value", [MAX_INT + 1, 10**20])
    def test_id_upper_bound(self, value):
        with pytest.raises(ValidationError):
            require_id(value, "product_id")

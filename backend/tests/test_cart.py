"""
Cart tests.

Verifies:
- The cart is created lazily and is private to its owner
- Adding the same product merges into one line
- The merged quantity is checked against stock; failures leave the cart untouched
- Update/remove/clear semantics and totals computed from live prices
"""

import pytest

from storefront.errors import InsufficientStockError, NotFoundError, ValidationError
from storefront.models import Cart, CartLine
from storefront.services import cart_service

from conftest import make_product


class TestCartService:

    def test_get_creates_empty_cart_once(self, db_session, user):
        first = cart_service.get_cart(user.id)
        second = cart_service.get_cart(user.id)
        assert first.id == second.id
        assert first.lines == []
        assert db_session.query(Cart).count() == 1

    def test_add_merges_same_product(self, db_session, user, product):
        cart_service.add_line(user.id, product.id, 2)
        cart = cart_service.add_line(user.id, product.id, 1)

        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 3

    def test_cumulative_quantity_checked_against_stock(self, db_session, user, product):
        # stock=5: 3 fits, another 3 would make 6
        cart_service.add_line(user.id, product.id, 3)

        with pytest.raises(InsufficientStockError):
            cart_service.add_line(user.id, product.id, 3)

        cart = cart_service.get_cart(user.id)
        assert cart.find_line(product.id).quantity == 3

    def test_add_merges_when_concurrent_insert_wins(self, db_session, user, product, monkeypatch):
        # Another request already inserted the line; this one read the cart before it did
        cart_service.add_line(user.id, product.id, 1)

        real_find_line = Cart.find_line
        stale_reads = []

        def find_line_before_insert(self, product_id):
            if not stale_reads:
                stale_reads.append(product_id)
                return None
            return real_find_line(self, product_id)

        monkeypatch.setattr(Cart, "find_line", find_line_before_insert)

        cart = cart_service.add_line(user.id, product.id, 2)

        assert stale_reads == [product.id]
        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 3
        assert db_session.query(CartLine).count() == 1

    def test_concurrent_insert_merge_rechecks_stock(self, db_session, user, product, monkeypatch):
        cart_service.add_line(user.id, product.id, 4)

        real_find_line = Cart.find_line
        stale_reads = []

        def find_line_before_insert(self, product_id):
            if not stale_reads:
                stale_reads.append(product_id)
                return None
            return real_find_line(self, product_id)

        monkeypatch.setattr(Cart, "find_line", find_line_before_insert)

        # 2 fits on its own but 4 + 2 exceeds stock=5
        with pytest.raises(InsufficientStockError):
            cart_service.add_line(user.id, product.id, 2)

        assert cart_service.get_cart(user.id).lines[0].quantity == 4

    def test_add_missing_product(self, db_session, user):
        with pytest.raises(NotFoundError):
            cart_service.add_line(user.id, 9999, 1)

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True, None])
    def test_add_rejects_bad_quantity(self, db_session, user, product, quantity):
        with pytest.raises(ValidationError):
            cart_service.add_line(user.id, product.id, quantity)

    def test_cart_does_not_reserve_stock(self, db_session, user, other_user, product):
        cart_service.add_line(user.id, product.id, 5)
        cart_service.add_line(other_user.id, product.id, 5)
        assert product.stock == 5

    def test_remove_absent_product_is_noop(self, db_session, user, product):
        cart = cart_service.remove_line(user.id, product.id)
        assert cart.lines == []

    def test_update_line_not_in_cart(self, db_session, user, product):
        cart_service.get_cart(user.id)
        with pytest.raises(NotFoundError):
            cart_service.update_line(user.id, product.id, 1)


class TestCartRoutes:

    def test_get_empty_cart(self, client, user, user_headers):
        resp = client.get("/cart", headers=user_headers)
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["user_id"] == user.id
        assert body["products"] == []
        assert body["total"] == 0.0
        assert body["item_count"] == 0

    def test_add_expands_product_and_totals(self, client, db_session, product, user_headers):
        resp = client.post("/cart/add", headers=user_headers, json={"product_id": product.id, "quantity": 2})
        assert resp.status_code == 200
        body = resp.get_json()

        assert len(body["products"]) == 1
        line = body["products"][0]
        assert line["product"]["id"] == product.id
        assert line["product"]["name"] == "Coffee Beans"
        assert line["quantity"] == 2
        assert line["unit_price"] == 12.5
        assert line["subtotal"] == 25.0
        assert body["total"] == 25.0
        assert body["item_count"] == 2

    def test_add_defaults_quantity_to_one(self, client, product, user_headers):
        resp = client.post("/cart/add", headers=user_headers, json={"product_id": product.id})
        assert resp.status_code == 200
        assert resp.get_json()["products"][0]["quantity"] == 1

    def test_merge_scenario(self, client, product, user_headers):
        client.post("/cart/add", headers=user_headers, json={"product_id": product.id, "quantity": 3})
        resp = client.post("/cart/add", headers=user_headers, json={"product_id": product.id, "quantity": 3})

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["message"] == "Insufficient stock for Coffee Beans"
        assert body["details"]["available"] == 5

        cart = client.get("/cart", headers=user_headers).get_json()
        assert cart["products"][0]["quantity"] == 3

    def test_add_requires_product_id(self, client, user_headers):
        resp = client.post("/cart/add", headers=user_headers, json={"quantity": 1})
        assert resp.status_code == 400

    def test_add_accepts_camel_case_product_id(self, client, product, user_headers):
        resp = client.post("/cart/add", headers=user_headers, json={"productId": product.id, "quantity": 2})
        assert resp.status_code == 200
        assert resp.get_json()["products"][0]["quantity"] == 2

    def test_add_quantity_beyond_integer_range_is_400(self, client, product, user_headers):
        resp = client.post("/cart/add", headers=user_headers, json={"product_id": product.id, "quantity": 10**20})
        assert resp.status_code == 400
        assert client.get("/cart", headers=user_headers).get_json()["products"] == []

    def test_total_follows_live_price(self, client, product, user_headers, admin_headers):
        client.post("/cart/add", headers=user_headers, json={"product_id": product.id, "quantity": 2})
        client.put(f"/products/{product.id}", headers=admin_headers, json={"price": 20})

        cart = client.get("/cart", headers=user_headers).get_json()
        assert cart["total"] == 40.0

    def test_update_quantity(self, client, product, user_headers):
        client.post("/cart/add", headers=user_headers, json={"product_id": product.id, "quantity": 1})
        resp = client.put(f"/cart/update/{product.id}", headers=user_headers, json={"quantity": 4})
        assert resp.status_code == 200
        assert resp.get_json()["products"][0]["quantity"] == 4

    def test_update_beyond_stock(self, client, product, user_headers):
        client.post("/cart/add", headers=user_headers, json={"product_id": product.id, "quantity": 1})
        resp = client.put(f"/cart/update/{product.id}", headers=user_headers, json={"quantity": 6})
        assert resp.status_code == 400

        cart = client.get("/cart", headers=user_headers).get_json()
        assert cart["products"][0]["quantity"] == 1

    def test_update_zero_quantity_rejected(self, client, product, user_headers):
        client.post("/cart/add", headers=user_headers, json={"product_id": product.id, "quantity": 1})
        resp = client.put(f"/cart/update/{product.id}", headers=user_headers, json={"quantity": 0})
        assert resp.status_code == 400

    def test_update_without_cart_is_404(self, client, product, user_headers):
        resp = client.put(f"/cart/update/{product.id}", headers=user_headers, json={"quantity": 1})
        assert resp.status_code == 404

    def test_remove_line(self, client, db_session, product, user_headers):
        other = make_product(db_session, name="Filter Papers", price="3.00", stock=100)
        client.post("/cart/add", headers=user_headers, json={"product_id": product.id, "quantity": 1})
        client.post("/cart/add", headers=user_headers, json={"product_id": other.id, "quantity": 2})

        resp = client.delete(f"/cart/remove/{product.id}", headers=user_headers)
        assert resp.status_code == 200
        body = resp.get_json()
        assert [line["product"]["id"] for line in body["products"]] == [other.id]
        assert body["total"] == 6.0

    def test_remove_absent_is_200(self, client, product, user_headers):
        resp = client.delete(f"/cart/remove/{product.id}", headers=user_headers)
        assert resp.status_code == 200

    def test_clear(self, client, product, user_headers):
        client.post("/cart/add", headers=user_headers, json={"product_id": product.id, "quantity": 2})
        resp = client.delete("/cart/clear", headers=user_headers)
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "Cart cleared successfully"
        assert body["cart"]["products"] == []

    def test_carts_are_private(self, client, product, user_headers, other_user_headers):
        client.post("/cart/add", headers=user_headers, json={"product_id": product.id, "quantity": 2})

        other = client.get("/cart", headers=other_user_headers).get_json()
        assert other["products"] == []

import re

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

import services.checkout as checkout_service
from conftest import SHIPPING, bearer, visitor
from models.cart import CartItem
from models.log import Log
from models.order import Order, OrderItem
from models.product import Product
from schemas.order import CheckoutPayload, ShippingForm
from schemas.user import IdentityUser
from services.cart import CartManager
from services.checkout import place_order
from utils.session import Scope

ORDER_NUMBER = re.compile(r"^ORD-[0-9A-Z]+-[0-9A-Z]{4}$")


def _guest_payload(**overrides):
    data = {"email": "guest@example.com", "shipping": ShippingForm(**SHIPPING)}
    data.update(overrides)
    return CheckoutPayload(**data)


class TestPlaceOrder:
    def test_empty_cart_is_rejected(self, db):
        cart = CartManager(db, Scope(session_id="sess_a"))
        with pytest.raises(HTTPException) as exc:
            place_order(db, cart, None, _guest_payload())
        assert exc.value.status_code == 400
        assert exc.value.detail == "Cart is empty"

    def test_guest_needs_email(self, db, make_product):
        cart = CartManager(db, Scope(session_id="sess_a"))
        cart.add_to_cart(make_product(), 1)
        with pytest.raises(HTTPException) as exc:
            place_order(db, cart, None, _guest_payload(email=None))
        assert exc.value.status_code == 400
        assert db.query(CartItem).count() == 1

    def test_missing_shipping_fields(self, db, make_product):
        cart = CartManager(db, Scope(session_id="sess_a"))
        cart.add_to_cart(make_product(), 1)
        with pytest.raises(HTTPException) as exc:
            place_order(db, cart, None, _guest_payload(shipping=ShippingForm(full_name="Jane")))
        assert exc.value.status_code == 400
        assert "address_line1" in exc.value.detail

    def test_snapshot_and_clear(self, db, make_product):
        product = make_product(price_cents=1000, name="Oak Logs")
        cart = CartManager(db, Scope(session_id="sess_a"))
        cart.add_to_cart(product, 2)

        order = place_order(db, cart, None, _guest_payload())

        assert ORDER_NUMBER.match(order.order_number)
        assert order.total_cents == 2000
        assert order.guest_session_id.startswith("guest_")
        assert order.user_id is None
        assert order.shipping_city == "Portland"
        [line] = order.items
        assert (line.product_name, line.product_price, line.unit_price_cents, line.quantity) == (
            "Oak Logs", "$10.00", 1000, 2,
        )
        assert db.query(CartItem).count() == 0

    def test_order_number_collision_is_retried(self, db, make_product, monkeypatch):
        db.add(Order(order_number="ORD-TAKEN-AAAA", email="x@example.com", total_cents=100, currency="USD"))
        db.commit()
        numbers = iter(["ORD-TAKEN-AAAA", "ORD-TAKEN-AAAA", "ORD-FRESH-BBBB"])
        monkeypatch.setattr(checkout_service, "generate_order_number", lambda: next(numbers))

        cart = CartManager(db, Scope(session_id="sess_a"))
        cart.add_to_cart(make_product(), 1)
        order = place_order(db, cart, None, _guest_payload())

        assert order.order_number == "ORD-FRESH-BBBB"
        assert db.query(Order).count() == 2
        assert db.query(CartItem).count() == 0

    def test_exhausted_order_numbers_keep_cart(self, db, make_product, monkeypatch):
        db.add(Order(order_number="ORD-TAKEN-AAAA", email="x@example.com", total_cents=100, currency="USD"))
        db.commit()
        monkeypatch.setattr(checkout_service, "generate_order_number", lambda: "ORD-TAKEN-AAAA")

        cart = CartManager(db, Scope(session_id="sess_a"))
        cart.add_to_cart(make_product(), 1)
        with pytest.raises(HTTPException) as exc:
            place_order(db, cart, None, _guest_payload())

        assert exc.value.status_code == 500
        assert db.query(Order).count() == 1
        assert db.query(CartItem).count() == 1

    def test_deactivated_product_blocks_order(self, db, make_product):
        product = make_product(name="Retired Logs")
        cart = CartManager(db, Scope(session_id="sess_a"))
        cart.add_to_cart(product, 1)
        product.is_active = False
        db.commit()

        with pytest.raises(HTTPException) as exc:
            place_order(db, cart, None, _guest_payload())

        assert exc.value.status_code == 400
        assert exc.value.detail == "No longer available: Retired Logs"
        assert db.query(Order).count() == 0
        assert db.query(CartItem).count() == 1

    def test_audit_entry_commits_with_order(self, db, make_product):
        cart = CartManager(db, Scope(session_id="sess_a"))
        cart.add_to_cart(make_product(), 1)

        order = place_order(db, cart, None, _guest_payload(), ip="203.0.113.9")

        entry = db.query(Log).filter(Log.action == "ORDER_PLACE").one()
        assert entry.meta["order_number"] == order.order_number
        assert entry.ip == "203.0.113.9"

    def test_failed_audit_write_keeps_cart(self, db, make_product, monkeypatch):
        def failing_log(*args, **kwargs):
            raise SQLAlchemyError("audit store unavailable")

        monkeypatch.setattr(checkout_service, "write_log", failing_log)
        cart = CartManager(db, Scope(session_id="sess_a"))
        cart.add_to_cart(make_product(), 1)

        with pytest.raises(HTTPException) as exc:
            place_order(db, cart, None, _guest_payload())

        assert exc.value.status_code == 500
        assert db.query(Order).count() == 0
        assert db.query(CartItem).count() == 1

    def test_saved_address_is_copied(self, db, make_product):
        from schemas.address import AddressCreate
        from services.addresses import AddressManager

        user = IdentityUser(id="user-1", email="buyer@example.com")
        address = AddressManager(db, user.id).create_address(AddressCreate(**SHIPPING))
        cart = CartManager(db, Scope(user_id=user.id))
        cart.add_to_cart(make_product(), 1)

        order = place_order(db, cart, user, CheckoutPayload(address_id=address.id))

        assert order.email == "buyer@example.com"
        assert order.shipping_address_line1 == SHIPPING["address_line1"]
        assert order.user_id == "user-1"
        assert order.guest_session_id is None


class TestCheckoutApi:
    def test_guest_end_to_end(self, client, make_product):
        product = make_product(price_cents=4500, name="Seasoned Hardwood Cord")
        headers = visitor("sess_guest")
        client.post("/api/cart/add", json={"product_id": product.id}, headers=headers)

        response = client.post(
            "/api/checkout",
            json={"email": "guest@example.com", "shipping": SHIPPING},
            headers=headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        order = body["order"]
        assert ORDER_NUMBER.match(order["order_number"])
        assert order["total"] == "$45.00"
        assert order["total_amount"] == 45.0
        assert order["status"] == "pending"
        assert order["payment_status"] == "pending"
        assert order["payment_method"] == "cash_on_delivery"
        assert order["items"][0]["product_name"] == "Seasoned Hardwood Cord"
        assert order["shipping_address"]["zip_code"] == SHIPPING["zip_code"]
        assert client.get("/api/cart", headers=headers).json()["items"] == []

    def test_deactivated_product_is_refused(self, client, db, make_product):
        product = make_product(name="Retired Logs")
        headers = visitor("sess_guest")
        client.post("/api/cart/add", json={"product_id": product.id}, headers=headers)
        db.query(Product).filter(Product.id == product.id).update({Product.is_active: False})
        db.commit()

        response = client.post("/api/checkout", json={"email": "guest@example.com", "shipping": SHIPPING}, headers=headers)

        assert response.status_code == 400
        assert response.json() == {"error": "No longer available: Retired Logs"}
        assert len(client.get("/api/cart", headers=headers).json()["items"]) == 1

    def test_empty_cart_checkout(self, client):
        response = client.post(
            "/api/checkout", json={"email": "guest@example.com", "shipping": SHIPPING}, headers=visitor("sess_a")
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Cart is empty"}

    def test_order_lines_survive_catalogue_edits(self, client, db, make_product, user_token):
        product = make_product(price_cents=1000, name="Birch Logs")
        headers = bearer(user_token)
        client.post("/api/cart/add", json={"product_id": product.id, "quantity": 3}, headers=headers)
        order_number = client.post("/api/checkout", json={"shipping": SHIPPING}, headers=headers).json()["order"]["order_number"]

        stored = db.query(Product).filter(Product.id == product.id).first()
        stored.price_cents = 9900
        stored.name = "Renamed"
        db.commit()

        order = client.get(f"/api/orders/{order_number}", headers=headers).json()
        assert order["email"] == "buyer@example.com"
        assert order["total_cents"] == 3000
        line = order["items"][0]
        assert (line["product_name"], line["product_price"], line["unit_price_cents"]) == ("Birch Logs", "$10.00", 1000)

    def test_deleted_product_keeps_order_line(self, client, db, make_product, user_token):
        product = make_product(price_cents=1000)
        headers = bearer(user_token)
        client.post("/api/cart/add", json={"product_id": product.id}, headers=headers)
        client.post("/api/checkout", json={"shipping": SHIPPING}, headers=headers)

        db.delete(db.query(Product).filter(Product.id == product.id).first())
        db.commit()

        assert db.query(OrderItem).count() == 1
        [order] = client.get("/api/orders", headers=headers).json()["orders"]
        assert order["items"][0]["product_price"] == "$10.00"

    def test_orders_are_private(self, client, identity, make_product, user_token):
        headers = bearer(user_token)
        client.post("/api/cart/add", json={"product_id": make_product().id}, headers=headers)
        order_number = client.post("/api/checkout", json={"shipping": SHIPPING}, headers=headers).json()["order"]["order_number"]

        stranger = identity.issue_token(identity.create_account("other@example.com"))
        assert client.get(f"/api/orders/{order_number}", headers=bearer(stranger)).status_code == 404
        assert client.get("/api/orders", headers=bearer(stranger)).json()["orders"] == []
        assert client.get("/api/orders").status_code == 401

import pytest

from conftest import SHIPPING, bearer, visitor
from models.log import Log
from models.users import UserProfile

ADMIN_READS = [
    "/api/admin/orders",
    "/api/admin/products",
    "/api/admin/users",
    "/api/admin/reviews",
    "/api/admin/bbq-packages",
    "/api/admin/bbq-bookings",
]


@pytest.mark.parametrize("path", ADMIN_READS)
def test_back_office_requires_token(client, path):
    response = client.get(path)
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


@pytest.mark.parametrize("path", ADMIN_READS)
def test_back_office_rejects_customers(client, user_token, path):
    response = client.get(path, headers=bearer(user_token))
    assert response.status_code == 401
    assert response.json() == {"error": "Admin access required"}


def test_back_office_rejects_unknown_token(client):
    response = client.get("/api/admin/bbq-bookings", headers=bearer("forged"))
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


def test_admin_email_match_ignores_case(client, db, identity):
    from models.users import Admin

    owner = identity.create_account("owner@example.com")
    db.add(Admin(user_id=None, email="Owner@Example.COM", is_active=True))
    db.commit()

    response = client.get("/api/admin/orders", headers=bearer(identity.issue_token(owner)))
    assert response.status_code == 200


def test_inactive_admin_is_rejected(client, db, identity, admin_token):
    from models.users import Admin

    db.query(Admin).update({Admin.is_active: False})
    db.commit()
    assert client.get("/api/admin/orders", headers=bearer(admin_token)).status_code == 401


class TestOrderStatus:
    @pytest.fixture
    def order_id(self, client, make_product):
        headers = visitor("sess_a")
        client.post("/api/cart/add", json={"product_id": make_product().id}, headers=headers)
        response = client.post("/api/checkout", json={"email": "guest@example.com", "shipping": SHIPPING}, headers=headers)
        return response.json()["order"]["id"]

    def _patch(self, client, token, **body):
        return client.patch("/api/admin/orders", json=body, headers=bearer(token))

    def test_forward_moves(self, client, admin_token, order_id):
        for status in ("processing", "shipped", "delivered"):
            response = self._patch(client, admin_token, order_id=order_id, status=status)
            assert response.status_code == 200
            assert response.json()["order"]["status"] == status

    def test_skipping_ahead_is_conflict(self, client, admin_token, order_id):
        response = self._patch(client, admin_token, order_id=order_id, status="delivered")
        assert response.status_code == 409
        assert response.json() == {"error": "Cannot change status from pending to delivered"}

    def test_unknown_status_is_bad_request(self, client, admin_token, order_id):
        response = self._patch(client, admin_token, order_id=order_id, status="teleported")
        assert response.status_code == 400

    def test_same_status_is_accepted(self, client, admin_token, order_id):
        assert self._patch(client, admin_token, order_id=order_id, status="pending").status_code == 200

    def test_cancelled_is_terminal(self, client, admin_token, order_id):
        self._patch(client, admin_token, order_id=order_id, status="cancelled")
        assert self._patch(client, admin_token, order_id=order_id, status="processing").status_code == 409

    def test_payment_status_is_independent(self, client, db, admin_token, order_id):
        response = self._patch(client, admin_token, order_id=order_id, payment_status="paid")
        assert response.json()["order"]["payment_status"] == "paid"
        assert response.json()["order"]["status"] == "pending"
        assert self._patch(client, admin_token, order_id=order_id, payment_status="maybe").status_code == 400
        assert db.query(Log).filter(Log.action == "ORDER_STATUS_CHANGE").count() == 1

    def test_missing_order(self, client, admin_token):
        assert self._patch(client, admin_token, status="processing").status_code == 400
        assert self._patch(client, admin_token, order_id=999, status="processing").status_code == 404

    def test_admin_listing_filters_by_status(self, client, admin_token, order_id):
        assert len(client.get("/api/admin/orders", headers=bearer(admin_token)).json()["orders"]) == 1
        shipped = client.get("/api/admin/orders?status=shipped", headers=bearer(admin_token)).json()
        assert shipped["orders"] == []


class TestProducts:
    def test_create_and_list(self, client, admin_token):
        response = client.post(
            "/api/admin/products",
            json={"slug": "Oak-Cord", "name": "Oak Cord", "category": "firewood", "price": "45.00", "unit": "per cord"},
            headers=bearer(admin_token),
        )
        product = response.json()["product"]
        assert product["slug"] == "oak-cord"
        assert product["price_cents"] == 4500
        assert product["price"] == "$45.00"

        assert client.get("/api/products/oak-cord").json()["name"] == "Oak Cord"
        assert [p["slug"] for p in client.get("/api/products?category=firewood").json()] == ["oak-cord"]
        assert client.get("/api/products?category=charcoal").json() == []

    def test_duplicate_slug_conflicts(self, client, admin_token):
        body = {"slug": "oak", "name": "Oak", "category": "firewood", "price": "10"}
        client.post("/api/admin/products", json=body, headers=bearer(admin_token))
        response = client.post("/api/admin/products", json=body, headers=bearer(admin_token))
        assert response.status_code == 409

    def test_hidden_products_are_not_listed(self, client, admin_token, make_product):
        product = make_product()
        client.patch("/api/admin/products", json={"id": product.id, "is_active": False}, headers=bearer(admin_token))

        assert client.get("/api/products").json() == []
        assert client.get(f"/api/products/{product.slug}").status_code == 404
        assert len(client.get("/api/admin/products", headers=bearer(admin_token)).json()["products"]) == 1

    def test_price_update_and_delete(self, client, admin_token, make_product):
        product = make_product(price_cents=1000)
        updated = client.patch(
            "/api/admin/products", json={"id": product.id, "price": "12.50"}, headers=bearer(admin_token)
        ).json()["product"]
        assert updated["price"] == "$12.50"

        assert client.delete(f"/api/admin/products?id={product.id}", headers=bearer(admin_token)).json() == {"success": True}
        assert client.delete(f"/api/admin/products?id={product.id}", headers=bearer(admin_token)).status_code == 404

    def test_null_required_field_is_rejected(self, client, db, admin_token, make_product):
        product = make_product(name="Oak Logs")
        headers = bearer(admin_token)

        response = client.patch("/api/admin/products", json={"id": product.id, "name": None}, headers=headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Fields cannot be null: name"}
        assert client.patch("/api/admin/products", json={"id": product.id, "price": None}, headers=headers).status_code == 400
        db.refresh(product)
        assert (product.name, product.price_cents) == ("Oak Logs", 1000)

    def test_optional_field_can_be_cleared(self, client, admin_token, make_product):
        product = make_product()
        headers = bearer(admin_token)
        client.patch("/api/admin/products", json={"id": product.id, "description": "Split oak"}, headers=headers)

        response = client.patch("/api/admin/products", json={"id": product.id, "description": None}, headers=headers)

        assert response.status_code == 200
        assert response.json()["product"]["description"] is None

    def test_slug_conflict_on_update(self, client, admin_token, make_product):
        first, second = make_product(), make_product()
        response = client.patch(
            "/api/admin/products", json={"id": second.id, "slug": first.slug.upper()}, headers=bearer(admin_token)
        )
        assert response.status_code == 409
        assert response.json() == {"error": "Product slug already exists"}


class TestReviews:
    def test_public_list_shows_active_only(self, client, admin_token):
        headers = bearer(admin_token)
        client.post("/api/admin/reviews", json={"customer_name": "Ann", "review_text": "Dry and clean.", "display_order": 2}, headers=headers)
        hidden = client.post("/api/admin/reviews", json={"customer_name": "Bob", "review_text": "Great.", "display_order": 1}, headers=headers).json()["review"]
        client.patch("/api/admin/reviews", json={"id": hidden["id"], "is_active": False}, headers=headers)

        public = client.get("/api/reviews").json()["reviews"]
        assert [r["customer_name"] for r in public] == ["Ann"]
        assert len(client.get("/api/admin/reviews", headers=headers).json()["reviews"]) == 2

    def test_required_fields(self, client, admin_token):
        response = client.post("/api/admin/reviews", json={"customer_name": "Ann"}, headers=bearer(admin_token))
        assert response.status_code == 400
        assert response.json() == {"error": "Customer name and review text are required"}

    def test_null_review_text_is_rejected(self, client, admin_token):
        headers = bearer(admin_token)
        review = client.post(
            "/api/admin/reviews", json={"customer_name": "Ann", "review_text": "Dry and clean."}, headers=headers
        ).json()["review"]

        response = client.patch("/api/admin/reviews", json={"id": review["id"], "review_text": None}, headers=headers)

        assert response.status_code == 400
        assert client.get("/api/reviews").json()["reviews"][0]["review_text"] == "Dry and clean."

    def test_rating_range(self, client, admin_token):
        response = client.post(
            "/api/admin/reviews", json={"customer_name": "Ann", "review_text": "Hot fire", "rating": 6},
            headers=bearer(admin_token),
        )
        assert response.status_code == 400


class TestUsers:
    def test_listing_includes_order_stats(self, client, db, admin_token, user_token, make_product):
        headers = bearer(user_token)
        client.get("/api/profile", headers=headers)
        client.post("/api/cart/add", json={"product_id": make_product(price_cents=4500).id, "quantity": 2}, headers=headers)
        client.post("/api/checkout", json={"shipping": SHIPPING}, headers=headers)

        users = client.get("/api/admin/users", headers=bearer(admin_token)).json()["users"]
        buyer = next(u for u in users if u["email"] == "buyer@example.com")
        assert buyer["order_count"] == 1
        assert buyer["total_spent"] == 90.0

    def test_delete_user(self, client, db, identity, admin_token, user_token):
        client.get("/api/profile", headers=bearer(user_token))
        buyer_id = identity.tokens[user_token].id
        admin_id = identity.tokens[admin_token].id

        assert client.delete(f"/api/admin/users?id={admin_id}", headers=bearer(admin_token)).status_code == 400
        assert client.delete(f"/api/admin/users?id={buyer_id}", headers=bearer(admin_token)).json() == {"success": True}
        assert db.query(UserProfile).filter(UserProfile.id == buyer_id).first() is None
        assert client.delete("/api/admin/users?id=missing", headers=bearer(admin_token)).status_code == 404

from conftest import visitor
from services.wishlist import ALREADY_PRESENT, WishlistManager
from utils.session import Scope


def test_add_is_idempotent(db, make_product):
    product = make_product()
    wishlist = WishlistManager(db, Scope(session_id="sess_a"))

    assert wishlist.add_to_wishlist(product) is True
    assert wishlist.add_to_wishlist(product) is False
    assert wishlist.message == ALREADY_PRESENT
    assert wishlist.item_count == 1


def test_stale_view_still_cannot_duplicate(db, make_product):
    product = make_product()
    WishlistManager(db, Scope(session_id="sess_a")).add_to_wishlist(product)

    # Never refreshed, so the in-memory check misses the existing row
    stale = WishlistManager(db, Scope(session_id="sess_a"))
    assert stale.add_to_wishlist(product) is False
    assert stale.item_count == 1


def test_toggle(db, make_product):
    product = make_product()
    wishlist = WishlistManager(db, Scope(user_id="user-1"))

    assert wishlist.toggle_wishlist(product) is True
    assert wishlist.is_in_wishlist(product.id)
    assert wishlist.toggle_wishlist(product) is False
    assert not wishlist.is_in_wishlist(product.id)


def test_merge_from_unions(db, make_product):
    shared, only_guest = make_product(), make_product()
    guest = WishlistManager(db, Scope(session_id="sess_a"))
    guest.add_to_wishlist(shared)
    guest.add_to_wishlist(only_guest)
    account = WishlistManager(db, Scope(user_id="user-1"))
    account.add_to_wishlist(shared)

    account.merge_from(Scope(session_id="sess_a"))

    assert sorted(item.product_id for item in account.items) == sorted([shared.id, only_guest.id])
    assert guest.refresh_wishlist() == []


def test_api_duplicate_add_reports_notice(client, make_product):
    product = make_product()
    headers = visitor("sess_a")

    first = client.post("/api/wishlist/add", json={"product_id": product.id}, headers=headers).json()
    second = client.post("/api/wishlist/add", json={"product_id": product.id}, headers=headers)

    assert first["added"] is True
    assert second.status_code == 200
    assert second.json()["added"] is False
    assert second.json()["message"] == ALREADY_PRESENT
    assert second.json()["item_count"] == 1


def test_api_contains_and_remove(client, make_product):
    product = make_product()
    headers = visitor("sess_a")
    client.post("/api/wishlist/add", json={"product_id": product.id}, headers=headers)

    assert client.get(f"/api/wishlist/contains/{product.id}", headers=headers).json()["in_wishlist"] is True
    assert client.get(f"/api/wishlist/contains/{product.id}", headers=visitor("sess_b")).json()["in_wishlist"] is False

    body = client.delete(f"/api/wishlist/items/{product.id}", headers=headers).json()
    assert body["items"] == []

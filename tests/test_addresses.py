from conftest import SHIPPING, bearer
from models.address import Address


def _create(client, token, **overrides):
    return client.post("/api/addresses", json={**SHIPPING, **overrides}, headers=bearer(token))


def test_first_address_becomes_default(client, user_token):
    response = _create(client, user_token)
    assert response.status_code == 201
    assert response.json()["is_default"] is True


def test_only_one_default(client, db, user_token):
    home = _create(client, user_token, label="Home").json()
    cabin = _create(client, user_token, label="Cabin", is_default=True).json()
    assert cabin["is_default"] is True

    client.post(f"/api/addresses/{home['id']}/default", headers=bearer(user_token))

    defaults = db.query(Address).filter(Address.is_default == True).all()  # noqa: E712
    assert [a.id for a in defaults] == [home["id"]]
    listed = client.get("/api/addresses", headers=bearer(user_token)).json()
    assert listed[0]["id"] == home["id"]


def test_update_to_default_clears_others(client, db, user_token):
    _create(client, user_token, label="Home")
    cabin = _create(client, user_token, label="Cabin").json()
    assert cabin["is_default"] is False

    client.patch(f"/api/addresses/{cabin['id']}", json={"is_default": True}, headers=bearer(user_token))

    assert db.query(Address).filter(Address.is_default == True).count() == 1  # noqa: E712


def test_addresses_are_private(client, identity, user_token):
    address = _create(client, user_token).json()
    stranger = identity.issue_token(identity.create_account("other@example.com"))

    assert client.get("/api/addresses", headers=bearer(stranger)).json() == []
    assert client.delete(f"/api/addresses/{address['id']}", headers=bearer(stranger)).status_code == 404
    assert client.delete(f"/api/addresses/{address['id']}", headers=bearer(user_token)).json() == {"success": True}


def test_addresses_need_sign_in(client):
    assert client.get("/api/addresses").status_code == 401


def test_null_required_field_is_rejected(client, user_token):
    address = _create(client, user_token).json()

    response = client.patch(f"/api/addresses/{address['id']}", json={"is_default": None}, headers=bearer(user_token))
    assert response.status_code == 400
    assert response.json() == {"error": "Fields cannot be null: is_default"}

    cleared = client.patch(f"/api/addresses/{address['id']}", json={"address_line2": None}, headers=bearer(user_token))
    assert cleared.status_code == 200
    assert cleared.json()["is_default"] is True

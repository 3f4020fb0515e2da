import os

# Point the app at a private in-memory database before anything imports it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CURRENCY"] = "USD"
os.environ.pop("SUPABASE_URL", None)

import itertools

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from models.booking import BBQPackage
from models.product import Product
from models.users import Admin
from schemas.user import IdentitySession, IdentityUser
from utils.identity_client import IdentityProviderError, get_identity_provider


class FakeIdentityProvider:
    """In-process stand-in for the hosted auth service."""

    def __init__(self):
        self.accounts = {}  # email -> (password, IdentityUser)
        self.tokens = {}  # access token -> IdentityUser
        self.signed_out = []
        self._ids = itertools.count(1)

    def create_account(self, email, password="secret123", name=None):
        user = IdentityUser(id=f"user-{next(self._ids)}", email=email, name=name)
        self.accounts[email] = (password, user)
        return user

    def issue_token(self, user):
        token = f"token-{user.id}-{len(self.tokens)}"
        self.tokens[token] = user
        return token

    async def sign_up(self, email, password, metadata=None):
        if email in self.accounts:
            raise IdentityProviderError("User already registered", status_code=422)
        user = self.create_account(email, password, name=(metadata or {}).get("full_name"))
        return IdentitySession(access_token=self.issue_token(user), user=user)

    async def sign_in(self, email, password):
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise IdentityProviderError("Invalid login credentials", status_code=400)
        return IdentitySession(access_token=self.issue_token(account[1]), user=account[1])

    async def get_user(self, token):
        user = self.tokens.get(token)
        if user is None:
            raise IdentityProviderError("invalid JWT", status_code=401)
        return user

    async def sign_out(self, token):
        self.signed_out.append(token)
        self.tokens.pop(token, None)


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def identity():
    provider = FakeIdentityProvider()
    app.dependency_overrides[get_identity_provider] = lambda: provider
    yield provider
    app.dependency_overrides.pop(get_identity_provider, None)


@pytest.fixture
def client(identity):
    return TestClient(app)


@pytest.fixture
def make_product(db):
    counter = itertools.count(1)

    def _make(price_cents=1000, name=None, category="firewood", currency="USD", is_active=True):
        n = next(counter)
        product = Product(
            slug=f"product-{n}",
            name=name or f"Product {n}",
            category=category,
            price_cents=price_cents,
            currency=currency,
            is_active=is_active,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_package(db):
    def _make(price_cents=15000, name="Weekend BBQ Package", is_active=True):
        package = BBQPackage(name=name, price_cents=price_cents, currency="USD", is_active=is_active)
        db.add(package)
        db.commit()
        db.refresh(package)
        return package

    return _make


@pytest.fixture
def user_token(identity):
    user = identity.create_account("buyer@example.com", name="Jane Buyer")
    return identity.issue_token(user)


@pytest.fixture
def admin_token(identity, db):
    user = identity.create_account("owner@example.com", name="Shop Owner")
    db.add(Admin(user_id=user.id, email=user.email, is_active=True))
    db.commit()
    return identity.issue_token(user)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def visitor(session_id):
    return {"X-Session-Id": session_id}


SHIPPING = {
    "full_name": "Jane Buyer",
    "phone": "555-0100",
    "address_line1": "1 Timber Road",
    "city": "Portland",
    "state": "OR",
    "zip_code": "97201",
    "country": "United States",
}

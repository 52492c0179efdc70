import os

# configure before anything from storefront is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["APP_URL"] = "http://shop.test"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from storefront.api.deps import get_lock_service, get_payment_gateway
from storefront.data.database import build_engine, get_db, init_models
from storefront.data.models import ProductModel, UserModel
from storefront.main import app
from storefront.services.payment_gateway import CheckoutSession

class FakeGateway:
    """Records session requests; behaviour is switched per test."""

    def __init__(self):
        self.calls = []
        self.error = None
        self.session = CheckoutSession(id="cs_test_123", url="https://pay.test/cs_test_123")

    def create_checkout_session(self, line_items, metadata):
        self.calls.append({"line_items": line_items, "metadata": metadata})
        if self.error is not None:
            raise self.error
        return self.session

    def parse_event(self, payload, signature):
        raise AssertionError("FakeGateway does not verify webhooks")


class FakeLockService:
    def __init__(self):
        self.locks = {}
        self.acquired = []
        self.released = []

    def acquire_checkout_lock(self, cart_id, ttl):
        if cart_id in self.locks:
            return None
        token = f"token-{cart_id}"
        self.locks[cart_id] = token
        self.acquired.append(cart_id)
        return token

    def release_checkout_lock(self, cart_id, token):
        if self.locks.get(cart_id) == token:
            del self.locks[cart_id]
            self.released.append(cart_id)
            return True
        return False

    def ping(self):
        return True


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    init_models(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def client(session_factory, gateway, lock_service):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_product(db):
    def _make(name="Product", price="10.00", slug=None, inventory=10, image=None):
        product = ProductModel(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            description=f"{name} description",
            image=image,
            price=Decimal(price),
            inventory=inventory,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def make_user(db):
    def _make(name="Shopper", email=None, role="user"):
        user = UserModel(name=name, email=email or f"{name.lower()}@example.com", role=role)
        db.add(user)
        db.commit()
        return user

    return _make


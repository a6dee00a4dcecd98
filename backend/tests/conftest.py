import os

# must be set before nvago is imported: the engine and notifier read them at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["NVAGO_NOTIFY_RETRIES"] = "1"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from nvago.db.session import get_engine
from nvago.main import app
from nvago.services import notify


class FakeResponse:
    status_code = 200

    def raise_for_status(self):
        return None


@pytest.fixture
def client():
    engine = get_engine()
    SQLModel.metadata.drop_all(engine)
    with TestClient(app) as c:
        yield c
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def sent(monkeypatch):
    """Capture webhook posts instead of hitting the network."""
    calls = []

    def fake_post(url, json=None, timeout=None, headers=None):
        calls.append({"url": url, "json": json, "headers": headers})
        return FakeResponse()

    monkeypatch.setattr(notify.requests, "post", fake_post)
    return calls


@pytest.fixture
def order_form():
    return {
        "product_name": "VINYL STICKER",
        "product_category": "Sticker",
        "selected_variant": {"retail_price": 100, "wholesale_price": 80, "description": "Glossy"},
        "has_variants": True,
        "quantity": "12",
        "height": "3",
        "width": "4",
        "has_file": True,
        "attached_file": "https://files.example/art.pdf",
        "first_name": "Kriz",
        "last_name": "Cultura",
        "contact": "09171234567",
        "address": "Quezon City",
        "email": "kriz@example.com",
    }

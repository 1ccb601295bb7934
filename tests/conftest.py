import json
from collections.abc import Generator

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from food_delivery.config import Settings
from food_delivery.database import init_db, seed_sample_data
from food_delivery.main import create_app
from food_delivery.payment import PaystackClient

SECRET_KEY = "sk_test_0123456789abcdef"


class FakePaystack:
    """In-memory stand-in for the parts of the Paystack API the app calls."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.transactions: dict[str, dict] = {}
        self.refunds: list[dict] = []

    def add_transaction(self, reference: str, amount_kobo: int, status: str = "success", metadata=None) -> dict:
        transaction = {
            "reference": reference,
            "amount": amount_kobo,
            "status": status,
            "currency": "NGN",
            "paid_at": "2026-10-18T10:00:00.000Z",
            "customer": {"email": "ada@example.com"},
            "metadata": metadata or {},
        }
        self.transactions[reference] = transaction
        return transaction

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path == "/transaction/initialize":
            body = json.loads(request.content)
            reference = f"ref_{len(self.transactions) + 1}"
            self.add_transaction(reference, body["amount"], metadata=body.get("metadata"))
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Authorization URL created",
                    "data": {
                        "authorization_url": f"https://checkout.paystack.com/{reference}",
                        "access_code": f"access_{reference}",
                        "reference": reference,
                    },
                },
            )

        if request.method == "GET" and path.startswith("/transaction/verify/"):
            reference = path.rsplit("/", 1)[-1]
            transaction = self.transactions.get(reference)
            if transaction is None:
                return httpx.Response(400, json={"status": False, "message": "Transaction reference not found"})
            return httpx.Response(200, json={"status": True, "message": "Verification successful", "data": transaction})

        if request.method == "GET" and path == "/transaction":
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Transactions retrieved",
                    "data": list(self.transactions.values()),
                    "meta": {
                        "total": len(self.transactions),
                        "perPage": int(request.url.params["perPage"]),
                        "page": int(request.url.params["page"]),
                    },
                },
            )

        if request.method == "POST" and path == "/refund":
            body = json.loads(request.content)
            self.refunds.append(body)
            transaction = self.transactions[body["transaction"]]
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Refund has been queued for processing",
                    "data": {
                        "transaction": {"reference": body["transaction"]},
                        "amount": body.get("amount", transaction["amount"]),
                        "status": "pending",
                    },
                },
            )

        if request.method == "GET" and path == "/bank":
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Banks retrieved",
                    "data": [
                        {"id": 1, "name": "Access Bank", "code": "044", "slug": "access-bank"},
                        {"id": 9, "name": "First Bank of Nigeria", "code": "011", "slug": "first-bank-of-nigeria"},
                    ],
                },
            )

        return httpx.Response(404, json={"status": False, "message": "Not found"})


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine: Engine) -> Generator[Session, None, None]:
    """Seeded session for exercising crud functions directly."""
    init_db(engine)
    with Session(engine) as session:
        seed_sample_data(session)
        yield session


@pytest.fixture
def paystack() -> FakePaystack:
    return FakePaystack()


@pytest.fixture
def payments(paystack: FakePaystack) -> Generator[PaystackClient, None, None]:
    client = PaystackClient(
        SECRET_KEY,
        base_url="https://api.paystack.test",
        transport=httpx.MockTransport(paystack.handler),
    )
    yield client
    client.close()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        paystack_secret_key=SECRET_KEY,
        frontend_url="http://localhost:5173",
    )


@pytest.fixture
def client(settings: Settings, engine: Engine, payments: PaystackClient) -> Generator[TestClient, None, None]:
    app = create_app(settings=settings, engine=engine, payments=payments)
    with TestClient(app) as test_client:
        yield test_client

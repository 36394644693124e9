"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from bill_planner.api.main import create_app
from bill_planner.api.dependencies import get_budget_service
from bill_planner.config import Settings
from bill_planner.domain.models import Bill, Frequency
from bill_planner.infrastructure.database.models import Base
from bill_planner.services.budget_service import BudgetService


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed "now": 10 Jan 2024, so the active month is 2024-01
FIXED_NOW = datetime(2024, 1, 10, 9, 30)


@pytest.fixture
def tables() -> Generator[None, None, None]:
    """Create test database tables, dropped after each test"""
    Base.metadata.create_all(bind=engine)
    try:
        yield
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(tables) -> Generator[Session, None, None]:
    """Session on the test database"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def service(tables) -> BudgetService:
    """Budget service on the test database with the clock pinned to FIXED_NOW"""
    service = BudgetService(TestingSessionLocal, clock=lambda: FIXED_NOW, config=Settings())
    service.load()
    return service


@pytest.fixture
def reload_service(tables) -> Callable[[], BudgetService]:
    """Build a second service that reads back whatever the first one persisted"""

    def factory() -> BudgetService:
        fresh = BudgetService(TestingSessionLocal, clock=lambda: FIXED_NOW, config=Settings())
        fresh.load()
        return fresh

    return factory


@pytest.fixture
def client(service: BudgetService) -> TestClient:
    """Create FastAPI test client backed by the test service"""
    app = create_app()
    app.dependency_overrides[get_budget_service] = lambda: service
    return TestClient(app)


@pytest.fixture
def make_bill() -> Callable[..., Bill]:
    """Factory for bills with sensible defaults; override any field by keyword"""
    counter = {"n": 0}

    def factory(**overrides) -> Bill:
        counter["n"] += 1
        fields = dict(
            id=f"bill-{counter['n']}",
            name=f"Bill {counter['n']}",
            amount_cents=10000,
            due_date=date(2024, 1, 15),
            frequency=Frequency.MONTHLY,
        )
        fields.update(overrides)
        if "original_due_day" not in fields:
            fields["original_due_day"] = fields["due_date"].day
        return Bill(**fields)

    return factory


@pytest.fixture
def sample_bills(make_bill) -> list[Bill]:
    """A typical January: rent, a variable utility, a car loan, a card and a one-off"""
    return [
        make_bill(id="rent", name="Rent", amount_cents=150000, due_date=date(2024, 1, 1)),
        make_bill(id="electric", name="Electric", amount_cents=8500, due_date=date(2024, 1, 20)),
        make_bill(
            id="car",
            name="Car Loan",
            amount_cents=30000,
            due_date=date(2024, 1, 5),
            has_balance=True,
            balance_cents=500000,
            monthly_payment_cents=30000,
            interest_rate=5.9,
        ),
        make_bill(
            id="card",
            name="Visa",
            amount_cents=5000,
            due_date=date(2024, 1, 31),
            has_balance=True,
            balance_cents=120000,
            monthly_payment_cents=5000,
            interest_rate=24.0,
            is_credit_account=True,
        ),
        make_bill(
            id="dentist",
            name="Dentist",
            amount_cents=7500,
            due_date=date(2024, 1, 12),
            frequency=Frequency.ONE_TIME,
        ),
    ]

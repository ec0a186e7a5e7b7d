"""Pytest fixtures for testing"""

import os

# Point the app at SQLite before any enrollment_gateway module builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_enrollment.db")

import pytest
from datetime import datetime
from typing import Generator
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from enrollment_gateway.api.dependencies import get_mail_client, get_payment_gateway
from enrollment_gateway.api.main import create_app
from enrollment_gateway.config import settings
from enrollment_gateway.domain.catalog import load_catalog
from enrollment_gateway.domain.models import ChargeResult, PaymentMethod, PaymentRequest, TierCatalog
from enrollment_gateway.infrastructure.clients.mail import MailClient
from enrollment_gateway.infrastructure.clients.payment_gateway import StripePaymentGateway
from enrollment_gateway.infrastructure.database.models import Base, EnrollmentApplication
from enrollment_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test_enrollment.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

APPLICANT = "costa@trollhair.com"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_gateway() -> MagicMock:
    """Stripe stand-in that captures every charge"""
    gateway = MagicMock(spec=StripePaymentGateway)
    gateway.charge.return_value = ChargeResult(status="succeeded", reference="pi_test_123")
    return gateway


@pytest.fixture
def fake_mail() -> MagicMock:
    """SMTP stand-in that records sent messages"""
    return MagicMock(spec=MailClient)


@pytest.fixture
def client(db: Session, fake_gateway: MagicMock, fake_mail: MagicMock) -> TestClient:
    """Create FastAPI test client with test database and fake collaborators"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: fake_gateway
    app.dependency_overrides[get_mail_client] = lambda: fake_mail
    return TestClient(app)


@pytest.fixture
def application(db: Session) -> EnrollmentApplication:
    """Application submitted before payment, status unset"""
    row = EnrollmentApplication(
        program_id=settings.program_id,
        email=APPLICANT,
        name="Costa Michailidis",
        company="TrollHair Inc",
        payment_status="unset",
    )
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def paid_application(db: Session) -> EnrollmentApplication:
    """Application that already completed payment"""
    row = EnrollmentApplication(
        program_id=settings.program_id,
        email=APPLICANT,
        name="Costa Michailidis",
        company="TrollHair Inc",
        payment_status="paid",
        payment_method="credit-card",
        payment_reference="pi_earlier",
        paid_at=datetime(2026, 1, 5, 15, 30),
        enrolled=True,
    )
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def fee_catalog() -> TierCatalog:
    return load_catalog("fee", 30_000)


@pytest.fixture
def named_catalog() -> TierCatalog:
    return load_catalog("named", 30_000)


@pytest.fixture
def payment_payload() -> dict:
    """Scenario A: $13,500 tier, 5 additional seats, credit card"""
    return {
        "payment": {
            "applicant": "Costa@TrollHair.com",
            "name": "Costa Michailidis",
            "tier": "$13,500",
            "additionalSeats": 5,
            "paymentMethod": "credit-card",
            "company": "TrollHair Inc",
            "jobTitle": "CTO",
            "phone": "+1-212-206-1401",
            "country": "United States",
            "paymentMethodId": "pm_card_visa",
        }
    }


@pytest.fixture
def invoice_payload() -> dict:
    """Scenario B: $21,000 tier, 2 additional seats, invoice"""
    return {
        "payment": {
            "applicant": APPLICANT,
            "name": "Costa Michailidis",
            "finalFee": "$21,000",
            "additionalSeats": 2,
            "paymentMethod": "invoice",
            "company": "TrollHair Inc",
            "jobTitle": "CTO",
            "phone": "+1-212-206-1401",
            "country": "United States",
        }
    }


@pytest.fixture
def payment_request(fee_catalog: TierCatalog) -> PaymentRequest:
    return PaymentRequest(
        applicant=APPLICANT,
        name="Costa Michailidis",
        tier=fee_catalog.get("$13,500"),
        payment_method=PaymentMethod.CREDIT_CARD,
        company="TrollHair Inc",
        job_title="CTO",
        phone="+1-212-206-1401",
        country="United States",
        additional_seats=5,
        support_hours=0,
        payment_method_id="pm_card_visa",
    )

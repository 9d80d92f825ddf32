"""Pytest configuration and fixtures."""

import os
import tempfile
from datetime import datetime, timedelta
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver"]')
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="realty-storage-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from realty.core.database import Base, SessionLocal, engine  # noqa: E402
from realty.core.rate_limit import limiter  # noqa: E402
from realty.main import app  # noqa: E402
from realty.models import Property, PropertyKind, Visit, VisitStatus  # noqa: E402

BASE_TIME = datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def db():
    """Fresh schema and session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    limiter.reset()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_property(db):
    """Insert a property; ``age`` orders creation (larger is older)."""

    def _make(age: int = 0, **fields) -> Property:
        fields.setdefault("kind", PropertyKind.rental)
        fields.setdefault("price", Decimal("1000"))
        fields.setdefault("city", "Recife")
        fields.setdefault("neighborhood", "Boa Viagem")
        created = BASE_TIME - timedelta(days=age)
        prop = Property(created_at=created, updated_at=created, **fields)
        db.add(prop)
        db.flush()
        prop.code = fields.get("code") or f"IM{prop.id:04d}"
        db.commit()
        return prop

    return _make


@pytest.fixture
def make_visit(db):
    def _make(prop: Property, scheduled_at: datetime, **fields) -> Visit:
        fields.setdefault("client_name", "Maria Souza")
        fields.setdefault("status", VisitStatus.scheduled)
        visit = Visit(property_id=prop.id, scheduled_at=scheduled_at, **fields)
        db.add(visit)
        db.commit()
        return visit

    return _make

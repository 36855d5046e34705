"""Pytest configuration and fixtures."""

import os
import secrets
from dataclasses import dataclass
from datetime import date

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.config import DispatcherConfig, Settings, get_settings
from src.database import Base, get_db
from src.main import app
from src.models import DailyEntry, PushSubscription, User
from src.services.base64url import b64url_encode

# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL", "").startswith("postgresql"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/checkin", "/checkin_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DISPATCH_TOKEN = "test-dispatch-token"


def _raw_point(key: ec.EllipticCurvePrivateKey) -> bytes:
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )


@dataclass
class BrowserKeys:
    """Key material a browser generates when it subscribes to push."""

    private_key: ec.EllipticCurvePrivateKey
    auth_secret: bytes

    @property
    def public_key(self) -> bytes:
        return _raw_point(self.private_key)

    @property
    def p256dh(self) -> str:
        return b64url_encode(self.public_key)

    @property
    def auth(self) -> str:
        return b64url_encode(self.auth_secret)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def browser_keys():
    """Factory for fresh browser subscription keys."""

    def _make() -> BrowserKeys:
        return BrowserKeys(
            private_key=ec.generate_private_key(ec.SECP256R1()),
            auth_secret=secrets.token_bytes(16),
        )

    return _make


@pytest.fixture(scope="session")
def vapid_keys() -> tuple[str, str]:
    """A VAPID key pair as (public point, private scalar), base64url encoded."""
    key = ec.generate_private_key(ec.SECP256R1())
    scalar = key.private_numbers().private_value.to_bytes(32, "big")
    return b64url_encode(_raw_point(key)), b64url_encode(scalar)


@pytest.fixture
def dispatcher_config(vapid_keys) -> DispatcherConfig:
    """Dispatcher config with real keys and defaults for everything else."""
    public_key, private_key = vapid_keys
    return DispatcherConfig(
        vapid_public_key=public_key,
        vapid_private_key=private_key,
        vapid_subject="mailto:test@example.com",
    )


@pytest.fixture
def test_settings(vapid_keys) -> Settings:
    """Settings for API tests."""
    public_key, private_key = vapid_keys
    return Settings(
        database_url=SQLALCHEMY_DATABASE_URL,
        vapid_public_key=public_key,
        vapid_private_key=private_key,
        vapid_subject="mailto:test@example.com",
        dispatch_token=DISPATCH_TOKEN,
    )


@pytest.fixture
def add_subscriber(db, browser_keys):
    """Factory that creates a user with a push subscription.

    Returns (user, keys) so tests can decrypt what was delivered.
    """
    counter = {"n": 0}

    def _add(
        timezone: str | None = "UTC",
        endpoint: str | None = None,
        keys: BrowserKeys | None = None,
    ) -> tuple[User, BrowserKeys]:
        counter["n"] += 1
        keys = keys or browser_keys()
        user = User(email=f"user{counter['n']}@example.com", name=f"User {counter['n']}")
        db.add(user)
        db.flush()
        db.add(
            PushSubscription(
                user_id=user.id,
                endpoint=endpoint or f"https://push.example.com/send/{user.id}",
                p256dh=keys.p256dh,
                auth=keys.auth,
                timezone=timezone,
            )
        )
        db.commit()
        db.refresh(user)
        return user, keys

    return _add


@pytest.fixture
def add_entry(db):
    """Factory that records a check-in for a user on a date."""

    def _add(user_id: int, day: str) -> DailyEntry:
        entry = DailyEntry(user_id=user_id, date=date.fromisoformat(day), mood=3)
        db.add(entry)
        db.commit()
        return entry

    return _add


@pytest.fixture(scope="function")
def client(db, test_settings):
    """Create a test client with database and settings overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def dispatch_headers() -> dict:
    """Bearer header accepted by the dispatch endpoint."""
    return {"Authorization": f"Bearer {DISPATCH_TOKEN}"}

import os
import tempfile

# Point the app at an isolated in-memory database before anything imports app.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="abinote-logs-")
os.environ["ENVIRONMENT"] = "test"
os.environ["RESEND_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.database import Base, SessionLocal, engine
from app.models.user import User, UserRole, UserStatus
from app.utils.hashing import hash_password


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make(
        email="ann@example.com",
        password="longenough1",
        name="Ann",
        role=UserRole.USER,
        status=UserStatus.ACTIVE,
    ) -> User:
        user = User(
            email=email,
            password_hash=hash_password(password),
            name=name,
            role=role,
            status=status,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


def login(client: TestClient, email: str, password: str):
    return client.post("/api/auth/login", json={"email": email, "password": password})

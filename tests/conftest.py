import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("MAIL_BACKEND", "console")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import credentials  # noqa: E402
import main  # noqa: E402
from db import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from models import RecipeDB, UserDB  # noqa: E402
from security import hash_password, issue_token  # noqa: E402

# Use StaticPool so the same in-memory database is shared across connections
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "pass1234"


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    main.app.dependency_overrides[get_db] = override_get_db
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Capture verification mails instead of sending them."""
    sent = []
    monkeypatch.setattr(
        credentials, "send_verification_email", lambda to, code: sent.append((to, code))
    )
    return sent


@pytest.fixture
def make_user(db):
    def _make(name="Alice", email=None, password=DEFAULT_PASSWORD, role="user", verified=True):
        user = UserDB(
            name=name,
            email=email or f"{name.lower()}@example.com",
            password_hash=hash_password(password),
            role=role,
            is_verified=verified,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_recipe(db):
    def _make(owner, **overrides):
        fields = dict(
            title="Pancakes",
            category="Breakfast",
            ingredients=["flour", "egg", "milk"],
            steps="Mix\nCook",
            difficulty=2,
            cooking_time="20 min",
            owner_id=owner.id,
            chef_name=owner.name,
            status="pending",
        )
        fields.update(overrides)
        recipe = RecipeDB(**fields)
        db.add(recipe)
        db.commit()
        db.refresh(recipe)
        return recipe

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {issue_token(user.id)}"}

    return _headers

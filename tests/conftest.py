import os
import tempfile

# Configure before the application modules read settings
os.environ.setdefault("DATABASE_URI", "sqlite://")
os.environ.setdefault("UPLOAD_PATH", tempfile.mkdtemp(prefix="rewardstore-uploads-"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rewardstore.core import Base, get_db
from rewardstore.core.database import configure_sqlite
from rewardstore.core.security import ActingUser, get_password_hash
from rewardstore.models import AppUser, Product, TransactionType
from rewardstore.api.auth import create_access_token
from rewardstore.services import LedgerService
from main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create a user whose opening balance is booked in the ledger"""
    def _make_user(username, role="employee", points=0, password="secret"):
        user = AppUser(
            username=username,
            hashed_password=get_password_hash(password),
            email=f"{username}@example.com",
            display_name=username.title(),
            role=role,
            points=0,
        )
        db.add(user)
        db.flush()
        if points:
            LedgerService.post_entry(db, user, points, TransactionType.EARNED, "Opening balance")
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_product(db):
    def _make_product(name="Mug", points_cost=30, stock=5, is_active=True):
        product = Product(name=name, points_cost=points_cost, stock=stock, is_active=is_active)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make_product


@pytest.fixture
def admin(make_user):
    return make_user("admin", role="admin")


@pytest.fixture
def employee(make_user):
    return make_user("alice", points=100)


def actor_for(user):
    return ActingUser(id=user.id, role=user.role)


def auth_headers(user):
    token = create_access_token({"sub": str(user.id), "username": user.username, "role": user.role})
    return {"Authorization": f"Bearer {token}"}

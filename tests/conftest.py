import base64

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from secure_finance.main import app
from secure_finance.db.core import Base, UserDB, get_db
from secure_finance.crud.crud_user import principal_from_user
from secure_finance.services.demo_data import seed_colours
from secure_finance.services.user_cache import UserIdCache

API = "/secure-finance-manager"


def b64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def basic_auth(username: str, password: bytes) -> dict:
    token = base64.b64encode(f"{username}:{b64(password)}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    testing_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = testing_session()
    seed_colours(db)
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_user(db_session):
    """Insert a user directly and return (row, principal)."""

    def _make_user(username: str, password: bytes, email: str = None,
                   first_name: str = None, last_name: str = None):
        db_user = UserDB(
            username=username,
            password=password,
            email=email,
            first_name=first_name,
            last_name=last_name,
        )
        db_session.add(db_user)
        db_session.commit()
        db_session.refresh(db_user)
        return db_user, principal_from_user(db_user)

    return _make_user


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.state.user_cache = UserIdCache()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

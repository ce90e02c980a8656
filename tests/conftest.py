import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from backend.auth import jwt_handler  # noqa: E402
from backend.auth.passwords import hash_password  # noqa: E402
from backend.database import Base, get_db  # noqa: E402
from backend.main import app  # noqa: E402
from backend.models.coworking_space import CoworkingSpace  # noqa: E402
from backend.models.reservation import Reservation  # noqa: E402
from backend.models.user import User  # noqa: E402

TEST_PASSWORD = 'secret123'
TABLES = [User.__table__, CoworkingSpace.__table__, Reservation.__table__]


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=TABLES)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make_user(name: str, email: str, role: str = 'user') -> User:
        user = User(
            name=name,
            email=email,
            hashed_password=hash_password(TEST_PASSWORD),
            role=role,
            telephone_number='0812345678',
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def member(make_user) -> User:
    return make_user('Mina Member', 'mina@example.com')


@pytest.fixture
def other_member(make_user) -> User:
    return make_user('Omar Other', 'omar@example.com')


@pytest.fixture
def admin(make_user) -> User:
    return make_user('Ada Admin', 'ada@example.com', role='admin')


@pytest.fixture
def make_space(db):
    def _make_space(name: str, location: str = '1 Main St, Bangkok', seats: int = 10) -> CoworkingSpace:
        space = CoworkingSpace(
            name=name,
            location=location,
            latitude=13.7563,
            longitude=100.5018,
            available_seats=seats,
        )
        db.add(space)
        db.commit()
        db.refresh(space)
        return space

    return _make_space


@pytest.fixture
def space(make_space) -> CoworkingSpace:
    return make_space('Hive Sathorn')


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        token = jwt_handler.create_access_token(subject=str(user.id), role=user.role)
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers


@pytest.fixture
def client(session_factory, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr('backend.routes.reservation_routes.ensure_database_ready', lambda: None)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

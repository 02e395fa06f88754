import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from teamboard.config.settings import settings
from teamboard.database import Base, build_engine, get_db
from teamboard.schemas.user import UserRegister
from teamboard.services.identity import IdentityService

PASSWORD = "Secret@123"


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    # Cheap hashes and the default policies for every test
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)
    monkeypatch.setattr(settings, "EMAIL_UNIQUENESS_CASE_INSENSITIVE", False)
    monkeypatch.setattr(settings, "ENFORCE_ASSIGNEE_MEMBERSHIP", False)
    return settings


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
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


@pytest.fixture
def make_user(db):
    """Register a user straight through the identity service"""
    def _make_user(email="alice@example.com", first_name="Alice", last_name="Anders", password=PASSWORD, bio=""):
        return IdentityService(db).register(UserRegister(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            bio=bio,
        ))
    return _make_user


@pytest.fixture
def register(client):
    """Register over HTTP; returns (user id, auth headers)"""
    def _register(email="alice@example.com", first_name="Alice", last_name="Anders", password=PASSWORD):
        response = client.post("/auth/register", json={
            "email": email,
            "password": password,
            "firstName": first_name,
            "lastName": last_name,
        })
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["user"]["id"], {"Authorization": f"Bearer {data['accessToken']}"}
    return _register

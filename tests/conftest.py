"""
Shared fixtures: an in-memory SQLite database per test and API clients
signed in as an administrator or a regular user.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import Settings
from database import Base, get_db, InsertUser, InsertClass
from storage import DatabaseStorage
from main import create_app

ADMIN = {"username": "diretora", "password": "admin-pass"}
TEACHER = {"username": "professor", "password": "teacher-pass"}


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
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage(db):
    return DatabaseStorage(db)


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        secret_key="test-secret",
        run_bootstrap=False,
        admin_username="bootstrap-admin",
        admin_password="bootstrap-pass",
        required_classes=["6A", "6B", "7A"],
        legacy_classes=["9A", "9C"],
    )


@pytest.fixture
def app(session_factory, test_settings):
    app = create_app(test_settings)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app):
    """Anonymous client; the lifespan (and its bootstrap) is not started."""
    return TestClient(app)


@pytest.fixture
def users(storage):
    admin = storage.create_user(InsertUser(is_admin=True, **ADMIN))
    teacher = storage.create_user(InsertUser(is_admin=False, **TEACHER))
    return {"admin": admin.id, "teacher": teacher.id}


def _login(app, credentials):
    client = TestClient(app)
    response = client.post("/api/login", json=credentials)
    assert response.status_code == 200, response.text
    return client


@pytest.fixture
def admin_client(app, users):
    return _login(app, ADMIN)


@pytest.fixture
def teacher_client(app, users):
    return _login(app, TEACHER)


@pytest.fixture
def classes(storage):
    """Classes 6A and 6B, keyed by name."""
    return {
        name: storage.create_class(InsertClass(name=name)).id
        for name in ("6A", "6B")
    }

import pytest
import os
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from hrportal.database import Base, get_db
from hrportal.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "Password123!"


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="session")
def password_hash():
    # bcrypt is slow; hash once for every fixture user
    from hrportal.services.auth import get_password_hash
    return get_password_hash(PASSWORD)


@pytest.fixture(scope="function")
def make_user(db_session, password_hash):
    """Factory: make_user("employee", manager=some_user, name="...")."""
    from hrportal.models.user import User

    counter = {"n": 0}

    def _make_user(role, manager=None, name=None, department="engineering", **extra):
        extra.setdefault("is_active", True)
        extra.setdefault("join_date", date(2023, 1, 9))
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=f"{role}.{n}@nts-tech.com",
            hashed_password=password_hash,
            name=name or f"{role.replace('_', ' ').title()} {n}",
            role=role,
            manager_id=manager.id if manager else None,
            department=department,
            employee_code=f"NTS-{n:04d}",
            **extra
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user


@pytest.fixture(scope="function")
def director(make_user):
    return make_user("engineering_director", name="Dana Director")


@pytest.fixture(scope="function")
def manager(make_user, director):
    return make_user("software_development_manager", manager=director, name="Morgan Manager")


@pytest.fixture(scope="function")
def team_lead(make_user, manager):
    return make_user("team_lead", manager=manager, name="Lee Lead")


@pytest.fixture(scope="function")
def employee(make_user, manager):
    return make_user("employee", manager=manager, name="Emery Employee")


@pytest.fixture(scope="function")
def intern(make_user, manager):
    return make_user("intern", manager=manager, name="Indy Intern")


@pytest.fixture(scope="function")
def other_director(make_user):
    """A second, unrelated branch of the hierarchy."""
    return make_user("global_hr_director", name="Harper HR", department="hr")


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens for a user."""
    from hrportal.services.auth import create_access_token

    def _get_token(user):
        return create_access_token(data={"sub": user.id, "role": user.role})
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _auth_headers


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

"""
Pytest configuration and shared fixtures for the Job Tracker tests.
"""
import os
from datetime import date, timedelta
from unittest.mock import patch

# Settings are read when the backend package is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-jwt-tokens-12345678901234567890")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("TESTING", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.main import app
from backend.models.db.database import get_db, Base
from backend.models.db import crud
from backend.models.db import section as section_model
from backend.models.db import application as application_model
from backend.security import get_password_hash


# Test Database Setup
@pytest.fixture(scope="function")
def test_db_engine():
    """A fresh in-memory SQLite database per test, shared by every thread."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_db_engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def test_client(test_db_session):
    """Create a test client with overridden database dependency."""
    def override_get_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


# User Fixtures
@pytest.fixture
def test_user_data():
    """Sample user data for testing."""
    return {
        "email": "test@example.com",
        "password": "testpassword123",
    }


@pytest.fixture
def test_user(test_db_session, test_user_data):
    """Create a test user directly in the database."""
    return crud.create_user(
        test_db_session,
        email=test_user_data["email"],
        hashed_password=get_password_hash(test_user_data["password"]),
    )


@pytest.fixture
def other_user(test_db_session):
    """A second account, used to check that data never crosses owners."""
    return crud.create_user(
        test_db_session,
        email="other@example.com",
        hashed_password=get_password_hash("otherpassword123"),
    )


@pytest.fixture
def auth_headers(test_client, test_user_data):
    """Get authentication headers for API requests."""
    # Register and login user
    response = test_client.post("/api/auth/register", json=test_user_data)
    assert response.status_code == 200

    # Login to get token
    login_data = {
        "username": test_user_data["email"],
        "password": test_user_data["password"]
    }
    response = test_client.post("/api/auth/login", data=login_data)
    assert response.status_code == 200

    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def browser_client(test_client, test_user, test_user_data):
    """A test client signed in through the login form, carrying the session cookie."""
    response = test_client.post(
        "/login",
        data={"email": test_user_data["email"], "password": test_user_data["password"]},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return test_client


# Application Test Data
@pytest.fixture
def today():
    return date.today()


@pytest.fixture
def sample_application_data(today):
    """A complete, valid application payload as a form would submit it."""
    return {
        "company_name": "Acme Corp",
        "position_title": "Software Engineer",
        "job_posting_url": "https://acme.example.com/jobs/42",
        "location": "Berlin",
        "work_type": "hybrid",
        "salary_range_min": "80000",
        "salary_range_max": "120000",
        "status": "applied",
        "date_applied": (today - timedelta(days=3)).isoformat(),
        "section_id": "",
    }


@pytest.fixture
def minimal_application_data(today):
    return {
        "company_name": "Acme Corp",
        "position_title": "Software Engineer",
        "date_applied": today.isoformat(),
    }


@pytest.fixture
def make_section(test_db_session):
    """Factory inserting a section row for a user."""
    def _make(user, name):
        section = section_model.Section(user_id=user.id, name=name)
        test_db_session.add(section)
        test_db_session.commit()
        test_db_session.refresh(section)
        return section
    return _make


@pytest.fixture
def make_application(test_db_session, today):
    """Factory inserting an application row for a user."""
    def _make(user, company_name="Acme Corp", section=None, days_ago=0, **fields):
        application = application_model.Application(
            user_id=user.id,
            company_name=company_name,
            position_title=fields.pop("position_title", "Engineer"),
            date_applied=today - timedelta(days=days_ago),
            section_id=section.id if section is not None else None,
            **fields,
        )
        test_db_session.add(application)
        test_db_session.commit()
        test_db_session.refresh(application)
        return application
    return _make


# Environment Variable Mocks
@pytest.fixture(autouse=True)
def mock_environment_variables():
    """Mock environment variables for testing."""
    test_env = {
        "SECRET_KEY": "test-secret-key-for-jwt-tokens-12345678901234567890",
        "LOG_LEVEL": "DEBUG"
    }

    with patch.dict(os.environ, test_env):
        yield test_env

# tests/conftest.py
"""
Shared fixtures for authentication tests.

Provides a configured authenticator, an in-memory session store, requests
with and without a session, and sample user records.
"""

import pytest

from community_auth.core.config import AuthConfig
from community_auth.core.security.session_auth import SessionAuthenticator
from community_auth.models.session_state import InMemorySessionStore, SimpleRequest

TEST_SECRET = "test-cookie-secret-for-unit-tests"


@pytest.fixture
def auth_config():
    return AuthConfig(cookie_secret=TEST_SECRET)


@pytest.fixture
def authenticator(auth_config):
    return SessionAuthenticator(auth_config)


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def request_with_session(store):
    """Request whose session was created upstream"""
    request = SimpleRequest(store, remote_addr="198.51.100.23")
    request.get_session(create=True)
    return request


@pytest.fixture
def anonymous_request(store):
    """Request without any session"""
    return SimpleRequest(store, remote_addr="198.51.100.24")


@pytest.fixture
def sample_user():
    return {
        "oId": "1536034564000",
        "userName": "alice",
        "userEmail": "alice@example.com",
        "userPassword": "5f4dcc3b5aa765d61d8327deb882cf99",
    }


@pytest.fixture
def user_directory(sample_user):
    """object id -> user record, the lookup used to resume logins"""
    return {sample_user["oId"]: sample_user}

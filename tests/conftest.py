"""
Pytest Configuration and Centralized Fixtures.

Provides reusable fixtures for testing:
- Signing keys and the route URL layer
- Callback URL generator and both verification strategies
- API test client
"""

import os

import pytest
from fastapi.testclient import TestClient

# Set required environment variables BEFORE importing app modules
os.environ.setdefault("APP_KEY", "test-app-key-for-signing-callbacks")
os.environ.setdefault("APP_URL", "http://testserver")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-api-key")
os.environ.setdefault("TRACING_ENABLED", "false")

from signed_callbacks.models.domain import SigningKeys
from signed_callbacks.services.callback_urls import CallbackUrlGenerator
from signed_callbacks.services.route_urls import SERVER_NOTIFICATIONS_ROUTE, RouteUrlGenerator
from signed_callbacks.services.signature_verifier import (
    DelegatedSignatureVerifier,
    ManualSignatureVerifier,
)

TEST_APP_URL = "https://app.test"
TEST_NOTIFY_PATH = "/notify"


# ============================================================================
# Signing Fixtures
# ============================================================================


@pytest.fixture
def signing_keys() -> SigningKeys:
    """Single current key, no rotation."""
    return SigningKeys.from_strings("s3cr3t")


@pytest.fixture
def route_urls(signing_keys: SigningKeys) -> RouteUrlGenerator:
    """Route URL layer with the callback route at https://app.test/notify."""
    return RouteUrlGenerator(
        app_url=TEST_APP_URL,
        keys=signing_keys,
        routes={SERVER_NOTIFICATIONS_ROUTE: TEST_NOTIFY_PATH},
    )


@pytest.fixture
def callback_urls(route_urls: RouteUrlGenerator) -> CallbackUrlGenerator:
    """Callback URL generator without expiry."""
    return CallbackUrlGenerator(route_urls)


@pytest.fixture
def manual_verifier(signing_keys: SigningKeys) -> ManualSignatureVerifier:
    return ManualSignatureVerifier(signing_keys)


@pytest.fixture
def delegated_verifier(route_urls: RouteUrlGenerator) -> DelegatedSignatureVerifier:
    return DelegatedSignatureVerifier(route_urls)


@pytest.fixture(params=["manual", "delegated"])
def verifier(request, manual_verifier, delegated_verifier):
    """Each verification strategy in turn."""
    if request.param == "manual":
        return manual_verifier
    return delegated_verifier


# ============================================================================
# API Fixtures
# ============================================================================


@pytest.fixture
def client():
    """Test client for the FastAPI app, with dependency overrides cleared after."""
    from signed_callbacks.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

"""
Test configuration and fixtures for BrandColor resolver tests.
"""
import pytest
from fastapi.testclient import TestClient

# Import the main app
from main import app


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from app.utils.metrics import reset_metrics
    reset_metrics()

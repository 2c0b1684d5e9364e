"""
Pytest configuration and shared fixtures for Rapport tests.

Test Categories:
- unit: Fast tests with no external dependencies (< 100ms each)
- integration: Tests requiring a running server
- requires_ollama: Tests requiring Ollama LLM to be running

Run categories:
- pytest -m unit              # Fast unit tests only
- pytest -m "not integration" # Skip integration tests
- pytest                      # All tests
"""
import pytest

from tests.reset_singletons import reset_all_singletons


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (server required)")
    config.addinivalue_line("markers", "requires_ollama: Requires Ollama running")


@pytest.fixture(scope="session")
def ollama_available():
    """Check if Ollama is available for tests."""
    try:
        import httpx
        response = httpx.get("http://localhost:11434", timeout=2.0)
        return response.status_code == 200
    except Exception:
        return False


@pytest.fixture(scope="session")
def server_available():
    """Check if API server is available for tests."""
    try:
        import httpx
        response = httpx.get("http://localhost:5000/ping", timeout=2.0)
        return response.status_code == 200
    except Exception:
        return False


@pytest.fixture(scope="function")
def mock_settings(monkeypatch):
    """
    Mock settings for testing.

    Uses the rules backend so nothing reaches the network.
    """
    from config.settings import Settings

    mock = Settings(
        extraction_backend="rules",
        anthropic_api_key="test-key-for-testing",
    )

    # Patch the global settings
    monkeypatch.setattr("config.settings.settings", mock)
    return mock


@pytest.fixture(autouse=True)
def reset_singletons_after_test():
    """Drop singletons so mocks and settings never leak between tests."""
    yield
    reset_all_singletons()


def pytest_collection_modifyitems(config, items):
    """
    Auto-mark tests based on name.

    Tests with 'integration' or 'real_' in the name get the 'integration' marker.
    """
    for item in items:
        if "integration" in item.name or "real_" in item.name:
            item.add_marker(pytest.mark.integration)

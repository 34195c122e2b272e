"""Pytest configuration for the trip cost estimator."""

import sys
from pathlib import Path

import httpx
import pytest

# Ensure backend/ is on sys.path so that `import tripcost` works under pytest.
BACKEND = Path(__file__).resolve().parent.parent
if str(BACKEND) not in sys.path:
    sys.path.insert(0, str(BACKEND))

from tripcost.config import Settings  # noqa: E402
from tripcost.services.dataset_loader import load_reference_data  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    """Settings with every external credential blanked out."""
    return Settings(
        _env_file=None,
        opencage_api_key="",
        graphhopper_api_key="",
        amadeus_client_id="",
        amadeus_client_secret="",
        pricing_api_key="",
        pricing_api_base_url="",
        llm_api_key="",
        anthropic_api_key="",
    )


@pytest.fixture
def reference(settings):
    return load_reference_data(settings)


def mock_client(handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by `handler(request) -> httpx.Response`."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def failing_client() -> httpx.AsyncClient:
    """AsyncClient that fails the test if any request is made."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"Unexpected network call: {request.method} {request.url}")
    return mock_client(handler)

"""
Pytest fixtures for the HTML to PDF API tests.

No test launches a real browser: ``mock_chromium`` patches Playwright so
every render returns a small fake PDF, and the FastAPI client points the
upload directory at a per-test temp dir.
"""

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

# Set environment variables BEFORE any imports from html_pdf_api
# so ApiSettings is configured correctly when first loaded.
os.environ["ENVIRONMENT"] = "development"
os.environ["MAX_CONCURRENT_RENDERS"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

FAKE_PDF = b"%PDF-1.4 fake pdf content"


@pytest.fixture
def mock_chromium():
    """
    Patch async_playwright so renders never launch Chromium.

    Yields a namespace with the patched factory, the playwright context
    manager, the browser and the page, for assertions on teardown.
    """
    with patch("playwright.async_api.async_playwright") as mock_playwright:
        mock_page = AsyncMock()
        mock_page.pdf = AsyncMock(return_value=FAKE_PDF)
        mock_browser = AsyncMock()
        mock_browser.new_page = AsyncMock(return_value=mock_page)
        playwright = MagicMock(
            chromium=MagicMock(
                launch=AsyncMock(return_value=mock_browser)
            )
        )
        context_manager = mock_playwright.return_value
        context_manager.__aenter__ = AsyncMock(return_value=playwright)
        context_manager.__aexit__ = AsyncMock(return_value=False)

        yield SimpleNamespace(
            factory=mock_playwright,
            context=context_manager,
            playwright=playwright,
            browser=mock_browser,
            page=mock_page,
        )


@pytest.fixture
def upload_dir(tmp_path):
    """Empty upload directory for one test."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def api_settings(upload_dir):
    from html_pdf_api.config import ApiSettings
    return ApiSettings(upload_dir=upload_dir)


@pytest.fixture
def client(api_settings):
    """FastAPI test client with settings pointed at the temp upload dir."""
    from html_pdf_api.app import app, get_render_limiter
    from html_pdf_api.config import get_settings

    app.dependency_overrides[get_settings] = lambda: api_settings
    app.dependency_overrides[get_render_limiter] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()

"""
RecipeShare API: Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all
       tests. Nothing here talks to a real database or to Cloudinary.

Fixtures (function-scoped):
    ├── mock_db_session:  AsyncMock standing in for AsyncSession
    ├── mock_store:       AsyncMock RecipeStore
    ├── mock_image_store: AsyncMock ImageStore (upload/destroy/health_check)
    ├── make_recipe:      Factory for transient Recipe instances
    ├── sample_png_bytes: Tiny PNG payload for upload tests
    ├── app:              FastAPI app with the stores overridden
    └── test_client:      HTTPX AsyncClient bound to `app`
"""

import os
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Settings are read at import time, so these must be set before app imports
os.environ.setdefault("CLOUDINARY_NAME", "test-cloud")
os.environ.setdefault("CLOUDINARY_API_KEY", "test-key")
os.environ.setdefault("CLOUDINARY_API_SECRET", "test-secret")
os.environ["LOG_LEVEL"] = "WARNING"

from recipeshare.models.recipe import Recipe  # noqa: E402
from recipeshare.services.image_store import ImageStore, StoredImage  # noqa: E402
from recipeshare.services.recipe_store import RecipeStore  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = recipe
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_recipe():
    """Returns a factory building Recipe rows that were never flushed."""

    def _make(**overrides) -> Recipe:
        fields = {
            "id": uuid.uuid4(),
            "name": "Shakshuka",
            "description": "Eggs poached in spiced tomato sauce",
            "price": Decimal("12.50"),
            "image": "https://res.cloudinary.com/test-cloud/image/upload/v1/recipes/old.png",
            "image_id": "recipes/old",
            "author_id": "user-1",
            "author_username": "alice",
            "created_at": datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return Recipe(**fields)

    return _make


@pytest.fixture
def mock_store():
    return AsyncMock(spec=RecipeStore)


@pytest.fixture
def mock_image_store():
    """ImageStore double whose upload returns a fresh url/key pair."""
    image_store = AsyncMock(spec=ImageStore)
    image_store.upload.return_value = StoredImage(
        url="https://res.cloudinary.com/test-cloud/image/upload/v2/recipes/new.png",
        key="recipes/new",
    )
    image_store.destroy.return_value = None
    image_store.health_check.return_value = True
    return image_store


@pytest.fixture
def sample_png_bytes():
    # PNG signature + IHDR chunk header; enough for an upload body
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
        b"\x1f\x15\xc4\x89"
    )


@pytest.fixture
def app(mock_store, mock_image_store):
    """FastAPI app whose record store and image store are test doubles."""
    from recipeshare.dependencies import get_image_store, get_recipe_store
    from recipeshare.main import create_app

    application = create_app()
    application.dependency_overrides[get_recipe_store] = lambda: mock_store
    application.dependency_overrides[get_image_store] = lambda: mock_image_store
    application.state.image_store = mock_image_store
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the ASGI app (no server, no lifespan).

    Usage:
        async def test_index(test_client):
            response = await test_client.get("/recipes")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

"""
RecipeShare API: Recipe Route Tests
====================================

What:  End-to-end HTTP tests for /recipes and /health through the ASGI app.
How:   The `app` fixture swaps in mock record/image stores, so each test sees
       the real routing, form parsing, intake, services and error handlers.
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from recipeshare.exceptions import ImageDeletionError, ImageUploadError, PersistenceError
from recipeshare.models.recipe import Comment


AUTHOR_HEADERS = {"X-User-Id": "user-1", "X-Username": "alice"}
FORM = {"name": "Ramen", "description": "Pork broth", "price": "9.99"}


def _png(sample_png_bytes, filename="dish.png"):
    return {"image": (filename, sample_png_bytes, "image/png")}


class TestListRecipes:

    @pytest.mark.asyncio
    async def test_index(self, test_client, mock_store, make_recipe):
        mock_store.find.return_value = [make_recipe(name="Pad Thai")]
        mock_store.count.return_value = 1

        response = await test_client.get("/recipes")

        assert response.status_code == 200
        body = response.json()
        assert body["current"] == 1
        assert body["pages"] == 1
        assert body["recipes"][0]["name"] == "Pad Thai"
        assert body["recipes"][0]["price"] == "12.50"
        assert body["recipes"][0]["author"] == {"id": "user-1", "username": "alice"}
        assert body["no_match"] is None

    @pytest.mark.asyncio
    async def test_search_and_page(self, test_client, mock_store):
        mock_store.find.return_value = []
        mock_store.count.return_value = 0

        response = await test_client.get("/recipes", params={"search": "a.b", "page": "2"})

        assert response.status_code == 200
        mock_store.find.assert_awaited_once_with(r"a\.b", skip=8, limit=8)
        body = response.json()
        assert body["search"] == "a.b"
        assert body["no_match"] == "No recipes match your search, please try again."

    @pytest.mark.asyncio
    async def test_bad_page_falls_back_to_first(self, test_client, mock_store):
        mock_store.find.return_value = []
        mock_store.count.return_value = 0

        response = await test_client.get("/recipes", params={"page": "abc"})

        assert response.json()["current"] == 1
        mock_store.find.assert_awaited_once_with(None, skip=0, limit=8)

    @pytest.mark.asyncio
    async def test_count_failure_is_500(self, test_client, mock_store):
        mock_store.find.return_value = []
        mock_store.count.side_effect = PersistenceError()

        response = await test_client.get("/recipes")

        assert response.status_code == 500
        assert response.json()["error"] == "server_error"
        assert "X-Request-ID" in response.headers


class TestCreateRecipe:

    @pytest.mark.asyncio
    async def test_created(self, test_client, mock_store, mock_image_store, make_recipe, sample_png_bytes):
        recipe_id = uuid4()
        mock_store.create.side_effect = lambda fields: make_recipe(id=recipe_id, **fields)

        response = await test_client.post(
            "/recipes", data=FORM, files=_png(sample_png_bytes), headers=AUTHOR_HEADERS
        )

        assert response.status_code == 201
        assert response.headers["Location"] == f"/recipes/{recipe_id}"
        body = response.json()
        assert body["name"] == "Ramen"
        assert body["price"] == "9.99"
        assert body["image_id"] == "recipes/new"
        uploaded = mock_image_store.upload.await_args.args[0]
        assert uploaded.filename == "dish.png"
        assert uploaded.content == sample_png_bytes

    @pytest.mark.asyncio
    async def test_non_image_rejected_before_any_call(
        self, test_client, mock_store, mock_image_store, sample_png_bytes
    ):
        response = await test_client.post(
            "/recipes",
            data=FORM,
            files={"image": ("photo.exe", b"MZ\x90\x00", "application/octet-stream")},
            headers=AUTHOR_HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Only image files are allowed!"
        mock_image_store.upload.assert_not_awaited()
        mock_store.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_price(self, test_client, mock_image_store, sample_png_bytes):
        response = await test_client.post(
            "/recipes",
            data={**FORM, "price": "cheap"},
            files=_png(sample_png_bytes),
            headers=AUTHOR_HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "price"
        mock_image_store.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_image(self, test_client, mock_image_store):
        response = await test_client.post("/recipes", data=FORM, headers=AUTHOR_HEADERS)

        assert response.status_code == 400
        mock_image_store.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requires_login(self, test_client, mock_image_store, sample_png_bytes):
        response = await test_client.post("/recipes", data=FORM, files=_png(sample_png_bytes))

        assert response.status_code == 401
        assert response.json()["message"] == "You need to be logged in to do that"
        mock_image_store.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upload_failure_is_502(self, test_client, mock_store, mock_image_store, sample_png_bytes):
        mock_image_store.upload.side_effect = ImageUploadError(message="Invalid image file")

        response = await test_client.post(
            "/recipes", data=FORM, files=_png(sample_png_bytes), headers=AUTHOR_HEADERS
        )

        assert response.status_code == 502
        assert response.json()["message"] == "Invalid image file"
        mock_store.create.assert_not_awaited()


class TestShowRecipe:

    @pytest.mark.asyncio
    async def test_with_comments(self, test_client, mock_store, make_recipe):
        recipe = make_recipe()
        recipe.comments = [
            Comment(
                id=uuid4(),
                text="Delicious!",
                author_id="user-2",
                author_username="bob",
                created_at=recipe.created_at,
            )
        ]
        mock_store.find_by_id.return_value = recipe

        response = await test_client.get(f"/recipes/{recipe.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(recipe.id)
        assert body["comments"][0]["text"] == "Delicious!"
        assert body["comments"][0]["author"]["username"] == "bob"

    @pytest.mark.asyncio
    async def test_not_found(self, test_client, mock_store):
        mock_store.find_by_id.return_value = None

        response = await test_client.get(f"/recipes/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["message"] == "Recipe not found!"

    @pytest.mark.asyncio
    async def test_malformed_id(self, test_client, mock_store):
        response = await test_client.get("/recipes/not-a-uuid")

        assert response.status_code == 400
        mock_store.find_by_id.assert_not_awaited()


class TestUpdateRecipe:

    @pytest.mark.asyncio
    async def test_fields_only(self, test_client, mock_store, mock_image_store, make_recipe):
        recipe = make_recipe()
        mock_store.find_by_id.return_value = recipe

        response = await test_client.put(
            f"/recipes/{recipe.id}", data={**FORM, "name": "Tonkotsu"}, headers=AUTHOR_HEADERS
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Tonkotsu"
        assert response.json()["image_id"] == "recipes/old"
        mock_image_store.destroy.assert_not_awaited()
        mock_store.save.assert_awaited_once_with(recipe)

    @pytest.mark.asyncio
    async def test_replace_image(self, test_client, mock_store, mock_image_store, make_recipe, sample_png_bytes):
        recipe = make_recipe()
        mock_store.find_by_id.return_value = recipe

        response = await test_client.put(
            f"/recipes/{recipe.id}", data=FORM, files=_png(sample_png_bytes), headers=AUTHOR_HEADERS
        )

        assert response.status_code == 200
        assert response.json()["image_id"] == "recipes/new"
        mock_image_store.destroy.assert_awaited_once_with("recipes/old")

    @pytest.mark.asyncio
    async def test_not_author(self, test_client, mock_store, mock_image_store, make_recipe):
        recipe = make_recipe(author_id="someone-else")
        mock_store.find_by_id.return_value = recipe

        response = await test_client.put(f"/recipes/{recipe.id}", data=FORM, headers=AUTHOR_HEADERS)

        assert response.status_code == 403
        mock_store.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_image_rejected_before_any_call(self, test_client, mock_store, mock_image_store):
        response = await test_client.put(
            f"/recipes/{uuid4()}",
            data=FORM,
            files={"image": ("photo.exe", b"MZ\x90\x00", "application/octet-stream")},
            headers=AUTHOR_HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Only image files are allowed!"
        mock_store.find_by_id.assert_not_awaited()
        mock_image_store.destroy.assert_not_awaited()
        mock_image_store.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_price(self, test_client, mock_store, mock_image_store):
        response = await test_client.put(
            f"/recipes/{uuid4()}", data={**FORM, "price": "-1"}, headers=AUTHOR_HEADERS
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "price"
        mock_store.find_by_id.assert_not_awaited()
        mock_store.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upload_failure_after_destroy_is_502(
        self, test_client, mock_store, mock_image_store, make_recipe, sample_png_bytes
    ):
        recipe = make_recipe()
        mock_store.find_by_id.return_value = recipe
        mock_image_store.upload.side_effect = ImageUploadError(message="Invalid image file")

        response = await test_client.put(
            f"/recipes/{recipe.id}", data=FORM, files=_png(sample_png_bytes), headers=AUTHOR_HEADERS
        )

        assert response.status_code == 502
        assert response.json()["message"] == "Invalid image file"
        mock_image_store.destroy.assert_awaited_once_with("recipes/old")
        mock_store.save.assert_not_awaited()
        assert recipe.image_id == "recipes/old"


class TestUnexpectedErrors:

    @pytest.mark.asyncio
    async def test_request_id_echoed_on_unhandled_error(self, app, mock_store):
        mock_store.find.side_effect = RuntimeError("boom")
        transport = ASGITransport(app=app, raise_app_exceptions=False)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/recipes", headers={"X-Request-ID": "rid-123"})

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "rid-123"
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["request_id"] == "rid-123"
        assert "boom" not in body["message"]


class TestDeleteRecipe:

    @pytest.mark.asyncio
    async def test_deleted(self, test_client, mock_store, mock_image_store, make_recipe):
        recipe = make_recipe()
        mock_store.find_by_id.return_value = recipe

        response = await test_client.delete(f"/recipes/{recipe.id}", headers=AUTHOR_HEADERS)

        assert response.status_code == 200
        assert response.json() == {"message": "Recipe deleted successfully!"}
        mock_image_store.destroy.assert_awaited_once_with("recipes/old")
        mock_store.remove.assert_awaited_once_with(recipe)

    @pytest.mark.asyncio
    async def test_destroy_failure_keeps_record(self, test_client, mock_store, mock_image_store, make_recipe):
        recipe = make_recipe()
        mock_store.find_by_id.return_value = recipe
        mock_image_store.destroy.side_effect = ImageDeletionError()

        response = await test_client.delete(f"/recipes/{recipe.id}", headers=AUTHOR_HEADERS)

        assert response.status_code == 502
        mock_store.remove.assert_not_awaited()

        shown = await test_client.get(f"/recipes/{recipe.id}")
        assert shown.status_code == 200


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        engine = MagicMock()
        engine.connect.return_value.__aenter__.return_value = AsyncMock()

        with patch("recipeshare.routes.health.engine", engine):
            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["image_store"] == "available"

    @pytest.mark.asyncio
    async def test_image_store_down_is_degraded(self, test_client, mock_image_store):
        mock_image_store.health_check.return_value = False
        engine = MagicMock()
        engine.connect.return_value.__aenter__.return_value = AsyncMock()

        with patch("recipeshare.routes.health.engine", engine):
            response = await test_client.get("/health")

        assert response.json()["status"] == "degraded"
        assert response.json()["image_store"] == "unavailable"

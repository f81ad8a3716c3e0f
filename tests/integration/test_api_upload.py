"""Integration tests for the upload pipeline."""
from __future__ import annotations

import asyncio
import uuid

import pytest
from httpx import AsyncClient
from PIL import Image as PILImage

from photomarket.api import dependencies
from photomarket.repositories import PhotoRepository
from tests.factories import image_bytes


async def _create_album(client: AsyncClient, headers: dict, data: dict) -> str:
    response = await client.post("/api/v1/albums", json=data, headers=headers)
    assert response.status_code == 201
    return response.json()["id"]


async def _upload(client: AsyncClient, album_id: str, headers: dict, content: bytes,
                  filename: str = "IMG_0001.jpg", content_type: str = "image/jpeg", **form):
    return await client.post(
        f"/api/v1/albums/{album_id}/photos/upload",
        files={"photo": (filename, content, content_type)},
        data={key: str(value) for key, value in form.items()},
        headers=headers,
    )


@pytest.mark.asyncio
class TestUploadAPI:
    """Test POST /api/v1/albums/{id}/photos/upload."""

    async def test_first_upload_builds_derivatives_and_cover(
        self, client: AsyncClient, admin_headers, sample_album_data, storage
    ):
        album_id = await _create_album(client, admin_headers, sample_album_data)

        response = await _upload(client, album_id, admin_headers, image_bytes((2000, 3000)))

        assert response.status_code == 201
        photo = response.json()
        assert photo["price"] == 1200
        assert photo["metadata"]["description"] == ""
        assert "file_path" not in photo["metadata"]
        assert "original_url" not in photo

        with PILImage.open(storage.path_from_url(photo["thumbnail_url"])) as thumb:
            assert thumb.size == (400, 400)
        with PILImage.open(storage.path_from_url(photo["watermarked_url"])) as preview:
            assert preview.size == (800, 1200)

        await dependencies.get_cover_queue().drain()

        album = (await client.get(f"/api/v1/albums/{album_id}")).json()
        assert album["photo_count"] == 1
        assert album["cover_image"].startswith(f"/uploads/thumbnails/album_{album_id}_cover_")
        with PILImage.open(storage.path_from_url(album["cover_image"])) as cover:
            assert cover.size == (600, 600)

    async def test_second_upload_keeps_the_cover(
        self, client: AsyncClient, admin_headers, sample_album_data
    ):
        album_id = await _create_album(client, admin_headers, sample_album_data)
        await _upload(client, album_id, admin_headers, image_bytes())
        await dependencies.get_cover_queue().drain()
        cover = (await client.get(f"/api/v1/albums/{album_id}")).json()["cover_image"]

        response = await _upload(client, album_id, admin_headers, image_bytes(color=(0, 0, 255)))
        await dependencies.get_cover_queue().drain()

        assert response.status_code == 201
        album = (await client.get(f"/api/v1/albums/{album_id}")).json()
        assert album["cover_image"] == cover
        assert album["photo_count"] == 2

    async def test_concurrent_first_uploads_build_one_cover(
        self, client: AsyncClient, admin_headers, sample_album_data, storage, db_session
    ):
        album_id = await _create_album(client, admin_headers, sample_album_data)
        colors = {"red.jpg": (255, 0, 0), "green.jpg": (0, 255, 0), "blue.jpg": (0, 0, 255)}

        responses = await asyncio.gather(*(
            _upload(client, album_id, admin_headers, image_bytes(color=color), filename=name)
            for name, color in colors.items()
        ))
        await dependencies.get_cover_queue().drain()

        assert [r.status_code for r in responses] == [201, 201, 201]
        covers = list(storage.thumbnails_dir.glob(f"album_{album_id}_cover_*.jpg"))
        assert len(covers) == 1

        album = (await client.get(f"/api/v1/albums/{album_id}")).json()
        assert storage.path_from_url(album["cover_image"]) == covers[0]
        earliest = await PhotoRepository(db_session).get_earliest_in_album(uuid.UUID(album_id))
        with PILImage.open(covers[0]) as cover:
            pixel = cover.convert("RGB").getpixel((cover.width // 2, cover.height // 2))
        expected = colors[earliest.filename]
        assert all(abs(a - b) < 16 for a, b in zip(pixel, expected))

    async def test_form_fields(self, client: AsyncClient, admin_headers, sample_album_data):
        album_id = await _create_album(client, admin_headers, sample_album_data)

        response = await _upload(
            client, album_id, admin_headers, image_bytes(),
            price=3000, date_taken="2024-10-12T09:30:00", description="Relay"
        )

        assert response.status_code == 201
        photo = response.json()
        assert photo["price"] == 3000
        assert photo["metadata"] == {"date_taken": "2024-10-12T09:30:00", "description": "Relay"}

    async def test_non_image_is_rejected(self, client: AsyncClient, admin_headers, sample_album_data):
        album_id = await _create_album(client, admin_headers, sample_album_data)

        response = await _upload(
            client, album_id, admin_headers, b"just text",
            filename="notes.txt", content_type="text/plain"
        )

        assert response.status_code == 400
        photos = await client.get(f"/api/v1/albums/{album_id}/photos")
        assert photos.json() == []

    async def test_missing_file_is_rejected(self, client: AsyncClient, admin_headers, sample_album_data):
        album_id = await _create_album(client, admin_headers, sample_album_data)

        response = await client.post(
            f"/api/v1/albums/{album_id}/photos/upload",
            data={"price": "100"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    async def test_corrupt_image_is_unprocessable(self, client: AsyncClient, admin_headers, sample_album_data):
        album_id = await _create_album(client, admin_headers, sample_album_data)

        response = await _upload(client, album_id, admin_headers, b"\xff\xd8 broken")

        assert response.status_code == 422
        assert (await client.get(f"/api/v1/albums/{album_id}/photos")).json() == []

    async def test_unknown_album(self, client: AsyncClient, admin_headers):
        response = await _upload(
            client, "00000000-0000-0000-0000-000000000000", admin_headers, image_bytes()
        )

        assert response.status_code == 404

    async def test_requires_admin(self, client: AsyncClient, admin_headers, user_headers, sample_album_data):
        album_id = await _create_album(client, admin_headers, sample_album_data)

        anonymous = await _upload(client, album_id, {}, image_bytes())
        customer = await _upload(client, album_id, user_headers, image_bytes())

        assert anonymous.status_code == 401
        assert customer.status_code == 403

    async def test_derivatives_are_public_originals_are_not(
        self, client: AsyncClient, admin_headers, sample_album_data, storage
    ):
        album_id = await _create_album(client, admin_headers, sample_album_data)
        photo = (await _upload(client, album_id, admin_headers, image_bytes())).json()
        stored_name = next(p.name for p in storage.originals_dir.iterdir() if p.is_file())

        thumbnail = await client.get(photo["thumbnail_url"])
        preview = await client.get(photo["watermarked_url"])
        original = await client.get(f"/uploads/{stored_name}")

        assert thumbnail.status_code == 200
        assert thumbnail.headers["content-type"] == "image/jpeg"
        assert preview.status_code == 200
        assert original.status_code == 404

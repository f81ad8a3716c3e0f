"""Integration tests for order recording and the purchase flow."""
import pytest
from httpx import AsyncClient

from tests.factories import AlbumFactory, PhotoFactory, auth_headers, make_image


def _order_payload(album):
    return {
        "items": [{
            "type": "album",
            "item_id": str(album.id),
            "name": album.name,
            "price": album.price,
        }],
        "total_amount": album.price,
    }


@pytest.mark.asyncio
class TestOrderAPI:
    """Order endpoints."""

    async def test_create_and_list_orders(self, client: AsyncClient, db_session, user_headers):
        album = AlbumFactory.create()
        db_session.add(album)
        await db_session.commit()

        created = await client.post("/api/v1/orders", json=_order_payload(album), headers=user_headers)
        mine = await client.get("/api/v1/orders", headers=user_headers)
        theirs = await client.get("/api/v1/orders", headers=auth_headers("someone@example.com"))

        assert created.status_code == 201
        body = created.json()
        assert body["status"] == "pending"
        assert body["customer_email"] == "buyer@example.com"
        assert body["items"][0]["item_id"] == str(album.id)
        assert [o["id"] for o in mine.json()] == [body["id"]]
        assert theirs.json() == []

    async def test_order_requires_items(self, client: AsyncClient, test_db_engine, user_headers):
        response = await client.post(
            "/api/v1/orders",
            json={"items": [], "total_amount": 0},
            headers=user_headers
        )

        assert response.status_code == 422

    async def test_admin_listing_is_admin_only(self, client: AsyncClient, test_db_engine, user_headers, admin_headers):
        forbidden = await client.get("/api/v1/admin/orders", headers=user_headers)
        allowed = await client.get("/api/v1/admin/orders", headers=admin_headers)

        assert forbidden.status_code == 403
        assert allowed.status_code == 200

    async def test_completed_order_unlocks_download(
        self,
        client: AsyncClient,
        db_session,
        storage,
        user_headers,
        admin_headers
    ):
        album = AlbumFactory.create(name="Finals")
        original = make_image(storage.get_original_path("final.jpg"))
        db_session.add_all([
            album,
            PhotoFactory.create(album.id, stored_name="final.jpg", file_path=original),
        ])
        await db_session.commit()

        order = (await client.post("/api/v1/orders", json=_order_payload(album), headers=user_headers)).json()
        before = await client.get(f"/api/v1/download/album/{album.id}", headers=user_headers)

        updated = await client.patch(
            f"/api/v1/admin/orders/{order['id']}/status",
            json={"status": "completed"},
            headers=admin_headers
        )
        after = await client.get(f"/api/v1/download/album/{album.id}", headers=user_headers)

        assert before.status_code == 403
        assert updated.status_code == 200
        assert updated.json()["status"] == "completed"
        assert after.status_code == 200
        assert after.headers["content-type"] == "application/zip"

    async def test_invalid_status(self, client: AsyncClient, test_db_engine, admin_headers):
        response = await client.patch(
            "/api/v1/admin/orders/00000000-0000-0000-0000-000000000000/status",
            json={"status": "refunded"},
            headers=admin_headers
        )

        assert response.status_code == 422

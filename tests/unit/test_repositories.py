"""Unit tests for repositories."""
from __future__ import annotations

import uuid

import pytest

from photomarket.core.exceptions import NotFoundException
from photomarket.repositories import AlbumRepository, OrderRepository, PhotoRepository
from tests.factories import AlbumFactory, OrderFactory, PhotoFactory, order_item, timestamps


@pytest.mark.asyncio
class TestAlbumRepository:
    """Test AlbumRepository."""

    async def test_create_album(self, db_session):
        repo = AlbumRepository(db_session)
        album = AlbumFactory.create(is_published=False)

        created = await repo.create(album)
        await db_session.commit()

        assert created.id == album.id
        assert created.cover_image is None
        assert created.is_published is False

    async def test_get_or_fail(self, db_session):
        repo = AlbumRepository(db_session)

        with pytest.raises(NotFoundException) as exc_info:
            await repo.get_by_id_or_fail(uuid.uuid4())

        assert exc_info.value.status_code == 404

    async def test_update_cover(self, db_session):
        repo = AlbumRepository(db_session)
        album = await repo.create(AlbumFactory.create())
        await db_session.commit()

        updated = await repo.update_cover(album.id, "/uploads/thumbnails/cover.jpg")
        await db_session.commit()

        assert updated.cover_image == "/uploads/thumbnails/cover.jpg"

    async def test_get_by_category_hides_unpublished(self, db_session):
        repo = AlbumRepository(db_session)
        category_id = uuid.uuid4()
        published = await repo.create(AlbumFactory.create(category_id=category_id))
        hidden = await repo.create(AlbumFactory.create(category_id=category_id, is_published=False))
        await repo.create(AlbumFactory.create())
        await db_session.commit()

        visible = await repo.get_by_category(category_id)
        everything = await repo.get_by_category(category_id, published_only=False)

        assert [a.id for a in visible] == [published.id]
        assert {a.id for a in everything} == {published.id, hidden.id}

    async def test_set_published(self, db_session):
        repo = AlbumRepository(db_session)
        albums = [await repo.create(AlbumFactory.create(is_published=False)) for _ in range(3)]
        await db_session.commit()

        count = await repo.set_published([albums[0].id, albums[1].id], True)
        await db_session.commit()

        assert count == 2
        assert (await repo.get_by_id(albums[2].id)).is_published is False

    async def test_count_photos(self, db_session):
        repo = AlbumRepository(db_session)
        full = await repo.create(AlbumFactory.create())
        empty = await repo.create(AlbumFactory.create())
        for _ in range(3):
            db_session.add(PhotoFactory.create(full.id))
        await db_session.commit()

        counts = await repo.count_photos([full.id, empty.id])

        assert counts == {full.id: 3, empty.id: 0}


@pytest.mark.asyncio
class TestPhotoRepository:
    """Test PhotoRepository."""

    async def test_get_by_album_in_upload_order(self, db_session):
        album = await AlbumRepository(db_session).create(AlbumFactory.create())
        first, second, third = timestamps(3)
        db_session.add(PhotoFactory.create(album.id, filename="c.jpg", created_at=third))
        db_session.add(PhotoFactory.create(album.id, filename="a.jpg", created_at=first))
        db_session.add(PhotoFactory.create(album.id, filename="b.jpg", created_at=second))
        await db_session.commit()
        repo = PhotoRepository(db_session)

        photos = await repo.get_by_album(album.id)
        earliest = await repo.get_earliest_in_album(album.id)

        assert [p.filename for p in photos] == ["a.jpg", "b.jpg", "c.jpg"]
        assert earliest.filename == "a.jpg"
        assert await repo.count_by_album(album.id) == 3

    async def test_update_prices(self, db_session):
        album = await AlbumRepository(db_session).create(AlbumFactory.create())
        photos = [PhotoFactory.create(album.id) for _ in range(3)]
        db_session.add_all(photos)
        await db_session.commit()
        repo = PhotoRepository(db_session)

        assert await repo.update_prices(album.id, 800, [photos[0].id]) == 1
        assert await repo.update_prices(album.id, 1500) == 3
        await db_session.commit()

        assert {p.price for p in await repo.get_by_album(album.id)} == {1500}

    async def test_delete_by_album(self, db_session):
        album = await AlbumRepository(db_session).create(AlbumFactory.create())
        other = await AlbumRepository(db_session).create(AlbumFactory.create())
        db_session.add_all([PhotoFactory.create(album.id), PhotoFactory.create(album.id), PhotoFactory.create(other.id)])
        await db_session.commit()
        repo = PhotoRepository(db_session)

        assert await repo.delete_by_album(album.id) == 2
        assert await repo.count_by_album(other.id) == 1


@pytest.mark.asyncio
class TestOrderRepository:
    """Test OrderRepository."""

    async def test_get_for_user(self, db_session):
        repo = OrderRepository(db_session)
        item = order_item("photo", uuid.uuid4())
        await repo.create(OrderFactory.create("a@example.com", [item]))
        await repo.create(OrderFactory.create("a@example.com", [item], status="pending"))
        await repo.create(OrderFactory.create("b@example.com", [item]))
        await db_session.commit()

        assert len(await repo.get_for_user("a@example.com")) == 2
        assert len(await repo.get_for_user("a@example.com", status="completed")) == 1
        assert await repo.get_for_user("nobody@example.com") == []

    async def test_items_round_trip_as_json(self, db_session):
        repo = OrderRepository(db_session)
        album_id = uuid.uuid4()
        order = await repo.create(OrderFactory.create("a@example.com", [order_item("album", album_id, 5000)]))
        await db_session.commit()

        found = await repo.get_by_id(order.id)

        assert found.items[0]["item_id"] == str(album_id)
        assert found.total_amount == 5000

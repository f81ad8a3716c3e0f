"""Unit tests for StorageService."""
from __future__ import annotations

import io
import re
import uuid

import pytest

from photomarket.core.exceptions import ValidationException
from photomarket.services.storage_service import StorageService, sanitize_filename
from tests.factories import PhotoFactory


class TestFilenames:
    """Test stored file naming."""

    def test_generated_name_format(self):
        name = StorageService.generate_filename("IMG_0001.JPG")

        assert re.fullmatch(r"\d{13}-\d{9}-IMG_0001\.JPG", name)

    def test_generated_names_differ(self):
        names = {StorageService.generate_filename("a.jpg") for _ in range(50)}

        assert len(names) == 50

    @pytest.mark.parametrize("raw,expected", [
        ("../../etc/passwd", "passwd"),
        ("C:\\photos\\day 1.jpg", "day_1.jpg"),
        ("運動会.jpg", "運動会.jpg"),
        (".hidden", "hidden"),
        ("", "upload"),
    ])
    def test_sanitize(self, raw, expected):
        assert sanitize_filename(raw) == expected

    def test_derivatives_are_jpeg(self):
        assert StorageService.derivative_filename("123-456-scan.png") == "123-456-scan.jpg"

    def test_cover_name(self):
        album_id = uuid.uuid4()

        name = StorageService.cover_filename(album_id)

        assert name.startswith(f"album_{album_id}_cover_")
        assert name.endswith(".jpg")


class TestPaths:
    """Test path and URL mapping."""

    def test_urls(self, storage):
        assert storage.original_url("x.png") == "/uploads/x.png"
        assert storage.thumbnail_url("x.png") == "/uploads/thumbnails/x.jpg"
        assert storage.watermarked_url("x.png") == "/uploads/watermarked/x.jpg"

    def test_path_from_url(self, storage):
        assert storage.path_from_url("/uploads/thumbnails/a.jpg") == storage.thumbnails_dir / "a.jpg"
        assert storage.path_from_url("/uploads/watermarked/a.jpg") == storage.watermarked_dir / "a.jpg"
        assert storage.path_from_url("/uploads/a.png") == storage.originals_dir / "a.png"
        assert storage.path_from_url("https://cdn.example.com/a.jpg") is None
        assert storage.path_from_url(None) is None

    def test_resolve_prefers_recorded_path(self, storage, tmp_path):
        photo = PhotoFactory.create(uuid.uuid4(), stored_name="a.jpg", file_path=tmp_path / "elsewhere.jpg")

        assert storage.resolve_original_path(photo) == tmp_path / "elsewhere.jpg"

    def test_resolve_falls_back_to_url_basename(self, storage):
        photo = PhotoFactory.create(uuid.uuid4(), stored_name="b.jpg")

        assert storage.resolve_original_path(photo) == storage.originals_dir / "b.jpg"


class TestSaveUpload:
    """Test StorageService.save_upload."""

    def test_saves_all_bytes(self, storage):
        data = b"x" * (3 * 1024 * 1024 + 17)
        target = storage.get_original_path("big.bin")

        written = storage.save_upload(io.BytesIO(data), target, max_bytes=len(data))

        assert written == len(data)
        assert target.read_bytes() == data

    def test_oversized_upload_is_rejected_and_removed(self, storage):
        target = storage.get_original_path("huge.bin")

        with pytest.raises(ValidationException) as exc_info:
            storage.save_upload(io.BytesIO(b"x" * 2048), target, max_bytes=1024)

        assert exc_info.value.status_code == 413
        assert not target.exists()


class TestDelete:
    """Test file removal."""

    def test_delete_photo_files(self, storage):
        photo = PhotoFactory.create(uuid.uuid4(), stored_name="c.jpg")
        for path in (
            storage.get_original_path("c.jpg"),
            storage.get_thumbnail_path("c.jpg"),
            storage.get_watermarked_path("c.jpg"),
        ):
            path.write_bytes(b"data")

        assert storage.delete_photo_files(photo) == 3
        assert storage.delete_photo_files(photo) == 0

    def test_delete_missing_file(self, storage):
        assert storage.delete_file(storage.originals_dir / "none.jpg") is False
        assert storage.delete_file(None) is False

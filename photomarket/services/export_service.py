"""Purchase-gated delivery of originals as a file or a ZIP archive."""
import logging
import mimetypes
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from photomarket.core.exceptions import NotFoundException, ValidationException
from photomarket.repositories import AlbumRepository, PhotoRepository
from photomarket.services.access_service import AccessService
from photomarket.services.archive_writer import ZipStreamWriter
from photomarket.services.storage_service import StorageService

logger = logging.getLogger(__name__)

ITEM_TYPES = ("photo", "album")
ARCHIVE_NAME_UNSAFE = re.compile(r"[^\w\s-]")
ENTRY_NAME_UNSAFE = re.compile(r"[^\w\s.-]")


@dataclass
class ExportPayload:
    """
    What the download endpoint sends back.

    Exactly one of ``path`` (single original) or ``stream`` (archive chunks)
    is set.
    """

    filename: str
    media_type: str
    path: Optional[Path] = None
    stream: Optional[Iterator[bytes]] = None

    @property
    def is_stream(self) -> bool:
        return self.stream is not None


def archive_filename(album_name: str) -> str:
    """Download name of an album archive."""
    cleaned = ARCHIVE_NAME_UNSAFE.sub("", album_name).strip()
    return f"{cleaned or 'album'}.zip"


def entry_name(filename: str, used: Set[str]) -> str:
    """
    Archive entry name for a photo, unique within ``used``.

    Two photos uploaded under the same client name become
    ``name.jpg`` and ``name_1.jpg``.
    """
    cleaned = ENTRY_NAME_UNSAFE.sub("", filename).strip() or "photo"
    candidate = cleaned
    stem, suffix = os.path.splitext(cleaned)
    counter = 1
    while candidate in used:
        candidate = f"{stem}_{counter}{suffix}"
        counter += 1
    used.add(candidate)
    return candidate


def iter_archive(
    entries: List[Tuple[Path, str]],
    writer: Optional[ZipStreamWriter] = None
) -> Iterator[bytes]:
    """
    Yield a ZIP archive of ``entries`` chunk by chunk.

    A source that vanished or can't be opened is skipped with a warning,
    so one bad file never costs the buyer the rest of the album. If the
    consumer stops early the writer is released and no further sources
    are opened.
    """
    writer = writer or ZipStreamWriter()
    writer.open()
    added = 0
    finished = False
    try:
        for path, arcname in entries:
            try:
                yield from writer.add_file(path, arcname)
                added += 1
            except OSError as e:
                logger.warning("Skipping %s: %s", path, e)
        yield writer.finalize()
        finished = True
        logger.info("Archive finished with %d of %d files", added, len(entries))
    finally:
        if not finished:
            writer.abort()


class ExportService:
    """Service turning verified ownership into downloadable bytes."""

    def __init__(
        self,
        db: AsyncSession,
        storage: StorageService,
        access: Optional[AccessService] = None
    ):
        self.storage = storage
        self.access = access or AccessService(db)
        self.album_repo = AlbumRepository(db)
        self.photo_repo = PhotoRepository(db)

    async def export(self, item_type: str, item_id: UUID, requester_email: str) -> ExportPayload:
        """
        Prepare the download of a purchased photo or album.

        Access is checked before anything is looked up, so a requester
        without a purchase can't discover which items exist.

        Args:
            item_type: "photo" or "album"
            item_id: Item UUID
            requester_email: Authenticated purchaser

        Returns:
            ExportPayload with a file path (photo) or chunk stream (album)

        Raises:
            ValidationException: Unknown item type
            AccessDeniedException: No completed purchase of the item
            NotFoundException: Item, its photos or all of their files missing
        """
        if item_type not in ITEM_TYPES:
            raise ValidationException(f"Unknown item type '{item_type}'")

        await self.access.require_access(requester_email, item_type, item_id)

        if item_type == "photo":
            return await self._export_photo(item_id)
        return await self._export_album(item_id)

    async def _export_photo(self, photo_id: UUID) -> ExportPayload:
        photo = await self.photo_repo.get_by_id_or_fail(photo_id)
        path = self.storage.resolve_original_path(photo)
        if not self.storage.file_exists(path):
            logger.error("Original of photo %s missing at %s", photo_id, path)
            raise NotFoundException(resource="Photo file", identifier=str(photo_id))

        media_type = mimetypes.guess_type(photo.filename)[0] or "application/octet-stream"
        return ExportPayload(filename=photo.filename, media_type=media_type, path=path)

    async def _export_album(self, album_id: UUID) -> ExportPayload:
        album = await self.album_repo.get_by_id_or_fail(album_id)
        photos = await self.photo_repo.get_by_album(album_id)
        if not photos:
            raise NotFoundException(resource="Album photos", identifier=str(album_id))

        entries: List[Tuple[Path, str]] = []
        used: Set[str] = set()
        for photo in photos:
            path = self.storage.resolve_original_path(photo)
            if not self.storage.file_exists(path):
                logger.warning("Album %s: original of photo %s missing, skipped", album_id, photo.id)
                continue
            entries.append((path, entry_name(photo.filename, used)))

        if not entries:
            raise NotFoundException(resource="Album files", identifier=str(album_id))

        logger.info("Exporting album %s with %d of %d files", album_id, len(entries), len(photos))
        return ExportPayload(
            filename=archive_filename(album.name),
            media_type="application/zip",
            stream=iter_archive(entries),
        )

"""Storage service for file operations."""
import logging
import re
import secrets
import time
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional
from uuid import UUID, uuid4

from photomarket.core.config import settings
from photomarket.core.exceptions import StorageException, ValidationException

logger = logging.getLogger(__name__)

UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.-]")
COPY_CHUNK_SIZE = 1024 * 1024


def sanitize_filename(filename: str) -> str:
    """Strip directories and replace characters unsafe in a stored name."""
    name = PurePosixPath(filename.replace("\\", "/")).name
    name = UNSAFE_FILENAME_CHARS.sub("_", name).lstrip(".")
    return name or "upload"


class StorageService:
    """
    Service for managing file storage operations.

    Originals, thumbnails (including album covers) and watermarked copies
    live in three directories; thumbnails and watermarked copies are served
    publicly under their URL prefixes, originals are not.
    """

    def __init__(
        self,
        originals_dir: Optional[Path] = None,
        thumbnails_dir: Optional[Path] = None,
        watermarked_dir: Optional[Path] = None,
    ):
        """Initialize storage service with configured paths."""
        self.originals_dir = originals_dir or settings.originals_dir
        self.thumbnails_dir = thumbnails_dir or settings.thumbnails_dir
        self.watermarked_dir = watermarked_dir or settings.watermarked_dir

        # Ensure directories exist
        self._ensure_directories()

    def _ensure_directories(self):
        """Ensure all storage directories exist."""
        for directory in [
            self.originals_dir,
            self.thumbnails_dir,
            self.watermarked_dir,
        ]:
            directory.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_filename(original_name: str) -> str:
        """
        Build a collision resistant stored name.

        Format: ``{epoch_ms}-{9 random digits}-{sanitized original name}``.
        """
        millis = int(time.time() * 1000)
        nonce = secrets.randbelow(10 ** 9)
        return f"{millis}-{nonce:09d}-{sanitize_filename(original_name)}"

    @staticmethod
    def derivative_filename(stored_filename: str) -> str:
        """Derivatives are always JPEG."""
        return f"{Path(stored_filename).stem}.jpg"

    @staticmethod
    def cover_filename(album_id: UUID) -> str:
        return f"album_{album_id}_cover_{uuid4()}.jpg"

    def get_original_path(self, stored_filename: str) -> Path:
        return self.originals_dir / stored_filename

    def get_thumbnail_path(self, stored_filename: str) -> Path:
        return self.thumbnails_dir / self.derivative_filename(stored_filename)

    def get_watermarked_path(self, stored_filename: str) -> Path:
        return self.watermarked_dir / self.derivative_filename(stored_filename)

    def get_cover_path(self, cover_filename: str) -> Path:
        return self.thumbnails_dir / cover_filename

    @staticmethod
    def original_url(stored_filename: str) -> str:
        return f"{settings.uploads_url_prefix}/{stored_filename}"

    def thumbnail_url(self, stored_filename: str) -> str:
        return f"{settings.thumbnails_url_prefix}/{self.derivative_filename(stored_filename)}"

    def watermarked_url(self, stored_filename: str) -> str:
        return f"{settings.watermarked_url_prefix}/{self.derivative_filename(stored_filename)}"

    @staticmethod
    def cover_url(cover_filename: str) -> str:
        return f"{settings.thumbnails_url_prefix}/{cover_filename}"

    def path_from_url(self, url: Optional[str]) -> Optional[Path]:
        """
        Map a stored-file URL back to its path.

        Returns:
            Path inside the matching storage directory, None for foreign URLs
        """
        if not url:
            return None

        name = PurePosixPath(url).name
        for prefix, directory in (
            (settings.thumbnails_url_prefix, self.thumbnails_dir),
            (settings.watermarked_url_prefix, self.watermarked_dir),
            (settings.uploads_url_prefix, self.originals_dir),
        ):
            if url.startswith(prefix + "/"):
                return directory / name
        return None

    def generated_cover_path(self, album_id: UUID, url: Optional[str]) -> Optional[Path]:
        """
        Path of a cover this service generated for the album, None otherwise.

        Manual overrides may point at any image, a photo's thumbnail
        included; those must never be deleted along with the cover.
        """
        path = self.path_from_url(url)
        if path is None or path.parent != self.thumbnails_dir:
            return None
        if not path.name.startswith(f"album_{album_id}_cover_"):
            return None
        return path

    def resolve_original_path(self, photo) -> Path:
        """
        Locate the original of a photo.

        The path recorded at ingestion wins; older records only carry the
        URL, whose basename is looked up in the originals directory.
        """
        metadata = photo.extra_metadata or {}
        file_path = metadata.get("file_path")
        if file_path:
            return Path(file_path)
        return self.originals_dir / PurePosixPath(photo.original_url).name

    def save_upload(
        self,
        upload_file: BinaryIO,
        file_path: Path,
        max_bytes: Optional[int] = None
    ) -> int:
        """
        Save an uploaded file.

        Args:
            upload_file: Uploaded file object
            file_path: Destination path
            max_bytes: Reject uploads larger than this

        Returns:
            Number of bytes written

        Raises:
            ValidationException: If the upload exceeds max_bytes (413)
            StorageException: If save fails
        """
        written = 0
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, "wb") as f:
                while True:
                    chunk = upload_file.read(COPY_CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        raise ValidationException(
                            f"File exceeds the {max_bytes} byte upload limit",
                            status_code=413
                        )
                    f.write(chunk)
        except ValidationException:
            file_path.unlink(missing_ok=True)
            raise
        except Exception as e:
            file_path.unlink(missing_ok=True)
            raise StorageException(f"Failed to save upload {file_path.name}: {e}") from e

        return written

    def delete_file(self, file_path: Optional[Path]) -> bool:
        """
        Delete a file.

        Returns:
            True if deleted, False if file didn't exist

        Raises:
            StorageException: If deletion fails
        """
        if file_path is None:
            return False
        try:
            if file_path.exists():
                file_path.unlink()
                return True
            return False
        except Exception as e:
            raise StorageException(f"Failed to delete file {file_path}: {e}") from e

    def delete_photo_files(self, photo) -> int:
        """
        Delete the original and both derivatives of a photo.

        Missing files are ignored; failures are logged so one stuck file
        does not block removing the rest.

        Returns:
            Number of files deleted
        """
        deleted = 0
        for path in (
            self.resolve_original_path(photo),
            self.path_from_url(photo.thumbnail_url),
            self.path_from_url(photo.watermarked_url),
        ):
            try:
                if self.delete_file(path):
                    deleted += 1
            except StorageException as e:
                logger.warning("Could not remove %s: %s", path, e.message)
        return deleted

    @staticmethod
    def file_exists(file_path: Path) -> bool:
        """Check if a file exists."""
        return file_path.exists() and file_path.is_file()


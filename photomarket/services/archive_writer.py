"""Incremental ZIP writer producing bytes as entries are added."""
import logging
import zipfile
from pathlib import Path
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class _ChunkSink:
    """
    Write-only file object collecting what ZipFile writes.

    It has no tell() or seek(), which puts ZipFile in streaming mode: sizes
    and CRCs go into data descriptors after each entry instead of being
    patched into the local headers.
    """

    def __init__(self):
        self._chunks: List[bytes] = []

    def write(self, data) -> int:
        self._chunks.append(bytes(data))
        return len(data)

    def flush(self):
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


class ZipStreamWriter:
    """
    ZIP archive written to a stream of byte chunks.

    Usage:
        writer = ZipStreamWriter()
        writer.open()
        for path, name in entries:
            yield from writer.add_file(path, name)
        yield writer.finalize()
    """

    def __init__(
        self,
        compression: int = zipfile.ZIP_DEFLATED,
        chunk_size: int = READ_CHUNK_SIZE
    ):
        self.compression = compression
        self.chunk_size = chunk_size
        self._sink = _ChunkSink()
        self._zip: Optional[zipfile.ZipFile] = None

    def open(self):
        if self._zip is not None:
            raise RuntimeError("Archive already open")
        self._zip = zipfile.ZipFile(
            self._sink,
            mode="w",
            compression=self.compression
        )

    def add_file(self, source: Path, arcname: str) -> Iterator[bytes]:
        """
        Append one file, yielding archive bytes as they are produced.

        The source is opened and stat-ed before the entry header is written,
        so a file that is gone, unreadable or not a regular file leaves the
        archive untouched. Timestamps outside the ZIP range are clamped.

        Raises:
            OSError: If the source can't be opened; nothing was written
        """
        if self._zip is None:
            raise RuntimeError("Archive is not open")

        with open(source, "rb") as src:
            zinfo = zipfile.ZipInfo.from_file(source, arcname, strict_timestamps=False)
            zinfo.compress_type = self.compression

            with self._zip.open(zinfo, mode="w") as dest:
                while True:
                    try:
                        chunk = src.read(self.chunk_size)
                    except OSError:
                        logger.error("Read of %s failed, entry %s is truncated", source, arcname)
                        raise
                    if not chunk:
                        break
                    dest.write(chunk)
                    data = self._sink.drain()
                    if data:
                        yield data

        tail = self._sink.drain()
        if tail:
            yield tail

    def finalize(self) -> bytes:
        """Write the central directory and return the remaining bytes."""
        if self._zip is None:
            raise RuntimeError("Archive is not open")
        self._zip.close()
        self._zip = None
        return self._sink.drain()

    def abort(self):
        """Release the archive without producing further output."""
        if self._zip is None:
            return
        try:
            self._zip.close()
        except ValueError as e:
            # An entry handle is still open after an interrupted add_file
            logger.debug("Archive closed with an open entry: %s", e)
        finally:
            self._zip = None
            self._sink.drain()

"""Thumbnail and watermarked-copy generation from uploaded originals."""
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import Image as PILImage
from PIL import ImageDraw, ImageFont, ImageOps

from photomarket.core.config import settings
from photomarket.core.exceptions import DerivativeGenerationException
from photomarket.imaging.geometry import (
    WatermarkTile,
    compute_thumbnail_geometry,
    compute_watermark_tiles,
)

logger = logging.getLogger(__name__)

# Bold sans font shipped with most Linux images; Pillow's bundled font otherwise
WATERMARK_FONT_FILE = "DejaVuSans-Bold.ttf"


class DerivativeGenerator:
    """
    Produces the browsing artifacts of a photo.

    All methods are synchronous and CPU bound; callers run them on the image
    worker pool. Output is written to a temporary sibling first and renamed
    into place, so a failed run never leaves a truncated derivative behind,
    and identical input always yields identical bytes.
    """

    def __init__(
        self,
        thumbnail_quality: Optional[int] = None,
        watermark_quality: Optional[int] = None,
        watermark_max_width: Optional[int] = None,
        watermark_text: Optional[str] = None,
    ):
        self.thumbnail_quality = thumbnail_quality or settings.thumbnail_quality
        self.watermark_quality = watermark_quality or settings.watermark_quality
        self.watermark_max_width = watermark_max_width or settings.watermark_max_width
        self.watermark_text = watermark_text or settings.watermark_text
        self._fonts: Dict[int, ImageFont.ImageFont] = {}

    def generate_thumbnail(
        self,
        original_path: Path,
        output_path: Path,
        target_size: int = 400
    ) -> Tuple[int, int]:
        """
        Generate an upright, square, top-anchored thumbnail.

        Args:
            original_path: Uploaded original
            output_path: Destination of the JPEG thumbnail
            target_size: Side of the square in pixels

        Returns:
            (width, height) of the written thumbnail

        Raises:
            DerivativeGenerationException: If decoding or encoding fails
        """
        try:
            with PILImage.open(original_path) as source:
                img = self._to_rgb(ImageOps.exif_transpose(source))

            geometry = compute_thumbnail_geometry(img.width, img.height, target_size)
            if (geometry.scaled_width, geometry.scaled_height) != img.size:
                img = img.resize(
                    (geometry.scaled_width, geometry.scaled_height),
                    PILImage.Resampling.LANCZOS
                )
            img = img.crop(geometry.crop_box)

            self._save_atomic(img, output_path, self.thumbnail_quality)
        except Exception as e:
            raise DerivativeGenerationException(
                f"Failed to generate thumbnail for {original_path.name}: {e}"
            ) from e

        return img.size

    def generate_watermarked(self, original_path: Path, output_path: Path) -> Tuple[int, int]:
        """
        Generate the reduced-size preview with a tiled text watermark.

        The original is auto-rotated and narrowed to the working width before
        the tile layout is computed, so stamps keep the same apparent size on
        every preview.

        Returns:
            (width, height) of the written preview

        Raises:
            DerivativeGenerationException: If decoding, compositing or encoding fails
        """
        try:
            with PILImage.open(original_path) as source:
                img = self._to_rgb(ImageOps.exif_transpose(source))

            if img.width > self.watermark_max_width:
                new_height = max(1, round(img.height * self.watermark_max_width / img.width))
                img = img.resize(
                    (self.watermark_max_width, new_height),
                    PILImage.Resampling.LANCZOS
                )

            tiles = compute_watermark_tiles(img.width, img.height, text=self.watermark_text)
            overlay = self.render_overlay(img.size, tiles)

            # Overlay has the image's exact size, so centering is the identity
            composed = PILImage.alpha_composite(img.convert("RGBA"), overlay).convert("RGB")

            self._save_atomic(composed, output_path, self.watermark_quality)
        except Exception as e:
            raise DerivativeGenerationException(
                f"Failed to generate watermark for {original_path.name}: {e}"
            ) from e

        logger.debug(
            "Watermarked %s at %dx%d with %d tiles",
            original_path.name, composed.width, composed.height, len(tiles)
        )
        return composed.size

    def render_overlay(
        self,
        size: Tuple[int, int],
        tiles: List[WatermarkTile]
    ) -> PILImage.Image:
        """Render tiles onto a transparent RGBA layer of the given size."""
        overlay = PILImage.new("RGBA", size, (0, 0, 0, 0))
        stamps: Dict[tuple, PILImage.Image] = {}

        for tile in tiles:
            key = (tile.text, tile.font_size, tile.rotation, tile.opacity, tile.fill)
            stamp = stamps.get(key)
            if stamp is None:
                stamp = stamps[key] = self._render_stamp(tile)

            left = round(tile.x - stamp.width / 2)
            top = round(tile.y - stamp.height / 2)
            _composite_clipped(overlay, stamp, left, top)

        return overlay

    def _render_stamp(self, tile: WatermarkTile) -> PILImage.Image:
        font = self._font(tile.font_size)
        left, top, right, bottom = font.getbbox(tile.text)
        padding = 2

        stamp = PILImage.new(
            "RGBA",
            (right - left + 2 * padding, bottom - top + 2 * padding),
            tile.fill + (0,)
        )
        alpha = round(255 * tile.opacity)
        ImageDraw.Draw(stamp).text(
            (padding - left, padding - top),
            tile.text,
            font=font,
            fill=tile.fill + (alpha,)
        )
        # PIL rotates counter-clockwise; the stamps lean clockwise
        return stamp.rotate(-tile.rotation, resample=PILImage.Resampling.BICUBIC, expand=True)

    def _font(self, size: int) -> ImageFont.ImageFont:
        font = self._fonts.get(size)
        if font is None:
            try:
                font = ImageFont.truetype(WATERMARK_FONT_FILE, size)
            except OSError:
                font = ImageFont.load_default(size=size)
            self._fonts[size] = font
        return font

    @staticmethod
    def _to_rgb(img: PILImage.Image) -> PILImage.Image:
        """JPEG output only supports L and RGB here."""
        if img.mode not in ("RGB", "L"):
            return img.convert("RGB")
        return img

    @staticmethod
    def _save_atomic(img: PILImage.Image, output_path: Path, quality: int):
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=output_path.parent,
            prefix=f".{output_path.name}.",
            suffix=".tmp"
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                img.save(f, "JPEG", quality=quality, optimize=True, progressive=True)
            os.replace(tmp_path, output_path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise


def _composite_clipped(canvas: PILImage.Image, stamp: PILImage.Image, left: int, top: int):
    """alpha_composite rejects negative offsets, so clip the stamp to the canvas first."""
    src_left = max(0, -left)
    src_top = max(0, -top)
    src_right = min(stamp.width, canvas.width - left)
    src_bottom = min(stamp.height, canvas.height - top)
    if src_right <= src_left or src_bottom <= src_top:
        return

    canvas.alpha_composite(
        stamp,
        dest=(max(0, left), max(0, top)),
        source=(src_left, src_top, src_right, src_bottom)
    )

"""
Thumbnail crop geometry and watermark tile layout.

Everything here is pure arithmetic on image dimensions so it can be tested
without decoding a single pixel.
"""
import math
from dataclasses import dataclass
from typing import List, Tuple

WATERMARK_GRID_SIZE = 5
WATERMARK_ROTATION = 45
WATERMARK_FONT_SIZE = 24
WATERMARK_OPACITY = 0.7
WATERMARK_FILL = (255, 255, 255)
WATERMARK_TEXT = "FIT-CREATE"


@dataclass(frozen=True)
class ThumbnailGeometry:
    """Resize target plus the crop box applied to the resized image."""

    scaled_width: int
    scaled_height: int
    left: int
    top: int
    right: int
    bottom: int

    @property
    def crop_box(self) -> Tuple[int, int, int, int]:
        return (self.left, self.top, self.right, self.bottom)

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top


@dataclass(frozen=True)
class WatermarkTile:
    """One rotated text stamp, positioned by its center."""

    row: int
    column: int
    x: float
    y: float
    text: str = WATERMARK_TEXT
    rotation: int = WATERMARK_ROTATION
    font_size: int = WATERMARK_FONT_SIZE
    opacity: float = WATERMARK_OPACITY
    fill: Tuple[int, int, int] = WATERMARK_FILL


def compute_thumbnail_geometry(
    width: int,
    height: int,
    target_size: int = 400
) -> ThumbnailGeometry:
    """
    Compute a square, top-anchored crop for a thumbnail.

    The image is scaled so its shorter side matches ``target_size`` (cover
    fit), then a ``target_size`` square is cut horizontally centered and
    flush with the top edge, where event photography keeps its subjects.
    Images smaller than the target are never enlarged; the crop then shrinks
    to whatever the source provides.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        target_size: Side of the square thumbnail

    Returns:
        ThumbnailGeometry in coordinates of the scaled image

    Raises:
        ValueError: If any dimension is not positive
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size {width}x{height}")
    if target_size <= 0:
        raise ValueError(f"Invalid target size {target_size}")

    scale = min(max(target_size / width, target_size / height), 1.0)
    scaled_width = max(1, round(width * scale))
    scaled_height = max(1, round(height * scale))

    crop_width = min(target_size, scaled_width)
    crop_height = min(target_size, scaled_height)
    left = (scaled_width - crop_width) // 2

    return ThumbnailGeometry(
        scaled_width=scaled_width,
        scaled_height=scaled_height,
        left=left,
        top=0,
        right=left + crop_width,
        bottom=crop_height,
    )


def watermark_cell_size(
    width: int,
    height: int,
    grid_size: int = WATERMARK_GRID_SIZE
) -> Tuple[int, int]:
    """
    Column width and row height of the watermark grid.

    Dividing by ``grid_size - 0.5`` leaves room for the half-column shift of
    odd rows so the last tile still reaches the far edge.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size {width}x{height}")
    column_width = math.ceil(width / (grid_size - 0.5))
    row_height = math.ceil(height / (grid_size - 0.5))
    return column_width, row_height


def compute_watermark_tiles(
    width: int,
    height: int,
    grid_size: int = WATERMARK_GRID_SIZE,
    text: str = WATERMARK_TEXT
) -> List[WatermarkTile]:
    """
    Lay out the tiled watermark in row-major order.

    Odd rows are shifted right by half a column so the stamps form a brick
    pattern instead of vertical stripes.

    Args:
        width: Image width the overlay is rendered for
        height: Image height the overlay is rendered for
        grid_size: Number of rows and columns
        text: Stamp text

    Returns:
        List of tiles, ``grid_size ** 2`` long
    """
    column_width, row_height = watermark_cell_size(width, height, grid_size)

    tiles = []
    for row in range(grid_size):
        x_offset = column_width / 2 if row % 2 else 0
        for column in range(grid_size):
            tiles.append(WatermarkTile(
                row=row,
                column=column,
                x=column * column_width + x_offset + column_width / 2,
                y=row * row_height + row_height / 2,
                text=text,
            ))
    return tiles

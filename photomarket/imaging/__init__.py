"""Image geometry and derivative rendering."""
from .geometry import (
    ThumbnailGeometry,
    WatermarkTile,
    compute_thumbnail_geometry,
    compute_watermark_tiles,
    watermark_cell_size,
)
from .derivatives import DerivativeGenerator

__all__ = [
    "ThumbnailGeometry",
    "WatermarkTile",
    "compute_thumbnail_geometry",
    "compute_watermark_tiles",
    "watermark_cell_size",
    "DerivativeGenerator",
]

"""Unit tests for thumbnail and watermark rendering."""
from __future__ import annotations

import pytest
from PIL import Image as PILImage

from photomarket.core.exceptions import DerivativeGenerationException
from photomarket.imaging import DerivativeGenerator, compute_watermark_tiles
from tests.factories import is_close_color, make_image, make_split_image

pytestmark = pytest.mark.imaging

RED = (220, 30, 30)
BLUE = (30, 30, 220)


@pytest.fixture
def generator() -> DerivativeGenerator:
    return DerivativeGenerator()


class TestThumbnail:
    """Test DerivativeGenerator.generate_thumbnail."""

    def test_portrait_thumbnail(self, generator, tmp_path):
        original = make_image(tmp_path / "portrait.jpg", size=(2000, 3000))
        output = tmp_path / "out" / "thumb.jpg"

        size = generator.generate_thumbnail(original, output)

        assert size == (400, 400)
        with PILImage.open(output) as img:
            assert img.format == "JPEG"
            assert img.size == (400, 400)

    def test_keeps_the_top_of_the_frame(self, generator, tmp_path):
        original = make_split_image(tmp_path / "split.jpg", (400, 1200), RED, BLUE)
        output = tmp_path / "thumb.jpg"

        generator.generate_thumbnail(original, output)

        with PILImage.open(output) as img:
            assert is_close_color(img.getpixel((200, 200)), RED)

    def test_small_original_is_not_enlarged(self, generator, tmp_path):
        original = make_image(tmp_path / "small.jpg", size=(120, 80))
        output = tmp_path / "thumb.jpg"

        assert generator.generate_thumbnail(original, output) == (120, 80)

    def test_exif_orientation_is_applied(self, generator, tmp_path):
        # Orientation 6: stored landscape, displayed rotated 90 degrees
        original = make_image(tmp_path / "rotated.jpg", size=(300, 200), orientation=6)
        output = tmp_path / "thumb.jpg"

        generator.generate_thumbnail(original, output)

        with PILImage.open(output) as img:
            assert img.size == (200, 300)

    def test_rgba_png_is_accepted(self, generator, tmp_path):
        original = make_image(tmp_path / "alpha.png", size=(500, 500), fmt="PNG")
        output = tmp_path / "thumb.jpg"

        assert generator.generate_thumbnail(original, output) == (400, 400)

    def test_idempotent(self, generator, tmp_path):
        original = make_split_image(tmp_path / "split.jpg", (900, 1300), RED, BLUE)
        first = tmp_path / "first.jpg"
        second = tmp_path / "second.jpg"

        generator.generate_thumbnail(original, first)
        generator.generate_thumbnail(original, second)

        assert first.read_bytes() == second.read_bytes()

    def test_corrupt_original_raises_and_leaves_nothing(self, generator, tmp_path):
        original = tmp_path / "broken.jpg"
        original.write_bytes(b"definitely not a jpeg")
        out_dir = tmp_path / "out"
        output = out_dir / "thumb.jpg"

        with pytest.raises(DerivativeGenerationException) as exc_info:
            generator.generate_thumbnail(original, output)

        assert exc_info.value.status_code == 422
        assert isinstance(exc_info.value.__cause__, PILImage.UnidentifiedImageError)
        assert not output.exists()
        assert not out_dir.exists() or list(out_dir.iterdir()) == []

    def test_regeneration_replaces_existing_file(self, generator, tmp_path):
        output = tmp_path / "thumb.jpg"
        generator.generate_thumbnail(make_image(tmp_path / "red.jpg", color=RED), output)
        generator.generate_thumbnail(make_image(tmp_path / "blue.jpg", color=BLUE), output)

        with PILImage.open(output) as img:
            assert is_close_color(img.getpixel((10, 10)), BLUE)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["blue.jpg", "red.jpg", "thumb.jpg"]


class TestWatermark:
    """Test DerivativeGenerator.generate_watermarked."""

    def test_wide_original_is_narrowed(self, generator, tmp_path):
        original = make_image(tmp_path / "wide.jpg", size=(2400, 1600))
        output = tmp_path / "wm.jpg"

        size = generator.generate_watermarked(original, output)

        assert size == (800, 533)
        with PILImage.open(output) as img:
            assert img.size == (800, 533)
            assert img.format == "JPEG"

    def test_narrow_original_keeps_its_size(self, generator, tmp_path):
        original = make_image(tmp_path / "narrow.jpg", size=(600, 400))
        output = tmp_path / "wm.jpg"

        assert generator.generate_watermarked(original, output) == (600, 400)

    def test_exif_orientation_is_applied(self, generator, tmp_path):
        original = make_image(tmp_path / "rotated.jpg", size=(1200, 800), orientation=6)
        output = tmp_path / "wm.jpg"

        assert generator.generate_watermarked(original, output) == (800, 1200)

    def test_overlay_is_visible(self, generator, tmp_path):
        original = make_image(tmp_path / "black.jpg", size=(800, 600), color=(0, 0, 0))
        output = tmp_path / "wm.jpg"

        generator.generate_watermarked(original, output)

        with PILImage.open(output) as img:
            _, brightest = img.convert("L").getextrema()
            assert brightest > 100

    def test_overlay_is_transparent_between_stamps(self, generator):
        overlay = generator.render_overlay((800, 600), compute_watermark_tiles(800, 600))

        assert overlay.mode == "RGBA"
        assert overlay.size == (800, 600)
        alpha_min, alpha_max = overlay.getchannel("A").getextrema()
        assert alpha_min == 0
        assert 0 < alpha_max < 255

    def test_idempotent(self, generator, tmp_path):
        original = make_split_image(tmp_path / "split.jpg", (1600, 1000), RED, BLUE)
        first = tmp_path / "first.jpg"
        second = tmp_path / "second.jpg"

        generator.generate_watermarked(original, first)
        generator.generate_watermarked(original, second)

        assert first.read_bytes() == second.read_bytes()

    def test_missing_original_raises(self, generator, tmp_path):
        with pytest.raises(DerivativeGenerationException) as exc_info:
            generator.generate_watermarked(tmp_path / "nope.jpg", tmp_path / "wm.jpg")

        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
        assert list(tmp_path.iterdir()) == []

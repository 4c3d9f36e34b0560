import pytest

from services.image_transcoder import (
    ImageDecodeError,
    ImageTranscoder,
    TranscoderConfig,
)
from test_fixtures import decode, encode, make_image_bytes, noise_image


def _jpeg_sizes(image, qualities):
    return {q: len(encode(image, "JPEG", quality=q)) for q in qualities}


class TestResize:
    def test_small_image_is_not_enlarged(self):
        result = ImageTranscoder().transcode(make_image_bytes(640, 480))

        assert (result.width, result.height) == (640, 480)
        assert decode(result.data).size == (640, 480)
        assert result.quality == 90
        assert result.attempts == 1

    def test_wide_image_is_bounded_by_width(self):
        result = ImageTranscoder().transcode(make_image_bytes(3840, 1000))

        assert (result.width, result.height) == (1920, 500)
        assert (result.source_width, result.source_height) == (3840, 1000)

    def test_tall_image_is_bounded_by_height(self):
        result = ImageTranscoder().transcode(make_image_bytes(1000, 3000))

        assert result.height == 1080
        assert result.width == 360

    def test_aspect_ratio_is_preserved_within_rounding(self):
        result = ImageTranscoder().transcode(make_image_bytes(4000, 3000))

        assert result.width <= 1920 and result.height <= 1080
        assert abs(result.width - result.height * 4 / 3) <= 1

    def test_image_exactly_at_bounds_is_untouched(self):
        result = ImageTranscoder().transcode(make_image_bytes(1920, 1080))

        assert (result.width, result.height) == (1920, 1080)

    def test_custom_bounds(self):
        transcoder = ImageTranscoder(TranscoderConfig(max_width=100, max_height=100))

        result = transcoder.transcode(make_image_bytes(400, 200))

        assert (result.width, result.height) == (100, 50)


class TestQualitySearch:
    def test_output_is_always_jpeg(self):
        result = ImageTranscoder().transcode(make_image_bytes(fmt="PNG"))

        assert decode(result.data).format == "JPEG"
        assert result.source_format == "PNG"

    def test_stops_at_first_quality_within_budget(self):
        image = noise_image(400, 300)
        qualities = range(90, 9, -10)
        sizes = _jpeg_sizes(image, qualities)
        budget = sizes[50]
        expected = next(q for q in qualities if sizes[q] <= budget)

        config = TranscoderConfig(max_size_bytes=budget)
        result = ImageTranscoder(config).transcode(encode(image, "PNG"))

        assert result.quality == expected
        assert result.size <= budget
        assert result.attempts == (90 - expected) // 10 + 1

    def test_floor_result_is_returned_when_budget_is_unreachable(self):
        config = TranscoderConfig(max_size_bytes=1)

        result = ImageTranscoder(config).transcode(encode(noise_image(200, 150), "PNG"))

        assert result.quality == 10
        assert result.attempts == config.max_attempts == 9
        assert result.size > 1
        assert decode(result.data).format == "JPEG"

    def test_large_photo_fits_default_budget_or_hits_floor(self):
        config = TranscoderConfig()

        result = ImageTranscoder(config).transcode(encode(noise_image(2400, 1600), "PNG"))

        assert (result.width, result.height) == (1620, 1080)
        assert result.size <= config.max_size_bytes or result.quality == config.quality_floor
        assert result.attempts <= config.max_attempts

    def test_step_not_dividing_span_still_reaches_floor(self):
        config = TranscoderConfig(
            max_size_bytes=1, initial_quality=90, quality_floor=15, quality_step=20
        )

        result = ImageTranscoder(config).transcode(make_image_bytes())

        # 90, 70, 50, 30, 15
        assert result.quality == 15
        assert result.attempts == config.max_attempts == 5


class TestDecoding:
    @pytest.mark.parametrize(
        "mode,fmt",
        [
            ("RGB", "JPEG"),
            ("RGB", "WEBP"),
            ("L", "PNG"),
            ("1", "PNG"),
            ("I;16", "PNG"),
            ("RGBA", "PNG"),
            ("LA", "PNG"),
            ("CMYK", "JPEG"),
        ],
    )
    def test_common_modes_are_transcoded(self, mode, fmt):
        result = ImageTranscoder().transcode(make_image_bytes(32, 24, fmt=fmt, mode=mode))

        output = decode(result.data)
        assert output.format == "JPEG"
        assert output.size == (32, 24)

    def test_transparency_is_flattened_onto_white(self):
        data = make_image_bytes(16, 16, mode="RGBA", color=(0, 0, 0, 0))

        output = decode(ImageTranscoder().transcode(data).data).convert("RGB")

        r, g, b = output.getpixel((8, 8))
        assert min(r, g, b) > 240

    @pytest.mark.parametrize(
        "data",
        [b"", b"this is plainly not an image", b"\x89PNG\r\n\x1a\n" + b"\x00" * 16],
    )
    def test_undecodable_bytes_raise(self, data):
        with pytest.raises(ImageDecodeError):
            ImageTranscoder().transcode(data)

    def test_truncated_jpeg_raises(self):
        data = encode(noise_image(64, 64), "JPEG", quality=90)

        with pytest.raises(ImageDecodeError):
            ImageTranscoder().transcode(data[: len(data) // 3])


class TestConfig:
    def test_defaults(self):
        config = TranscoderConfig()

        assert (config.max_width, config.max_height) == (1920, 1080)
        assert config.max_size_bytes == 2 * 1024 * 1024
        assert (config.initial_quality, config.quality_floor, config.quality_step) == (90, 10, 10)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"quality_step": 0},
            {"quality_floor": 0},
            {"initial_quality": 101},
            {"initial_quality": 20, "quality_floor": 30},
            {"max_width": 0},
        ],
    )
    def test_invalid_config_is_rejected(self, kwargs):
        with pytest.raises(ValueError):
            TranscoderConfig(**kwargs)

    def test_from_settings(self):
        from app.config import Settings

        config = TranscoderConfig.from_settings(
            Settings(image_max_width=800, image_max_height=600, image_max_size_bytes=1000)
        )

        assert (config.max_width, config.max_height, config.max_size_bytes) == (800, 600, 1000)

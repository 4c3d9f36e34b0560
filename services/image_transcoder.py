"""
Image transcoding for meal photos.

Every upload is decoded, shrunk to fit inside the configured bounds and
re-encoded as JPEG. If the JPEG is larger than the byte budget, quality is
lowered step by step until it fits or the quality floor is reached; the
floor result is returned even when it is still over budget.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

from app.config import Settings, settings as app_settings

logger = logging.getLogger("meallog.images")

OUTPUT_FORMAT = "JPEG"
OUTPUT_EXTENSION = "jpg"

# Modes the JPEG encoder accepts as-is
_JPEG_MODES = {"L", "RGB", "CMYK"}
_HIGH_BIT_GREY_MODES = {"I", "I;16", "I;16B", "I;16L", "I;16N"}


class ImageDecodeError(Exception):
    """Raised when input bytes are not a decodable image."""


@dataclass(frozen=True)
class TranscoderConfig:
    max_width: int = 1920
    max_height: int = 1080
    max_size_bytes: int = 2 * 1024 * 1024
    initial_quality: int = 90
    quality_floor: int = 10
    quality_step: int = 10

    def __post_init__(self):
        if self.max_width < 1 or self.max_height < 1:
            raise ValueError("max_width and max_height must be positive")
        if self.quality_step < 1:
            raise ValueError("quality_step must be at least 1")
        if not 1 <= self.quality_floor <= self.initial_quality <= 100:
            raise ValueError(
                "expected 1 <= quality_floor <= initial_quality <= 100"
            )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "TranscoderConfig":
        config = config or app_settings
        return cls(
            max_width=config.image_max_width,
            max_height=config.image_max_height,
            max_size_bytes=config.image_max_size_bytes,
            initial_quality=config.image_initial_quality,
            quality_floor=config.image_quality_floor,
            quality_step=config.image_quality_step,
        )

    @property
    def max_attempts(self) -> int:
        """Upper bound on encodes: the initial one plus one per quality step."""
        span = self.initial_quality - self.quality_floor
        return 1 + -(-span // self.quality_step)


@dataclass(frozen=True)
class TranscodeResult:
    data: bytes
    quality: int
    width: int
    height: int
    attempts: int
    source_width: int
    source_height: int
    source_format: Optional[str]

    @property
    def size(self) -> int:
        return len(self.data)


class ImageTranscoder:
    """Decode, bound, and compress images into JPEG under a byte budget."""

    def __init__(self, config: Optional[TranscoderConfig] = None):
        self.config = config or TranscoderConfig()

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "ImageTranscoder":
        return cls(TranscoderConfig.from_settings(config))

    def transcode(self, data: bytes) -> TranscodeResult:
        """
        Turn arbitrary image bytes into a bounded JPEG.

        Args:
            data: Raw bytes of the uploaded file

        Returns:
            TranscodeResult with the encoded bytes and the quality used

        Raises:
            ImageDecodeError: If the bytes are not a readable image
        """
        cfg = self.config
        source, source_format = self._decode(data)
        source_width, source_height = source.size

        logger.info(
            "Transcoding image format=%s size=%dx%d bytes=%.2fKB",
            source_format,
            source_width,
            source_height,
            len(data) / 1024,
        )

        frame = self._fit_inside(source)

        quality = cfg.initial_quality
        encoded = self._encode(frame, quality)
        attempts = 1

        # quality strictly decreases each pass, so at most max_attempts encodes
        while len(encoded) > cfg.max_size_bytes and quality > cfg.quality_floor:
            quality = max(cfg.quality_floor, quality - cfg.quality_step)
            logger.info(
                "Encoded %.2fKB exceeds %.2fKB budget, retrying at quality %d",
                len(encoded) / 1024,
                cfg.max_size_bytes / 1024,
                quality,
            )
            encoded = self._encode(frame, quality)
            attempts += 1

        if len(encoded) > cfg.max_size_bytes:
            logger.warning(
                "Image still %.2fKB at quality floor %d; keeping best effort",
                len(encoded) / 1024,
                quality,
            )

        logger.info(
            "Transcoded image size=%dx%d bytes=%.2fKB quality=%d attempts=%d",
            frame.width,
            frame.height,
            len(encoded) / 1024,
            quality,
            attempts,
        )

        return TranscodeResult(
            data=encoded,
            quality=quality,
            width=frame.width,
            height=frame.height,
            attempts=attempts,
            source_width=source_width,
            source_height=source_height,
            source_format=source_format,
        )

    # ------------------ Steps ------------------
    def _decode(self, data: bytes) -> tuple[Image.Image, Optional[str]]:
        if not data:
            raise ImageDecodeError("Empty image data")
        try:
            with Image.open(io.BytesIO(data)) as opened:
                source_format = opened.format
                opened.load()
                image = self._to_jpeg_mode(opened)
        except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
            raise ImageDecodeError(str(exc)) from exc
        except (OSError, ValueError, SyntaxError) as exc:
            # truncated or corrupt payloads surface as OSError/SyntaxError
            raise ImageDecodeError(f"Cannot decode image: {exc}") from exc

        if image.width < 1 or image.height < 1:
            raise ImageDecodeError(f"Invalid image dimensions: {image.size}")
        return image, source_format

    @staticmethod
    def _to_jpeg_mode(image: Image.Image) -> Image.Image:
        mode = image.mode
        if mode in _JPEG_MODES:
            return image.copy()

        if mode == "1":
            return image.convert("L")

        if mode in _HIGH_BIT_GREY_MODES:
            # scale 16-bit samples down to 8-bit before clipping to L
            return image.convert("I").point(lambda value: value * (1 / 256)).convert("L")

        if mode in ("RGBA", "LA", "PA") or (
            mode == "P" and "transparency" in image.info
        ):
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background

        return image.convert("RGB")

    def _fit_inside(self, image: Image.Image) -> Image.Image:
        cfg = self.config
        width, height = image.size
        if width <= cfg.max_width and height <= cfg.max_height:
            return image

        ratio = min(cfg.max_width / width, cfg.max_height / height)
        target = (
            min(cfg.max_width, max(1, round(width * ratio))),
            min(cfg.max_height, max(1, round(height * ratio))),
        )
        logger.debug("Resizing %dx%d -> %dx%d", width, height, *target)
        return image.resize(target, Image.Resampling.LANCZOS)

    @staticmethod
    def _encode(image: Image.Image, quality: int) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format=OUTPUT_FORMAT, quality=quality)
        return buffer.getvalue()

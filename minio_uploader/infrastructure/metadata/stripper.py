"""
Metadata removal using Pillow.

The image is decoded and only its pixels (plus palette and ICC colour
profile) are copied into a fresh image, which is then re-encoded in the
original format. EXIF, XMP, comments and PNG text chunks do not survive
the copy. The EXIF orientation is applied to the pixels first so the
cleaned image is not displayed rotated.

Files that carry no metadata are returned untouched; re-encoding a
clean JPEG or WebP would only cost quality.

Anything Pillow cannot decode or re-encode raises MetadataStripError;
the upload pipeline then falls back to the original bytes.
"""

import io
import logging

from ...core.upload.orchestrator import MetadataStripError

logger = logging.getLogger(__name__)


# Lossy formats are re-encoded at this quality
DEFAULT_QUALITY = 95

PALETTE_MODES = ("P", "PA")

# info keys Pillow fills from EXIF, XMP, IPTC and comment blocks
METADATA_KEYS = ("exif", "xmp", "XML:com.adobe.xmp", "photoshop", "comment", "comments")

# JPEG segments that carry EXIF/XMP, Ducky, IPTC and comments
METADATA_SEGMENTS = ("APP1", "APP12", "APP13", "COM")


class PillowMetadataStripper:
    """
    Strips embedded metadata from images Pillow can read and write.

    Animated images are rejected rather than flattened to their first
    frame, since uploading a truncated animation would lose content.
    """

    def __init__(self, quality: int = DEFAULT_QUALITY) -> None:
        try:
            from PIL import Image, ImageOps
        except ImportError:
            raise ImportError(
                "Pillow is required for metadata stripping. Install with: pip install Pillow"
            )

        self._image = Image
        self._image_ops = ImageOps
        self._quality = quality

    def strip(self, data: bytes) -> bytes:
        """Return data re-encoded without metadata."""
        try:
            return self._strip(data)
        except MetadataStripError:
            raise
        except Exception as e:
            raise MetadataStripError(f"Metadata stripping failed: {e}") from e

    def _strip(self, data: bytes) -> bytes:
        with self._image.open(io.BytesIO(data)) as img:
            fmt = img.format
            if not self._has_metadata(img):
                logger.debug("No metadata found, keeping file as is", extra={"format": fmt})
                return data

            if getattr(img, "n_frames", 1) > 1:
                raise MetadataStripError(f"Multi-frame {fmt} images are not supported")

            icc_profile = img.info.get("icc_profile")
            transparency = img.info.get("transparency")

            upright = self._image_ops.exif_transpose(img)
            clean = self._image.frombytes(upright.mode, upright.size, upright.tobytes())
            if upright.mode in PALETTE_MODES:
                palette = upright.getpalette()
                if palette:
                    clean.putpalette(palette)

        save_kwargs = {}
        if icc_profile:
            save_kwargs["icc_profile"] = icc_profile
        if transparency is not None:
            save_kwargs["transparency"] = transparency
        if fmt in ("JPEG", "WEBP"):
            save_kwargs["quality"] = self._quality

        out = io.BytesIO()
        clean.save(out, format=fmt, **save_kwargs)

        cleaned = out.getvalue()
        logger.debug(
            "Stripped metadata",
            extra={
                "format": fmt,
                "size_before": len(data),
                "size_after": len(cleaned),
            }
        )
        return cleaned

    def _has_metadata(self, img) -> bool:
        """True if the decoded image carries anything worth stripping."""
        if any(key in img.info for key in METADATA_KEYS):
            return True
        if len(img.getexif()):
            return True
        if getattr(img, "text", None):
            return True
        return any(marker in METADATA_SEGMENTS for marker, _ in getattr(img, "applist", []))

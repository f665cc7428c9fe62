"""
Upload pipeline.

This module sequences one upload from start to finish:
1. Read the source file
2. Strip embedded metadata (falling back to the original bytes)
3. Stage the chosen bytes in a temporary file
4. Hash the staged file and derive the object key
5. Upload with content type and tags
6. Produce the single output line

It knows nothing about boto3 or Pillow. The object store and the
metadata stripper are handed in, which keeps the pipeline testable
with in-memory fakes.
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Protocol

from .hashing import hash_file
from .models import OutputMode, SHARE_URL_EXPIRY_SECONDS, UploadRequest, UploadResult
from .naming import build_object_key, build_url, resolve_content_type

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class MetadataStripError(Exception):
    """Raised by a stripper that cannot clean the given bytes."""
    pass


class MetadataStripper(Protocol):
    """
    Interface for metadata removal.

    Implementations raise MetadataStripError for input they cannot
    handle. The pipeline treats that as "upload the original".
    """

    def strip(self, data: bytes) -> bytes:
        """Return data with embedded metadata removed."""
        ...


class ObjectStore(Protocol):
    """The two store operations the pipeline needs."""

    def upload_file(
        self,
        file_path: Path,
        object_key: str,
        content_type: str,
        tags: dict[str, str],
    ) -> None:
        """Upload a file from disk under object_key."""
        ...

    def get_presigned_url(
        self,
        object_key: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """Generate temporary download URL."""
        ...


# ---------------------------------------------------------------------------
# Staging
# ---------------------------------------------------------------------------

def choose_staged_bytes(original: bytes, stripper: MetadataStripper) -> tuple[bytes, bool]:
    """
    Run the stripper and decide which bytes to upload.

    Returns (data, used_original). Losing the user's file is worse than
    uploading it with metadata, so stripper failures and empty results
    both fall back to the original bytes.
    """
    try:
        cleaned = stripper.strip(original)
    except MetadataStripError as e:
        logger.warning(
            "Could not strip metadata, falling back to original file",
            extra={"error": str(e)}
        )
        return original, True

    if not cleaned:
        logger.warning("Cleaned file is empty, falling back to original file")
        return original, True

    return cleaned, False


@contextmanager
def staged_file(data: bytes, suffix: str = "") -> Iterator[Path]:
    """
    Write data to a temporary file and remove it on exit.

    The suffix is carried over from the source so the staged name still
    says what kind of file it is. Removal happens on error paths too.
    """
    with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
        tmp.write(data)
        tmp_path = Path(tmp.name)

    try:
        yield tmp_path
    finally:
        os.unlink(tmp_path)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class UploadOrchestrator:
    """
    Runs the upload pipeline for one request.

    Holds only its collaborators; every call to run() is independent.
    Errors from reading the source (OSError) and from the store
    propagate to the caller, which decides the exit code.
    """

    def __init__(self, storage: ObjectStore, stripper: MetadataStripper) -> None:
        self._storage = storage
        self._stripper = stripper

    def run(self, request: UploadRequest) -> UploadResult:
        source = Path(request.source_path)

        logger.debug("Opening file", extra={"source_path": str(source)})
        original = source.read_bytes()
        logger.debug(
            "Opened file",
            extra={"source_path": str(source), "size_bytes": len(original)}
        )

        logger.debug("Trying to clean metadata from file")
        data, used_original = choose_staged_bytes(original, self._stripper)

        with staged_file(data, suffix=source.suffix) as staged_path:
            digest = hash_file(staged_path)
            object_key = build_object_key(request.prefix, digest, source.name)
            content_type = resolve_content_type(staged_path.name)

            self._storage.upload_file(
                staged_path,
                object_key,
                content_type,
                request.user_tags,
            )

            logger.info(
                "Uploaded file",
                extra={
                    "source_path": str(source),
                    "bucket": request.bucket_name,
                    "object_key": object_key,
                    "content_type": content_type,
                    "size_bytes": len(data),
                }
            )

            output = self._render_output(request, object_key)

        return UploadResult(
            object_key=object_key,
            digest=digest,
            content_type=content_type,
            output=output,
            used_original_bytes=used_original,
        )

    def _render_output(self, request: UploadRequest, object_key: str) -> str:
        """Build the one line printed after a successful upload."""
        mode = request.output_mode

        if mode is OutputMode.URL:
            return build_url(
                request.access_dns,
                request.bucket_name,
                object_key,
                request.include_bucket_in_url,
            )

        if mode is OutputMode.SHARE_URL:
            return self._storage.get_presigned_url(
                object_key,
                expiry_seconds=SHARE_URL_EXPIRY_SECONDS,
            )

        return f"Uploaded {request.source_path} to {request.bucket_name}/{object_key}"

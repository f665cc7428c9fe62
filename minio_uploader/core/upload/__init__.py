"""
Upload pipeline: naming, hashing, staging and orchestration.
"""

from .hashing import hash_file, hash_stream
from .models import OutputMode, UploadRequest, UploadResult
from .naming import build_object_key, build_url, resolve_content_type
from .orchestrator import (
    MetadataStripError,
    MetadataStripper,
    ObjectStore,
    UploadOrchestrator,
)

__all__ = [
    "hash_file",
    "hash_stream",
    "OutputMode",
    "UploadRequest",
    "UploadResult",
    "build_object_key",
    "build_url",
    "resolve_content_type",
    "MetadataStripError",
    "MetadataStripper",
    "ObjectStore",
    "UploadOrchestrator",
]

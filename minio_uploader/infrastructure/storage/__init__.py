"""
Object storage integration for uploaded files.

Supports MinIO, R2 and S3 via the S3-compatible API.
Includes mock mode for dry runs without credentials.
"""

from .client import (
    MockStorageClient,
    S3StorageClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)

__all__ = [
    "MockStorageClient",
    "S3StorageClient",
    "StorageConfig",
    "StorageError",
    "create_storage_client",
]

"""
Object storage client for uploaded files.

Supports any S3-compatible endpoint (MinIO, Cloudflare R2, AWS S3) through
boto3, with a mock mode that keeps objects in memory.

Mock mode enables dry runs and tests of the whole pipeline without
provisioning a bucket or handing out credentials.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

from ...core.upload.orchestrator import ObjectStore

logger = logging.getLogger(__name__)

MOCK_BUCKET_NAME = "mock-bucket"


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """
    Configuration for S3-compatible storage.

    The endpoint is usually a bare host such as "s3.example.org" or
    "localhost:9000"; the scheme is derived from use_ssl.
    """
    endpoint: str
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    use_ssl: bool = True
    region: str = "us-east-1"

    @property
    def endpoint_url(self) -> str:
        """Endpoint with scheme, as boto3 expects it."""
        if "://" in self.endpoint:
            return self.endpoint
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.endpoint}"


def encode_tags(tags: dict[str, str]) -> str:
    """Encode tags the way the x-amz-tagging header wants them."""
    return urlencode(tags)


class S3StorageClient:
    """
    S3-compatible object storage client.

    Uses boto3 because MinIO, R2 and S3 all speak the same API. Swapping
    providers is a matter of changing the endpoint.
    """

    def __init__(self, config: StorageConfig) -> None:
        """
        Initialize the S3 client with boto3.

        boto3 is imported here (not at module level) so mock mode and the
        rest of the package work without it.
        """
        try:
            import boto3
            from botocore.config import Config
        except ImportError:
            raise ImportError(
                "boto3 is required for S3 storage. Install with: pip install boto3"
            )

        self._config = config

        # MinIO needs v4 signatures and path-style addressing
        boto_config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path'},
        )

        try:
            self._s3_client = boto3.client(
                's3',
                endpoint_url=config.endpoint_url,
                aws_access_key_id=config.access_key_id,
                aws_secret_access_key=config.secret_access_key,
                region_name=config.region,
                use_ssl=config.use_ssl,
                config=boto_config,
            )
        except Exception as e:
            raise StorageError(f"Could not create S3 client for {config.endpoint_url}: {e}") from e

        logger.debug(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    def upload_file(
        self,
        file_path: Path,
        object_key: str,
        content_type: str,
        tags: dict[str, str],
    ) -> None:
        """
        Upload a file from disk.

        upload_file streams from disk and switches to multipart uploads for
        large files on its own, so the file is never read into memory here.
        """
        try:
            self._s3_client.upload_file(
                str(file_path),
                self._config.bucket_name,
                object_key,
                ExtraArgs={
                    'ContentType': content_type,
                    'Tagging': encode_tags(tags),
                },
            )

            logger.debug(
                "Uploaded object",
                extra={
                    "bucket": self._config.bucket_name,
                    "object_key": object_key,
                    "content_type": content_type,
                }
            )

        except Exception as e:
            logger.error(
                "Failed to upload object",
                extra={
                    "bucket": self._config.bucket_name,
                    "object_key": object_key,
                    "error": str(e),
                }
            )
            raise StorageError(f"Upload failed: {e}") from e

    def get_presigned_url(
        self,
        object_key: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """
        Generate a temporary download URL.

        The URL grants read access to this one object without credentials
        until it expires.
        """
        try:
            return self._s3_client.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self._config.bucket_name,
                    'Key': object_key,
                },
                ExpiresIn=expiry_seconds,
            )

        except Exception as e:
            logger.error(
                "Failed to generate presigned URL",
                extra={"object_key": object_key, "error": str(e)}
            )
            raise StorageError(f"Presigned URL generation failed: {e}") from e


# ---------------------------------------------------------------------------
# Mock Storage for Dry Runs and Tests
# ---------------------------------------------------------------------------

@dataclass
class StoredObject:
    """An object held by the mock store."""
    data: bytes
    content_type: str
    tags: dict[str, str] = field(default_factory=dict)


class MockStorageClient:
    """
    In-memory storage for dry runs and tests.

    Uploaded files are copied into a dictionary and "presigned URLs"
    are mock URIs. Nothing is sent over the network.
    """

    def __init__(self, bucket_name: str = MOCK_BUCKET_NAME) -> None:
        self.bucket_name = bucket_name
        # {object_key: StoredObject}
        self.objects: dict[str, StoredObject] = {}
        logger.debug("Initialized mock storage client (in-memory)")

    def upload_file(
        self,
        file_path: Path,
        object_key: str,
        content_type: str,
        tags: dict[str, str],
    ) -> None:
        """Store the file contents in memory."""
        data = Path(file_path).read_bytes()
        self.objects[object_key] = StoredObject(
            data=data,
            content_type=content_type,
            tags=dict(tags),
        )

        logger.debug(
            "Stored object in mock storage",
            extra={"object_key": object_key, "size_bytes": len(data)}
        )

    def get_presigned_url(
        self,
        object_key: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """Return a mock URL for a stored object."""
        if object_key not in self.objects:
            raise StorageError(f"Object not found: {object_key}")

        return f"mock://storage/{self.bucket_name}/{object_key}?expires={expiry_seconds}"


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> ObjectStore:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return the in-memory client

    Returns:
        ObjectStore implementation (S3 or Mock)
    """
    if mock_mode:
        bucket_name = config.bucket_name if config and config.bucket_name else MOCK_BUCKET_NAME
        return MockStorageClient(bucket_name)

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3StorageClient(config)

"""
Value objects for a single upload.

Everything here is created once per invocation and never mutated.
None of it knows about boto3, Pillow, or the command line.
"""

from dataclasses import dataclass
from enum import Enum


# Tags attached to every uploaded object
AGENT_TAG = ("agent", "Ryes-Minio-Image-Uploader")
SHARE_URL_TAG = ("generatedWithShareURL", "true")

# Share links stay valid for one day
SHARE_URL_EXPIRY_SECONDS = 24 * 60 * 60


class OutputMode(Enum):
    """What the single line on stdout contains after a successful upload."""
    URL = "url"
    SHARE_URL = "share_url"
    CONFIRMATION = "confirmation"


@dataclass(frozen=True)
class UploadRequest:
    """
    Everything needed to perform one upload.

    Built by the entry point from flags and settings. Business logic
    receives this object and never looks at the environment itself.
    """
    source_path: str
    prefix: str
    bucket_name: str
    access_dns: str = ""
    include_bucket_in_url: bool = True
    print_url: bool = False
    share_url: bool = False

    def __post_init__(self) -> None:
        if not self.source_path:
            raise ValueError("source_path cannot be empty")
        if not self.prefix:
            raise ValueError("prefix cannot be empty")

    @property
    def output_mode(self) -> OutputMode:
        # print-url wins when both flags are given
        if self.print_url:
            return OutputMode.URL
        if self.share_url:
            return OutputMode.SHARE_URL
        return OutputMode.CONFIRMATION

    @property
    def user_tags(self) -> dict[str, str]:
        """Object tags for this upload."""
        tags = dict([AGENT_TAG])
        if self.share_url:
            tags.update([SHARE_URL_TAG])
        return tags


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a successful upload."""
    object_key: str
    digest: str
    content_type: str
    output: str
    used_original_bytes: bool = False

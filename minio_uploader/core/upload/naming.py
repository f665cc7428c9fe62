"""
Object naming, content typing and URL construction.

These are pure functions: same input, same output, no I/O.
"""

from typing import Optional


DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Order matters: the first matching suffix wins. Matching is case-sensitive,
# so "photo.JPG" resolves to the default type.
CONTENT_TYPES: tuple[tuple[str, str], ...] = (
    (".jpg", "image/jpeg"),
    (".jpeg", "image/jpeg"),
    (".png", "image/png"),
    (".gif", "image/gif"),
    (".tif", "image/tiff"),
    (".tiff", "image/tiff"),
    (".txt", "text/plain"),
    (".webp", "image/webp"),
    (".svg", "image/svg+xml"),
    (".ico", "image/vnd.microsoft.icon"),
)


def resolve_content_type(filename: str) -> str:
    """Map a filename to a MIME type by its suffix."""
    for suffix, content_type in CONTENT_TYPES:
        if filename.endswith(suffix):
            return content_type
    return DEFAULT_CONTENT_TYPE


def build_object_key(prefix: str, digest: str, filename: Optional[str] = None) -> str:
    """
    Build the destination key for an upload.

    Key structure: {prefix}/{digest}/{filename}
    The digest makes the key content-addressed: uploading identical bytes
    again overwrites the same object, any change lands somewhere new.
    Keeping the filename as the last segment gives downloads a sensible name.
    """
    if filename:
        return f"{prefix}/{digest}/{filename}"
    return f"{prefix}/{digest}"


def build_url(dns: str, bucket: str, object_key: str, include_bucket: bool) -> str:
    """
    Build the public access URL for an object.

    Path segments are not escaped; prefixes and filenames are expected
    to be URL-safe already.
    """
    if include_bucket:
        return f"https://{dns}/{bucket}/{object_key}"
    return f"https://{dns}/{object_key}"

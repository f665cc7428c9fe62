"""Content digests for staged files."""

import hashlib
from pathlib import Path
from typing import BinaryIO, Union


CHUNK_SIZE = 64 * 1024


def hash_stream(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> str:
    """
    Return the lowercase hex SHA-256 of everything left in the stream.

    Reads in fixed-size chunks so large images never sit in memory twice.
    Read errors surface as OSError.
    """
    digest = hashlib.sha256()
    for chunk in iter(lambda: stream.read(chunk_size), b""):
        digest.update(chunk)
    return digest.hexdigest()


def hash_file(path: Union[str, Path]) -> str:
    """SHA-256 hex digest of a file on disk."""
    with open(path, "rb") as f:
        return hash_stream(f)

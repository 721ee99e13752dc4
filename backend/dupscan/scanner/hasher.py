from __future__ import annotations

import hashlib
from typing import BinaryIO, Tuple

from .errors import HashError

HASH_CHUNK_SIZE = 8192  # 8 KiB chunks for streaming hash calculation.


def calculate_stream_hash(file_obj: BinaryIO, chunk_size: int = HASH_CHUNK_SIZE) -> Tuple[str, int]:
    """Return the MD5 hex digest and byte count of an open binary stream.

    Reads in ``chunk_size`` pieces so memory use stays flat no matter how
    large the underlying file is.
    """
    hasher = hashlib.md5()
    total = 0
    while chunk := file_obj.read(chunk_size):
        hasher.update(chunk)
        total += len(chunk)
    return hasher.hexdigest(), total


def hash_file(path: str, chunk_size: int = HASH_CHUNK_SIZE) -> Tuple[str, int]:
    """Hash the full content of ``path``.

    Raises:
        HashError: the file could not be opened or failed mid-read.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    try:
        with open(path, "rb") as file_obj:
            return calculate_stream_hash(file_obj, chunk_size)
    except OSError as exc:
        raise HashError(f"Failed to hash {path}: {exc}", "FILE_UNREADABLE") from exc

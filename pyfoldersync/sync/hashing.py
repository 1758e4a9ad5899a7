"""Content hashing for file comparison."""

import hashlib
import logging
from pathlib import Path

from ..exceptions import HashComputationFailure
from ..utils import HASH_CHUNK_SIZE

logger = logging.getLogger(__name__)


def compute_file_hash(path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Compute the SHA-256 digest of a file.

    Args:
        path: File to hash
        chunk_size: Read size in bytes

    Returns:
        Hex digest

    Raises:
        HashComputationFailure: If the file cannot be read
    """
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(chunk_size), b""):
                digest.update(chunk)
    except OSError as e:
        logger.debug(f"Hashing {path} failed: {e}")
        raise HashComputationFailure(path, e) from e
    return digest.hexdigest()

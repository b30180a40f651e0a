"""Content fingerprinting.

A fingerprint is the lowercase hex digest of a file's raw bytes. Two files
with identical bytes always share a fingerprint; nothing else (name, mtime,
location) takes part in it.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

DEFAULT_ALGORITHM = "sha256"
DEFAULT_CHUNK_SIZE = 64 * 1024

# Fixed-length digests considered strong enough for change detection.
ALLOWED_FINGERPRINT_ALGORITHMS = frozenset({
    "sha224",
    "sha256",
    "sha384",
    "sha512",
    "sha3_224",
    "sha3_256",
    "sha3_384",
    "sha3_512",
    "blake2b",
    "blake2s",
})

_ALGORITHMS_BY_COMPACT_NAME = {name.replace("_", ""): name for name in ALLOWED_FINGERPRINT_ALGORITHMS}


def normalize_algorithm(name: str) -> str:
    """Return the canonical hashlib name, or raise `ValueError` for weak or unknown digests."""

    compact = name.strip().lower().replace("-", "").replace("_", "")
    normalized = _ALGORITHMS_BY_COMPACT_NAME.get(compact)
    if normalized is None:
        raise ValueError(
            f"Unsupported fingerprint algorithm '{name}'. "
            f"Choose one of: {', '.join(sorted(ALLOWED_FINGERPRINT_ALGORITHMS))}"
        )
    return normalized


class ContentFingerprinter:
    """Computes stable digests of byte content."""

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.algorithm = normalize_algorithm(algorithm)
        self.chunk_size = chunk_size

    def fingerprint_bytes(self, data: bytes) -> str:
        digest = hashlib.new(self.algorithm)
        digest.update(data)
        return digest.hexdigest()

    def fingerprint_file(self, path: str | Path) -> str:
        """Stream `path` through the digest. Read errors propagate as `OSError`."""

        digest = hashlib.new(self.algorithm)
        with open(path, "rb") as fh:
            for chunk in iter(lambda: fh.read(self.chunk_size), b""):
                digest.update(chunk)
        return digest.hexdigest()

    @classmethod
    def from_settings(cls, settings) -> "ContentFingerprinter":
        return cls(algorithm=settings.FINGERPRINT_ALGORITHM, chunk_size=settings.FINGERPRINT_CHUNK_SIZE)

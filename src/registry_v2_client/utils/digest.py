"""Digest calculation and validation utilities."""

import hashlib
import re
from os import PathLike
from typing import Union

import aiofiles

# Regex pattern for valid digest format (algorithm:hex)
DIGEST_PATTERN = re.compile(r"^[a-z0-9]+:[a-f0-9]+$")

# Hex length per supported algorithm
DIGEST_LENGTHS = {"sha256": 64, "sha512": 128}

DEFAULT_CHUNK_SIZE = 1024 * 1024


def calculate_digest(data: Union[bytes, bytearray], algorithm: str = "sha256") -> str:
    """Calculate digest of data.

    Args:
        data: Data to hash
        algorithm: Hash algorithm (default: sha256)

    Returns:
        Digest string in format "algorithm:hex"

    Raises:
        ValueError: If algorithm is not supported
        ValueError: If data is not bytes-like
    """
    if not isinstance(data, (bytes, bytearray)):
        raise ValueError("Data must be bytes or bytearray")

    if algorithm not in DIGEST_LENGTHS:
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    hasher = hashlib.new(algorithm)
    hasher.update(data)
    return f"{algorithm}:{hasher.hexdigest()}"


async def calculate_file_digest(
    path: Union[str, PathLike],
    algorithm: str = "sha256",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> tuple[str, int]:
    """Calculate digest and size of a file without loading it into memory.

    Returns:
        Tuple of digest string and file size in bytes
    """
    if algorithm not in DIGEST_LENGTHS:
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    hasher = hashlib.new(algorithm)
    size = 0
    async with aiofiles.open(path, "rb") as f:
        while True:
            chunk = await f.read(chunk_size)
            if not chunk:
                break
            hasher.update(chunk)
            size += len(chunk)
    return f"{algorithm}:{hasher.hexdigest()}", size


def validate_digest(digest: str) -> bool:
    """Validate digest format.

    Args:
        digest: Digest string to validate

    Returns:
        True if valid digest format
    """
    if not isinstance(digest, str):
        return False

    if not DIGEST_PATTERN.match(digest):
        return False

    algorithm, hex_part = digest.split(":", 1)
    return DIGEST_LENGTHS.get(algorithm) == len(hex_part)


def split_digest(digest: str) -> tuple[str, str]:
    """Split a digest into algorithm and hex parts.

    Raises:
        ValueError: If digest format is invalid
    """
    if not validate_digest(digest):
        raise ValueError(f"Invalid digest format: {digest}")
    algorithm, hex_part = digest.split(":", 1)
    return algorithm, hex_part


def verify_digest(data: Union[bytes, bytearray], expected_digest: str) -> bool:
    """Verify data matches expected digest.

    Args:
        data: Data to verify
        expected_digest: Expected digest string

    Returns:
        True if data matches digest

    Raises:
        ValueError: If digest format is invalid
    """
    algorithm, _ = split_digest(expected_digest)
    actual_digest = calculate_digest(data, algorithm)
    return actual_digest == expected_digest

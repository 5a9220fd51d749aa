"""Timing, file, randomness and integer-math helpers."""

from __future__ import annotations

import os
import random
import time

__all__ = [
    "wclock",
    "file_size",
    "file_exists",
    "file_delete",
    "absolute_path",
    "read_block",
    "write_file",
    "append_to_file",
    "random_int",
    "random_long",
    "fill_random_string",
    "fill_random_letters",
    "random_string_hash",
    "log2ceil",
    "log2floor",
]


def wclock() -> float:
    """Return wall-clock time in seconds."""
    return time.time()


def file_size(fname: str | os.PathLike) -> int:
    """Return the size of a file in bytes."""
    return os.path.getsize(fname)


def file_exists(fname: str | os.PathLike) -> bool:
    """Return True if the file can be opened for reading."""
    try:
        with open(fname, "rb"):
            return True
    except OSError:
        return False


def file_delete(fname: str | os.PathLike) -> None:
    """Delete a file; raises FileNotFoundError if it does not exist."""
    os.remove(fname)


def absolute_path(fname: str | os.PathLike) -> str:
    """Return the absolute path of a file name."""
    return os.path.abspath(os.fspath(fname))


def read_block(fname: str | os.PathLike, beg: int, length: int) -> bytes:
    """Read exactly ``length`` bytes starting at offset ``beg``."""
    if beg < 0 or length < 0:
        raise ValueError("offset and length must be non-negative")
    with open(fname, "rb") as f:
        f.seek(beg)
        data = f.read(length)
    if len(data) != length:
        raise EOFError(
            f"read {len(data)} bytes from {os.fspath(fname)!s}, expected {length}"
        )
    return data


def write_file(fname: str | os.PathLike, data: bytes) -> None:
    """Write ``data`` to a file, replacing its previous contents."""
    with open(fname, "wb") as f:
        f.write(data)


def append_to_file(fname: str | os.PathLike, data: bytes) -> None:
    """Append ``data`` to a file, creating it if needed."""
    with open(fname, "ab") as f:
        f.write(data)


def random_int(p: int, r: int) -> int:
    """Return a random integer in the closed range [p, r]."""
    return random.randint(p, r)


def random_long(p: int, r: int) -> int:
    """Return a random integer in the closed range [p, r]."""
    return random.randint(p, r)


def fill_random_string(length: int, sigma: int) -> bytes:
    """Return ``length`` random bytes with values in [0, sigma)."""
    if not 1 <= sigma <= 256:
        raise ValueError("sigma must be between 1 and 256")
    return bytes(random.randrange(sigma) for _ in range(length))


def fill_random_letters(n: int, sigma: int) -> bytes:
    """Return ``n`` random letters drawn from the first ``sigma`` after 'a'."""
    if not 1 <= sigma <= 256 - ord("a"):
        raise ValueError("sigma out of range")
    base = ord("a")
    return bytes(base + random.randrange(sigma) for _ in range(n))


def random_string_hash() -> str:
    """Return a random hexadecimal string usable as a file-name suffix."""
    return f"{random.getrandbits(64):016x}"


def log2ceil(x: int) -> int:
    """Smallest k with 2**k >= x (0 for x <= 1)."""
    return 0 if x <= 1 else (x - 1).bit_length()


def log2floor(x: int) -> int:
    """Largest k with 2**k <= x (0 for x <= 1)."""
    return 0 if x <= 1 else x.bit_length() - 1
"""Reading and writing of hexadecimal hash sum files."""

from __future__ import annotations

import os
import re
from typing import IO, Any, Iterable

__all__ = [
    "hash_from_file",
    "hash_from_reader",
    "write_hash_sum_to_file",
    "write_hash_to_file",
]

_HEX_RE = re.compile(r"^([0-9A-Fa-f]+)")


def hash_from_reader(stream: Iterable[str] | Iterable[bytes]) -> bytes | None:
    """Return the hash from the first line that starts with hex digits.

    Returns None if no such line exists.
    """
    for line in stream:
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        m = _HEX_RE.match(line)
        if m:
            return bytes.fromhex(m.group(1))
    return None


def hash_from_file(fname: str | os.PathLike[str]) -> bytes | None:
    """Read a hexadecimal hash sum from a file."""
    with open(fname, "rb") as f:
        return hash_from_reader(f)


def write_hash_to_file(
    fname: str | os.PathLike[str], name: str, hasher: Any, data: bytes
) -> None:
    """Feed data into hasher and write its sum for name to fname."""
    hasher.update(data)
    write_hash_sum_to_file(fname, name, hasher.digest())


def write_hash_sum_to_file(fname: str | os.PathLike[str], name: str, digest: bytes) -> None:
    """Write a hash sum for name to fname in 'hex name' form."""
    with open(fname, "w", encoding="utf-8", newline="\n") as f:
        _write_line(f, digest, name)


def _write_line(f: IO[str], digest: bytes, name: str) -> None:
    f.write(f"{digest.hex()} {name}\n")
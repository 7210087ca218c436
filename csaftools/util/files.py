"""File name checks and file system helpers."""

from __future__ import annotations

import errno
import json
import os
import random
import re
from datetime import datetime
from typing import IO, Any, BinaryIO, Callable

from csaftools.util.patheval import PathEval, StringMatcher

__all__ = [
    "NWriter",
    "clean_file_name",
    "conforming_file_name",
    "deep_copy",
    "id_matches_filename",
    "make_uniq_dir",
    "make_uniq_file",
    "path_exists",
    "write_to_file",
]

_INVALID_RUNES = re.compile(r"[^+\-a-z0-9]+")


def clean_file_name(s: str) -> str:
    """Return s lower-cased, with invalid characters collapsed to '_' and a '.json' suffix.

    Valid characters are 'a' to 'z', '0' to '9', '+', '-' and '_'.
    """
    s = s.lower()
    s = s.removesuffix(".json")
    return _INVALID_RUNES.sub("_", s) + ".json"


def conforming_file_name(fname: str) -> bool:
    """Tell whether fname already is a clean file name."""
    return fname == clean_file_name(fname)


def id_matches_filename(evaluator: PathEval, doc: Any, filename: str) -> None:
    """Check that filename derives from document/tracking/id of doc.

    Raises ValueError if the id cannot be extracted or does not match.
    """
    matcher = StringMatcher()
    try:
        evaluator.extract("$.document.tracking.id", matcher, False, doc)
    except ValueError as err:
        raise ValueError(f"check that ID matches filename: {err}") from err
    if clean_file_name(matcher.value) != filename:
        raise ValueError(
            f"filename {filename} does not match document/tracking/id "
            f"{json.dumps(matcher.value)}"
        )


def path_exists(path: str | os.PathLike[str]) -> bool:
    """Tell whether path exists; errors other than absence are raised."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


class NWriter:
    """A writer wrapper counting the bytes written through it."""

    def __init__(self, writer: IO[bytes], n: int = 0) -> None:
        self.writer = writer
        self.n = n

    def write(self, data: bytes) -> int:
        """Write data to the wrapped writer and count the bytes written."""
        written = self.writer.write(data)
        if written is None:
            written = len(data)
        self.n += written
        return written


def write_to_file(fname: str | os.PathLike[str], write: Callable[[BinaryIO], Any]) -> None:
    """Create fname and let write fill it through the open binary file."""
    with open(fname, "wb") as f:
        write(f)


def deep_copy(dst: str | os.PathLike[str], src: str | os.PathLike[str]) -> None:
    """Copy the directory tree src into the existing directory dst.

    Directories are created, regular files are hard linked and
    anything else is skipped.
    """
    stack = [(os.fspath(dst), os.fspath(src))]
    while stack:
        dst_dir, src_dir = stack.pop()
        with os.scandir(src_dir) as entries:
            for entry in entries:
                nsrc = os.path.join(src_dir, entry.name)
                ndst = os.path.join(dst_dir, entry.name)
                if entry.is_dir(follow_symlinks=False):
                    os.mkdir(ndst, 0o755)
                    stack.append((ndst, nsrc))
                elif entry.is_file(follow_symlinks=False):
                    os.link(nsrc, ndst)


def make_uniq_file(prefix: str) -> tuple[str, BinaryIO]:
    """Create a uniquely named file starting with prefix, opened for writing.

    On a name collision the date stamp gets a random suffix.
    """
    files: list[BinaryIO] = []

    def create(name: str) -> None:
        fd = os.open(name, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        files.append(os.fdopen(fd, "wb"))

    name = _mk_uniq(prefix, create)
    return name, files[-1]


def make_uniq_dir(prefix: str) -> str:
    """Create a uniquely named directory starting with prefix and return its name."""
    return _mk_uniq(prefix, lambda name: os.mkdir(name, 0o755))


def _mk_uniq(prefix: str, create: Callable[[str], None]) -> str:
    now = datetime.now()
    name = prefix + now.strftime("-%Y-%m-%d-%H%M%S")
    try:
        create(name)
        return name
    except FileExistsError:
        pass
    rnd = random.Random(int(now.timestamp()))
    for _ in range(10000):
        candidate = f"{name}-{rnd.getrandbits(32) & 0xFFFFFF:x}"
        try:
            create(candidate)
        except FileExistsError:
            continue
        return candidate
    raise FileExistsError(errno.EEXIST, "mkuniq: file exists", name)
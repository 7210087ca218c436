"""A CSV writer that quotes every field."""

from __future__ import annotations

from typing import IO, Iterable

__all__ = ["FullyQuotedCSVWriter"]

_BUFFER_SIZE = 4096


class FullyQuotedCSVWriter:
    """Writes CSV records with each field in double quotes.

    Output is buffered; call flush (or use the writer as a context manager)
    to make sure everything reaches the underlying stream.
    """

    def __init__(self, stream: IO[str], comma: str = ",", use_crlf: bool = False) -> None:
        self.stream = stream
        self.comma = comma
        self.use_crlf = use_crlf
        self._pending: list[str] = []
        self._size = 0

    def write(self, record: Iterable[str]) -> None:
        """Buffer a single record."""
        fields = []
        for field in record:
            if not self.use_crlf:
                field = field.replace("\r\n", "\n")
            fields.append('"' + field.replace('"', '""') + '"')
        line = self.comma.join(fields) + ("\r\n" if self.use_crlf else "\n")
        self._pending.append(line)
        self._size += len(line)
        if self._size >= _BUFFER_SIZE:
            self.flush()

    def flush(self) -> None:
        """Write buffered records to the underlying stream."""
        if self._pending:
            self.stream.write("".join(self._pending))
            self._pending.clear()
            self._size = 0
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()

    def __enter__(self) -> FullyQuotedCSVWriter:
        return self

    def __exit__(self, *exc: object) -> None:
        self.flush()
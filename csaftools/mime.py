"""Writing of multipart MIME bodies with typed form file parts."""

from __future__ import annotations

import secrets
from typing import IO, Mapping


def _escape_quotes(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"')


class _Part:
    def __init__(self, owner: MultipartWriter) -> None:
        self._owner = owner

    def write(self, data: bytes) -> int:
        if self._owner._current is not self:
            raise ValueError("multipart: can't write to finished part")
        self._owner.stream.write(data)
        return len(data)


class MultipartWriter:
    """Writes parts of a multipart body to a binary stream."""

    def __init__(self, stream: IO[bytes], boundary: str | None = None) -> None:
        self.stream = stream
        self.boundary = boundary or secrets.token_hex(30)
        self._current: _Part | None = None
        self._started = False

    def create_part(self, headers: Mapping[str, str]) -> _Part:
        """Start a new part with the given headers and return its writer."""
        prefix = "\r\n" if self._started else ""
        lines = [f"{prefix}--{self.boundary}\r\n"]
        lines += [f"{key}: {headers[key]}\r\n" for key in sorted(headers)]
        self.stream.write(("".join(lines) + "\r\n").encode("utf-8"))
        self._started = True
        self._current = _Part(self)
        return self._current

    def close(self) -> None:
        """Finish the last part and write the closing boundary."""
        self._current = None
        self.stream.write(f"\r\n--{self.boundary}--\r\n".encode("utf-8"))


def create_form_file(writer: MultipartWriter, fieldname: str, filename: str, mime_type: str) -> _Part:
    """Start a form-data file part with the given MIME type."""
    disposition = (f'form-data; name="{_escape_quotes(fieldname)}"; '
                   f'filename="{_escape_quotes(filename)}"')
    return writer.create_part({"Content-Disposition": disposition, "Content-Type": mime_type})
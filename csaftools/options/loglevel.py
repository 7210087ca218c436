"""Log levels as written in configurations and on the command line."""

from __future__ import annotations

import re
from dataclasses import dataclass

DEBUG, INFO, WARN, ERROR = -4, 0, 4, 8

_NAMES = {"DEBUG": DEBUG, "INFO": INFO, "WARN": WARN, "ERROR": ERROR}


@dataclass(frozen=True, order=True)
class LogLevel:
    """A severity: debug -4, info 0, warn 4, error 8, with offsets in between."""

    level: int = INFO

    def __str__(self) -> str:
        name, base = next(((n, b) for n, b in reversed(_NAMES.items()) if self.level >= b),
                          ("DEBUG", DEBUG))
        offset = self.level - base
        return name if offset == 0 else f"{name}{offset:+d}"

    def to_flag(self) -> str:
        """Return the lower-case name, such as 'info' or 'warn+2'."""
        return str(self).lower()

    @classmethod
    def from_flag(cls, value: str) -> LogLevel:
        """Parse a name, case-insensitively, optionally followed by +N or -N."""
        name, offset_text = re.fullmatch(r"([^+-]*)(.*)", value, re.S).groups()
        base = _NAMES.get(name.upper())
        if base is None:
            raise ValueError(f"slog: level string {value!r}: unknown name")
        try:
            offset = int(offset_text) if offset_text else 0
        except ValueError as err:
            raise ValueError(f"slog: level string {value!r}: {err}") from err
        return cls(base + offset)
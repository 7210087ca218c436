"""Filtering of advisories by regular expressions."""

from __future__ import annotations

import re
from typing import Iterable, Iterator

__all__ = ["PatternMatcher"]


class PatternMatcher:
    """A list of regular expressions matched against strings."""

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        compiled = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as err:
                raise ValueError(f"invalid ignore pattern: {err}") from err
        self.patterns: tuple[re.Pattern[str], ...] = tuple(compiled)

    def matches(self, s: str) -> bool:
        """Tell whether any of the expressions matches somewhere in s."""
        return any(p.search(s) for p in self.patterns)

    def __iter__(self) -> Iterator[re.Pattern[str]]:
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)
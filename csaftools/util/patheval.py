"""Evaluation of JSON paths on documents with cached expressions and matchers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable

from csaftools.util.jsonpath import compile_expression


def re_marshal_json(src: Any, factory: Callable[[Any], Any] | None = None) -> Any:
    """Round-trip src through JSON and hand the result to factory, if given."""
    data = json.loads(json.dumps(src))
    return data if factory is None else factory(data)


def as_strings(x: Any) -> list[str] | None:
    """Return the strings of a list, or None if x is not a list."""
    if not isinstance(x, list):
        return None
    return [s for s in x if isinstance(s, str)]


@dataclass
class PathEvalMatcher:
    """An expression together with the action applied to its result."""

    expr: str
    action: Callable[[Any], Any]
    optional: bool = False


@dataclass
class StringMatcher:
    """Stores a matched string in ``value``."""

    value: str = ""

    def __call__(self, x: Any) -> None:
        if not isinstance(x, str):
            raise ValueError("not a string")
        self.value = x


@dataclass
class BoolMatcher:
    """Stores a matched bool in ``value``."""

    value: bool = False

    def __call__(self, x: Any) -> None:
        if not isinstance(x, bool):
            raise ValueError("not a bool")
        self.value = x


@dataclass
class TimeMatcher:
    """Parses a matched string with ``format`` (ISO 8601 if None) into ``value``."""

    format: str | None = None
    value: datetime | None = None

    def __call__(self, x: Any) -> None:
        if not isinstance(x, str):
            raise ValueError("not a string")
        if self.format is None:
            self.value = datetime.fromisoformat(x)
        else:
            self.value = datetime.strptime(x, self.format)


@dataclass
class StringTreeMatcher:
    """Collects unique strings from a string or nested lists of strings."""

    strings: list[str] = field(default_factory=list)

    def __call__(self, x: Any) -> None:
        if isinstance(x, str):
            if x not in self.strings:
                self.strings.append(x)
        elif isinstance(x, list):
            for item in x:
                self(item)
        else:
            raise ValueError(f"unsupported type: {type(x).__name__}")


@dataclass
class ReMarshalMatcher:
    """Converts a matched value via a JSON round trip and ``factory``."""

    factory: Callable[[Any], Any] | None = None
    value: Any = None

    def __call__(self, x: Any) -> None:
        self.value = re_marshal_json(x, self.factory)


class PathEval:
    """Evaluates JSON path expressions on documents, caching compiled ones."""

    def __init__(self) -> None:
        self._exprs: dict[str, Callable[[Any], Any]] = {}

    def compile(self, expr: str) -> Callable[[Any], Any]:
        """Compile expr, or return the cached compilation."""
        if expr not in self._exprs:
            self._exprs[expr] = compile_expression(expr)
        return self._exprs[expr]

    def eval(self, expr: str, doc: Any) -> Any:
        """Evaluate expr on doc and return the result."""
        if doc is None:
            raise ValueError("no document to extract data from")
        return self.compile(expr)(doc)

    def extract(self, expr: str, action: Callable[[Any], Any], optional: bool, doc: Any) -> None:
        """Hand the result of expr on doc to action; failures are ignored if optional."""
        try:
            action(self.eval(expr, doc))
        except (ValueError, TypeError) as err:
            if not optional:
                raise ValueError(f"extract failed '{expr}': {err}") from err

    def match(self, matchers: Iterable[PathEvalMatcher], doc: Any) -> None:
        """Apply every matcher to doc, stopping at the first failure."""
        for m in matchers:
            self.extract(m.expr, m.action, m.optional, doc)

    def strings(self, exprs: Iterable[str], optional: bool, doc: Any) -> list[str]:
        """Return the string results of the given expressions."""
        matcher = StringMatcher()
        results = []
        for expr in exprs:
            self.extract(expr, matcher, optional, doc)
            results.append(matcher.value)
        return results
"""Compilation of JSONPath expressions on decoded JSON documents.

Supported: ``$`` root, ``.name``, ``['name']``, ``[n]`` (negative from the
end), ``[start:stop:step]``, ``*``, ``..`` and unions ``[a, b]``.
A path without wildcards, slices, unions or ``..`` yields one value and
fails on missing members; any other path yields a list of all matches.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Iterator

_Step = Callable[[Any, bool], Iterator[Any]]

_STEP_RE = re.compile(
    r"""(?P<dots>\.\.?)(?P<name>\*|[^\s.\[\]]+)"""
    r"""|(?P<descend>\.\.)?\[(?P<items>(?:'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|[^\]'"])*)\]"""
)
_ITEM_RE = re.compile(
    r"""\s*(?:'(?P<sq>(?:[^'\\]|\\.)*)'|"(?P<dq>(?:[^"\\]|\\.)*)"|(?P<star>\*)"""
    r"""|(?P<slice>-?\d*\s*:\s*-?\d*\s*(?::\s*-?\d*)?)|(?P<index>-?\d+))\s*(?:,|$)"""
)


class ExpressionError(ValueError):
    """Raised when an expression is malformed or cannot be applied to a document."""


def _children(node: Any) -> Iterator[Any]:
    if isinstance(node, dict):
        yield from node.values()
    elif isinstance(node, list):
        yield from node


def _wildcard(node: Any, strict: bool) -> Iterator[Any]:
    yield from _children(node)


def _descend(node: Any, strict: bool) -> Iterator[Any]:
    yield node
    for child in _children(node):
        yield from _descend(child, strict)


def _key(name: str) -> _Step:
    def select(node: Any, strict: bool) -> Iterator[Any]:
        if isinstance(node, dict) and name in node:
            yield node[name]
        elif strict:
            raise ExpressionError(f"unknown key {name}")
    return select


def _index(index: int) -> _Step:
    def select(node: Any, strict: bool) -> Iterator[Any]:
        if isinstance(node, list) and -len(node) <= index < len(node):
            yield node[index]
        elif strict:
            raise ExpressionError(f"index {index} out of bounds")
    return select


def _slice(text: str, expr: str) -> _Step:
    parts = [int(p) if p.strip() else None for p in text.split(":")] + [None]
    if parts[2] == 0:
        raise ExpressionError(f"slice step cannot be zero in {expr!r}")
    bounds = slice(*parts[:3])

    def select(node: Any, strict: bool) -> Iterator[Any]:
        if isinstance(node, list):
            yield from node[bounds]
    return select


def _unescape(s: str) -> str:
    return re.sub(r"\\(.)", r"\1", s)


def _bracket(items: str, expr: str) -> tuple[_Step, bool]:
    selectors: list[tuple[_Step, bool]] = []
    pos = 0
    while pos < len(items) or not selectors:
        m = _ITEM_RE.match(items, pos)
        if m is None or m.end() == pos:
            raise ExpressionError(f"invalid selector [{items}] in {expr!r}")
        pos = m.end()
        if m["sq"] is not None or m["dq"] is not None:
            selectors.append((_key(_unescape(m["sq"] if m["sq"] is not None else m["dq"])), False))
        elif m["star"]:
            selectors.append((_wildcard, True))
        elif m["slice"]:
            selectors.append((_slice(m["slice"], expr), True))
        else:
            selectors.append((_index(int(m["index"])), False))
    if len(selectors) == 1:
        return selectors[0]

    def union(node: Any, strict: bool) -> Iterator[Any]:
        for select, _ in selectors:
            yield from select(node, False)
    return union, True


def compile_expression(expr: str) -> Callable[[Any], Any]:
    """Compile a JSONPath expression into a callable taking a document."""
    text = expr.strip()
    if not text.startswith("$"):
        raise ExpressionError(f"expression must start with '$': {expr!r}")
    steps: list[_Step] = []
    plural = False
    pos = 1
    while pos < len(text):
        m = _STEP_RE.match(text, pos)
        if m is None:
            raise ExpressionError(f"unexpected input at position {pos} in {expr!r}")
        pos = m.end()
        if m["dots"] == ".." or m["descend"]:
            steps.append(_descend)
            plural = True
        if m["name"] == "*":
            steps.append(_wildcard)
            plural = True
        elif m["name"]:
            steps.append(_key(m["name"]))
        else:
            step, many = _bracket(m["items"], expr)
            steps.append(step)
            plural = plural or many

    def evaluate(doc: Any) -> Any:
        values = [doc]
        for step in steps:
            values = [v for node in values for v in step(node, not plural)]
        return values if plural else values[0]

    return evaluate
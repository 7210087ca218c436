"""Command line parsing combined with configuration files in TOML."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
import tomllib
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Sequence, TypeVar

__all__ = [
    "SEM_VERSION",
    "Parser",
    "error_check",
    "expand_home",
    "find_config_file",
    "load_toml",
]

SEM_VERSION = "0.0.0"

_log = logging.getLogger(__name__)

C = TypeVar("C")


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> typing.NoReturn:
        raise ValueError(message)


def expand_home(path: str) -> str:
    """Expand a leading '~' to the home directory of the current user."""
    if not path or not path.startswith("~"):
        return path
    if len(path) > 1 and path[1] not in "/\\":
        raise ValueError("cannot expand user-specific home dir")
    return os.path.expanduser("~") + path[1:]


def find_config_file(locations: Sequence[str]) -> str | None:
    """Return the first existing file among locations, or None."""
    for location in locations:
        try:
            name = expand_home(location)
        except ValueError as err:
            _log.warning("warn: %s", err)
            continue
        if os.path.exists(name):
            return name
    return None


def _toml_key(f: dataclasses.Field) -> str:
    return f.metadata.get("toml", f.name).casefold()


def load_toml(config_type: type[C], path: str) -> C:
    """Load a configuration dataclass from a TOML file.

    Keys that match no field raise ValueError.
    """
    with open(path, "rb") as fh:
        data = tomllib.load(fh)
    fields = {_toml_key(f): f.name for f in dataclasses.fields(config_type)}
    values: dict[str, Any] = {}
    undecoded = []
    for key, value in data.items():
        name = fields.get(key.casefold())
        if name is None:
            undecoded.append(key)
        else:
            values[name] = value
    if undecoded:
        quoted = " ".join(f'"{k}"' for k in undecoded)
        raise ValueError(f'could not parse [{quoted}] from "{path}"')
    return config_type(**values)


def error_check(err: BaseException | None) -> None:
    """Print err and leave the program with status 1 if err is given."""
    if err is not None:
        print(f"error: {err}", file=sys.stderr)
        raise SystemExit(1)


def _converter(kind: Any) -> Callable[[str], Any]:
    from_flag = getattr(kind, "from_flag", None)
    if from_flag is not None:
        return from_flag
    if kind in (int, float):
        return kind
    return str


def _default_of(f: dataclasses.Field) -> Any:
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()
    return None


def _field_kind(f: dataclasses.Field) -> tuple[Any, Any]:
    """Return the value type of a field and, for lists, the item type.

    The type is taken from the field metadata key 'type', from the
    declared type if it is a class, or from the type of the default.
    """
    sample = _default_of(f)
    kind = f.metadata.get("type")
    if kind is None and isinstance(f.type, type):
        kind = f.type
    if kind is None and sample is not None:
        kind = type(sample)
    if kind is None:
        kind = str
    item = None
    if kind is list or isinstance(sample, list):
        item = f.metadata.get("item")
        if item is None:
            item = type(sample[0]) if sample else str
        kind = list
    return kind, item


@dataclass
class Parser(Generic[C]):
    """Parses command line options into a configuration dataclass.

    Option names come from the field metadata key 'long' or from the
    field name with '_' replaced by '-'. A configuration file, if found,
    is loaded first and explicit command line options override it.
    """

    config_type: type[C]
    default_config_locations: list[str] = field(default_factory=list)
    usage: str = ""
    set_defaults: Callable[[C], None] | None = None
    ensure_defaults: Callable[[C], None] | None = None
    has_version: Callable[[C], bool] | None = None
    config_location: Callable[[C], str] | None = None

    def _build(self) -> _ArgumentParser:
        usage = f"%(prog)s {self.usage}" if self.usage else None
        parser = _ArgumentParser(usage=usage)
        for f in dataclasses.fields(self.config_type):
            long = "--" + f.metadata.get("long", f.name.replace("_", "-"))
            flags = [long]
            if "short" in f.metadata:
                flags.insert(0, "-" + f.metadata["short"])
            description = f.metadata.get("description")
            kind, item = _field_kind(f)
            common = {"dest": f.name, "default": argparse.SUPPRESS, "help": description}
            if kind is bool:
                parser.add_argument(*flags, action="store_true", **common)
            elif kind is list:
                parser.add_argument(
                    *flags, action="append", type=_converter(item), **common
                )
            else:
                parser.add_argument(*flags, type=_converter(kind), **common)
        return parser

    def _apply(self, cfg: C, argv: Sequence[str] | None) -> list[str]:
        args = list(sys.argv[1:] if argv is None else argv)
        namespace, rest = self._build().parse_known_args(args)
        unknown = [a for a in rest if a.startswith("-") and a != "-"]
        if unknown:
            raise ValueError(f"unknown flag {unknown[0]!r}")
        for name, value in vars(namespace).items():
            setattr(cfg, name, value)
        return rest

    def parse(self, argv: Sequence[str] | None = None) -> tuple[list[str], C]:
        """Return the remaining arguments and the configuration.

        Help and version requests print and raise SystemExit(0).
        """
        cfg = self.config_type()
        if self.set_defaults is not None:
            self.set_defaults(cfg)
        args = self._apply(cfg, argv)

        if self.has_version is not None and self.has_version(cfg):
            print(SEM_VERSION)
            raise SystemExit(0)

        path = self.config_location(cfg) if self.config_location is not None else ""
        if not path and self.default_config_locations:
            path = find_config_file(self.default_config_locations) or ""
        if not path:
            return args, cfg

        path = expand_home(path)
        file_cfg = load_toml(self.config_type, path)
        args = self._apply(file_cfg, argv)
        if self.ensure_defaults is not None:
            self.ensure_defaults(file_cfg)
        return args, file_cfg
"""A registry of typed, named engine flags with defaults, argument and file parsing."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from os import PathLike
from typing import Union

MAX_FLAGS = 64
MAX_FLAG_NAME_LENGTH = 32

FlagValue = Union[bool, int, float, str, None]

_TRUE_WORDS = frozenset({"true", "1"})
_FALSE_WORDS = frozenset({"false", "0"})
_INT_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


class FlagType(Enum):
    """The kind of value a flag holds."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"


class FlagError(Exception):
    """Raised when a flag cannot be registered, found or assigned."""


def _leading_int(text: str) -> int:
    """Read the integer at the start of ``text``; 0 when there is none."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _leading_float(text: str) -> float:
    """Read the number at the start of ``text``; 0.0 when there is none."""
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


@dataclass
class Flag:
    """A named flag with its current and default value."""

    name: str
    type: FlagType
    default: FlagValue
    value: FlagValue = field(init=False)

    def __post_init__(self) -> None:
        self.value = self.default

    def reset(self) -> None:
        """Restore the default value."""
        self.value = self.default

    def assign_text(self, text: str) -> None:
        """Set the value from its textual form, as given on a command line or in a file."""
        if self.type is FlagType.BOOL:
            if text in _TRUE_WORDS:
                self.value = True
            elif text in _FALSE_WORDS:
                self.value = False
        elif self.type is FlagType.INT:
            self.value = _leading_int(text)
        elif self.type is FlagType.FLOAT:
            self.value = _leading_float(text)
        else:
            self.value = text


class FlagRegistry:
    """Holds up to ``MAX_FLAGS`` typed flags, looked up by name."""

    def __init__(self) -> None:
        self._flags: dict[str, Flag] = {}

    def __len__(self) -> int:
        return len(self._flags)

    def __iter__(self) -> Iterator[Flag]:
        return iter(list(self._flags.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def _register(self, name: str, flag_type: FlagType, default: FlagValue) -> Flag:
        if len(self._flags) >= MAX_FLAGS:
            raise FlagError(f"cannot register {name!r}: at most {MAX_FLAGS} flags")
        if name in self._flags:
            raise FlagError(f"flag {name!r} already exists")
        stored_name = name[: MAX_FLAG_NAME_LENGTH - 1]
        flag = Flag(stored_name, flag_type, default)
        self._flags[stored_name] = flag
        return flag

    def register_bool(self, name: str, default: bool) -> Flag:
        """Register a boolean flag."""
        return self._register(name, FlagType.BOOL, bool(default))

    def register_int(self, name: str, default: int) -> Flag:
        """Register an integer flag."""
        return self._register(name, FlagType.INT, int(default))

    def register_float(self, name: str, default: float) -> Flag:
        """Register a floating-point flag."""
        return self._register(name, FlagType.FLOAT, float(default))

    def register_string(self, name: str, default: str | None) -> Flag:
        """Register a string flag; its default may be None."""
        return self._register(name, FlagType.STRING, None if default is None else str(default))

    def _typed(self, name: str, flag_type: FlagType) -> Flag:
        try:
            flag = self._flags[name]
        except KeyError:
            raise FlagError(f"no flag named {name!r}") from None
        if flag.type is not flag_type:
            raise FlagError(
                f"flag {name!r} is {flag.type.value}, not {flag_type.value}"
            )
        return flag

    def set_bool(self, name: str, value: bool) -> None:
        """Set a boolean flag."""
        self._typed(name, FlagType.BOOL).value = bool(value)

    def set_int(self, name: str, value: int) -> None:
        """Set an integer flag."""
        self._typed(name, FlagType.INT).value = int(value)

    def set_float(self, name: str, value: float) -> None:
        """Set a floating-point flag."""
        self._typed(name, FlagType.FLOAT).value = float(value)

    def set_string(self, name: str, value: str | None) -> None:
        """Set a string flag; None clears it."""
        self._typed(name, FlagType.STRING).value = None if value is None else str(value)

    def _value_or(self, name: str, flag_type: FlagType, fallback: FlagValue) -> FlagValue:
        flag = self._flags.get(name)
        if flag is None or flag.type is not flag_type:
            return fallback
        return flag.value

    def get_bool(self, name: str) -> bool:
        """Value of a boolean flag, or False if it is missing or of another type."""
        return self._value_or(name, FlagType.BOOL, False)

    def get_int(self, name: str) -> int:
        """Value of an integer flag, or 0 if it is missing or of another type."""
        return self._value_or(name, FlagType.INT, 0)

    def get_float(self, name: str) -> float:
        """Value of a float flag, or 0.0 if it is missing or of another type."""
        return self._value_or(name, FlagType.FLOAT, 0.0)

    def get_string(self, name: str) -> str | None:
        """Value of a string flag, or None if it is missing or of another type."""
        return self._value_or(name, FlagType.STRING, None)

    def exists(self, name: str) -> bool:
        """Whether a flag of this name is registered."""
        return name in self._flags

    def parse_args(self, argv: Iterable[str] | None = None) -> None:
        """Apply ``--name=value`` and bare ``--name`` arguments.

        ``argv[0]`` is the program name and is ignored. Unknown flags are skipped;
        a bare ``--name`` only affects boolean flags, which it sets to True.
        """
        args = list(sys.argv if argv is None else argv)
        for arg in args[1:]:
            if not arg.startswith("--"):
                continue
            body = arg[2:]
            name, sep, text = body.partition("=")
            flag = self._flags.get(name)
            if flag is None:
                continue
            if sep:
                flag.assign_text(text)
            elif flag.type is FlagType.BOOL:
                flag.value = True

    def parse_file(self, path: str | PathLike[str]) -> None:
        """Apply ``name = value`` lines from a file.

        Blank lines and lines starting with ``#`` are skipped, as are lines without
        ``=`` and unknown names. Raises OSError if the file cannot be read.
        """
        with open(path, encoding="utf-8") as handle:
            for raw in handle:
                line = raw[:-1] if raw.endswith("\n") else raw
                if not line or line.startswith("#"):
                    continue
                name, sep, text = line.partition("=")
                if not sep:
                    continue
                flag = self._flags.get(name.strip(" \t"))
                if flag is not None:
                    flag.assign_text(text.strip(" \t"))

    def reset(self, name: str) -> None:
        """Restore one flag to its default value."""
        try:
            self._flags[name].reset()
        except KeyError:
            raise FlagError(f"no flag named {name!r}") from None

    def reset_all(self) -> None:
        """Restore every flag to its default value."""
        for flag in self._flags.values():
            flag.reset()

    def clear(self) -> None:
        """Remove every registered flag."""
        self._flags.clear()
"""Parsing of benchmark arguments given as single values or ranges."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

USIZE_MAX = 2**64 - 1
_NUMBER = re.compile(r"\+?[0-9]+")


class UsageError(Exception):
    """Raised when the command line is malformed; ``message`` may be ``None``."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "")
        self.message = message


@dataclass(frozen=True)
class ArgRange:
    """An inclusive range ``start..=limit`` walked in steps of ``step``."""

    start: int
    limit: int
    step: int = 1

    def is_single(self) -> bool:
        return min(self.start + self.step, USIZE_MAX) > self.limit

    def __iter__(self) -> Iterator[int]:
        current = self.start
        while current <= self.limit:
            yield current
            current = min(current + self.step, USIZE_MAX)


def _parse_num(name: str, value: str, whole: str) -> int:
    if _NUMBER.fullmatch(value) is None or int(value) > USIZE_MAX:
        raise UsageError(f"Invalid value for {name}: {whole}")
    return int(value)


def parse_one(name: str, value: str) -> ArgRange:
    """Parse ``value`` as ``n``, ``start:end`` or ``start:end:step``."""
    components = value.split(":")
    numbers = [_parse_num(name, component, value) for component in components]
    if len(numbers) == 1:
        return ArgRange(numbers[0], numbers[0], 1)
    if len(numbers) in (2, 3):
        start, end = numbers[0], numbers[1]
        if start > end:
            raise UsageError(f"Invalid range for {name}: {value}")
        step = numbers[2] if len(numbers) == 3 else 1
        return ArgRange(start, end, step)
    raise UsageError(f"Invalid value for {name}: {value}")


def parse(names: Sequence[str], argv: Sequence[str] | None = None) -> list[ArgRange]:
    """Parse one range per name from ``argv`` (default: ``sys.argv[1:]``)."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        raise UsageError(None)
    if len(args) != len(names):
        raise UsageError(
            f"Invalid number of arguments (expected {len(names)}, got {len(args)})"
        )
    return [parse_one(name, value) for name, value in zip(names, args)]


def usage(names: Sequence[str], prog: str) -> str:
    """Return the usage text for a program taking ``names`` arguments."""
    return (
        f"Usage: {prog} {' '.join(names)}\n"
        "Each argument can be a single value or a range in the form start:end or "
        "start:end:step"
    )
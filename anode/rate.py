"""Operation rates with unit-aware formatting."""

from __future__ import annotations

import re
from dataclasses import dataclass

_SPEC = re.compile(r"(#)?(\d*)")


@dataclass(frozen=True)
class Rate:
    """A rate in operations per second (Hz)."""

    hz: float

    def khz(self) -> float:
        return self.hz / 1_000.0

    def mhz(self) -> float:
        return self.hz / 1_000_000.0

    @classmethod
    def from_ops(cls, duration: float, ops: int) -> Rate:
        """Return the rate of ``ops`` operations over ``duration`` seconds."""
        return cls(ops / duration)

    @classmethod
    def maybe(cls, duration: float, ops: int | None) -> Rate | None:
        """Like :meth:`from_ops`, passing ``None`` through."""
        return None if ops is None else cls.from_ops(duration, ops)

    def __format__(self, spec: str) -> str:
        """Format with an automatic unit; ``#`` forces kHz, digits set a right-aligned width."""
        match = _SPEC.fullmatch(spec)
        if match is None:
            raise ValueError(f"invalid format specifier for Rate: {spec!r}")
        alternate, width = match.groups()
        if alternate:
            text = f"{self.khz():.3f} kHz"
        elif self.hz > 1_000_000.0:
            text = f"{self.mhz():.3f} MHz"
        elif self.hz > 1_000.0:
            text = f"{self.khz():.3f} kHz"
        else:
            text = f"{self.hz:.3f} Hz"
        return text.rjust(int(width)) if width else text

    def __str__(self) -> str:
        return format(self, "")
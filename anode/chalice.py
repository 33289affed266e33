"""A container that becomes poisoned when a mutation is interrupted by an error."""

from __future__ import annotations

from types import TracebackType
from typing import Generic, TypeVar

T = TypeVar("T")


class PoisonedError(Exception):
    """Raised when borrowing from a poisoned chalice; ``inner`` holds what was borrowed."""

    def __init__(self, inner: object) -> None:
        super().__init__("chalice is poisoned")
        self.inner = inner


class MutGuard(Generic[T]):
    """Mutable access to a chalice's value.

    Used as a context manager, an exception escaping the block poisons the
    chalice.
    """

    __slots__ = ("_chalice",)

    def __init__(self, chalice: Chalice[T]) -> None:
        self._chalice = chalice

    @property
    def value(self) -> T:
        return self._chalice._value

    @value.setter
    def value(self, value: T) -> None:
        self._chalice._value = value

    def is_poisoned(self) -> bool:
        return self._chalice.is_poisoned()

    def clear_poison(self) -> None:
        self._chalice.clear_poison()

    def __enter__(self) -> MutGuard[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc_type is not None:
            self._chalice._poisoned = True
        return False


class Chalice(Generic[T]):
    """Holds a value and a poison flag set by failed mutations."""

    __slots__ = ("_value", "_poisoned")

    def __init__(self, value: T) -> None:
        self._value = value
        self._poisoned = False

    def is_poisoned(self) -> bool:
        return self._poisoned

    def clear_poison(self) -> None:
        self._poisoned = False

    def borrow(self, ignore_poison: bool = False) -> T:
        """Return the value, raising :class:`PoisonedError` if poisoned."""
        if self._poisoned and not ignore_poison:
            raise PoisonedError(self._value)
        return self._value

    def borrow_mut(self, ignore_poison: bool = False) -> MutGuard[T]:
        """Return a mutable guard, raising :class:`PoisonedError` if poisoned."""
        guard = MutGuard(self)
        if self._poisoned and not ignore_poison:
            raise PoisonedError(guard)
        return guard

    def __repr__(self) -> str:
        return f"Chalice(value={self._value!r}, poisoned={self._poisoned})"
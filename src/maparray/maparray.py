from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from itertools import count, islice
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator
    from typing import Any

T = TypeVar("T")

logger = logging.getLogger(__name__)


class InvalidIndexError(ValueError):
    """Raised when a start position is not a non-negative integer."""


def is_index(value: object) -> bool:
    """Return True if value can be used as a position.

    A position is a non-negative ``int``. ``bool`` is rejected even though it
    subclasses ``int``.
    """
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class Found(Generic[T]):
    """Successful search outcome carrying the matched index or value."""

    __slots__ = ("value",)

    value: T

    def __init__(self, value: T) -> None:
        object.__setattr__(self, "value", value)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Found is immutable")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Found):
            return NotImplemented
        return self.value == other.value

    def __hash__(self) -> int:
        return hash((Found, self.value))

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Found({self.value!r})"

    def __reduce__(self) -> tuple[type[Found[T]], tuple[T]]:
        return (self.__class__, (self.value,))


class NotFound:
    """Failed search outcome. Use the ``NOT_FOUND`` singleton."""

    __slots__ = ()
    _instance: NotFound | None = None

    def __new__(cls) -> NotFound:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __reduce__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = NotFound()

# Sentinel for absent keys during a probe; values may legitimately be None
_MISSING = object()


def _is_truthy(result: object) -> bool:
    """Coerce a finder result: only False and None count as no match."""
    return result is not False and result is not None


def _accepts(func: Callable[..., Any], nargs: int) -> bool:
    try:
        inspect.signature(func).bind(*([None] * nargs))
    except TypeError:
        return False
    return True


def _wants_index(func: object, arity: int, role: str) -> bool:
    """Decide whether a callback takes the position as an extra argument.

    The short form wins: the index is only passed to callables that cannot be
    called with ``arity`` arguments but can with one more.

    Args:
        func: Callback supplied by the caller
        arity: Number of arguments the callback takes without the index
        role: Callback name used in error messages

    Returns:
        True if the callback should be called with the index appended

    Raises:
        TypeError: If func is not callable or accepts neither shape
    """
    if not callable(func):
        raise TypeError(f"{role} must be callable")

    try:
        inspect.signature(func)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures get the short form
        return False

    if _accepts(func, arity):
        return False
    if _accepts(func, arity + 1):
        return True
    raise TypeError(f"{role} must accept {arity} or {arity + 1} positional arguments")


def _iter_up(start: int) -> Iterator[int]:
    return count(start, 1)


def _iter_down(start: int) -> Iterator[int]:
    return count(start, -1)


class maparray(Mapping[int, T]):  # noqa: N801
    """An immutable mapping of positions to values with array-like operations.

    Keys are expected to be exactly ``0..len-1``. Construction through
    :meth:`new`, :meth:`append` and :meth:`prepend` keeps that invariant; reads
    trust it and stop at the first missing position.

    Snapshots share append-only storage. ``_keys`` lists keys in insertion
    order and ``_entries`` maps each key to ``(ordinal, value)``; a snapshot
    owns the first ``_size`` keys, so entries added later by another snapshot
    are invisible to it.
    """

    __slots__ = ("_entries", "_keys", "_size")

    _keys: list[int]
    _entries: dict[int, tuple[int, T]]
    _size: int

    def __init__(self, data: Mapping[int, T] | Iterable[T] | None = None) -> None:
        """Initialize a maparray from data.

        Args:
            data: Initial data (optional, defaults to empty)
                  - None: creates empty maparray
                  - mapping: keys must be non-negative integers, items copied as-is
                  - iterable: elements populate positions 0, 1, 2, etc.

        Raises:
            TypeError: If mapping keys are not integers
            ValueError: If mapping keys are negative
        """
        self._keys = []
        self._entries = {}
        self._size = 0

        if data is None:
            return

        if isinstance(data, Mapping):
            for key in data:
                if not isinstance(key, int) or isinstance(key, bool):
                    raise TypeError("mapping keys must be integers")
                if key < 0:
                    raise ValueError("mapping keys must be non-negative")
            items: Iterable[tuple[int, T]] = list(data.items())
        else:
            items = enumerate(data)

        for ordinal, (key, value) in enumerate(items):
            self._keys.append(key)
            self._entries[key] = (ordinal, value)
        self._size = len(self._keys)

    @classmethod
    def new(cls, iterable: Iterable[T]) -> maparray[T]:
        """Build a maparray by appending each element of iterable in order."""
        return cls(iter(iterable))

    @classmethod
    def _from_storage(cls, keys: list[int], entries: dict[int, tuple[int, T]], size: int) -> maparray[T]:
        # Skips key validation; callers build storage from already-valid keys
        instance = cls.__new__(cls)
        instance._keys = keys
        instance._entries = entries
        instance._size = size
        return instance

    # ---------------------
    # Mapping protocol
    # ---------------------
    def __getitem__(self, key: int) -> T:
        value = self._probe(key)
        if value is _MISSING:
            raise KeyError(key)
        return value  # type: ignore[return-value]

    def __iter__(self) -> Iterator[int]:
        # List iterators tolerate growth from sibling snapshots
        return islice(self._keys, self._size)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: object) -> bool:
        return self._probe(key) is not _MISSING  # type: ignore[arg-type]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, maparray):
            return self._size == other._size and self._as_dict() == other._as_dict()
        if isinstance(other, Mapping):
            return self._as_dict() == dict(other.items())
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._as_dict()!r})"

    def __copy__(self) -> maparray[T]:
        # Snapshots are never mutated, sharing is safe
        return self

    def __reduce__(self) -> tuple[type[maparray[T]], tuple[dict[int, T]]]:
        return (self.__class__, (self._as_dict(),))

    # ---------------------
    # Construction
    # ---------------------
    def append(self, item: T) -> maparray[T]:
        """Return a new maparray with item placed after the last position.

        The receiver is left unchanged. When the receiver is the newest
        snapshot of its storage the item is added to the shared storage, so
        repeated appends are O(1) amortized. Appending twice to the same
        snapshot copies its entries for the second branch.

        Args:
            item: Value to append

        Returns:
            New maparray one element longer
        """
        key = self._size
        entry = (self._size, item)
        # setdefault claims the slot atomically; losing the race means copying
        if len(self._keys) == self._size and self._entries.setdefault(key, entry) is entry:
            self._keys.append(key)
            return self._from_storage(self._keys, self._entries, self._size + 1)

        keys = self._keys[: self._size]
        entries = {k: self._entries[k] for k in keys}
        existing = entries.get(key)
        if existing is not None:
            # Key already present behind a gap: replace in place
            entries[key] = (existing[0], item)
            return self._from_storage(keys, entries, self._size)
        keys.append(key)
        entries[key] = entry
        return self._from_storage(keys, entries, self._size + 1)

    def prepend(self, item: T) -> maparray[T]:
        """Return a new maparray with item at position 0.

        This is an expensive operation: every existing key is shifted up by one,
        so the whole map is rebuilt. Prefer :meth:`append` for growing
        sequences and reverse at the end if needed.

        Args:
            item: Value to place at position 0

        Returns:
            New maparray one element longer
        """
        logger.debug("rebuilding maparray of %d entries for prepend", self._size)
        keys = [0]
        entries = {0: (0, item)}
        for ordinal, key in enumerate(islice(self._keys, self._size), start=1):
            keys.append(key + 1)
            entries[key + 1] = (ordinal, self._entries[key][1])
        return self._from_storage(keys, entries, self._size + 1)

    # ---------------------
    # Size
    # ---------------------
    def len(self) -> int:
        """Return the number of stored entries."""
        return self._size

    def max_index(self) -> int:
        """Return the last position, or -1 for an empty maparray."""
        return self._size - 1

    # ---------------------
    # Search
    # ---------------------
    def _scan(self, positions: Iterator[int], finder: Callable[[T], object]) -> Found[int] | NotFound:
        for i in positions:
            value = self._probe(i)
            if value is _MISSING:
                self._log_gap(i, "search")
                return NOT_FOUND
            if _is_truthy(finder(value)):  # type: ignore[arg-type]
                return Found(i)
        # count() never runs out
        raise AssertionError("unreachable")

    def seek_index_up(self, finder: Callable[[T], object], start: int = 0) -> Found[int] | NotFound:
        """Find the first matching position scanning upward from start.

        The scan stops at the first missing position, so nothing past a gap
        or the end of the map is examined.

        Args:
            finder: Predicate; any result other than False or None is a match
            start: First position checked (default 0)

        Returns:
            ``Found(index)`` for the first match, ``NOT_FOUND`` otherwise

        Raises:
            InvalidIndexError: If start is not a non-negative integer
        """
        if not is_index(start):
            raise InvalidIndexError(f"start must be a non-negative integer, got {start!r}")
        return self._scan(_iter_up(start), finder)

    def seek_index_down(
        self, finder: Callable[[T], object], start: int | None = None
    ) -> Found[int] | NotFound:
        """Find the first matching position scanning downward from start.

        A start beyond the last position is not clamped: the first probe misses
        and the result is ``NOT_FOUND``.

        Args:
            finder: Predicate; any result other than False or None is a match
            start: First position checked (default None, meaning the last one)

        Returns:
            ``Found(index)`` for the first match, ``NOT_FOUND`` otherwise

        Raises:
            InvalidIndexError: If start is given and is not a non-negative integer
        """
        if start is None:
            start = self.max_index()
        elif not is_index(start):
            raise InvalidIndexError(f"start must be a non-negative integer, got {start!r}")
        return self._scan(_iter_down(start), finder)

    def seek_up(self, finder: Callable[[T], object], start: int = 0) -> Found[T] | NotFound:
        """Like :meth:`seek_index_up` but return the matched value."""
        found = self.seek_index_up(finder, start)
        if not found:
            return NOT_FOUND
        return Found(self[found.value])  # type: ignore[union-attr]

    def seek_down(self, finder: Callable[[T], object], start: int | None = None) -> Found[T] | NotFound:
        """Like :meth:`seek_index_down` but return the matched value."""
        found = self.seek_index_down(finder, start)
        if not found:
            return NOT_FOUND
        return Found(self[found.value])  # type: ignore[union-attr]

    # ---------------------
    # Fold
    # ---------------------
    def _fold(self, positions: Iterator[int], initial: Any, reducer: Callable[..., Any]) -> Any:
        with_index = _wants_index(reducer, 2, "reducer")
        acc = initial
        for i in positions:
            value = self._probe(i)
            if value is _MISSING:
                self._log_gap(i, "fold")
                return acc
            acc = reducer(value, acc, i) if with_index else reducer(value, acc)
        raise AssertionError("unreachable")

    def reduce(self, initial: Any, reducer: Callable[..., Any]) -> Any:
        """Fold values from the first position to the last.

        Args:
            initial: Starting accumulator
            reducer: Called as ``reducer(value, acc)`` or ``reducer(value, acc, index)``

        Returns:
            Final accumulator; folding stops early at the first missing position

        Raises:
            TypeError: If reducer is not callable or takes neither 2 nor 3 arguments
        """
        return self._fold(_iter_up(0), initial, reducer)

    def reverse_reduce(self, initial: Any, reducer: Callable[..., Any]) -> Any:
        """Fold values from the last position to the first.

        See :meth:`reduce` for the reducer contract.
        """
        return self._fold(_iter_down(self.max_index()), initial, reducer)

    # ---------------------
    # Mapping over values
    # ---------------------
    def _map(self, positions: Iterator[int], mapper: Callable[..., Any]) -> list[Any]:
        with_index = _wants_index(mapper, 1, "mapper")
        result = []
        # Take exactly len positions rather than stopping at a gap
        for i in islice(positions, self._size):
            value = self[i]
            result.append(mapper(value, i) if with_index else mapper(value))
        return result

    def map(self, mapper: Callable[..., Any]) -> list[Any]:
        """Return mapped values in ascending position order.

        Args:
            mapper: Called as ``mapper(value)`` or ``mapper(value, index)``

        Returns:
            List of exactly ``len(self)`` results

        Raises:
            TypeError: If mapper is not callable or takes neither 1 nor 2 arguments
            KeyError: If a position below ``len(self)`` is missing
        """
        return self._map(_iter_up(0), mapper)

    def reverse_map(self, mapper: Callable[..., Any]) -> list[Any]:
        """Return mapped values in descending position order.

        See :meth:`map` for the mapper contract.
        """
        return self._map(_iter_down(self.max_index()), mapper)

    def to_list(self) -> list[T]:
        """Return the values as a list in position order."""
        return self.map(lambda value: value)

    def to_reversed_list(self) -> list[T]:
        """Return the values as a list in reverse position order."""
        return self.reverse_map(lambda value: value)

    # ---------------------
    # Slicing
    # ---------------------
    def slice(self, first: int, last: int) -> list[T]:
        """Return values at positions first through last, inclusive.

        Missing and out-of-range positions are skipped rather than ending the
        walk. When first is greater than last the positions are walked
        downward.

        Args:
            first: First position probed
            last: Last position probed (inclusive)

        Returns:
            List of the values found, possibly empty

        Raises:
            TypeError: If first or last is not an integer
        """
        for bound in (first, last):
            if not isinstance(bound, int) or isinstance(bound, bool):
                raise TypeError("slice bounds must be integers")

        step = 1 if first <= last else -1
        values = (self._probe(i) for i in range(first, last + step, step))
        return [value for value in values if value is not _MISSING]  # type: ignore[misc]

    # ---------------------
    # Helpers
    # ---------------------
    def _log_gap(self, position: int, operation: str) -> None:
        # Missing keys below len mean the dense invariant is broken
        if 0 <= position < self._size:
            logger.debug("%s halted at missing position %d of %d", operation, position, self._size)

    def _probe(self, key: int) -> T | object:
        """Return the value at key, or ``_MISSING`` if this snapshot lacks it."""
        entry = self._entries.get(key)
        if entry is None or entry[0] >= self._size:
            return _MISSING
        return entry[1]

    def _as_dict(self) -> dict[int, T]:
        entries = self._entries
        return {key: entries[key][1] for key in islice(self._keys, self._size)}

"""Array storage, array views and callable values."""

from __future__ import annotations

from typing import Any, Iterable, Iterator


class ArrayData:
    """The backing storage of an array, owned by a value store."""

    def __init__(self, store: ValueStore, items: Iterable[Any] = ()) -> None:
        self._store = store
        self.items: list[Any] = list(items)

    def __len__(self) -> int:
        return len(self.items)

    def add(self, item: Any) -> None:
        self.items.append(item)

    @property
    def val_store(self) -> ValueStore:
        return self._store


class ArrayWrapper:
    """A view of a contiguous range of an array's storage."""

    def __init__(self, data: ArrayData, offset: int = 0, count: int | None = None) -> None:
        if offset < 0 or offset > len(data):
            raise ValueError(f"offset {offset} out of range for array of size {len(data)}")
        if count is None:
            count = len(data) - offset
        if count < 0 or offset + count > len(data):
            raise ValueError(
                f"range [{offset}, {offset + count}) exceeds array of size {len(data)}"
            )
        self.data = data
        self.offset = offset
        self.count = count

    @property
    def size(self) -> int:
        return self.count

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[Any]:
        return iter(self.data.items[self.offset : self.offset + self.count])

    def __reversed__(self) -> Iterator[Any]:
        return reversed(self.data.items[self.offset : self.offset + self.count])

    def __getitem__(self, idx: int) -> Any:
        if not -self.count <= idx < self.count:
            raise IndexError("array index out of range")
        if idx < 0:
            idx += self.count
        return self.data.items[self.offset + idx]

    @property
    def id(self) -> int:
        """Identity of this view; distinct views have distinct ids."""
        return id(self)

    @property
    def val_store(self) -> ValueStore:
        return self.data.val_store


class FunctionType:
    """A callable value referring to an IR function."""

    __slots__ = ("func",)

    def __init__(self, func: Any) -> None:
        self.func = func

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FunctionType):
            return NotImplemented
        return self.func is other.func

    def __hash__(self) -> int:
        return id(self.func)

    def __repr__(self) -> str:
        return f"FunctionType({self.func!r})"


class ValueStore:
    """Allocates array storage and views of it."""

    def allocate_array(self, size: int = 0) -> ArrayData:
        """Create empty storage; ``size`` is only a capacity hint."""
        if size < 0:
            raise ValueError("array size cannot be negative")
        return ArrayData(self)

    def wrap(self, arr: ArrayData, offset: int = 0, size: int | None = None) -> ArrayWrapper:
        """Create a view of ``arr`` starting at ``offset``; by default up to its end."""
        return ArrayWrapper(arr, offset, size)

    def rewrap(self, wrapper: ArrayWrapper, offset: int, size: int) -> ArrayWrapper:
        """Return ``wrapper`` if it already covers the range, else a new view."""
        if wrapper.offset == offset and wrapper.size == size:
            return wrapper
        return self.wrap(wrapper.data, offset, size)
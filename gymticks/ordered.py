from typing import Callable, Generic, Iterable, Iterator, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class OrderedMap(Generic[K, V]):
    """Key-unique mapping whose enumeration order is explicit.

    Order is insertion order until `sorted` produces a new map with a
    different one. Lookup goes through a dict; order lives in a list.
    """

    def __init__(self, items: Iterable[tuple[K, V]] = ()) -> None:
        self._values: dict[K, V] = {}
        self._order: list[K] = []
        for key, value in items:
            self.set(key, value)

    def set(self, key: K, value: V) -> None:
        if key not in self._values:
            self._order.append(key)
        self._values[key] = value

    def get(self, key: K) -> V | None:
        return self._values.get(key)

    def keys(self) -> list[K]:
        return list(self._order)

    def values(self) -> list[V]:
        return [self._values[key] for key in self._order]

    def items(self) -> Iterator[tuple[K, V]]:
        for key in self._order:
            yield key, self._values[key]

    def copy(self) -> "OrderedMap[K, V]":
        return OrderedMap(self.items())

    def sorted(self, key: Callable[[V], object]) -> "OrderedMap[K, V]":
        # sorted() is stable: equal keys keep their current relative order.
        return OrderedMap(sorted(self.items(), key=lambda kv: key(kv[1])))

    def __getitem__(self, key: K) -> V:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._order))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedMap):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def __repr__(self) -> str:
        return f"OrderedMap({list(self.items())!r})"

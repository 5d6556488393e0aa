"""Display ordering for named entities (countries, pickers, dropdowns).

A fixed list of priority names is pinned to the top in its own order; the
remaining entities follow German alphabetical order. Collation uses the
Unicode Collation Algorithm (DUCET) via `pyuca`, which agrees with German
dictionary order (DIN 5007-1): umlauts sort with their base letter, so "Äpfel"
lands among the A's and "Österreich" among the O's rather than after "Z".

The sort is stable, so entities with equal names keep their input order, and
re-ordering an already ordered list is a no-op.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Final, Iterable, Mapping, Sequence, TypeVar

from pyuca import Collator


T = TypeVar("T")

GERMAN_SPEAKING_PRIORITY: Final[tuple[str, ...]] = ("Deutschland", "Österreich", "Schweiz")


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # Parsing the DUCET table is the expensive part; do it once per process.
    return Collator()


def german_sort_key(text: str) -> tuple[int, ...]:
    return tuple(_collator().sort_key(text))


def entity_name(entity: Any) -> str:
    """`name` of a mapping or an object; missing/None names read as ''."""
    if isinstance(entity, Mapping):
        name = entity.get("name")
    else:
        name = getattr(entity, "name", None)
    return "" if name is None else str(name)


def order_with_priority(entities: Iterable[T], priority_names: Sequence[str]) -> list[T]:
    """Return a new list: priority names first (in priority order), rest collated.

    Empty names never match a priority entry. If a priority name is listed
    twice, its first position wins.
    """
    rank: dict[str, int] = {}
    for i, name in enumerate(priority_names):
        if name and name not in rank:
            rank[name] = i

    def _key(entity: T) -> tuple[int, int, tuple[int, ...]]:
        name = entity_name(entity)
        idx = rank.get(name)
        if idx is not None:
            return (0, idx, ())
        return (1, 0, german_sort_key(name))

    return sorted(entities, key=_key)


def sort_countries(countries: Iterable[T]) -> list[T]:
    """Deutschland, Österreich, Schweiz first; everything else alphabetically."""
    return order_with_priority(countries, GERMAN_SPEAKING_PRIORITY)

from dataclasses import dataclass, field
from itertools import groupby
from typing import Any, Iterator

from gymticks.ordered import OrderedMap


@dataclass(frozen=True)
class TaxonomyEntry:
    group: str
    label: str
    sort: int


Catalog = OrderedMap[str, TaxonomyEntry]


@dataclass(frozen=True)
class Taxonomy:
    """The three classification catalogs a ledger is sorted and shown by.

    Catalog order is the order entries are offered in pickers; `sort` is the
    rank used by the sort policy.
    """

    colors: Catalog = field(default_factory=lambda: default_colors())
    sections: Catalog = field(default_factory=lambda: default_sections())
    grades: Catalog = field(default_factory=lambda: default_grades())


def _catalog(rows: list[tuple[str, str, str]]) -> Catalog:
    return OrderedMap(
        (key, TaxonomyEntry(group=group, label=label, sort=i)) for i, (key, group, label) in enumerate(rows, start=1)
    )


def default_colors() -> Catalog:
    names = ["red", "orange", "yellow", "green", "blue", "purple", "pink", "brown", "white", "black"]
    return _catalog([(name, "A", name) for name in names])


def default_sections() -> Catalog:
    rows = [(f"AB{n}", "A", f"AB{n}") for n in range(1, 9)]
    rows[1] = ("AB2", "A", "MAP")
    rows.extend((key, "B", key) for key in ["SLB", "LWV", "CAN", "RWV", "ROF", "GLB", "VRT"])
    return _catalog(rows)


def default_grades() -> Catalog:
    ropes = ["5", "6", "7", "8", "9", "10-", "10", "10+", "11-", "11", "11+", "12-", "12", "12+"]
    boulders = ["V0-", "V0", "V0+", "V1", "V2", "V3", "V4", "V5", "V6", "V7"]
    return _catalog([(g, "A", g) for g in ropes] + [(g, "B", g) for g in boulders])


def default_taxonomy() -> Taxonomy:
    return Taxonomy()


def lookup(catalog: Catalog, key: str) -> TaxonomyEntry | None:
    return catalog.get(key)


def rank(catalog: Catalog, key: str) -> int:
    # Keys dropped from a catalog still sort, ahead of everything ranked.
    entry = catalog.get(key)
    return entry.sort if entry else 0


def group(catalog: Catalog, key: str) -> str | None:
    entry = catalog.get(key)
    return entry.group if entry else None


def default_choice(catalog: Catalog) -> str | None:
    return next(iter(catalog), None)


def grouped(catalog: Catalog) -> Iterator[tuple[str, list[str]]]:
    for name, rows in groupby(catalog.items(), key=lambda kv: kv[1].group):
        yield name, [key for key, _ in rows]


def catalog_to_dict(catalog: Catalog) -> dict[str, dict[str, Any]]:
    return {key: {"group": e.group, "label": e.label, "sort": e.sort} for key, e in catalog.items()}

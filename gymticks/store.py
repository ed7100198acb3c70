import json
import logging
import threading
from pathlib import Path
from typing import Any

from gymticks.models import INT64_MAX, INT64_MIN, Route, Snapshot, Tick, TickKind
from gymticks.ordered import OrderedMap
from gymticks.taxonomy import Catalog, Taxonomy, TaxonomyEntry, catalog_to_dict

logger = logging.getLogger("gymticks.store")

FILE_LOCK = threading.Lock()

_KIND_NAMES = {"Ascent": TickKind.ASCENT, "Attempt": TickKind.ATTEMPT}


class SnapshotError(ValueError):
    """Snapshot data that cannot be decoded into a ledger."""


class StoreWriteError(RuntimeError):
    """The snapshot could not be written; in-memory state is unaffected."""


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    return {
        "routes": {
            route_id: {
                "title": route.title,
                "color": route.color,
                "section": route.section,
                "grade": route.grade,
                "ticks": [{"kind": int(t.kind), "timestamp": t.timestamp} for t in route.ticks],
                "retired": route.retired,
            }
            for route_id, route in snapshot.routes.items()
        },
        "settings": {
            "colors": catalog_to_dict(snapshot.taxonomy.colors),
            "sections": catalog_to_dict(snapshot.taxonomy.sections),
            "grades": catalog_to_dict(snapshot.taxonomy.grades),
        },
    }


def _int64(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotError(f"{what} must be an integer.")
    if not INT64_MIN <= value <= INT64_MAX:
        raise SnapshotError(f"{what} is outside the 64-bit range.")
    return value


def _text(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise SnapshotError(f"{key} must be a string.")
    return value


def _tick_from_dict(raw: Any) -> Tick:
    if not isinstance(raw, dict):
        raise SnapshotError("tick must be an object.")
    # Older snapshots call the field "typ" and spell kinds by name.
    kind = raw.get("kind", raw.get("typ"))
    if isinstance(kind, str) and kind in _KIND_NAMES:
        kind = _KIND_NAMES[kind]
    elif isinstance(kind, int) and not isinstance(kind, bool) and kind in (0, 1):
        kind = TickKind(kind)
    else:
        raise SnapshotError(f"unknown tick kind {kind!r}.")
    return Tick(kind=kind, timestamp=_int64(raw.get("timestamp"), "timestamp"))


def _route_from_dict(raw: Any) -> Route:
    if not isinstance(raw, dict):
        raise SnapshotError("route must be an object.")
    ticks = raw.get("ticks", [])
    if not isinstance(ticks, list):
        raise SnapshotError("ticks must be a list.")
    retired = raw.get("retired", False)
    if not isinstance(retired, bool):
        raise SnapshotError("retired must be a boolean.")
    return Route(
        title=_text(raw, "title"),
        color=_text(raw, "color"),
        section=_text(raw, "section"),
        grade=_text(raw, "grade"),
        ticks=tuple(_tick_from_dict(t) for t in ticks),
        retired=retired,
    )


def _catalog_from_dict(raw: Any, name: str) -> Catalog:
    if not isinstance(raw, dict):
        raise SnapshotError(f"settings.{name} must be an object.")
    catalog: Catalog = OrderedMap()
    for key, entry in raw.items():
        if not isinstance(entry, dict):
            raise SnapshotError(f"settings.{name}.{key} must be an object.")
        sort = _int64(entry.get("sort"), f"settings.{name}.{key}.sort")
        catalog.set(key, TaxonomyEntry(group=_text(entry, "group"), label=_text(entry, "label"), sort=sort))
    return catalog


def snapshot_from_dict(data: Any) -> Snapshot:
    if not isinstance(data, dict):
        raise SnapshotError("snapshot must be an object.")
    routes = data.get("routes")
    if not isinstance(routes, dict):
        raise SnapshotError("routes must be an object.")

    settings = data.get("settings")
    if settings is None:
        taxonomy = Taxonomy()
    elif isinstance(settings, dict):
        taxonomy = Taxonomy(
            colors=_catalog_from_dict(settings.get("colors"), "colors"),
            sections=_catalog_from_dict(settings.get("sections"), "sections"),
            grades=_catalog_from_dict(settings.get("grades"), "grades"),
        )
    else:
        raise SnapshotError("settings must be an object.")

    return Snapshot(
        routes=OrderedMap((str(route_id), _route_from_dict(raw)) for route_id, raw in routes.items()),
        taxonomy=taxonomy,
    )


def export_json(snapshot: Snapshot) -> str:
    return json.dumps(snapshot_to_dict(snapshot))


def import_json(text: str) -> Snapshot:
    try:
        data = json.loads(text)
    except (ValueError, TypeError, RecursionError) as err:
        raise SnapshotError(f"invalid JSON: {err}") from err
    return snapshot_from_dict(data)


class SnapshotStore:
    """Whole-snapshot persistence to a single JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Snapshot:
        with FILE_LOCK:
            if not self.path.exists():
                logger.info("No snapshot at %s, starting from defaults", self.path)
                return Snapshot()
            try:
                text = self.path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as err:
                logger.warning("Could not read snapshot %s (%s), starting from defaults", self.path, err)
                return Snapshot()
        try:
            return import_json(text)
        except SnapshotError as err:
            logger.warning("Discarding unreadable snapshot %s: %s", self.path, err)
            return Snapshot()

    def save(self, snapshot: Snapshot) -> None:
        payload = json.dumps(snapshot_to_dict(snapshot), indent=2)
        with FILE_LOCK:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(payload, encoding="utf-8")
            except OSError as err:
                logger.error("Failed to save snapshot to %s: %s", self.path, err)
                raise StoreWriteError(str(err)) from err

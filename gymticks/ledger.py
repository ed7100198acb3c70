"""Route ledger commands and the reducer that applies them.

`reduce` never mutates its input. A command that names a route the ledger
does not hold returns the snapshot it was given, unchanged.
"""

import logging
from dataclasses import dataclass, field, replace
from itertools import groupby
from typing import Union

from gymticks.models import Route, RouteId, Snapshot, Tick, TickKind, new_route_id
from gymticks.ordered import OrderedMap
from gymticks.sorting import sort_routes
from gymticks.store import SnapshotError, import_json

logger = logging.getLogger("gymticks.ledger")


@dataclass(frozen=True)
class CreateRoute:
    title: str
    color: str
    section: str
    grade: str
    timestamp: int = 0
    initial_tick: TickKind | None = None
    route_id: RouteId = field(default_factory=new_route_id)


@dataclass(frozen=True)
class EditRoute:
    route_id: RouteId
    title: str
    color: str
    section: str
    grade: str


@dataclass(frozen=True)
class RetireRoute:
    route_id: RouteId


@dataclass(frozen=True)
class RecordTick:
    route_id: RouteId
    kind: TickKind
    timestamp: int


@dataclass(frozen=True)
class ImportSnapshot:
    text: str


Command = Union[CreateRoute, EditRoute, RetireRoute, RecordTick, ImportSnapshot]


def _with_route(snapshot: Snapshot, route_id: RouteId, route: Route) -> OrderedMap[RouteId, Route]:
    routes = snapshot.routes.copy()
    routes.set(route_id, route)
    return routes


def _append_tick(route: Route, kind: TickKind, timestamp: int) -> Route:
    return replace(route, ticks=route.ticks + (Tick(kind=kind, timestamp=timestamp),))


def reduce(snapshot: Snapshot, command: Command) -> Snapshot:
    if isinstance(command, CreateRoute):
        route = Route(title=command.title, color=command.color, section=command.section, grade=command.grade)
        routes = sort_routes(_with_route(snapshot, command.route_id, route), snapshot.taxonomy)
        if command.initial_tick is not None:
            routes.set(command.route_id, _append_tick(route, command.initial_tick, command.timestamp))
        return replace(snapshot, routes=routes)

    if isinstance(command, ImportSnapshot):
        try:
            return import_json(command.text)
        except SnapshotError as err:
            logger.warning("Ignoring import: %s", err)
            return snapshot

    if not isinstance(command, (EditRoute, RetireRoute, RecordTick)):
        raise TypeError(f"Unknown command: {command!r}")

    route = snapshot.routes.get(command.route_id)
    if route is None:
        logger.debug("Ignoring %s for unknown route %s", type(command).__name__, command.route_id)
        return snapshot

    if isinstance(command, EditRoute):
        edited = replace(route, title=command.title, color=command.color, section=command.section, grade=command.grade)
        return replace(snapshot, routes=sort_routes(_with_route(snapshot, command.route_id, edited), snapshot.taxonomy))

    if isinstance(command, RetireRoute):
        return replace(snapshot, routes=_with_route(snapshot, command.route_id, replace(route, retired=True)))

    ticked = _append_tick(route, command.kind, command.timestamp)
    return replace(snapshot, routes=_with_route(snapshot, command.route_id, ticked))


def iterate_all(snapshot: Snapshot) -> list[tuple[RouteId, Route]]:
    return list(snapshot.routes.items())


def iterate_active(snapshot: Snapshot) -> list[tuple[str, list[tuple[RouteId, Route]]]]:
    """Non-retired routes in ledger order, split into runs sharing a section."""
    active = [(route_id, route) for route_id, route in snapshot.routes.items() if not route.retired]
    return [(section, list(rows)) for section, rows in groupby(active, key=lambda row: row[1].section)]

from dataclasses import dataclass, field
from enum import IntEnum
from uuid import uuid4

from gymticks.ordered import OrderedMap
from gymticks.taxonomy import Taxonomy

RouteId = str

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class TickKind(IntEnum):
    ASCENT = 0
    ATTEMPT = 1


@dataclass(frozen=True)
class Tick:
    kind: TickKind
    timestamp: int


@dataclass(frozen=True)
class Route:
    title: str
    color: str
    section: str
    grade: str
    ticks: tuple[Tick, ...] = ()
    retired: bool = False


@dataclass(frozen=True)
class Snapshot:
    routes: OrderedMap[RouteId, Route] = field(default_factory=OrderedMap)
    taxonomy: Taxonomy = field(default_factory=Taxonomy)


def new_route_id() -> RouteId:
    return str(uuid4())

import threading
import time
from typing import Callable

from gymticks.ledger import Command, CreateRoute, EditRoute, ImportSnapshot, RecordTick, RetireRoute, reduce
from gymticks.models import Route, RouteId, Snapshot, TickKind
from gymticks.store import SnapshotStore, export_json


class Dispatcher:
    """Owns the live snapshot and applies commands to it one at a time.

    Every command is followed by a save, even when it turned out to be a
    no-op. A failed save leaves the new in-memory snapshot in place and
    raises `StoreWriteError` to the caller.
    """

    def __init__(self, store: SnapshotStore, clock: Callable[[], float] = time.time) -> None:
        self.store = store
        self.clock = clock
        self._lock = threading.Lock()
        self._snapshot = store.load()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def now(self) -> int:
        return int(self.clock())

    def _apply(self, command: Command) -> tuple[Snapshot, Snapshot]:
        with self._lock:
            before = self._snapshot
            after = self._snapshot = reduce(before, command)
            self.store.save(after)
        return before, after

    def dispatch(self, command: Command) -> bool:
        """Apply `command`; returns False when it changed nothing."""
        before, after = self._apply(command)
        return after is not before

    def create_route(
        self, title: str, color: str, section: str, grade: str, initial_tick: TickKind | None = None
    ) -> tuple[RouteId, Route]:
        """Create a route; returns its id and the route as this command left it."""
        command = CreateRoute(
            title=title, color=color, section=section, grade=grade, timestamp=self.now(), initial_tick=initial_tick
        )
        _, after = self._apply(command)
        return command.route_id, after.routes[command.route_id]

    def edit_route(self, route_id: RouteId, title: str, color: str, section: str, grade: str) -> bool:
        return self.dispatch(EditRoute(route_id=route_id, title=title, color=color, section=section, grade=grade))

    def retire_route(self, route_id: RouteId) -> bool:
        return self.dispatch(RetireRoute(route_id=route_id))

    def record_tick(self, route_id: RouteId, kind: TickKind) -> bool:
        return self.dispatch(RecordTick(route_id=route_id, kind=kind, timestamp=self.now()))

    def import_text(self, text: str) -> bool:
        return self.dispatch(ImportSnapshot(text=text))

    def export_text(self) -> str:
        return export_json(self._snapshot)

import os
from pathlib import Path
from typing import Any, Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import Response

from gymticks.dispatcher import Dispatcher
from gymticks.ledger import iterate_active, iterate_all
from gymticks.models import Route, RouteId, TickKind
from gymticks.stats import aggregate, local_midnight, route_stats
from gymticks.store import SnapshotStore, StoreWriteError
from gymticks.taxonomy import catalog_to_dict, default_choice, grouped

load_dotenv()

app = FastAPI()

DATA_FILE = Path(os.getenv("GYMTICKS_DATA_FILE", "data/gymticks.json"))
TICK_KINDS = {
    "ascent": TickKind.ASCENT,
    "snd": TickKind.ASCENT,
    "attempt": TickKind.ATTEMPT,
    "att": TickKind.ATTEMPT,
}

_dispatcher: Dispatcher | None = None


def get_dispatcher() -> Dispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = Dispatcher(SnapshotStore(DATA_FILE))
    return _dispatcher


def local_zone() -> ZoneInfo | None:
    name = os.getenv("GYMTICKS_TZ", "").strip()
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise HTTPException(status_code=500, detail=f"Unknown GYMTICKS_TZ: {name}") from err


def parse_tick_kind(value: Any) -> TickKind:
    if isinstance(value, int) and not isinstance(value, bool) and value in (0, 1):
        return TickKind(value)
    kind = TICK_KINDS.get(str(value or "").strip().lower())
    if kind is None:
        raise HTTPException(status_code=400, detail="kind must be ascent or attempt.")
    return kind


def route_fields(payload: dict[str, Any], dispatcher: Dispatcher, existing: Route | None = None) -> dict[str, str]:
    taxonomy = dispatcher.snapshot.taxonomy
    fallbacks = {
        "title": existing.title if existing else "",
        "color": existing.color if existing else default_choice(taxonomy.colors),
        "section": existing.section if existing else default_choice(taxonomy.sections),
        "grade": existing.grade if existing else default_choice(taxonomy.grades),
    }
    fields: dict[str, str] = {}
    for key, fallback in fallbacks.items():
        value = payload.get(key)
        if value is None:
            value = fallback
        if value is None:
            raise HTTPException(status_code=400, detail=f"{key} is required.")
        if not isinstance(value, str):
            raise HTTPException(status_code=400, detail=f"{key} must be a string.")
        fields[key] = value.strip() if key == "title" else value
    return fields


def route_view(route_id: RouteId, route: Route, now: int, compact: bool = False) -> dict[str, Any]:
    stats = route_stats(route, now, compact)
    return {
        "id": route_id,
        "title": route.title,
        "color": route.color,
        "section": route.section,
        "grade": route.grade,
        "retired": route.retired,
        "completed": stats.sent,
        "ascents": stats.ascent_text,
        "attempts": stats.attempt_text,
    }


def committed(action: Callable[[], Any]) -> Any:
    try:
        return action()
    except StoreWriteError as err:
        raise HTTPException(status_code=500, detail=f"Failed to save snapshot: {err}") from err


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.get("/settings")
def get_settings(dispatcher: Dispatcher = Depends(get_dispatcher)) -> dict[str, Any]:
    taxonomy = dispatcher.snapshot.taxonomy
    out: dict[str, Any] = {}
    for name, catalog in [("colors", taxonomy.colors), ("sections", taxonomy.sections), ("grades", taxonomy.grades)]:
        out[name] = {
            "entries": catalog_to_dict(catalog),
            "groups": [{"group": g, "keys": keys} for g, keys in grouped(catalog)],
            "default": default_choice(catalog),
        }
    return out


@app.get("/routes")
def get_routes(
    compact: bool = Query(default=False), dispatcher: Dispatcher = Depends(get_dispatcher)
) -> list[dict[str, Any]]:
    now = dispatcher.now()
    return [
        {"section": section, "routes": [route_view(rid, route, now, compact) for rid, route in rows]}
        for section, rows in iterate_active(dispatcher.snapshot)
    ]


@app.get("/routes/all")
def get_all_routes(
    compact: bool = Query(default=False), dispatcher: Dispatcher = Depends(get_dispatcher)
) -> list[dict[str, Any]]:
    now = dispatcher.now()
    return [route_view(rid, route, now, compact) for rid, route in iterate_all(dispatcher.snapshot)]


@app.post("/routes")
def create_route(payload: dict[str, Any] = Body(...), dispatcher: Dispatcher = Depends(get_dispatcher)) -> dict[str, Any]:
    fields = route_fields(payload, dispatcher)
    tick = payload.get("tick")
    initial_tick = parse_tick_kind(tick) if tick is not None else None
    route_id, route = committed(lambda: dispatcher.create_route(initial_tick=initial_tick, **fields))
    return route_view(route_id, route, dispatcher.now())


@app.put("/routes/{route_id}")
def edit_route(
    route_id: str, payload: dict[str, Any] = Body(...), dispatcher: Dispatcher = Depends(get_dispatcher)
) -> dict[str, bool]:
    fields = route_fields(payload, dispatcher, existing=dispatcher.snapshot.routes.get(route_id))
    return {"ok": committed(lambda: dispatcher.edit_route(route_id, **fields))}


@app.post("/routes/{route_id}/retire")
def retire_route(route_id: str, dispatcher: Dispatcher = Depends(get_dispatcher)) -> dict[str, bool]:
    return {"ok": committed(lambda: dispatcher.retire_route(route_id))}


@app.post("/routes/{route_id}/ticks")
def add_tick(
    route_id: str, payload: dict[str, Any] = Body(...), dispatcher: Dispatcher = Depends(get_dispatcher)
) -> dict[str, bool]:
    kind = parse_tick_kind(payload.get("kind"))
    return {"ok": committed(lambda: dispatcher.record_tick(route_id, kind))}


@app.get("/stats")
def get_stats(dispatcher: Dispatcher = Depends(get_dispatcher)) -> dict[str, int]:
    midnight = local_midnight(dispatcher.now(), local_zone())
    totals = aggregate(dispatcher.snapshot, midnight)
    return {"sends_today": totals.sends_today, "sends_total": totals.sends_total}


@app.get("/export")
def export_data(dispatcher: Dispatcher = Depends(get_dispatcher)) -> Response:
    return Response(
        content=dispatcher.export_text(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="gymticks.json"'},
    )


@app.post("/import")
async def import_data(request: Request, dispatcher: Dispatcher = Depends(get_dispatcher)) -> dict[str, bool]:
    content = await request.body()
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        return {"ok": False}
    return {"ok": committed(lambda: dispatcher.import_text(text))}

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Iterable

from gymticks.ledger import iterate_all
from gymticks.models import Route, Snapshot, Tick, TickKind
from gymticks.reltime import rel_time


@dataclass(frozen=True)
class TickFold:
    num_ascents: int = 0
    num_attempts: int = 0
    attempts_to_ascent: int = 0
    attempts_since_ascent: int = 0
    last_ascent_ts: int = 0
    last_attempt_ts: int = 0


@dataclass(frozen=True)
class RouteStats:
    fold: TickFold
    ascent_text: str
    attempt_text: str

    @property
    def sent(self) -> bool:
        return self.fold.num_ascents > 0


@dataclass(frozen=True)
class Aggregate:
    sends_today: int
    sends_total: int


def fold_ticks(ticks: Iterable[Tick]) -> TickFold:
    num_ascents = 0
    num_attempts = 0
    attempts_to_ascent = 0
    attempts_since_ascent = 0
    last_ascent_ts = 0
    last_attempt_ts = 0

    for tick in ticks:
        if tick.kind == TickKind.ASCENT:
            last_ascent_ts = tick.timestamp
            num_ascents += 1
            attempts_since_ascent = 0
        else:
            last_attempt_ts = tick.timestamp
            num_attempts += 1
            if num_ascents > 0:
                attempts_since_ascent += 1
            else:
                attempts_to_ascent += 1

    return TickFold(
        num_ascents=num_ascents,
        num_attempts=num_attempts,
        attempts_to_ascent=attempts_to_ascent,
        attempts_since_ascent=attempts_since_ascent,
        last_ascent_ts=last_ascent_ts,
        last_attempt_ts=last_attempt_ts,
    )


def ascent_summary(fold: TickFold) -> str:
    if fold.num_ascents == 0:
        return "unsent"
    if fold.attempts_to_ascent == 0:
        return f"{fold.num_ascents} snd (flsh)"
    return f"{fold.num_ascents} snd ({fold.attempts_to_ascent} att)"


def attempt_summary(fold: TickFold, now: int, compact: bool = False) -> str:
    if fold.num_attempts == 0 and fold.num_ascents == 0:
        return "unattempted"
    if fold.num_ascents == 0:
        return f"{fold.num_attempts} att (att {rel_time(fold.last_attempt_ts, now, compact)})"
    if fold.last_ascent_ts >= fold.last_attempt_ts:
        return f"{fold.attempts_since_ascent} att (snd {rel_time(fold.last_ascent_ts, now, compact)})"
    return f"{fold.attempts_since_ascent} att (att {rel_time(fold.last_attempt_ts, now, compact)})"


def route_stats(route: Route, now: int, compact: bool = False) -> RouteStats:
    fold = fold_ticks(route.ticks)
    return RouteStats(fold=fold, ascent_text=ascent_summary(fold), attempt_text=attempt_summary(fold, now, compact))


def local_midnight(now: int, tz: tzinfo | None = None) -> int:
    """Epoch seconds of the start of the calendar day containing `now`.

    With no `tz` the system local zone is used.
    """
    local = datetime.fromtimestamp(now, tz) if tz else datetime.fromtimestamp(now).astimezone()
    return int(local.replace(hour=0, minute=0, second=0, microsecond=0).timestamp())


def aggregate(snapshot: Snapshot, midnight: int) -> Aggregate:
    # Retired routes still count.
    sends_today = 0
    sends_total = 0
    for _, route in iterate_all(snapshot):
        for tick in route.ticks:
            if tick.kind != TickKind.ASCENT:
                continue
            sends_total += 1
            if tick.timestamp > midnight:
                sends_today += 1
    return Aggregate(sends_today=sends_today, sends_total=sends_total)

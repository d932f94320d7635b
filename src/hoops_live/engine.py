from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Iterable, Sequence, TypeVar

from .config import QUARTERS, SimulationConfig
from .models import (
    EVENT_STAT_FIELDS,
    GameClock,
    GameEvent,
    GameState,
    Player,
    PlayerGameStats,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DEFAULT_CONFIG = SimulationConfig()


def choose_weighted(table: Sequence[tuple[T, float]], rng: random.Random) -> T:
    # Only rng.random() is consumed, once per call.
    if not table:
        raise ValueError("No outcomes available for weighted selection.")
    total = sum(max(0.0, weight) for _outcome, weight in table)
    if total <= 0:
        raise ValueError("Weighted selection needs at least one positive weight.")
    roll = rng.random() * total
    cumulative = 0.0
    for outcome, weight in table:
        cumulative += max(0.0, weight)
        if roll < cumulative:
            return outcome
    # Float drift can leave roll == total; fall back to the last weighted entry.
    return next(outcome for outcome, weight in reversed(table) if weight > 0)


def _pick_player(roster: Sequence[Player], rng: random.Random) -> Player:
    if not roster:
        raise ValueError("Cannot pick an actor from an empty roster.")
    index = min(int(rng.random() * len(roster)), len(roster) - 1)
    return roster[index]


def advance_clock(clock: GameClock, quarter_length: int) -> tuple[GameClock, bool]:
    if clock.is_final:
        return clock, True
    time_left = clock.time_left - 1
    if time_left > 0:
        return GameClock(quarter=clock.quarter, time_left=time_left), False
    if clock.quarter < QUARTERS:
        return GameClock(quarter=clock.quarter + 1, time_left=quarter_length), False
    return GameClock(quarter=QUARTERS, time_left=0), True


def generate_event(
    clock: GameClock,
    home_roster: Sequence[Player],
    away_roster: Sequence[Player],
    rng: random.Random,
    event_id: str,
    config: SimulationConfig | None = None,
) -> GameEvent | None:
    config = config or _DEFAULT_CONFIG
    if clock.is_final:
        return None
    if not home_roster or not away_roster:
        raise ValueError("Both rosters need at least one player to generate events.")

    if rng.random() >= config.event_probability:
        return None
    is_score = rng.random() < config.scoring_share
    team = "home" if rng.random() < 0.5 else "away"
    player = _pick_player(home_roster if team == "home" else away_roster, rng)

    if is_score:
        label, points = choose_weighted(
            [((label, points), weight) for label, points, weight in config.scoring_outcomes],
            rng,
        )
        return GameEvent(
            id=event_id,
            time=clock.time_left,
            quarter=clock.quarter,
            type="score",
            team=team,
            player=player.name,
            player_id=player.id,
            description=f"{player.name} scores {points} points ({label})",
            points=points,
            label=label,
        )

    event_type, description = choose_weighted(
        [((event_type, description), weight) for event_type, description, weight in config.non_scoring_outcomes],
        rng,
    )
    return GameEvent(
        id=event_id,
        time=clock.time_left,
        quarter=clock.quarter,
        type=event_type,
        team=team,
        player=player.name,
        player_id=player.id,
        description=f"{player.name} - {description}",
        label=description,
    )


def resolve_player_id(event: GameEvent, roster: Iterable[Player] | None = None) -> str | None:
    if event.player_id:
        return event.player_id
    if not event.player or roster is None:
        return None
    # Duplicate display names resolve to the first roster entry.
    return next((p.id for p in roster if p.name == event.player), None)


def apply_event(
    state: GameState,
    event: GameEvent,
    roster: Iterable[Player] | None = None,
    log_limit: int | None = None,
) -> GameState:
    """Fold one event into score, player stats and the recent-events feed."""
    log_limit = log_limit or _DEFAULT_CONFIG.event_log_limit
    score = state.score
    if event.is_score and event.points:
        score = score.add(event.team, event.points)

    stats = state.player_stats
    stat_field = "points" if event.is_score else EVENT_STAT_FIELDS.get(event.type)
    if stat_field is not None:
        player_id = resolve_player_id(event, roster)
        current = stats.get(player_id) if player_id else None
        if current is None:
            logger.warning("Unresolved actor for event %s (player=%r); stats unchanged", event.id, event.player)
        else:
            amount = (event.points or 0) if event.is_score else 1
            stats = dict(stats)
            stats[player_id] = current.bump(stat_field, amount)

    events = (event, *state.events)[:log_limit]
    return replace(state, score=score, player_stats=stats, events=events)


def empty_stats_like(stats: dict[str, PlayerGameStats]) -> dict[str, PlayerGameStats]:
    return {player_id: PlayerGameStats(player_id=player_id) for player_id in stats}

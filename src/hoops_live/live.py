from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import replace
from typing import Any, Callable

from .config import LEADERS_LIMIT, QUARTERS, SimulationConfig
from .engine import advance_clock, apply_event, empty_stats_like, generate_event
from .models import (
    STATUS_FINAL,
    STATUS_PAUSED,
    STATUS_PLAYING,
    GameClock,
    GameEvent,
    GameState,
    Player,
    PlayerGameStats,
    Team,
    initial_stats,
)
from .scheduler import TickScheduler

logger = logging.getLogger(__name__)

Listener = Callable[[GameState], None]


class LiveGameSimulator:
    def __init__(
        self,
        home_team: Team,
        away_team: Team,
        home_players: list[Player],
        away_players: list[Player],
        config: SimulationConfig | None = None,
        rng: random.Random | None = None,
        seed: int | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if not home_players:
            raise ValueError(f"{home_team.name} has no players to simulate with.")
        if not away_players:
            raise ValueError(f"{away_team.name} has no players to simulate with.")
        self.home_team = home_team
        self.away_team = away_team
        self.home_players = list(home_players)
        self.away_players = list(away_players)
        self.config = config or SimulationConfig()
        self._rng = rng or random.Random(seed)
        self._scheduler = TickScheduler(self.config.game_speed, self._scheduled_tick, loop=loop)
        self._listeners: list[Listener] = []
        self._next_event_id = 1
        self._history: list[GameEvent] = []
        self._closed = False
        self.state = GameState(
            clock=self._opening_clock(),
            player_stats=initial_stats(self.all_players),
        )

    @property
    def all_players(self) -> list[Player]:
        return [*self.home_players, *self.away_players]

    @property
    def status(self) -> str:
        return self.state.status

    @property
    def is_final(self) -> bool:
        return self.state.is_final

    @property
    def status_label(self) -> str:
        return "FINAL" if self.is_final else "LIVE"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def scheduler_running(self) -> bool:
        return self._scheduler.running

    @property
    def history(self) -> tuple[GameEvent, ...]:
        """Every event of the current game in tick order, never truncated."""
        return tuple(self._history)

    def _opening_clock(self) -> GameClock:
        return GameClock(quarter=1, time_left=self.config.quarter_length)

    def _side_of(self, player_id: str) -> str | None:
        if any(p.id == player_id for p in self.home_players):
            return "home"
        if any(p.id == player_id for p in self.away_players):
            return "away"
        return None

    def _player(self, player_id: str) -> Player | None:
        return next((p for p in self.all_players if p.id == player_id), None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self) -> None:
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.warning("Live game listener %r failed; continuing", listener, exc_info=True)

    def play(self) -> bool:
        if self._closed or self.is_final or self.state.status == STATUS_PLAYING:
            return False
        self._scheduler.start()
        self.state = replace(self.state, is_playing=True, status=STATUS_PLAYING)
        logger.info(
            "Playing %s vs %s from Q%s %s",
            self.home_team.name,
            self.away_team.name,
            self.state.clock.quarter,
            self.state.clock.display,
        )
        self._publish()
        return True

    def pause(self) -> bool:
        if self.state.status != STATUS_PLAYING:
            return False
        self._scheduler.stop()
        self.state = replace(self.state, is_playing=False, status=STATUS_PAUSED)
        logger.info("Paused at Q%s %s", self.state.clock.quarter, self.state.clock.display)
        self._publish()
        return True

    def reset(self, clear_stats: bool = False) -> GameState:
        # Player stats carry over unless clear_stats is set.
        self._scheduler.stop()
        stats = empty_stats_like(self.state.player_stats) if clear_stats else self.state.player_stats
        self.state = GameState(clock=self._opening_clock(), player_stats=stats)
        self._history = []
        logger.info("Reset %s vs %s (stats %s)", self.home_team.name, self.away_team.name, "cleared" if clear_stats else "kept")
        self._publish()
        return self.state

    def tick(self) -> GameState:
        state = self.state
        if self._closed or not state.is_playing or state.is_final:
            return state

        clock, ended = advance_clock(state.clock, self.config.quarter_length)
        state = replace(state, clock=clock)
        if ended:
            self._scheduler.stop()
            state = replace(state, is_playing=False, status=STATUS_FINAL)
            logger.info(
                "Final: %s %s - %s %s",
                self.home_team.name,
                state.score.home,
                state.score.away,
                self.away_team.name,
            )
        else:
            event = generate_event(
                clock,
                self.home_players,
                self.away_players,
                self._rng,
                event_id=f"evt-{self._next_event_id}",
                config=self.config,
            )
            if event is not None:
                self._next_event_id += 1
                self._history.append(event)
                state = apply_event(state, event, self.all_players, log_limit=self.config.event_log_limit)
                logger.debug("Q%s %s %s", clock.quarter, clock.display, event.description)

        self.state = state
        self._publish()
        return state

    def _scheduled_tick(self) -> None:
        try:
            self.tick()
        except Exception:
            clock = self.state.clock
            logger.exception(
                "Tick failed at Q%s %s; pausing %s vs %s",
                clock.quarter,
                clock.display,
                self.home_team.name,
                self.away_team.name,
            )
            self._scheduler.stop()
            self.state = replace(self.state, is_playing=False, status=STATUS_PAUSED)
            self._publish()

    def run_to_completion(self, max_ticks: int | None = None) -> GameState:
        if self.is_final or self._closed:
            return self.state
        limit = max_ticks if max_ticks is not None else self.config.quarter_length * QUARTERS + 1
        self._scheduler.stop()
        self.state = replace(self.state, is_playing=True, status=STATUS_PLAYING)
        try:
            for _ in range(limit):
                self.tick()
                if self.is_final:
                    break
        finally:
            if not self.is_final:
                self.state = replace(self.state, is_playing=False, status=STATUS_PAUSED)
        return self.state

    def leading_scorers(self, limit: int = LEADERS_LIMIT) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for player_id, stats in self.state.player_stats.items():
            player = self._player(player_id)
            if player is None or stats.points <= 0:
                continue
            side = self._side_of(player_id)
            team = self.home_team if side == "home" else self.away_team
            rows.append(
                {
                    "player_id": player_id,
                    "name": player.name,
                    "number": player.number,
                    "position": player.position,
                    "team": side,
                    "color": team.primary_color,
                    "points": stats.points,
                    "rebounds": stats.rebounds,
                    "assists": stats.assists,
                }
            )
        rows.sort(key=lambda row: row["points"], reverse=True)
        return rows[:limit]

    def team_totals(self) -> dict[str, dict[str, int]]:
        totals = {side: {"points": 0, "rebounds": 0, "steals": 0, "blocks": 0, "fouls": 0} for side in ("home", "away")}
        for player_id, stats in self.state.player_stats.items():
            side = self._side_of(player_id)
            if side is None:
                continue
            for key in totals[side]:
                totals[side][key] += getattr(stats, key)
        return totals

    def player_stats(self, player_id: str) -> PlayerGameStats | None:
        return self.state.player_stats.get(player_id)

    def snapshot(self) -> dict[str, Any]:
        payload = self.state.to_dict()
        payload["label"] = self.status_label
        payload["leaders"] = self.leading_scorers()
        payload["home"] = self.home_team.to_dict()
        payload["away"] = self.away_team.to_dict()
        return payload

    def close(self) -> None:
        if self._closed:
            return
        self._scheduler.close()
        if self.state.is_playing:
            self.state = replace(self.state, is_playing=False, status=STATUS_PAUSED)
        self._listeners.clear()
        self._closed = True
        logger.info("Closed simulation %s vs %s", self.home_team.name, self.away_team.name)

    def __enter__(self) -> LiveGameSimulator:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()


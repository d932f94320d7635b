from __future__ import annotations

import asyncio
from typing import Iterable

from .config import SimulationConfig
from .fixtures import LeagueData
from .live import LiveGameSimulator
from .models import GameEvent, Match, format_clock


def build_simulation(
    data: LeagueData,
    match: Match,
    config: SimulationConfig | None = None,
    seed: int | None = None,
    loop: asyncio.AbstractEventLoop | None = None,
) -> LiveGameSimulator:
    home = data.team(match.home_team_id)
    away = data.team(match.away_team_id)
    if home is None or away is None:
        raise ValueError(f"Match {match.id} references an unknown team.")
    return LiveGameSimulator(
        home_team=home,
        away_team=away,
        home_players=data.roster(home.id),
        away_players=data.roster(away.id),
        config=config,
        seed=seed,
        loop=loop,
    )


def format_scoreboard(sim: LiveGameSimulator) -> str:
    state = sim.state
    return (
        f"{sim.status_label}  Q{state.clock.quarter} {state.clock.display}  "
        f"{sim.home_team.name} {state.score.home} - {state.score.away} {sim.away_team.name}"
    )


def format_box_score(sim: LiveGameSimulator) -> str:
    lines = [format_scoreboard(sim), "Team  #   Player                Pos PTS REB AST STL BLK PF"]
    for side, players in (("HOME", sim.home_players), ("AWAY", sim.away_players)):
        for player in players:
            stats = sim.player_stats(player.id)
            if stats is None:
                continue
            lines.append(
                f"{side:<5} {player.number:>2}  {player.name:<20} {player.position:<3} {stats.points:>3} {stats.rebounds:>3}"
                f" {stats.assists:>3} {stats.steals:>3} {stats.blocks:>3} {stats.fouls:>2}"
            )
    return "\n".join(lines)


def format_play_by_play(events: Iterable[GameEvent], limit: int = 20) -> str:
    lines = ["Q  Clock  Team  Play"]
    for event in list(events)[:limit]:
        suffix = f"  +{event.points}" if event.points else ""
        lines.append(f"{event.quarter:<2} {format_clock(event.time):>5}  {event.team:<5} {event.description}{suffix}")
    return "\n".join(lines)


def format_standings(data: LeagueData) -> str:
    lines = ["Pos Team                 W   L   PPG  OPPG  Home  Away  Strk"]
    for idx, team in enumerate(data.standings(), start=1):
        rec = team.stats
        lines.append(
            f"{idx:>3} {team.name:<18} {rec.wins:>3} {rec.losses:>3} {rec.points_per_game:>5.1f} {rec.points_allowed_per_game:>5.1f}"
            f" {rec.home_record:>5} {rec.away_record:>5} {rec.streak_label:>5}"
        )
    return "\n".join(lines)

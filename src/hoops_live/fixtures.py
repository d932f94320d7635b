from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

from .config import DEFAULT_DATA_PATH
from .models import MATCH_STATUSES, Match, Player, Team, TeamSeasonStats

logger = logging.getLogger(__name__)

TEAM_SORT_KEYS: dict[str, Callable[[Team], Any]] = {
    "wins": lambda t: t.stats.wins,
    "losses": lambda t: t.stats.losses,
    "name": lambda t: t.name,
    "city": lambda t: t.city,
}
PLAYER_SORT_KEYS: dict[str, Callable[[Player], Any]] = {
    "points": lambda p: p.ppg,
    "ppg": lambda p: p.ppg,
    "rebounds": lambda p: p.rpg,
    "rpg": lambda p: p.rpg,
    "assists": lambda p: p.apg,
    "apg": lambda p: p.apg,
    "name": lambda p: p.name,
    "age": lambda p: p.age,
}
MATCH_SORT_KEYS: dict[str, Callable[[Match], Any]] = {
    "date": lambda m: m.date,
    "homeTeam": lambda m: m.home_team_id,
    "awayTeam": lambda m: m.away_team_id,
    "venue": lambda m: m.venue,
}


def _int_or(value: Any, fallback: int | None) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _float_or(value: Any, fallback: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return fallback


def _deserialize_team_stats(raw: Any) -> TeamSeasonStats:
    if not isinstance(raw, dict):
        return TeamSeasonStats()
    streak_type = str(raw.get("streak_type", "L")).upper()
    return TeamSeasonStats(
        wins=_int_or(raw.get("wins"), 0) or 0,
        losses=_int_or(raw.get("losses"), 0) or 0,
        points_for=_int_or(raw.get("points_for"), 0) or 0,
        points_against=_int_or(raw.get("points_against"), 0) or 0,
        streak=_int_or(raw.get("streak"), 0) or 0,
        streak_type=streak_type if streak_type in ("W", "L") else "L",
        home_record=str(raw.get("home_record", "0-0")),
        away_record=str(raw.get("away_record", "0-0")),
    )


def _deserialize_team(raw: dict[str, Any]) -> Team | None:
    team_id = raw.get("id")
    name = raw.get("name")
    if not isinstance(team_id, str) or not isinstance(name, str):
        return None
    colors = raw.get("colors", {})
    if not isinstance(colors, dict):
        colors = {}
    return Team(
        id=team_id,
        name=name,
        city=str(raw.get("city", "")),
        country=str(raw.get("country", "")),
        founded=_int_or(raw.get("founded"), None),
        logo=str(raw.get("logo", "")),
        primary_color=str(colors.get("primary", "#1f3a93")),
        secondary_color=str(colors.get("secondary", "#d7e1f5")),
        stadium=str(raw.get("stadium", "")),
        capacity=_int_or(raw.get("capacity"), 0) or 0,
        coach=str(raw.get("coach", "")),
        championships=_int_or(raw.get("championships"), 0) or 0,
        stats=_deserialize_team_stats(raw.get("stats")),
    )


def _deserialize_player(raw: dict[str, Any]) -> Player | None:
    player_id = raw.get("id")
    name = raw.get("name")
    team_id = raw.get("teamId")
    if not isinstance(player_id, str) or not isinstance(name, str) or not isinstance(team_id, str):
        return None
    stats = raw.get("stats", {})
    if not isinstance(stats, dict):
        stats = {}
    return Player(
        id=player_id,
        name=name,
        team_id=team_id,
        number=_int_or(raw.get("number"), 0) or 0,
        position=str(raw.get("position", "")),
        height=str(raw.get("height", "")),
        weight=str(raw.get("weight", "")),
        age=_int_or(raw.get("age"), 0) or 0,
        nationality=str(raw.get("nationality", "")),
        ppg=_float_or(stats.get("ppg"), 0.0),
        rpg=_float_or(stats.get("rpg"), 0.0),
        apg=_float_or(stats.get("apg"), 0.0),
    )


def _deserialize_match(raw: dict[str, Any]) -> Match | None:
    match_id = raw.get("id")
    home = raw.get("homeTeamId")
    away = raw.get("awayTeamId")
    if not all(isinstance(v, str) for v in (match_id, home, away)):
        return None
    status = str(raw.get("status", "upcoming"))
    if status not in MATCH_STATUSES:
        status = "upcoming"
    score = raw.get("score")
    home_score = away_score = None
    if isinstance(score, dict):
        home_score = _int_or(score.get("home"), None)
        away_score = _int_or(score.get("away"), None)
    return Match(
        id=match_id,
        home_team_id=home,
        away_team_id=away,
        date=str(raw.get("date", "")),
        venue=str(raw.get("venue", "")),
        status=status,
        round=_int_or(raw.get("round"), 0) or 0,
        home_score=home_score,
        away_score=away_score,
        attendance=_int_or(raw.get("attendance"), None),
    )


class LeagueData:
    """Read-only teams, players and matches loaded from a JSON fixture."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path or DEFAULT_DATA_PATH)
        self.last_load_error: str = ""
        raw = self._load()
        self.league: dict[str, Any] = raw.get("league", {}) if isinstance(raw.get("league"), dict) else {}
        self._teams = self._collect(raw.get("teams"), _deserialize_team)
        self._players = self._collect(raw.get("players"), _deserialize_player)
        self._matches = self._collect(raw.get("matches"), _deserialize_match)

    def _load(self) -> dict[str, Any]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            self.last_load_error = f"Could not read league fixture {self.path}: {exc}"
            logger.warning(self.last_load_error)
            return {}
        if not isinstance(raw, dict):
            self.last_load_error = f"League fixture {self.path} must be a JSON object."
            logger.warning(self.last_load_error)
            return {}
        return raw

    @staticmethod
    def _collect(rows: Any, build) -> list:
        if not isinstance(rows, list):
            return []
        items = []
        for row in rows:
            item = build(row) if isinstance(row, dict) else None
            if item is not None:
                items.append(item)
        return items

    @staticmethod
    def _ordered(rows: list, keys: dict[str, Callable], sort_by: str | None, order: str, limit: int | None) -> list:
        # Unknown sort keys fall back to the first key of the table.
        if sort_by is not None:
            rows = sorted(rows, key=keys.get(sort_by, next(iter(keys.values()))), reverse=order != "asc")
        rows = list(rows)
        if limit is not None and limit >= 0:
            rows = rows[:limit]
        return rows

    def teams(self, sort_by: str | None = None, order: str = "desc", limit: int | None = None) -> list[Team]:
        return self._ordered(self._teams, TEAM_SORT_KEYS, sort_by, order, limit)

    def team(self, team_id: str) -> Team | None:
        return next((t for t in self._teams if t.id == team_id), None)

    def standings(self) -> list[Team]:
        return sorted(self._teams, key=lambda t: (-t.stats.wins, t.stats.losses))

    def win_streak(self, team_id: str) -> dict[str, Any]:
        team = self.team(team_id)
        if team is None:
            return {"type": "L", "count": 0}
        return {"type": team.stats.streak_type, "count": abs(team.stats.streak)}

    def players(
        self,
        team_id: str | None = None,
        position: str | None = None,
        sort_by: str | None = None,
        order: str = "desc",
        limit: int | None = None,
    ) -> list[Player]:
        rows = self._players
        if team_id:
            rows = [p for p in rows if p.team_id == team_id]
        if position:
            rows = [p for p in rows if p.position == position.upper()]
        return self._ordered(rows, PLAYER_SORT_KEYS, sort_by, order, limit)

    def player(self, player_id: str) -> Player | None:
        return next((p for p in self._players if p.id == player_id), None)

    def roster(self, team_id: str) -> list[Player]:
        return sorted(self.players(team_id=team_id), key=lambda p: p.number)

    def top_scorers(self, limit: int = 10) -> list[Player]:
        return self.players(sort_by="ppg", limit=limit)

    def match(self, match_id: str) -> Match | None:
        return next((m for m in self._matches if m.id == match_id), None)

    def matches(
        self,
        team_id: str | None = None,
        status: str | None = None,
        sort_by: str = "date",
        order: str = "desc",
        limit: int | None = None,
    ) -> list[Match]:
        rows = self._matches
        if team_id:
            rows = [m for m in rows if m.involves(team_id)]
        if status:
            rows = [m for m in rows if m.status == status]
        return self._ordered(rows, MATCH_SORT_KEYS, sort_by, order, limit)

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from .config import EVENT_TYPES, QUARTER_LENGTH, QUARTERS

POSITIONS = ("PG", "SG", "SF", "PF", "C")
SIDES = ("home", "away")
MATCH_STATUSES = ("completed", "upcoming", "live", "postponed")

STATUS_IDLE = "idle"
STATUS_PLAYING = "playing"
STATUS_PAUSED = "paused"
STATUS_FINAL = "final"

# Event type -> counter it increments on the acting player.
EVENT_STAT_FIELDS: dict[str, str] = {
    "rebound": "rebounds",
    "steal": "steals",
    "block": "blocks",
    "foul": "fouls",
}


@dataclass(frozen=True, slots=True)
class TeamSeasonStats:
    wins: int = 0
    losses: int = 0
    points_for: int = 0
    points_against: int = 0
    streak: int = 0
    streak_type: str = "L"
    home_record: str = "0-0"
    away_record: str = "0-0"

    @property
    def games_played(self) -> int:
        return self.wins + self.losses

    @property
    def points_per_game(self) -> float:
        gp = self.games_played
        return round(self.points_for / gp, 1) if gp > 0 else 0.0

    @property
    def points_allowed_per_game(self) -> float:
        gp = self.games_played
        return round(self.points_against / gp, 1) if gp > 0 else 0.0

    @property
    def streak_label(self) -> str:
        return f"{self.streak_type}{abs(self.streak)}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "points_for": self.points_for,
            "points_against": self.points_against,
            "streak": self.streak,
            "streak_type": self.streak_type,
            "home_record": self.home_record,
            "away_record": self.away_record,
        }


@dataclass(slots=True)
class Team:
    id: str
    name: str
    city: str = ""
    country: str = ""
    founded: int | None = None
    logo: str = ""
    primary_color: str = "#1f3a93"
    secondary_color: str = "#d7e1f5"
    stadium: str = ""
    capacity: int = 0
    coach: str = ""
    championships: int = 0
    stats: TeamSeasonStats = field(default_factory=TeamSeasonStats)

    @property
    def initials(self) -> str:
        return "".join(word[0] for word in self.name.split() if word)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "city": self.city,
            "country": self.country,
            "founded": self.founded,
            "logo": self.logo,
            "colors": {"primary": self.primary_color, "secondary": self.secondary_color},
            "initials": self.initials,
            "stadium": self.stadium,
            "capacity": self.capacity,
            "coach": self.coach,
            "championships": self.championships,
            "stats": self.stats.to_dict(),
        }


@dataclass(slots=True)
class Player:
    id: str
    name: str
    team_id: str
    number: int
    position: str
    height: str = ""
    weight: str = ""
    age: int = 0
    nationality: str = ""
    ppg: float = 0.0
    rpg: float = 0.0
    apg: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "teamId": self.team_id,
            "number": self.number,
            "position": self.position,
            "height": self.height,
            "weight": self.weight,
            "age": self.age,
            "nationality": self.nationality,
            "stats": {"ppg": self.ppg, "rpg": self.rpg, "apg": self.apg},
        }


@dataclass(slots=True)
class Match:
    id: str
    home_team_id: str
    away_team_id: str
    date: str
    venue: str = ""
    status: str = "upcoming"
    round: int = 0
    home_score: int | None = None
    away_score: int | None = None
    attendance: int | None = None

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "homeTeamId": self.home_team_id,
            "awayTeamId": self.away_team_id,
            "date": self.date,
            "venue": self.venue,
            "status": self.status,
            "round": self.round,
        }
        if self.home_score is not None and self.away_score is not None:
            payload["score"] = {"home": self.home_score, "away": self.away_score}
        if self.attendance is not None:
            payload["attendance"] = self.attendance
        return payload


def format_clock(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


@dataclass(frozen=True, slots=True)
class GameClock:
    quarter: int = 1
    time_left: int = QUARTER_LENGTH

    @property
    def is_final(self) -> bool:
        return self.quarter > QUARTERS or (self.quarter == QUARTERS and self.time_left <= 0)

    @property
    def display(self) -> str:
        return format_clock(self.time_left)

    def to_dict(self) -> dict[str, Any]:
        return {"quarter": self.quarter, "time_left": self.time_left, "display": self.display}


@dataclass(frozen=True, slots=True)
class Score:
    home: int = 0
    away: int = 0

    @property
    def total(self) -> int:
        return self.home + self.away

    @property
    def leader(self) -> str | None:
        if self.home == self.away:
            return None
        return "home" if self.home > self.away else "away"

    def add(self, side: str, points: int) -> Score:
        if side not in SIDES:
            raise ValueError(f"Unknown side '{side}'.")
        if points < 0:
            raise ValueError("Score can only increase.")
        if side == "home":
            return replace(self, home=self.home + points)
        return replace(self, away=self.away + points)

    def to_dict(self) -> dict[str, int]:
        return {"home": self.home, "away": self.away}


@dataclass(frozen=True, slots=True)
class GameEvent:
    id: str
    time: int
    quarter: int
    type: str
    team: str
    player: str | None
    description: str
    player_id: str | None = None
    points: int | None = None
    label: str = ""

    def __post_init__(self) -> None:
        if self.type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type '{self.type}'.")
        if self.team not in SIDES:
            raise ValueError(f"Unknown side '{self.team}'.")
        if self.type == "score":
            if self.points not in (1, 2, 3):
                raise ValueError(f"Scoring event needs 1, 2 or 3 points, got {self.points}.")
        elif self.points is not None:
            raise ValueError("Only scoring events carry points.")

    @property
    def is_score(self) -> bool:
        return self.type == "score"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "time": self.time,
            "clock": format_clock(self.time),
            "quarter": self.quarter,
            "type": self.type,
            "team": self.team,
            "player": self.player,
            "player_id": self.player_id,
            "description": self.description,
            "label": self.label,
        }
        if self.points is not None:
            payload["points"] = self.points
        return payload


@dataclass(frozen=True, slots=True)
class PlayerGameStats:
    player_id: str
    points: int = 0
    rebounds: int = 0
    assists: int = 0
    steals: int = 0
    blocks: int = 0
    fouls: int = 0
    minutes: float = 0.0

    def bump(self, stat: str, amount: int = 1) -> PlayerGameStats:
        if amount < 0:
            raise ValueError("Player stats are never decremented.")
        return replace(self, **{stat: getattr(self, stat) + amount})

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "points": self.points,
            "rebounds": self.rebounds,
            "assists": self.assists,
            "steals": self.steals,
            "blocks": self.blocks,
            "fouls": self.fouls,
            "minutes": self.minutes,
        }


@dataclass(frozen=True, slots=True)
class GameState:
    clock: GameClock = field(default_factory=GameClock)
    score: Score = field(default_factory=Score)
    is_playing: bool = False
    status: str = STATUS_IDLE
    events: tuple[GameEvent, ...] = ()
    player_stats: dict[str, PlayerGameStats] = field(default_factory=dict)

    @property
    def is_final(self) -> bool:
        return self.status == STATUS_FINAL or self.clock.is_final

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "label": "FINAL" if self.is_final else "LIVE",
            "quarter": self.clock.quarter,
            "time_left": self.clock.time_left,
            "clock": self.clock.display,
            "is_playing": self.is_playing,
            "score": self.score.to_dict(),
            "leader": self.score.leader,
            "events": [event.to_dict() for event in self.events],
            "player_stats": {pid: stats.to_dict() for pid, stats in self.player_stats.items()},
        }


def initial_stats(players: list[Player]) -> dict[str, PlayerGameStats]:
    return {player.id: PlayerGameStats(player_id=player.id) for player in players}

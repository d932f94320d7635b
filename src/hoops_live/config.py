"""Static simulation configuration constants."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

QUARTER_LENGTH = 720
QUARTERS = 4
GAME_SPEED = 0.05
EVENT_PROBABILITY = 0.05
SCORING_SHARE = 0.6
EVENT_LOG_LIMIT = 20
LEADERS_LIMIT = 8

# (label, points, weight)
SCORING_OUTCOMES: tuple[tuple[str, int, float], ...] = (
    ("Two-Pointer", 2, 0.40),
    ("Three-Pointer", 3, 0.20),
    ("Free Throw", 1, 0.25),
    ("And-One", 3, 0.15),
)

# (event type, description, weight)
NON_SCORING_OUTCOMES: tuple[tuple[str, str, float], ...] = (
    ("foul", "Personal foul", 0.30),
    ("steal", "Steal", 0.20),
    ("block", "Blocked shot", 0.15),
    ("rebound", "Defensive rebound", 0.25),
    ("timeout", "Timeout called", 0.10),
)

EVENT_TYPES = ("score", "foul", "timeout", "substitution", "steal", "block", "rebound")

DEFAULT_DATA_PATH = Path(__file__).resolve().parent / "data" / "league.json"


@dataclass(slots=True)
class SimulationConfig:
    quarter_length: int = QUARTER_LENGTH
    game_speed: float = GAME_SPEED
    event_probability: float = EVENT_PROBABILITY
    scoring_share: float = SCORING_SHARE
    event_log_limit: int = EVENT_LOG_LIMIT
    scoring_outcomes: tuple[tuple[str, int, float], ...] = SCORING_OUTCOMES
    non_scoring_outcomes: tuple[tuple[str, str, float], ...] = NON_SCORING_OUTCOMES

    def __post_init__(self) -> None:
        if self.quarter_length < 1:
            raise ValueError(f"quarter_length must be positive, got {self.quarter_length}.")
        if self.game_speed <= 0:
            raise ValueError(f"game_speed must be positive, got {self.game_speed}.")
        for name in ("event_probability", "scoring_share"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}.")
        if self.event_log_limit < 1:
            raise ValueError(f"event_log_limit must be positive, got {self.event_log_limit}.")
        if not self.scoring_outcomes or not self.non_scoring_outcomes:
            raise ValueError("Outcome tables cannot be empty.")
        for label, points, _weight in self.scoring_outcomes:
            if points not in (1, 2, 3):
                raise ValueError(f"{label} awards {points} points; expected 1, 2 or 3.")
        for event_type, _description, _weight in self.non_scoring_outcomes:
            if event_type == "score" or event_type not in EVENT_TYPES:
                raise ValueError(f"'{event_type}' is not a non-scoring event type.")
        for name in ("scoring_outcomes", "non_scoring_outcomes"):
            weights = [weight for *_row, weight in getattr(self, name)]
            if any(weight < 0 for weight in weights):
                raise ValueError(f"{name} has a negative weight.")
            if not any(weight > 0 for weight in weights):
                raise ValueError(f"{name} needs at least one positive weight.")

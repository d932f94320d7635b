import random

import pytest

from hoops_live.config import QUARTER_LENGTH, SCORING_OUTCOMES
from hoops_live.engine import advance_clock, apply_event, choose_weighted, generate_event
from hoops_live.models import GameClock, GameEvent, GameState, Player, Score, initial_stats


class _ScriptedRandom:
    """Returns queued values from random() so every draw is pinned."""

    def __init__(self, values: list[float]) -> None:
        self.values = list(values)

    def random(self) -> float:
        return self.values.pop(0)


def _roster(team_id: str, count: int = 5) -> list[Player]:
    positions = ["PG", "SG", "SF", "PF", "C"]
    return [
        Player(id=f"{team_id}-{idx}", name=f"{team_id.title()} Player {idx}", team_id=team_id, number=idx, position=positions[idx % 5])
        for idx in range(count)
    ]


def _state(home: list[Player], away: list[Player], score: Score | None = None) -> GameState:
    return GameState(score=score or Score(), player_stats=initial_stats([*home, *away]))


def test_choose_weighted_walks_cumulative_weights() -> None:
    table = [("two", 0.4), ("three", 0.2), ("free", 0.25), ("and-one", 0.15)]
    expectations = [(0.0, "two"), (0.39, "two"), (0.41, "three"), (0.59, "three"), (0.61, "free"), (0.84, "free"), (0.86, "and-one"), (0.9999, "and-one")]
    for roll, expected in expectations:
        assert choose_weighted(table, _ScriptedRandom([roll])) == expected


def test_choose_weighted_matches_weights_over_many_draws() -> None:
    rng = random.Random(42)
    table = [(label, weight) for label, _points, weight in SCORING_OUTCOMES]
    counts = {label: 0 for label, _weight in table}
    draws = 20000
    for _ in range(draws):
        counts[choose_weighted(table, rng)] += 1
    for label, weight in table:
        assert abs(counts[label] / draws - weight) < 0.02


def test_choose_weighted_rejects_empty_or_zero_tables() -> None:
    with pytest.raises(ValueError):
        choose_weighted([], random.Random(1))
    with pytest.raises(ValueError):
        choose_weighted([("a", 0.0)], random.Random(1))


def test_clock_counts_down_one_second() -> None:
    clock, ended = advance_clock(GameClock(quarter=2, time_left=500), QUARTER_LENGTH)
    assert clock == GameClock(quarter=2, time_left=499)
    assert ended is False


def test_clock_rolls_into_next_quarter() -> None:
    clock, ended = advance_clock(GameClock(quarter=1, time_left=1), QUARTER_LENGTH)
    assert clock == GameClock(quarter=2, time_left=720)
    assert ended is False


def test_clock_ends_game_after_fourth_quarter() -> None:
    clock, ended = advance_clock(GameClock(quarter=4, time_left=1), QUARTER_LENGTH)
    assert clock == GameClock(quarter=4, time_left=0)
    assert clock.is_final
    assert ended is True

    again, still_ended = advance_clock(clock, QUARTER_LENGTH)
    assert again == clock
    assert still_ended is True


def test_no_event_when_occurrence_gate_fails() -> None:
    rng = _ScriptedRandom([0.05])
    assert generate_event(GameClock(), _roster("home"), _roster("away"), rng, event_id="evt-1") is None
    assert rng.values == []


def test_scoring_event_carries_actor_id_and_points() -> None:
    home, away = _roster("home"), _roster("away")
    # occurrence, category, side, actor, outcome
    rng = _ScriptedRandom([0.01, 0.10, 0.20, 0.0, 0.45])
    event = generate_event(GameClock(quarter=3, time_left=300), home, away, rng, event_id="evt-7")

    assert event is not None
    assert event.id == "evt-7"
    assert event.type == "score"
    assert event.team == "home"
    assert event.player_id == home[0].id
    assert event.points == 3
    assert event.label == "Three-Pointer"
    assert event.quarter == 3
    assert event.time == 300
    assert home[0].name in event.description
    assert "Three-Pointer" in event.description


def test_non_scoring_event_has_no_points() -> None:
    home, away = _roster("home"), _roster("away")
    rng = _ScriptedRandom([0.0, 0.70, 0.90, 0.99, 0.95])
    event = generate_event(GameClock(), home, away, rng, event_id="evt-2")

    assert event is not None
    assert event.type == "timeout"
    assert event.team == "away"
    assert event.player_id == away[-1].id
    assert event.points is None
    assert event.description == f"{away[-1].name} - Timeout called"


def test_generator_is_silent_once_game_is_final() -> None:
    rng = _ScriptedRandom([0.0, 0.0, 0.0, 0.0, 0.0])
    final_clock = GameClock(quarter=4, time_left=0)
    assert generate_event(final_clock, _roster("home"), _roster("away"), rng, event_id="evt-1") is None
    assert len(rng.values) == 5


def test_generator_rejects_empty_roster() -> None:
    with pytest.raises(ValueError):
        generate_event(GameClock(), [], _roster("away"), _ScriptedRandom([0.0] * 5), event_id="evt-1")


def test_synthetic_three_pointer_updates_score_and_player() -> None:
    home, away = _roster("home"), _roster("away")
    state = _state(home, away, Score(home=10, away=8))
    event = GameEvent(
        id="evt-1",
        time=400,
        quarter=2,
        type="score",
        team="home",
        player=home[2].name,
        player_id=home[2].id,
        description=f"{home[2].name} scores 3 points (Three-Pointer)",
        points=3,
    )

    folded = apply_event(state, event)

    assert folded.score == Score(home=13, away=8)
    assert folded.player_stats[home[2].id].points == 3
    assert state.score == Score(home=10, away=8)
    assert state.player_stats[home[2].id].points == 0
    assert folded.events == (event,)


def test_counter_events_increment_matching_stat() -> None:
    home, away = _roster("home"), _roster("away")
    state = _state(home, away)
    actor = away[1]
    for idx, (event_type, stat) in enumerate([("rebound", "rebounds"), ("steal", "steals"), ("block", "blocks"), ("foul", "fouls")]):
        event = GameEvent(id=f"evt-{idx}", time=600, quarter=1, type=event_type, team="away", player=actor.name, player_id=actor.id, description="")
        state = apply_event(state, event)
        assert getattr(state.player_stats[actor.id], stat) == 1
    assert state.score == Score()


def test_timeout_and_substitution_leave_stats_alone() -> None:
    home, away = _roster("home"), _roster("away")
    state = _state(home, away)
    for idx, event_type in enumerate(["timeout", "substitution"]):
        event = GameEvent(id=f"evt-{idx}", time=600, quarter=1, type=event_type, team="home", player=home[0].name, player_id=home[0].id, description="")
        state = apply_event(state, event)
    assert state.player_stats == _state(home, away).player_stats
    assert len(state.events) == 2


def test_event_without_id_resolves_actor_by_name() -> None:
    home, away = _roster("home"), _roster("away")
    state = _state(home, away)
    event = GameEvent(id="evt-1", time=10, quarter=1, type="score", team="away", player=away[3].name, description="", points=2)
    folded = apply_event(state, event, [*home, *away])
    assert folded.player_stats[away[3].id].points == 2
    assert folded.score == Score(home=0, away=2)


@pytest.mark.regression
def test_unresolved_actor_is_a_safe_no_op() -> None:
    home, away = _roster("home"), _roster("away")
    state = _state(home, away)
    foul = GameEvent(id="evt-1", time=10, quarter=1, type="foul", team="home", player="Nobody", description="")
    folded = apply_event(state, foul, [*home, *away])
    assert folded.player_stats == state.player_stats
    assert folded.events == (foul,)

    basket = GameEvent(id="evt-2", time=9, quarter=1, type="score", team="home", player="Nobody", description="", points=2)
    folded = apply_event(folded, basket, [*home, *away])
    assert folded.score == Score(home=2, away=0)
    assert folded.player_stats == state.player_stats


def test_event_feed_is_newest_first_and_capped() -> None:
    home, away = _roster("home"), _roster("away")
    state = _state(home, away)
    for idx in range(25):
        event = GameEvent(id=f"evt-{idx}", time=700 - idx, quarter=1, type="rebound", team="home", player=home[0].name, player_id=home[0].id, description="")
        state = apply_event(state, event)
    assert len(state.events) == 20
    assert state.events[0].id == "evt-24"
    assert state.events[-1].id == "evt-5"
    assert state.player_stats[home[0].id].rebounds == 25


def test_event_rejects_points_outside_scoring() -> None:
    with pytest.raises(ValueError):
        GameEvent(id="x", time=1, quarter=1, type="foul", team="home", player="A", description="", points=2)
    with pytest.raises(ValueError):
        GameEvent(id="x", time=1, quarter=1, type="score", team="home", player="A", description="", points=4)
    with pytest.raises(ValueError):
        GameEvent(id="x", time=1, quarter=1, type="dunk", team="home", player="A", description="")


def test_player_stats_never_decrement() -> None:
    state = _state(_roster("home", 1), _roster("away", 1))
    stats = state.player_stats["home-0"]
    with pytest.raises(ValueError):
        stats.bump("points", -2)
    with pytest.raises(ValueError):
        state.score.add("home", -1)

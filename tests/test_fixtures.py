import json

import pytest

from hoops_live.fixtures import LeagueData


def test_default_fixture_team_and_roster_counts() -> None:
    data = LeagueData()
    teams = data.teams()
    assert len(teams) == 4
    assert all(team.primary_color.startswith("#") for team in teams)
    assert all(team.secondary_color.startswith("#") for team in teams)
    for team in teams:
        roster = data.roster(team.id)
        assert len(roster) == 5
        assert {p.position for p in roster} == {"PG", "SG", "SF", "PF", "C"}
        assert [p.number for p in roster] == sorted(p.number for p in roster)


def test_player_ids_and_names_are_league_unique() -> None:
    players = LeagueData().players()
    assert len({p.id for p in players}) == len(players)
    assert len({p.name for p in players}) == len(players)


def test_every_match_references_known_teams() -> None:
    data = LeagueData()
    for match in data.matches():
        assert data.team(match.home_team_id) is not None
        assert data.team(match.away_team_id) is not None
        assert match.home_team_id != match.away_team_id


def test_match_filters_and_sorting() -> None:
    data = LeagueData()
    lions = data.matches(team_id="lagos-lions")
    assert lions
    assert all(m.involves("lagos-lions") for m in lions)

    completed = data.matches(status="completed")
    assert completed and all(m.status == "completed" for m in completed)
    assert all(m.home_score is not None for m in completed)

    ascending = [m.date for m in data.matches(order="asc")]
    assert ascending == sorted(ascending)
    descending = [m.date for m in data.matches()]
    assert descending == sorted(descending, reverse=True)

    assert len(data.matches(limit=2)) == 2
    venues = [m.venue for m in data.matches(sort_by="venue", order="asc")]
    assert venues == sorted(venues)


def test_player_filters() -> None:
    data = LeagueData()
    centers = data.players(position="c")
    assert len(centers) == 4
    assert all(p.position == "C" for p in centers)
    assert data.players(team_id="accra-hawks", position="PG")[0].name == "Kofi Asante"
    assert data.player("missing") is None
    assert data.team("missing") is None
    assert data.match("missing") is None


@pytest.mark.regression
def test_missing_fixture_reports_error(tmp_path) -> None:
    data = LeagueData(tmp_path / "nope.json")
    assert data.teams() == []
    assert data.matches() == []
    assert "Could not read league fixture" in data.last_load_error


@pytest.mark.regression
def test_malformed_rows_are_skipped(tmp_path) -> None:
    path = tmp_path / "league.json"
    path.write_text(
        json.dumps(
            {
                "teams": [{"id": "a", "name": "Alpha"}, {"name": "No Id"}, "junk"],
                "players": [{"id": "p1", "name": "One", "teamId": "a", "number": "7", "position": "PG"}, {"id": "p2"}],
                "matches": [{"id": "m1", "homeTeamId": "a", "awayTeamId": "b", "date": "2024-01-01", "status": "bogus"}],
            }
        ),
        encoding="utf-8",
    )
    data = LeagueData(path)
    assert [t.id for t in data.teams()] == ["a"]
    assert [p.id for p in data.players()] == ["p1"]
    assert data.player("p1").number == 7
    assert data.match("m1").status == "upcoming"
    assert data.last_load_error == ""


@pytest.mark.regression
def test_non_object_fixture_is_rejected(tmp_path) -> None:
    path = tmp_path / "league.json"
    path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    data = LeagueData(path)
    assert data.teams() == []
    assert "must be a JSON object" in data.last_load_error


@pytest.mark.regression
def test_non_numeric_player_stats_fall_back_to_zero(tmp_path) -> None:
    path = tmp_path / "league.json"
    path.write_text(
        json.dumps(
            {
                "teams": [{"id": "a", "name": "Alpha", "stats": {"wins": "x", "losses": 2, "streak": -3, "streak_type": "?"}}],
                "players": [
                    {"id": "p1", "name": "One", "teamId": "a", "stats": {"ppg": "n/a", "rpg": None, "apg": "4.5"}},
                    {"id": "p2", "name": "Two", "teamId": "a", "stats": {"ppg": 12.5}},
                ],
            }
        ),
        encoding="utf-8",
    )
    data = LeagueData(path)
    one = data.player("p1")
    assert (one.ppg, one.rpg, one.apg) == (0.0, 0.0, 4.5)
    assert [p.id for p in data.top_scorers(5)] == ["p2", "p1"]

    alpha = data.team("a")
    assert alpha.stats.wins == 0
    assert alpha.stats.losses == 2
    assert alpha.stats.streak_type == "L"
    assert data.win_streak("a") == {"type": "L", "count": 3}
    assert data.win_streak("missing") == {"type": "L", "count": 0}


def test_season_stats_and_standings_order() -> None:
    data = LeagueData()
    lions = data.team("lagos-lions")
    assert lions.stats.games_played == 12
    assert lions.stats.streak_label == "W3"
    assert [t.id for t in data.standings()][:2] == ["lagos-lions", "dakar-thunder"]
    assert LeagueData(data.path).league["season"] == "2024-25"


def test_unknown_sort_keys_use_the_default_order() -> None:
    data = LeagueData()
    assert data.matches(sort_by="bogus") == data.matches(sort_by="date")
    assert data.teams(sort_by="bogus") == data.teams(sort_by="wins")
    assert data.players(sort_by="bogus") == data.players(sort_by="points")
    assert [t.id for t in data.teams()] == ["lagos-lions", "accra-hawks", "dakar-thunder", "abidjan-elephants"]

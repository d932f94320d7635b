from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .app import build_simulation
from .config import SimulationConfig
from .fixtures import LeagueData
from .live import LiveGameSimulator
from .models import POSITIONS, Match, Team

logger = logging.getLogger(__name__)


class SessionOptions(BaseModel):
    seed: int | None = None
    game_speed: float | None = None
    quarter_length: int | None = None


class ResetSelection(BaseModel):
    clear_stats: bool = False


class LiveService:
    def __init__(
        self,
        data: LeagueData | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.data = data or LeagueData()
        self._loop = loop
        self.sessions: dict[str, LiveGameSimulator] = {}

    def _team_or_404(self, team_id: str) -> Team:
        team = self.data.team(team_id)
        if team is None:
            raise HTTPException(status_code=404, detail="Team not found")
        return team

    def _match_or_404(self, match_id: str) -> Match:
        match = self.data.match(match_id)
        if match is None:
            raise HTTPException(status_code=404, detail="Match not found")
        return match

    def _session_or_404(self, match_id: str) -> LiveGameSimulator:
        sim = self.sessions.get(match_id)
        if sim is None:
            raise HTTPException(status_code=404, detail="No live simulation for this match")
        return sim

    def teams(self, sort_by: str = "wins", order: str = "desc", limit: int | None = None) -> dict[str, Any]:
        rows = self.data.teams(sort_by=sort_by, order=order, limit=limit)
        return {
            "teams": [team.to_dict() for team in rows],
            "total": len(rows),
            "filters": {"sortBy": sort_by, "order": order},
        }

    def team(self, team_id: str) -> dict[str, Any]:
        team = self._team_or_404(team_id)
        payload = team.to_dict()
        payload["roster"] = [p.to_dict() for p in self.data.roster(team.id)]
        return payload

    def players(
        self,
        team_id: str | None = None,
        position: str | None = None,
        sort_by: str = "points",
        order: str = "desc",
        limit: int | None = None,
    ) -> dict[str, Any]:
        if position and position.upper() not in POSITIONS:
            raise HTTPException(status_code=400, detail=f"Unknown position '{position}'")
        rows = self.data.players(team_id=team_id, position=position, sort_by=sort_by, order=order, limit=limit)
        return {
            "players": [p.to_dict() for p in rows],
            "total": len(rows),
            "filters": {"teamId": team_id, "position": position, "sortBy": sort_by, "order": order},
        }

    def player(self, player_id: str) -> dict[str, Any]:
        player = self.data.player(player_id)
        if player is None:
            raise HTTPException(status_code=404, detail="Player not found")
        payload = player.to_dict()
        team = self.data.team(player.team_id)
        payload["team"] = team.to_dict() if team is not None else None
        return payload

    def standings(self) -> dict[str, Any]:
        rows = []
        for position, team in enumerate(self.data.standings(), start=1):
            row = team.to_dict()
            row["position"] = position
            row["averages"] = {"ppg": team.stats.points_per_game, "oppg": team.stats.points_allowed_per_game}
            row["streak"] = self.data.win_streak(team.id)
            rows.append(row)
        return {"league": self.data.league, "standings": rows}

    def top_scorers(self, limit: int = 10) -> list[dict[str, Any]]:
        rows = []
        for player in self.data.top_scorers(limit):
            payload = player.to_dict()
            team = self.data.team(player.team_id)
            payload["teamName"] = team.name if team is not None else "Unknown Team"
            rows.append(payload)
        return rows

    def matches(
        self,
        team_id: str | None = None,
        status: str | None = None,
        sort_by: str = "date",
        order: str = "desc",
        limit: int | None = None,
    ) -> dict[str, Any]:
        rows = self.data.matches(team_id=team_id, status=status, sort_by=sort_by, order=order, limit=limit)
        return {
            "matches": [m.to_dict() for m in rows],
            "total": len(rows),
            "filters": {"teamId": team_id, "status": status, "sortBy": sort_by, "order": order},
        }

    def _snapshot(self, match_id: str, sim: LiveGameSimulator) -> dict[str, Any]:
        payload = sim.snapshot()
        payload["match_id"] = match_id
        return payload

    def open_session(self, match_id: str, options: SessionOptions | None = None) -> dict[str, Any]:
        existing = self.sessions.get(match_id)
        if existing is not None and not existing.closed:
            return self._snapshot(match_id, existing)

        match = self._match_or_404(match_id)
        home = self._team_or_404(match.home_team_id)
        away = self._team_or_404(match.away_team_id)
        options = options or SessionOptions()
        overrides = {
            key: value
            for key, value in (("game_speed", options.game_speed), ("quarter_length", options.quarter_length))
            if value is not None
        }
        try:
            config = SimulationConfig(**overrides)
            sim = build_simulation(self.data, match, config=config, seed=options.seed, loop=self._loop)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        self.sessions[match_id] = sim
        logger.info("Opened live simulation for match %s (%s vs %s)", match_id, home.name, away.name)
        return self._snapshot(match_id, sim)

    def snapshot(self, match_id: str) -> dict[str, Any]:
        return self._snapshot(match_id, self._session_or_404(match_id))

    def play(self, match_id: str) -> dict[str, Any]:
        sim = self._session_or_404(match_id)
        if not sim.play():
            detail = "Game is final" if sim.is_final else "Simulation is already playing"
            raise HTTPException(status_code=409, detail=detail)
        return self._snapshot(match_id, sim)

    def pause(self, match_id: str) -> dict[str, Any]:
        sim = self._session_or_404(match_id)
        if not sim.pause():
            raise HTTPException(status_code=409, detail="Simulation is not playing")
        return self._snapshot(match_id, sim)

    def reset(self, match_id: str, clear_stats: bool = False) -> dict[str, Any]:
        sim = self._session_or_404(match_id)
        sim.reset(clear_stats=clear_stats)
        return self._snapshot(match_id, sim)

    def close_session(self, match_id: str) -> dict[str, Any]:
        sim = self.sessions.pop(match_id, None)
        if sim is None:
            raise HTTPException(status_code=404, detail="No live simulation for this match")
        sim.close()
        return {"ok": True, "match_id": match_id}

    def close_all(self) -> None:
        while self.sessions:
            _match_id, sim = self.sessions.popitem()
            sim.close()


service = LiveService()
app = FastAPI(title="WABL Live API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("shutdown")
def _shutdown_sessions() -> None:
    service.close_all()


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/teams")
def teams(sort_by: str = "wins", order: str = "desc", limit: int | None = None) -> dict[str, Any]:
    return service.teams(sort_by=sort_by, order=order, limit=limit)


@app.get("/api/teams/{team_id}")
def team(team_id: str) -> dict[str, Any]:
    return service.team(team_id)


@app.get("/api/players")
def players(
    team: str | None = None,
    position: str | None = None,
    sort_by: str = "points",
    order: str = "desc",
    limit: int | None = None,
) -> dict[str, Any]:
    return service.players(team_id=team, position=position, sort_by=sort_by, order=order, limit=limit)


@app.get("/api/players/{player_id}")
def player(player_id: str) -> dict[str, Any]:
    return service.player(player_id)


@app.get("/api/standings")
def standings() -> dict[str, Any]:
    return service.standings()


@app.get("/api/top-scorers")
def top_scorers(limit: int = 10) -> list[dict[str, Any]]:
    return service.top_scorers(limit)


@app.get("/api/matches")
def matches(
    team: str | None = None,
    status: str | None = None,
    sort_by: str = "date",
    order: str = "desc",
    limit: int | None = None,
) -> dict[str, Any]:
    return service.matches(team_id=team, status=status, sort_by=sort_by, order=order, limit=limit)


# Live routes run on the event loop so the tick scheduler shares it.
@app.post("/api/live/{match_id}")
async def open_live(match_id: str, payload: SessionOptions | None = None) -> dict[str, Any]:
    return service.open_session(match_id, payload)


@app.get("/api/live/{match_id}")
async def live_snapshot(match_id: str) -> dict[str, Any]:
    return service.snapshot(match_id)


@app.post("/api/live/{match_id}/play")
async def live_play(match_id: str) -> dict[str, Any]:
    return service.play(match_id)


@app.post("/api/live/{match_id}/pause")
async def live_pause(match_id: str) -> dict[str, Any]:
    return service.pause(match_id)


@app.post("/api/live/{match_id}/reset")
async def live_reset(match_id: str, payload: ResetSelection | None = None) -> dict[str, Any]:
    return service.reset(match_id, clear_stats=bool(payload and payload.clear_stats))


@app.delete("/api/live/{match_id}")
async def live_close(match_id: str) -> dict[str, Any]:
    return service.close_session(match_id)

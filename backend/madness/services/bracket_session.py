"""
Interactive bracket session: one state machine, one store key, best-effort writes.

load():   fetch regions -> build graph -> restore winners + undo stack -> swap in.
          Any failure raises BracketLoadError and keeps the previous graph/state.
pick/undo/reset: mutate in memory first, then persist both blobs in one
          set_many(), undo stack before winners. A partial write leaves at worst
          a newer undo stack beside older winners. A failed write is logged
          and reported, never rolled back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from madness.services.blob_store import BlobStore
from madness.services.bracket_graph import (
    BracketGraph,
    GameNode,
    build_bracket_graph,
)
from madness.services.bracket_state import UNDO_LIMIT, BracketStateMachine
from madness.services.seeder import SEEDS_PER_REGION, Region, SeededTeam

logger = logging.getLogger(__name__)

WINNERS_SUFFIX = "winners"
UNDO_SUFFIX = "undo"


class BracketLoadError(RuntimeError):
    """Seed data could not be fetched, built, or restored."""


class BracketNotLoadedError(RuntimeError):
    """An action was attempted before load() succeeded."""


@dataclass
class ActionResult:
    changed: bool
    persisted: bool = True
    error: Optional[str] = None


class BracketSession:
    def __init__(self, store: BlobStore, session_key: str, undo_limit: int = UNDO_LIMIT):
        self.store = store
        self.session_key = session_key
        self.undo_limit = undo_limit
        self.machine: Optional[BracketStateMachine] = None

    @property
    def winners_key(self) -> str:
        return f"{self.session_key}:{WINNERS_SUFFIX}"

    @property
    def undo_key(self) -> str:
        return f"{self.session_key}:{UNDO_SUFFIX}"

    @property
    def graph(self) -> BracketGraph:
        return self._require_machine().graph

    def _require_machine(self) -> BracketStateMachine:
        if self.machine is None:
            raise BracketNotLoadedError(f"Bracket session '{self.session_key}' is not loaded")
        return self.machine

    def load(
        self,
        fetch_regions: Callable[[], Sequence[Region]],
        seeds_per_region: int = SEEDS_PER_REGION,
    ) -> BracketStateMachine:
        """Build a fresh graph and restore persisted picks by game id."""
        try:
            regions = fetch_regions()
            graph = build_bracket_graph(regions, seeds_per_region)
            machine = BracketStateMachine(graph, undo_limit=self.undo_limit)
            restored = machine.restore(self.store.get(self.winners_key))
            depth = machine.load_undo_stack(self.store.get(self.undo_key))
        except Exception as exc:
            logger.exception("Failed to load bracket session %s", self.session_key)
            raise BracketLoadError(str(exc)) from exc

        self.machine = machine
        logger.info(
            "Loaded bracket session %s: %d games, %d picks restored, undo depth %d",
            self.session_key, len(graph.games), restored, depth,
        )
        return machine

    def pick(self, game_id: str, team_id: int) -> ActionResult:
        changed = self._require_machine().pick_winner(game_id, team_id)
        if not changed:
            return ActionResult(changed=False)
        return self._persist()

    def undo(self) -> ActionResult:
        changed = self._require_machine().undo()
        if not changed:
            return ActionResult(changed=False)
        return self._persist()

    def reset(self) -> ActionResult:
        self._require_machine().reset()
        return self._persist()

    def _persist(self) -> ActionResult:
        machine = self._require_machine()
        try:
            self.store.set_many({
                self.undo_key: machine.dump_undo_stack(),
                self.winners_key: machine.snapshot(),
            })
        except Exception as exc:
            logger.warning("Bracket session %s not persisted: %s", self.session_key, exc)
            return ActionResult(changed=True, persisted=False, error=str(exc))
        return ActionResult(changed=True)

    # ── Read-only view ───────────────────────────────────────────────────

    def view(self) -> Dict[str, Any]:
        """Render-neutral dict of every game with resolved occupants."""
        machine = self._require_machine()
        graph = machine.graph

        def team_view(team: Optional[SeededTeam]) -> Optional[Dict[str, Any]]:
            if team is None:
                return None
            return {
                "id": team.team_id,
                "title": team.title,
                "seed": team.seed,
                "region": team.region,
                "overall_rank": team.overall_rank,
            }

        def game_view(game: GameNode) -> Dict[str, Any]:
            team_a, team_b = machine.occupants(game.id)
            return {
                "id": game.id,
                "round_type": game.round_type,
                "region": game.region,
                "slot": game.slot,
                "team_a": team_view(team_a),
                "team_b": team_view(team_b),
                "source_game_a_id": game.source_game_a_id,
                "source_game_b_id": game.source_game_b_id,
                "winner_id": machine.winner_of(game.id),
            }

        regions: List[Dict[str, Any]] = []
        for region in graph.regions:
            rounds = graph.region_game_ids.get(region.name, {})
            regions.append({
                "name": region.name,
                "rounds": [
                    {
                        "round_type": round_type,
                        "games": [game_view(graph.games[gid]) for gid in game_ids],
                    }
                    for round_type, game_ids in rounds.items()
                ],
            })

        cross_rounds = [
            {
                "round_type": round_type,
                "games": [game_view(graph.games[gid]) for gid in game_ids],
            }
            for round_type, game_ids in graph.cross_game_ids.items()
        ]

        champion_id = graph.championship_id()
        champion = graph.winner_team(champion_id, machine.winners) if champion_id else None

        return {
            "session_key": self.session_key,
            "regions": regions,
            "cross_rounds": cross_rounds,
            "champion": team_view(champion),
            "undo_depth": len(machine.state.undo_stack),
        }

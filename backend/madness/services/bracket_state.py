"""
Interactive bracket state: winner picks, cascading invalidation, undo.

The winner map (game id -> team id or None) is the only mutable state.
Undo entries are full copies of that map, never deltas.

Guarantees:
  - Invalid picks and empty undos change nothing and return False
  - A pick and the invalidation it triggers are one undo step
  - Invalidation never pushes undo entries
"""
from __future__ import annotations

import json
import logging
from collections import deque
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional, Union

from madness.services.bracket_graph import BracketGraph

logger = logging.getLogger(__name__)

UNDO_LIMIT = 50

WinnerMap = Dict[str, Optional[int]]

_INVALID = object()


def _coerce_winner(value: Any) -> Any:
    """Return a valid winner value, or _INVALID for anything else."""
    if value is None:
        return None
    if isinstance(value, bool):
        return _INVALID
    if isinstance(value, int):
        return value
    return _INVALID


def _parse_map(blob: Union[str, bytes, Mapping[str, Any], None]) -> Dict[str, Any]:
    """Decode a winner-map blob. Malformed input decodes to an empty map."""
    if blob is None:
        return {}
    if isinstance(blob, Mapping):
        return dict(blob)
    try:
        data = json.loads(blob)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed winner map blob")
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring winner map blob of type %s", type(data).__name__)
        return {}
    return data


class BracketState:
    """Winner map plus a bounded stack of full-map snapshots."""

    def __init__(self, game_ids: Iterable[str], undo_limit: int = UNDO_LIMIT):
        self.winners: WinnerMap = {gid: None for gid in game_ids}
        self.undo_limit = undo_limit
        # deque(maxlen) drops the oldest entry on overflow
        self.undo_stack: Deque[WinnerMap] = deque(maxlen=undo_limit)

    def copy_winners(self) -> WinnerMap:
        return dict(self.winners)

    def push_undo(self) -> None:
        self.undo_stack.append(self.copy_winners())


class BracketStateMachine:
    def __init__(self, graph: BracketGraph, state: Optional[BracketState] = None,
                 undo_limit: int = UNDO_LIMIT):
        self.graph = graph
        self.state = state if state is not None else BracketState(graph.game_ids(), undo_limit)

    @property
    def winners(self) -> WinnerMap:
        return self.state.winners

    def winner_of(self, game_id: str) -> Optional[int]:
        return self.state.winners.get(game_id)

    def occupants(self, game_id: str):
        return self.graph.resolve_occupants(game_id, self.state.winners)

    def can_pick(self, game_id: str, team_id: int) -> bool:
        if game_id not in self.graph:
            return False
        team_a, team_b = self.occupants(game_id)
        if team_a is None or team_b is None:
            return False
        return team_id in (team_a.team_id, team_b.team_id)

    def pick_winner(self, game_id: str, team_id: int) -> bool:
        """Pick (or un-pick) a winner. Returns False and changes nothing if invalid."""
        if not self.can_pick(game_id, team_id):
            return False

        self.state.push_undo()

        if self.state.winners.get(game_id) == team_id:
            self.state.winners[game_id] = None
        else:
            self.state.winners[game_id] = team_id

        self.cascading_invalidate(game_id)
        return True

    def cascading_invalidate(self, game_id: str) -> int:
        """Clear every transitive dependent's winner. Returns how many were set."""
        cleared = 0
        for down in self.graph.iter_transitive_dependents(game_id):
            if self.state.winners.get(down) is not None:
                cleared += 1
            self.state.winners[down] = None
        return cleared

    def undo(self) -> bool:
        if not self.state.undo_stack:
            return False
        snapshot = self.state.undo_stack.pop()
        self._overwrite(snapshot)
        return True

    def reset(self) -> None:
        for gid in self.state.winners:
            self.state.winners[gid] = None
        self.state.undo_stack.clear()

    def _overwrite(self, snapshot: Mapping[str, Any]) -> None:
        for gid in self.state.winners:
            value = _coerce_winner(snapshot.get(gid))
            self.state.winners[gid] = None if value is _INVALID else value

    # ── Persistence blobs ────────────────────────────────────────────────

    def snapshot(self) -> str:
        """Serialize the complete winner map."""
        return json.dumps(self.state.winners, sort_keys=True)

    def restore(self, blob: Union[str, bytes, Mapping[str, Any], None]) -> int:
        """Apply a serialized winner map. Only ids known to this graph are applied.

        Winners are not checked against current occupants, so picks restored
        after a reseed attach to whatever game now carries the same id.
        Returns the number of entries applied.
        """
        applied = 0
        for gid, raw in _parse_map(blob).items():
            if gid not in self.state.winners:
                continue
            value = _coerce_winner(raw)
            if value is _INVALID:
                continue
            self.state.winners[gid] = value
            applied += 1
        return applied

    def dump_undo_stack(self) -> str:
        return json.dumps(list(self.state.undo_stack), sort_keys=True)

    def load_undo_stack(self, blob: Union[str, bytes, None]) -> int:
        """Replace the undo stack from a JSON list of winner maps.

        Non-dict entries are skipped; only the newest ``undo_limit`` are kept.
        Returns the resulting stack depth.
        """
        self.state.undo_stack.clear()
        if not blob:
            return 0
        try:
            data = json.loads(blob)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed undo stack blob")
            return 0
        if not isinstance(data, list):
            logger.warning("Ignoring undo stack blob of type %s", type(data).__name__)
            return 0
        entries: List[WinnerMap] = [entry for entry in data if isinstance(entry, dict)]
        for entry in entries:
            self.state.undo_stack.append(entry)
        return len(self.state.undo_stack)

"""
Bracket graph: seeded regions -> acyclic graph of games + dependency index.

Leaf games hold two team references. Every other game holds two upstream
game ids; its occupants are the winners of those games and are never
stored, only resolved on demand from a winner map.

Game ids:
  <region>-r64-<i>, <region>-r32-<i>, <region>-s16-<i>, <region>-e8-0
  ff-0, ff-1, final-0
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

from madness.services.seeder import SEEDS_PER_REGION, Region, SeededTeam

ROUND_64 = "round64"
ROUND_32 = "round32"
SWEET_16 = "sweet16"
ELITE_8 = "elite8"
FINAL_FOUR = "finalFour"
CHAMPIONSHIP = "championship"

# Region rounds listed from the region final backwards: (round_type, id token)
REGION_ROUNDS_FROM_FINAL: List[Tuple[str, str]] = [
    (ELITE_8, "e8"),
    (SWEET_16, "s16"),
    (ROUND_32, "r32"),
    (ROUND_64, "r64"),
]
CROSS_ROUNDS_FROM_FINAL: List[Tuple[str, str]] = [
    (CHAMPIONSHIP, "final"),
    (FINAL_FOUR, "ff"),
]

MAX_DEPTH = 7

# Fixed NCAA first-round order for 16-seed regions
ROUND1_PAIRINGS: List[Tuple[int, int]] = [
    (1, 16),
    (8, 9),
    (5, 12),
    (4, 13),
    (6, 11),
    (3, 14),
    (7, 10),
    (2, 15),
]

SUPPORTED_REGION_COUNTS = (1, 2, 4)
SUPPORTED_SEED_COUNTS = (2, 4, 8, 16)


class BracketConstructionError(ValueError):
    """Seed/team data that cannot form a bracket."""


@dataclass(frozen=True)
class GameNode:
    id: str
    round_type: str
    slot: int  # index within its round (and region, for region rounds)
    region: Optional[str] = None
    team_a: Optional[SeededTeam] = None
    team_b: Optional[SeededTeam] = None
    source_game_a_id: Optional[str] = None
    source_game_b_id: Optional[str] = None

    @property
    def is_leaf(self) -> bool:
        return self.source_game_a_id is None and self.source_game_b_id is None

    def upstream_ids(self) -> Tuple[str, ...]:
        return tuple(g for g in (self.source_game_a_id, self.source_game_b_id) if g is not None)


@dataclass
class BracketGraph:
    """Id-addressed arena of games plus the reverse dependency index."""

    regions: List[Region]
    games: Dict[str, GameNode]
    dependents: Dict[str, Tuple[str, ...]]
    teams_by_id: Dict[int, SeededTeam]
    region_game_ids: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    cross_game_ids: Dict[str, List[str]] = field(default_factory=dict)

    def __contains__(self, game_id: object) -> bool:
        return game_id in self.games

    def game_ids(self) -> List[str]:
        return list(self.games.keys())

    def edges(self) -> Set[Tuple[str, str]]:
        """Every (upstream, downstream) pair in the index."""
        return {(up, down) for up, downs in self.dependents.items() for down in downs}

    def winner_team(
        self, game_id: str, winners: Mapping[str, Optional[int]]
    ) -> Optional[SeededTeam]:
        game = self.games.get(game_id)
        if game is None:
            return None
        winner_id = winners.get(game_id)
        if winner_id is None:
            return None
        if game.is_leaf:
            for team in (game.team_a, game.team_b):
                if team is not None and team.team_id == winner_id:
                    return team
            return None
        return self.teams_by_id.get(winner_id)

    def resolve_occupants(
        self, game_id: str, winners: Mapping[str, Optional[int]]
    ) -> Tuple[Optional[SeededTeam], Optional[SeededTeam]]:
        """Current (side A, side B) of a game. None means TBD/empty."""
        game = self.games.get(game_id)
        if game is None:
            return None, None
        if game.is_leaf:
            return game.team_a, game.team_b
        team_a = self.winner_team(game.source_game_a_id, winners) if game.source_game_a_id else None
        team_b = self.winner_team(game.source_game_b_id, winners) if game.source_game_b_id else None
        return team_a, team_b

    def iter_transitive_dependents(self, game_id: str) -> Iterator[str]:
        stack = list(self.dependents.get(game_id, ()))
        seen: Set[str] = set()
        while stack:
            down = stack.pop()
            if down in seen:
                continue
            seen.add(down)
            yield down
            stack.extend(self.dependents.get(down, ()))

    def depth(self, game_id: str) -> int:
        """Number of rounds from the leaves up to and including this game."""
        game = self.games[game_id]
        if game.is_leaf:
            return 1
        return 1 + max(self.depth(up) for up in game.upstream_ids())

    def championship_id(self) -> Optional[str]:
        """The single game nothing depends on."""
        sinks = [gid for gid in self.games if not self.dependents.get(gid)]
        return sinks[0] if len(sinks) == 1 else None


def bracket_fold_positions(n: int) -> List[int]:
    """Standard bracket-fold positions for *n* entries.

    Consecutive pairs indicate which seeds meet first:
      2-entry -> [1, 2]
      4-entry -> [1, 4, 2, 3]
      8-entry -> [1, 8, 4, 5, 3, 6, 2, 7]
    """
    if n == 2:
        return [1, 2]

    half = bracket_fold_positions(n // 2)

    expanded: List[int] = []
    for s in half:
        expanded.append(s)
        expanded.append(n + 1 - s)

    mid = len(expanded) // 2
    top = expanded[:mid]
    bot = expanded[mid:]
    if len(bot) >= 4:
        bot = bot[:-4] + bot[-2:] + bot[-4:-2]

    return top + bot


def first_round_pairings(seeds_per_region: int) -> List[Tuple[int, int]]:
    if seeds_per_region == SEEDS_PER_REGION:
        return list(ROUND1_PAIRINGS)
    positions = bracket_fold_positions(seeds_per_region)
    return [(positions[i], positions[i + 1]) for i in range(0, len(positions), 2)]


def _round_count(n: int) -> int:
    count = 0
    while n > 1:
        n //= 2
        count += 1
    return count


def _validate_regions(regions: Sequence[Region], seeds_per_region: int) -> Dict[int, SeededTeam]:
    if len(regions) not in SUPPORTED_REGION_COUNTS:
        raise BracketConstructionError(
            f"Unsupported region count {len(regions)}; expected one of {SUPPORTED_REGION_COUNTS}"
        )
    if seeds_per_region not in SUPPORTED_SEED_COUNTS:
        raise BracketConstructionError(
            f"Unsupported seeds per region {seeds_per_region}; expected one of {SUPPORTED_SEED_COUNTS}"
        )

    names = [r.name for r in regions]
    if len(set(names)) != len(names):
        raise BracketConstructionError(f"Duplicate region names: {names}")

    teams_by_id: Dict[int, SeededTeam] = {}
    for region in regions:
        seen_seeds: Set[int] = set()
        for team in region.teams:
            if not 1 <= team.seed <= seeds_per_region:
                raise BracketConstructionError(
                    f"Seed {team.seed} out of range 1..{seeds_per_region} in region '{region.name}'"
                )
            if team.seed in seen_seeds:
                raise BracketConstructionError(
                    f"Duplicate seed {team.seed} in region '{region.name}'"
                )
            if team.team_id in teams_by_id:
                raise BracketConstructionError(f"Team {team.team_id} appears more than once")
            seen_seeds.add(team.seed)
            teams_by_id[team.team_id] = team
    return teams_by_id


def build_bracket_graph(
    regions: Sequence[Region],
    seeds_per_region: int = SEEDS_PER_REGION,
) -> BracketGraph:
    """Build the full game graph for seeded regions.

    Raises BracketConstructionError before returning anything if the
    regions cannot form a bracket.
    """
    teams_by_id = _validate_regions(regions, seeds_per_region)

    games: Dict[str, GameNode] = {}
    dependents: Dict[str, List[str]] = {}

    def add_internal(game_id: str, round_type: str, slot: int, a_id: str, b_id: str,
                     region: Optional[str] = None) -> None:
        games[game_id] = GameNode(
            id=game_id,
            round_type=round_type,
            slot=slot,
            region=region,
            source_game_a_id=a_id,
            source_game_b_id=b_id,
        )
        dependents.setdefault(a_id, []).append(game_id)
        dependents.setdefault(b_id, []).append(game_id)

    region_round_count = _round_count(seeds_per_region)
    region_rounds = list(reversed(REGION_ROUNDS_FROM_FINAL[:region_round_count]))
    pairings = first_round_pairings(seeds_per_region)

    region_game_ids: Dict[str, Dict[str, List[str]]] = {}
    region_finals: List[str] = []

    for region in regions:
        by_seed = region.by_seed()
        rounds: Dict[str, List[str]] = {}

        leaf_type, leaf_token = region_rounds[0]
        leaf_ids: List[str] = []
        for i, (seed_a, seed_b) in enumerate(pairings):
            game_id = f"{region.name}-{leaf_token}-{i}"
            games[game_id] = GameNode(
                id=game_id,
                round_type=leaf_type,
                slot=i,
                region=region.name,
                team_a=by_seed.get(seed_a),
                team_b=by_seed.get(seed_b),
            )
            leaf_ids.append(game_id)
        rounds[leaf_type] = leaf_ids

        previous = leaf_ids
        for round_type, token in region_rounds[1:]:
            current: List[str] = []
            for i in range(len(previous) // 2):
                game_id = f"{region.name}-{token}-{i}"
                add_internal(game_id, round_type, i, previous[i * 2], previous[i * 2 + 1], region.name)
                current.append(game_id)
            rounds[round_type] = current
            previous = current

        region_game_ids[region.name] = rounds
        region_finals.append(previous[0])

    cross_round_count = _round_count(len(regions))
    cross_rounds = list(reversed(CROSS_ROUNDS_FROM_FINAL[:cross_round_count]))
    cross_game_ids: Dict[str, List[str]] = {}

    previous = region_finals
    for round_type, token in cross_rounds:
        current = []
        for i in range(len(previous) // 2):
            game_id = f"{token}-{i}"
            add_internal(game_id, round_type, i, previous[i * 2], previous[i * 2 + 1])
            current.append(game_id)
        cross_game_ids[round_type] = current
        previous = current

    graph = BracketGraph(
        regions=list(regions),
        games=games,
        dependents={gid: tuple(downs) for gid, downs in dependents.items()},
        teams_by_id=teams_by_id,
        region_game_ids=region_game_ids,
        cross_game_ids=cross_game_ids,
    )

    champion_id = graph.championship_id()
    if champion_id is None:
        raise BracketConstructionError("Bracket has no single championship game")
    depth = graph.depth(champion_id)
    if depth > MAX_DEPTH:
        raise BracketConstructionError(f"Bracket depth {depth} exceeds {MAX_DEPTH} rounds")
    return graph

"""
Banded seeding: ranked entries -> named regions of seeded teams.

For seed s, the band ranked[(s-1)*R : s*R] (R = number of regions) is dealt
one entry per region in declared region order. A region's seed-s team
always comes from band s. Short inputs leave later seeds empty.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from madness.services.score_aggregator import ScoredEntry

DEFAULT_REGION_NAMES: List[str] = ["Bracket A", "Bracket B", "Bracket C", "Bracket D"]
SEEDS_PER_REGION = 16


@dataclass(frozen=True)
class SeededTeam(ScoredEntry):
    region: str
    seed: int

    @property
    def team_id(self) -> int:
        return self.option_id


@dataclass
class Region:
    name: str
    teams: List[SeededTeam] = field(default_factory=list)

    def by_seed(self) -> Dict[int, SeededTeam]:
        return {t.seed: t for t in self.teams}

    def team_for_seed(self, seed: int) -> Optional[SeededTeam]:
        return self.by_seed().get(seed)


def band(ranked: Sequence[ScoredEntry], seed: int, band_size: int) -> List[ScoredEntry]:
    start = (seed - 1) * band_size
    return list(ranked[start:start + band_size])


def seed_regions(
    ranked: Sequence[ScoredEntry],
    region_names: Sequence[str] = DEFAULT_REGION_NAMES,
    seeds_per_region: int = SEEDS_PER_REGION,
) -> List[Region]:
    """Distribute ranked entries into regions by banded round-robin.

    Args:
        ranked: Entries in overall rank order (best first)
        region_names: Region names in deal order
        seeds_per_region: Highest seed handed out; entries past the last band are dropped

    Returns:
        Regions in declared order, each with teams sorted by seed
    """
    regions = [Region(name=name) for name in region_names]
    band_size = len(regions)

    for seed in range(1, seeds_per_region + 1):
        for region_index, entry in enumerate(band(ranked, seed, band_size)):
            region = regions[region_index]
            region.teams.append(SeededTeam(
                option_id=entry.option_id,
                title=entry.title,
                votes=entry.votes,
                avg_points=entry.avg_points,
                avg_rank=entry.avg_rank,
                overall_rank=entry.overall_rank,
                region=region.name,
                seed=seed,
            ))

    for region in regions:
        region.teams.sort(key=lambda t: t.seed)
    return regions

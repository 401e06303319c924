"""
Position -> points attribution and the per-import points accumulator.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

# Fixed points table; any position outside it attributes 0
POINTS_TABLE: Dict[int, int] = {
    1: 100,
    2: 75,
    3: 50,
    4: 50,
    **{position: 25 for position in range(5, 9)},
    **{position: 15 for position in range(9, 17)},
}

POSITION_LABELS: Dict[int, str] = {
    1: "Winner",
    2: "Runner-Up",
    **{position: "Semifinal" for position in (3, 4)},
    **{position: "Quarter Final" for position in range(5, 9)},
    **{position: "Pre-Quarter" for position in range(9, 17)},
}


def points_for_position(position) -> int:
    """Points attributed for a finishing position (0 when off the table)"""
    if position is None:
        return 0
    return POINTS_TABLE.get(position, 0)


def position_label(position) -> str:
    """Display label for a position; unknown positions display as the number"""
    if position is None:
        return ""
    return POSITION_LABELS.get(position, str(position))


@dataclass
class PointsDelta:
    """Points one player earned in one category within the current import."""
    player: object
    category: object
    points: int = 0
    positions: List[int] = field(default_factory=list)

    @property
    def best_position(self) -> int:
        placed = [p for p in self.positions if p > 0]
        return min(placed) if placed else 0


class PointsAccumulator:
    """
    Accumulates deltas keyed by (player, category) so that a player appearing
    several times in one category is written to the ledger once.

    Keys are the entity objects themselves: the identity cache guarantees one
    instance per external id, and staged entities have no primary key yet.
    """

    def __init__(self):
        self._deltas: Dict[Tuple[int, int], PointsDelta] = {}

    def attribute(self, player, category, position: int) -> int:
        points = points_for_position(position)
        key = (id(player), id(category))
        delta = self._deltas.get(key)
        if delta is None:
            delta = PointsDelta(player=player, category=category)
            self._deltas[key] = delta
        delta.points += points
        delta.positions.append(position)
        return points

    def __iter__(self) -> Iterator[PointsDelta]:
        return iter(self._deltas.values())

    def __len__(self) -> int:
        return len(self._deltas)

    def total_for(self, player) -> int:
        return sum(d.points for d in self._deltas.values() if d.player is player)

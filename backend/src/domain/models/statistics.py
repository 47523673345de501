"""
Report-only statistics models.
Derived from the event ledger on demand; never persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from .base import TeamSide


class XGPerformance(str, Enum):
    """How a side's actual goals compare with its expected goals."""
    OVERPERFORMED = "overperformed"
    UNDERPERFORMED = "underperformed"


@dataclass
class TeamEventCounts:
    """Per-side event counts shown in the report summary table."""
    goals: int = 0
    shots: int = 0
    fouls: int = 0
    corners: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    offsides: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'goals': self.goals,
            'shots': self.shots,
            'fouls': self.fouls,
            'corners': self.corners,
            'yellowCards': self.yellow_cards,
            'redCards': self.red_cards,
            'offsides': self.offsides,
        }


@dataclass
class EventSummary:
    """Event counts for both sides of a (possibly aggregated) match."""
    home: TeamEventCounts = field(default_factory=TeamEventCounts)
    away: TeamEventCounts = field(default_factory=TeamEventCounts)

    def for_side(self, side: TeamSide) -> TeamEventCounts:
        return self.home if side is TeamSide.HOME else self.away

    def to_dict(self) -> Dict[str, Any]:
        return {'home': self.home.to_dict(), 'away': self.away.to_dict()}


@dataclass
class TeamXG:
    """Expected goals totals per side."""
    home: float = 0.0
    away: float = 0.0

    def add(self, side: TeamSide, value: float) -> None:
        if side is TeamSide.HOME:
            self.home += value
        else:
            self.away += value

    def for_side(self, side: TeamSide) -> float:
        return self.home if side is TeamSide.HOME else self.away

    def performance(self, side: TeamSide, actual_goals: int) -> XGPerformance:
        """A side underperformed when its xG exceeds the goals it scored."""
        if self.for_side(side) > actual_goals:
            return XGPerformance.UNDERPERFORMED
        return XGPerformance.OVERPERFORMED

    def to_dict(self) -> Dict[str, float]:
        return {'home': round(self.home, 2), 'away': round(self.away, 2)}


@dataclass
class HeatGrid:
    """
    Event counts binned over the percentage pitch.
    ``cells[row][column]``; row 0 is the top edge, column 0 the left edge.
    """
    columns: int
    rows: int
    cells: List[List[int]]

    @property
    def total(self) -> int:
        return sum(sum(row) for row in self.cells)

    @property
    def peak(self) -> int:
        return max((max(row) for row in self.cells), default=0)

    def density(self, row: int, column: int) -> float:
        """Cell count relative to the busiest cell, in [0, 1]."""
        peak = self.peak
        return self.cells[row][column] / peak if peak else 0.0

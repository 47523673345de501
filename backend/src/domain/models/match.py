"""
Match domain model.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import BaseEntity, MatchHalf, TeamSide
from .event import MatchEvent
from .player import Player

BASE_SUBSTITUTION_WINDOW_CAP = 3
EXTENDED_SUBSTITUTION_WINDOW_CAP = 5


@dataclass
class Match(BaseEntity):
    """
    A recorded fixture with its roster and event ledger.

    ``home_score`` and ``away_score`` are a cache of the goal events in
    ``events``; they are recomputed on every append and whenever a match is
    rebuilt, never set independently.
    """
    id: str
    home_team: str
    away_team: str
    start_time: int  # Epoch milliseconds
    leg_number: int = 1
    category: str = ""
    home_score: int = 0
    away_score: int = 0
    current_half: MatchHalf = MatchHalf.FIRST_HALF
    home_substitution_windows: int = 0
    away_substitution_windows: int = 0
    substitution_window_cap: int = BASE_SUBSTITUTION_WINDOW_CAP
    events: List[MatchEvent] = field(default_factory=list)
    players: List[Player] = field(default_factory=list)
    match_length: Optional[int] = None  # Minutes, both halves
    age_category: Optional[str] = None

    def __post_init__(self):
        self.current_half = MatchHalf.from_value(self.current_half)
        self.recompute_score()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    def recompute_score(self) -> None:
        """Refresh the score cache from the goal events in the ledger."""
        home = away = 0
        for event in self.events:
            if not event.type.is_scoring:
                continue
            if event.team is TeamSide.HOME:
                home += 1
            else:
                away += 1
        self.home_score = home
        self.away_score = away

    def score_for(self, side: TeamSide) -> int:
        return self.home_score if side is TeamSide.HOME else self.away_score

    def team_name(self, side: TeamSide) -> str:
        return self.home_team if side is TeamSide.HOME else self.away_team

    def has_team(self, team_name: str) -> bool:
        """Exact, case-sensitive team name match on either side."""
        return self.home_team == team_name or self.away_team == team_name

    def substitution_windows(self, side: TeamSide) -> int:
        if side is TeamSide.HOME:
            return self.home_substitution_windows
        return self.away_substitution_windows

    @property
    def is_finished(self) -> bool:
        return self.current_half.is_finished

    @property
    def half_length_seconds(self) -> Optional[int]:
        if not self.match_length:
            return None
        return self.match_length * 60 // 2

    def player_by_id(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'homeTeam': self.home_team,
            'awayTeam': self.away_team,
            'homeScore': self.home_score,
            'awayScore': self.away_score,
            'currentHalf': self.current_half.value,
            'homeSubstitutionWindows': self.home_substitution_windows,
            'awaySubstitutionWindows': self.away_substitution_windows,
            'substitutionWindowCap': self.substitution_window_cap,
            'startTime': self.start_time,
            'events': [event.to_dict() for event in self.events],
            'players': [player.to_dict() for player in self.players],
            'legNumber': self.leg_number,
            'category': self.category,
        }
        if self.match_length is not None:
            data['matchLength'] = self.match_length
        if self.age_category is not None:
            data['ageCategory'] = self.age_category
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Match':
        return cls(
            id=str(data['id']),
            home_team=data.get('homeTeam', ''),
            away_team=data.get('awayTeam', ''),
            start_time=int(data.get('startTime', 0)),
            leg_number=int(data.get('legNumber', 1)),
            category=data.get('category', ''),
            current_half=MatchHalf.from_value(data.get('currentHalf', 1)),
            home_substitution_windows=int(data.get('homeSubstitutionWindows', 0)),
            away_substitution_windows=int(data.get('awaySubstitutionWindows', 0)),
            substitution_window_cap=int(
                data.get('substitutionWindowCap', BASE_SUBSTITUTION_WINDOW_CAP)
            ),
            events=[MatchEvent.from_dict(e) for e in data.get('events', [])],
            players=[Player.from_dict(p) for p in data.get('players', [])],
            match_length=data.get('matchLength'),
            age_category=data.get('ageCategory'),
        )

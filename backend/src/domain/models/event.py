"""
Match event domain model.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .base import BaseEntity, EventType, TeamSide
from .player import Player


@dataclass(frozen=True)
class MatchEvent(BaseEntity):
    """
    A single recorded occurrence on the pitch.

    Coordinates are percentages of the pitch (x along its length towards the
    attacked goal, y across its width). Events are immutable once created and
    are only removed together with their match.
    """
    id: str
    type: EventType
    x: float
    y: float
    timestamp: int  # Epoch milliseconds; not guaranteed to be ordered
    team: TeamSide
    match_id: str
    player: Optional[Player] = None

    def __post_init__(self):
        if not isinstance(self.type, EventType):
            object.__setattr__(self, 'type', EventType(self.type))
        if not isinstance(self.team, TeamSide):
            object.__setattr__(self, 'team', TeamSide(self.team))

    @property
    def player_id(self) -> Optional[str]:
        return self.player.id if self.player else None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'type': self.type.value,
            'x': self.x,
            'y': self.y,
            'timestamp': self.timestamp,
            'team': self.team.value,
            'matchId': self.match_id,
        }
        if self.player is not None:
            data['player'] = self.player.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchEvent':
        player_data = data.get('player')
        return cls(
            id=str(data['id']),
            type=EventType(data['type']),
            x=float(data['x']),
            y=float(data['y']),
            timestamp=int(data.get('timestamp', 0)),
            team=TeamSide(data['team']),
            match_id=str(data['matchId']),
            player=Player.from_dict(player_data) if player_data else None,
        )

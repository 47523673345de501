"""
Player domain models.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .base import BaseEntity, TeamSide


@dataclass(frozen=True)
class Player(BaseEntity):
    """
    A squad member on a match roster.
    Immutable: events keep the copy that was current when they were recorded.
    """
    id: str
    name: str
    number: int
    team: TeamSide

    def __post_init__(self):
        if isinstance(self.team, str) and not isinstance(self.team, TeamSide):
            object.__setattr__(self, 'team', TeamSide(self.team))

    @property
    def display_name(self) -> str:
        """Name with shirt number, as shown in exports."""
        return f"{self.name} ({self.number})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'number': self.number,
            'team': self.team.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            number=int(data.get('number', 0)),
            team=TeamSide(data.get('team', TeamSide.HOME.value)),
        )


@dataclass
class PlayerWithHistory:
    """
    A player merged across several matches.
    Shirt numbers can change between fixtures; all observed numbers are kept.
    """
    id: str
    name: str
    current_number: int
    team: TeamSide
    numbers: List[int] = field(default_factory=list)

    @property
    def has_multiple_numbers(self) -> bool:
        return len(self.numbers) > 1

    @property
    def label(self) -> str:
        """Selector label, e.g. ``Sam Kerr (20) [9, 20]``."""
        text = f"{self.name} ({self.current_number})"
        if self.has_multiple_numbers:
            text += f" [{', '.join(str(n) for n in sorted(self.numbers))}]"
        return text

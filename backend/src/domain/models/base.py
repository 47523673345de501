"""
Base domain models and shared enumerations for match recording.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Union


class TeamSide(str, Enum):
    """Which side of the fixture an event or player belongs to."""
    HOME = "home"
    AWAY = "away"

    @property
    def opponent(self) -> 'TeamSide':
        """The other side of the fixture."""
        return TeamSide.AWAY if self is TeamSide.HOME else TeamSide.HOME


class EventType(str, Enum):
    """
    Closed set of recordable match events.
    Values keep the camelCase names used in stored match collections.
    """
    GOAL = "goal"
    SHOT = "shot"
    FOUL = "foul"
    CORNER = "corner"
    YELLOW_CARD = "yellowCard"
    RED_CARD = "redCard"
    INJURY = "injury"
    OFFSIDE = "offside"
    ASSIST = "assist"

    @property
    def is_scoring(self) -> bool:
        """Whether recording this event changes the score."""
        return _SCORING[self]

    @property
    def is_shot_attempt(self) -> bool:
        """Whether the event is evaluated by the xG model."""
        return _SHOT_ATTEMPT[self]

    @property
    def summary_field(self) -> Optional[str]:
        """TeamEventCounts attribute this event increments, if any."""
        return _SUMMARY_FIELDS[self]


# Every EventType member must appear in each table below.
_SCORING: Dict[EventType, bool] = {
    EventType.GOAL: True,
    EventType.SHOT: False,
    EventType.FOUL: False,
    EventType.CORNER: False,
    EventType.YELLOW_CARD: False,
    EventType.RED_CARD: False,
    EventType.INJURY: False,
    EventType.OFFSIDE: False,
    EventType.ASSIST: False,
}

_SHOT_ATTEMPT: Dict[EventType, bool] = {
    EventType.GOAL: True,
    EventType.SHOT: True,
    EventType.FOUL: False,
    EventType.CORNER: False,
    EventType.YELLOW_CARD: False,
    EventType.RED_CARD: False,
    EventType.INJURY: False,
    EventType.OFFSIDE: False,
    EventType.ASSIST: False,
}

_SUMMARY_FIELDS: Dict[EventType, Optional[str]] = {
    EventType.GOAL: "goals",
    EventType.SHOT: "shots",
    EventType.FOUL: "fouls",
    EventType.CORNER: "corners",
    EventType.YELLOW_CARD: "yellow_cards",
    EventType.RED_CARD: "red_cards",
    EventType.INJURY: None,
    EventType.OFFSIDE: "offsides",
    EventType.ASSIST: None,
}


class MatchHalf(Enum):
    """
    Match lifecycle states. Transitions only move forward:
    FIRST_HALF -> SECOND_HALF -> FINISHED.
    """
    FIRST_HALF = 1
    SECOND_HALF = 2
    FINISHED = "finished"

    @property
    def rank(self) -> int:
        """Position in the lifecycle, used for forward-only comparisons."""
        return {MatchHalf.FIRST_HALF: 1, MatchHalf.SECOND_HALF: 2, MatchHalf.FINISHED: 3}[self]

    @property
    def is_finished(self) -> bool:
        return self is MatchHalf.FINISHED

    @classmethod
    def from_value(cls, value: Union[int, str, 'MatchHalf']) -> 'MatchHalf':
        """Parse the stored representation (1, 2, "finished", or "1"/"2")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.isdigit():
            value = int(value)
        return cls(value)

    def __str__(self) -> str:
        return str(self.value)


class BaseEntity(ABC):
    """
    Base class for persisted domain models.
    Entities round-trip through plain JSON-compatible dictionaries.
    """

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert entity to its stored dictionary representation."""

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseEntity':
        """Rebuild an entity from its stored dictionary representation."""

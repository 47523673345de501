"""
Domain models for the Touchline match recorder.
"""

from .base import TeamSide, EventType, MatchHalf, BaseEntity
from .player import Player, PlayerWithHistory
from .event import MatchEvent
from .match import Match, BASE_SUBSTITUTION_WINDOW_CAP, EXTENDED_SUBSTITUTION_WINDOW_CAP
from .pitch import (
    PitchExtent,
    DEFAULT_PITCH_EXTENT,
    clamp_percentage,
    normalize_position,
    to_pixels,
)
from .statistics import (
    TeamEventCounts,
    EventSummary,
    TeamXG,
    XGPerformance,
    HeatGrid,
)

__all__ = [
    # Base models
    "TeamSide",
    "EventType",
    "MatchHalf",
    "BaseEntity",

    # Roster and ledger
    "Player",
    "PlayerWithHistory",
    "MatchEvent",
    "Match",
    "BASE_SUBSTITUTION_WINDOW_CAP",
    "EXTENDED_SUBSTITUTION_WINDOW_CAP",

    # Coordinates
    "PitchExtent",
    "DEFAULT_PITCH_EXTENT",
    "clamp_percentage",
    "normalize_position",
    "to_pixels",

    # Statistics models
    "TeamEventCounts",
    "EventSummary",
    "TeamXG",
    "XGPerformance",
    "HeatGrid",
]

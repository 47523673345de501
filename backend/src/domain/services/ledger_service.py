"""
Event ledger and filtering pipeline.

The ledger is the only way events enter a match. Filters are pure functions
over event and match lists; ids that cannot be resolved are excluded from
results rather than raising.
"""

from dataclasses import dataclass, field
from typing import Collection, Dict, Iterable, List, Optional, Set, Union

from core.exceptions import ErrorContext, MatchStateError, ValidationError
from core.utils import LoggerFactory, IdentifierFactory, DataValidator

from ..models.base import EventType, TeamSide
from ..models.event import MatchEvent
from ..models.match import Match
from ..models.pitch import clamp_percentage
from ..models.player import Player

logger = LoggerFactory.get_logger(__name__)

ALL = "all"


class EventLedger:
    """
    Append-only event collection of a single match.
    Keeps the match's score cache consistent with its goal events.
    """

    def __init__(self, match: Match):
        self.match = match

    @property
    def events(self) -> List[MatchEvent]:
        return list(self.match.events)

    def append(self, event: MatchEvent) -> MatchEvent:
        """
        Append an event and refresh the score in the same step.

        Raises:
            ValidationError: Event belongs to another match or its
                coordinates are outside [0, 100]
            MatchStateError: The match is finished
        """
        context = ErrorContext(
            operation="append_event",
            match_id=self.match.id,
            parameters={'event_id': event.id, 'type': event.type.value}
        )

        if event.match_id != self.match.id:
            raise ValidationError(
                "match_id", event.match_id,
                f"event belongs to another match (expected {self.match.id})",
                context=context
            )
        DataValidator.validate_percentage(event.x, "x")
        DataValidator.validate_percentage(event.y, "y")

        if self.match.is_finished:
            raise MatchStateError("record events", self.match.current_half, context=context)

        self.match.events.append(event)
        self.match.recompute_score()

        logger.info(
            f"Recorded {event.type.value} for {event.team.value} in match {self.match.id} "
            f"(score {self.match.home_score}-{self.match.away_score})"
        )
        return event

    def record(
        self,
        event_type: Union[EventType, str],
        x: float,
        y: float,
        team: Union[TeamSide, str],
        player: Optional[Player] = None,
        timestamp: Optional[int] = None,
        event_id: Optional[str] = None
    ) -> MatchEvent:
        """
        Recording flow: clamp the position, stamp the event and append it.

        Args:
            event_type: Kind of event
            x: Position along the pitch in percent
            y: Position across the pitch in percent
            team: Side the event is credited to
            player: Roster player involved, if any
            timestamp: Epoch milliseconds, defaults to now
            event_id: Explicit id, defaults to a fresh hex id

        Returns:
            The appended event
        """
        try:
            event_type = EventType(event_type)
        except ValueError:
            raise ValidationError("type", event_type, "unknown event type")
        try:
            team = TeamSide(team)
        except ValueError:
            raise ValidationError("team", team, "must be 'home' or 'away'")

        event = MatchEvent(
            id=event_id or IdentifierFactory.new_id(),
            type=event_type,
            x=clamp_percentage(x),
            y=clamp_percentage(y),
            timestamp=timestamp if timestamp is not None else IdentifierFactory.now_ms(),
            team=team,
            match_id=self.match.id,
            player=player,
        )
        return self.append(event)


# =============================================================================
# Filters
# =============================================================================

def filter_by_type(
    events: Iterable[MatchEvent],
    types: Collection[Union[EventType, str]]
) -> List[MatchEvent]:
    """Keep events whose type is in ``types``."""
    wanted = {EventType(t) for t in types}
    return [event for event in events if event.type in wanted]


def filter_by_team_name(matches: Iterable[Match], team_name: Optional[str]) -> List[Match]:
    """Keep matches where ``team_name`` plays on either side (exact match)."""
    if team_name is None or team_name == ALL:
        return list(matches)
    return [match for match in matches if match.has_team(team_name)]


def filter_by_players(
    events: Iterable[MatchEvent],
    player_ids: Optional[Collection[str]]
) -> List[MatchEvent]:
    """
    Keep events credited to one of ``player_ids``.
    Events without a player are dropped once any player is selected.
    """
    if not player_ids:
        return list(events)
    wanted = set(player_ids)
    return [event for event in events if event.player_id in wanted]


def filter_by_leg(
    events: Iterable[MatchEvent],
    matches: Iterable[Match],
    leg_number: Optional[Union[int, str]]
) -> List[MatchEvent]:
    """
    Keep events whose owning match (resolved within ``matches``) is the given leg.
    Leg values from a selection control may arrive as strings such as ``"2"``.
    """
    if leg_number is None or leg_number == ALL:
        return list(events)
    leg = normalize_leg(leg_number)
    legs: Dict[str, int] = {match.id: match.leg_number for match in matches}
    return [event for event in events if legs.get(event.match_id) == leg]


def normalize_leg(leg_number: Union[int, str]) -> int:
    if isinstance(leg_number, bool):
        raise ValidationError("leg_number", leg_number, "must be a leg number or 'all'")
    try:
        return int(leg_number)
    except (TypeError, ValueError) as e:
        raise ValidationError("leg_number", leg_number, "must be a leg number or 'all'") from e


def index_matches(matches: Iterable[Match]) -> Dict[str, Match]:
    return {match.id: match for match in matches}


@dataclass
class ReportFilters:
    """Active report filters. ``None`` / ``"all"`` / empty means inactive."""
    team_name: Optional[str] = None
    match_id: Optional[str] = None
    leg_number: Optional[Union[int, str]] = None
    player_ids: Set[str] = field(default_factory=set)

    @property
    def team_selected(self) -> bool:
        return self.team_name is not None and self.team_name != ALL


@dataclass
class FilterResult:
    """Output of the filter pipeline."""
    candidate_matches: List[Match]
    selected_match: Optional[Match]
    events: List[MatchEvent]


class EventFilterPipeline:
    """
    Applies report filters in their fixed order, each step narrowing the
    previous result:

    1. team name narrows the candidate matches
    2. match selection picks the event source (an explicit match, the only
       remaining candidate, or every candidate)
    3. leg
    4. players
    """

    def apply(self, matches: Iterable[Match], filters: ReportFilters) -> FilterResult:
        all_matches = list(matches)
        candidates = filter_by_team_name(all_matches, filters.team_name)

        selected = None
        if filters.match_id is not None and filters.match_id != ALL:
            selected = index_matches(all_matches).get(filters.match_id)
            if selected is None:
                logger.debug(f"Selected match {filters.match_id} not found, using all candidates")
        elif filters.team_selected and len(candidates) == 1:
            selected = candidates[0]

        if selected is not None:
            events = list(selected.events)
        else:
            events = [event for match in candidates for event in match.events]

        events = filter_by_leg(events, candidates, filters.leg_number)
        events = filter_by_players(events, filters.player_ids)

        return FilterResult(candidate_matches=candidates, selected_match=selected, events=events)

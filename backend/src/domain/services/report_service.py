"""
Report aggregation over recorded matches.

A report is computed on demand from the stored matches and the active
filters; nothing here is persisted.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from core.exceptions import ValidationError
from core.utils import LoggerFactory

from .ledger_service import EventFilterPipeline, ReportFilters, filter_by_type, index_matches
from .xg_service import XGEstimator
from ..models.base import EventType, MatchHalf, TeamSide
from ..models.event import MatchEvent
from ..models.match import Match
from ..models.player import PlayerWithHistory
from ..models.statistics import EventSummary, HeatGrid, TeamXG, XGPerformance

logger = LoggerFactory.get_logger(__name__)

AGGREGATED_MATCH_ID = "aggregated"
ALL_TEAMS_LABEL = "All Teams"

SideResolver = Callable[[MatchEvent], Optional[TeamSide]]


@dataclass
class HeatMapData:
    """Event partitions drawn on the report heat maps."""
    goals: List[MatchEvent] = field(default_factory=list)
    shots: List[MatchEvent] = field(default_factory=list)
    fouls: List[MatchEvent] = field(default_factory=list)
    xg_events: List[MatchEvent] = field(default_factory=list)

    @classmethod
    def from_events(cls, events: Sequence[MatchEvent]) -> 'HeatMapData':
        return cls(
            goals=filter_by_type(events, [EventType.GOAL]),
            shots=filter_by_type(events, [EventType.SHOT]),
            fouls=filter_by_type(events, [EventType.FOUL]),
            xg_events=[e for e in events if e.type.is_shot_attempt],
        )

    def partition(self, event_type: EventType) -> List[MatchEvent]:
        partitions = {
            EventType.GOAL: self.goals,
            EventType.SHOT: self.shots,
            EventType.FOUL: self.fouls,
        }
        if event_type not in partitions:
            raise ValidationError("event_type", event_type, "no heat map for this event type")
        return partitions[event_type]

    def grid(self, event_type: EventType, columns: int = 10, rows: int = 7) -> HeatGrid:
        """
        Bin one partition over a ``columns`` x ``rows`` grid of the pitch.
        Points on the far edges (x or y = 100) fall into the last cell.
        """
        if columns <= 0 or rows <= 0:
            raise ValidationError("grid", (columns, rows), "columns and rows must be positive")

        cells = [[0] * columns for _ in range(rows)]
        for event in self.partition(EventType(event_type)):
            column = min(int(event.x / 100 * columns), columns - 1)
            row = min(int(event.y / 100 * rows), rows - 1)
            cells[row][column] += 1
        return HeatGrid(columns=columns, rows=rows, cells=cells)


@dataclass
class MatchReport:
    """Everything the report screen shows for one filter selection."""
    events: List[MatchEvent]
    match: Optional[Match]
    summary: EventSummary
    team_xg: TeamXG
    heat_map: HeatMapData
    players: List[PlayerWithHistory]
    leg_numbers: List[int]
    team_names: List[str]

    @property
    def is_empty(self) -> bool:
        return not self.events

    @property
    def is_aggregate(self) -> bool:
        return self.match is not None and self.match.id == AGGREGATED_MATCH_ID

    def xg_performance(self, side: TeamSide) -> Optional[XGPerformance]:
        if self.match is None:
            return None
        return self.team_xg.performance(side, self.match.score_for(side))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'matchId': self.match.id if self.match else None,
            'homeTeam': self.match.home_team if self.match else None,
            'awayTeam': self.match.away_team if self.match else None,
            'eventCount': len(self.events),
            'summary': self.summary.to_dict(),
            'teamXg': self.team_xg.to_dict(),
            'legNumbers': self.leg_numbers,
            'teamNames': self.team_names,
        }


def build_player_history(matches: Iterable[Match]) -> List[PlayerWithHistory]:
    """
    Merge roster players across matches by id.

    Matches are scanned most recent first, so ``current_number`` is the
    number worn in the latest match; every other observed number is added
    to ``numbers``.
    """
    history: Dict[str, PlayerWithHistory] = {}
    for match in sorted(matches, key=lambda m: m.start_time, reverse=True):
        for player in match.players:
            entry = history.get(player.id)
            if entry is None:
                history[player.id] = PlayerWithHistory(
                    id=player.id,
                    name=player.name,
                    current_number=player.number,
                    team=player.team,
                    numbers=[player.number],
                )
            elif player.number not in entry.numbers:
                entry.numbers.append(player.number)
    return list(history.values())


def leg_numbers(matches: Iterable[Match]) -> List[int]:
    return sorted({match.leg_number for match in matches})


def team_names(matches: Iterable[Match]) -> List[str]:
    names = set()
    for match in matches:
        names.add(match.home_team)
        names.add(match.away_team)
    return sorted(names)


class ReportAggregator:
    """
    Builds MatchReports from stored matches.

    Side attribution: with a selected match an event counts for its literal
    side. When a team name is selected without a single match, the "home"
    slot is the selected team and the "away" slot its opponents, looked up
    through each event's own match.
    """

    def __init__(self, estimator: Optional[XGEstimator] = None):
        self.estimator = estimator or XGEstimator()
        self.pipeline = EventFilterPipeline()

    def build_report(
        self,
        matches: Sequence[Match],
        filters: Optional[ReportFilters] = None
    ) -> MatchReport:
        filters = filters or ReportFilters()
        result = self.pipeline.apply(matches, filters)
        events = result.events
        by_id = index_matches(result.candidate_matches)
        if result.selected_match is not None:
            by_id[result.selected_match.id] = result.selected_match

        side_of = self._side_resolver(result.selected_match, filters, by_id)

        summary = EventSummary()
        for event in events:
            side = side_of(event)
            counted = event.type.summary_field
            if side is None or counted is None:
                continue
            counts = summary.for_side(side)
            setattr(counts, counted, getattr(counts, counted) + 1)

        team_xg = self.estimator.team_xg(events, side_of)

        if result.selected_match is not None:
            report_match = result.selected_match
        elif events:
            report_match = self._aggregate_match(events, result.candidate_matches, filters, side_of)
        else:
            report_match = None

        heat_events = events
        if filters.team_selected:
            heat_events = [e for e in events if self._is_own_event(e, filters.team_name, by_id)]

        if result.selected_match is not None:
            players = build_player_history([result.selected_match])
        else:
            players = build_player_history(result.candidate_matches)

        logger.info(
            f"Built report over {len(events)} events from {len(result.candidate_matches)} matches "
            f"(xG {team_xg.home:.2f} - {team_xg.away:.2f})"
        )

        return MatchReport(
            events=events,
            match=report_match,
            summary=summary,
            team_xg=team_xg,
            heat_map=HeatMapData.from_events(heat_events),
            players=players,
            leg_numbers=leg_numbers(result.candidate_matches),
            team_names=team_names(matches),
        )

    @staticmethod
    def _is_own_event(event: MatchEvent, team_name: str, by_id: Dict[str, Match]) -> bool:
        match = by_id.get(event.match_id)
        return match is not None and match.team_name(event.team) == team_name

    def _side_resolver(
        self,
        selected: Optional[Match],
        filters: ReportFilters,
        by_id: Dict[str, Match]
    ) -> SideResolver:
        if selected is not None or not filters.team_selected:
            return lambda event: event.team

        def team_relative(event: MatchEvent) -> Optional[TeamSide]:
            match = by_id.get(event.match_id)
            if match is None:
                return None
            if match.team_name(event.team) == filters.team_name:
                return TeamSide.HOME
            return TeamSide.AWAY

        return team_relative

    @staticmethod
    def _aggregate_match(
        events: List[MatchEvent],
        candidates: List[Match],
        filters: ReportFilters,
        side_of: SideResolver
    ) -> Match:
        """Pseudo-match standing in for several matches on the report screen."""
        if filters.team_selected:
            home_team = filters.team_name
            away_team = ""
            if len(candidates) == 1:
                only = candidates[0]
                away_team = only.away_team if only.home_team == filters.team_name else only.home_team
        else:
            home_team = ALL_TEAMS_LABEL
            away_team = ""

        aggregate = Match(
            id=AGGREGATED_MATCH_ID,
            home_team=home_team,
            away_team=away_team,
            start_time=0,
            leg_number=0,
            category="all",
            current_half=MatchHalf.FINISHED,
            events=list(events),
        )

        home = away = 0
        for event in events:
            if not event.type.is_scoring:
                continue
            side = side_of(event)
            if side is TeamSide.HOME:
                home += 1
            elif side is TeamSide.AWAY:
                away += 1
        aggregate.home_score = home
        aggregate.away_score = away
        return aggregate


__all__ = [
    'AGGREGATED_MATCH_ID',
    'ALL_TEAMS_LABEL',
    'HeatMapData',
    'MatchReport',
    'ReportAggregator',
    'build_player_history',
    'leg_numbers',
    'team_names',
]

"""
Tests for report aggregation, CSV export and match setup helpers.
"""
import csv
import io

import pytest

from test_utils import make_match, make_player, record

from adapters.storage import InMemoryStore
from core.exceptions import ValidationError
from domain.models import EventType, TeamSide, XGPerformance
from domain.services.export_service import (
    CSV_HEADERS, events_to_csv, export_filename, write_events_csv
)
from domain.services.ledger_service import ReportFilters
from domain.services.report_service import (
    AGGREGATED_MATCH_ID, ALL_TEAMS_LABEL, ReportAggregator, build_player_history
)
from domain.services.setup_service import CategoryService, parse_player_list, validate_setup
from domain.services.xg_service import XGEstimator

HOME, AWAY = TeamSide.HOME, TeamSide.AWAY


class TestReportAggregator:

    def setup_method(self):
        self.aggregator = ReportAggregator()
        # Lions at home: 2 goals for, 1 against
        self.home_fixture = make_match("Lions", "Tigers", leg_number=1, start_time=100)
        record(
            self.home_fixture,
            (EventType.GOAL, HOME), (EventType.GOAL, HOME), (EventType.GOAL, AWAY),
            (EventType.SHOT, HOME), (EventType.FOUL, AWAY),
        )
        # Lions away: 1 goal for, none against
        self.away_fixture = make_match("Bears", "Lions", leg_number=2, start_time=200)
        record(
            self.away_fixture,
            (EventType.GOAL, AWAY), (EventType.CORNER, HOME), (EventType.FOUL, AWAY),
        )
        self.unrelated = make_match("Bears", "Tigers", leg_number=1, start_time=300)
        record(self.unrelated, (EventType.GOAL, HOME))
        self.matches = [self.home_fixture, self.away_fixture, self.unrelated]

    def test_aggregate_resolves_selected_team_score(self):
        report = self.aggregator.build_report(self.matches, ReportFilters(team_name="Lions"))
        assert report.is_aggregate
        assert report.match.id == AGGREGATED_MATCH_ID
        assert report.match.home_team == "Lions"
        assert report.match.away_team == ""
        assert report.match.home_score == 3
        assert report.match.away_score == 1

    def test_aggregate_summary_is_team_relative(self):
        report = self.aggregator.build_report(self.matches, ReportFilters(team_name="Lions"))
        assert report.summary.home.goals == 3
        assert report.summary.home.shots == 1
        assert report.summary.home.fouls == 1
        assert report.summary.away.goals == 1
        assert report.summary.away.corners == 1
        assert report.summary.away.fouls == 1

    def test_aggregate_xg_is_team_relative(self):
        estimator = XGEstimator()
        report = ReportAggregator(estimator).build_report(self.matches, ReportFilters(team_name="Lions"))
        lions_shots = [
            e for e in self.home_fixture.events if e.type.is_shot_attempt and e.team is HOME
        ] + [
            e for e in self.away_fixture.events if e.type.is_shot_attempt and e.team is AWAY
        ]
        expected = sum(estimator.estimate_event(e) for e in lions_shots)
        assert report.team_xg.home == pytest.approx(expected)

    def test_heat_map_restricted_to_selected_team(self):
        report = self.aggregator.build_report(self.matches, ReportFilters(team_name="Lions"))
        assert len(report.heat_map.goals) == 3
        assert len(report.heat_map.fouls) == 1
        assert len(report.heat_map.xg_events) == 4

    def test_all_teams_uses_literal_sides(self):
        report = self.aggregator.build_report(self.matches, ReportFilters())
        assert report.match.home_team == ALL_TEAMS_LABEL
        assert report.match.home_score == 3
        assert report.match.away_score == 2
        assert report.summary.home.goals == 3
        assert len(report.events) == 9

    def test_single_match_report(self):
        report = self.aggregator.build_report(
            self.matches, ReportFilters(match_id=self.away_fixture.id)
        )
        assert report.match is self.away_fixture
        assert not report.is_aggregate
        assert report.summary.away.goals == 1
        assert report.summary.home.corners == 1
        assert report.xg_performance(AWAY) is XGPerformance.OVERPERFORMED

    def test_team_with_one_match_selects_it(self):
        report = self.aggregator.build_report(
            [self.home_fixture, self.away_fixture], ReportFilters(team_name="Tigers")
        )
        assert report.match is self.home_fixture
        assert report.summary.home.goals == 2
        assert report.leg_numbers == [1]

    def test_leg_filter_within_team_aggregate(self):
        report = self.aggregator.build_report(self.matches, ReportFilters(team_name="Bears", leg_number=2))
        assert report.is_aggregate
        assert {e.match_id for e in report.events} == {self.away_fixture.id}
        assert report.summary.home.corners == 1
        assert report.match.away_score == 1
        assert report.leg_numbers == [1, 2]

    def test_filter_options(self):
        report = self.aggregator.build_report(self.matches, ReportFilters())
        assert report.team_names == ["Bears", "Lions", "Tigers"]
        assert report.leg_numbers == [1, 2]

    def test_empty_selection(self):
        report = self.aggregator.build_report(self.matches, ReportFilters(team_name="Wolves"))
        assert report.is_empty
        assert report.match is None
        assert report.xg_performance(HOME) is None

    def test_report_totals_are_stable(self):
        first = self.aggregator.build_report(self.matches, ReportFilters()).team_xg
        second = self.aggregator.build_report(self.matches, ReportFilters()).team_xg
        assert first == second

    def test_heat_grid_binning(self):
        match = make_match()
        record(match, (EventType.SHOT, HOME))
        report = self.aggregator.build_report([match], ReportFilters())
        grid = report.heat_map.grid(EventType.SHOT, columns=10, rows=10)
        # Shots are recorded at (80, 50)
        assert grid.cells[5][8] == 1
        assert grid.total == 1
        assert grid.density(5, 8) == 1.0

    def test_heat_grid_rejects_unmapped_type(self):
        report = self.aggregator.build_report(self.matches, ReportFilters())
        with pytest.raises(ValidationError):
            report.heat_map.grid(EventType.CORNER)

    def test_to_dict(self):
        data = self.aggregator.build_report(self.matches, ReportFilters(team_name="Lions")).to_dict()
        assert data['matchId'] == AGGREGATED_MATCH_ID
        assert data['summary']['home']['goals'] == 3
        assert set(data['teamXg']) == {'home', 'away'}


class TestPlayerHistory:

    def test_current_number_from_most_recent_match(self):
        old = make_player("Sam Kerr", 9, player_id="kerr")
        new = make_player("Sam Kerr", 20, player_id="kerr")
        earlier = make_match(start_time=1, players=[old])
        later = make_match(start_time=2, players=[new])

        history = build_player_history([earlier, later])
        assert len(history) == 1
        assert history[0].current_number == 20
        assert history[0].numbers == [20, 9]
        assert history[0].has_multiple_numbers
        assert history[0].label == "Sam Kerr (20) [9, 20]"

    def test_selected_match_limits_players(self):
        striker = make_player("Alex Morgan", 13)
        keeper = make_player("Mary Earps", 1)
        first = make_match(players=[striker])
        second = make_match(players=[keeper])
        report = ReportAggregator().build_report([first, second], ReportFilters(match_id=second.id))
        assert [p.id for p in report.players] == [keeper.id]


class TestExport:

    def setup_method(self):
        self.player = make_player("Alex Morgan", 13)
        self.match = make_match("Lions FC", "Tigers/B")
        record(self.match, (EventType.GOAL, HOME, self.player), (EventType.FOUL, AWAY))

    def test_filename_sanitized(self):
        assert export_filename(self.match) == "match-events-Lions_FC-vs-Tigers_B.csv"

    def test_csv_rows(self):
        rows = list(csv.reader(io.StringIO(events_to_csv(self.match, self.match.events))))
        assert rows[0] == CSV_HEADERS
        assert len(rows) == 3

        goal = rows[1]
        assert goal[0] == self.match.id
        assert goal[3] == "goal"
        assert goal[4] == "Lions FC"
        assert goal[5] == "Alex Morgan (13)"
        assert goal[6:] == ["80.00", "50.00"]

        foul = rows[2]
        assert foul[4] == "Tigers/B"
        assert foul[5] == "Unknown"
        assert foul[2].startswith("2023-11-14T")

    def test_aggregate_export_resolves_team_names(self):
        other = make_match("Bears", "Lions FC")
        record(other, (EventType.SHOT, HOME))
        report = ReportAggregator().build_report([self.match, other], ReportFilters())
        text = events_to_csv(report.match, report.events, matches=[self.match, other])
        rows = list(csv.reader(io.StringIO(text)))
        assert {row[0] for row in rows[1:]} == {AGGREGATED_MATCH_ID}
        assert rows[-1][4] == "Bears"

    @pytest.mark.asyncio
    async def test_write_file(self, tmp_path):
        path = await write_events_csv(tmp_path, self.match, self.match.events)
        assert path.name == export_filename(self.match)
        assert path.read_text(encoding="utf-8").splitlines()[0].startswith("Match ID,Event ID")

    @pytest.mark.asyncio
    async def test_write_file_requires_events(self, tmp_path):
        with pytest.raises(ValidationError):
            await write_events_csv(tmp_path, self.match, [])


class TestSetup:

    def test_parse_player_list(self):
        text = "9\nSam Kerr\n\n1\nMary Earps\nStray Name\n4\nKeira Walsh\n"
        players = parse_player_list(text, "home")
        assert [(p.number, p.name) for p in players] == [
            (1, "Mary Earps"), (4, "Keira Walsh"), (9, "Sam Kerr"),
        ]
        assert all(p.team is HOME for p in players)
        assert len({p.id for p in players}) == 3

    def test_parse_respects_squad_limit(self):
        existing = [make_player(number=n, team=AWAY) for n in range(1, 19)]
        text = "\n".join(f"{n}\nPlayer {n}" for n in (30, 20, 25))
        players = parse_player_list(text, AWAY, existing=existing)
        assert [p.number for p in players] == [20, 25]

    def test_other_side_does_not_use_slots(self):
        existing = [make_player(number=n, team=HOME) for n in range(1, 21)]
        assert len(parse_player_list("7\nLucy Bronze", AWAY, existing=existing)) == 1

    def test_validate_setup(self):
        assert validate_setup(" Lions ", "Tigers", "Cup", 1) == ("Lions", "Tigers", "Cup")
        with pytest.raises(ValidationError):
            validate_setup("", "Tigers", "Cup")
        with pytest.raises(ValidationError):
            validate_setup("Lions", "Tigers", "")
        with pytest.raises(ValidationError):
            validate_setup("Lions", "Tigers", "Cup", 0)

    @pytest.mark.asyncio
    async def test_categories(self):
        service = CategoryService(InMemoryStore())
        assert await service.list_categories() == []
        await service.add_category("  U12 League ")
        await service.add_category("U12 League")
        await service.add_category("   ")
        assert await service.add_category("Cup") == ["U12 League", "Cup"]
        assert await service.remove_category("U12 League") == ["Cup"]
        assert await service.store.get("matchCategories") == ["Cup"]

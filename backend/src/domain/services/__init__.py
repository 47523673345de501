"""
Domain services for the Touchline match recorder.
Contains match lifecycle, event ledger, xG and reporting logic.
"""

from .base_service import BaseService, ServiceResponse, ServiceListResponse
from .xg_service import XGEstimator, ShadingXGEstimator, geometric_xg, jitter_seed
from .ledger_service import (
    ALL,
    EventLedger,
    EventFilterPipeline,
    FilterResult,
    ReportFilters,
    filter_by_leg,
    filter_by_players,
    filter_by_team_name,
    filter_by_type,
)
from .setup_service import CategoryService, parse_player_list, validate_setup
from .match_service import MatchService, MatchStateMachine
from .timer_service import MatchTimer, format_clock
from .report_service import HeatMapData, MatchReport, ReportAggregator, build_player_history
from .export_service import events_to_csv, export_filename, write_events_csv

__all__ = [
    # Service plumbing
    "BaseService",
    "ServiceResponse",
    "ServiceListResponse",

    # xG
    "XGEstimator",
    "ShadingXGEstimator",
    "geometric_xg",
    "jitter_seed",

    # Ledger and filters
    "ALL",
    "EventLedger",
    "EventFilterPipeline",
    "FilterResult",
    "ReportFilters",
    "filter_by_leg",
    "filter_by_players",
    "filter_by_team_name",
    "filter_by_type",

    # Lifecycle
    "CategoryService",
    "parse_player_list",
    "validate_setup",
    "MatchService",
    "MatchStateMachine",
    "MatchTimer",
    "format_clock",

    # Reporting
    "HeatMapData",
    "MatchReport",
    "ReportAggregator",
    "build_player_history",
    "events_to_csv",
    "export_filename",
    "write_events_csv",
]

#!/usr/bin/env python3
"""
Quick Touchline Example - Record a Match and Build a Report
===========================================================

Sets up a match, records a handful of events, plays through both halves and
prints the report and CSV export. Uses the storage backend configured in
.env (TOUCHLINE_STORAGE_BACKEND), falling back to the JSON file store.
"""
import asyncio
import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Add backend source to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend', 'src'))

from adapters.storage import create_store
from config.settings import settings
from domain.services import (
    MatchService, ReportAggregator, ReportFilters, events_to_csv, parse_player_list
)

SQUAD = """
1
Mary Earps
9
Alessia Russo
11
Lauren Hemp
"""


async def record_demo_match():
    """Create a match, record events and print the report."""
    print("⚽ Touchline Quick Example\n")

    store = create_store(settings)
    service = MatchService(store)

    players = parse_player_list(SQUAD, "home")
    response = await service.create_match("Lions", "Tigers", players=players, category="Friendly")
    if not response.success:
        print(f"❌ Setup rejected: {response.error}")
        return
    match = response.data
    print(f"✅ Created match {match.home_team} vs {match.away_team} ({len(players)} home players)")

    russo = players[1]
    await service.record_event(match.id, "shot", 78.5, 41.0, "home", player_id=russo.id)
    await service.record_event(match.id, "goal", 91.0, 52.5, "home", player_id=russo.id)
    await service.record_event(match.id, "foul", 40.0, 70.0, "away")

    await service.start_second_half(match.id)
    await service.record_event(match.id, "goal", 88.0, 30.0, "away")
    response = await service.finish_match(match.id)
    match = response.data
    print(f"🏁 Full time: {match.home_score} - {match.away_score}\n")

    matches = (await service.list_matches()).data
    report = ReportAggregator().build_report(matches, ReportFilters(match_id=match.id))

    print("📋 Summary")
    print("-" * 40)
    for side, counts in (("Home", report.summary.home), ("Away", report.summary.away)):
        print(f"{side:5s} goals={counts.goals} shots={counts.shots} fouls={counts.fouls}")
    print(f"\n📈 xG: {report.team_xg.home:.2f} - {report.team_xg.away:.2f}")

    print("\n📄 CSV export")
    print(events_to_csv(report.match, report.events))


if __name__ == "__main__":
    asyncio.run(record_demo_match())

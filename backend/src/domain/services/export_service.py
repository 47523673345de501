"""
CSV export of recorded events.
"""

import csv
import io
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

import aiofiles

from core.exceptions import ValidationError
from core.utils import LoggerFactory

from ..models.event import MatchEvent
from ..models.match import Match

logger = LoggerFactory.get_logger(__name__)

CSV_HEADERS = [
    "Match ID",
    "Event ID",
    "Timestamp",
    "Type",
    "Team",
    "Player",
    "Position X",
    "Position Y",
]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def export_filename(match: Match) -> str:
    """``match-events-<home>-vs-<away>.csv`` with non-alphanumerics replaced by ``_``."""
    home = _UNSAFE_FILENAME_CHARS.sub("_", match.home_team)
    away = _UNSAFE_FILENAME_CHARS.sub("_", match.away_team)
    return f"match-events-{home}-vs-{away}.csv"


def _format_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat()


def event_row(
    event: MatchEvent,
    match: Match,
    matches_by_id: Optional[Dict[str, Match]] = None
) -> List[str]:
    """
    One CSV row. The team column shows the name of the side in the event's
    own match when it can be resolved, else in ``match``.
    """
    owner = (matches_by_id or {}).get(event.match_id, match)
    return [
        match.id,
        event.id,
        _format_timestamp(event.timestamp),
        event.type.value,
        owner.team_name(event.team),
        event.player.display_name if event.player else "Unknown",
        f"{event.x:.2f}",
        f"{event.y:.2f}",
    ]


def events_to_csv(
    match: Match,
    events: Sequence[MatchEvent],
    matches: Optional[Iterable[Match]] = None
) -> str:
    """
    Render events as CSV text.

    Args:
        match: Match (or aggregate) the export is for; its id fills the
            Match ID column
        events: Events to export, in the given order
        matches: Stored matches used to resolve team names of aggregated events
    """
    matches_by_id = {m.id: m for m in matches} if matches is not None else None

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for event in events:
        writer.writerow(event_row(event, match, matches_by_id))
    return buffer.getvalue()


async def write_events_csv(
    directory: Union[str, Path],
    match: Match,
    events: Sequence[MatchEvent],
    matches: Optional[Iterable[Match]] = None
) -> Path:
    """
    Write the CSV export into ``directory`` under ``export_filename(match)``.

    Raises:
        ValidationError: There are no events to export
    """
    if not events:
        raise ValidationError("events", 0, "nothing to export")

    path = Path(directory) / export_filename(match)
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, "w", encoding="utf-8", newline="") as f:
        await f.write(events_to_csv(match, events, matches))

    logger.info(f"Exported {len(events)} events to {path}")
    return path


__all__ = [
    'CSV_HEADERS',
    'export_filename',
    'event_row',
    'events_to_csv',
    'write_events_csv',
]

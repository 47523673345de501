"""
Expected goals (xG) estimation.

Two estimators live here and must stay separate:

* ``XGEstimator`` - deterministic geometric model, memoized per event id.
  The only estimator allowed to feed report totals.
* ``ShadingXGEstimator`` - the lighter heat-map shading model with fresh
  random jitter on every call.
"""

import math
import random
import string
from typing import Callable, Dict, Iterable, Optional

from core.utils import LoggerFactory, DataValidator

from ..models.base import TeamSide
from ..models.event import MatchEvent
from ..models.pitch import GOAL_WIDTH_METERS, PITCH_WIDTH_METERS
from ..models.statistics import TeamXG

logger = LoggerFactory.get_logger(__name__)

GOAL_CENTER_Y = 50.0
GOAL_POST_OFFSET = (GOAL_WIDTH_METERS / PITCH_WIDTH_METERS) * 50
GOAL_POST_Y1 = GOAL_CENTER_Y + GOAL_POST_OFFSET
GOAL_POST_Y2 = GOAL_CENTER_Y - GOAL_POST_OFFSET

DISTANCE_WEIGHT = 0.4
ANGLE_WEIGHT = 0.4
CENTRALITY_WEIGHT = 0.2
DISTANCE_DECAY = 0.05
JITTER_SCALE = 0.04
JITTER_FLOOR = 0.01

_HEX_DIGITS = set(string.hexdigits)


def _clamp_unit(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def jitter_seed(event_id: str) -> float:
    """
    Deterministic jitter seed in [0, 0.99] taken from the event id.

    The last 8 characters are read as base 16, stopping at the first
    non-hex character; an id tail without leading hex digits seeds 0.
    """
    tail = event_id[-8:]
    digits = ""
    for ch in tail:
        if ch not in _HEX_DIGITS:
            break
        digits += ch
    if not digits:
        return 0.0
    return (int(digits, 16) % 100) / 100


def geometric_xg(x: float, y: float) -> float:
    """Un-jittered geometric xG for a shot taken at (x, y)."""
    pitch_y = abs(y - GOAL_CENTER_Y)
    depth = 100 - x
    distance_to_goal = math.sqrt(depth ** 2 + pitch_y ** 2)

    angle_to_post1 = math.atan2(abs(y - GOAL_POST_Y1), depth)
    angle_to_post2 = math.atan2(abs(y - GOAL_POST_Y2), depth)
    shot_angle_degrees = abs(angle_to_post1 - angle_to_post2) * 180 / math.pi

    distance_factor = math.exp(-DISTANCE_DECAY * distance_to_goal)
    angle_factor = (shot_angle_degrees / 90) ** 1.5
    centrality_factor = 1 - pitch_y / 50

    return (
        DISTANCE_WEIGHT * distance_factor
        + ANGLE_WEIGHT * angle_factor
        + CENTRALITY_WEIGHT * centrality_factor
    )


class XGEstimator:
    """
    Deterministic xG model with per-event memoization.

    Once a value is computed for an event id the same float is returned for
    that id for the lifetime of the estimator, so regenerating a report never
    changes its totals.
    """

    def __init__(self):
        self._memo: Dict[str, float] = {}

    @property
    def memo_size(self) -> int:
        return len(self._memo)

    def estimate(self, x: float, y: float, event_id: str) -> float:
        """
        Estimate the probability that a shot from (x, y) is scored.

        Args:
            x: Position along the pitch in percent, 100 being the goal line
            y: Position across the pitch in percent
            event_id: Stable event id, used for memoization and jitter

        Returns:
            xG in [0, 1]
        """
        cached = self._memo.get(event_id)
        if cached is not None:
            return cached

        x = DataValidator.validate_percentage(x, "x")
        y = DataValidator.validate_percentage(y, "y")

        xg = geometric_xg(x, y)
        xg += jitter_seed(event_id) * JITTER_SCALE + JITTER_FLOOR
        xg = _clamp_unit(xg)

        self._memo[event_id] = xg
        logger.debug(f"xG for event {event_id} at ({x:.1f}, {y:.1f}): {xg:.3f}")
        return xg

    def estimate_event(self, event: MatchEvent) -> float:
        return self.estimate(event.x, event.y, event.id)

    def team_xg(
        self,
        events: Iterable[MatchEvent],
        side_of: Optional[Callable[[MatchEvent], Optional[TeamSide]]] = None
    ) -> TeamXG:
        """
        Sum xG over shot and goal events, split by side.

        Args:
            events: Events to evaluate; non-shot events are ignored
            side_of: Maps an event to the side it counts for. Defaults to the
                event's own side; returning None drops the event.
        """
        totals = TeamXG()
        for event in events:
            if not event.type.is_shot_attempt:
                continue
            side = side_of(event) if side_of else event.team
            if side is None:
                continue
            totals.add(side, self.estimate_event(event))
        return totals

    def clear(self) -> None:
        """Forget every memoized value. Only for starting a new session."""
        self._memo.clear()


class ShadingXGEstimator:
    """
    Heat-map shading model. Non-deterministic by design: each call draws new
    jitter, so its output must never be persisted or summed into reports.
    """

    MAX_JITTER = 0.05
    SCALE = 0.7

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def estimate(self, x: float, y: float) -> float:
        pitch_y = abs(y - GOAL_CENTER_Y)
        distance = math.sqrt((x - 100) ** 2 + pitch_y ** 2)
        distance_factor = max(0.0, 1 - distance / 100)
        angle_factor = 1 - pitch_y / 50
        xg = distance_factor * angle_factor * self.SCALE
        return _clamp_unit(xg + self._rng.random() * self.MAX_JITTER)

    def marker_radius(self, xg: float) -> float:
        """Marker radius used when shading shots by quality."""
        return 5 + xg * 15

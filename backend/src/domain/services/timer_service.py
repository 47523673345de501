"""
Match clock.

The timer counts seconds for the current half and signals when the half
length is reached. It never changes match state itself: the callbacks
decide what happens at half time and full time.
"""

import asyncio
import contextlib
from typing import Any, Awaitable, Callable, Optional, Set, Union

from config.settings import settings
from core.error_handler import safe_execute
from core.utils import LoggerFactory

from ..models.base import MatchHalf
from ..models.match import Match

logger = LoggerFactory.get_logger(__name__)

TimerCallback = Callable[[], Union[None, Awaitable[Any]]]


def format_clock(seconds: int) -> str:
    """Format a second count as ``MM:SS``."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


class MatchTimer:
    """
    Cooperative per-half match clock.

    ``tick()`` advances the clock by one second. ``start()`` runs it on an
    asyncio task that ticks every ``tick_interval`` seconds of wall time.
    """

    def __init__(
        self,
        match: Match,
        on_half_end: Optional[TimerCallback] = None,
        on_match_end: Optional[TimerCallback] = None,
        tick_interval: Optional[float] = None,
        allow_injury_time: Optional[bool] = None
    ):
        """
        Args:
            match: Match being timed; read only
            on_half_end: Called once when the first half reaches its length
            on_match_end: Called once when the second half reaches its length
            tick_interval: Wall-clock seconds per tick
            allow_injury_time: Keep counting past the half length
        """
        self.match = match
        self.on_half_end = on_half_end
        self.on_match_end = on_match_end
        self.tick_interval = settings.timer_tick_interval if tick_interval is None else tick_interval
        self.allow_injury_time = (
            settings.allow_injury_time if allow_injury_time is None else allow_injury_time
        )

        self.elapsed_seconds = 0
        self.injury_time_seconds = 0
        self.is_running = False
        self._signalled: Set[MatchHalf] = set()
        self._task: Optional[asyncio.Task] = None

    @property
    def half_length(self) -> int:
        """Seconds in one half."""
        return self.match.half_length_seconds or settings.default_match_length * 60 // 2

    @property
    def at_threshold(self) -> bool:
        return self.elapsed_seconds >= self.half_length

    async def tick(self) -> None:
        """Advance the clock one second, signalling at the end of a half."""
        if not self.is_running or self.match.is_finished:
            return

        if self.at_threshold:
            self.injury_time_seconds += 1
            logger.debug(f"Injury time {format_clock(self.injury_time_seconds)} in match {self.match.id}")
            return

        self.elapsed_seconds += 1
        logger.debug(f"Match {self.match.id} clock {self.format_clock()}")

        if self.at_threshold:
            if not self.allow_injury_time:
                self.is_running = False
            await self._signal_half_end()

    async def _signal_half_end(self) -> None:
        half = self.match.current_half
        if half in self._signalled:
            return
        self._signalled.add(half)

        if half is MatchHalf.FIRST_HALF:
            callback = self.on_half_end
            logger.info(f"Half time reached in match {self.match.id}")
        else:
            callback = self.on_match_end
            logger.info(f"Full time reached in match {self.match.id}")

        if callback is not None:
            await safe_execute(callback)

    async def _run(self) -> None:
        while self.is_running:
            await asyncio.sleep(self.tick_interval)
            await self.tick()

    async def start(self) -> None:
        """Start ticking on a background task, replacing any running one."""
        await self._cancel_task()
        if self.match.is_finished:
            logger.warning(f"Not starting timer: match {self.match.id} is finished")
            return
        self.is_running = True
        self._task = asyncio.ensure_future(self._run())
        logger.info(f"Timer started for match {self.match.id} at {self.format_clock()}")

    async def stop(self) -> None:
        """Stop ticking and wait for the background task to end."""
        self.is_running = False
        await self._cancel_task()
        logger.info(f"Timer stopped for match {self.match.id} at {self.format_clock()}")

    async def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def reset(self) -> None:
        """Zero the clock for the next half."""
        self.elapsed_seconds = 0
        self.injury_time_seconds = 0

    @contextlib.asynccontextmanager
    async def running(self):
        """Run the timer for the duration of the block; always stopped on exit."""
        await self.start()
        try:
            yield self
        finally:
            await self.stop()

    def format_clock(self) -> str:
        return format_clock(self.elapsed_seconds)

    def format_injury_time(self) -> str:
        return f"+{format_clock(self.injury_time_seconds)}"


__all__ = [
    'MatchTimer',
    'format_clock',
]

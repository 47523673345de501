"""
Match lifecycle: the state machine over a single match and the
storage-backed service that drives it from the recording screen.
"""

from typing import Callable, Optional, Sequence, Union

from config.settings import settings
from core.exceptions import (
    DomainException, ErrorContext, MatchNotFoundError, MatchStateError,
    PlayerNotFoundError, SubstitutionCapacityError,
    ValidationError
)
from core.error_handler import with_domain_error_handling
from core.utils import LoggerFactory, IdentifierFactory, DataValidator

from .base_service import BaseService, ServiceListResponse, ServiceResponse
from .ledger_service import EventLedger
from .setup_service import validate_setup
from ..models.base import EventType, MatchHalf, TeamSide
from ..models.match import Match
from ..models.player import Player

logger = LoggerFactory.get_logger(__name__)


class MatchStateMachine:
    """
    Owns half transitions and substitution-window quotas for one match.

    Halves only move forward (1 -> 2 -> finished). Asking for a state the
    match has already reached is a no-op. The score is not touched here;
    it is derived by the EventLedger.
    """

    def __init__(self, match: Match):
        self.match = match

    @property
    def current_half(self) -> MatchHalf:
        return self.match.current_half

    @property
    def is_finished(self) -> bool:
        return self.match.is_finished

    def _advance(self, target: MatchHalf) -> bool:
        if self.match.current_half.rank >= target.rank:
            logger.debug(
                f"Match {self.match.id} already at {self.match.current_half}, "
                f"ignoring transition to {target}"
            )
            return False
        previous = self.match.current_half
        self.match.current_half = target
        logger.info(f"Match {self.match.id} moved from half {previous} to {target}")
        return True

    def start_second_half(self) -> bool:
        """Move to the second half. Returns whether the state changed."""
        return self._advance(MatchHalf.SECOND_HALF)

    def finish(self) -> bool:
        """Finish the match. Returns whether the state changed."""
        return self._advance(MatchHalf.FINISHED)

    def remaining_substitution_windows(self, side: TeamSide) -> int:
        return max(0, self.match.substitution_window_cap - self.match.substitution_windows(side))

    def can_request_substitution(self, side: TeamSide) -> bool:
        return not self.is_finished and self.remaining_substitution_windows(side) > 0

    def request_substitution_window(self, side: Union[TeamSide, str]) -> int:
        """
        Use one substitution window for ``side``.

        Returns:
            The side's new window count

        Raises:
            MatchStateError: The match is finished
            SubstitutionCapacityError: The side has no windows left
        """
        side = TeamSide(side)
        context = ErrorContext(
            operation="request_substitution_window",
            match_id=self.match.id,
            parameters={'team': side.value}
        )

        if self.is_finished:
            raise MatchStateError("request substitution window", self.current_half, context=context)

        used = self.match.substitution_windows(side)
        cap = self.match.substitution_window_cap
        if used >= cap:
            raise SubstitutionCapacityError(side.value, used, cap, context=context)

        if side is TeamSide.HOME:
            self.match.home_substitution_windows += 1
        else:
            self.match.away_substitution_windows += 1

        logger.info(
            f"Substitution window {used + 1}/{cap} used by {side.value} in match {self.match.id}"
        )
        return used + 1


def validate_substitution_cap(cap: int) -> int:
    if isinstance(cap, bool) or not isinstance(cap, int):
        raise ValidationError("substitution_window_cap", cap, "must be an integer")
    if cap < 1 or cap > settings.max_substitution_window_cap:
        raise ValidationError(
            "substitution_window_cap", cap,
            f"must be between 1 and {settings.max_substitution_window_cap}"
        )
    return cap


class MatchService(BaseService[Match]):
    """
    Storage-backed match operations for the recording flow.

    Every mutation loads the whole collection, applies the change to one
    match and writes the collection back. Rejected operations return an
    unsuccessful ServiceResponse and leave storage untouched.
    """

    def __init__(self, store, storage_key: Optional[str] = None):
        super().__init__(store, Match, storage_key or settings.matches_key)

    @with_domain_error_handling()
    async def create_match(
        self,
        home_team: str,
        away_team: str,
        players: Sequence[Player] = (),
        leg_number: int = 1,
        category: str = "",
        match_length: Optional[int] = None,
        age_category: Optional[str] = None,
        substitution_window_cap: Optional[int] = None,
        require_category: bool = True
    ) -> ServiceResponse[Match]:
        """
        Set up a new match at 0-0 in the first half and store it.

        Args:
            home_team: Home team name
            away_team: Away team name
            players: Roster for both sides
            leg_number: Fixture leg, starting at 1
            category: Match category
            match_length: Minutes for both halves; defaults to the configured length
            age_category: Optional age group label
            substitution_window_cap: Windows per team; defaults to the configured cap
            require_category: Whether a blank category is rejected

        Returns:
            ServiceResponse with the new match
        """
        try:
            home_team, away_team, category = validate_setup(
                home_team, away_team, category, leg_number, require_category=require_category
            )
            cap = validate_substitution_cap(
                settings.substitution_window_cap if substitution_window_cap is None
                else substitution_window_cap
            )
            length = DataValidator.validate_optional_int(match_length, "match_length")
            if length is None:
                length = settings.default_match_length
            if length % 2:
                raise ValidationError("match_length", length, "must be a positive, even number of minutes")
        except ValidationError as e:
            logger.warning(f"Match setup rejected: {e}")
            return ServiceResponse.rejected(e)

        match = Match(
            id=IdentifierFactory.new_id(),
            home_team=home_team,
            away_team=away_team,
            start_time=IdentifierFactory.now_ms(),
            leg_number=leg_number,
            category=category,
            substitution_window_cap=cap,
            players=list(players),
            match_length=length,
            age_category=age_category,
        )

        matches = await self.load_all()
        matches.append(match)
        await self.save_all(matches)

        logger.info(f"Created match {match.id}: {home_team} vs {away_team} (leg {leg_number})")
        return ServiceResponse.ok(match)

    async def get_match(self, match_id: str) -> Optional[Match]:
        """Retrieve a match by ID, or None if it is not stored."""
        for match in await self.load_all():
            if match.id == match_id:
                return match
        return None

    @with_domain_error_handling(
        fallback_factory=lambda: ServiceListResponse(success=False, error="storage unavailable"),
        suppress_touchline_errors=True
    )
    async def list_matches(self) -> ServiceListResponse[Match]:
        """All stored matches, most recently started first."""
        matches = await self.load_all()
        matches.sort(key=lambda m: m.start_time, reverse=True)
        return ServiceListResponse(success=True, data=matches)

    async def _mutate(
        self,
        match_id: str,
        operation: str,
        apply: Callable[[Match], object]
    ) -> ServiceResponse[Match]:
        matches = await self.load_all()
        match = next((m for m in matches if m.id == match_id), None)
        if match is None:
            error = MatchNotFoundError(match_id, context=ErrorContext(operation=operation))
            logger.warning(f"{operation} rejected: {error}")
            return ServiceResponse.rejected(error)

        try:
            result = apply(match)
        except (DomainException, ValidationError) as e:
            logger.warning(f"{operation} rejected for match {match_id}: {e}")
            stored = await self.get_match(match_id)
            return ServiceResponse.rejected(e, data=stored)

        await self.save_all(matches)
        return ServiceResponse.ok(match, result=result)

    @with_domain_error_handling()
    async def record_event(
        self,
        match_id: str,
        event_type: Union[EventType, str],
        x: float,
        y: float,
        team: Union[TeamSide, str],
        player_id: Optional[str] = None,
        timestamp: Optional[int] = None
    ) -> ServiceResponse[Match]:
        """Record an event on a stored match; goals update the score."""
        def apply(match: Match):
            player = None
            if player_id is not None:
                player = match.player_by_id(player_id)
                if player is None:
                    raise PlayerNotFoundError(player_id, match.id)
            return EventLedger(match).record(event_type, x, y, team, player=player, timestamp=timestamp)

        return await self._mutate(match_id, "record_event", apply)

    @with_domain_error_handling()
    async def start_second_half(self, match_id: str) -> ServiceResponse[Match]:
        return await self._mutate(
            match_id, "start_second_half", lambda m: MatchStateMachine(m).start_second_half()
        )

    @with_domain_error_handling()
    async def finish_match(self, match_id: str) -> ServiceResponse[Match]:
        return await self._mutate(
            match_id, "finish_match", lambda m: MatchStateMachine(m).finish()
        )

    @with_domain_error_handling()
    async def request_substitution_window(
        self,
        match_id: str,
        team: Union[TeamSide, str]
    ) -> ServiceResponse[Match]:
        """Use a substitution window; at capacity or after full time this is a rejected no-op."""
        def apply(match: Match):
            try:
                side = TeamSide(team)
            except ValueError:
                raise ValidationError("team", team, "must be 'home' or 'away'")
            return MatchStateMachine(match).request_substitution_window(side)

        return await self._mutate(match_id, "request_substitution_window", apply)

    @with_domain_error_handling()
    async def delete_match(self, match_id: str) -> ServiceResponse[Match]:
        """Delete a match together with all of its events."""
        matches = await self.load_all()
        remaining = [m for m in matches if m.id != match_id]
        if len(remaining) == len(matches):
            return ServiceResponse.rejected(MatchNotFoundError(match_id))
        await self.save_all(remaining)
        logger.info(f"Deleted match {match_id}")
        return ServiceResponse.ok()

    async def clear_all_matches(self) -> None:
        """Remove every stored match."""
        await self.store.delete(self.storage_key)
        logger.info("Cleared all stored matches")


__all__ = [
    'MatchStateMachine',
    'MatchService',
    'validate_substitution_cap',
]

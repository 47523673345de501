"""
Tests for the exception hierarchy, error-handling decorators, utilities and settings.
"""
import pytest

import test_utils  # noqa: F401

from config.settings import Settings
from core.error_handler import (
    ErrorHandler, safe_execute, with_domain_error_handling, with_storage_retry
)
from core.exceptions import (
    DomainException, ErrorContext, MatchNotFoundError, MatchStateError,
    StorageConnectionError, StorageException, SubstitutionCapacityError,
    TouchlineException, ValidationError
)
from core.utils import DataValidator, IdentifierFactory, StorageKeyBuilder
from domain.models import MatchHalf


class TestExceptionHierarchy:

    def test_validation_error(self):
        error = ValidationError("x", 120, "must be within [0, 100]")
        assert isinstance(error, TouchlineException)
        assert error.error_code == "VALIDATION_ERROR"
        assert error.recoverable
        assert "120" in str(error)

    def test_domain_errors_are_recoverable(self):
        errors = [
            SubstitutionCapacityError("home", 3, 3),
            MatchStateError("record events", MatchHalf.FINISHED),
            MatchNotFoundError("m1"),
        ]
        for error in errors:
            assert isinstance(error, DomainException)
            assert error.recoverable

    def test_state_error_messages(self):
        assert "match finished" in MatchStateError("record events", MatchHalf.FINISHED).message
        assert "half 2" in MatchStateError("start second half", MatchHalf.SECOND_HALF).message

    def test_context_in_string_and_dict(self):
        context = ErrorContext(operation="record_event", match_id="m1", parameters={'type': 'goal'})
        error = SubstitutionCapacityError("away", 5, 5, context=context)
        assert "(Match: m1)" in str(error)
        assert "[Code: CAPACITY_ERROR]" in str(error)

        data = error.to_dict()
        assert data['error_type'] == "SubstitutionCapacityError"
        assert data['context']['parameters'] == {'type': 'goal'}

    def test_storage_errors(self):
        error = StorageConnectionError("redis", original_error=OSError("refused"))
        assert isinstance(error, StorageException)
        assert error.to_dict()['original_error'] == "refused"


class TestErrorHandler:

    @pytest.mark.asyncio
    async def test_retry_until_success(self):
        handler = ErrorHandler(default_retries=2, default_delay=0)
        attempts = []

        @handler.with_retry()
        async def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise StorageConnectionError("file")
            return "ok"

        assert await flaky() == "ok"
        assert len(attempts) == 3
        assert handler.get_failure_stats() == {}

    @pytest.mark.asyncio
    async def test_retry_gives_up(self):
        handler = ErrorHandler(default_retries=1, default_delay=0)

        @handler.with_retry()
        async def down():
            raise StorageConnectionError("redis")

        with pytest.raises(StorageConnectionError):
            await down()
        stats = handler.get_failure_stats()
        assert list(stats.values())[0]['total_attempts'] == 2
        handler.reset_stats()
        assert handler.get_failure_stats() == {}

    @pytest.mark.asyncio
    async def test_non_retryable_errors_pass_through(self):
        calls = []

        @with_storage_retry(max_retries=3, delay=0)
        async def invalid():
            calls.append(1)
            raise ValidationError("x", -1, "negative")

        with pytest.raises(ValidationError):
            await invalid()
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_domain_handler_wraps_unexpected_errors(self):
        @with_domain_error_handling()
        async def broken():
            raise KeyError("homeTeam")

        with pytest.raises(DomainException) as exc_info:
            await broken()
        assert isinstance(exc_info.value.original_error, KeyError)

    @pytest.mark.asyncio
    async def test_domain_handler_fallback(self):
        @with_domain_error_handling(fallback_value=[], suppress_touchline_errors=True)
        async def unavailable():
            raise StorageConnectionError("redis")

        assert await unavailable() == []

    @pytest.mark.asyncio
    async def test_domain_handler_fallback_factory_builds_each_time(self):
        @with_domain_error_handling(fallback_factory=list, suppress_touchline_errors=True)
        async def unavailable():
            raise StorageException("file store")

        first = await unavailable()
        first.append("stale")
        assert await unavailable() == []

    @pytest.mark.asyncio
    async def test_domain_handler_reraises_touchline_errors(self):
        @with_domain_error_handling()
        async def missing():
            raise MatchNotFoundError("m1")

        with pytest.raises(MatchNotFoundError):
            await missing()

    @pytest.mark.asyncio
    async def test_safe_execute_sync_and_async(self):
        async def answer():
            return 42

        def fail():
            raise RuntimeError("boom")

        assert await safe_execute(answer) == 42
        assert await safe_execute(fail, fallback_value="fallback") == "fallback"


class TestUtilities:

    def test_percentage_validation(self):
        assert DataValidator.validate_percentage(0, "x") == 0.0
        assert DataValidator.validate_percentage(100, "x") == 100.0
        for bad in (-0.1, 100.1, float("nan"), "50", True, None):
            with pytest.raises(ValidationError):
                DataValidator.validate_percentage(bad, "x")

    def test_positive_int_validation(self):
        assert DataValidator.validate_positive_int(2, "leg_number") == 2
        assert DataValidator.validate_optional_int(None, "leg_number") is None
        with pytest.raises(ValidationError):
            DataValidator.validate_positive_int(0, "leg_number")

    def test_required_str(self):
        assert DataValidator.validate_required_str("  Lions ", "home_team") == "Lions"
        with pytest.raises(ValidationError):
            DataValidator.validate_required_str(" ", "home_team")

    def test_identifiers(self):
        first, second = IdentifierFactory.new_id(), IdentifierFactory.new_id()
        assert first != second
        assert len(first) == 32
        int(first, 16)
        assert IdentifierFactory.now_ms() > 1_600_000_000_000

    def test_storage_keys(self):
        assert StorageKeyBuilder.build_key("touchline", "soccerMatches") == "touchline:soccerMatches"
        assert StorageKeyBuilder.build_key("", "soccerMatches") == "soccerMatches"
        assert StorageKeyBuilder.safe_filename("a/b:c") == "a_b_c.json"


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.matches_key == "soccerMatches"
        assert settings.categories_key == "matchCategories"
        assert settings.default_match_length == 90
        assert settings.substitution_window_cap == 3
        assert settings.max_substitution_window_cap == 5
        assert settings.max_players_per_team == 20

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("TOUCHLINE_STORAGE_BACKEND", "redis")
        monkeypatch.setenv("TOUCHLINE_ALLOW_INJURY_TIME", "true")
        settings = Settings(_env_file=None)
        assert settings.storage_backend == "redis"
        assert settings.allow_injury_time is True

    def test_redis_connection_kwargs(self):
        settings = Settings(_env_file=None, redis_url="redis://cache:6380/2", redis_max_connections=4)
        kwargs = settings.redis_connection_kwargs
        assert kwargs['host'] == "cache"
        assert kwargs['port'] == 6380
        assert kwargs['db'] == 2
        assert kwargs['max_connections'] == 4
        assert kwargs['decode_responses'] is True

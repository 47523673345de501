"""
Exception hierarchy for the Touchline match recorder.
Provides specific exceptions for validation, match state and storage errors with context.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ErrorContext:
    """Context information for errors."""
    operation: str
    match_id: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error context to dictionary."""
        return {
            'operation': self.operation,
            'match_id': self.match_id,
            'parameters': self.parameters,
            'timestamp': self.timestamp.isoformat()
        }


class TouchlineException(Exception):
    """
    Base exception class for all Touchline-specific errors.
    Provides rich context and error categorization.
    """

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None,
        error_code: Optional[str] = None,
        recoverable: bool = False
    ):
        super().__init__(message)
        self.message = message
        self.context = context
        self.original_error = original_error
        self.error_code = error_code
        self.recoverable = recoverable
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code,
            'recoverable': self.recoverable,
            'timestamp': self.timestamp.isoformat(),
            'context': self.context.to_dict() if self.context else None,
            'original_error': str(self.original_error) if self.original_error else None
        }

    def __str__(self) -> str:
        """Enhanced string representation with context."""
        base_msg = self.message
        if self.context and self.context.match_id:
            base_msg += f" (Match: {self.context.match_id})"
        if self.error_code:
            base_msg += f" [Code: {self.error_code}]"
        return base_msg


# =============================================================================
# Validation and Configuration Exceptions
# =============================================================================

class ValidationError(TouchlineException):
    """Raised when input validation fails."""

    def __init__(
        self,
        field: str,
        value: Any,
        constraint: str,
        context: Optional[ErrorContext] = None
    ):
        message = f"Validation failed for field '{field}': {constraint}. Got: {value}"
        super().__init__(
            message=message,
            context=context,
            error_code="VALIDATION_ERROR",
            recoverable=True
        )
        self.field = field
        self.value = value
        self.constraint = constraint


class ConfigurationError(TouchlineException):
    """Raised when configuration is invalid or missing."""

    def __init__(self, setting: str, message: str, context: Optional[ErrorContext] = None):
        full_message = f"Configuration error for '{setting}': {message}"
        super().__init__(
            message=full_message,
            context=context,
            error_code="CONFIG_ERROR",
            recoverable=False
        )
        self.setting = setting


# =============================================================================
# Domain-Level Exceptions
# =============================================================================

class DomainException(TouchlineException):
    """Base class for domain logic errors."""

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None,
        error_code: str = "DOMAIN_ERROR",
        recoverable: bool = True
    ):
        super().__init__(
            message=message,
            context=context,
            original_error=original_error,
            error_code=error_code,
            recoverable=recoverable
        )


class SubstitutionCapacityError(DomainException):
    """Raised when a team has used every substitution window it is allowed."""

    def __init__(
        self,
        team: str,
        used: int,
        cap: int,
        context: Optional[ErrorContext] = None
    ):
        message = f"Substitution windows at capacity for {team} team ({used}/{cap})"
        super().__init__(
            message=message,
            context=context,
            error_code="CAPACITY_ERROR",
            recoverable=True
        )
        self.team = team
        self.used = used
        self.cap = cap


class MatchStateError(DomainException):
    """Raised when an operation is not allowed in the match's current half."""

    def __init__(
        self,
        operation: str,
        current_half: Any,
        context: Optional[ErrorContext] = None
    ):
        if str(current_half) == "finished":
            message = f"Cannot {operation}: match finished"
        else:
            message = f"Cannot {operation} during half {current_half}"
        super().__init__(
            message=message,
            context=context,
            error_code="STATE_ERROR",
            recoverable=True
        )
        self.operation = operation
        self.current_half = current_half


class MatchNotFoundError(DomainException):
    """Raised when a match cannot be found."""

    def __init__(self, match_id: Optional[str] = None, context: Optional[ErrorContext] = None):
        if match_id:
            message = f"Match with ID {match_id} not found"
        else:
            message = "Match not found"
        super().__init__(
            message=message,
            context=context,
            error_code="MATCH_NOT_FOUND",
            recoverable=True
        )
        self.match_id = match_id


class PlayerNotFoundError(DomainException):
    """Raised when a player is not on the match roster."""

    def __init__(
        self,
        player_id: Optional[str] = None,
        match_id: Optional[str] = None,
        context: Optional[ErrorContext] = None
    ):
        if player_id:
            message = f"Player with ID {player_id} not found"
        else:
            message = "Player not found"

        if match_id:
            message += f" in match {match_id}"

        super().__init__(
            message=message,
            context=context,
            error_code="PLAYER_NOT_FOUND",
            recoverable=True
        )
        self.player_id = player_id
        self.match_id = match_id


# =============================================================================
# Storage-Related Exceptions
# =============================================================================

class StorageException(TouchlineException):
    """Base class for storage-related errors."""

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None,
        error_code: str = "STORAGE_ERROR",
        recoverable: bool = True
    ):
        super().__init__(
            message=message,
            context=context,
            original_error=original_error,
            error_code=error_code,
            recoverable=recoverable
        )


class StorageConnectionError(StorageException):
    """Raised when the storage backend cannot be reached."""

    def __init__(
        self,
        backend: str,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        message = f"Failed to connect to storage backend: {backend}"
        super().__init__(
            message=message,
            context=context,
            original_error=original_error,
            error_code="STORAGE_CONNECTION_ERROR",
            recoverable=True
        )
        self.backend = backend


class StorageSerializationError(StorageException):
    """Raised when stored data cannot be encoded or decoded."""

    def __init__(
        self,
        operation: str,
        key: str,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        message = f"Storage {operation} failed for key '{key}'"
        super().__init__(
            message=message,
            context=context,
            original_error=original_error,
            error_code="STORAGE_SERIALIZATION_ERROR",
            recoverable=False
        )
        self.operation = operation
        self.key = key

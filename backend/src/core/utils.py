"""
Core utilities for Touchline.
Common functionality used across the entire application.
"""

import logging
import math
import time
import uuid
from typing import Any, Optional

from .exceptions import ValidationError


class LoggerFactory:
    """Centralized logger configuration."""

    _configured = False

    @classmethod
    def setup_logging(cls, level: Optional[str] = None, format_string: Optional[str] = None):
        """Setup application-wide logging configuration."""
        if cls._configured:
            return

        if level is None:
            from config.settings import settings
            level = settings.log_level

        if format_string is None:
            format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format=format_string,
            handlers=[logging.StreamHandler()]
        )
        cls._configured = True

    @staticmethod
    def get_logger(name: str) -> logging.Logger:
        """Get a configured logger instance."""
        LoggerFactory.setup_logging()
        return logging.getLogger(name)


class IdentifierFactory:
    """Identifier and clock helpers shared by the recording flow."""

    @staticmethod
    def new_id() -> str:
        """32 hex characters; the tail doubles as the xG jitter seed."""
        return uuid.uuid4().hex

    @staticmethod
    def now_ms() -> int:
        """Current time as epoch milliseconds."""
        return int(time.time() * 1000)


class StorageKeyBuilder:
    """Standardized storage key generation."""

    @staticmethod
    def build_key(prefix: str, key: str) -> str:
        """Build a namespaced storage key."""
        if not prefix:
            return key
        return f"{prefix}:{key}"

    @staticmethod
    def safe_filename(key: str) -> str:
        """Map a storage key onto a file name."""
        cleaned = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in key)
        return f"{cleaned}.json"


class DataValidator:
    """Common data validation utilities."""

    @staticmethod
    def validate_percentage(value: Any, name: str) -> float:
        """Validate a pitch coordinate in percentage space."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(name, value, "must be a number")
        if math.isnan(value) or value < 0 or value > 100:
            raise ValidationError(name, value, "must be within [0, 100]")
        return float(value)

    @staticmethod
    def validate_positive_int(value: Any, name: str) -> int:
        """Validate positive integer values."""
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValidationError(name, value, "must be a positive integer")
        return value

    @staticmethod
    def validate_optional_int(value: Any, name: str) -> Optional[int]:
        """Validate optional integer values."""
        if value is None:
            return None
        return DataValidator.validate_positive_int(value, name)

    @staticmethod
    def validate_required_str(value: Any, name: str) -> str:
        """Validate a required, non-blank string and return it stripped."""
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(name, value, "is required")
        return value.strip()


__all__ = [
    'LoggerFactory',
    'IdentifierFactory',
    'StorageKeyBuilder',
    'DataValidator',
]

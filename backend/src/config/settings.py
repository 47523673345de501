"""
Application settings and configuration management.
All values can be overridden with TOUCHLINE_* environment variables or a .env file.
"""
from typing import Optional, Dict, Any
from urllib.parse import urlparse

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings - all values from environment variables."""

    # Application settings
    app_name: str = "Touchline"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Storage settings
    storage_backend: str = "file"  # memory, file or redis
    data_dir: str = ".data/touchline"
    matches_key: str = "soccerMatches"
    categories_key: str = "matchCategories"

    # Redis settings
    redis_url: str = "redis://localhost:6379/0"
    redis_password: Optional[str] = None
    redis_db: int = 0
    redis_max_connections: int = 10
    redis_key_prefix: str = "touchline"

    # Match rules
    default_match_length: int = 90  # Minutes, both halves
    substitution_window_cap: int = 3
    max_substitution_window_cap: int = 5
    max_players_per_team: int = 20

    # Timer settings
    timer_tick_interval: float = 1.0  # Seconds between ticks
    allow_injury_time: bool = False

    # Logging settings
    log_level: str = "INFO"

    @property
    def redis_connection_kwargs(self) -> Dict[str, Any]:
        """Get Redis connection parameters."""
        if self.redis_url.startswith('redis://'):
            parsed = urlparse(self.redis_url)
            return {
                'host': parsed.hostname or 'localhost',
                'port': parsed.port or 6379,
                'db': int(parsed.path.lstrip('/') or self.redis_db),
                'password': parsed.password or self.redis_password,
                'max_connections': self.redis_max_connections,
                'decode_responses': True
            }
        return {
            'host': 'localhost',
            'port': 6379,
            'db': self.redis_db,
            'password': self.redis_password,
            'max_connections': self.redis_max_connections,
            'decode_responses': True
        }

    class Config:
        env_file = ".env"
        env_prefix = "TOUCHLINE_"
        case_sensitive = False


# Global settings instance
settings = Settings()

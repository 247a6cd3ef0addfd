"""
Configuration management for the LP Analyzer.
Handles environment variables and application settings.
"""
import os
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _parse_delays(raw: str) -> List[float]:
    """Parse a comma separated list of seconds, e.g. "0,2,5"."""
    delays = []
    for part in raw.split(","):
        part = part.strip()
        if part:
            delays.append(float(part))
    return delays or [0.0]


class Config:
    """Application configuration loaded from environment variables."""

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")  # json or console

    # Request settings (hard timeout per fetch, seconds)
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "20"))

    # Multi-attempt extraction
    ATTEMPT_DELAYS: List[float] = _parse_delays(os.getenv("ATTEMPT_DELAYS", "0,2,5"))
    ATTEMPT_SCORE_THRESHOLD: int = int(os.getenv("ATTEMPT_SCORE_THRESHOLD", "80"))

    # Optional third-party rendering backend
    SCRAPER_API_KEY: Optional[str] = os.getenv("SCRAPER_API_KEY")

    # Claude API (optional - heuristic analysis is used without it)
    CLAUDE_API_KEY: Optional[str] = os.getenv("CLAUDE_API_KEY")
    CLAUDE_MODEL: str = os.getenv("CLAUDE_MODEL", "claude-sonnet-4-20250514")

    @classmethod
    def is_rendering_configured(cls) -> bool:
        """Check if the rendering service backend can be used."""
        return bool(cls.SCRAPER_API_KEY)

    @classmethod
    def is_claude_configured(cls) -> bool:
        """Check if Claude credentials are configured."""
        return bool(cls.CLAUDE_API_KEY)


config = Config()

"""Adapters package initialization."""
from lp_analyzer.adapters.fetch_strategies import (
    FetchAttempt,
    FetchResult,
    FetchStrategy,
    FetchStrategyChain,
    BareFetchStrategy,
    RenderingServiceStrategy,
    default_strategies,
    validate_url,
)
from lp_analyzer.adapters.claude_client import ClaudeClient

__all__ = [
    "FetchAttempt",
    "FetchResult",
    "FetchStrategy",
    "FetchStrategyChain",
    "BareFetchStrategy",
    "RenderingServiceStrategy",
    "default_strategies",
    "validate_url",
    "ClaudeClient",
]

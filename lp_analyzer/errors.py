"""
Typed errors for the LP Analyzer.

Only acquisition failures propagate out of the pipeline; extractors never
raise and return empty values instead.
"""
from typing import List, Optional


class LPAnalyzerError(Exception):
    """Base class for all pipeline errors."""


class InvalidUrl(LPAnalyzerError):
    """The input is not an absolute http(s) URL."""

    def __init__(self, url: str, reason: str = "not an absolute http(s) URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL {url!r}: {reason}")


class AcquisitionError(LPAnalyzerError):
    """No document could be obtained for a URL."""


class FetchExhausted(AcquisitionError):
    """Every fetch strategy and the final bare fetch failed."""

    def __init__(self, url: str, strategies: Optional[List[str]] = None):
        self.url = url
        self.strategies = strategies or []
        super().__init__(
            f"All fetch strategies failed for {url} "
            f"(tried: {', '.join(self.strategies) or 'none'})"
        )


class AllAttemptsFailed(AcquisitionError):
    """Every orchestrator attempt failed outright."""

    def __init__(self, url: str, attempts: int):
        self.url = url
        self.attempts = attempts
        super().__init__(f"All {attempts} extraction attempts failed for {url}")


class EnrichmentError(LPAnalyzerError):
    """The analysis service returned output that cannot be used."""

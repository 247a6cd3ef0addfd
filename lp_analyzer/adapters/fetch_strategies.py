"""
Fetch strategies for landing pages.

Many landing pages sit behind bot filters that reject anything that does
not look like a browser. The chain tries a fixed list of request profiles
in order and returns the first usable document.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlparse

import httpx

from lp_analyzer.config import config
from lp_analyzer.errors import FetchExhausted, InvalidUrl
from lp_analyzer.utils.logger import LayerLogger


STANDARD_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "ja,en-US;q=0.9,en;q=0.8",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Sec-Ch-Ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"Windows"',
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
}

MOBILE_HEADERS = {
    "User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ja-JP,ja;q=0.9",
}

CURL_HEADERS = {
    "User-Agent": "curl/7.88.1",
    "Accept": "*/*",
}

CRAWLER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

RENDERING_ENDPOINT = "https://api.scraperapi.com/"


def validate_url(url: str) -> str:
    """
    Check that url is an absolute http(s) URL.

    Returns:
        The stripped URL

    Raises:
        InvalidUrl: for anything else
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidUrl(str(url), "empty url")
    url = url.strip()
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidUrl(url, str(e)) from e
    if parsed.scheme not in ("http", "https"):
        raise InvalidUrl(url, f"unsupported scheme '{parsed.scheme}'")
    if not parsed.netloc or not hostname:
        raise InvalidUrl(url, "missing host")
    return url


@dataclass
class FetchAttempt:
    """Outcome of one strategy against one URL."""
    url: str
    strategy: str
    success: bool
    status_code: Optional[int] = None
    body: str = ""
    error: Optional[str] = None


@dataclass
class FetchResult:
    """A usable document and how it was obtained."""
    url: str
    html: str
    strategy: str
    status_code: Optional[int] = None
    attempts: List[FetchAttempt] = field(default_factory=list)


class FetchStrategy:
    """
    One way of requesting a page.

    Subclasses override request_args() to change the request; attempt() turns
    the response into a FetchAttempt and never raises for network errors.
    """

    name = "base"

    def __init__(self, name: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        if name:
            self.name = name
        self.headers = headers

    def request_args(self, url: str) -> Dict[str, Any]:
        return {"url": url, "headers": self.headers}

    async def attempt(self, client: httpx.AsyncClient, url: str) -> FetchAttempt:
        try:
            response = await client.request("GET", **self.request_args(url))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return FetchAttempt(
                url=url,
                strategy=self.name,
                success=False,
                error=f"{type(e).__name__}: {e}",
            )

        body = response.text
        if not response.is_success:
            return FetchAttempt(
                url=url,
                strategy=self.name,
                success=False,
                status_code=response.status_code,
                error=f"HTTP {response.status_code}",
            )
        if not body.strip():
            return FetchAttempt(
                url=url,
                strategy=self.name,
                success=False,
                status_code=response.status_code,
                error="empty body",
            )
        return FetchAttempt(
            url=url,
            strategy=self.name,
            success=True,
            status_code=response.status_code,
            body=body,
        )

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"


class BareFetchStrategy(FetchStrategy):
    """Last resort: a request with no custom headers at all."""

    name = "simple-fetch"

    def __init__(self):
        super().__init__(headers=None)


class RenderingServiceStrategy(FetchStrategy):
    """Fetch through a third-party rendering service that executes scripts."""

    name = "scraperapi-render"

    def __init__(self, api_key: str, endpoint: str = RENDERING_ENDPOINT):
        super().__init__(headers=None)
        self.api_key = api_key
        self.endpoint = endpoint

    def request_args(self, url: str) -> Dict[str, Any]:
        params = {"api_key": self.api_key, "url": url, "render": "true"}
        return {"url": self.endpoint, "params": params}


def default_strategies() -> List[FetchStrategy]:
    """Browser-like profiles, most convincing first."""
    return [
        FetchStrategy("standard-headers", STANDARD_HEADERS),
        FetchStrategy("mobile-ua", MOBILE_HEADERS),
        FetchStrategy("curl-emulation", CURL_HEADERS),
        FetchStrategy("googlebot", CRAWLER_HEADERS),
    ]


class FetchStrategyChain:
    """
    Ordered list of strategies plus an optional bare fallback.

    The first attempt with a 2xx status and a non-empty body wins.
    """

    def __init__(
        self,
        strategies: Optional[Sequence[FetchStrategy]] = None,
        bare_fallback: bool = True,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        self.fallback = BareFetchStrategy() if bare_fallback else None
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.transport = transport
        self.logger = LayerLogger("fetch")

    @property
    def strategy_names(self) -> List[str]:
        names = [s.name for s in self.strategies]
        if self.fallback is not None:
            names.append(self.fallback.name)
        return names

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch url with each strategy in turn.

        Raises:
            InvalidUrl: if url is not an absolute http(s) URL
            FetchExhausted: if every strategy failed
        """
        url = validate_url(url)
        attempts: List[FetchAttempt] = []

        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            for strategy in self.strategies:
                attempt = await self._try(strategy, client, url)
                attempts.append(attempt)
                if attempt.success:
                    return self._result(url, attempt, attempts)

            if self.fallback is not None:
                self.logger.log_fallback(
                    from_source=self.strategies[-1].name if self.strategies else "none",
                    to_source=self.fallback.name,
                    reason="all header profiles failed",
                    url=url,
                )
                attempt = await self._try(self.fallback, client, url)
                attempts.append(attempt)
                if attempt.success:
                    return self._result(url, attempt, attempts)

        self.logger.log_error(
            "All fetch strategies failed",
            error_type="fetch_exhausted",
            url=url,
            strategies=[a.strategy for a in attempts],
        )
        raise FetchExhausted(url, [a.strategy for a in attempts])

    async def _try(self, strategy: FetchStrategy, client: httpx.AsyncClient, url: str) -> FetchAttempt:
        attempt = await strategy.attempt(client, url)
        self.logger.log_fetch_attempt(
            url=url,
            strategy=strategy.name,
            status_code=attempt.status_code,
            result="success" if attempt.success else "failed",
            error=attempt.error,
            content_length=len(attempt.body),
        )
        return attempt

    @staticmethod
    def _result(url: str, attempt: FetchAttempt, attempts: List[FetchAttempt]) -> FetchResult:
        return FetchResult(
            url=url,
            html=attempt.body,
            strategy=attempt.strategy,
            status_code=attempt.status_code,
            attempts=attempts,
        )

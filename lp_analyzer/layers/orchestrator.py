"""
Multi-Attempt Orchestrator

Pages that render content late or rotate bot defences often give a thin
document on the first request. The orchestrator re-fetches after fixed
delays, scores each attempt, and keeps the most complete record.
"""
import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from lp_analyzer.adapters.fetch_strategies import FetchStrategyChain, validate_url
from lp_analyzer.config import config
from lp_analyzer.errors import AcquisitionError, AllAttemptsFailed
from lp_analyzer.layers.assembler import ResultAssembler
from lp_analyzer.models.record import ExtractionResult, PriceSummary
from lp_analyzer.utils.logger import LayerLogger

MAX_MERGED_FEATURES = 10
MAX_MERGED_EFFECTS = 5
MAX_MERGED_INGREDIENTS = 10
MAX_MERGED_IMAGES = 10


def score_attempt(result: ExtractionResult) -> int:
    return result.completeness_score()


class MultiAttemptOrchestrator:
    """
    Repeated fetch-and-extract against one backend.

    Attempt i waits delays[i] seconds first. The loop stops early once an
    attempt reaches the score threshold. Ties keep the earlier attempt.
    """

    def __init__(
        self,
        fetcher: Optional[FetchStrategyChain] = None,
        assembler: Optional[ResultAssembler] = None,
        delays: Optional[Sequence[float]] = None,
        threshold: Optional[int] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        score_fn: Callable[[ExtractionResult], int] = score_attempt,
        name: str = "direct",
    ):
        self.fetcher = fetcher or FetchStrategyChain()
        self.assembler = assembler or ResultAssembler()
        self.delays = list(delays) if delays is not None else list(config.ATTEMPT_DELAYS)
        self.threshold = threshold if threshold is not None else config.ATTEMPT_SCORE_THRESHOLD
        self.sleep = sleep
        self.score_fn = score_fn
        self.name = name
        self.logger = LayerLogger("orchestrator")

    async def run(self, url: str) -> ExtractionResult:
        """
        Run up to len(delays) attempts and return the best record.

        Raises:
            InvalidUrl: if url is not an absolute http(s) URL
            AllAttemptsFailed: if no attempt produced a document
        """
        url = validate_url(url)
        best: Optional[ExtractionResult] = None
        best_score = -1

        for index, delay in enumerate(self.delays, start=1):
            if delay > 0:
                self.logger.log_action("attempt_delay", "waiting", url=url, attempt=index, seconds=delay)
                await self.sleep(delay)

            try:
                fetched = await self.fetcher.fetch(url)
            except AcquisitionError as e:
                self.logger.log_error(
                    str(e),
                    error_type=type(e).__name__,
                    url=url,
                    backend=self.name,
                    attempt=index,
                )
                continue

            result = self.assembler.assemble(url, fetched.html, fetch_strategy=fetched.strategy)
            score = self.score_fn(result)
            self.logger.log_action(
                "attempt_scored",
                "completed",
                url=url,
                backend=self.name,
                attempt=index,
                score=score,
                strategy=fetched.strategy,
            )

            if score > best_score:
                best, best_score = result, score

            if score >= self.threshold:
                self.logger.log_decision(
                    decision="stop_early",
                    reason=f"score {score} >= threshold {self.threshold}",
                    url=url,
                    backend=self.name,
                    attempt=index,
                )
                break

        if best is None:
            raise AllAttemptsFailed(url, len(self.delays))

        self.logger.log_decision(
            decision="best_attempt",
            reason=f"highest score {best_score}",
            url=url,
            backend=self.name,
        )
        return best


def _union(lists: List[List[Any]], cap: Optional[int] = None) -> List[Any]:
    merged = []
    for items in lists:
        for item in items:
            if item not in merged:
                merged.append(item)
    return merged[:cap]


def merge_results(results: Sequence[ExtractionResult]) -> ExtractionResult:
    """
    Combine partial records from several backends.

    `results` must be ordered best first. Singular fields come from the
    first record that has them; list fields (structured data included) are
    unions; prices come from the first record that found any price at all
    so the campaign/regular pair is never split across documents.
    """
    if not results:
        raise ValueError("merge_results needs at least one result")
    if len(results) == 1:
        return results[0]

    def first(name: str):
        for result in results:
            value = getattr(result, name)
            if value:
                return value
        return getattr(results[0], name)

    priced = next((r for r in results if r.prices.has_any()), None)
    prices = priced.prices if priced else PriceSummary()
    price = priced.price if priced else ""

    return ExtractionResult(
        url=results[0].url,
        title=first("title"),
        product_name=first("product_name"),
        description=first("description"),
        category=first("category"),
        features=_union([r.features for r in results], MAX_MERGED_FEATURES),
        effects=_union([r.effects for r in results], MAX_MERGED_EFFECTS),
        ingredients=_union([r.ingredients for r in results], MAX_MERGED_INGREDIENTS),
        company=first("company"),
        campaign=first("campaign"),
        guarantee=first("guarantee"),
        authority=_union([r.authority for r in results], 50),
        testimonial_count=max(r.testimonial_count for r in results),
        images=_union([r.images for r in results], MAX_MERGED_IMAGES),
        structured_data=_union([r.structured_data for r in results]),
        og_title=first("og_title"),
        og_description=first("og_description"),
        og_image=first("og_image"),
        prices=prices,
        price=price,
        fetch_strategy="+".join(r.fetch_strategy or "unknown" for r in results),
    )

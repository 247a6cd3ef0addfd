"""
Extraction Layer for the LP Analyzer.

Entry point of the pipeline: URL in, canonical ExtractionResult out.
Which backends produced the document is invisible to callers.
"""
import asyncio
from typing import List, Optional, Sequence, Tuple

from lp_analyzer.adapters.fetch_strategies import (
    FetchStrategyChain,
    RenderingServiceStrategy,
    validate_url,
)
from lp_analyzer.config import config
from lp_analyzer.errors import AcquisitionError, AllAttemptsFailed
from lp_analyzer.layers.orchestrator import MultiAttemptOrchestrator, merge_results
from lp_analyzer.models.record import ExtractionResult
from lp_analyzer.utils.logger import LayerLogger

# Rendering services execute scripts and are slow
RENDERING_TIMEOUT = 60


def default_backends() -> List[MultiAttemptOrchestrator]:
    """Direct fetch always; the rendering service when it is configured."""
    backends = [MultiAttemptOrchestrator(name="direct")]
    if config.is_rendering_configured():
        chain = FetchStrategyChain(
            strategies=[RenderingServiceStrategy(config.SCRAPER_API_KEY)],
            bare_fallback=False,
            timeout=max(config.REQUEST_TIMEOUT, RENDERING_TIMEOUT),
        )
        backends.append(MultiAttemptOrchestrator(chain, delays=[0], name="rendering"))
    return backends


class ExtractionService:
    """
    Extraction service - runs one or more acquisition backends.

    With a single backend its result is returned as is. With several they
    run concurrently: the first result reaching the score threshold wins
    and the rest are cancelled; otherwise the successful results are
    merged, best first.
    """

    def __init__(
        self,
        backends: Optional[Sequence[MultiAttemptOrchestrator]] = None,
        threshold: Optional[int] = None,
    ):
        self.backends = list(backends) if backends is not None else default_backends()
        self.threshold = threshold if threshold is not None else config.ATTEMPT_SCORE_THRESHOLD
        self.logger = LayerLogger("extraction_layer")

    async def extract(self, url: str) -> ExtractionResult:
        """
        Extract the canonical record for a landing page.

        Raises:
            InvalidUrl: if url is not an absolute http(s) URL
            AcquisitionError: if no backend produced a document
        """
        url = validate_url(url)
        self.logger.log_action(
            "extraction",
            "started",
            url=url,
            backends=[b.name for b in self.backends],
        )

        if len(self.backends) == 1:
            result = await self.backends[0].run(url)
        else:
            result = await self._race(url)

        self.logger.log_action(
            "extraction",
            "completed",
            url=url,
            score=result.completeness_score(),
            fetch_strategy=result.fetch_strategy,
        )
        return result

    async def _race(self, url: str) -> ExtractionResult:
        tasks = [
            asyncio.create_task(self._run_backend(backend, url))
            for backend in self.backends
        ]
        successes: List[Tuple[int, ExtractionResult]] = []
        try:
            for next_done in asyncio.as_completed(tasks):
                name, result = await next_done
                if result is None:
                    continue
                score = result.completeness_score()
                successes.append((score, result))
                if score >= self.threshold:
                    self.logger.log_decision(
                        decision=f"use_{name}",
                        reason=f"first result at threshold (score {score})",
                        url=url,
                    )
                    return result
        finally:
            pending = [t for t in tasks if not t.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if not successes:
            raise AllAttemptsFailed(url, len(self.backends))

        successes.sort(key=lambda s: s[0], reverse=True)
        self.logger.log_decision(
            decision="merge_results",
            reason="no backend reached the threshold",
            url=url,
            scores=[s for s, _ in successes],
        )
        return merge_results([r for _, r in successes])

    async def _run_backend(
        self, backend: MultiAttemptOrchestrator, url: str
    ) -> Tuple[str, Optional[ExtractionResult]]:
        try:
            return backend.name, await backend.run(url)
        except AcquisitionError as e:
            self.logger.log_fallback(
                from_source=backend.name,
                to_source="other_backends",
                reason=str(e),
                url=url,
            )
            return backend.name, None

"""
Structured logging for the LP Analyzer.

Every pipeline step (strategy attempt, orchestrator attempt, score,
fallback) is emitted as one structlog event. A per-request trace id is
bound through structlog's contextvars so concurrent requests stay apart.
"""
import logging
import uuid
from typing import List, Optional

import structlog

from lp_analyzer.config import config

TRACE_ID_KEY = "trace_id"


def _new_trace_id() -> str:
    return uuid.uuid4().hex[:8]


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """Bind a trace id to the current context (one per API request)."""
    trace_id = trace_id or _new_trace_id()
    structlog.contextvars.bind_contextvars(**{TRACE_ID_KEY: trace_id})
    return trace_id


def get_trace_id() -> str:
    """Trace id of the current context, binding a fresh one if none is set."""
    bound = structlog.contextvars.get_contextvars()
    return bound.get(TRACE_ID_KEY) or set_trace_id()


def _log_level() -> int:
    level = logging.getLevelName(config.LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging():
    """Configure structlog: JSON lines in production, coloured console locally."""
    if config.LOG_FORMAT == "json":
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


class LayerLogger:
    """
    Logger bound to one pipeline layer (fetch, orchestrator, extraction,
    analysis). The helpers fix the event names so logs can be filtered
    per kind of step.
    """

    def __init__(self, layer_name: str):
        self.layer_name = layer_name
        self.logger = get_logger(layer_name).bind(layer=layer_name)

    def log_decision(self, decision: str, reason: str, url: Optional[str] = None, **extra):
        self.logger.info("decision_made", decision=decision, reason=reason, url=url, **extra)

    def log_action(self, action: str, status: str = "started", **extra):
        self.logger.info(f"action_{status}", action=action, **extra)

    def log_fallback(self, from_source: str, to_source: str, reason: str, **extra):
        """Warn that a step failed and the next source is being tried."""
        self.logger.warning(
            "fallback_triggered",
            from_source=from_source,
            to_source=to_source,
            reason=reason,
            **extra
        )

    def log_error(self, error: str, error_type: str = "unknown", **extra):
        self.logger.error("error_occurred", error=error, error_type=error_type, **extra)

    def log_fetch_attempt(
        self,
        url: str,
        strategy: str,
        status_code: Optional[int],
        result: str,
        **extra
    ):
        """One fetch strategy attempt; result is "success" or the failure reason."""
        self.logger.info(
            "fetch_attempt",
            url=url,
            strategy=strategy,
            status_code=status_code,
            result=result,
            **extra
        )

    def log_extraction_summary(
        self,
        url: str,
        fields_present: List[str],
        fields_missing: List[str],
        score: int,
        **extra
    ):
        """Which canonical fields one extraction produced, with its attempt score."""
        self.logger.info(
            "extraction_summary",
            url=url,
            fields_present=fields_present,
            fields_missing=fields_missing,
            attempt_score=score,
            **extra
        )


configure_logging()

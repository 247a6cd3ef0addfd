"""Layers package initialization."""
from lp_analyzer.layers.assembler import ResultAssembler
from lp_analyzer.layers.orchestrator import MultiAttemptOrchestrator, merge_results, score_attempt
from lp_analyzer.layers.extraction import ExtractionService
from lp_analyzer.layers.analysis import AnalysisLayer, placeholder_record

__all__ = [
    "ResultAssembler",
    "MultiAttemptOrchestrator",
    "merge_results",
    "score_attempt",
    "ExtractionService",
    "AnalysisLayer",
    "placeholder_record",
]

"""
LP Analyzer - FastAPI Application
Main entry point with REST API endpoints.
"""
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from lp_analyzer.config import config
from lp_analyzer.errors import AcquisitionError, InvalidUrl
from lp_analyzer.layers.analysis import AnalysisLayer, placeholder_record
from lp_analyzer.layers.extraction import ExtractionService
from lp_analyzer.utils.logger import get_logger, set_trace_id


# Initialize FastAPI app
app = FastAPI(
    title="LP Analyzer",
    description="Extracts product and price data from Japanese landing pages and suggests ad media",
    version="1.0.0",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize layers
extraction_service = ExtractionService()
analysis_layer = AnalysisLayer()

logger = get_logger("main")


class UrlRequest(BaseModel):
    """Request body for extraction and analysis."""
    url: str


class AnalyzeResponse(BaseModel):
    """Enriched record plus debug information."""
    result: Dict[str, Any]
    debug: Dict[str, Any]
    trace_id: str
    error: Optional[str] = None


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "claude_configured": config.is_claude_configured(),
        "rendering_configured": config.is_rendering_configured(),
    }


@app.post("/api/extract")
async def extract(request: UrlRequest):
    """
    Extract the canonical record for a landing page.

    400 for an invalid URL, 502 when no document could be fetched.
    """
    trace_id = set_trace_id()
    logger.info("extract_request", url=request.url, trace_id=trace_id)

    try:
        result = await extraction_service.extract(request.url)
    except InvalidUrl as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AcquisitionError as e:
        logger.error("extract_failed", url=request.url, error=str(e))
        raise HTTPException(status_code=502, detail=str(e))

    return result.to_json_dict()


@app.post("/api/analyze", response_model=AnalyzeResponse)
async def analyze(request: UrlRequest):
    """
    Extract and enrich a landing page.

    When nothing can be fetched the result is a labelled placeholder
    instead of an error.
    """
    trace_id = set_trace_id()
    logger.info("analyze_request", url=request.url, trace_id=trace_id)

    try:
        record = await extraction_service.extract(request.url)
    except InvalidUrl as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AcquisitionError as e:
        logger.warning("analyze_placeholder", url=request.url, error=str(e))
        enriched = placeholder_record(request.url, str(e))
        return AnalyzeResponse(
            result=enriched.to_json_dict(),
            debug={"source": enriched.source.value},
            trace_id=trace_id,
            error=str(e),
        )

    enriched, debug_info = await analysis_layer.enrich(record)
    logger.info(
        "analyze_completed",
        url=request.url,
        source=enriched.source.value,
        score=record.completeness_score(),
    )
    return AnalyzeResponse(
        result=enriched.to_json_dict(),
        debug=debug_info,
        trace_id=trace_id,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)

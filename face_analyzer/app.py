from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from groq import APIStatusError

from .catalog.data_store import get_catalog
from .catalog.models import Service
from .exceptions import ServiceException, provider_exception_handler, service_exception_handler
from .llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .logging_config import setup_logging
from .recommendations.cache import get_cache_stats, get_profiles
from .recommendations.models import AnalysisResponse, RankRequest, RankResponse, ScoredServiceOut
from .recommendations.pipeline import analyze_image
from .recommendations.scoring import score_services

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

setup_logging()

app = FastAPI(title="Face Analyzer API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(ServiceException, service_exception_handler)
app.add_exception_handler(APIStatusError, provider_exception_handler)


def get_llm_config() -> LLMConfig:
    return DEFAULT_LLM_CONFIG


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "Face-Analyzer is live."


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/services")
def services() -> dict[str, list[Service]]:
    return get_catalog()


@app.get("/cache/stats")
def cache_stats() -> dict:
    return get_cache_stats()


# ── Recommendation endpoints ─────────────────────────────────────────────


@app.post("/recommendations", response_model=RankResponse)
def recommendations(body: RankRequest) -> RankResponse:
    scored = score_services(body.features, get_profiles())
    return RankResponse(
        services=[
            ScoredServiceOut(**s.service.model_dump(), score=s.score)
            for s in scored[:body.limit]
        ],
        total_candidates=len(scored),
    )


def _too_large() -> HTTPException:
    return HTTPException(status_code=413, detail="Image exceeds the 10 MB upload limit")


async def _read_upload(request: Request) -> bytes:
    """Read the raw body, refusing it as soon as it passes ``MAX_UPLOAD_BYTES``."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > MAX_UPLOAD_BYTES:
        raise _too_large()

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > MAX_UPLOAD_BYTES:
            raise _too_large()
    return bytes(body)


@app.post("/analyze", response_model=AnalysisResponse)
async def analyze(
    request: Request,
    config: LLMConfig = Depends(get_llm_config),
) -> AnalysisResponse:
    body = await _read_upload(request)
    if not body:
        raise HTTPException(status_code=400, detail="Request body must contain an image")

    # The Groq client is synchronous.
    return await run_in_threadpool(
        analyze_image, body, request.headers.get("content-type"), config=config,
    )

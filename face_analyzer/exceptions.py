"""
Service-layer exceptions and their FastAPI handlers.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from groq import APIStatusError

logger = logging.getLogger(__name__)


class ServiceException(Exception):
    """Base exception for service layer errors."""

    status_code = 500


class CatalogError(ServiceException):
    """Raised when the service catalog cannot be loaded."""


class InvalidServiceRecord(CatalogError, ValueError):
    """Raised when a catalog entry is missing required fields."""


class ModelOutputError(ServiceException):
    """Raised when an LLM response cannot be turned into the expected JSON."""

    status_code = 502

    def __init__(self, stage: str, message: str, raw: Any = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.raw = raw


class LLMUnavailableError(ServiceException):
    """Raised when an LLM call is required but the LLM is disabled or unconfigured."""

    status_code = 503


async def service_exception_handler(
    request: Request,
    exc: ServiceException,
) -> JSONResponse:
    logger.error("Service error in %s: %s", request.url.path, exc, exc_info=True)

    content: dict[str, Any] = {"error": str(exc), "type": exc.__class__.__name__}
    if isinstance(exc, ModelOutputError):
        content["stage"] = exc.stage
        content["raw"] = exc.raw

    return JSONResponse(status_code=exc.status_code, content=content)


async def provider_exception_handler(
    request: Request,
    exc: APIStatusError,
) -> JSONResponse:
    logger.error(
        "LLM provider error in %s: %s %s", request.url.path, exc.status_code, exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code or 500,
        content={"error": exc.message, "details": exc.body},
    )

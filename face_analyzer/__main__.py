"""
Run the API with Uvicorn.

Usage:
    python -m face_analyzer

Host and port come from ``HOST`` and ``PORT`` (defaults ``0.0.0.0`` and ``3000``).
"""
from __future__ import annotations

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "face_analyzer.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_BUNDLED_CATALOG = Path(__file__).resolve().parent.parent / "data" / "services.json"


@dataclass(frozen=True)
class CatalogConfig:
    services_path: Path = field(
        default_factory=lambda: Path(os.getenv("SERVICES_PATH", str(_BUNDLED_CATALOG)))
    )


DEFAULT_CATALOG_CONFIG = CatalogConfig()

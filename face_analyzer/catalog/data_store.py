from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..exceptions import CatalogError, InvalidServiceRecord
from .config import DEFAULT_CATALOG_CONFIG
from .models import Service

logger = logging.getLogger(__name__)

Catalog = dict[str, list[Service]]

_catalog: Catalog | None = None


def parse_service(record: Any, category: str = "?", index: int = 0) -> Service:
    """Validate one raw catalog entry, raising ``InvalidServiceRecord`` on bad shape."""
    if isinstance(record, Service):
        return record
    if not isinstance(record, Mapping):
        raise InvalidServiceRecord(
            f"Service #{index} in category {category!r} is not an object: {record!r}"
        )
    try:
        return Service.model_validate(dict(record))
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise InvalidServiceRecord(
            f"Service #{index} in category {category!r} is invalid ({fields})"
        ) from exc


def parse_catalog(raw: Any) -> Catalog:
    """Turn the decoded JSON catalog into ``{category: [Service, ...]}``, keeping order."""
    if not isinstance(raw, Mapping):
        raise CatalogError("Catalog must be an object mapping category names to service lists")

    catalog: Catalog = {}
    for category, entries in raw.items():
        if not isinstance(entries, list):
            raise CatalogError(f"Category {category!r} must be a list of services")
        catalog[str(category)] = [
            parse_service(entry, str(category), i) for i, entry in enumerate(entries)
        ]
    return catalog


def load_catalog(path: Path | str) -> Catalog:
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise CatalogError(f"Service catalog not found at {path}") from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Service catalog at {path} is not valid JSON: {exc}") from exc

    catalog = parse_catalog(raw)
    logger.info(
        "Loaded %d services in %d categories from %s",
        sum(len(v) for v in catalog.values()), len(catalog), path,
    )
    return catalog


def get_catalog() -> Catalog:
    """Return the in-memory catalog, loading it on first call."""
    global _catalog
    if _catalog is None:
        _catalog = load_catalog(DEFAULT_CATALOG_CONFIG.services_path)
    return _catalog


def reload_catalog(path: Path | str | None = None) -> Catalog:
    """Drop the cached catalog and load it again (optionally from another file)."""
    global _catalog
    _catalog = load_catalog(path or DEFAULT_CATALOG_CONFIG.services_path)
    return _catalog

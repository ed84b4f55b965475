from __future__ import annotations

from ..catalog.data_store import Catalog, get_catalog
from .scoring import ServiceProfile, build_profiles

_profiles: list[ServiceProfile] | None = None
_source: Catalog | None = None
_hits: int = 0
_misses: int = 0


def get_profiles(catalog: Catalog | None = None) -> list[ServiceProfile]:
    """
    Return scoring profiles for ``catalog`` (default: the loaded catalog).

    Profiles are rebuilt only when a different catalog object is passed, so a
    reload invalidates them and repeat requests reuse the keyword sets.
    """
    global _profiles, _source, _hits, _misses
    if catalog is None:
        catalog = get_catalog()
    if _profiles is not None and _source is catalog:
        _hits += 1
        return _profiles
    _misses += 1
    _profiles = build_profiles(catalog)
    _source = catalog
    return _profiles


def get_cache_stats() -> dict:
    total = _hits + _misses
    return {
        "size": len(_profiles) if _profiles is not None else 0,
        "hits": _hits,
        "misses": _misses,
        "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
    }


def clear_cache() -> None:
    global _profiles, _source, _hits, _misses
    _profiles = None
    _source = None
    _hits = 0
    _misses = 0

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from lunar import PhaseResolver

from ..settings import get_resolver


router = APIRouter()


@router.get("/health", include_in_schema=False)
def service_health(resolver: PhaseResolver = Depends(get_resolver)) -> Dict[str, Any]:
    return {
        "ok": True,
        "service": "moon-calendar",
        "time": datetime.now(timezone.utc).isoformat(),
        "cache": resolver.cache.stats(),
    }

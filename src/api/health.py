"""健康检查端点"""

import time
from typing import Any

from fastapi import APIRouter, Request

from src.config.constants import Messages

router = APIRouter(tags=["Health"])

START_TIME = time.time()


@router.get("/healthz")
async def healthz(request: Request) -> dict[str, Any]:
    refresher = getattr(request.app.state, "refresher", None)
    return {
        "message": Messages.READY_HINT,
        "uptime_seconds": int(time.time() - START_TIME),
        "refresh_status": refresher.status.value if refresher is not None else None,
    }

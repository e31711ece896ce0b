from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    ctx = request.app.state.ctx
    return {
        "status": "ok" if ctx.store.is_open else "degraded",
        "database": "open" if ctx.store.is_open else "closed",
        "time": datetime.now(timezone.utc).isoformat(),
    }

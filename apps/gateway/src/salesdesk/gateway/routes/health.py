"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，验证存储可用性。
"""

import structlog
from fastapi import APIRouter, Depends
from salesdesk.core.store import StoreGroup
from starlette.responses import JSONResponse

from ..deps import get_store_group

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(store_group: StoreGroup = Depends(get_store_group)):
    """Readiness 检查 -- 验证存储后端可用性

    检查项：
    1. store: 存储后端类型（sqlite / memory）
    2. sqlite: 数据库连通性（仅 sqlite 后端）
    """
    checks = {}
    all_ok = True

    if store_group.conn is None:
        checks["store"] = "memory"
    else:
        checks["store"] = "sqlite"
        try:
            cursor = await store_group.conn.execute("SELECT 1")
            await cursor.fetchone()
            checks["sqlite"] = "ok"
        except Exception as e:
            log.warning("readiness_sqlite_error", error=str(e))
            checks["sqlite"] = f"error: {str(e)}"
            all_ok = False

    status_code = 200 if all_ok else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "ready" if all_ok else "not_ready",
            "checks": checks,
        },
    )

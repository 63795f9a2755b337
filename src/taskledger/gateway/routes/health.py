"""健康检查路由

GET /health: 存活检查，进程在即返回 200。
GET /ready: 就绪检查，数据库可读且处于 WAL 模式时返回 200，否则 503。
            管理员凭证是否已铸造只作为信息返回，不影响就绪状态。
"""

import aiosqlite
import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse
from taskledger.core.store import StoreGroup
from taskledger.core.store.sqlite_init import verify_wal_mode

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok"}


async def _probe(store_group: StoreGroup) -> dict[str, str]:
    wal = await verify_wal_mode(store_group.conn)
    checks = {"sqlite": "ok", "sqlite_wal": "ok" if wal else "disabled"}
    admin_hash = await store_group.capability_store.get_admin_hash()
    checks["admin_capability"] = "minted" if admin_hash else "not_minted"
    return checks


@router.get("/ready")
async def ready(request: Request):
    """就绪检查"""
    store_group: StoreGroup = request.app.state.store_group
    try:
        async with store_group.write_lock:
            checks = await _probe(store_group)
    except (aiosqlite.Error, ValueError) as e:
        # ValueError: 连接已关闭
        log.warning("readiness_sqlite_error", error=str(e))
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "checks": {"sqlite": f"error: {e}"}},
        )

    ok = checks["sqlite_wal"] == "ok"
    return JSONResponse(
        status_code=200 if ok else 503,
        content={"status": "ready" if ok else "not_ready", "checks": checks},
    )

"""事件日志路由

GET /api/events?after_seq=: 拉取 after_seq 之后的增量事件（按 seq 正序）。
"""

from fastapi import APIRouter, Depends, Query
from taskledger.core.ledger import TaskLedger

from ..deps import get_ledger
from .tasks import EventView

router = APIRouter()


@router.get("/api/events")
async def list_events(
    after_seq: int = Query(default=0, ge=0, description="只返回 seq 大于该值的事件"),
    ledger: TaskLedger = Depends(get_ledger),
):
    """增量拉取事件日志"""
    events = await ledger.list_events(after_seq)
    return {"events": [EventView.from_event(e).model_dump() for e in events]}

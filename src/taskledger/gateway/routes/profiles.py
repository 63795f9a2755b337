"""进度记录路由

POST /api/profiles: 为调用者创建进度记录
GET /api/profiles?owner=: 查询某身份名下的进度记录
GET /api/profiles/{profile_id}: 进度详情
GET /api/profiles/{profile_id}/{field}: 单字段查询
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from starlette.responses import JSONResponse
from taskledger.core.ledger import TaskLedger
from taskledger.core.models import UserProgress

from ..deps import get_caller_identity, get_ledger
from ..errors import error_response

router = APIRouter()


class ProfileView(BaseModel):
    """进度记录对外视图"""

    profile_id: str
    owner: str
    tasks_completed: int
    points_earned: int
    level: int

    @classmethod
    def from_progress(cls, progress: UserProgress) -> "ProfileView":
        return cls(
            profile_id=progress.profile_id,
            owner=progress.owner,
            tasks_completed=progress.tasks_completed,
            points_earned=progress.points_earned,
            level=progress.level,
        )


@router.post("/api/profiles")
async def create_profile(
    caller: str = Depends(get_caller_identity),
    ledger: TaskLedger = Depends(get_ledger),
):
    """创建进度记录"""
    progress = await ledger.create_profile(caller)
    return JSONResponse(
        status_code=201,
        content=ProfileView.from_progress(progress).model_dump(),
    )


@router.get("/api/profiles")
async def list_profiles(
    owner: str = Query(description="身份标识"),
    ledger: TaskLedger = Depends(get_ledger),
):
    """查询某身份名下的进度记录"""
    profiles = await ledger.list_profiles(owner)
    return {"profiles": [ProfileView.from_progress(p).model_dump() for p in profiles]}


@router.get("/api/profiles/{profile_id}", response_model=ProfileView)
async def get_profile(profile_id: str, ledger: TaskLedger = Depends(get_ledger)):
    """进度详情"""
    return ProfileView.from_progress(await ledger.get_progress(profile_id))


@router.get("/api/profiles/{profile_id}/{field}")
async def get_profile_field(
    profile_id: str,
    field: str,
    ledger: TaskLedger = Depends(get_ledger),
):
    """单字段查询"""
    try:
        value = await ledger.get_progress_field(profile_id, field)
    except ValueError as e:
        return error_response(404, "UNKNOWN_FIELD", str(e))
    return {"profile_id": profile_id, field: value}

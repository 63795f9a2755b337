"""依赖注入模块 -- 通过 FastAPI Depends 注入账本与调用者身份

Store 实例通过 app.state 管理，在 lifespan 中初始化/清理。
网关扮演宿主角色：调用者身份取自 X-Caller-Id 请求头，
管理员凭证由 X-Admin-Token 请求头在边界处兑换。
"""

from fastapi import Depends, Header, Request
from taskledger.core.capability import AdminCapability
from taskledger.core.errors import InvalidCapabilityError
from taskledger.core.ledger import TaskLedger
from taskledger.core.store import StoreGroup

from .errors import CallerIdentityMissingError

CALLER_HEADER = "X-Caller-Id"
ADMIN_TOKEN_HEADER = "X-Admin-Token"


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_ledger(store_group: StoreGroup = Depends(get_store_group)) -> TaskLedger:
    """为当前请求构造 TaskLedger"""
    return TaskLedger(store_group)


async def get_caller_identity(
    x_caller_id: str | None = Header(default=None, alias=CALLER_HEADER),
) -> str:
    """提取调用者身份，缺失时拒绝请求"""
    if not x_caller_id:
        raise CallerIdentityMissingError()
    return x_caller_id


async def get_admin_capability(
    x_admin_token: str | None = Header(default=None, alias=ADMIN_TOKEN_HEADER),
    ledger: TaskLedger = Depends(get_ledger),
) -> AdminCapability:
    """出示 token 兑换管理员凭证；无效则在边界处拒绝"""
    if not x_admin_token:
        raise InvalidCapabilityError()
    return await ledger.authenticate_admin(x_admin_token)

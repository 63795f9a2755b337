"""AdminCapability -- 不可伪造的管理员凭证

凭证只有两个来源：
1. 系统初始化时铸造（mint_admin_capability），原始 token 仅此一次返回给初始化者；
2. 出示与持久化 hash 一致的 token 兑换（redeem_admin_token）。

持有实例即代表拥有管理员权限，凭证本身不携带任何其他状态。
"""

import hashlib
import hmac
import secrets

from .errors import InvalidCapabilityError

# 模块私有铸造键，模块外无法构造 AdminCapability
_MINT_KEY = object()


def hash_token(token: str) -> str:
    """计算 token 的 SHA-256 hash（库中只保存 hash）"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AdminCapability:
    """管理员凭证"""

    __slots__ = ("_token_hash",)

    def __init__(self, token_hash: str, *, _key: object = None) -> None:
        if _key is not _MINT_KEY:
            raise TypeError("AdminCapability can only be minted at system initialization")
        self._token_hash = token_hash

    def matches(self, token_hash: str) -> bool:
        """是否与持久化的凭证 hash 一致"""
        return hmac.compare_digest(self._token_hash, token_hash)

    def __repr__(self) -> str:
        return "AdminCapability(<redacted>)"


def mint_admin_capability() -> tuple[AdminCapability, str]:
    """铸造新的管理员凭证

    Returns:
        (capability, token) -- token 需交给初始化者保管，库中只保存其 hash
    """
    token = secrets.token_urlsafe(32)
    return AdminCapability(hash_token(token), _key=_MINT_KEY), token


def redeem_admin_token(token: str, expected_hash: str | None) -> AdminCapability:
    """用出示的 token 兑换凭证

    Raises:
        InvalidCapabilityError: 系统未初始化或 token 不匹配
    """
    if expected_hash is None or not token:
        raise InvalidCapabilityError()
    token_hash = hash_token(token)
    if not hmac.compare_digest(token_hash, expected_hash):
        raise InvalidCapabilityError()
    return AdminCapability(token_hash, _key=_MINT_KEY)


def verify_admin_capability(capability: object, expected_hash: str | None) -> None:
    """校验出示的凭证属于当前账本

    Raises:
        InvalidCapabilityError: 不是 AdminCapability 实例或与当前账本不匹配
    """
    if not isinstance(capability, AdminCapability):
        raise InvalidCapabilityError()
    if expected_hash is None or not capability.matches(expected_hash):
        raise InvalidCapabilityError()

"""CapabilityStore SQLite 实现

capabilities 表至多一行：系统初始化时铸造的管理员凭证 hash。
"""

import aiosqlite


class SqliteCapabilityStore:
    """CapabilityStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def save_admin_hash(self, token_hash: str, holder: str, minted_at: str) -> None:
        """保存管理员凭证 hash（重复写入会触发主键冲突）"""
        await self._conn.execute(
            """
            INSERT INTO capabilities (id, token_hash, holder, minted_at)
            VALUES (1, ?, ?, ?)
            """,
            (token_hash, holder, minted_at),
        )

    async def get_admin_hash(self) -> str | None:
        """读取管理员凭证 hash，未初始化时返回 None"""
        cursor = await self._conn.execute(
            "SELECT token_hash FROM capabilities WHERE id = 1"
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def get_initial_holder(self) -> str | None:
        """读取初始化时接收凭证的身份"""
        cursor = await self._conn.execute(
            "SELECT holder FROM capabilities WHERE id = 1"
        )
        row = await cursor.fetchone()
        return row[0] if row else None

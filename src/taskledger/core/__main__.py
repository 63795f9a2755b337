"""CLI 入口模块 -- python -m taskledger.core <command>

支持的命令：
  init-admin <identity>  铸造管理员凭证（仅一次）并输出 token
  rebuild-projections    从 events 表重建 tasks 表
"""

import asyncio
import sys

from .config import get_db_path


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        _print_usage()
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-admin":
        if len(sys.argv) < 3:
            print("用法: python -m taskledger.core init-admin <identity>")
            sys.exit(1)
        asyncio.run(init_admin(sys.argv[2]))
    elif command == "rebuild-projections":
        asyncio.run(rebuild_projections())
    else:
        print(f"未知命令: {command}")
        print("可用命令: init-admin, rebuild-projections")
        sys.exit(1)


def _print_usage() -> None:
    print("用法: python -m taskledger.core <command>")
    print("命令:")
    print("  init-admin <identity>  铸造管理员凭证并输出 token")
    print("  rebuild-projections    从 events 表重建 tasks 表")


async def init_admin(holder: str) -> None:
    """执行系统初始化：铸造管理员凭证"""
    from .errors import SystemAlreadyInitializedError
    from .ledger import TaskLedger
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        ledger = TaskLedger(store_group)
        try:
            _, token = await ledger.initialize_admin(holder)
        except SystemAlreadyInitializedError as e:
            holder_of_record = await store_group.capability_store.get_initial_holder()
            print(f"初始化失败: {e}（凭证已于初始化时交给 {holder_of_record}）")
            sys.exit(1)
        print(f"管理员凭证已交给 {holder}，请妥善保管（只显示一次）：")
        print(token)
    finally:
        await store_group.conn.close()


async def rebuild_projections() -> None:
    """执行 Projection 重建"""
    from .projection import rebuild_all
    from .store import create_store_group

    db_path = get_db_path()

    print(f"数据库路径: {db_path}")
    print("开始重建 Projection...")

    store_group = await create_store_group(db_path)

    try:
        event_count = await rebuild_all(
            store_group.conn,
            store_group.event_store,
            store_group.task_store,
            store_group.write_lock,
        )
        print(f"重建完成，处理 {event_count} 条事件")
    finally:
        await store_group.conn.close()


if __name__ == "__main__":
    main()

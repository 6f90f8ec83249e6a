"""CLI 入口模块 -- python -m taskhub.core <command>

支持的命令：
  init-db            初始化数据库表结构
  verify-audit       回放事件并与 tasks 表比对
  purge-idempotency  清除已过期的幂等记录
"""

import asyncio
import sys

from .config import get_db_path

_USAGE = """用法: python -m taskhub.core <command>
命令:
  init-db            初始化数据库表结构
  verify-audit       回放事件并与 tasks 表比对
  purge-idempotency  清除已过期的幂等记录"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]
    handlers = {
        "init-db": init_database,
        "verify-audit": verify_audit,
        "purge-idempotency": purge_idempotency,
    }
    handler = handlers.get(command)
    if handler is None:
        print(f"未知命令: {command}")
        print(f"可用命令: {', '.join(handlers)}")
        sys.exit(1)

    sys.exit(asyncio.run(handler()))


async def init_database() -> int:
    """初始化数据库（幂等）"""
    from .store import create_store_group

    db_path = get_db_path()
    store_group = await create_store_group(db_path)
    await store_group.close()
    print(f"数据库已初始化: {db_path}")
    return 0


async def verify_audit() -> int:
    """执行审计回放比对，存在不一致时返回非零退出码"""
    from .projection import verify_audit_trail
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    try:
        drifts = await verify_audit_trail(store_group)
    finally:
        await store_group.close()

    if not drifts:
        print("审计链完整，未发现不一致")
        return 0

    print(f"发现 {len(drifts)} 处不一致:")
    for drift in drifts:
        print(f"  {drift.task_id}: {drift.reason} expected={drift.expected} actual={drift.actual}")
    return 2


async def purge_idempotency() -> int:
    """清除过期幂等记录"""
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        purged = await store_group.idempotency_store.purge_expired()
    finally:
        await store_group.close()

    print(f"已清除 {purged} 条过期幂等记录")
    return 0


if __name__ == "__main__":
    main()

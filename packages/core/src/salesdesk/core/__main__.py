"""CLI 入口模块 -- python -m salesdesk.core <command>

支持的命令：
  init-db                      创建数据库表结构
  show-context <assignee_id>   输出画像的 prompt 格式化文本
"""

import asyncio
import sys

from .config import get_db_path

_USAGE = """用法: python -m salesdesk.core <command>
命令:
  init-db                      创建数据库表结构
  show-context <assignee_id>   输出画像的 prompt 格式化文本"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_database())
    elif command == "show-context" and len(sys.argv) == 3:
        found = asyncio.run(show_context(sys.argv[2]))
        if not found:
            sys.exit(2)
    else:
        print(f"未知命令: {' '.join(sys.argv[1:])}")
        print(_USAGE)
        sys.exit(1)


async def init_database() -> None:
    """创建数据库与表结构"""
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")
    store_group = await create_store_group(db_path)
    await store_group.close()
    print("初始化完成")


async def show_context(assignee_id: str) -> bool:
    """输出画像的 prompt 文本，画像不存在时返回 False"""
    from .prompt import format_profile_for_prompt
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        profile = await store_group.profile_store.get_profile(assignee_id)
    finally:
        await store_group.close()

    if profile is None:
        print(f"画像不存在: {assignee_id}")
        return False

    print(format_profile_for_prompt(profile))
    return True


if __name__ == "__main__":
    main()

"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、存储后端、画像 history 上限、时区等可配置常量，
以及 prompt 格式化使用的固定常量。
"""

import os
from pathlib import Path
from zoneinfo import ZoneInfo


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("SALESDESK_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "SALESDESK_DB_PATH",
        str(_get_base_dir() / "sqlite" / "salesdesk.db"),
    )


def get_store_backend() -> str:
    """获取存储后端：sqlite（默认）/ memory"""
    return os.environ.get("SALESDESK_STORE_BACKEND", "sqlite").lower()


def get_context_history_limit() -> int:
    """画像 history 最多保留的完成任务条数"""
    return int(os.environ.get("SALESDESK_CONTEXT_HISTORY_LIMIT", "100"))


def get_timezone() -> ZoneInfo:
    """assignee 本地时区（用于按天分桶）"""
    return ZoneInfo(os.environ.get("SALESDESK_TIMEZONE", "Europe/Rome"))


# 统计中异议/战术列表的最大长度
MAX_DERIVED_SIGNALS: int = 10

# 每个成功任务最多贡献的 best practice 条数
TACTICS_PER_TASK: int = 2

# 备注中表示客户异议的关键字（小写匹配）
OBJECTION_KEYWORDS: tuple[str, ...] = ("obiezione", "objection")

# prompt 中展示的最近完成任务条数
RECENT_COMPLETIONS_IN_PROMPT: int = 5

# 附件内容/摘要截断长度
ATTACHMENT_PREVIEW_LENGTH: int = 200

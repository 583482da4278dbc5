"""任务列表视图：按天分桶、归档视图、完成率

纯函数，输入任务列表，返回新的视图对象；调用方在任意变更后应重新派生视图。
"""

import math
from datetime import date, datetime, tzinfo

from pydantic import BaseModel, Field

from .models.enums import ACTIVE_STATES, ARCHIVED_STATES, PRIORITY_ORDER, TaskStatus
from .models.task import Task


def round_half_up(value: float) -> int:
    """四舍五入到整数（0.5 向上）"""
    return int(math.floor(value + 0.5))


def completion_ratio(tasks: list[Task]) -> int:
    """completed 数 / 总数，整数百分比；空列表为 0"""
    if not tasks:
        return 0
    completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
    return round_half_up(completed / len(tasks) * 100)


class DayBucket(BaseModel):
    """某一天的任务桶（不含归档任务）"""

    day: date
    tasks: list[Task] = Field(default_factory=list)

    @property
    def pending(self) -> list[Task]:
        """待处理任务（pending / in_progress）"""
        return [t for t in self.tasks if t.status in ACTIVE_STATES]

    @property
    def completed(self) -> list[Task]:
        return [t for t in self.tasks if t.status == TaskStatus.COMPLETED]

    @property
    def completion_ratio(self) -> int:
        return completion_ratio(self.tasks)


class DayPartition(BaseModel):
    """今天 / 明天两个任务桶"""

    today: DayBucket
    tomorrow: DayBucket


class ArchiveView(BaseModel):
    """归档视图：snoozed 按 snoozed_until 升序，dismissed 按 dismissed_at 降序"""

    snoozed: list[Task] = Field(default_factory=list)
    dismissed: list[Task] = Field(default_factory=list)


def local_date(ts: datetime, tz: tzinfo | None = None) -> date:
    """取时间戳在 tz（assignee 本地时区）下的日历日期"""
    if tz is not None and ts.tzinfo is not None:
        return ts.astimezone(tz).date()
    return ts.date()


def _daily_sort_key(task: Task) -> tuple[int, datetime]:
    return PRIORITY_ORDER[task.priority], task.scheduled_at


def partition_by_day(
    tasks: list[Task],
    today: date,
    tomorrow: date,
    tz: tzinfo | None = None,
) -> DayPartition:
    """将非归档任务按 scheduled_at 的日历日期分到 today / tomorrow 两个桶

    不属于两天中任何一天的任务不出现在任何桶中。
    """
    today_tasks: list[Task] = []
    tomorrow_tasks: list[Task] = []
    for task in tasks:
        if task.status in ARCHIVED_STATES:
            continue
        day = local_date(task.scheduled_at, tz)
        if day == today:
            today_tasks.append(task)
        elif day == tomorrow:
            tomorrow_tasks.append(task)

    return DayPartition(
        today=DayBucket(day=today, tasks=sorted(today_tasks, key=_daily_sort_key)),
        tomorrow=DayBucket(day=tomorrow, tasks=sorted(tomorrow_tasks, key=_daily_sort_key)),
    )


def archived_view(tasks: list[Task]) -> ArchiveView:
    """拆分出 snoozed 与 dismissed 两个互不相交的列表"""
    snoozed = [t for t in tasks if t.status == TaskStatus.SNOOZED]
    dismissed = [t for t in tasks if t.status == TaskStatus.DISMISSED]

    # 缺失时间戳的任务排在各自列表末尾
    snoozed.sort(key=lambda t: (t.snoozed_until is None, t.snoozed_until or t.scheduled_at))
    dismissed.sort(
        key=lambda t: (t.dismissed_at is not None, t.dismissed_at or t.updated_at),
        reverse=True,
    )
    return ArchiveView(snoozed=snoozed, dismissed=dismissed)

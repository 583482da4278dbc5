"""packages/core 测试配置 -- 各状态下的样例任务"""

from datetime import UTC, datetime

import pytest
from salesdesk.core.models import TaskOutcome, TaskStatus


@pytest.fixture
def task_in_status(make_task):
    """构造处于指定状态的任务，字段满足该状态的不变量"""
    stamp = datetime(2026, 3, 10, 8, 30, tzinfo=UTC)

    def _build(status: TaskStatus, **overrides):
        fields: dict = {"status": status}
        if status == TaskStatus.IN_PROGRESS:
            fields["started_at"] = stamp
        elif status == TaskStatus.COMPLETED:
            fields.update(
                started_at=stamp,
                completed_at=stamp,
                notes="Fatto",
                outcome=TaskOutcome.SUCCESS,
            )
        elif status == TaskStatus.DISMISSED:
            fields["dismissed_at"] = stamp
        elif status == TaskStatus.SNOOZED:
            fields["snoozed_until"] = datetime(2026, 3, 11, 9, 0, tzinfo=UTC)
            fields["original_scheduled_at"] = datetime(2026, 3, 10, 9, 0, tzinfo=UTC)
        fields.update(overrides)
        return make_task(**fields)

    return _build

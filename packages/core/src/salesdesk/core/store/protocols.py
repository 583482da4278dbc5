"""Store Protocol 接口定义

定义 TaskStore、ProfileStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
实现：内存版（测试/演示）与 SQLite 版（生产文档存储）。
"""

from typing import Protocol

from ..models.profile import Profile
from ..models.task import Task, TaskFilter


class TaskStore(Protocol):
    """Task 存储接口 -- 单文档 last-write-wins"""

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务，不存在返回 None"""
        ...

    async def put_task(self, task: Task) -> None:
        """写入（新建或覆盖）任务"""
        ...

    async def list_tasks(
        self,
        assignee_id: str,
        task_filter: TaskFilter | None = None,
    ) -> list[Task]:
        """查询某个 assignee 的任务，按 scheduled_at 升序"""
        ...


class ProfileStore(Protocol):
    """Profile 存储接口"""

    async def get_profile(self, assignee_id: str) -> Profile | None:
        """根据 assignee_id 查询画像，不存在返回 None"""
        ...

    async def put_profile(self, profile: Profile) -> None:
        """写入（新建或覆盖）画像"""
        ...

    async def list_profiles(self) -> list[Profile]:
        """查询全部画像（管理员视图）"""
        ...

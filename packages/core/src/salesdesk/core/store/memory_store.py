"""内存版 Store 实现 -- 用于测试与本地演示

读写均做深拷贝，调用方持有的对象与存储内部状态互不影响。
"""

from ..models.profile import Profile
from ..models.task import Task, TaskFilter


class InMemoryTaskStore:
    """TaskStore 的内存实现"""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    async def get_task(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task else None

    async def put_task(self, task: Task) -> None:
        self._tasks[task.task_id] = task.model_copy(deep=True)

    async def list_tasks(
        self,
        assignee_id: str,
        task_filter: TaskFilter | None = None,
    ) -> list[Task]:
        task_filter = task_filter or TaskFilter()
        tasks = [
            t.model_copy(deep=True)
            for t in self._tasks.values()
            if t.assignee_id == assignee_id and task_filter.matches(t)
        ]
        return sorted(tasks, key=lambda t: t.scheduled_at)


class InMemoryProfileStore:
    """ProfileStore 的内存实现"""

    def __init__(self) -> None:
        self._profiles: dict[str, Profile] = {}

    async def get_profile(self, assignee_id: str) -> Profile | None:
        profile = self._profiles.get(assignee_id)
        return profile.model_copy(deep=True) if profile else None

    async def put_profile(self, profile: Profile) -> None:
        self._profiles[profile.assignee_id] = profile.model_copy(deep=True)

    async def list_profiles(self) -> list[Profile]:
        return [p.model_copy(deep=True) for p in self._profiles.values()]

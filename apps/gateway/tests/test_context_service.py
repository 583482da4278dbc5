"""ContextService 测试

测试内容：
1. 完成任务折叠进画像：history 有界、最新在前、统计与 history 一致
2. 同一任务重复折叠被跳过
3. 非完成任务 / assignee 不匹配被拒绝
4. 同一 assignee 并发折叠不丢更新
5. 自定义上下文局部更新、prompt 输出
"""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from salesdesk.core.exceptions import NotFoundError, ValidationFailedError
from salesdesk.core.models import (
    DEFAULT_COMMUNICATION_STYLE,
    CustomContextUpdate,
    TaskOutcome,
    TaskStatus,
)

BASE = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def completed_task(make_task):
    def _build(i: int, **overrides):
        fields = {
            "task_id": f"01JDONE{i:019d}",
            "status": TaskStatus.COMPLETED,
            "completed_at": BASE + timedelta(hours=i),
            "outcome": TaskOutcome.SUCCESS,
            "notes": f"Esito {i}",
            "actual_duration": 20,
        }
        fields.update(overrides)
        return make_task(**fields)

    return _build


class TestIngestCompletion:
    async def test_first_ingest_creates_profile(self, context_service, completed_task, clock):
        task = completed_task(1)
        profile = await context_service.ingest_completion("seller-1", task)

        assert profile.version == 1
        assert profile.created_at == clock.now
        assert profile.last_task_added_at == clock.now
        assert profile.history[0].task_id == task.task_id
        assert profile.stats.success_rate == 100
        assert (await context_service.get_profile("seller-1")) == profile

    async def test_history_bounded_to_limit(self, context_service, completed_task):
        for i in range(105):
            outcome = TaskOutcome.SUCCESS if i % 5 < 3 else TaskOutcome.FAILED
            await context_service.ingest_completion(
                "seller-1", completed_task(i, outcome=outcome, actual_duration=10 + (i % 3) * 10)
            )

        profile = await context_service.get_profile("seller-1")
        assert len(profile.history) == 100
        assert profile.history[0].task_id == completed_task(104).task_id
        assert profile.history[-1].task_id == completed_task(5).task_id
        assert profile.version == 105
        assert profile.stats.total_completed == 100
        assert profile.stats.success_rate == 60
        assert profile.stats.average_duration == 20

    async def test_duplicate_ingest_skipped(self, context_service, completed_task):
        task = completed_task(1)
        first = await context_service.ingest_completion("seller-1", task)
        second = await context_service.ingest_completion("seller-1", task)

        assert second.version == first.version
        assert len(second.history) == 1
        assert second.stats.total_completed == 1

    async def test_not_completed_rejected(self, context_service, make_task):
        with pytest.raises(ValidationFailedError) as exc_info:
            await context_service.ingest_completion("seller-1", make_task())
        assert exc_info.value.field == "status"

    async def test_assignee_mismatch_rejected(self, context_service, completed_task):
        with pytest.raises(ValidationFailedError) as exc_info:
            await context_service.ingest_completion("seller-2", completed_task(1))
        assert exc_info.value.field == "assignee_id"
        assert await context_service.list_profiles() == []

    async def test_concurrent_ingests_not_lost(
        self, context_service, store_group, completed_task, monkeypatch
    ):
        """读取画像后让出事件循环，模拟并发完成的交错读写"""
        original_get = store_group.profile_store.get_profile

        async def slow_get(assignee_id):
            profile = await original_get(assignee_id)
            await asyncio.sleep(0)
            return profile

        monkeypatch.setattr(store_group.profile_store, "get_profile", slow_get)

        await asyncio.gather(
            *(context_service.ingest_completion("seller-1", completed_task(i)) for i in range(10))
        )

        profile = await context_service.get_profile("seller-1")
        assert profile.version == 10
        assert len(profile.history) == 10
        assert profile.stats.total_completed == 10


class TestCustomContext:
    async def test_update_creates_profile(self, context_service):
        profile = await context_service.update_custom_context(
            "seller-1",
            "Giulia",
            CustomContextUpdate(strengths=["Ascolto"]),
        )
        assert profile.version == 1
        assert profile.seller_name == "Giulia"
        assert profile.custom_context.strengths == ["Ascolto"]
        assert profile.custom_context.communication_style == DEFAULT_COMMUNICATION_STYLE

    async def test_update_preserves_history(self, context_service, completed_task):
        await context_service.ingest_completion("seller-1", completed_task(1))
        profile = await context_service.update_custom_context(
            "seller-1", None, CustomContextUpdate(learning_goals=["Chiusura"])
        )
        assert profile.version == 2
        assert len(profile.history) == 1
        assert profile.stats.total_completed == 1
        assert profile.custom_context.learning_goals == ["Chiusura"]


class TestReadAndFormat:
    async def test_missing_profile(self, context_service):
        with pytest.raises(NotFoundError):
            await context_service.get_profile("seller-1")
        with pytest.raises(NotFoundError):
            await context_service.format_for_prompt("seller-1")

    async def test_empty_profile_not_persisted(self, context_service):
        profile = await context_service.get_or_empty_profile("seller-9")
        assert profile.version == 0
        assert await context_service.list_profiles() == []

    async def test_format_for_prompt(self, context_service, completed_task):
        await context_service.update_custom_context("seller-1", "Giulia", CustomContextUpdate())
        await context_service.ingest_completion("seller-1", completed_task(1))

        text = await context_service.format_for_prompt("seller-1")
        assert text.startswith("# CONTESTO VENDITORE: Giulia")
        assert "- Task completati: 1" in text
        assert "Note del venditore: Esito 1" in text

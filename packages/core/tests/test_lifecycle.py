"""任务生命周期流转测试

测试内容：
1. start / complete 的字段设置与完成校验
2. snooze 首次推迟冻结原计划时间，postpone 记录只追加
3. dismiss / restore 保留调度字段
4. 校验失败时原任务不变
"""

from datetime import UTC, datetime, timedelta

import pytest
from salesdesk.core import lifecycle
from salesdesk.core.exceptions import InvalidTransitionError, ValidationFailedError
from salesdesk.core.lifecycle import CompletionPayload
from salesdesk.core.models import (
    ExpectedOutput,
    ExpectedOutputType,
    TaskAttachment,
    TaskGuidance,
    TaskOutcome,
    TaskStatus,
)

NOW = datetime(2026, 3, 10, 10, 0, tzinfo=UTC)
LATER = NOW + timedelta(hours=1)


def _payload(**overrides) -> CompletionPayload:
    data = {"notes": "Cliente interessato alla demo", "outcome": TaskOutcome.SUCCESS}
    data.update(overrides)
    return CompletionPayload(**data)


class TestStart:
    def test_start_sets_started_at(self, make_task):
        task = make_task()
        started = lifecycle.start(task, NOW)
        assert started.status == TaskStatus.IN_PROGRESS
        assert started.started_at == NOW
        assert task.status == TaskStatus.PENDING

    def test_start_twice_rejected(self, make_task):
        started = lifecycle.start(make_task(), NOW)
        with pytest.raises(InvalidTransitionError):
            lifecycle.start(started, LATER)


class TestComplete:
    def test_complete_records_fields(self, task_in_status):
        task = task_in_status(TaskStatus.IN_PROGRESS)
        attachment = TaskAttachment(uri="https://files.example.com/report.pdf")
        done = lifecycle.complete(
            task,
            _payload(notes="  Chiamata ok  ", actual_duration=25, attachments=[attachment]),
            NOW,
        )
        assert done.status == TaskStatus.COMPLETED
        assert done.completed_at == NOW
        assert done.notes == "Chiamata ok"
        assert done.outcome == TaskOutcome.SUCCESS
        assert done.actual_duration == 25
        assert [a.file_name for a in done.attachments] == ["report.pdf"]

    @pytest.mark.parametrize("notes", ["", "   ", "\n\t"])
    def test_blank_notes_rejected(self, task_in_status, notes: str):
        task = task_in_status(TaskStatus.IN_PROGRESS)
        before = task.model_dump_json()
        with pytest.raises(ValidationFailedError) as exc_info:
            lifecycle.complete(task, _payload(notes=notes), NOW)
        assert exc_info.value.field == "notes"
        assert task.model_dump_json() == before

    def test_missing_outcome_rejected(self, task_in_status):
        task = task_in_status(TaskStatus.IN_PROGRESS)
        with pytest.raises(ValidationFailedError) as exc_info:
            lifecycle.complete(task, _payload(outcome=None), NOW)
        assert exc_info.value.field == "outcome"

    def test_negative_duration_rejected(self, task_in_status):
        task = task_in_status(TaskStatus.IN_PROGRESS)
        with pytest.raises(ValidationFailedError) as exc_info:
            lifecycle.complete(task, _payload(actual_duration=-5), NOW)
        assert exc_info.value.field == "actual_duration"

    def test_zero_duration_accepted(self, task_in_status):
        task = task_in_status(TaskStatus.IN_PROGRESS)
        assert lifecycle.complete(task, _payload(actual_duration=0), NOW).actual_duration == 0

    @pytest.mark.parametrize(
        "expected",
        [
            ExpectedOutput(type=ExpectedOutputType.DOCUMENT),
            ExpectedOutput(type=ExpectedOutputType.TEXT, document_required=True),
        ],
    )
    def test_required_attachment_missing(self, task_in_status, expected):
        task = task_in_status(
            TaskStatus.IN_PROGRESS,
            guidance=TaskGuidance(expected_output=expected),
        )
        with pytest.raises(ValidationFailedError) as exc_info:
            lifecycle.complete(task, _payload(), NOW)
        assert exc_info.value.field == "attachments"

    def test_required_attachment_present(self, task_in_status):
        task = task_in_status(
            TaskStatus.IN_PROGRESS,
            guidance=TaskGuidance(
                expected_output=ExpectedOutput(type=ExpectedOutputType.DOCUMENT)
            ),
        )
        done = lifecycle.complete(
            task, _payload(attachments=[TaskAttachment(uri="s3://b/offerta.pdf")]), NOW
        )
        assert done.status == TaskStatus.COMPLETED

    def test_transition_checked_before_fields(self, make_task):
        """pending 任务直接 complete：先报流转非法，而不是字段缺失"""
        with pytest.raises(InvalidTransitionError):
            lifecycle.complete(make_task(), CompletionPayload(), NOW)


class TestSnooze:
    def test_first_snooze_freezes_original_schedule(self, make_task):
        task = make_task()
        until = datetime(2026, 3, 11, 9, 0, tzinfo=UTC)
        snoozed = lifecycle.snooze(task, until, "Cliente non disponibile", NOW)

        assert snoozed.status == TaskStatus.SNOOZED
        assert snoozed.snoozed_until == until
        assert snoozed.original_scheduled_at == task.scheduled_at
        # scheduled_at 不随推迟改变
        assert snoozed.scheduled_at == task.scheduled_at
        assert len(snoozed.postpone_history) == 1
        record = snoozed.postpone_history[0]
        assert record.timestamp == NOW
        assert record.reason == "Cliente non disponibile"
        assert record.postponed_from == task.scheduled_at
        assert record.postponed_to == until

    def test_repeated_snooze_keeps_history_prefix(self, make_task):
        """多次 snooze/restore 交替：original 不变，history 只增不改"""
        task = make_task()
        original = task.scheduled_at
        now = NOW
        previous = []

        for i in range(4):
            until = now + timedelta(days=1)
            task = lifecycle.snooze(task, until, f"motivo {i}", now)
            assert task.original_scheduled_at == original
            assert len(task.postpone_history) == i + 1
            assert task.postpone_history[:i] == previous
            previous = list(task.postpone_history)

            now += timedelta(hours=2)
            task = lifecycle.restore(task, now)
            assert task.postpone_history == previous
            now += timedelta(hours=2)

    def test_snooze_from_in_progress(self, task_in_status):
        task = task_in_status(TaskStatus.IN_PROGRESS)
        snoozed = lifecycle.snooze(task, LATER, "Richiamare", NOW)
        assert snoozed.status == TaskStatus.SNOOZED

    def test_missing_until_rejected(self, make_task):
        task = make_task()
        with pytest.raises(ValidationFailedError) as exc_info:
            lifecycle.snooze(task, None, "motivo", NOW)
        assert exc_info.value.field == "snoozed_until"
        assert task.postpone_history == []

    def test_naive_until_rejected(self, make_task):
        task = make_task()
        with pytest.raises(ValidationFailedError) as exc_info:
            lifecycle.snooze(task, datetime(2026, 3, 11, 9, 0), "motivo", NOW)
        assert exc_info.value.field == "snoozed_until"
        assert task.status == TaskStatus.PENDING

    @pytest.mark.parametrize("reason", ["", "   "])
    def test_blank_reason_rejected(self, make_task, reason: str):
        task = make_task()
        with pytest.raises(ValidationFailedError) as exc_info:
            lifecycle.snooze(task, LATER, reason, NOW)
        assert exc_info.value.field == "reason"
        assert task.status == TaskStatus.PENDING


class TestDismissRestore:
    def test_dismiss_keeps_schedule(self, make_task):
        task = make_task()
        dismissed = lifecycle.dismiss(task, NOW)
        assert dismissed.status == TaskStatus.DISMISSED
        assert dismissed.dismissed_at == NOW
        assert dismissed.scheduled_at == task.scheduled_at

    def test_restore_dismissed(self, make_task):
        dismissed = lifecycle.dismiss(make_task(), NOW)
        restored = lifecycle.restore(dismissed, LATER)
        assert restored.status == TaskStatus.PENDING
        assert restored.dismissed_at is None
        assert restored.scheduled_at == dismissed.scheduled_at

    def test_restore_snoozed_clears_until(self, make_task):
        snoozed = lifecycle.snooze(make_task(), LATER, "motivo", NOW)
        restored = lifecycle.restore(snoozed, LATER)
        assert restored.status == TaskStatus.PENDING
        assert restored.snoozed_until is None
        assert restored.original_scheduled_at == snoozed.original_scheduled_at

    def test_restore_pending_rejected(self, make_task):
        with pytest.raises(InvalidTransitionError):
            lifecycle.restore(make_task(), NOW)

    def test_skip_is_terminal(self, make_task):
        skipped = lifecycle.skip(make_task(), NOW)
        assert skipped.status == TaskStatus.SKIPPED
        with pytest.raises(InvalidTransitionError):
            lifecycle.restore(skipped, LATER)

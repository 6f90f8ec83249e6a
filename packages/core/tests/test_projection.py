"""审计回放测试

测试内容：
1. 单事件应用（创建 / 分配 / 流转）
2. 完整生命周期回放后与 tasks 表一致
3. 人为制造的不一致被识别：缺创建事件、行与事件不匹配
4. 空数据库回放不报错
"""

from taskhub.core.models import (
    AssignTaskCommand,
    CreateTaskCommand,
    EventType,
    Role,
    TaskEvent,
    TaskState,
    TransitionTaskCommand,
)
from taskhub.core.projection import apply_event, replay_events, verify_audit_trail
from taskhub.core.services import TaskCommandService


def _event(event_type: EventType, **data) -> TaskEvent:
    return TaskEvent(
        task_id="TSK001",
        tenant_id="t1",
        workspace_id="w1",
        event_type=event_type,
        event_data=data,
    )


class TestApplyEvent:
    """单事件应用"""

    def test_apply_task_created(self):
        snapshots = {}
        apply_event(
            snapshots,
            _event(EventType.TASK_CREATED, title="t", priority="LOW", initial_state="NEW"),
        )
        assert snapshots["TSK001"].state == TaskState.NEW
        assert snapshots["TSK001"].version == 1

    def test_assign_and_transition_bump_version(self):
        snapshots = replay_events(
            [
                _event(EventType.TASK_CREATED, initial_state="NEW"),
                _event(EventType.TASK_ASSIGNED, assignee_id="u1", previous_assignee=None),
                _event(
                    EventType.TASK_STATE_CHANGED,
                    from_state="NEW",
                    to_state="IN_PROGRESS",
                    changed_by="agent",
                ),
            ]
        )
        snapshot = snapshots["TSK001"]
        assert snapshot.assignee_id == "u1"
        assert snapshot.state == TaskState.IN_PROGRESS
        assert snapshot.version == 3

    def test_event_without_created_is_skipped(self):
        snapshots = {}
        apply_event(snapshots, _event(EventType.TASK_ASSIGNED, assignee_id="u1"))
        assert snapshots == {}


class TestVerifyAuditTrail:
    """回放比对"""

    async def test_empty_database(self, store_group):
        assert await verify_audit_trail(store_group) == []

    async def test_consistent_after_lifecycle(self, store_group):
        service = TaskCommandService(store_group)
        created, _ = await service.create_task(
            CreateTaskCommand(tenant_id="t1", workspace_id="w1", title="审计")
        )
        task_id = created.task.task_id
        await service.assign_task(
            AssignTaskCommand(
                workspace_id="w1",
                task_id=task_id,
                assignee_id="u1",
                role=Role.MANAGER,
                expected_version=1,
            )
        )
        await service.transition_task_state(
            TransitionTaskCommand(
                workspace_id="w1",
                task_id=task_id,
                to_state=TaskState.IN_PROGRESS,
                role=Role.AGENT,
                expected_version=2,
            )
        )
        await service.create_task(
            CreateTaskCommand(tenant_id="t1", workspace_id="w1", title="另一个")
        )

        assert await verify_audit_trail(store_group) == []

    async def test_row_changed_without_event(self, store_group):
        service = TaskCommandService(store_group)
        created, _ = await service.create_task(
            CreateTaskCommand(tenant_id="t1", workspace_id="w1", title="漂移")
        )
        task = created.task

        # 绕过命令服务直接改行，不追加事件
        async with store_group.transaction():
            await store_group.task_store.update_with_version(
                task.transitioned(TaskState.CANCELLED, store_group.clock.now()), 1
            )

        (drift,) = await verify_audit_trail(store_group)
        assert drift.task_id == task.task_id
        assert drift.reason == "row_event_mismatch"
        assert drift.expected["version"] == 1
        assert drift.actual["version"] == 2

    async def test_task_without_created_event(self, store_group):
        service = TaskCommandService(store_group)
        created, _ = await service.create_task(
            CreateTaskCommand(tenant_id="t1", workspace_id="w1", title="缺事件")
        )
        await store_group.conn.execute(
            "DELETE FROM task_events WHERE task_id = ?", (created.task.task_id,)
        )
        await store_group.conn.commit()

        (drift,) = await verify_audit_trail(store_group)
        assert drift.reason == "missing_created_event"

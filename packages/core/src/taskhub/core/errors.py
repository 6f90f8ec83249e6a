"""TaskHub 异常体系

五类业务错误：NotFound / Validation / Authorization / InvalidTransition / VersionConflict。
core 只负责抛出，HTTP 状态码映射由 gateway 决定。
"""


class TaskHubError(Exception):
    """TaskHub 基础异常"""

    code: str = "TASKHUB_ERROR"

    def __init__(self, message: str) -> None:
        """
        Args:
            message: 错误描述（对调用方可见）
        """
        super().__init__(message)
        self.message = message


class TaskNotFoundError(TaskHubError):
    """任务不存在，或不属于请求的 workspace（对外表现一致，避免泄露存在性）"""

    code = "TASK_NOT_FOUND"

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class TaskValidationError(TaskHubError):
    """业务字段校验失败（标题为空、超长等）"""

    code = "VALIDATION_ERROR"


class AuthorizationError(TaskHubError):
    """角色无权执行该分配或状态流转"""

    code = "FORBIDDEN"


class InvalidTransitionError(TaskHubError):
    """目标状态不在当前状态的合法流转集合内"""

    code = "INVALID_TRANSITION"

    def __init__(self, message: str = "invalid state transition") -> None:
        super().__init__(message)


class VersionConflictError(TaskHubError):
    """乐观锁冲突 -- 期望版本与存储版本不一致

    调用方需重新读取任务后再提交，core 不做重试或合并。
    """

    code = "VERSION_CONFLICT"

    def __init__(self, task_id: str, expected_version: int) -> None:
        super().__init__(
            f"Version conflict on task {task_id}: "
            f"expected version {expected_version} is stale"
        )
        self.task_id = task_id
        self.expected_version = expected_version

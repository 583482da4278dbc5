"""Core 异常体系

所有错误以类型化异常抛给直接调用方，core 内部不做日志吞掉，也不重试。
"""


class SalesdeskError(Exception):
    """Core 基础异常"""

    def __init__(self, message: str, recoverable: bool = False) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 调用方是否可通过重试恢复
        """
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable


class InvalidTransitionError(SalesdeskError):
    """请求的状态流转在当前状态下不合法，任务保持不变"""

    def __init__(self, task_id: str, status: str, action: str) -> None:
        super().__init__(
            f"Cannot {action} task {task_id} in status {status}",
            recoverable=False,
        )
        self.task_id = task_id
        self.status = status
        self.action = action


class ValidationFailedError(SalesdeskError):
    """流转所需字段缺失或不合法"""

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"Missing or invalid field: {field}", recoverable=False)
        self.field = field


class NotFoundError(SalesdeskError):
    """任务或画像不存在"""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} with id {entity_id} does not exist", recoverable=False)
        self.entity = entity
        self.entity_id = entity_id


class StoreUnavailableError(SalesdeskError):
    """底层存储调用失败或超时

    core 不重试，重试由存储实现或调用方负责。
    """

    def __init__(self, operation: str, original_error: Exception) -> None:
        super().__init__(
            f"Store operation {operation} failed: {original_error}",
            recoverable=True,
        )
        self.operation = operation
        self.original_error = original_error

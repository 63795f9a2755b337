"""TaskLedger 异常体系

每个异常带稳定的 code，供网关映射为 HTTP 响应。
所有异常都在任何写入之前抛出，失败操作对存储状态没有影响。
"""

from .config import MAX_POINTS


class TaskLedgerError(Exception):
    """TaskLedger 基础异常"""

    code: str = "TASK_LEDGER_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRewardPointsError(TaskLedgerError):
    """创建任务时奖励积分不在 1..MAX_POINTS 范围内"""

    code = "INVALID_REWARD_POINTS"

    def __init__(self, reward_points: int) -> None:
        super().__init__(
            f"Reward points must be between 1 and {MAX_POINTS}, got {reward_points}"
        )
        self.reward_points = reward_points


class TaskNotFoundError(TaskLedgerError):
    """引用了注册表中不存在的任务"""

    code = "TASK_NOT_FOUND"

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class TaskNotPendingError(TaskLedgerError):
    """要求 PENDING 状态的操作作用在终态任务上"""

    code = "TASK_NOT_PENDING"

    def __init__(self, task_id: int, status: object) -> None:
        super().__init__(f"Task {task_id} is not pending (status: {status})")
        self.task_id = task_id
        self.status = status


class TaskAlreadyAssignedError(TaskLedgerError):
    """任务已有执行者"""

    code = "TASK_ALREADY_ASSIGNED"

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task {task_id} is already assigned")
        self.task_id = task_id


class NotCreatorError(TaskLedgerError):
    """指派操作的调用者不是任务创建者"""

    code = "NOT_CREATOR"

    def __init__(self, task_id: int, caller: str) -> None:
        super().__init__(f"Caller {caller!r} is not the creator of task {task_id}")
        self.task_id = task_id
        self.caller = caller


class NotAssigneeError(TaskLedgerError):
    """完成操作的调用者不是任务执行者"""

    code = "NOT_ASSIGNEE"

    def __init__(self, task_id: int, caller: str) -> None:
        super().__init__(f"Caller {caller!r} is not the assignee of task {task_id}")
        self.task_id = task_id
        self.caller = caller


class ProfileMismatchError(TaskLedgerError):
    """提交的进度记录不属于调用者"""

    code = "PROFILE_MISMATCH"

    def __init__(self, profile_id: str, caller: str) -> None:
        super().__init__(f"Profile {profile_id} does not belong to caller {caller!r}")
        self.profile_id = profile_id
        self.caller = caller


class ProfileNotFoundError(TaskLedgerError):
    """引用了不存在的进度记录"""

    code = "PROFILE_NOT_FOUND"

    def __init__(self, profile_id: str) -> None:
        super().__init__(f"Profile with id {profile_id} does not exist")
        self.profile_id = profile_id


class InvalidCapabilityError(TaskLedgerError):
    """未出示有效的管理员凭证"""

    code = "INVALID_CAPABILITY"

    def __init__(self, message: str = "A valid admin capability is required") -> None:
        super().__init__(message)


class SystemAlreadyInitializedError(TaskLedgerError):
    """管理员凭证只能在系统初始化时铸造一次"""

    code = "SYSTEM_ALREADY_INITIALIZED"

    def __init__(self) -> None:
        super().__init__("Admin capability has already been minted")


class PointsOverflowError(TaskLedgerError):
    """完成任务后累计积分将超出 MAX_POINTS"""

    code = "POINTS_OVERFLOW"

    def __init__(self, profile_id: str, points_earned: int) -> None:
        super().__init__(
            f"Profile {profile_id} cannot accumulate {points_earned} points "
            f"(limit {MAX_POINTS})"
        )
        self.profile_id = profile_id
        self.points_earned = points_earned

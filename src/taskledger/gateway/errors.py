"""网关错误映射

领域异常与请求校验失败统一转换为 {"error": {"code", "message"}} 响应。
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from taskledger.core.errors import TaskLedgerError


class CallerIdentityMissingError(TaskLedgerError):
    """请求未携带调用者身份"""

    code = "CALLER_IDENTITY_REQUIRED"

    def __init__(self) -> None:
        super().__init__("X-Caller-Id header is required")


ERROR_STATUS_CODES: dict[str, int] = {
    "INVALID_REWARD_POINTS": 400,
    "CALLER_IDENTITY_REQUIRED": 401,
    "NOT_CREATOR": 403,
    "NOT_ASSIGNEE": 403,
    "PROFILE_MISMATCH": 403,
    "INVALID_CAPABILITY": 403,
    "TASK_NOT_FOUND": 404,
    "PROFILE_NOT_FOUND": 404,
    "TASK_NOT_PENDING": 409,
    "TASK_ALREADY_ASSIGNED": 409,
    "POINTS_OVERFLOW": 409,
    "SYSTEM_ALREADY_INITIALIZED": 409,
}


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


async def handle_task_ledger_error(request: Request, exc: TaskLedgerError) -> JSONResponse:
    """TaskLedgerError -> HTTP 响应"""
    status_code = ERROR_STATUS_CODES.get(exc.code, 400)
    return error_response(status_code, exc.code, exc.message)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """请求校验失败 -> 400

    不回显原始输入：输入中可能含无法编码为 UTF-8 的字符。
    """
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )
    message = details.encode("utf-8", "replace").decode("utf-8")
    return error_response(400, "INVALID_REQUEST", message)


def register_error_handlers(app: FastAPI) -> None:
    """注册异常处理器"""
    app.add_exception_handler(TaskLedgerError, handle_task_ledger_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

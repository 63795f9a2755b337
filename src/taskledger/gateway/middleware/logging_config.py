"""structlog 配置模块

日志格式由 TASKLEDGER_LOG_FORMAT 决定：
- dev（默认）：控制台彩色输出
- json：每行一个 JSON 对象，供日志采集

Logfire APM 为可选 extra，由 LOGFIRE_SEND_TO_LOGFIRE 控制，不可用时只保留本地日志。
"""

import logging
import os
from enum import Enum

import structlog
from fastapi import FastAPI

# aiosqlite 在 DEBUG 级别会逐条记录 SQL 调用
_NOISY_LOGGERS = ("aiosqlite",)


def _render_enums(
    logger: object, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """枚举值按名称输出（如 status=COMPLETED 而不是 status=1）"""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.name
    return event_dict


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _render_enums,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _select_renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer()


def setup_logging() -> None:
    """初始化 structlog，并把标准库 logging 接到同一条处理链上"""
    log_format = os.environ.get("TASKLEDGER_LOG_FORMAT", "dev").lower()
    log_level = os.environ.get("TASKLEDGER_LOG_LEVEL", "INFO").upper()
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_select_renderer(log_format),
            foreign_pre_chain=shared,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logfire(app: FastAPI) -> None:
    """可选接入 Logfire（LOGFIRE_SEND_TO_LOGFIRE=true 时生效）"""
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return
    try:
        import logfire

        logfire.configure()
        logfire.instrument_fastapi(app)
    except Exception as e:
        structlog.get_logger().warning(
            "logfire_init_failed",
            error_type=type(e).__name__,
            message="Logfire 初始化失败，降级为纯本地日志",
        )

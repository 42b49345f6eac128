from __future__ import annotations

import sys

from loguru import logger

__all__ = ["LOG_FORMAT", "init_logger", "logger"]

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "{extra[service]} | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def init_logger(service_name: str, level: str = "INFO") -> None:
    """初始化日志。

    移除 loguru 的默认输出，改为按指定级别输出到标准错误。

    Args:
        service_name: 服务名称，会出现在每条日志中。
        level: 日志级别。
    """
    logger.remove()
    logger.configure(extra={"service": service_name})
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT, backtrace=False, diagnose=False)

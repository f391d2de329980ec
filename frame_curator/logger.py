"""
日志配置

Usage:
    from .logger import get_logger
    logger = get_logger(__name__)
    logger.error("Failed to read frame 12.")
"""

import logging
import sys
from pathlib import Path
from typing import Optional


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_loggers: dict[str, logging.Logger] = {}


def get_logger(
    name: str,
    level: int = logging.INFO,
    log_format: Optional[str] = None,
) -> logging.Logger:
    """
    获取 (或创建) 指定名称的 logger，输出到 stdout。

    Args:
        name: logger 名称，通常为调用模块的 __name__
        level: 日志级别
        log_format: 自定义格式 (可选)

    Returns:
        logging.Logger
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(
            fmt=log_format or DEFAULT_FORMAT,
            datefmt=DEFAULT_DATE_FORMAT,
        ))
        logger.addHandler(console_handler)

        logger.propagate = False

    _loggers[name] = logger
    return logger


def set_log_level(level: int) -> None:
    """修改所有已创建 logger 的级别。"""
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


def add_file_handler(log_file: Path, level: int = logging.DEBUG) -> None:
    """为所有已创建的 logger 追加文件输出。"""
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(
        fmt=DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT,
    ))
    for logger in _loggers.values():
        logger.addHandler(file_handler)

"""
自定义异常

导出过程中的 I/O 失败 (SeekFailure / ReadFailure / WriteFailure) 均为非致命错误，
由 ExportScheduler 捕获并记录日志；只有 InvalidExportConfigError 会阻止导出开始。
"""

from typing import Optional, Any


class FrameCuratorError(Exception):
    """所有自定义异常的基类。"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class SeekFailure(FrameCuratorError):
    """跳转到指定帧失败。"""

    def __init__(self, frame_id: int, details: Optional[dict[str, Any]] = None):
        details = details or {}
        details["frame_id"] = frame_id
        super().__init__(f"Failed to seek to frame {frame_id}.", details)
        self.frame_id = frame_id


class ReadFailure(FrameCuratorError):
    """读取指定帧失败。"""

    def __init__(self, frame_id: int, details: Optional[dict[str, Any]] = None):
        details = details or {}
        details["frame_id"] = frame_id
        super().__init__(f"Failed to read frame {frame_id}.", details)
        self.frame_id = frame_id


class WriteFailure(FrameCuratorError):
    """图片写入失败。"""

    def __init__(self, path: str, details: Optional[dict[str, Any]] = None):
        details = details or {}
        details["path"] = path
        super().__init__(f"Failed to write {path}.", details)
        self.path = path


class InvalidExportConfigError(FrameCuratorError):
    """导出参数不合法 (尺寸非正数、扩展名不支持等)。"""

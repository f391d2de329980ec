import cv2

from .logger import get_logger

logger = get_logger(__name__)


class VideoController:
    """
    视频流控制包装器。支持按帧号随机跳转。
    """

    def __init__(self, path):
        self.cap = cv2.VideoCapture(str(path))
        if not self.cap.isOpened():
            raise IOError(f"Cannot open video: {path}")

        self.name = path.parent.name if "%" in path.name else path.stem
        self.total_frames = int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT))
        self.fps = self.cap.get(cv2.CAP_PROP_FPS)
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

        self.current_frame_idx = 0
        self.frame_cache = None

    def read(self):
        """读取下一帧，成功时更新 current_frame_idx 与 frame_cache。"""
        ret, frame = self.cap.read()
        if ret:
            self.current_frame_idx = int(self.cap.get(cv2.CAP_PROP_POS_FRAMES)) - 1
            self.frame_cache = frame
        return ret, frame

    def seek(self, frame_idx):
        """
        跳转到指定帧 (不读取)。

        Returns
        -------
        bool
            帧号越界或底层跳转失败时返回 False。
        """
        if not 0 <= frame_idx < self.total_frames:
            return False
        return bool(self.cap.set(cv2.CAP_PROP_POS_FRAMES, frame_idx))

    def show(self, frame_idx):
        """跳转并读取，用于界面显示。失败时保留旧的 frame_cache。"""
        target = max(0, min(frame_idx, self.total_frames - 1))
        if not self.seek(target):
            logger.error(f"Failed to seek to frame {target}.")
        ret, _ = self.read()
        if not ret:
            logger.error(f"Failed to read frame {target}.")
        return ret

    def get_ms(self):
        """获取当前毫秒数"""
        return (self.current_frame_idx / self.fps) * 1000.0 if self.fps > 0 else 0

    def release(self):
        self.cap.release()

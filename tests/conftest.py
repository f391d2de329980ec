"""
共通测试夹具

FakeVideo 模拟 VideoController 的接口 (total_frames / seek / read / show)，
第 i 帧的所有像素值为 i * PIXEL_STEP，便于从导出的图片反推出原始帧号。
"""

import numpy as np
import pytest


PIXEL_STEP = 20


def frame_id_of(img):
    """根据像素值反推帧号。"""
    return int(img[0, 0, 0]) // PIXEL_STEP


class FakeVideo:
    def __init__(self, num_frames=10, width=64, height=48, fail_seek=(), fail_read=()):
        self.name = "clip"
        self.fps = 25.0
        self.total_frames = num_frames
        self.frames = [
            np.full((height, width, 3), i * PIXEL_STEP, dtype=np.uint8)
            for i in range(num_frames)
        ]
        self.fail_seek = set(fail_seek)
        self.fail_read = set(fail_read)

        self.pos = 0
        self.current_frame_idx = 0
        self.frame_cache = None
        self.seeks = []
        self.released = False

    def seek(self, frame_idx):
        self.seeks.append(frame_idx)
        if frame_idx in self.fail_seek or not 0 <= frame_idx < self.total_frames:
            return False
        self.pos = frame_idx
        return True

    def read(self):
        idx = self.pos
        self.pos += 1
        if idx >= self.total_frames or idx in self.fail_read:
            return False, None
        frame = self.frames[idx].copy()
        self.current_frame_idx = idx
        self.frame_cache = frame
        return True, frame

    def show(self, frame_idx):
        self.seek(frame_idx)
        ret, _ = self.read()
        return ret

    def release(self):
        self.released = True


class StepClock:
    """每次调用前进固定步长的假时钟。"""

    def __init__(self, step):
        self.step = step
        self.now = 0.0

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def fake_video():
    return FakeVideo()


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "export"

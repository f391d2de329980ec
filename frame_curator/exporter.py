import time
from dataclasses import replace
from enum import Enum

import cv2

from .config import AppConfig
from .data_manager import DataManager, export_filename
from .exceptions import FrameCuratorError, ReadFailure, SeekFailure, WriteFailure
from .logger import get_logger
from .sampler import sample_unselected

logger = get_logger(__name__)


class ExportState(Enum):
    IDLE = 'idle'
    RUNNING = 'running'


class ExportScheduler:
    """
    分时导出状态机 (Idle / Running)。

    由主循环每次迭代调用一次 ``poll()``，每次最多工作 ``time_budget`` 秒后让出，
    因此不需要后台线程，界面也不会卡住。

    每个导出对包括：
    - 选中帧：升序第 cursor 个选中帧号，保存为 ``1_{cursor:08d}{ext}``；
    - 未选中帧 (可选)：负样本第 cursor 项，保存为 ``0_{cursor:08d}{ext}``。

    跳转/读取/写入失败只记录日志，不中断导出，游标总是前进。

    Parameters
    ----------
    video : VideoController
        帧来源，需提供 ``total_frames``、``seek()``、``read()``。
    store : SelectionStore
        选中帧集合。导出开始时取快照，之后的修改不影响本次导出。
    time_budget : float
        每次 poll 的时间片 (秒)。
    clock : callable
        计时函数，测试时可替换。
    """

    def __init__(self, video, store, time_budget=AppConfig.EXPORT_TIME_BUDGET,
                 clock=time.perf_counter):
        self.video = video
        self.store = store
        self.time_budget = time_budget
        self.clock = clock

        self.state = ExportState.IDLE
        self.settings = None
        self.data = None
        self.current_export_frame = 0
        self.selected_indices = ()
        self.unselected_indices = []

        self._frame = None
        self._export_queued = False

    @property
    def in_export_state(self):
        return self.state is ExportState.RUNNING

    @property
    def progress(self):
        """导出进度 (0.0 ~ 1.0)，仅用于显示。"""
        if not self.selected_indices:
            return 0.0
        return self.current_export_frame / len(self.selected_indices)

    def request_export(self):
        """排队一次导出请求，由下一次 process_export() 消费。"""
        self._export_queued = True

    def process_export(self, settings):
        """
        消费排队的导出请求。导出进行中时忽略请求；参数非法时记录错误并保持 Idle。

        Returns
        -------
        bool
            是否启动了新的导出。
        """
        if not self._export_queued:
            return False
        self._export_queued = False

        if self.in_export_state:
            logger.warning("Export already running, request ignored.")
            return False

        try:
            self.start(settings)
        except FrameCuratorError as e:
            logger.error(f"Export not started: {e}")
            return False
        return True

    def start(self, settings):
        """
        Idle -> Running。

        Raises
        ------
        InvalidExportConfigError
            导出参数不合法，此时状态不变。
        """
        settings.validate()

        self.settings = replace(settings)
        self.data = DataManager(self.settings.output_dir)

        self.selected_indices = self.store.indices()
        self.unselected_indices = sample_unselected(self.video.total_frames, self.store)

        self.current_export_frame = 0
        self._frame = None
        self.state = ExportState.RUNNING

        logger.info(
            f"Export started: {len(self.selected_indices)} selected, "
            f"{len(self.unselected_indices)} unselected -> {self.data.output_root}"
        )

    def poll(self):
        """
        推进一次导出。

        游标在本次调用开始时已到达末尾则切换回 Idle 并返回 False，
        否则在时间片内尽可能多地导出，返回 True。
        """
        if not self.in_export_state:
            return False

        total = len(self.selected_indices)
        if self.current_export_frame >= total:
            self.state = ExportState.IDLE
            logger.info(f"Export finished: {total} pairs written to {self.data.output_root}")
            return False

        t0 = self.clock()

        while self.current_export_frame < total:
            cursor = self.current_export_frame

            self._export_item(AppConfig.LABEL_SELECTED, self.selected_indices[cursor])

            if self.settings.export_unselected and cursor < len(self.unselected_indices):
                self._export_item(AppConfig.LABEL_UNSELECTED, self.unselected_indices[cursor])

            self.current_export_frame += 1

            if self.clock() - t0 > self.time_budget:
                break

        return True

    def cancel(self):
        """中止导出并清空进度，已写入的文件保留。"""
        if self.in_export_state:
            logger.info(
                f"Export cancelled at {self.current_export_frame}/{len(self.selected_indices)}"
            )
        self.state = ExportState.IDLE
        self.current_export_frame = 0
        self.selected_indices = ()
        self.unselected_indices = []
        self._frame = None

    def _export_item(self, label, frame_id):
        # Read failures leave the previously held frame in place
        try:
            self._read_frame(frame_id)
        except FrameCuratorError as e:
            logger.error(str(e))

        try:
            self._write_frame(label, frame_id)
        except FrameCuratorError as e:
            logger.error(str(e))
        except cv2.error as e:
            logger.error(f"Failed to resize frame {frame_id}: {e}")

    def _read_frame(self, frame_id):
        if not self.video.seek(frame_id):
            raise SeekFailure(frame_id)

        ret, frame = self.video.read()
        if not ret or frame is None:
            raise ReadFailure(frame_id)

        self._frame = frame

    def _write_frame(self, label, frame_id):
        cursor = self.current_export_frame
        ext = self.settings.ext

        if self._frame is None:
            raise WriteFailure(
                str(self.data.output_root / export_filename(label, cursor, ext)),
                details={'frame_id': frame_id, 'reason': 'no frame buffer'},
            )

        resized = cv2.resize(self._frame, (self.settings.width, self.settings.height))

        path = self.data.save_export(resized, label, cursor, frame_id, ext)
        if path is None:
            raise WriteFailure(
                str(self.data.output_root / export_filename(label, cursor, ext)),
                details={'frame_id': frame_id},
            )

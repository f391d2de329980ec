import argparse
import logging
from dataclasses import replace
from pathlib import Path

import cv2

from .config import AppConfig, ExportSettings
from .exceptions import InvalidExportConfigError
from .exporter import ExportScheduler
from .logger import add_file_handler, get_logger, set_log_level
from .renderer import UIRenderer
from .selection import SelectionStore
from .video_controller import VideoController

logger = get_logger(__name__)


class CuratorApp:
    """
    主应用程序控制器。

    Parameters
    ----------
    video_path : str
        视频文件的路径。
    save_dir : str, optional
        数据保存根目录。最终结构为: save_dir / 视频名 / {0,1}_xxxxxxxx.png
    settings : ExportSettings, optional
        导出参数 (尺寸、格式、是否导出负样本)。output_dir 会被 save_dir / 视频名 覆盖。
    """

    def __init__(self, video_path, save_dir='dataset', settings=None):
        video_path = Path(video_path)
        # Image sequence patterns such as %05d.png have no single file on disk
        if "%" not in video_path.name and not video_path.exists():
            raise FileNotFoundError(f"Missing video file {video_path}")

        # 1. Init Modules
        self.video = VideoController(video_path)
        self.store = SelectionStore(self.video.total_frames)
        self.exporter = ExportScheduler(self.video, self.store)
        self.renderer = UIRenderer()

        # 2. Config
        self.cfg = AppConfig()
        self.settings = replace(settings or ExportSettings(),
                                output_dir=str(Path(save_dir) / self.video.name))

        # 3. State
        self.paused = True
        self.running = True
        self.current_frame_idx = 0
        self.current_selection = None
        self._window_ready = False

    def run(self):
        """启动主循环"""
        self._show_intro()
        self.goto(0)

        while self.running:
            display_img = self.step()
            if display_img is not None:
                cv2.imshow(self.cfg.WINDOW_NAME, display_img)
            self._handle_input()

        self.cleanup()

    def step(self):
        """
        主循环的一次迭代 (不含按键读取)：处理导出请求、推进导出、播放、更新区间并绘制。

        Returns
        -------
        np.ndarray | None
            待显示的图像，尚无可用帧时为 None。
        """
        # 1. Export
        self.exporter.process_export(self.settings)
        if self.exporter.in_export_state:
            self.exporter.poll()
            # Export moved the capture position
            self.video.show(self.current_frame_idx)

        # 2. Playback
        if not self.paused:
            ret, _ = self.video.read()
            if ret:
                self._set_position(self.video.current_frame_idx)
            else:
                self.paused = True

        # 3. Open range follows the current frame
        if self.current_selection is not None:
            self.store.extend_range(self.current_selection, self.current_frame_idx)

        # 4. Render
        frame = self.video.frame_cache
        if frame is None:
            return None

        ui_state = {
            'curr_pos': self.current_frame_idx,
            'total_frames': self.video.total_frames,
            'paused': self.paused,
            'selected': self.store,
            'open_range': self.current_selection.bounds() if self.current_selection else None,
            'exporting': self.exporter.in_export_state,
            'export_progress': self.exporter.progress,
        }
        return self.renderer.draw_interface(frame, ui_state)

    def goto(self, frame_idx):
        """跳转到指定帧并刷新缓存帧。"""
        if self.video.total_frames <= 0:
            return
        target = max(0, min(frame_idx, self.video.total_frames - 1))
        self.video.show(target)
        self._set_position(target)

    def toggle_selection(self):
        """开始一个新区间，或提交当前区间。导出进行中时拒绝提交，区间保持打开。"""
        if self.current_selection is None:
            self.current_selection = self.store.begin_range(self.current_frame_idx)
            return

        if self.exporter.in_export_state:
            logger.warning("Export in progress, selection not committed.")
            return

        self.store.extend_range(self.current_selection, self.current_frame_idx)
        start, end = self.current_selection.bounds()
        added = self.store.commit_range(self.current_selection)
        self.current_selection = None
        logger.info(f"Committed [{start}, {end}]: +{added}, total {len(self.store)}")

    def handle_key(self, key):
        if key == self.cfg.KEY_ESC:
            self.running = False
        elif key == self.cfg.KEY_SPACE:
            self.paused = not self.paused
        elif key == self.cfg.KEY_SELECT:
            self.toggle_selection()
        elif key == self.cfg.KEY_EXPORT:
            if self.exporter.in_export_state:
                logger.warning("Export already running, request ignored.")
            else:
                self.exporter.request_export()
        elif key == self.cfg.KEY_CANCEL:
            self.exporter.cancel()
        elif self.paused and key == self.cfg.KEY_PREV:
            self.goto(self.current_frame_idx - 1)
        elif self.paused and key == self.cfg.KEY_NEXT:
            self.goto(self.current_frame_idx + 1)

    def _handle_input(self):
        if self.paused or self.exporter.in_export_state or self.video.fps <= 0:
            delay = 30
        else:
            delay = max(1, int(1000 / self.video.fps))
        key = cv2.waitKey(delay) & 0xFF
        if key != 0xFF:
            self.handle_key(key)

    def _set_position(self, frame_idx):
        if frame_idx == self.current_frame_idx:
            return
        self.current_frame_idx = frame_idx
        if self._window_ready:
            cv2.setTrackbarPos(self.cfg.TRACKBAR_NAME, self.cfg.WINDOW_NAME, frame_idx)

    def _on_trackbar(self, pos):
        if pos != self.current_frame_idx:
            self.goto(pos)

    def _show_intro(self):
        cv2.namedWindow(self.cfg.WINDOW_NAME, cv2.WINDOW_NORMAL)
        cv2.createTrackbar(self.cfg.TRACKBAR_NAME, self.cfg.WINDOW_NAME, 0,
                           max(self.video.total_frames - 1, 1), self._on_trackbar)
        self._window_ready = True

        print(f"----- Frame Curator V{self.cfg.__version__} : {self.video.name} -----")
        print(f"总帧数: {self.video.total_frames} | 保存路径: {self.settings.output_dir}")
        print(f"导出尺寸: {self.settings.width}x{self.settings.height} "
              f"| 导出负样本: {self.settings.export_unselected}")
        print("---------------------------------------------------------")
        print("【选择】 S: 开始/提交区间 (区间随当前帧延伸)")
        print("【导出】 E: 开始导出 | C: 取消导出")
        print("【播放控制】 空格: 暂停/继续 | D/F: 上一帧/下一帧 (暂停时)")
        print("【退出程序】 ESC")
        print("---------------------------------------------------------")

    def cleanup(self):
        self.exporter.cancel()
        self.video.release()
        cv2.destroyAllWindows()


def build_parser():
    parser = argparse.ArgumentParser(
        description="Mark frame ranges in a video and export balanced selected/unselected datasets."
    )
    parser.add_argument("video", help="Input video (or image sequence pattern such as %%05d.png)")
    parser.add_argument("--output", default="dataset", help="Dataset root directory")
    parser.add_argument("--width", type=int, default=AppConfig.EXPORT_WIDTH,
                        help="Exported image width in pixels")
    parser.add_argument("--height", type=int, default=AppConfig.EXPORT_HEIGHT,
                        help="Exported image height in pixels")
    parser.add_argument("--ext", default=AppConfig.EXPORT_EXT, choices=AppConfig.SUPPORTED_EXTS,
                        help="Image format of exported files")
    parser.add_argument("--no-unselected", action="store_true",
                        help="Only export selected frames")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Console log level")
    parser.add_argument("--log-file", type=Path, default=None,
                        help="Also write logs to this file")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    set_log_level(getattr(logging, args.log_level))
    if args.log_file is not None:
        add_file_handler(args.log_file)

    settings = ExportSettings(
        width=args.width,
        height=args.height,
        export_unselected=not args.no_unselected,
        ext=args.ext,
    )
    try:
        settings.validate()
    except InvalidExportConfigError as e:
        parser.error(str(e))

    app = CuratorApp(args.video, args.output, settings)
    app.run()


if __name__ == "__main__":
    main()

"""
CuratorApp / UIRenderer / 命令行入口 的测试

VideoController 替换为 FakeVideo，不创建窗口。
"""

from unittest.mock import patch

import numpy as np
import pytest

from conftest import FakeVideo, frame_id_of
from frame_curator.config import AppConfig, ExportSettings
from frame_curator.main import CuratorApp, build_parser, main
from frame_curator.renderer import UIRenderer
from frame_curator.selection import Selection, SelectionStore


@pytest.fixture
def app(tmp_path):
    video_file = tmp_path / "clip.mp4"
    video_file.write_bytes(b"")
    with patch('frame_curator.main.VideoController', return_value=FakeVideo()):
        curator = CuratorApp(video_file, tmp_path / "dataset",
                             ExportSettings(width=8, height=6))
    curator.goto(0)
    return curator


def press(curator, key, times=1):
    for _ in range(times):
        curator.handle_key(key)
        curator.step()


def finish_export(curator, max_steps=100):
    for _ in range(max_steps):
        curator.step()
        if not curator.exporter.in_export_state:
            return
    raise AssertionError("export did not finish")


class TestCuratorApp:

    def test_missing_video(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CuratorApp(tmp_path / "nope.mp4")

    def test_output_dir_per_video(self, app, tmp_path):
        assert app.settings.output_dir == str(tmp_path / "dataset" / "clip")
        assert app.settings.width == 8

    def test_step_renders_current_frame(self, app):
        img = app.step()
        assert img.shape == (48, 64, 3)

    def test_step_navigation(self, app):
        press(app, AppConfig.KEY_NEXT, 3)
        assert app.current_frame_idx == 3
        press(app, AppConfig.KEY_PREV)
        assert app.current_frame_idx == 2

    def test_goto_clamps(self, app):
        app.goto(100)
        assert app.current_frame_idx == 9
        app.goto(-4)
        assert app.current_frame_idx == 0

    def test_select_range(self, app):
        """S 开始区间，移动后再按 S 提交"""
        app.goto(2)
        press(app, AppConfig.KEY_SELECT)
        assert app.current_selection == Selection(offset=2, end_offset=2)

        press(app, AppConfig.KEY_NEXT, 2)
        assert app.current_selection.end_offset == 4

        press(app, AppConfig.KEY_SELECT)
        assert app.current_selection is None
        assert app.store.indices() == (2, 3, 4)

    def test_select_backwards(self, app):
        app.goto(6)
        press(app, AppConfig.KEY_SELECT)
        press(app, AppConfig.KEY_PREV, 3)
        press(app, AppConfig.KEY_SELECT)

        assert app.store.indices() == (3, 4, 5, 6)

    def test_playback_extends_range(self, app):
        press(app, AppConfig.KEY_SELECT)
        app.handle_key(AppConfig.KEY_SPACE)
        for _ in range(3):
            app.step()
        app.handle_key(AppConfig.KEY_SPACE)
        press(app, AppConfig.KEY_SELECT)

        assert app.store.indices() == (0, 1, 2, 3)

    def test_playback_pauses_at_end(self, app):
        app.goto(8)
        app.handle_key(AppConfig.KEY_SPACE)
        for _ in range(3):
            app.step()
        assert app.paused is True
        assert app.current_frame_idx == 9

    def test_export(self, app, tmp_path):
        app.goto(2)
        press(app, AppConfig.KEY_SELECT)
        press(app, AppConfig.KEY_NEXT, 2)
        press(app, AppConfig.KEY_SELECT)

        app.handle_key(AppConfig.KEY_EXPORT)
        finish_export(app)

        out = tmp_path / "dataset" / "clip"
        assert len(list(out.glob("1_*.png"))) == 3
        assert len(list(out.glob("0_*.png"))) == 3
        # 导出结束后画面仍停在当前帧
        assert app.current_frame_idx == 4
        assert frame_id_of(app.video.frame_cache) == 4

    def test_commit_rejected_during_export(self, app):
        """导出进行中不能提交区间，区间保持打开"""
        app.store.commit_range(Selection(offset=0, end_offset=5))
        app.exporter.start(app.settings)

        app.goto(7)
        app.toggle_selection()
        app.toggle_selection()

        assert app.current_selection is not None
        assert app.store.indices() == (0, 1, 2, 3, 4, 5)

    def test_export_request_ignored_while_running(self, app):
        app.store.commit_range(Selection(offset=0, end_offset=5))
        app.exporter.start(app.settings)

        app.handle_key(AppConfig.KEY_EXPORT)

        assert app.exporter._export_queued is False

    def test_cancel_key(self, app):
        app.store.commit_range(Selection(offset=0, end_offset=5))
        app.exporter.start(app.settings)

        app.handle_key(AppConfig.KEY_CANCEL)

        assert not app.exporter.in_export_state

    def test_escape(self, app):
        app.handle_key(AppConfig.KEY_ESC)
        assert app.running is False

    def test_cleanup(self, app):
        with patch('frame_curator.main.cv2.destroyAllWindows'):
            app.cleanup()
        assert app.video.released is True


class TestUIRenderer:

    def _state(self, **kwargs):
        store = SelectionStore(10)
        store.commit_range(Selection(offset=2, end_offset=4))
        state = {
            'curr_pos': 3,
            'total_frames': 10,
            'paused': True,
            'selected': store,
            'open_range': None,
            'exporting': False,
            'export_progress': 0.0,
        }
        state.update(kwargs)
        return state

    def test_does_not_modify_input(self):
        frame = np.zeros((240, 320, 3), dtype=np.uint8)
        out = UIRenderer().draw_interface(frame, self._state())

        assert out.shape == frame.shape
        assert not frame.any()
        assert out.any()

    def test_exporting_and_open_range(self):
        frame = np.zeros((240, 320, 3), dtype=np.uint8)
        out = UIRenderer().draw_interface(
            frame, self._state(exporting=True, export_progress=0.5, open_range=(5, 7)))
        assert out.shape == frame.shape

    def test_empty_video(self):
        frame = np.zeros((240, 320, 3), dtype=np.uint8)
        UIRenderer().draw_interface(frame, self._state(total_frames=0, curr_pos=0))


class TestCommandLine:

    def test_defaults(self):
        args = build_parser().parse_args(["clip.mp4"])
        assert args.output == "dataset"
        assert (args.width, args.height) == (224, 224)
        assert args.no_unselected is False

    def test_every_option_has_help(self):
        parser = build_parser()
        for action in parser._actions:
            assert action.help, action.dest

    def test_main_builds_settings(self):
        with patch('frame_curator.main.CuratorApp') as app_cls:
            main(["clip.mp4", "--width", "64", "--height", "32", "--no-unselected", "--ext", ".jpg"])

        args, _ = app_cls.call_args
        assert args[0] == "clip.mp4"
        assert args[1] == "dataset"
        assert args[2] == ExportSettings(width=64, height=32, export_unselected=False, ext='.jpg')
        app_cls.return_value.run.assert_called_once()

    def test_invalid_size_exits(self):
        with patch('frame_curator.main.CuratorApp') as app_cls:
            with pytest.raises(SystemExit):
                main(["clip.mp4", "--width", "0"])
        app_cls.assert_not_called()

import cv2

from .config import AppConfig


class UIRenderer:
    """
    负责将UI元素绘制到视频帧上。
    """

    def __init__(self):
        self.cfg = AppConfig

    def draw_shadow_text(self, img, text, pos, scale, color, thickness, offset=2):
        """绘制带阴影的文字，增加对比度。"""
        x, y = pos
        # Shadow
        cv2.putText(img, text, (x + offset, y + offset),
                    self.cfg.FONT, scale, self.cfg.COLORS['shadow'], thickness)
        # Body
        cv2.putText(img, text, (x, y),
                    self.cfg.FONT, scale, color, thickness)

    def draw_interface(self, frame, current_state):
        """
        绘制主界面所有元素（不修改原图，返回复本）。

        Parameters
        ----------
        frame : np.ndarray
            原始视频帧。
        current_state : dict
            包含当前UI所需的所有状态数据:
            curr_pos, total_frames, paused, selected (SelectionStore),
            open_range ((start, end) 或 None), exporting, export_progress。

        Returns
        -------
        np.ndarray
            绘制了UI的图像。
        """
        display_img = frame.copy()
        h, w = display_img.shape[:2]

        # 1. Info Text
        info = f"Frame: {current_state['curr_pos']}/{current_state['total_frames']}"
        self.draw_shadow_text(display_img, info, (20, 40), 1, (174, 20, 255), 2)

        # 2. Status
        status = "[SPACE] PAUSED" if current_state['paused'] else "[SPACE] PLAYING"
        s_color = self.cfg.COLORS['red'] if current_state['paused'] else self.cfg.COLORS['green']
        self.draw_shadow_text(display_img, status, (w - 300, 40), 1, s_color, 2)

        # 3. Selection
        selection_text = (f"Selection Size: {len(current_state['selected'])} "
                          f"of {current_state['total_frames']}")
        self.draw_shadow_text(display_img, selection_text, (20, 80),
                              self.cfg.FONT_SCALE_NORMAL, self.cfg.COLORS['white'], 1, offset=1)

        open_range = current_state.get('open_range')
        if open_range is not None:
            range_text = f"Selection: [{open_range[0]}, {open_range[1]}]"
            self.draw_shadow_text(display_img, range_text, (20, 110),
                                  self.cfg.FONT_SCALE_NORMAL, self.cfg.OPEN_RANGE_COLOR, 1, offset=1)

        # 4. Export progress
        if current_state['exporting']:
            self._draw_export_bar(display_img, current_state['export_progress'])

        # 5. Timeline
        self._draw_progress_bar(display_img, current_state['curr_pos'],
                                current_state['total_frames'], current_state['selected'],
                                open_range)

        return display_img

    def _draw_export_bar(self, img, alpha):
        h, w = img.shape[:2]
        bar_y = 130
        bar_h = 16
        cv2.rectangle(img, (20, bar_y), (w - 20, bar_y + bar_h), self.cfg.COLORS['gray'], -1)
        pw = int(alpha * (w - 40))
        cv2.rectangle(img, (20, bar_y), (20 + pw, bar_y + bar_h), self.cfg.COLORS['yellow'], -1)
        self.draw_shadow_text(img, f"EXPORTING {alpha * 100:.0f}%  [C] Cancel", (20, bar_y + bar_h + 25),
                              self.cfg.FONT_SCALE_NORMAL, self.cfg.COLORS['yellow'], 1, offset=1)

    def _draw_progress_bar(self, img, curr, total, selected, open_range):
        h, w = img.shape[:2]
        bar_h = 20
        bar_y = h - 30

        # Background
        cv2.rectangle(img, (0, bar_y), (w, bar_y + bar_h), self.cfg.COLORS['gray'], -1)
        help_line = "[S] Select  [E] Export  [D]/[F] Step"
        self.draw_shadow_text(img, help_line, (w - 560, bar_y - bar_h), 1, self.cfg.COLORS['light_gray'], 2)

        if total > 0:
            # Selected frames
            for f_id in selected:
                mx = int((f_id / total) * w)
                cv2.line(img, (mx, bar_y), (mx, bar_y + bar_h), self.cfg.SELECTED_COLOR, 1)

            if open_range is not None:
                x0 = int((open_range[0] / total) * w)
                x1 = int(((open_range[1] + 1) / total) * w)
                cv2.rectangle(img, (x0, bar_y), (x1, bar_y + bar_h), self.cfg.OPEN_RANGE_COLOR, 2)

            # Cursor
            px = int((curr / total) * w)
            cv2.line(img, (px, bar_y - 4), (px, bar_y + bar_h + 4), self.cfg.COLORS['white'], 2)

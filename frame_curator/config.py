from dataclasses import dataclass

import cv2

from .exceptions import InvalidExportConfigError


class AppConfig:
    """
    应用程序全局配置类。
    存储颜色、按键映射、导出默认值等常量。
    """

    __version__ = '1.0.0'

    WINDOW_NAME = 'Frame Curator'
    TRACKBAR_NAME = 'Frame'

    # 基础颜色定义 (BGR 格式)
    COLORS = {
        'red': (0, 0, 255),
        'green': (0, 255, 0),
        'yellow': (0, 255, 255),
        'white': (255, 255, 255),
        'black': (0, 0, 0),
        'gray': (50, 50, 50),
        'light_gray': (200, 200, 200),
        'shadow': (0, 0, 0)
    }

    # 时间轴上选中帧 / 进行中区间的颜色
    SELECTED_COLOR = (0, 255, 0)
    OPEN_RANGE_COLOR = (0, 255, 255)

    # 按键定义
    KEY_ESC = 27
    KEY_SPACE = 32
    KEY_SELECT = ord('s')
    KEY_EXPORT = ord('e')
    KEY_CANCEL = ord('c')
    KEY_PREV = ord('d')
    KEY_NEXT = ord('f')

    # 导出默认值
    EXPORT_WIDTH = 224
    EXPORT_HEIGHT = 224
    EXPORT_EXT = '.png'
    EXPORT_UNSELECTED = True
    SUPPORTED_EXTS = ('.png', '.jpg', '.jpeg', '.bmp')

    # 每次 poll 的最长时间片 (秒)
    EXPORT_TIME_BUDGET = 0.05

    # 负样本采样: 固定种子 + 洗牌遍数
    SAMPLER_SEED = 0
    SAMPLER_PASSES = 4

    # 类别前缀
    LABEL_SELECTED = '1'
    LABEL_UNSELECTED = '0'

    MANIFEST_NAME = 'labels.csv'

    # 字体配置
    FONT = cv2.FONT_HERSHEY_SIMPLEX
    FONT_SCALE_NORMAL = 0.7


@dataclass
class ExportSettings:
    """
    单次导出任务的参数，导出开始时读取，运行期间保持不变。

    Attributes
    ----------
    width, height : int
        导出图片尺寸。
    export_unselected : bool
        是否同时导出未选中的负样本 (前缀 ``0``)。
    ext : str
        图片扩展名，决定编码格式。
    output_dir : str
        输出目录。
    """

    width: int = AppConfig.EXPORT_WIDTH
    height: int = AppConfig.EXPORT_HEIGHT
    export_unselected: bool = AppConfig.EXPORT_UNSELECTED
    ext: str = AppConfig.EXPORT_EXT
    output_dir: str = '.'

    def validate(self):
        """检查参数合法性，不合法时抛出 InvalidExportConfigError。"""
        if self.width <= 0 or self.height <= 0:
            raise InvalidExportConfigError(
                "Export size must be positive",
                details={'width': self.width, 'height': self.height},
            )
        if self.ext.lower() not in AppConfig.SUPPORTED_EXTS:
            raise InvalidExportConfigError(
                "Unsupported image extension",
                details={'ext': self.ext},
            )

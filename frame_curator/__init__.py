# frame_curator/__init__.py
"""
Frame Curator (视频帧二分类数据集工具包)
=======================================

基于 OpenCV 的交互式视频帧选择与导出工具。
在视频中标记若干连续帧区间为"选中"(正样本)，导出时自动抽取等量的"未选中"帧(负样本)，
统一缩放后保存为编号图片，用于训练二分类模型。

主要功能
-------
1. **区间选择**：按 S 开始区间，拖动/逐帧移动延伸区间，再按 S 提交。
2. **可复现负样本**：固定种子洗牌，同样的选择总是得到同样的负样本。
3. **分时导出**：每次循环最多工作 50ms，导出期间界面保持响应。
4. **导出清单**：labels.csv 记录每个文件对应的类别与原始帧号。

模块结构
-------
- `CuratorApp`: 应用程序主入口。
- `SelectionStore` / `Selection`: 选中帧集合与进行中的区间。
- `sample_unselected`: 负样本采样。
- `ExportScheduler`: 分时导出状态机。
- `ExportSettings` / `AppConfig`: 导出参数与全局配置。

使用示例
-------
>>> from frame_curator import CuratorApp, ExportSettings
>>> app = CuratorApp("input_video.mp4", save_dir="dataset",
...                  settings=ExportSettings(width=224, height=224))
>>> app.run()

命令行::

    frame-curator input_video.mp4 --output dataset --width 224 --height 224
"""

from .config import AppConfig, ExportSettings
from .exporter import ExportScheduler, ExportState
from .main import CuratorApp
from .sampler import sample_unselected
from .selection import Selection, SelectionStore

__version__ = AppConfig.__version__

__all__ = ['CuratorApp', 'AppConfig', 'ExportSettings', 'ExportScheduler', 'ExportState',
           'Selection', 'SelectionStore', 'sample_unselected']

import os
import csv
from pathlib import Path

import cv2

from .config import AppConfig
from .exceptions import WriteFailure
from .logger import get_logger

logger = get_logger(__name__)


def export_filename(label, cursor, ext=AppConfig.EXPORT_EXT):
    """
    导出文件名: ``{类别}_{游标:08d}{扩展名}``。

    >>> export_filename('1', 5)
    '1_00000005.png'
    """
    return f"{label}_{cursor:08d}{ext}"


class DataManager:
    """
    处理导出目录、图片写入及清单 (CSV) 记录。

    Attributes
    ----------
    output_root : Path
        导出根目录。
    csv_path : Path
        导出清单路径，每行记录一个成功写入的文件。
    """

    def __init__(self, output_dir):
        """
        Parameters
        ----------
        output_dir : str | Path
            导出目录，不存在时自动创建。
        """
        self.output_root = Path(output_dir)
        self.output_root.mkdir(parents=True, exist_ok=True)
        self.csv_path = self.output_root / AppConfig.MANIFEST_NAME

        self._init_csv()

    def _init_csv(self):
        """重新写入表头。每次导出都会覆盖同名文件，因此清单也从头开始。"""
        with open(self.csv_path, mode='w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(['filename', 'class_label', 'frame_id'])

    def save_export(self, img, label, cursor, frame_id, ext=AppConfig.EXPORT_EXT):
        """
        保存一张导出图片并追加清单记录。

        Returns
        -------
        Path | None
            成功时返回写入路径，失败返回 None。

        Raises
        ------
        WriteFailure
            图片已写入但清单追加失败。
        """
        fname = export_filename(label, cursor, ext)
        full_path = self.output_root / fname
        if not self.save_image_safe(full_path, img):
            return None

        try:
            with open(self.csv_path, mode='a', newline='', encoding='utf-8') as f:
                writer = csv.writer(f)
                writer.writerow([fname, label, frame_id])
        except OSError as e:
            raise WriteFailure(str(self.csv_path), details={'reason': 'manifest', 'file': fname}) from e
        return full_path

    def read_manifest(self):
        """读取清单，返回 [(filename, class_label, frame_id), ...]。"""
        rows = []
        with open(self.csv_path, 'r', encoding='utf-8') as f:
            reader = csv.reader(f)
            next(reader, None)  # Skip header
            for row in reader:
                if len(row) >= 3:
                    rows.append((row[0], row[1], int(row[2])))
        return rows

    @staticmethod
    def save_image_safe(path, img, quality=95):
        """
        安全保存图片，支持中文路径。
        先用 cv2.imencode 编码为二进制流，再由 numpy 写入文件。

        Args:
            path (Path | str): 保存路径
            img (numpy.ndarray): 图像数据 (BGR)
            quality (int): JPEG 压缩质量 (0-100)

        Returns:
            bool: 是否保存成功
        """
        path = str(path)
        ext = os.path.splitext(path)[1].lower()

        if ext in ['.jpg', '.jpeg']:
            params = [int(cv2.IMWRITE_JPEG_QUALITY), quality]
        elif ext == '.png':
            params = [int(cv2.IMWRITE_PNG_COMPRESSION), 3]
        else:
            params = []

        try:
            success, encoded_img = cv2.imencode(ext, img, params)
            if success:
                encoded_img.tofile(path)
                return True
            return False
        except (cv2.error, OSError) as e:
            logger.error(f"保存图片失败: {path}: {e}")
            return False

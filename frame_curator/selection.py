from bisect import bisect_left
from dataclasses import dataclass

from .logger import get_logger

logger = get_logger(__name__)


@dataclass
class Selection:
    """
    正在绘制中的帧区间 (闭区间)。

    Attributes
    ----------
    offset : int
        区间起始帧号。
    end_offset : int
        区间结束帧号 (包含)，按住选择期间随当前帧实时更新。
    """

    offset: int
    end_offset: int

    def bounds(self):
        """返回规范化后的 (start, end)，保证 start <= end。"""
        return min(self.offset, self.end_offset), max(self.offset, self.end_offset)


class SelectionStore:
    """
    已选中帧号的有序集合。

    只增不减：没有删除/撤回操作。内部为升序列表，
    因此 ``store[k]`` 即第 k 小的帧号，供导出游标使用。

    Parameters
    ----------
    num_frames : int
        视频总帧数，帧号合法范围为 [0, num_frames)。
    """

    def __init__(self, num_frames):
        self.num_frames = num_frames
        self._indices = []

    def __len__(self):
        return len(self._indices)

    def __contains__(self, frame_id):
        i = bisect_left(self._indices, frame_id)
        return i < len(self._indices) and self._indices[i] == frame_id

    def __getitem__(self, k):
        return self._indices[k]

    def __iter__(self):
        return iter(self._indices)

    def indices(self):
        """升序快照。"""
        return tuple(self._indices)

    def begin_range(self, at):
        return Selection(offset=at, end_offset=at)

    def extend_range(self, selection, to):
        selection.end_offset = to

    def commit_range(self, selection):
        """
        将区间内所有帧号写入集合。

        起止颠倒时先交换 (``[5, 2]`` 等价于 ``[2, 5]``)；
        超出 [0, num_frames) 的部分被裁掉。重复插入无副作用。

        Returns
        -------
        int
            新增的帧数。
        """
        start, end = selection.bounds()
        clipped_start = max(start, 0)
        clipped_end = min(end, self.num_frames - 1)
        if (clipped_start, clipped_end) != (start, end):
            logger.warning(
                f"Selection [{start}, {end}] clipped to [{clipped_start}, {clipped_end}]"
            )

        new = set(range(clipped_start, clipped_end + 1)).difference(self._indices)
        if new:
            self._indices = sorted(self._indices + list(new))
        return len(new)

"""
负样本 (未选中帧) 采样。

同一组 (num_frames, 选中集合) 总是得到相同的结果，保证多次导出的数据集可复现。
"""

import numpy as np

from .config import AppConfig


def shuffle_indices(indices, rng):
    """
    原地洗牌一遍。从下标 2 开始，第 i 步与 [0, i-1] 中随机一项交换。
    """
    for i in range(2, len(indices)):
        j = int(rng.integers(0, i))
        indices[i], indices[j] = indices[j], indices[i]


def sample_unselected(num_frames, selected, seed=AppConfig.SAMPLER_SEED,
                      passes=AppConfig.SAMPLER_PASSES):
    """
    从未选中帧中抽取与选中帧等量的负样本。

    Parameters
    ----------
    num_frames : int
        视频总帧数。
    selected : container of int
        已选中帧号 (只读，支持 ``in``，如 SelectionStore)。
    seed : int
        随机种子。
    passes : int
        洗牌遍数，各遍共用同一个生成器状态。

    Returns
    -------
    list of int
        长度为 min(len(selected), num_frames)，不超过候选池大小。
        候选池不足时结果少于选中帧数，导出将不平衡，这不是错误。
    """
    pool = [i for i in range(num_frames) if i not in selected]

    rng = np.random.Generator(np.random.MT19937(seed))
    for _ in range(passes):
        shuffle_indices(pool, rng)

    return pool[:min(len(selected), num_frames)]

"""K-Means Engine - 质心迭代聚类"""

import math
from typing import List, Optional, Protocol, Sequence, Tuple, Union

import numpy as np

from data_segmenter.core.config import settings
from data_segmenter.engines.statistics import group_indices, summarize_groups
from data_segmenter.models.dataset import Row
from data_segmenter.models.segment import SegmentStats
from data_segmenter.utils.coercion import parse_float
from data_segmenter.utils.logger import log


class RandomSource(Protocol):
    """随机数来源：random(size) 返回 [0, 1) 内均匀分布的数组"""

    def random(self, size: Tuple[int, int]) -> np.ndarray:
        ...


RandomLike = Union[RandomSource, int, None]


def resolve_rng(rng: RandomLike) -> RandomSource:
    """把种子或 None 转为随机数来源"""
    if rng is None or isinstance(rng, (int, np.integer)):
        return np.random.default_rng(rng)
    return rng


def build_feature_matrix(rows: Sequence[Row], columns: Sequence[str]) -> np.ndarray:
    """构建特征矩阵：无法解析的值记为 0"""
    matrix = np.zeros((len(rows), len(columns)), dtype=float)
    for i, row in enumerate(rows):
        for j, col in enumerate(columns):
            value = parse_float(row.get(col))
            if not math.isnan(value):
                matrix[i, j] = value
    return matrix


class KMeansEngine:
    """
    K-Means 聚类引擎

    初始质心在 [0, init_scale) 内均匀随机生成，不依据数据范围；
    最多迭代 max_iterations 轮，成员不再变化时提前停止。
    """

    def __init__(self, max_iterations: Optional[int] = None, init_scale: Optional[float] = None):
        self.max_iterations = max_iterations or settings.kmeans_max_iterations
        self.init_scale = init_scale or settings.kmeans_init_scale
        self.centroids: Optional[np.ndarray] = None
        self.iterations = 0

    def fit_predict(self, features: np.ndarray, k: int, rng: RandomLike = None) -> List[int]:
        """
        拟合并返回每个点的簇序号

        Args:
            features: 形状为 (n, d) 的特征矩阵
            k: 簇数量（>=1）
            rng: 随机数来源或种子

        Returns:
            每行的簇序号
        """
        if k < 1:
            raise ValueError(f"簇数量必须 >= 1: {k}")

        n_points, n_features = features.shape
        source = resolve_rng(rng)
        centroids = np.asarray(source.random((k, n_features)), dtype=float) * self.init_scale
        labels = np.zeros(n_points, dtype=int)
        self.iterations = 0

        if n_points == 0:
            self.centroids = centroids
            return []

        for _ in range(self.max_iterations):
            self.iterations += 1

            # 平方欧氏距离，argmin 在并列时取序号最小的质心
            distances = ((features[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)
            new_labels = distances.argmin(axis=1)
            changed = bool((new_labels != labels).any())
            labels = new_labels

            for cluster in range(k):
                members = features[labels == cluster]
                if len(members) > 0:
                    centroids[cluster] = members.mean(axis=0)

            if not changed:
                break

        self.centroids = centroids
        log.debug(f"K-Means 完成: k={k}, 迭代 {self.iterations} 轮")
        return labels.tolist()


def kmeans_cluster(
    rows: Sequence[Row],
    columns: Sequence[str],
    k: int,
    rng: RandomLike = None,
    max_iterations: Optional[int] = None
) -> List[int]:
    """
    对数据行做 K-Means 聚类

    Args:
        rows: 数据行
        columns: 数值特征列
        k: 簇数量
        rng: 随机数来源或种子（测试时注入以保证确定性）
        max_iterations: 最大迭代轮数

    Returns:
        每行的簇序号
    """
    features = build_feature_matrix(rows, columns)
    engine = KMeansEngine(max_iterations=max_iterations)
    return engine.fit_predict(features, k, rng)


def kmeans_segment(
    rows: Sequence[Row],
    columns: Sequence[str],
    k: int,
    rng: RandomLike = None
) -> List[SegmentStats]:
    """K-Means 分群：返回 k 个分群（可能为空），统计所选列"""
    labels = kmeans_cluster(rows, columns, k, rng)
    groups = group_indices(labels, k)
    log.info(f"K-Means 分群: {len(rows)} 行, k={k}, 各簇行数 {[len(g) for g in groups]}")
    return summarize_groups(rows, groups, columns)

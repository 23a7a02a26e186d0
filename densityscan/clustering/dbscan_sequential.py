"""
串行DBSCAN实现
经典的密度聚类算法，对任意对象id和任意范围查询工作
"""

import time
from typing import Hashable, Iterable, Optional, Union

import numpy as np

from .config import (
    DBSCANConfig,
    SUPPORTED_INDEXES,
    SUPPORTED_METRICS,
    validate_min_samples,
    validate_order
)
from .errors import ConfigurationError
from .expansion import ClusterExpansion, ExpansionOutcome
from .range_query import DistanceMatrixRangeQuery, as_range_query
from .result import ClusteringResult, PartialClusteringResult
from .utils import as_points, build_range_query
from ..profiling.progress import ProgressLike, as_observer


def _as_cancel_check(cancel):
    """threading.Event 或无参函数 -> 无参函数"""
    if cancel is None:
        return None
    if hasattr(cancel, 'is_set'):
        return cancel.is_set
    if callable(cancel):
        return cancel
    raise ConfigurationError(f"不支持的取消标志: {cancel!r}")


class DBSCANSequential:
    """串行版本的DBSCAN聚类算法"""

    def __init__(self, eps=100.0, min_samples: int = 5,
                 metric: str = 'euclidean', index: str = 'kdtree',
                 order: str = 'fifo', progress: ProgressLike = None,
                 check_invariants: bool = False):
        """
        初始化DBSCAN参数

        Args:
            eps: 邻域半径（haversine下为米）
            min_samples: 核心点的最小邻域大小（包含自身），必须 >= 1
            metric: 距离度量方式，fit时使用，支持'euclidean'和'haversine'
            index: fit时使用的范围查询实现
            order: 种子队列出队顺序，'fifo' 或 'lifo'
            progress: 可选的进度观察者或回调函数 f(n_processed, n_clusters)
            check_invariants: 运行结束后校验结果是输入集合的划分
        """
        self.eps = eps
        self.min_samples = validate_min_samples(min_samples)
        self.order = validate_order(order)
        if metric not in SUPPORTED_METRICS:
            raise ConfigurationError(f"不支持的度量方式: {metric}")
        if index not in SUPPORTED_INDEXES:
            raise ConfigurationError(f"不支持的索引方式: {index}")
        self.metric = metric
        self.index = index
        self.progress = as_observer(progress)
        self.check_invariants = check_invariants

        self.result_: Optional[ClusteringResult] = None
        self.labels_ = None
        self.core_sample_indices_ = None
        self.components_ = None
        self.n_queries_ = 0
        self.execution_time = 0

    @classmethod
    def from_config(cls, config: DBSCANConfig, progress: ProgressLike = None) -> 'DBSCANSequential':
        config.validate()
        return cls(eps=config.eps, min_samples=config.min_samples, metric=config.metric,
                   index=config.index, order=config.order, progress=progress,
                   check_invariants=config.check_invariants)

    def get_params(self) -> dict:
        return {
            'eps': self.eps,
            'min_samples': self.min_samples,
            'metric': self.metric,
            'index': self.index,
            'order': self.order
        }

    def run(self, ids: Iterable[Hashable], range_query,
            cancel=None) -> Union[ClusteringResult, PartialClusteringResult]:
        """
        对给定对象执行DBSCAN聚类

        Args:
            ids: 所有对象id，枚举顺序只影响边界对象的归属
            range_query: 范围查询（带 neighbors 方法的对象或函数 f(id, radius)）
            cancel: 可选的取消标志（threading.Event 或无参函数）

        Returns:
            ClusteringResult；被取消时返回 PartialClusteringResult

        Raises:
            ConfigurationError: 半径不在距离函数的值域内
            RangeQueryFailure: 范围查询在运行中失败
        """
        range_query = as_range_query(range_query)
        cancel_check = _as_cancel_check(cancel)
        # 去重，保留第一次出现的位置
        ids = list(dict.fromkeys(ids))
        n_total = len(ids)

        validate_radius = getattr(range_query, 'validate_radius', None)
        if validate_radius is not None:
            validate_radius(self.eps)

        start_time = time.time()
        expansion = ClusterExpansion(range_query, self.eps, self.min_samples,
                                     order=self.order, cancel_check=cancel_check,
                                     domain=set(ids))

        if n_total < self.min_samples:
            # 不可能存在核心对象
            expansion.mark_all_noise(ids)
            self._notify(len(expansion.processed), 0)
        else:
            for object_id in ids:
                if cancel_check is not None and cancel_check():
                    return self._cancelled(expansion, ids)

                if object_id not in expansion.processed:
                    outcome = expansion.expand(object_id)
                    if outcome is ExpansionOutcome.CANCELLED:
                        return self._cancelled(expansion, ids)
                    self._notify(len(expansion.processed), len(expansion.clusters))

                if len(expansion.processed) == n_total:
                    break

        if self.progress is not None and hasattr(self.progress, 'finish'):
            self.progress.finish(len(expansion.processed), len(expansion.clusters))

        self.execution_time = time.time() - start_time
        self.n_queries_ = expansion.n_queries

        result = expansion.to_result(self.execution_time, self.get_params())
        if self.check_invariants:
            result.validate_partition(ids)

        self.result_ = result
        return result

    def _notify(self, n_processed: int, n_clusters: int) -> None:
        if self.progress is not None:
            self.progress.update(n_processed, n_clusters)

    def _cancelled(self, expansion: ClusterExpansion, ids) -> PartialClusteringResult:
        self.n_queries_ = expansion.n_queries
        self.result_ = None
        return expansion.to_partial_result(ids)

    def fit(self, points: np.ndarray) -> 'DBSCANSequential':
        """
        对点数组执行DBSCAN聚类

        Args:
            points: 形状为(n_samples, n_features)的numpy数组；
                haversine下每一行是[latitude, longitude]

        Returns:
            self: 返回聚类器实例
        """
        points = as_points(points, self.metric)
        if points.shape[0] == 0:
            # 空输入不构建索引，BallTree等不接受0个样本
            range_query = DistanceMatrixRangeQuery(points, self.metric,
                                                   distance_matrix=np.empty((0, 0)))
        else:
            range_query = self._build_range_query(points)

        ids = range(points.shape[0])
        result = self.run(ids, range_query)

        self.labels_ = result.to_labels(ids)
        self.core_sample_indices_ = np.array(sorted(result.core_ids), dtype=np.int32)
        self.components_ = points[self.core_sample_indices_]

        return self

    def fit_predict(self, points: np.ndarray) -> np.ndarray:
        return self.fit(points).labels_

    def _build_range_query(self, points: np.ndarray):
        return build_range_query(points, self.eps, metric=self.metric, method=self.index)

    def get_cluster_stats(self) -> dict:
        """
        获取聚类统计信息

        Returns:
            包含聚类统计信息的字典
        """
        if self.result_ is None:
            return {}
        return self.result_.get_cluster_stats()

"""
并行DBSCAN实现
利用多核CPU并行计算邻域，聚类状态机仍在主进程中串行执行
"""

import time

import numpy as np

from .config import DBSCANConfig
from .dbscan_sequential import DBSCANSequential
from .errors import ConfigurationError
from .range_query import PrecomputedRangeQuery
from ..parallel.neighborhoods import resolve_n_jobs
from ..profiling.progress import ProgressLike


class DBSCANParallel(DBSCANSequential):
    """并行版本的DBSCAN聚类算法"""

    def __init__(self, eps=100.0, min_samples: int = 5,
                 metric: str = 'euclidean', n_jobs: int = -1,
                 chunk_size: int = 1000, order: str = 'fifo',
                 progress: ProgressLike = None, check_invariants: bool = False):
        """
        初始化并行DBSCAN参数

        Args:
            eps: 邻域半径（haversine下为米）
            min_samples: 核心点的最小邻域大小（包含自身）
            metric: 距离度量方式
            n_jobs: 并行工作进程数，-1表示使用所有CPU核心
            chunk_size: 每个工作进程处理的数据块大小
            order: 种子队列出队顺序
            progress: 可选的进度观察者
            check_invariants: 运行结束后校验划分性质
        """
        super().__init__(eps=eps, min_samples=min_samples, metric=metric,
                         index='precomputed', order=order, progress=progress,
                         check_invariants=check_invariants)
        if n_jobs == 0 or n_jobs < -1:
            raise ConfigurationError(f"n_jobs必须为正数或-1: {n_jobs}")
        if chunk_size < 1:
            raise ConfigurationError(f"chunk_size必须为正数: {chunk_size}")
        self.n_jobs = resolve_n_jobs(n_jobs)
        self.chunk_size = chunk_size
        self.parallel_time = 0

    @classmethod
    def from_config(cls, config: DBSCANConfig, progress: ProgressLike = None) -> 'DBSCANParallel':
        config.validate()
        return cls(eps=config.eps, min_samples=config.min_samples, metric=config.metric,
                   n_jobs=config.n_jobs, chunk_size=config.chunk_size, order=config.order,
                   progress=progress, check_invariants=config.check_invariants)

    def _build_range_query(self, points: np.ndarray) -> PrecomputedRangeQuery:
        start_time = time.time()
        range_query = PrecomputedRangeQuery.from_points(
            points, self.eps, metric=self.metric,
            n_jobs=self.n_jobs, chunk_size=self.chunk_size
        )
        self.parallel_time = time.time() - start_time
        return range_query

    def get_performance_stats(self) -> dict:
        """
        获取性能统计信息

        Returns:
            性能统计字典
        """
        stats = self.get_cluster_stats()
        stats.update({
            'n_jobs': self.n_jobs,
            'chunk_size': self.chunk_size,
            'parallel_time': self.parallel_time
        })
        return stats

"""
DBSCAN参数配置
集中保存并校验聚类参数
"""

import math
import numbers
from dataclasses import dataclass, asdict, fields
from typing import Dict, Any

from .errors import ConfigurationError

SUPPORTED_METRICS = ('euclidean', 'haversine')
SUPPORTED_INDEXES = ('brute', 'matrix', 'kdtree', 'balltree', 'precomputed')
SUPPORTED_ORDERS = ('fifo', 'lifo')


@dataclass
class DBSCANConfig:
    """DBSCAN聚类参数"""

    eps: float = 100.0  # 邻域半径
    min_samples: int = 5  # 核心点的最小邻域大小（包含自身）
    metric: str = 'euclidean'  # 距离度量方式
    index: str = 'kdtree'  # 范围查询实现
    order: str = 'fifo'  # 种子队列的出队顺序
    n_jobs: int = 1  # 预计算邻域时的进程数，-1表示所有CPU核心
    chunk_size: int = 1000  # 每个工作进程处理的数据块大小
    check_invariants: bool = False  # 运行结束后校验划分性质

    def validate(self) -> 'DBSCANConfig':
        """
        校验参数

        Returns:
            self

        Raises:
            ConfigurationError: 参数不合法
        """
        validate_min_samples(self.min_samples)
        validate_order(self.order)

        if self.metric not in SUPPORTED_METRICS:
            raise ConfigurationError(f"不支持的度量方式: {self.metric}")
        if self.index not in SUPPORTED_INDEXES:
            raise ConfigurationError(f"不支持的索引方式: {self.index}")

        try:
            eps = float(self.eps)
        except (TypeError, ValueError):
            raise ConfigurationError(f"eps必须是数值: {self.eps!r}")
        if math.isnan(eps) or eps < 0:
            raise ConfigurationError(f"eps必须是非负数: {self.eps!r}")

        if self.n_jobs == 0 or self.n_jobs < -1:
            raise ConfigurationError(f"n_jobs必须为正数或-1: {self.n_jobs}")
        if self.chunk_size < 1:
            raise ConfigurationError(f"chunk_size必须为正数: {self.chunk_size}")

        return self

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> 'DBSCANConfig':
        """从字典创建配置，忽略未知的键"""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in params.items() if k in known}).validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_min_samples(min_samples) -> int:
    # bool是int的子类，这里不接受
    if isinstance(min_samples, bool) or not isinstance(min_samples, numbers.Integral):
        raise ConfigurationError(f"min_samples必须是整数: {min_samples!r}")
    if min_samples < 1:
        raise ConfigurationError(f"min_samples必须 >= 1: {min_samples}")
    return int(min_samples)


def validate_order(order: str) -> str:
    if order not in SUPPORTED_ORDERS:
        raise ConfigurationError(f"不支持的种子队列顺序: {order}")
    return order

"""
范围查询
给定对象id和半径，返回距离不超过半径的所有对象id（包含自身）
"""

import math
from typing import Callable, Dict, Hashable, List, Mapping, Optional, Sequence, Set, Union

import numpy as np
from scipy.spatial import KDTree
from sklearn.neighbors import BallTree

from .config import SUPPORTED_METRICS
from .errors import ConfigurationError
from .utils import EARTH_RADIUS_M, as_points, compute_distance_matrix


class RangeQuery:
    """
    范围查询接口

    实现必须满足：对固定数据集和半径结果确定；结果总是包含查询对象自身；
    可以重复调用；不修改数据集。
    """

    def neighbors(self, object_id: Hashable, radius) -> Set[Hashable]:
        """
        查找对象邻域内的所有对象

        Args:
            object_id: 目标对象id
            radius: 邻域半径

        Returns:
            邻域内对象id的集合（包含object_id）
        """
        raise NotImplementedError

    def validate_radius(self, radius) -> None:
        """运行前检查半径是否在距离函数的值域内，默认不做检查"""


class CallableRangeQuery(RangeQuery):
    """把函数 f(object_id, radius) 包装成范围查询"""

    def __init__(self, func: Callable[[Hashable, object], Set[Hashable]]):
        self.func = func

    def neighbors(self, object_id, radius):
        return self.func(object_id, radius)


def as_range_query(range_query) -> RangeQuery:
    """
    将范围查询参数统一为带 neighbors 方法的对象

    Args:
        range_query: RangeQuery、任何带 neighbors 方法的对象或普通函数

    Returns:
        范围查询对象
    """
    if hasattr(range_query, 'neighbors'):
        return range_query
    if callable(range_query):
        return CallableRangeQuery(range_query)
    raise ConfigurationError(f"不支持的范围查询对象: {range_query!r}")


class BruteForceRangeQuery(RangeQuery):
    """线性扫描的范围查询，适用于任意对象和任意距离函数"""

    def __init__(self, objects: Union[Sequence, Mapping], distance: Callable):
        """
        初始化线性扫描查询

        Args:
            objects: 对象序列（id为下标）或 {id: 对象} 映射
            distance: 距离函数 distance(obj_a, obj_b)，结果需可与半径比较
        """
        if isinstance(objects, Mapping):
            self.objects: Dict[Hashable, object] = dict(objects)
        else:
            self.objects = dict(enumerate(objects))
        self.distance = distance

    @property
    def ids(self) -> List[Hashable]:
        return list(self.objects)

    def neighbors(self, object_id, radius):
        target = self.objects[object_id]
        result = {other_id for other_id, other in self.objects.items()
                  if self.distance(target, other) <= radius}
        result.add(object_id)
        return result


class _PointRangeQuery(RangeQuery):
    """基于numpy点数组的范围查询，对象id为行下标"""

    def __init__(self, points: np.ndarray, metric: str = 'euclidean'):
        if metric not in SUPPORTED_METRICS:
            raise ConfigurationError(f"不支持的度量方式: {metric}")
        self.metric = metric
        self.points = as_points(points, metric)

    @property
    def n_samples(self) -> int:
        return self.points.shape[0]

    @property
    def ids(self) -> range:
        return range(self.n_samples)

    def validate_radius(self, radius) -> None:
        try:
            value = float(radius)
        except (TypeError, ValueError):
            raise ConfigurationError(f"半径必须是数值: {radius!r}")
        if math.isnan(value) or value < 0:
            raise ConfigurationError(f"半径必须是非负数: {radius!r}")

    def _as_id_set(self, object_id: int, indices) -> Set[int]:
        result = set(np.asarray(indices, dtype=np.int64).tolist())
        result.add(int(object_id))
        return result


class DistanceMatrixRangeQuery(_PointRangeQuery):
    """使用预计算距离矩阵的范围查询，适合中小规模数据"""

    def __init__(self, points: np.ndarray, metric: str = 'euclidean',
                 distance_matrix: Optional[np.ndarray] = None):
        super().__init__(points, metric)
        if distance_matrix is None:
            distance_matrix = compute_distance_matrix(self.points, metric)
        self.distance_matrix = distance_matrix

    def neighbors(self, object_id, radius):
        return self._as_id_set(object_id, np.flatnonzero(self.distance_matrix[object_id] <= radius))


class KDTreeRangeQuery(_PointRangeQuery):
    """基于SciPy KDTree的范围查询（仅欧氏距离）"""

    def __init__(self, points: np.ndarray, leafsize: int = 16):
        super().__init__(points, 'euclidean')
        self.tree = KDTree(self.points, leafsize=leafsize)

    def neighbors(self, object_id, radius):
        return self._as_id_set(object_id, self.tree.query_ball_point(self.points[object_id], radius))


class BallTreeRangeQuery(_PointRangeQuery):
    """
    基于scikit-learn BallTree的范围查询

    haversine度量下点为 [latitude, longitude]（度），半径单位为米。
    """

    def __init__(self, points: np.ndarray, metric: str = 'euclidean', leaf_size: int = 40):
        super().__init__(points, metric)
        if metric == 'haversine':
            self._tree_points = np.radians(self.points)
            self._scale = EARTH_RADIUS_M
        else:
            self._tree_points = self.points
            self._scale = 1.0
        self.tree = BallTree(self._tree_points, leaf_size=leaf_size, metric=metric)

    def neighbors(self, object_id, radius):
        indices = self.tree.query_radius(
            self._tree_points[object_id:object_id + 1], r=float(radius) / self._scale
        )[0]
        return self._as_id_set(object_id, indices)


class PrecomputedRangeQuery(_PointRangeQuery):
    """
    预先计算好的邻域

    按最大半径一次性计算所有点的邻域（可并行），之后对不超过该半径的任意半径
    通过过滤已保存的距离作答。
    """

    def __init__(self, points: np.ndarray, max_radius: float,
                 indices: Sequence[np.ndarray], distances: Sequence[np.ndarray],
                 metric: str = 'euclidean'):
        """
        Args:
            points: 点数据数组
            max_radius: 预计算使用的半径
            indices: 每个点邻域内的点下标
            distances: 与indices对应的距离
            metric: 距离度量方式
        """
        super().__init__(points, metric)
        if len(indices) != self.n_samples or len(distances) != self.n_samples:
            raise ConfigurationError("预计算邻域的数量与点数量不一致")
        self.max_radius = float(max_radius)
        self.indices = indices
        self.distances = distances

    @classmethod
    def from_points(cls, points: np.ndarray, max_radius: float, metric: str = 'euclidean',
                    n_jobs: int = 1, chunk_size: int = 1000) -> 'PrecomputedRangeQuery':
        """
        计算所有点在max_radius内的邻域

        Args:
            points: 点数据数组
            max_radius: 邻域半径上限
            metric: 距离度量方式
            n_jobs: 工作进程数，-1表示使用所有CPU核心
            chunk_size: 每个任务处理的点数

        Returns:
            预计算的范围查询
        """
        from ..parallel.neighborhoods import compute_neighborhoods

        points = as_points(points, metric)
        query = _PointRangeQuery(points, metric)
        query.validate_radius(max_radius)

        indices, distances = compute_neighborhoods(
            points, float(max_radius), metric=metric, n_jobs=n_jobs, chunk_size=chunk_size
        )
        return cls(points, max_radius, indices, distances, metric=metric)

    def validate_radius(self, radius) -> None:
        super().validate_radius(radius)
        if float(radius) > self.max_radius:
            raise ConfigurationError(
                f"半径 {radius} 超过预计算的最大半径 {self.max_radius}"
            )

    def neighbors(self, object_id, radius):
        indices = self.indices[object_id]
        if radius < self.max_radius:
            indices = indices[self.distances[object_id] <= radius]
        return self._as_id_set(object_id, indices)

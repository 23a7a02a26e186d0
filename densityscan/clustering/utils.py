"""
聚类工具函数
距离计算和范围查询的构建
"""

import math
import warnings
from typing import Sequence

import numpy as np
from numba import jit, prange

from .errors import ConfigurationError

EARTH_RADIUS_M = 6371000.0  # 地球平均半径（米）


def as_points(points, metric: str = 'euclidean') -> np.ndarray:
    """
    将输入转换为二维float64数组并检查形状

    Args:
        points: 形状为(n_samples, n_features)的数组
        metric: 距离度量方式

    Returns:
        点数据数组
    """
    points = np.asarray(points, dtype=np.float64)
    if points.ndim == 1:
        points = points.reshape(-1, 1)
    if points.ndim != 2:
        raise ConfigurationError(f"点数据必须是二维数组, 实际维度: {points.ndim}")
    if metric == 'haversine' and points.shape[1] != 2:
        raise ConfigurationError("haversine度量要求每个点为 [latitude, longitude]")
    return points


def haversine_distance(point1: Sequence[float], point2: Sequence[float]) -> float:
    """
    两个经纬度点之间的Haversine距离

    Args:
        point1: 第一个点 [lat, lon]（度）
        point2: 第二个点 [lat, lon]（度）

    Returns:
        两点之间的距离（米）
    """
    lat1, lon1 = math.radians(point1[0]), math.radians(point1[1])
    lat2, lon2 = math.radians(point2[0]), math.radians(point2[1])

    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def euclidean_distance(point1: Sequence[float], point2: Sequence[float]) -> float:
    return float(np.sqrt(np.sum((np.asarray(point1) - np.asarray(point2)) ** 2)))


def get_distance_function(metric: str):
    """按名称返回标量距离函数"""
    if metric == 'euclidean':
        return euclidean_distance
    elif metric == 'haversine':
        return haversine_distance
    raise ConfigurationError(f"不支持的度量方式: {metric}")


def compute_distance_matrix(points: np.ndarray, metric: str = 'euclidean') -> np.ndarray:
    """
    计算距离矩阵

    Args:
        points: 形状为(n_samples, n_features)的numpy数组
        metric: 距离度量方式

    Returns:
        距离矩阵，形状为(n_samples, n_samples)
    """
    points = as_points(points, metric)

    if metric == 'euclidean':
        # 使用向量化计算欧氏距离
        diff = points[:, np.newaxis, :] - points[np.newaxis, :, :]
        return np.sqrt(np.sum(diff ** 2, axis=2))

    elif metric == 'haversine':
        return _haversine_distance_matrix(points)

    else:
        raise ConfigurationError(f"不支持的度量方式: {metric}")


@jit(nopython=True, parallel=True)
def _haversine_distance_matrix(points: np.ndarray) -> np.ndarray:
    """
    使用Numba加速的Haversine距离矩阵计算

    Args:
        points: 形状为(n_samples, 2)的numpy数组，[latitude, longitude]

    Returns:
        Haversine距离矩阵（米）
    """
    n_samples = points.shape[0]
    distance_matrix = np.zeros((n_samples, n_samples))
    R = 6371000.0

    lat_rad = np.radians(points[:, 0])
    lon_rad = np.radians(points[:, 1])

    for i in prange(n_samples):
        for j in range(i + 1, n_samples):
            dlon = lon_rad[j] - lon_rad[i]
            dlat = lat_rad[j] - lat_rad[i]

            a = math.sin(dlat / 2) ** 2 + math.cos(lat_rad[i]) * math.cos(lat_rad[j]) * math.sin(dlon / 2) ** 2
            c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
            distance = R * c

            distance_matrix[i, j] = distance
            distance_matrix[j, i] = distance

    return distance_matrix


def build_range_query(points: np.ndarray, eps: float, metric: str = 'euclidean',
                      method: str = 'kdtree', n_jobs: int = 1,
                      chunk_size: int = 1000):
    """
    根据方法名构建范围查询

    Args:
        points: 点数据数组
        eps: 邻域半径（precomputed方法按该半径预计算邻域）
        metric: 距离度量方式
        method: 'brute'、'matrix'、'kdtree'、'balltree' 或 'precomputed'
        n_jobs: precomputed方法使用的进程数
        chunk_size: precomputed方法每个任务的数据块大小

    Returns:
        范围查询对象
    """
    from .range_query import (
        BruteForceRangeQuery,
        DistanceMatrixRangeQuery,
        KDTreeRangeQuery,
        BallTreeRangeQuery,
        PrecomputedRangeQuery
    )

    points = as_points(points, metric)

    if method == 'kdtree' and metric == 'haversine':
        warnings.warn("KDTree只支持欧氏距离, haversine度量改用BallTree")
        method = 'balltree'

    if method == 'brute':
        return BruteForceRangeQuery(list(points), get_distance_function(metric))
    elif method == 'matrix':
        return DistanceMatrixRangeQuery(points, metric=metric)
    elif method == 'kdtree':
        return KDTreeRangeQuery(points)
    elif method == 'balltree':
        return BallTreeRangeQuery(points, metric=metric)
    elif method == 'precomputed':
        return PrecomputedRangeQuery.from_points(
            points, eps, metric=metric, n_jobs=n_jobs, chunk_size=chunk_size
        )
    else:
        raise ConfigurationError(f"不支持的索引方式: {method}")

"""
Pytest配置和共享fixture

提供：
- 一维示例数据（A=0, B=1, C=2, D=10, E=11）
- 计数范围查询（统计每个对象被查询的次数）
- 分离良好的二维点簇
"""

from collections import Counter

import numpy as np
import pytest

from densityscan.clustering.range_query import BruteForceRangeQuery, RangeQuery


class CountingRangeQuery(RangeQuery):
    """包装另一个范围查询并记录每个id的查询次数"""

    def __init__(self, inner):
        self.inner = inner
        self.calls = Counter()

    def neighbors(self, object_id, radius):
        self.calls[object_id] += 1
        return self.inner.neighbors(object_id, radius)

    def validate_radius(self, radius):
        self.inner.validate_radius(radius)


class DictRangeQuery(RangeQuery):
    """直接给出每个对象邻域的范围查询（可以是非对称的）"""

    def __init__(self, neighborhoods):
        self.neighborhoods = neighborhoods

    def neighbors(self, object_id, radius):
        return set(self.neighborhoods[object_id])


def abs_distance(a, b):
    return abs(a - b)


@pytest.fixture
def line_coords():
    """一维坐标：两个相距较远的小组"""
    return {'A': 0.0, 'B': 1.0, 'C': 2.0, 'D': 10.0, 'E': 11.0}


@pytest.fixture
def line_query(line_coords):
    return BruteForceRangeQuery(line_coords, abs_distance)


@pytest.fixture
def counting_query():
    """返回一个把范围查询包装为计数查询的工厂"""
    return CountingRangeQuery


@pytest.fixture
def dict_query():
    return DictRangeQuery


@pytest.fixture
def bridge_coords():
    """
    两个聚类共享一个边界点 2.0

    左侧核心对象 1.0 和右侧核心对象 3.0 都能到达 2.0，而 2.0 本身
    在 eps=1, min_samples=4 下不是核心对象。
    """
    values = [-0.5, 0.0, 0.5, 1.0, 2.0, 3.0, 3.5, 4.0, 4.5]
    return {v: v for v in values}


@pytest.fixture
def blobs():
    """
    三个分离良好的二维点簇加少量离群点

    Returns:
        (points, true_labels)，离群点的标签为 -1
    """
    rng = np.random.RandomState(42)
    centers = np.array([[0.0, 0.0], [10.0, 10.0], [0.0, 10.0]])
    points = []
    labels = []
    for label, center in enumerate(centers):
        points.append(center + rng.randn(60, 2) * 0.3)
        labels.extend([label] * 60)
    outliers = np.array([[5.0, 5.0], [-8.0, -8.0], [15.0, -5.0]])
    points.append(outliers)
    labels.extend([-1] * len(outliers))
    return np.vstack(points), np.array(labels)


@pytest.fixture
def geo_points():
    """北京附近的经纬度点 [latitude, longitude]"""
    rng = np.random.RandomState(7)
    centers = np.array([[39.90, 116.40], [39.95, 116.30]])
    points = [c + rng.randn(40, 2) * 0.001 for c in centers]
    return np.vstack(points)

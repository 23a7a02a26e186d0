"""
并行邻域计算
把点数据划分为块，在多个工作进程中计算每个点的邻域
"""

import multiprocessing as mp
from multiprocessing import Pool
from typing import Dict, List, Tuple

import numpy as np
from sklearn.neighbors import BallTree

from ..clustering.utils import EARTH_RADIUS_M

# 工作进程内的全局状态（由 _init_worker 设置）
_worker_state: Dict[str, object] = {}


def partition_range(n_samples: int, chunk_size: int) -> List[Tuple[int, int]]:
    """
    将下标范围划分为多个块

    Args:
        n_samples: 总样本数
        chunk_size: 每块大小

    Returns:
        数据块列表，每个元素是(start_idx, end_idx)元组
    """
    chunks = []
    for start_idx in range(0, n_samples, chunk_size):
        end_idx = min(start_idx + chunk_size, n_samples)
        chunks.append((start_idx, end_idx))
    return chunks


def resolve_n_jobs(n_jobs: int) -> int:
    """-1表示使用所有CPU核心"""
    return mp.cpu_count() if n_jobs == -1 else max(1, min(n_jobs, mp.cpu_count()))


def _build_tree(points: np.ndarray, metric: str) -> Tuple[BallTree, np.ndarray, float]:
    if metric == 'haversine':
        tree_points = np.radians(points)
        return BallTree(tree_points, metric='haversine'), tree_points, EARTH_RADIUS_M
    return BallTree(points, metric=metric), points, 1.0


def _query_chunk(tree: BallTree, tree_points: np.ndarray, scale: float,
                 radius: float, chunk: Tuple[int, int]):
    start, end = chunk
    indices, distances = tree.query_radius(
        tree_points[start:end], r=radius / scale, return_distance=True
    )
    return start, list(indices), [d * scale for d in distances]


def _init_worker(points: np.ndarray, metric: str, radius: float) -> None:
    tree, tree_points, scale = _build_tree(points, metric)
    _worker_state['tree'] = tree
    _worker_state['tree_points'] = tree_points
    _worker_state['scale'] = scale
    _worker_state['radius'] = radius


def _neighbors_chunk(chunk: Tuple[int, int]):
    """处理一个数据块的邻居查找（工作进程函数）"""
    return _query_chunk(_worker_state['tree'], _worker_state['tree_points'],
                        _worker_state['scale'], _worker_state['radius'], chunk)


def compute_neighborhoods(points: np.ndarray, radius: float, metric: str = 'euclidean',
                          n_jobs: int = 1, chunk_size: int = 1000
                          ) -> Tuple[List[np.ndarray], List[np.ndarray]]:
    """
    计算所有点在给定半径内的邻域

    Args:
        points: 形状为(n_samples, n_features)的点数组
        radius: 邻域半径（haversine下为米）
        metric: 'euclidean' 或 'haversine'
        n_jobs: 工作进程数，-1表示使用所有CPU核心
        chunk_size: 每个任务处理的点数

    Returns:
        (每个点的邻居下标列表, 对应距离列表)
    """
    n_samples = points.shape[0]
    indices: List[np.ndarray] = [None] * n_samples
    distances: List[np.ndarray] = [None] * n_samples
    if n_samples == 0:
        return indices, distances

    chunks = partition_range(n_samples, chunk_size)
    n_workers = min(resolve_n_jobs(n_jobs), len(chunks))

    if n_workers == 1:
        tree, tree_points, scale = _build_tree(points, metric)
        results = [_query_chunk(tree, tree_points, scale, radius, chunk) for chunk in chunks]
    else:
        with Pool(processes=n_workers, initializer=_init_worker,
                  initargs=(points, metric, radius)) as pool:
            results = pool.map(_neighbors_chunk, chunks)

    for start, chunk_indices, chunk_distances in results:
        for offset, (idx, dist) in enumerate(zip(chunk_indices, chunk_distances)):
            indices[start + offset] = idx
            distances[start + offset] = dist

    return indices, distances

"""
并行计算模块
邻域的分块并行预计算
"""

from .neighborhoods import compute_neighborhoods, partition_range, resolve_n_jobs

__all__ = [
    'compute_neighborhoods',
    'partition_range',
    'resolve_n_jobs'
]

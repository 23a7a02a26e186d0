"""
densityscan
基于密度的聚类（DBSCAN）：范围查询抽象、聚类扩展状态机和聚类结果
"""

from .clustering import (
    DBSCANConfig,
    DBSCANSequential,
    DBSCANParallel,
    ClusteringResult,
    PartialClusteringResult,
    RangeQuery,
    ConfigurationError,
    RangeQueryFailure,
    InvariantViolation
)

__version__ = "0.1.0"

__all__ = [
    'DBSCANConfig',
    'DBSCANSequential',
    'DBSCANParallel',
    'ClusteringResult',
    'PartialClusteringResult',
    'RangeQuery',
    'ConfigurationError',
    'RangeQueryFailure',
    'InvariantViolation'
]

"""
聚类算法模块
包含DBSCAN算法的串行和并行实现、范围查询和聚类结果
"""

from .config import DBSCANConfig
from .errors import DBSCANError, ConfigurationError, RangeQueryFailure, InvariantViolation
from .range_query import (
    RangeQuery,
    CallableRangeQuery,
    BruteForceRangeQuery,
    DistanceMatrixRangeQuery,
    KDTreeRangeQuery,
    BallTreeRangeQuery,
    PrecomputedRangeQuery
)
from .result import Cluster, ClusteringResult, PartialClusteringResult, NOISE_LABEL
from .expansion import ClusterExpansion, ExpansionOutcome
from .dbscan_sequential import DBSCANSequential
from .dbscan_parallel import DBSCANParallel
from .utils import compute_distance_matrix, build_range_query

__all__ = [
    'DBSCANConfig',
    'DBSCANError',
    'ConfigurationError',
    'RangeQueryFailure',
    'InvariantViolation',
    'RangeQuery',
    'CallableRangeQuery',
    'BruteForceRangeQuery',
    'DistanceMatrixRangeQuery',
    'KDTreeRangeQuery',
    'BallTreeRangeQuery',
    'PrecomputedRangeQuery',
    'Cluster',
    'ClusteringResult',
    'PartialClusteringResult',
    'NOISE_LABEL',
    'ClusterExpansion',
    'ExpansionOutcome',
    'DBSCANSequential',
    'DBSCANParallel',
    'compute_distance_matrix',
    'build_range_query'
]

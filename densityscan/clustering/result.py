"""
聚类结果数据结构
已提交的聚类列表和唯一的噪声集合，运行结束后不可变
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Hashable, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .errors import InvariantViolation

NOISE_LABEL = -1


@dataclass(frozen=True)
class Cluster:
    """一个聚类（或噪声集合），成员按加入顺序保存"""

    members: Tuple[Hashable, ...]
    is_noise: bool = False
    _member_set: FrozenSet[Hashable] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, '_member_set', frozenset(self.members))

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.members)

    def __contains__(self, object_id) -> bool:
        return object_id in self._member_set

    def as_set(self) -> FrozenSet[Hashable]:
        return self._member_set


class ClusteringResult:
    """
    DBSCAN聚类结果

    clusters 是按提交顺序排列的聚类，noise 是唯一的噪声集合。
    每个输入对象恰好出现在一个聚类或噪声中。
    """

    name = "DBSCAN Clustering"
    short_name = "dbscan-clustering"

    def __init__(self, clusters: Iterable[Iterable[Hashable]],
                 noise: Iterable[Hashable],
                 core_ids: Iterable[Hashable] = (),
                 execution_time: float = 0.0,
                 parameters: Optional[Dict[str, Any]] = None):
        """
        初始化聚类结果

        Args:
            clusters: 已提交的聚类（每个为对象id序列）
            noise: 噪声对象id
            core_ids: 运行中被判定为核心对象的id
            execution_time: 运行耗时（秒）
            parameters: 运行参数（eps、min_samples等）
        """
        self._clusters = tuple(Cluster(tuple(c)) for c in clusters)
        self._noise = Cluster(tuple(noise), is_noise=True)
        self._core_ids = frozenset(core_ids)
        self.execution_time = execution_time
        self.parameters = dict(parameters or {})

    @property
    def clusters(self) -> Tuple[Cluster, ...]:
        return self._clusters

    @property
    def noise(self) -> Cluster:
        return self._noise

    @property
    def core_ids(self) -> FrozenSet[Hashable]:
        return self._core_ids

    @property
    def complete(self) -> bool:
        return True

    @property
    def n_clusters(self) -> int:
        return len(self._clusters)

    @property
    def n_noise(self) -> int:
        return len(self._noise)

    @property
    def cluster_sizes(self) -> List[int]:
        return [len(c) for c in self._clusters]

    def all_clusters(self) -> List[Cluster]:
        """所有顶层聚类，噪声集合排在最后"""
        return list(self._clusters) + [self._noise]

    def label_of(self, object_id) -> int:
        """
        查询对象的聚类标签

        Returns:
            聚类序号（按提交顺序，从0开始），噪声为 -1

        Raises:
            KeyError: 对象不在结果中
        """
        for label, cluster in enumerate(self._clusters):
            if object_id in cluster:
                return label
        if object_id in self._noise:
            return NOISE_LABEL
        raise KeyError(object_id)

    def to_labels(self, ids: Iterable[Hashable]) -> np.ndarray:
        """
        转换为 scikit-learn 风格的标签数组

        Args:
            ids: 对象id序列，决定输出顺序

        Returns:
            int32标签数组，噪声为 -1
        """
        mapping = {}
        for label, cluster in enumerate(self._clusters):
            for object_id in cluster:
                mapping[object_id] = label
        for object_id in self._noise:
            mapping[object_id] = NOISE_LABEL
        return np.array([mapping[i] for i in ids], dtype=np.int32)

    def validate_partition(self, all_ids: Iterable[Hashable]) -> None:
        """
        校验结果是输入集合的划分：并集等于全集且两两不相交

        Raises:
            InvariantViolation: 划分性质被破坏
        """
        expected = set(all_ids)
        seen = set()
        for cluster in self.all_clusters():
            for object_id in cluster:
                if object_id in seen:
                    raise InvariantViolation(f"对象 {object_id!r} 出现在多个聚类中")
                seen.add(object_id)

        missing = expected - seen
        if missing:
            raise InvariantViolation(f"{len(missing)} 个对象未被分类, 例如 {next(iter(missing))!r}")
        extra = seen - expected
        if extra:
            raise InvariantViolation(f"{len(extra)} 个对象不属于输入集合, 例如 {next(iter(extra))!r}")

    def get_cluster_stats(self) -> dict:
        """
        获取聚类统计信息

        Returns:
            包含聚类统计信息的字典
        """
        return {
            'n_clusters': self.n_clusters,
            'n_noise': self.n_noise,
            'n_core_points': len(self._core_ids),
            'execution_time': self.execution_time,
            'cluster_sizes': {label: len(c) for label, c in enumerate(self._clusters)}
        }

    def to_dict(self) -> Dict[str, Any]:
        """转换为可JSON序列化的字典"""
        return {
            'name': self.name,
            'parameters': self.parameters,
            'stats': self.get_cluster_stats(),
            'clusters': [list(c.members) for c in self._clusters],
            'noise': list(self._noise.members)
        }

    def __repr__(self) -> str:
        return (f"ClusteringResult(n_clusters={self.n_clusters}, "
                f"n_noise={self.n_noise}, n_core={len(self._core_ids)})")


class PartialClusteringResult:
    """
    被取消的运行产生的不完整结果

    不是 ClusteringResult：噪声仍是临时的，未处理对象没有分类。
    """

    complete = False

    def __init__(self, clusters: Iterable[Iterable[Hashable]],
                 provisional_noise: Iterable[Hashable],
                 processed: Iterable[Hashable],
                 unprocessed: Iterable[Hashable]):
        self.clusters = tuple(Cluster(tuple(c)) for c in clusters)
        self.provisional_noise = frozenset(provisional_noise)
        self.processed = frozenset(processed)
        self.unprocessed = tuple(unprocessed)

    @property
    def n_clusters(self) -> int:
        return len(self.clusters)

    def __repr__(self) -> str:
        return (f"PartialClusteringResult(n_clusters={self.n_clusters}, "
                f"n_processed={len(self.processed)}, n_unprocessed={len(self.unprocessed)})")

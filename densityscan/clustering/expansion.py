"""
聚类扩展
DBSCAN的核心状态机：已处理集合、噪声集合和当前聚类
"""

import warnings
from collections import deque
from enum import Enum
from typing import AbstractSet, Callable, Hashable, Iterable, List, Optional, Set

from .errors import RangeQueryFailure
from .result import ClusteringResult, PartialClusteringResult

_NO_EXCLUDE = object()


class ExpansionOutcome(Enum):
    """一次 expand 调用的结果"""
    NOISE = "noise"
    CLUSTER = "cluster"
    DISSOLVED = "dissolved"
    CANCELLED = "cancelled"


class ClusterExpansion:
    """
    从种子对象扩展聚类

    状态（整个运行期间，每个对象）: 未处理 -> {噪声, 边界或核心}。
    噪声不是终态：之后被某个核心对象的邻域覆盖时会被重新归入聚类。
    已提交聚类中的对象状态不再改变，边界对象属于第一个到达它的聚类。
    """

    def __init__(self, range_query, eps, min_samples: int, order: str = 'fifo',
                 cancel_check: Optional[Callable[[], bool]] = None,
                 domain: Optional[AbstractSet[Hashable]] = None):
        """
        初始化扩展状态

        Args:
            range_query: 带 neighbors(object_id, radius) 方法的范围查询
            eps: 邻域半径
            min_samples: 核心对象的最小邻域大小（包含自身）
            order: 种子队列出队顺序，'fifo' 或 'lifo'
            cancel_check: 返回True时中止当前扩展
            domain: 参与聚类的对象id集合；范围查询返回的其他id被忽略，
                None表示不过滤
        """
        self.range_query = range_query
        self.eps = eps
        self.min_samples = min_samples
        self.order = order
        self.cancel_check = cancel_check
        self.domain = domain

        self.processed: Set[Hashable] = set()
        self.noise: Set[Hashable] = set()
        self.clusters: List[List[Hashable]] = []
        self.core_ids: Set[Hashable] = set()

        self.n_queries = 0

    def mark_all_noise(self, ids: Iterable[Hashable]) -> None:
        """对象数少于 min_samples 时不可能存在核心对象，全部标记为噪声"""
        for object_id in ids:
            self.processed.add(object_id)
            self.noise.add(object_id)

    def expand(self, seed_id: Hashable) -> ExpansionOutcome:
        """
        对一个未处理的种子对象执行扩展

        Args:
            seed_id: 种子对象id

        Returns:
            本次扩展的结果
        """
        neighbors = self._query(seed_id)

        # 种子不是核心对象
        if len(neighbors) < self.min_samples:
            self.noise.add(seed_id)
            self.processed.add(seed_id)
            return ExpansionOutcome.NOISE

        self.core_ids.add(seed_id)
        new_core: List[Hashable] = [seed_id]
        current_cluster: List[Hashable] = []
        newly_processed: List[Hashable] = []
        denoised: List[Hashable] = []
        seeds = deque()

        # 种子自身已经查询过，不入队
        self._absorb(neighbors, current_cluster, seeds, newly_processed, denoised,
                     exclude=seed_id)

        while seeds:
            if self.cancel_check is not None and self.cancel_check():
                self._rollback(newly_processed, denoised, new_core)
                return ExpansionOutcome.CANCELLED

            o = seeds.popleft() if self.order == 'fifo' else seeds.pop()
            neighborhood = self._query(o)
            if len(neighborhood) >= self.min_samples:
                if o not in self.core_ids:
                    self.core_ids.add(o)
                    new_core.append(o)
                self._absorb(neighborhood, current_cluster, seeds, newly_processed, denoised)

        if len(current_cluster) >= self.min_samples:
            self.clusters.append(current_cluster)
            return ExpansionOutcome.CLUSTER

        # 邻域中的对象大多已属于其他聚类，当前聚类不足 min_samples
        warnings.warn(
            f"从核心对象 {seed_id!r} 扩展得到的聚类只有 {len(current_cluster)} 个对象 "
            f"(< min_samples={self.min_samples}), 全部归为噪声",
            RuntimeWarning
        )
        self.noise.update(current_cluster)
        self.noise.add(seed_id)
        self.processed.add(seed_id)
        return ExpansionOutcome.DISSOLVED

    def _absorb(self, neighborhood, current_cluster: List[Hashable], seeds: deque,
                newly_processed: List[Hashable], denoised: List[Hashable],
                exclude: Hashable = _NO_EXCLUDE) -> None:
        for neighbor in neighborhood:
            if neighbor not in self.processed:
                current_cluster.append(neighbor)
                self.processed.add(neighbor)
                newly_processed.append(neighbor)
                if exclude is _NO_EXCLUDE or neighbor != exclude:
                    seeds.append(neighbor)
            elif neighbor in self.noise:
                # 噪声对象被核心对象覆盖，重新归类为边界对象，不再入队
                current_cluster.append(neighbor)
                self.noise.remove(neighbor)
                denoised.append(neighbor)
            # 其余对象已属于已提交的聚类，保持不变

    def _rollback(self, newly_processed: List[Hashable], denoised: List[Hashable],
                  new_core: List[Hashable]) -> None:
        self.processed.difference_update(newly_processed)
        self.noise.update(denoised)
        self.core_ids.difference_update(new_core)

    def _query(self, object_id: Hashable):
        self.n_queries += 1
        try:
            neighbors = self.range_query.neighbors(object_id, self.eps)
        except RangeQueryFailure:
            raise
        except Exception as e:
            raise RangeQueryFailure(object_id, self.eps) from e
        if self.domain is None:
            return neighbors
        # 只对输入对象的子集聚类时，数据集中的其他对象不计入邻域
        return [n for n in neighbors if n in self.domain]

    def to_result(self, execution_time: float = 0.0, parameters=None) -> ClusteringResult:
        """冻结当前状态为最终结果"""
        return ClusteringResult(
            self.clusters, self._ordered_noise(), core_ids=self.core_ids,
            execution_time=execution_time, parameters=parameters
        )

    def to_partial_result(self, ids: Iterable[Hashable]) -> PartialClusteringResult:
        """运行被取消时的不完整结果"""
        return PartialClusteringResult(
            self.clusters, self.noise, self.processed,
            [i for i in ids if i not in self.processed]
        )

    def _ordered_noise(self) -> List[Hashable]:
        # id不可排序时保持集合顺序
        try:
            return sorted(self.noise)
        except TypeError:
            return list(self.noise)

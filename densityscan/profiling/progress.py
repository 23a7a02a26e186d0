"""
聚类进度报告
在每个对象/聚类判定之后接收 "已处理对象数" 和 "已发现聚类数" 两个计数
"""

import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from tqdm import tqdm


class ProgressObserver:
    """进度观察者基类，子类按需覆盖"""

    def update(self, n_processed: int, n_clusters: int) -> None:
        pass

    def finish(self, n_processed: int, n_clusters: int) -> None:
        pass


class CallbackProgress(ProgressObserver):
    """把普通函数 f(n_processed, n_clusters) 包装成观察者"""

    def __init__(self, callback: Callable[[int, int], None]):
        self.callback = callback

    def update(self, n_processed: int, n_clusters: int) -> None:
        self.callback(n_processed, n_clusters)

    def finish(self, n_processed: int, n_clusters: int) -> None:
        self.callback(n_processed, n_clusters)


@dataclass
class ProgressEvent:
    """一次进度记录"""
    n_processed: int
    n_clusters: int
    timestamp: float
    final: bool = False


class ProgressRecorder(ProgressObserver):
    """记录所有进度事件，便于事后分析"""

    def __init__(self):
        self.events: List[ProgressEvent] = []

    def update(self, n_processed: int, n_clusters: int) -> None:
        self.events.append(ProgressEvent(n_processed, n_clusters, time.time()))

    def finish(self, n_processed: int, n_clusters: int) -> None:
        self.events.append(ProgressEvent(n_processed, n_clusters, time.time(), final=True))

    @property
    def last(self) -> Optional[ProgressEvent]:
        return self.events[-1] if self.events else None


class PrintProgress(ProgressObserver):
    """用tqdm进度条在控制台显示进度"""

    def __init__(self, total: Optional[int] = None, interval_s: float = 1.0,
                 prefix: str = "DBSCAN"):
        """
        初始化进度条

        Args:
            total: 对象总数（未知时只显示计数）
            interval_s: 两次刷新之间的最小间隔（秒）
            prefix: 进度条描述
        """
        self.total = total
        self.interval_s = interval_s
        self.prefix = prefix
        self._bar = tqdm(total=total, desc=prefix, unit="obj", mininterval=interval_s)
        self._last_n = 0

    def update(self, n_processed: int, n_clusters: int) -> None:
        self._bar.set_postfix(clusters=n_clusters, refresh=False)
        self._advance(n_processed)

    def finish(self, n_processed: int, n_clusters: int) -> None:
        self._bar.set_postfix(clusters=n_clusters, refresh=False)
        self._advance(n_processed)
        self._bar.close()

    def _advance(self, n_processed: int) -> None:
        delta = n_processed - self._last_n
        if delta > 0:
            self._bar.update(delta)
            self._last_n = n_processed


ProgressLike = Union[ProgressObserver, Callable[[int, int], None], None]


def as_observer(progress: ProgressLike) -> Optional[ProgressObserver]:
    """
    将进度参数统一为观察者对象

    Args:
        progress: 观察者、普通函数或None

    Returns:
        观察者对象或None
    """
    if progress is None or isinstance(progress, ProgressObserver):
        return progress
    if hasattr(progress, 'update'):
        return progress
    if callable(progress):
        return CallbackProgress(progress)
    raise TypeError(f"不支持的进度报告对象: {progress!r}")

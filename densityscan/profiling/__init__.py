"""
进度报告模块
DBSCAN运行过程中的可选进度观察者
"""

from .progress import (
    ProgressObserver,
    CallbackProgress,
    ProgressRecorder,
    PrintProgress,
    as_observer
)

__all__ = [
    'ProgressObserver',
    'CallbackProgress',
    'ProgressRecorder',
    'PrintProgress',
    'as_observer'
]

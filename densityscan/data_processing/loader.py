"""
点数据加载器
从CSV/NPY文件加载待聚类的点，并保存聚类结果
"""

import json
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..clustering.result import ClusteringResult


def load_points(path: Union[str, Path], columns: Optional[Sequence[str]] = None,
                dropna: bool = True) -> np.ndarray:
    """
    加载点数据

    Args:
        path: .csv 或 .npy 文件路径
        columns: CSV中作为坐标的列名（默认使用所有数值列）
        dropna: 是否丢弃含缺失值的行

    Returns:
        形状为(n_samples, n_features)的float64数组
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"数据文件不存在: {path}")

    if path.suffix == '.npy':
        points = np.load(path)
        if points.ndim == 1:
            points = points.reshape(-1, 1)
        return points.astype(np.float64)

    df = pd.read_csv(path)
    if columns:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise ValueError(f"CSV中缺少列: {missing}")
        df = df[list(columns)]
    else:
        df = df.select_dtypes(include=[np.number])

    if df.shape[1] == 0:
        raise ValueError(f"没有可用的数值列: {path}")

    if dropna:
        df = df.dropna()

    return df.to_numpy(dtype=np.float64)


def save_results(result: ClusteringResult, output_dir: Union[str, Path],
                 labels: Optional[np.ndarray] = None,
                 prefix: str = "dbscan") -> List[Path]:
    """
    保存聚类结果

    Args:
        result: 聚类结果
        output_dir: 输出目录
        labels: 可选的标签数组，保存为CSV
        prefix: 输出文件名前缀

    Returns:
        写出的文件路径列表
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    written = []
    result_file = output_path / f"{prefix}_results.json"
    with open(result_file, 'w') as f:
        json.dump(result.to_dict(), f, indent=2, default=str)
    written.append(result_file)

    if labels is not None:
        labels_file = output_path / f"{prefix}_labels.csv"
        pd.DataFrame({'index': np.arange(len(labels)), 'label': labels}).to_csv(
            labels_file, index=False
        )
        written.append(labels_file)

    return written

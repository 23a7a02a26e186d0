#!/usr/bin/env python3
"""
运行DBSCAN聚类算法
从CSV/NPY文件加载点数据，聚类并保存结果
"""

import sys
from pathlib import Path

# 添加项目根目录到Python路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import argparse
import time
from typing import Dict, Optional

import numpy as np

from densityscan.clustering import DBSCANConfig, DBSCANSequential, DBSCANParallel
from densityscan.clustering.config import SUPPORTED_INDEXES, SUPPORTED_METRICS, SUPPORTED_ORDERS
from densityscan.clustering.errors import DBSCANError
from densityscan.data_processing.loader import load_points, save_results
from densityscan.profiling.progress import PrintProgress


def run_dbscan(points: np.ndarray, config: DBSCANConfig,
               show_progress: bool = False) -> Dict[str, any]:
    """
    运行DBSCAN算法

    Args:
        points: 点数据
        config: 聚类参数
        show_progress: 是否打印进度

    Returns:
        聚类器和结果
    """
    print("\n" + "=" * 60)
    print("运行DBSCAN聚类")
    print("=" * 60)

    print(f"算法参数:")
    print(f"  eps (邻域半径): {config.eps}")
    print(f"  min_samples (最小样本数): {config.min_samples}")
    print(f"  metric (距离度量): {config.metric}")
    print(f"  index (范围查询): {config.index}")
    print(f"  数据点数量: {len(points)}")

    progress = PrintProgress(total=len(points)) if show_progress else None

    if config.n_jobs != 1:
        dbscan = DBSCANParallel.from_config(config, progress=progress)
    else:
        dbscan = DBSCANSequential.from_config(config, progress=progress)

    start_time = time.time()
    dbscan.fit(points)
    total_time = time.time() - start_time

    stats = dbscan.get_cluster_stats()

    print(f"\n聚类结果:")
    print(f"  聚类数量: {stats['n_clusters']}")
    print(f"  核心点数量: {stats['n_core_points']}")
    print(f"  噪声点数量: {stats['n_noise']}")
    print(f"  总点数: {len(points)}")

    if stats['cluster_sizes']:
        print(f"  聚类大小分布:")
        for label, size in list(stats['cluster_sizes'].items())[:10]:  # 显示前10个聚类
            print(f"    聚类 {label}: {size} 个点")
        if len(stats['cluster_sizes']) > 10:
            print(f"    ... 还有 {len(stats['cluster_sizes']) - 10} 个聚类")

    print(f"\n性能统计:")
    print(f"  聚类时间: {stats['execution_time']:.4f} 秒")
    print(f"  总时间: {total_time:.4f} 秒")
    print(f"  范围查询次数: {dbscan.n_queries_}")

    return {
        'dbscan_object': dbscan,
        'result': dbscan.result_,
        'labels': dbscan.labels_,
        'total_time': total_time
    }


def build_config(args: argparse.Namespace) -> DBSCANConfig:
    return DBSCANConfig(
        eps=args.eps,
        min_samples=args.min_samples,
        metric=args.metric,
        index=args.index,
        order=args.order,
        n_jobs=args.n_jobs,
        chunk_size=args.chunk_size,
        check_invariants=args.check_invariants
    ).validate()


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='运行DBSCAN聚类算法')
    parser.add_argument('--data', type=str, required=True,
                        help='点数据路径（.csv 或 .npy）')
    parser.add_argument('--columns', type=str, nargs='+',
                        help='CSV中的坐标列（默认: 所有数值列）')
    parser.add_argument('--eps', type=float, default=0.01,
                        help='DBSCAN邻域半径（默认: 0.01）')
    parser.add_argument('--min-samples', type=int, default=5,
                        help='DBSCAN最小样本数（默认: 5）')
    parser.add_argument('--metric', type=str, default='euclidean',
                        choices=list(SUPPORTED_METRICS),
                        help='距离度量方式（默认: euclidean）')
    parser.add_argument('--index', type=str, default='kdtree',
                        choices=list(SUPPORTED_INDEXES),
                        help='范围查询实现（默认: kdtree）')
    parser.add_argument('--order', type=str, default='fifo',
                        choices=list(SUPPORTED_ORDERS),
                        help='种子队列出队顺序（默认: fifo）')
    parser.add_argument('--n-jobs', type=int, default=1,
                        help='预计算邻域的进程数，-1表示所有CPU核心（默认: 1）')
    parser.add_argument('--chunk-size', type=int, default=1000,
                        help='每个工作进程处理的数据块大小（默认: 1000）')
    parser.add_argument('--check-invariants', action='store_true',
                        help='运行结束后校验结果是输入集合的划分')
    parser.add_argument('--progress', action='store_true',
                        help='打印聚类进度')
    parser.add_argument('--output-dir', type=str, default='./results/dbscan',
                        help='输出目录（默认: ./results/dbscan）')
    return parser.parse_args(argv)


def main(argv: Optional[list] = None) -> int:
    """主函数"""
    args = parse_args(argv)

    try:
        config = build_config(args)

        print("DBSCAN聚类算法")
        print("=" * 60)

        points = load_points(args.data, columns=args.columns)
        print(f"加载了 {len(points)} 个点, 维度 {points.shape[1]}")

        output = run_dbscan(points, config, show_progress=args.progress)

        written = save_results(output['result'], args.output_dir, labels=output['labels'])
        for path in written:
            print(f"结果已保存到: {path}")

    except (DBSCANError, ValueError, FileNotFoundError) as e:
        print(f"错误: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

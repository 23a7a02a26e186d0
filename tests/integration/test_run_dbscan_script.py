"""
数据加载和命令行脚本的集成测试
"""

import importlib.util
import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from densityscan.clustering import DBSCANSequential
from densityscan.data_processing.loader import load_points, save_results

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "run_dbscan.py"


@pytest.fixture
def run_dbscan_module():
    spec = importlib.util.spec_from_file_location("run_dbscan", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def points_csv(tmp_path, blobs):
    points, _ = blobs
    df = pd.DataFrame({'x': points[:, 0], 'y': points[:, 1], 'name': [f"p{i}" for i in range(len(points))]})
    path = tmp_path / "points.csv"
    df.to_csv(path, index=False)
    return path


@pytest.mark.integration
class TestLoader:

    def test_load_numeric_columns(self, points_csv, blobs):
        points, _ = blobs

        loaded = load_points(points_csv)

        assert loaded.shape == points.shape
        assert np.allclose(loaded, points)

    def test_load_selected_columns(self, points_csv):
        loaded = load_points(points_csv, columns=['y'])

        assert loaded.shape[1] == 1

    def test_missing_column(self, points_csv):
        with pytest.raises(ValueError):
            load_points(points_csv, columns=['z'])

    def test_load_npy(self, tmp_path):
        path = tmp_path / "points.npy"
        np.save(path, np.array([0.0, 1.0, 2.0]))

        loaded = load_points(path)

        assert loaded.shape == (3, 1)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_points(tmp_path / "nothing.csv")

    def test_save_results(self, tmp_path, blobs):
        points, _ = blobs
        dbscan = DBSCANSequential(eps=1.0, min_samples=5).fit(points)

        written = save_results(dbscan.result_, tmp_path / "out", labels=dbscan.labels_)

        assert [p.name for p in written] == ["dbscan_results.json", "dbscan_labels.csv"]
        data = json.loads(written[0].read_text())
        assert data['stats']['n_clusters'] == dbscan.result_.n_clusters
        labels = pd.read_csv(written[1])
        assert labels['label'].tolist() == dbscan.labels_.tolist()


@pytest.mark.integration
class TestRunScript:

    def test_main_writes_results(self, run_dbscan_module, points_csv, tmp_path, capsys):
        output_dir = tmp_path / "results"

        code = run_dbscan_module.main([
            '--data', str(points_csv), '--eps', '1.0', '--min-samples', '5',
            '--index', 'balltree', '--check-invariants', '--output-dir', str(output_dir)
        ])

        assert code == 0
        assert (output_dir / "dbscan_results.json").exists()
        assert (output_dir / "dbscan_labels.csv").exists()
        assert "聚类数量: 3" in capsys.readouterr().out

    def test_main_reports_configuration_error(self, run_dbscan_module, points_csv, tmp_path, capsys):
        code = run_dbscan_module.main([
            '--data', str(points_csv), '--min-samples', '0', '--output-dir', str(tmp_path)
        ])

        assert code == 1
        assert "错误" in capsys.readouterr().out

    def test_main_shows_progress_bar(self, run_dbscan_module, points_csv, tmp_path, capsys):
        code = run_dbscan_module.main([
            '--data', str(points_csv), '--eps', '1.0', '--min-samples', '5',
            '--progress', '--output-dir', str(tmp_path / "results")
        ])

        assert code == 0
        err = capsys.readouterr().err
        assert "183/183" in err
        assert "clusters=3" in err

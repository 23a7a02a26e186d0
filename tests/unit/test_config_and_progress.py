"""
配置和进度报告的单元测试
"""

import pytest

from densityscan.clustering import DBSCANConfig
from densityscan.clustering.errors import ConfigurationError
from densityscan.profiling.progress import (
    CallbackProgress,
    PrintProgress,
    ProgressObserver,
    ProgressRecorder,
    as_observer
)


@pytest.mark.unit
class TestDBSCANConfig:

    def test_defaults_are_valid(self):
        config = DBSCANConfig().validate()

        assert config.metric == 'euclidean'
        assert config.index == 'kdtree'
        assert config.order == 'fifo'

    @pytest.mark.parametrize("overrides", [
        {'min_samples': 0},
        {'eps': -1.0},
        {'eps': float('nan')},
        {'eps': 'wide'},
        {'metric': 'cosine'},
        {'index': 'grid'},
        {'order': 'random'},
        {'n_jobs': 0},
        {'n_jobs': -2},
        {'chunk_size': 0},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigurationError):
            DBSCANConfig(**overrides).validate()

    def test_from_dict_ignores_unknown_keys(self):
        config = DBSCANConfig.from_dict({'eps': 0.2, 'min_samples': 3, 'colour': 'red'})

        assert config.eps == 0.2
        assert config.min_samples == 3

    def test_from_dict_validates(self):
        with pytest.raises(ConfigurationError):
            DBSCANConfig.from_dict({'min_samples': -1})

    def test_round_trip(self):
        config = DBSCANConfig(eps=0.3, min_samples=7, index='balltree')

        assert DBSCANConfig.from_dict(config.to_dict()) == config

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            DBSCANConfig(min_samples=0).validate()


@pytest.mark.unit
class TestProgress:

    def test_as_observer(self):
        recorder = ProgressRecorder()

        assert as_observer(None) is None
        assert as_observer(recorder) is recorder
        assert isinstance(as_observer(lambda p, c: None), CallbackProgress)
        with pytest.raises(TypeError):
            as_observer(3)

    def test_base_observer_is_silent(self):
        observer = ProgressObserver()
        observer.update(1, 0)
        observer.finish(1, 0)

    def test_recorder_marks_final_event(self):
        recorder = ProgressRecorder()
        recorder.update(1, 0)
        recorder.finish(2, 1)

        assert [e.final for e in recorder.events] == [False, True]
        assert recorder.last.n_clusters == 1

    def test_print_progress(self, capsys):
        printer = PrintProgress(total=4, interval_s=0.0)
        printer.update(2, 1)
        printer.finish(4, 1)

        err = capsys.readouterr().err
        assert "DBSCAN" in err
        assert "2/4" in err
        assert "4/4" in err
        assert "clusters=1" in err

    def test_print_progress_is_throttled(self, capsys):
        printer = PrintProgress(total=10, interval_s=3600.0)
        printer.update(1, 0)
        printer.update(2, 0)

        err = capsys.readouterr().err
        printer.finish(2, 0)
        assert "0/10" in err
        assert "2/10" not in err

    def test_print_progress_without_total(self, capsys):
        printer = PrintProgress(interval_s=0.0)
        printer.update(3, 0)
        printer.finish(5, 2)

        err = capsys.readouterr().err
        assert "5obj" in err
        assert "clusters=2" in err

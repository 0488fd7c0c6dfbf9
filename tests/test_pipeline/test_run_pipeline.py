import json
import os

import numpy as np
import pandas as pd
import pytest

from core.state_store import CalibrationStateStore
from ensemble.calibration import ConfidenceCalibrator
from pipeline.experiment_tracker import ExperimentTracker
from pipeline.run_pipeline import run_pipeline, REPORT_COLUMNS


class DummyConfig:
    CALIBRATION_NUM_BINS = 10
    MIN_CALIBRATION_SAMPLES = 10
    PERFORMANCE_WINDOW_SIZE = 100


def synthetic_feed():
    rng = np.random.default_rng(42)
    confidences = rng.uniform(0.05, 0.95, 60)
    correct = (rng.uniform(0, 1, 60) < confidences).astype(int)
    rows = [('white', c, a) for c, a in zip(confidences, correct)]
    rows += [('sparse', 0.6, 1), ('sparse', 0.3, 0), ('sparse', 0.8, 1)]
    return pd.DataFrame(rows, columns=['algorithm_id', 'confidence', 'correct'])


def test_run_pipeline_report(tmp_path):
    tracker = ExperimentTracker(base_dir=str(tmp_path / 'experiments'))
    store = CalibrationStateStore(str(tmp_path / 'state.json'))
    calibrator = ConfidenceCalibrator(DummyConfig())
    report = run_pipeline(DummyConfig(), feed=synthetic_feed(), calibrator=calibrator, tracker=tracker, state_store=store)

    assert list(report.columns) == REPORT_COLUMNS
    assert list(report['algorithm_id']) == ['sparse', 'white']
    by_id = report.set_index('algorithm_id')
    assert by_id.loc['white', 'n_samples'] == 60
    assert bool(by_id.loc['white', 'trained'])
    assert not bool(by_id.loc['sparse', 'trained'])
    assert by_id.loc['sparse', 'ece'] == 0.05
    assert by_id.loc['sparse', 'average_accuracy'] == pytest.approx(2 / 3)
    assert 0 <= by_id.loc['white', 'calibrated_mce'] <= 1

    assert calibrator.algorithms() == ['white']
    with open(tmp_path / 'state.json') as f:
        assert list(json.load(f)['algorithms']) == ['white']

    run_dir = tracker.run_dir
    with open(os.path.join(run_dir, 'meta.json')) as f:
        meta = json.load(f)
    assert meta['config']['CALIBRATION_NUM_BINS'] == 10
    assert set(meta['algorithms']) == {'sparse', 'white'}
    assert meta['artifacts'] == ['state.json']
    assert 'end_time' in meta


def test_run_pipeline_without_store(tmp_path):
    tracker = ExperimentTracker(base_dir=str(tmp_path))
    report = run_pipeline(DummyConfig(), feed=synthetic_feed(), tracker=tracker)
    assert len(report) == 2
    assert not os.path.exists(os.path.join(tracker.run_dir, 'state.json'))


def test_report_ece_depends_on_outcomes_only(tmp_path):
    feed = synthetic_feed()
    tracker = ExperimentTracker(base_dir=str(tmp_path))
    report = run_pipeline(DummyConfig(), feed=feed, tracker=tracker)
    assert 'calibrated_ece' not in report.columns
    white = feed[feed['algorithm_id'] == 'white']
    expected = ConfidenceCalibrator(DummyConfig()).calculate_ece(white['correct'].to_numpy())
    assert report.set_index('algorithm_id').loc['white', 'ece'] == pytest.approx(expected)

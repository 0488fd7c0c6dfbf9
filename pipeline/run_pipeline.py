"""
Pipeline Orchestration Module
============================
This module provides the calibration pipeline for the WhiteTiming project:
    - Outcome feed loading
    - Per-algorithm calibrator training
    - Calibration metrics (MCE before and after calibration)
    - Run tracking and calibration state persistence

The main entry point is `run_pipeline`, which coordinates the end-to-end workflow.
"""
import pandas as pd

from core.log_utils import get_logger
from data.loaders import load_outcome_feed
from ensemble.calibration import ConfidenceCalibrator
from ensemble.performance_window import PerformanceWindow
from pipeline.experiment_tracker import ExperimentTracker

REPORT_COLUMNS = [
    'algorithm_id',
    'n_samples',
    'trained',
    'ece',
    'raw_mce',
    'calibrated_mce',
    'average_confidence',
    'average_calibrated_confidence',
    'average_accuracy',
]


def calibrate_algorithm(calibrator, window, algorithm_id, confidences, accuracies):
    """
    Train the calibrator for one algorithm and compare MCE before and after calibration.

    Returns:
        dict: One report row (see REPORT_COLUMNS).
    """
    raw = calibrator.calculate_calibration_metrics(confidences, accuracies)
    calibrator.train_calibrator(algorithm_id, confidences, accuracies)
    for confidence, accuracy in zip(confidences, accuracies):
        window.record(algorithm_id, confidence, accuracy == 1)
    recent = window.recent_performance(algorithm_id)
    calibrated_conf = [calibrator.calibrate_confidence(c, algorithm_id, recent) for c in confidences]
    calibrated = calibrator.calculate_calibration_metrics(calibrated_conf, accuracies)
    return {
        'algorithm_id': algorithm_id,
        'n_samples': int(len(confidences)),
        'trained': calibrator.is_trained(algorithm_id),
        # ECE reads only the order of the outcomes, so calibration cannot change it
        'ece': raw.expected_calibration_error,
        'raw_mce': raw.maximum_calibration_error,
        'calibrated_mce': calibrated.maximum_calibration_error,
        'average_confidence': raw.average_confidence,
        'average_calibrated_confidence': calibrated.average_confidence,
        'average_accuracy': raw.average_accuracy,
    }


def run_pipeline(config, feed=None, calibrator=None, tracker=None, state_store=None):
    """
    Orchestrates calibration over an outcome feed.

    Args:
        config: Configuration object with pipeline parameters.
        feed (pd.DataFrame, optional): Validated outcome feed; loaded from
            config.OUTCOME_FEED_FILE when omitted.
        calibrator (ConfidenceCalibrator, optional): Calibrator to train; a new one if omitted.
        tracker (ExperimentTracker, optional): Run tracker; a new one under config.EXPERIMENTS_DIR if omitted.
        state_store (CalibrationStateStore, optional): When given, the trained state is saved
            and attached to the run as an artifact.

    Returns:
        pd.DataFrame: One row per algorithm, sorted by algorithm id.
    """
    logger = get_logger(__name__)
    if feed is None:
        feed = load_outcome_feed(getattr(config, 'OUTCOME_FEED_FILE', 'data_sets/outcome_feed.csv'))
    if calibrator is None:
        calibrator = ConfidenceCalibrator(config)
    if tracker is None:
        tracker = ExperimentTracker(getattr(config, 'EXPERIMENTS_DIR', 'experiments'))
    window = PerformanceWindow(getattr(config, 'PERFORMANCE_WINDOW_SIZE', 100))
    tracker.start_run({k: getattr(config, k) for k in dir(config) if k.isupper()})
    logger.info(f"[Pipeline] Calibrating {feed['algorithm_id'].nunique()} algorithms from {len(feed)} outcomes...")
    rows = []
    for algorithm_id, group in feed.groupby('algorithm_id', sort=True):
        row = calibrate_algorithm(
            calibrator,
            window,
            algorithm_id,
            group['confidence'].to_numpy(),
            group['correct'].to_numpy(),
        )
        tracker.log_algorithm_metrics(algorithm_id, {k: v for k, v in row.items() if k != 'algorithm_id'})
        logger.info(
            f"[Pipeline] {algorithm_id}: ECE {row['ece']:.4f}, "
            f"MCE {row['raw_mce']:.4f} -> {row['calibrated_mce']:.4f}"
        )
        rows.append(row)
    if state_store is not None:
        state_path = state_store.save(calibrator)
        tracker.log_artifact(state_path)
    tracker.end_run()
    logger.info("[Pipeline] Calibration complete.")
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)

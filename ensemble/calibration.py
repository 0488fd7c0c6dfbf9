"""
Calibration Module
=================
This module provides the multi-stage confidence calibrator used by the WhiteTiming ensemble.
A raw confidence from an upstream predictor is passed through:
    - Temperature scaling (temperature picked from the ECE of recent outcomes)
    - Platt scaling (per-algorithm sigmoid parameters)
    - Isotonic regression (per-algorithm nearest-neighbour lookup of binned accuracy)
Calibration state is kept per algorithm id and only changes through `train_calibrator`
or `load_state`.
"""
import logging
import math
import threading
from dataclasses import dataclass

import numpy as np
from scipy.special import expit

import config as default_config
from core.metrics import expected_calibration_error, maximum_calibration_error, log_odds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlattParameters:
    """Sigmoid parameters: calibrated = 1 / (1 + exp(A * x + B))."""
    A: float
    B: float


@dataclass(frozen=True)
class CalibrationMetrics:
    expected_calibration_error: float
    maximum_calibration_error: float
    average_confidence: float
    average_accuracy: float

    def to_dict(self):
        return {
            'expected_calibration_error': self.expected_calibration_error,
            'maximum_calibration_error': self.maximum_calibration_error,
            'average_confidence': self.average_confidence,
            'average_accuracy': self.average_accuracy,
        }


class ConfidenceCalibrator:
    """
    Per-algorithm confidence calibrator (temperature -> Platt -> isotonic).

    Each algorithm id owns one (PlattParameters, isotonic mapping) pair. Training
    builds a new pair and publishes it under the id's lock, so a concurrent
    `calibrate_confidence` sees either the old pair or the new one, never a mix.
    Reading an untrained id returns the defaults without storing them.
    """
    def __init__(self, config=None):
        """
        Args:
            config: Object exposing the calibration constants (defaults to the config module).
        """
        cfg = config if config is not None else default_config
        self.num_bins = getattr(cfg, 'CALIBRATION_NUM_BINS', 10)
        self.min_samples = getattr(cfg, 'MIN_CALIBRATION_SAMPLES', 10)
        self.default_ece = getattr(cfg, 'DEFAULT_ECE', 0.05)
        self.overconfident_threshold = getattr(cfg, 'OVERCONFIDENT_ECE_THRESHOLD', 0.1)
        self.underconfident_threshold = getattr(cfg, 'UNDERCONFIDENT_ECE_THRESHOLD', 0.02)
        self.overconfident_temperature = getattr(cfg, 'OVERCONFIDENT_TEMPERATURE', 1.5)
        self.underconfident_temperature = getattr(cfg, 'UNDERCONFIDENT_TEMPERATURE', 0.8)
        self.default_temperature = getattr(cfg, 'DEFAULT_TEMPERATURE', 1.0)
        self.default_platt = PlattParameters(
            getattr(cfg, 'DEFAULT_PLATT_A', -1.0),
            getattr(cfg, 'DEFAULT_PLATT_B', 0.0),
        )
        self.epsilon = getattr(cfg, 'LOG_ODDS_EPSILON', 1e-8)
        self.max_isotonic_bins = getattr(cfg, 'MAX_ISOTONIC_BINS', 10)
        self.samples_per_isotonic_bin = getattr(cfg, 'SAMPLES_PER_ISOTONIC_BIN', 3)
        self._state = {}
        self._locks = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, algorithm_id):
        with self._locks_guard:
            lock = self._locks.get(algorithm_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[algorithm_id] = lock
            return lock

    def _read_state(self, algorithm_id):
        with self._lock_for(algorithm_id):
            return self._state.get(algorithm_id, (self.default_platt, {}))

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------
    def calibrate_confidence(self, raw_confidence, algorithm_id, recent_performance):
        """
        Calibrate a raw confidence for one algorithm.

        Args:
            raw_confidence (float): Upstream model confidence in [0, 1].
            algorithm_id (str): Which algorithm's calibration state to use.
            recent_performance: Ordered 0/1 outcomes of the algorithm's latest predictions.
        Returns:
            float: Calibrated confidence.
        """
        platt, mapping = self._read_state(algorithm_id)
        temperature = self.optimal_temperature(recent_performance)
        temp_scaled = raw_confidence / temperature
        platt_scaled = self.apply_platt(temp_scaled, platt)
        calibrated = self.apply_isotonic(platt_scaled, mapping)
        logger.debug(
            f"[Calibrator] {algorithm_id}: raw={raw_confidence:.4f} T={temperature} "
            f"platt={platt_scaled:.4f} calibrated={calibrated:.4f}"
        )
        return calibrated

    def calculate_ece(self, performance):
        return expected_calibration_error(
            performance,
            num_bins=self.num_bins,
            min_samples=self.min_samples,
            default=self.default_ece,
        )

    def optimal_temperature(self, performance):
        """Pick the temperature from the ECE of recent outcomes."""
        ece = self.calculate_ece(performance)
        if ece > self.overconfident_threshold:
            return self.overconfident_temperature
        if ece < self.underconfident_threshold:
            return self.underconfident_temperature
        return self.default_temperature

    @staticmethod
    def apply_platt(value, platt):
        # 1 / (1 + exp(A * x + B)) without overflow for large exponents
        return float(expit(-(platt.A * value + platt.B)))

    @staticmethod
    def apply_isotonic(confidence, mapping):
        """Return the value stored under the key closest to confidence (first key wins ties)."""
        if not mapping:
            return confidence
        best_key = None
        min_distance = math.inf
        for key in mapping:
            distance = abs(key - confidence)
            if distance < min_distance:
                min_distance = distance
                best_key = key
        if best_key is None:
            return confidence
        return mapping[best_key]

    def get_platt_parameters(self, algorithm_id):
        return self._read_state(algorithm_id)[0]

    def get_isotonic_mapping(self, algorithm_id):
        return dict(self._read_state(algorithm_id)[1])

    def is_trained(self, algorithm_id):
        with self._lock_for(algorithm_id):
            return algorithm_id in self._state

    def algorithms(self):
        with self._locks_guard:
            return sorted(self._state)

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------
    def train_calibrator(self, algorithm_id, confidences, accuracies):
        """
        Fit Platt parameters and the isotonic mapping for one algorithm from history.

        Mismatched lengths or fewer than the minimum number of samples leave the
        existing state untouched. Otherwise both pieces of state are replaced.
        """
        if len(confidences) != len(accuracies) or len(confidences) < self.min_samples:
            logger.warning(
                f"[Calibrator] {algorithm_id}: training skipped "
                f"({len(confidences)} confidences, {len(accuracies)} accuracies)"
            )
            return
        confidences = np.asarray(confidences, dtype=np.float64)
        accuracies = np.asarray(accuracies, dtype=np.float64)
        with self._lock_for(algorithm_id):
            platt = self.train_platt_scaling(confidences, accuracies)
            mapping = self.train_isotonic_regression(confidences, accuracies)
            with self._locks_guard:
                self._state[algorithm_id] = (platt, mapping)
        logger.info(
            f"[Calibrator] {algorithm_id}: trained on {len(confidences)} samples "
            f"(A={platt.A}, B={platt.B:.4f}, {len(mapping)} isotonic bins)"
        )

    def train_platt_scaling(self, confidences, accuracies):
        """
        Intercept-only Platt fit: the slope stays at the default A and
        B = mean(log-odds of confidence) - mean(accuracy).
        """
        mean_log_odds = float(np.mean(log_odds(confidences, self.epsilon)))
        mean_accuracy = float(np.mean(accuracies))
        return PlattParameters(self.default_platt.A, mean_log_odds - mean_accuracy)

    def train_isotonic_regression(self, confidences, accuracies):
        """
        Bin samples sorted by confidence into contiguous, equal-sized bins (the last bin
        takes the remainder) and map each bin's mean confidence to its mean accuracy.
        """
        n = len(confidences)
        num_bins = min(self.max_isotonic_bins, n // self.samples_per_isotonic_bin)
        mapping = {}
        if num_bins <= 0:
            return mapping
        order = np.argsort(confidences, kind='stable')
        sorted_conf = confidences[order]
        sorted_acc = accuracies[order]
        bin_size = n // num_bins
        for i in range(num_bins):
            start = i * bin_size
            end = n if i == num_bins - 1 else (i + 1) * bin_size
            if end > start:
                avg_conf = float(np.mean(sorted_conf[start:end]))
                avg_acc = float(np.mean(sorted_acc[start:end]))
                mapping[avg_conf] = avg_acc
        return mapping

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def calculate_calibration_metrics(self, confidences, accuracies):
        """
        Compute ECE, MCE and the mean confidence/accuracy of a set of predictions.

        Note: ECE is computed from the outcome order alone (positional proxy
        confidence) while MCE bins the true confidences, so the two are not
        directly comparable. Kept as-is because downstream consumers rely on
        these numbers.

        Raises:
            ValueError: If the two sequences differ in length.
        """
        if len(confidences) != len(accuracies):
            raise ValueError('Confidences and accuracies arrays must have same length')
        confidences = np.asarray(confidences, dtype=np.float64)
        accuracies = np.asarray(accuracies, dtype=np.float64)
        if confidences.size == 0:
            average_confidence = average_accuracy = float('nan')
        else:
            average_confidence = float(np.mean(confidences))
            average_accuracy = float(np.mean(accuracies))
        return CalibrationMetrics(
            expected_calibration_error=float(self.calculate_ece(accuracies)),
            maximum_calibration_error=float(maximum_calibration_error(confidences, accuracies, self.num_bins)),
            average_confidence=average_confidence,
            average_accuracy=average_accuracy,
        )

    # ------------------------------------------------------------------
    # State export
    # ------------------------------------------------------------------
    def export_state(self):
        """Return all fitted state as a JSON-serializable dict."""
        algorithms = {}
        for algorithm_id in self.algorithms():
            platt, mapping = self._read_state(algorithm_id)
            algorithms[algorithm_id] = {
                'platt': {'A': platt.A, 'B': platt.B},
                'isotonic': [[key, value] for key, value in mapping.items()],
            }
        return {'algorithms': algorithms}

    def load_state(self, state):
        """Replace all fitted state with the contents of an `export_state` dict."""
        loaded = {}
        for algorithm_id, entry in state.get('algorithms', {}).items():
            platt = PlattParameters(float(entry['platt']['A']), float(entry['platt']['B']))
            mapping = {float(key): float(value) for key, value in entry.get('isotonic', [])}
            loaded[algorithm_id] = (platt, mapping)
        with self._locks_guard:
            self._state = loaded
        logger.info(f"[Calibrator] Loaded calibration state for {len(loaded)} algorithms")

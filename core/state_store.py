"""
On-disk store for fitted calibration state (Platt parameters and isotonic mappings).
"""
import json
import logging
import os
import threading

logger = logging.getLogger(__name__)


class CalibrationStateStore:
    def __init__(self, path):
        self.path = path
        self.lock = threading.Lock()

    def save(self, calibrator):
        state = calibrator.export_state()
        with self.lock:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump(state, f, indent=2)
        logger.info(f"[StateStore] Saved calibration state for {len(state['algorithms'])} algorithms to {self.path}")
        return self.path

    def load(self, calibrator):
        """Load saved state into calibrator. Returns False if nothing was saved yet."""
        with self.lock:
            if not os.path.exists(self.path):
                logger.info(f"[StateStore] No calibration state at {self.path}; using defaults")
                return False
            with open(self.path) as f:
                state = json.load(f)
        calibrator.load_state(state)
        return True

    def clear(self):
        with self.lock:
            if os.path.exists(self.path):
                os.remove(self.path)

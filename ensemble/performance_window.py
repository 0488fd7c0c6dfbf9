"""
Rolling per-algorithm record of recent predictions and their outcomes.
Supplies `recent_performance` for calibration and (confidence, accuracy) history for training.
"""
import threading
from collections import deque

import config as default_config


class PerformanceWindow:
    def __init__(self, max_size=None):
        if max_size is None:
            max_size = getattr(default_config, 'PERFORMANCE_WINDOW_SIZE', 100)
        self.max_size = max_size
        self.windows = {}
        self.lock = threading.Lock()

    def record(self, algorithm_id, confidence, was_correct):
        """Append one resolved prediction; the oldest entry is dropped once the window is full."""
        with self.lock:
            window = self.windows.get(algorithm_id)
            if window is None:
                window = deque(maxlen=self.max_size)
                self.windows[algorithm_id] = window
            window.append((float(confidence), 1 if was_correct else 0))

    def recent_performance(self, algorithm_id):
        with self.lock:
            return [outcome for _, outcome in self.windows.get(algorithm_id, ())]

    def history(self, algorithm_id):
        """Return (confidences, accuracies) lists in recording order."""
        with self.lock:
            window = list(self.windows.get(algorithm_id, ()))
        return [c for c, _ in window], [a for _, a in window]

    def algorithms(self):
        with self.lock:
            return sorted(self.windows)

    def clear(self, algorithm_id=None):
        with self.lock:
            if algorithm_id is None:
                self.windows.clear()
            else:
                self.windows.pop(algorithm_id, None)

    def __len__(self):
        with self.lock:
            return sum(len(w) for w in self.windows.values())

"""
Experiment Tracker Module
========================
This module provides the `ExperimentTracker` class for recording calibration runs.
Each run gets its own directory holding a meta.json with the config snapshot,
per-algorithm calibration metrics and copied artifacts (e.g. the saved calibration state).
"""
import os
import json
import datetime
import shutil


class ExperimentTracker:
    def __init__(self, base_dir="experiments"):
        """
        Initialize an ExperimentTracker.

        Args:
            base_dir (str): Base directory for calibration runs.
        """
        self.base_dir = base_dir
        os.makedirs(self.base_dir, exist_ok=True)
        self.run_dir = None
        self.meta = {}

    def start_run(self, config_dict):
        """
        Start a new run and create its directory.

        Args:
            config_dict (dict): Configuration snapshot for the run.
        """
        now = datetime.datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        self.run_dir = os.path.join(self.base_dir, f"run_{now}")
        os.makedirs(self.run_dir, exist_ok=True)
        self.meta = {"start_time": now, "config": config_dict, "algorithms": {}}
        self.save_meta()

    def log_algorithm_metrics(self, algorithm_id, metrics):
        """
        Record calibration metrics for one algorithm.

        Args:
            algorithm_id (str): Algorithm the metrics belong to.
            metrics (dict): Metric name -> value.
        """
        self.meta.setdefault("algorithms", {})[algorithm_id] = metrics
        self.save_meta()

    def log_artifact(self, file_path, artifact_name=None):
        if not self.run_dir:
            raise RuntimeError("Call start_run() first!")
        if not artifact_name:
            artifact_name = os.path.basename(file_path)
        dest = os.path.join(self.run_dir, artifact_name)
        shutil.copy2(file_path, dest)
        self.meta.setdefault("artifacts", []).append(artifact_name)
        self.save_meta()

    def save_meta(self):
        if not self.run_dir:
            return
        meta_path = os.path.join(self.run_dir, "meta.json")
        with open(meta_path, "w") as f:
            json.dump(self.meta, f, indent=2)

    def end_run(self):
        self.meta["end_time"] = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        self.save_meta()

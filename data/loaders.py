"""
data.loaders
------------
Functions for loading the resolved-prediction feed that calibration is trained on.
Functions:
    - load_csv: Load a CSV file into a DataFrame.
    - load_outcome_feed: Load and validate an outcome feed CSV.
    - validate_outcome_feed: Validate and normalize an outcome feed DataFrame.
"""

import os
import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

FEED_COLUMNS = ['algorithm_id', 'confidence', 'correct']


def load_csv(path):
    """
    Load a CSV file into a pandas DataFrame.

    Parameters
    ----------
    path : str
        Path to the CSV file.

    Returns
    -------
    pd.DataFrame
        Loaded DataFrame.
    """
    return pd.read_csv(path)


def validate_outcome_feed(df):
    """
    Check an outcome feed and normalize its dtypes.

    Parameters
    ----------
    df : pd.DataFrame
        Feed with one row per resolved prediction.

    Returns
    -------
    pd.DataFrame
        Columns ['algorithm_id' (str), 'confidence' (float), 'correct' (int 0/1)],
        in the original row order.

    Raises
    ------
    ValueError
        If columns are missing, values are not numeric, or confidences fall outside [0, 1].
    """
    missing = [c for c in FEED_COLUMNS if c not in df.columns]
    if missing:
        logger.error(f"Outcome feed is missing columns: {missing}")
        raise ValueError(f"Outcome feed is missing columns: {missing}")
    feed = df[FEED_COLUMNS].copy()
    feed['algorithm_id'] = feed['algorithm_id'].astype(str)
    feed['confidence'] = pd.to_numeric(feed['confidence'], errors='coerce')
    correct = feed['correct']
    if correct.dtype == bool:
        correct = correct.astype(int)
    elif correct.dtype == object:
        correct = correct.astype(str).str.strip().str.lower().map(
            {'true': 1, 'false': 0, '1': 1, '0': 0}
        )
    feed['correct'] = pd.to_numeric(correct, errors='coerce')
    if feed[['confidence', 'correct']].isna().any().any():
        logger.error("Outcome feed has non-numeric confidence or correctness values")
        raise ValueError("Outcome feed has non-numeric confidence or correctness values")
    out_of_range = (feed['confidence'] < 0) | (feed['confidence'] > 1)
    if out_of_range.any():
        logger.error(f"Outcome feed has {int(out_of_range.sum())} confidences outside [0, 1]")
        raise ValueError("Outcome feed confidences must lie in [0, 1]")
    if not feed['correct'].isin([0, 1]).all():
        logger.error("Outcome feed correctness values must be 0 or 1")
        raise ValueError("Outcome feed correctness values must be 0 or 1")
    feed['confidence'] = feed['confidence'].astype(np.float64)
    feed['correct'] = feed['correct'].astype(int)
    return feed.reset_index(drop=True)


def load_outcome_feed(file_path):
    """
    Load and validate the outcome feed CSV.

    Parameters
    ----------
    file_path : str
        Path to a CSV with columns algorithm_id, confidence, correct.

    Returns
    -------
    pd.DataFrame
        Validated feed (see `validate_outcome_feed`).
    """
    logger.info(f"Loading outcome feed from: {file_path}")
    if not os.path.exists(file_path):
        logger.error(f"Error: The file '{file_path}' was not found.")
        raise FileNotFoundError(file_path)
    feed = validate_outcome_feed(load_csv(file_path))
    logger.info(f"Loaded {len(feed)} outcomes for {feed['algorithm_id'].nunique()} algorithms.")
    return feed

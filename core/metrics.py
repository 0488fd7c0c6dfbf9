"""
Calibration metrics for WhiteTiming confidence scores.
"""
import numpy as np


def bin_bounds(num_bins):
    """Yield (lower, upper, midpoint) for num_bins equal-width bins over [0, 1]."""
    bin_size = 1.0 / num_bins
    for i in range(num_bins):
        lower = i * bin_size
        upper = (i + 1) * bin_size
        yield lower, upper, (lower + upper) / 2


def in_bin(confidences, lower, upper):
    # Right-closed: a confidence of exactly 0 belongs to no bin
    return (confidences > lower) & (confidences <= upper)


def expected_calibration_error(performance, num_bins=10, min_samples=10, default=0.05):
    """
    Expected Calibration Error over an ordered sequence of outcomes.

    The per-sample confidence is not known here, so sample ``idx`` is given the
    positional proxy ``(idx + 1) / n``: the sequence is assumed to be sorted by
    ascending confidence rank. A sample counts as correct when it is non-zero.

    Args:
        performance: Ordered 0/1 outcomes.
        num_bins: Number of equal-width bins.
        min_samples: Below this many samples ``default`` is returned.
        default: Fallback for insufficient data.
    Returns:
        Sample-weighted mean gap between bin accuracy and bin midpoint.
    """
    outcomes = np.asarray(performance, dtype=np.float64)
    n = outcomes.shape[0]
    if n < min_samples:
        return default
    proxy = np.arange(1, n + 1, dtype=np.float64) / n
    correct = outcomes != 0
    total_error = 0.0
    total_samples = 0
    for lower, upper, midpoint in bin_bounds(num_bins):
        mask = in_bin(proxy, lower, upper)
        bin_samples = int(np.count_nonzero(mask))
        if bin_samples > 0:
            bin_accuracy = np.count_nonzero(correct[mask]) / bin_samples
            total_error += bin_samples * abs(bin_accuracy - midpoint)
            total_samples += bin_samples
    return total_error / total_samples if total_samples > 0 else 0.0


def maximum_calibration_error(confidences, accuracies, num_bins=10):
    """
    Largest |bin accuracy - bin midpoint| over the non-empty bins of the true confidences.
    Only an accuracy of exactly 1 counts as correct. Returns 0.0 when no bin has samples.
    """
    confidences = np.asarray(confidences, dtype=np.float64)
    accuracies = np.asarray(accuracies, dtype=np.float64)
    max_error = 0.0
    for lower, upper, midpoint in bin_bounds(num_bins):
        mask = in_bin(confidences, lower, upper)
        bin_samples = int(np.count_nonzero(mask))
        if bin_samples > 0:
            bin_accuracy = np.count_nonzero(accuracies[mask] == 1) / bin_samples
            max_error = max(max_error, abs(bin_accuracy - midpoint))
    return max_error


def log_odds(confidences, epsilon=1e-8):
    """Elementwise log(c / (1 - c + epsilon))."""
    confidences = np.asarray(confidences, dtype=np.float64)
    with np.errstate(divide='ignore'):
        return np.log(confidences / (1 - confidences + epsilon))

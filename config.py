# config.py
# Central configuration for all tunable variables in the WhiteTiming calibration project

# --- Data paths ---
OUTCOME_FEED_FILE = 'data_sets/outcome_feed.csv'
CALIBRATION_STATE_FILE = 'data_sets/calibration_state.json'
EXPERIMENTS_DIR = 'experiments'

# --- Logging ---
LOG_LEVEL = 'INFO'

# --- Calibration error binning ---
# Number of equal-width confidence bins for ECE/MCE
CALIBRATION_NUM_BINS = 10
# Below this many samples ECE falls back to DEFAULT_ECE and training is skipped
MIN_CALIBRATION_SAMPLES = 10
DEFAULT_ECE = 0.05

# --- Temperature scaling ---
# ECE above this means the model is overconfident (soften)
OVERCONFIDENT_ECE_THRESHOLD = 0.1
# ECE below this means the model is underconfident (sharpen)
UNDERCONFIDENT_ECE_THRESHOLD = 0.02
OVERCONFIDENT_TEMPERATURE = 1.5
UNDERCONFIDENT_TEMPERATURE = 0.8
DEFAULT_TEMPERATURE = 1.0

# --- Platt scaling ---
DEFAULT_PLATT_A = -1.0
DEFAULT_PLATT_B = 0.0
# Guards log(c / (1 - c)) against division by zero
LOG_ODDS_EPSILON = 1e-8

# --- Isotonic regression ---
MAX_ISOTONIC_BINS = 10
# num_bins = min(MAX_ISOTONIC_BINS, n_samples // SAMPLES_PER_ISOTONIC_BIN)
SAMPLES_PER_ISOTONIC_BIN = 3

# --- Recent performance window ---
# Observations kept per algorithm (oldest dropped first)
PERFORMANCE_WINDOW_SIZE = 100

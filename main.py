import argparse
import logging
import sys

import config
from core.log_utils import setup_logging
from core.state_store import CalibrationStateStore
from data.loaders import load_outcome_feed
from ensemble.calibration import ConfidenceCalibrator
from pipeline.run_pipeline import run_pipeline


def build_parser():
    parser = argparse.ArgumentParser(description='WhiteTiming confidence calibration entry point.')
    parser.add_argument('--feed', type=str, default=config.OUTCOME_FEED_FILE, help='Outcome feed CSV (algorithm_id, confidence, correct)')
    parser.add_argument('--state', type=str, default=config.CALIBRATION_STATE_FILE, help='Calibration state JSON to load and save')
    parser.add_argument('--log-file', type=str, default=None, help='Log file (default: logs/calibration_TIMESTAMP.log)')
    parser.add_argument('--no-save', action='store_true', help='Do not write the trained calibration state')
    parser.add_argument('--calibrate', type=float, default=None, metavar='RAW', help='Calibrate one raw confidence with the saved state instead of training')
    parser.add_argument('--algorithm', type=str, default=None, help='Algorithm id for --calibrate')
    parser.add_argument('--recent', type=str, default='', help='Comma-separated recent 0/1 outcomes for --calibrate')
    return parser


def parse_outcomes(text):
    return [int(x) for x in text.split(',') if x.strip()]


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_file, level=getattr(config, 'LOG_LEVEL', 'INFO'))
    logger = logging.getLogger(__name__)
    calibrator = ConfidenceCalibrator(config)
    store = CalibrationStateStore(args.state)

    if args.calibrate is not None:
        if not args.algorithm:
            parser.error('--calibrate requires --algorithm')
        store.load(calibrator)
        calibrated = calibrator.calibrate_confidence(args.calibrate, args.algorithm, parse_outcomes(args.recent))
        logger.info(f"[Main] {args.algorithm}: {args.calibrate} -> {calibrated}")
        print(f"{calibrated:.6f}")
        return 0

    store.load(calibrator)
    report = run_pipeline(
        config,
        feed=load_outcome_feed(args.feed),
        calibrator=calibrator,
        state_store=None if args.no_save else store,
    )
    print(report.to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())

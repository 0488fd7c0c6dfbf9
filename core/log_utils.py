"""
Logging utilities for the WhiteTiming calibration project.
"""
import datetime
import logging
import os

LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s'


def default_log_filename():
    timestamp = datetime.datetime.now().strftime('%Y%m%d_%H%M%S')
    log_dir = os.path.join(os.getcwd(), 'logs')
    os.makedirs(log_dir, exist_ok=True)
    return os.path.join(log_dir, f'calibration_{timestamp}.log')


def setup_logging(log_filename=None, level='INFO'):
    """
    Send all logging to a single file, one per execution unless log_filename is given.
    Existing root handlers are removed so repeated calls do not duplicate output.
    Returns the log file path.
    """
    if log_filename is None:
        log_filename = default_log_filename()
    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = logging.FileHandler(log_filename, mode='w', encoding='utf-8')
    file_handler.setFormatter(formatter)
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    return log_filename


def get_logger(name=None):
    return logging.getLogger(name)

import logging
import os
from core.log_utils import setup_logging, get_logger, default_log_filename


def test_setup_logging_writes_to_file(tmp_path):
    log_file = tmp_path / 'test.log'
    path = setup_logging(str(log_file), level='DEBUG')
    logger = get_logger('calibration.test')
    logger.debug('calibrated 0.6 -> 0.64')
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert path == str(log_file)
    assert 'calibrated 0.6 -> 0.64' in log_file.read_text()
    assert logging.getLogger().level == logging.DEBUG


def test_setup_logging_replaces_handlers(tmp_path):
    setup_logging(str(tmp_path / 'a.log'))
    setup_logging(str(tmp_path / 'b.log'))
    file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert isinstance(get_logger(), logging.Logger)


def test_default_log_filename_under_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = default_log_filename()
    assert os.path.realpath(os.path.dirname(path)) == os.path.realpath(tmp_path / 'logs')
    assert os.path.isdir(tmp_path / 'logs')

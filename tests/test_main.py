import os

import numpy as np
import pandas as pd

import main


def write_feed(path):
    rng = np.random.default_rng(3)
    confidences = rng.uniform(0.1, 0.9, 40)
    correct = (rng.uniform(0, 1, 40) < confidences).astype(int)
    pd.DataFrame({'algorithm_id': 'white', 'confidence': confidences, 'correct': correct}).to_csv(path, index=False)


def test_main_trains_and_calibrates(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    feed = tmp_path / 'feed.csv'
    state = tmp_path / 'state.json'
    write_feed(feed)
    args = ['--feed', str(feed), '--state', str(state), '--log-file', str(tmp_path / 'run.log')]
    assert main.main(args) == 0
    assert state.exists()
    assert 'white' in capsys.readouterr().out
    assert os.path.isdir(tmp_path / 'experiments')

    assert main.main(args + ['--calibrate', '0.7', '--algorithm', 'white', '--recent', '1,0,1']) == 0
    value = float(capsys.readouterr().out.strip())
    assert 0 <= value <= 1


def test_main_no_save(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    feed = tmp_path / 'feed.csv'
    write_feed(feed)
    state = tmp_path / 'state.json'
    assert main.main(['--feed', str(feed), '--state', str(state), '--log-file', str(tmp_path / 'run.log'), '--no-save']) == 0
    assert not state.exists()


def test_parse_outcomes():
    assert main.parse_outcomes('1, 0,1,') == [1, 0, 1]
    assert main.parse_outcomes('') == []

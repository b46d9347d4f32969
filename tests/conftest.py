import sys
from pathlib import Path

# Ensure repository root is on sys.path so tests can import top-level modules
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

import pytest

PREAMBLE = [
    ['2Q Marathon Program'],
    [],
    ['Runner', 'Sam'],
    ['Race', 'City Marathon', '', ''],
    [],
    ['Peak mileage', '80'],
    [],
    ['Legend: Ez = easy, Mp = marathon pace, Thr = threshold'],
    [],
]

STANDARD_HEADER = ['', '', '', 'Weeks until race', 'Fraction of peak', 'Q1', 'Q1 notes', 'Q2',
                   'Q2 notes', 'Weekly easy', 'Actual', 'Difference', 'Notes']

SHIFTED_HEADER = ['', '', '', 'Weeks until race', 'Fraction of peak', 'Q1', 'Q1 notes', '',
                  'Q2', 'Q2 notes', '', 'Weekly easy', 'Actual', 'Difference', 'Notes']


def standard_row(weeks, fraction, q1, q1_notes, q2, q2_notes, easy, actual='', diff='', notes=''):
    return ['', '', '', weeks, fraction, q1, q1_notes, q2, q2_notes, easy, actual, diff, notes]


def shifted_row(weeks, fraction, q1, q1_notes, q2, q2_notes, easy, actual='', diff='', notes=''):
    return ['', '', '', weeks, fraction, q1, q1_notes, ' for Q1', q2, q2_notes, ' for Q2',
            easy, actual, diff, notes]


def _build_grid(row_factory, header):
    return PREAMBLE + [header] + [
        row_factory('18', '0.60', '3 x 2k', '', '13 Ez', '', '30'),
        row_factory('17', '0.65', '400m + 3k', 'felt good', '10 Mp', '', '32', '48.5', '3.1', 'Tired legs'),
        row_factory('16', '0.80', '6 x (1k @ Thr)', '', 'Rest', '', '35'),
        row_factory('', '', '', '', '', '', ''),
        row_factory('15', '0.85', 'Leftover row', '', '', '', '40'),
    ]


@pytest.fixture
def standard_grid():
    return _build_grid(standard_row, STANDARD_HEADER)


@pytest.fixture
def shifted_grid():
    return _build_grid(shifted_row, SHIFTED_HEADER)


@pytest.fixture
def tmp_config(tmp_path, monkeypatch):
    from config import Config

    config_dir = tmp_path / 'config'
    monkeypatch.setattr(Config, 'CONFIG_DIR', config_dir)
    monkeypatch.setattr(Config, 'CONFIG_FILE', config_dir / 'config.json')
    return Config()

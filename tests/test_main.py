import os, sys
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from unittest.mock import MagicMock

import numpy as np

from config import Config
from main import main, parse_args, run
from utils import U


def test_config_defaults():
    cfg = Config()
    assert cfg.delays() == [10, 20, 30]
    assert all(type(d) is int for d in cfg.delays())
    assert cfg.SEED is None
    assert cfg.THREAD_SAFE is False


def test_utils_helpers():
    assert U.delay_prefix(0) == b"0-"
    assert U.delay_prefix(np.int64(250)) == b"250-"
    assert U.ms_to_s(250) == 0.25
    assert U.grown_capacity(5) == 10
    rng = MagicMock()
    rng.randint.return_value = 1
    assert U.pick_delay(rng, (4, 9)) == 9


def test_parse_args_overrides():
    cfg = parse_args(["--delays", "1", "2", "--message", "hi", "--reads", "3",
                      "--seed", "7", "--thread-safe", "--log-level", "debug"])
    assert cfg.delays() == [1, 2]
    assert cfg.MESSAGE == "hi"
    assert cfg.READS == 3
    assert cfg.SEED == 7
    assert cfg.THREAD_SAFE is True
    assert cfg.LOG_LEVEL == "DEBUG"


def test_main_prints_reads_then_buffer(capsys):
    assert main(["--delays", "5", "--message", "AB", "--reads", "2", "--seed", "1"]) == 0
    out = capsys.readouterr().out
    lines = out.splitlines()
    assert lines[0].startswith("read 0: 5-AB (4 bytes, EOF)")
    assert lines[1].startswith("read 1: 5-AB")
    assert out.endswith("AB\n")


def test_run_reports_empty_delay_set(capsys):
    cfg = Config(DELAYS_MS=np.array([], dtype=int))
    assert run(cfg) == 1
    assert "read" not in capsys.readouterr().out

import time
from unittest.mock import MagicMock, patch
import pytest
from inkflow.profiler import Profiler, get_profiler


@pytest.fixture
def profiler():
    """Returns a new Profiler instance for each test."""
    with patch("inkflow.profiler._profiler", None):
        yield get_profiler()


def test_get_profiler_singleton():
    profiler1 = get_profiler()
    profiler2 = get_profiler()
    assert profiler1 is profiler2


def test_profiler_record(profiler):
    with profiler.record("relax_a"):
        time.sleep(0.01)

    timings = profiler.get_timings()
    assert "relax_a" in timings
    assert timings["relax_a"] > 0.0
    assert len(profiler.history("relax_a")) == 1


def test_profiler_records_even_when_stage_raises(profiler):
    with pytest.raises(RuntimeError):
        with profiler.record("ink"):
            raise RuntimeError("boom")
    assert "ink" in profiler.get_timings()


def test_profiler_get_timings(profiler):
    with profiler.record("op1"):
        time.sleep(0.01)
    with profiler.record("op2"):
        time.sleep(0.03)

    timings = profiler.get_timings()
    assert timings["op1"] < timings["op2"]


def test_profiler_ema(profiler):
    profiler._add("frame", 1.0)
    profiler._add("frame", 0.0)
    assert profiler.get_timings()["frame"] == pytest.approx(0.9)


def test_profiler_reset(profiler):
    with profiler.record("composite"):
        pass
    profiler.reset()
    assert profiler.get_timings() == {}
    assert profiler.history("composite") == []


@patch("inkflow.profiler.get_logger")
def test_profiler_log_stats(mock_get_logger):
    mock_logger = MagicMock()
    mock_get_logger.return_value = mock_logger
    profiler = Profiler()

    with profiler.record("log_op"):
        time.sleep(0.01)

    profiler.log_stats()

    mock_logger.info.assert_called_once()
    call_args = mock_logger.info.call_args[0][0]
    assert "log_op" in call_args
    assert "ms" in call_args


@patch("inkflow.profiler.get_logger")
def test_profiler_check_budget(mock_get_logger):
    mock_logger = MagicMock()
    mock_get_logger.return_value = mock_logger
    profiler = Profiler()

    assert profiler.check_budget("frame", 16.7) is False  # nothing recorded yet
    profiler._add("frame", 0.005)
    assert profiler.check_budget("frame", 16.7) is False
    mock_logger.warning.assert_not_called()

    profiler.reset()
    profiler._add("frame", 0.050)
    assert profiler.check_budget("frame", 16.7) is True
    mock_logger.warning.assert_called_once()
    assert "frame" in mock_logger.warning.call_args[0][0]

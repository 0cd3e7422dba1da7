"""Tests for the threshold monitor."""
import threading
import pytest
from datetime import timedelta
from gateway import GatewayError, SensorGatewayBase
from monitor_state import MonitorState
from threshold_monitor import ThresholdMonitor


class MockSensor(SensorGatewayBase):
    """Sensor returning queued readings; an exception in the queue is raised."""

    def __init__(self, readings=None):
        self.readings = list(readings or [])
        self.call_count = 0

    def read_temperature(self):
        self.call_count += 1
        reading = self.readings.pop(0)
        if isinstance(reading, Exception):
            raise reading
        return reading


def make_monitor(readings, exceeded=False, threshold=55.0):
    state = MonitorState(exceeded=exceeded)
    monitor = ThresholdMonitor(MockSensor(readings), state, threshold, timedelta(minutes=5))
    return monitor, state


def test_temperature_below_threshold():
    monitor, state = make_monitor([25.0])
    assert monitor.poll() == 25.0
    assert state.exceeded is False


def test_temperature_above_threshold():
    monitor, state = make_monitor([60.0])
    monitor.poll()
    assert state.exceeded is True


def test_exceeded_is_sticky():
    monitor, state = make_monitor([60.0, 40.0, 30.0])
    for _ in range(3):
        monitor.poll()
    assert state.exceeded is True


def test_threshold_itself_does_not_count():
    monitor, state = make_monitor([55.0])
    monitor.poll()
    assert state.exceeded is False


@pytest.mark.parametrize("prior", [False, True])
def test_ok_reading_leaves_flag_unchanged(prior):
    monitor, state = make_monitor([20.0], exceeded=prior)
    monitor.poll()
    assert state.exceeded is prior


@pytest.mark.parametrize("prior", [False, True])
def test_hot_reading_sets_flag(prior):
    monitor, state = make_monitor([80.0], exceeded=prior)
    monitor.poll()
    assert state.exceeded is True


@pytest.mark.parametrize("prior", [False, True])
def test_sensor_failure_leaves_flag_unchanged(prior):
    monitor, state = make_monitor([GatewayError("HTTP 500")], exceeded=prior)
    assert monitor.poll() is None
    assert state.exceeded is prior


def test_warning_logged_when_exceeded(caplog):
    monitor, _ = make_monitor([61.0])
    with caplog.at_level("WARNING"):
        monitor.poll()
    assert "exceeded" in caplog.text


def test_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        ThresholdMonitor(MockSensor(), MonitorState(), 55.0, timedelta(0))


def test_run_polls_until_stopped():
    stop_event = threading.Event()
    state = MonitorState()

    class StoppingSensor(SensorGatewayBase):
        def __init__(self):
            self.call_count = 0

        def read_temperature(self):
            self.call_count += 1
            if self.call_count == 3:
                stop_event.set()
            return 60.0 if self.call_count == 1 else 20.0

    sensor = StoppingSensor()
    monitor = ThresholdMonitor(sensor, state, 55.0, timedelta(milliseconds=10), stop_event)

    thread = threading.Thread(target=monitor.run)
    thread.start()
    thread.join(timeout=5)

    assert not thread.is_alive()
    assert sensor.call_count == 3
    assert state.exceeded is True


def test_run_survives_unexpected_errors():
    stop_event = threading.Event()

    class BrokenSensor(SensorGatewayBase):
        def __init__(self):
            self.call_count = 0

        def read_temperature(self):
            self.call_count += 1
            if self.call_count == 2:
                stop_event.set()
            raise RuntimeError("boom")

    sensor = BrokenSensor()
    monitor = ThresholdMonitor(sensor, MonitorState(), 55.0, timedelta(milliseconds=10), stop_event)
    monitor.run()

    assert sensor.call_count == 2

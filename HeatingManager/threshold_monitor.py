"""Periodic temperature polling with a sticky threshold flag."""
import logging
import threading
from datetime import timedelta
from typing import Optional

from gateway import GatewayError, SensorGatewayBase
from monitor_state import MonitorState


class ThresholdMonitor:
    """
    Polls the sensor on a fixed interval and records threshold excursions.

    The flag is only ever set here, never cleared: a single reading above the
    threshold blocks that week's heating cycle even if the water cools down
    again, and a failed read leaves the flag as it was.
    """

    def __init__(
        self,
        sensor: SensorGatewayBase,
        state: MonitorState,
        threshold: float,
        interval: timedelta,
        stop_event: Optional[threading.Event] = None
    ):
        """
        Initialize the monitor.

        Args:
            sensor: Gateway used to read the temperature
            state: Shared flag, also read by the weekly scheduler
            threshold: Temperature in °C; readings strictly above it count
            interval: Time between polls
            stop_event: Set to end run(); a private event is used if omitted
        """
        if interval <= timedelta(0):
            raise ValueError("Poll interval must be positive")
        self.sensor = sensor
        self.state = state
        self.threshold = threshold
        self.interval = interval
        self.stop_event = stop_event or threading.Event()

    def poll(self) -> Optional[float]:
        """
        Run a single poll.

        Returns:
            The temperature read, or None if the sensor could not be read
        """
        try:
            temperature = self.sensor.read_temperature()
        except GatewayError as e:
            logging.error(f"Failed to get temperature: {e}")
            return None

        if temperature > self.threshold:
            self.state.mark_exceeded()
            logging.warning(
                f"Temperature {temperature:.1f}°C has exceeded {self.threshold:.1f}°C! "
                "Legionella heating will be rescheduled."
            )
        elif self.state.exceeded:
            logging.info(
                f"Temperature is OK ({temperature:.1f}°C), "
                "threshold already exceeded this week"
            )
        else:
            logging.info(f"Temperature is OK. Actual temperature: {temperature:.1f}°C")
        return temperature

    def run(self) -> None:
        """Poll until the stop event is set. The first poll runs one interval after start."""
        seconds = self.interval.total_seconds()
        logging.info(f"Temperature monitoring started (every {seconds:.0f}s, threshold {self.threshold:.1f}°C)")
        while not self.stop_event.wait(seconds):
            try:
                self.poll()
            except Exception as exc:
                logging.exception("Unexpected error while polling temperature: %s", exc)
        logging.info("Temperature monitoring stopped")

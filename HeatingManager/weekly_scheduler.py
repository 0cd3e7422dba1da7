"""Weekly legionella heating cycle driven by a persisted checkpoint."""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from checkpoint_store import CheckpointError, CheckpointMissingError, CheckpointStore
from gateway import ActuatorGatewayBase, GatewayError
from monitor_state import MonitorState


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CycleAction(Enum):
    TRIGGERED = "triggered"
    TRIGGER_FAILED = "trigger_failed"
    SKIPPED = "skipped"


@dataclass
class CycleOutcome:
    """What a single weekly cycle did."""
    action: CycleAction
    exceeded: bool  # flag value consumed at the start of the cycle
    checkpoint: Optional[datetime]  # None if the checkpoint could not be saved


class WeeklyScheduler:
    """
    Runs the heating cycle once per weekly interval.

    The wait before each cycle is always derived from the last checkpoint on
    disk rather than from a repeating timer, so the cadence survives restarts
    and any number of cycles missed while offline collapse into a single
    catch-up run.
    """

    def __init__(
        self,
        actuator: ActuatorGatewayBase,
        state: MonitorState,
        store: CheckpointStore,
        interval: timedelta,
        stop_event: Optional[threading.Event] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Initialize the scheduler.

        Args:
            actuator: Gateway that switches the heating on
            state: Shared flag written by the temperature monitor
            store: Where the time of the last completed cycle is kept
            interval: Time between cycles (nominally 168 hours)
            stop_event: Set to end run(); a private event is used if omitted
            clock: Returns the current timezone-aware time
        """
        if interval <= timedelta(0):
            raise ValueError("Weekly interval must be positive")
        self.actuator = actuator
        self.state = state
        self.store = store
        self.interval = interval
        self.stop_event = stop_event or threading.Event()
        self.clock = clock

    def next_delay(self, now: Optional[datetime] = None) -> timedelta:
        """
        Time left until the next cycle is due.

        Returns zero when there is no usable checkpoint or the cycle is
        already overdue.
        """
        now = now or self.clock()
        try:
            last_check = self.store.load()
        except CheckpointMissingError:
            logging.info("No previous heating cycle recorded, running now")
            return timedelta(0)
        except CheckpointError as e:
            logging.warning(f"Ignoring unreadable checkpoint, running now: {e}")
            return timedelta(0)

        if last_check > now:
            logging.warning(f"Last heating cycle {last_check.isoformat()} lies in the future, check the system clock")

        try:
            next_due = last_check + self.interval
        except OverflowError:
            logging.warning(f"Last heating cycle {last_check.isoformat()} is out of range, waiting one interval")
            return self.interval
        if now >= next_due:
            return timedelta(0)
        return next_due - now

    def run_cycle(self) -> CycleOutcome:
        """Decide on and record one weekly cycle."""
        exceeded = self.state.consume()
        if exceeded:
            action = CycleAction.SKIPPED
            logging.info("Temperature threshold was exceeded this week, heating skipped")
        else:
            try:
                self.actuator.activate()
                action = CycleAction.TRIGGERED
                logging.info("Heating turned on")
            except GatewayError as e:
                action = CycleAction.TRIGGER_FAILED
                logging.error(f"Failed to turn on heating: {e}")

        checkpoint: Optional[datetime] = self.clock()
        try:
            self.store.save(checkpoint)
        except CheckpointError as e:
            logging.error(f"Failed to save last check time: {e}")
            checkpoint = None

        return CycleOutcome(action=action, exceeded=exceeded, checkpoint=checkpoint)

    def run(self) -> None:
        """Run cycles until the stop event is set."""
        logging.info(f"Weekly heating check started (every {self.interval})")
        unsaved = False
        while not self.stop_event.is_set():
            try:
                if unsaved:
                    # the checkpoint on disk is stale, it would make the cycle due again at once
                    delay = self.interval
                else:
                    delay = self.next_delay()
                if delay > timedelta(0):
                    logging.info(f"Next heating check at {(self.clock() + delay).isoformat(timespec='seconds')}")
            except Exception as exc:
                logging.exception("Unexpected error computing the next heating check: %s", exc)
                delay = self.interval
            seconds = delay.total_seconds()
            if self.stop_event.wait(min(seconds, threading.TIMEOUT_MAX)):
                break
            if seconds > threading.TIMEOUT_MAX:
                continue
            try:
                outcome = self.run_cycle()
                logging.debug(f"Heating cycle finished: {outcome}")
                unsaved = outcome.checkpoint is None
            except Exception as exc:
                logging.exception("Unexpected error during heating cycle: %s", exc)
                unsaved = True
        logging.info("Weekly heating check stopped")

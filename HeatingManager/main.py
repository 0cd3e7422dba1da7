"""Legionella heating manager daemon for Shelly devices."""
import argparse
import logging
import os
import signal
import sys
import threading
from typing import List, Optional, Tuple

from checkpoint_store import CheckpointStore
from heating_config import HeatingConfig, load_config
from monitor_state import MonitorState
from shelly_gateway import ShellySwitch, ShellyTemperatureSensor
from threshold_monitor import ThresholdMonitor
from weekly_scheduler import WeeklyScheduler

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "heating-manager.log")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Legionella heating manager")
    parser.add_argument("--config", default=None, help="Path to config.json (default: $HEATING_CONFIG or config.json)")
    parser.add_argument("--last-check-file", default=None, help="Overrides lastCheckFile from the config")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def build_workers(
    config: HeatingConfig,
    stop_event: threading.Event,
    args: argparse.Namespace
) -> Tuple[ThresholdMonitor, WeeklyScheduler]:
    """Wire the gateways and one shared state into the two loops."""
    timeout = args.timeout if args.timeout is not None else config.request_timeout
    last_check_file = args.last_check_file or config.last_check_file
    state = MonitorState()

    monitor = ThresholdMonitor(
        sensor=ShellyTemperatureSensor(config.sensor_url, timeout=timeout),
        state=state,
        threshold=config.temperature_threshold,
        interval=config.check_interval,
        stop_event=stop_event,
    )
    scheduler = WeeklyScheduler(
        actuator=ShellySwitch(config.actuator_url, timeout=timeout),
        state=state,
        store=CheckpointStore(last_check_file),
        interval=config.weekly_interval,
        stop_event=stop_event,
    )
    logging.info("Workers ready (checkpoint=%s timeout=%ss)", last_check_file, timeout)

    return monitor, scheduler


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    config = load_config(args.config)

    stop_event = threading.Event()

    def signal_handler(signum, frame):
        logging.info("Received signal %s, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    monitor, scheduler = build_workers(config, stop_event, args)
    workers = [
        threading.Thread(target=monitor.run, name="threshold-monitor", daemon=True),
        threading.Thread(target=scheduler.run, name="weekly-scheduler", daemon=True),
    ]
    for worker in workers:
        worker.start()

    # wait() with a timeout keeps the main thread responsive to signals
    while not stop_event.wait(1.0):
        pass

    for worker in workers:
        # a hung HTTP request may outlive this; the threads are daemons
        worker.join(timeout=5.0)
    logging.info("Heating manager stopped")


if __name__ == "__main__":
    main()

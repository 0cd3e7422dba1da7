"""One-shot diagnostic for the sensor, actuator and checkpoint."""
import argparse
import logging
import sys
from typing import List, Optional

from checkpoint_store import CheckpointError, CheckpointStore
from gateway import GatewayError
from heating_config import load_config
from monitor_state import MonitorState
from shelly_gateway import ShellySwitch, ShellyTemperatureSensor
from weekly_scheduler import WeeklyScheduler, utc_now


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Diagnostic for the legionella heating manager")
    parser.add_argument("--config", default=None)
    parser.add_argument("--trigger", action="store_true", help="Also switch the heating on")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    config = load_config(args.config)
    failed = False

    sensor = ShellyTemperatureSensor(config.sensor_url, timeout=config.request_timeout)
    try:
        temperature = sensor.read_temperature()
        verdict = "EXCEEDED" if temperature > config.temperature_threshold else "ok"
        print(f"Temperature:   {temperature:.1f}°C (threshold {config.temperature_threshold:.1f}°C, {verdict})")
    except GatewayError as e:
        print(f"Temperature:   ERROR {e}")
        failed = True

    store = CheckpointStore(config.last_check_file)
    try:
        print(f"Last check:    {store.load().isoformat()}")
    except CheckpointError as e:
        print(f"Last check:    none ({e})")

    actuator = ShellySwitch(config.actuator_url, timeout=config.request_timeout)
    scheduler = WeeklyScheduler(actuator, MonitorState(), store, config.weekly_interval)
    now = utc_now()
    delay = scheduler.next_delay(now)
    print(f"Next check:    {(now + delay).isoformat(timespec='seconds')} (in {delay})")

    if args.trigger:
        try:
            actuator.activate()
            print("Heating:       turned on")
        except GatewayError as e:
            print(f"Heating:       ERROR {e}")
            failed = True

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())

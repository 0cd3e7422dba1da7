"""Shelly HTTP gateways for the temperature add-on and the heating relay."""
import json
import logging
import math
from typing import Any

import requests

from gateway import ActuatorGatewayBase, GatewayError, SensorGatewayBase


def parse_temperature(body: str) -> float:
    """
    Extract a Celsius temperature from a sensor response body.

    Accepts a bare number ("25", "25.5") or a JSON object as returned by the
    Shelly temperature add-on ({"id": 100, "tC": 25.5, "tF": 77.9}). A
    "temperature" field holding a number or a nested {"tC": ...} object is
    accepted as well.

    Raises:
        GatewayError: If the body does not contain a usable temperature
    """
    text = body.strip()
    if not text:
        raise GatewayError("Empty temperature response")

    try:
        payload: Any = json.loads(text)
    except ValueError:
        try:
            payload = float(text)
        except ValueError:
            raise GatewayError(f"Unparseable temperature response: {text[:100]!r}")

    if isinstance(payload, dict):
        if "tC" in payload:
            payload = payload["tC"]
        elif "temperature" in payload:
            payload = payload["temperature"]
            if isinstance(payload, dict):
                payload = payload.get("tC")
        else:
            raise GatewayError(f"Response missing 'tC' field: {text[:100]!r}")

    # bool is an int subclass
    if isinstance(payload, bool) or not isinstance(payload, (int, float)):
        raise GatewayError(f"Temperature is not a number: {payload!r}")

    temperature = float(payload)
    if not math.isfinite(temperature):
        raise GatewayError(f"Temperature is not finite: {temperature}")
    return temperature


class ShellyTemperatureSensor(SensorGatewayBase):
    """
    Sensor gateway reading a Shelly temperature add-on over HTTP.

    A single GET per call, no retries: a failed read is reported to the
    caller, which skips that poll.
    """

    def __init__(self, url: str, timeout: float = 10):
        """
        Initialize the sensor gateway.

        Args:
            url: Full URL of the temperature endpoint
            timeout: HTTP request timeout in seconds
        """
        self.url = url
        self.timeout = timeout

    def read_temperature(self) -> float:
        try:
            logging.debug(f"Requesting temperature: {self.url}")
            response = requests.get(self.url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise GatewayError(f"Network error: {e}") from e

        if response.status_code != 200:
            raise GatewayError(f"Temperature request failed: HTTP {response.status_code}")

        temperature = parse_temperature(response.text)
        logging.debug(f"Sensor reported {temperature:.1f}°C")
        return temperature


class ShellySwitch(ActuatorGatewayBase):
    """Actuator gateway switching a Shelly relay on with a single GET."""

    def __init__(self, url: str, timeout: float = 10):
        """
        Initialize the actuator gateway.

        Args:
            url: Full URL that turns the heating relay on
            timeout: HTTP request timeout in seconds
        """
        self.url = url
        self.timeout = timeout

    def activate(self) -> None:
        try:
            logging.debug(f"Requesting heating activation: {self.url}")
            response = requests.get(self.url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise GatewayError(f"Network error: {e}") from e

        if response.status_code != 200:
            raise GatewayError(
                f"Heating activation failed: HTTP {response.status_code}: {response.text[:200]}"
            )

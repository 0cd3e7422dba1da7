"""Tests for the Shelly sensor and actuator gateways."""
import pytest
import requests
from unittest.mock import Mock, patch
from shelly_gateway import ShellySwitch, ShellyTemperatureSensor, parse_temperature
from gateway import GatewayError


def make_response(status_code=200, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


@pytest.fixture
def sensor():
    return ShellyTemperatureSensor("http://shelly.local/rpc/Temperature.GetStatus?id=100", timeout=5)


@pytest.fixture
def switch():
    return ShellySwitch("http://shelly.local/relay/0?turn=on", timeout=5)


def test_parse_bare_number():
    assert parse_temperature("25") == 25.0
    assert parse_temperature(" 25.5\n") == 25.5
    assert parse_temperature("-3") == -3.0


def test_parse_shelly_addon_json():
    assert parse_temperature('{"id": 100, "tC": 61.2, "tF": 142.2}') == 61.2


def test_parse_nested_temperature():
    assert parse_temperature('{"temperature": {"tC": 48.0, "tF": 118.4}}') == 48.0
    assert parse_temperature('{"temperature": 47.5}') == 47.5


@pytest.mark.parametrize("body", [
    "",
    "hot",
    '{"tF": 100.0}',
    '{"tC": null}',
    '{"tC": "warm"}',
    "true",
    "NaN",
    "[25]",
])
def test_parse_rejects_unusable_bodies(body):
    with pytest.raises(GatewayError):
        parse_temperature(body)


def test_sensor_success(sensor):
    with patch('shelly_gateway.requests.get') as mock_get:
        mock_get.return_value = make_response(200, '{"id": 100, "tC": 52.4, "tF": 126.3}')

        assert sensor.read_temperature() == 52.4
        mock_get.assert_called_once_with(sensor.url, timeout=5)


def test_sensor_http_error(sensor):
    with patch('shelly_gateway.requests.get') as mock_get:
        mock_get.return_value = make_response(503, "busy")

        with pytest.raises(GatewayError) as exc_info:
            sensor.read_temperature()

        assert "503" in str(exc_info.value)


def test_sensor_network_error(sensor):
    with patch('shelly_gateway.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectionError("Connection refused")

        with pytest.raises(GatewayError) as exc_info:
            sensor.read_temperature()

        assert "Network error" in str(exc_info.value)


def test_sensor_unparseable_body(sensor):
    with patch('shelly_gateway.requests.get') as mock_get:
        mock_get.return_value = make_response(200, "<html>error</html>")

        with pytest.raises(GatewayError):
            sensor.read_temperature()


def test_switch_success(switch):
    with patch('shelly_gateway.requests.get') as mock_get:
        mock_get.return_value = make_response(200, '{"ison": true}')

        switch.activate()

        mock_get.assert_called_once_with(switch.url, timeout=5)


def test_switch_http_error(switch):
    with patch('shelly_gateway.requests.get') as mock_get:
        mock_get.return_value = make_response(401, "Unauthorized")

        with pytest.raises(GatewayError) as exc_info:
            switch.activate()

        assert "401" in str(exc_info.value)


def test_switch_timeout(switch):
    with patch('shelly_gateway.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.Timeout("timed out")

        with pytest.raises(GatewayError) as exc_info:
            switch.activate()

        assert "Network error" in str(exc_info.value)

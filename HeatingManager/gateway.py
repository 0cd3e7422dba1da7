"""Gateway abstraction - allows swapping the remote sensor and actuator devices."""
from abc import ABC, abstractmethod


class SensorGatewayBase(ABC):
    """Abstract base class for temperature sensor gateways."""

    @abstractmethod
    def read_temperature(self) -> float:
        """
        Fetch the current water temperature.

        Returns:
            float: Temperature in degrees Celsius

        Raises:
            GatewayError: If the sensor could not be read
        """
        pass


class ActuatorGatewayBase(ABC):
    """Abstract base class for heating actuator gateways."""

    @abstractmethod
    def activate(self) -> None:
        """
        Switch the heating on.

        Raises:
            GatewayError: If the actuator did not accept the command
        """
        pass


class GatewayError(Exception):
    """Exception raised when a sensor or actuator request fails."""
    pass

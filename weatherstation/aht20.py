"""AHT20 humidity and temperature sensor."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from .i2c import I2CBus, I2CError

AHT20_I2C_ADDR = 0x38
AHT20_CMD_INIT = 0xBE
AHT20_CMD_TRIGGER = 0xAC
AHT20_CMD_RESET = 0xBA
AHT20_STATUS_BUSY = 0x80
AHT20_STATUS_CALIBRATED = 0x08

_POLL_ATTEMPTS = 10
_FULL_SCALE = 1048576.0


class AHT20Error(Exception):
    """Raised when the sensor does not deliver a measurement."""


@dataclass(frozen=True)
class AHT20Reading:
    """A measurement in degrees Celsius and percent relative humidity."""

    temperature: float
    humidity: float


def parse_measurement(data: bytes) -> AHT20Reading:
    """Decode the 6-byte measurement frame (status byte first)."""
    if len(data) != 6:
        raise ValueError(f"expected 6 measurement bytes, got {len(data)}")
    raw_humidity = (data[1] << 12) | (data[2] << 4) | (data[3] >> 4)
    raw_temp = ((data[3] & 0x0F) << 16) | (data[4] << 8) | data[5]
    return AHT20Reading(
        temperature=raw_temp * 200.0 / _FULL_SCALE - 50.0,
        humidity=raw_humidity * 100.0 / _FULL_SCALE,
    )


class AHT20:
    """Driver for an AHT20 at its fixed I2C address."""

    def __init__(self, bus: I2CBus, sleep: Callable[[float], None] = time.sleep) -> None:
        self.bus = bus
        self._sleep = sleep

    def _status(self) -> int:
        return self.bus.read(AHT20_I2C_ADDR, 1, False)[0]

    def init(self) -> bool:
        """Send the initialisation command; return whether the sensor reports calibration."""
        self.bus.write(AHT20_I2C_ADDR, bytes([AHT20_CMD_INIT, 0x08, 0x00]), False)
        self._sleep(0.05)
        for _ in range(_POLL_ATTEMPTS):
            if self._status() & AHT20_STATUS_CALIBRATED:
                return True
            self._sleep(0.01)
        return False

    def read(self) -> AHT20Reading:
        """Trigger a measurement and return it once the sensor is no longer busy."""
        self.bus.write(AHT20_I2C_ADDR, bytes([AHT20_CMD_TRIGGER, 0x33, 0x00]), False)
        status = AHT20_STATUS_BUSY
        for _ in range(_POLL_ATTEMPTS):
            status = self._status()
            if not status & AHT20_STATUS_BUSY:
                break
            self._sleep(0.01)
        if status & AHT20_STATUS_BUSY:
            raise AHT20Error("sensor still busy after measurement trigger")
        data = self.bus.read(AHT20_I2C_ADDR, 6, False)
        if len(data) != 6:
            raise AHT20Error(f"short measurement read: {len(data)} bytes")
        return parse_measurement(data)

    def reset(self) -> None:
        """Soft-reset the sensor and initialise it again."""
        self.bus.write(AHT20_I2C_ADDR, bytes([AHT20_CMD_RESET]), False)
        self._sleep(0.02)
        self.init()

    def check(self) -> bool:
        """Return whether the sensor answers a one-byte status read."""
        try:
            return len(self.bus.read(AHT20_I2C_ADDR, 1, False)) == 1
        except I2CError:
            return False
"""Sensor manager: reads both sensors, applies calibration and keeps history."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field

from .aht20 import AHT20, AHT20Error
from .bmp280 import BMP280, CalibrationParams, compensate_pressure, compensate_temperature
from .i2c import I2CBus, I2CError

HISTORY_LENGTH = 20
SEA_LEVEL_PRESSURE = 101325.0  # Pa


def _history() -> deque[float]:
    return deque([0.0] * HISTORY_LENGTH, maxlen=HISTORY_LENGTH)


@dataclass
class SensorData:
    """Latest readings, user calibration, alert limits and recent history.

    Pressure is in hPa, altitude in metres, temperature in degrees Celsius and
    humidity in percent. Each history holds the last twenty readings, oldest first.
    """

    temperature: float = 0.0
    humidity: float = 0.0
    pressure: float = 0.0
    altitude: float = 0.0

    offset_temp: float = 0.0
    offset_press: float = 0.0
    offset_umid: float = 0.0
    offset_alt: float = 0.0

    min_temp: int = 20
    max_temp: int = 40
    min_umid: int = 30
    max_umid: int = 65
    min_press: int = 950
    max_press: int = 1200
    min_alt: int = 0
    max_alt: int = 1500

    hist_temp: deque[float] = field(default_factory=_history)
    hist_umid: deque[float] = field(default_factory=_history)
    hist_press: deque[float] = field(default_factory=_history)
    hist_alt: deque[float] = field(default_factory=_history)

    def _record(self) -> None:
        self.hist_temp.append(self.temperature)
        self.hist_umid.append(self.humidity)
        self.hist_press.append(self.pressure)
        self.hist_alt.append(self.altitude)


def altitude_from_pressure(pressure_pa: float) -> float:
    """Barometric altitude in metres for a pressure in pascal (NaN if negative)."""
    if pressure_pa < 0:
        return math.nan
    return 44330.0 * (1.0 - (pressure_pa / SEA_LEVEL_PRESSURE) ** 0.1903)


class SensorManager:
    """Owns the BMP280 and AHT20 on one bus and the shared :class:`SensorData`.

    :meth:`setup` replaces ``data`` with fresh defaults, so readers should go
    through ``manager.data`` rather than keep their own reference.
    """

    def __init__(self, bus: I2CBus) -> None:
        self.bus = bus
        self.bmp = BMP280(bus)
        self.aht = AHT20(bus)
        self.data = SensorData()
        self._calibration: CalibrationParams | None = None

    def setup(self) -> None:
        """Initialise both sensors and reset readings, offsets and limits."""
        self.bmp.configure()
        self._calibration = self.bmp.read_calibration()
        self.aht.reset()
        self.aht.init()
        self.data = SensorData()

    def read_sensors(self) -> SensorData:
        """Take one reading from each sensor, apply offsets and append to history.

        If the humidity sensor gives no measurement the previous humidity is kept.
        """
        if self._calibration is None:
            raise RuntimeError("setup() must be called before reading the sensors")
        data = self.data
        raw_temp, raw_pressure = self.bmp.read_raw()
        temp_centi = compensate_temperature(raw_temp, self._calibration)
        pressure_pa = compensate_pressure(raw_pressure, raw_temp, self._calibration)

        data.temperature = temp_centi / 100.0 + data.offset_temp
        data.pressure = pressure_pa / 100.0 + data.offset_press
        data.altitude = altitude_from_pressure(pressure_pa) + data.offset_alt

        try:
            reading = self.aht.read()
        except (AHT20Error, I2CError):
            pass
        else:
            data.humidity = reading.humidity + data.offset_umid

        data._record()
        return data

    def set_temp_offset(self, offset: float) -> None:
        self.data.offset_temp = offset

    def set_press_offset(self, offset: float) -> None:
        self.data.offset_press = offset

    def set_umid_offset(self, offset: float) -> None:
        self.data.offset_umid = offset

    def set_alt_offset(self, offset: float) -> None:
        self.data.offset_alt = offset

    def set_temp_limits(self, minimum: int, maximum: int) -> None:
        self.data.min_temp = minimum
        self.data.max_temp = maximum

    def set_umid_limits(self, minimum: int, maximum: int) -> None:
        self.data.min_umid = minimum
        self.data.max_umid = maximum

    def set_press_limits(self, minimum: int, maximum: int) -> None:
        self.data.min_press = minimum
        self.data.max_press = maximum

    def set_alt_limits(self, minimum: int, maximum: int) -> None:
        self.data.min_alt = minimum
        self.data.max_alt = maximum
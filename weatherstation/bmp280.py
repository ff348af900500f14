"""BMP280 pressure and temperature sensor: calibration and fixed-point compensation."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from .i2c import I2CBus

DEFAULT_ADDRESS = 0x77

REG_CONFIG = 0xF5
REG_CTRL_MEAS = 0xF4
REG_RESET = 0xE0
REG_PRESSURE_MSB = 0xF7
REG_DIG_T1_LSB = 0x88

NUM_CALIB_PARAMS = 24
RESET_WORD = 0xB6

# Standby 500 ms, IIR filter coefficient 16.
CONFIG_VALUE = ((0x04 << 5) | (0x05 << 2)) & 0xFC
# Temperature x1 oversampling, pressure x4 oversampling, normal mode.
CTRL_MEAS_VALUE = (0x01 << 5) | (0x03 << 2) | 0x03

_CALIB_FORMAT = "<HhhHhhhhhhhh"


def _s32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _u32(value: int) -> int:
    return value & 0xFFFFFFFF


@dataclass(frozen=True)
class CalibrationParams:
    """Factory trimming values stored in the sensor's NVM."""

    dig_t1: int
    dig_t2: int
    dig_t3: int
    dig_p1: int
    dig_p2: int
    dig_p3: int
    dig_p4: int
    dig_p5: int
    dig_p6: int
    dig_p7: int
    dig_p8: int
    dig_p9: int

    @classmethod
    def from_bytes(cls, data: bytes) -> CalibrationParams:
        """Decode the 24 little-endian calibration bytes starting at register 0x88."""
        if len(data) != NUM_CALIB_PARAMS:
            raise ValueError(f"expected {NUM_CALIB_PARAMS} calibration bytes, got {len(data)}")
        return cls(*struct.unpack(_CALIB_FORMAT, bytes(data)))


def fine_temperature(raw_temp: int, params: CalibrationParams) -> int:
    """Return the ``t_fine`` value used by both temperature and pressure compensation."""
    t1 = params.dig_t1
    var1 = _s32(_s32(((raw_temp >> 3) - (t1 << 1)) * params.dig_t2) >> 11)
    delta = (raw_temp >> 4) - t1
    var2 = _s32(_s32((_s32(delta * delta) >> 12) * params.dig_t3) >> 14)
    return _s32(var1 + var2)


def compensate_temperature(raw_temp: int, params: CalibrationParams) -> int:
    """Return the temperature in hundredths of a degree Celsius."""
    t_fine = fine_temperature(raw_temp, params)
    return _s32(t_fine * 5 + 128) >> 8


def compensate_pressure(raw_pressure: int, raw_temp: int, params: CalibrationParams) -> int:
    """Return the pressure in pascal, or 0 when the calibration would divide by zero."""
    t_fine = fine_temperature(raw_temp, params)

    var1 = (t_fine >> 1) - 64000
    quarter_sq = _s32((var1 >> 2) * (var1 >> 2))
    var2 = _s32((quarter_sq >> 11) * params.dig_p6)
    var2 = _s32(var2 + (_s32(var1 * params.dig_p5) << 1))
    var2 = _s32((var2 >> 2) + (params.dig_p4 << 16))
    var1 = _s32(
        ((_s32(params.dig_p3 * (quarter_sq >> 13)) >> 3) + (_s32(params.dig_p2 * var1) >> 1)) >> 18
    )
    var1 = _s32((32768 + var1) * params.dig_p1) >> 15
    if var1 == 0:
        return 0

    converted = _u32(_u32(_u32(1048576 - raw_pressure) - (var2 >> 12)) * 3125)
    divisor = _u32(var1)
    if converted < 0x80000000:
        converted = _u32(converted << 1) // divisor
    else:
        converted = _u32((converted // divisor) * 2)

    eighth = converted >> 3
    var1 = _s32(params.dig_p9 * _s32(_u32(eighth * eighth) >> 13)) >> 12
    var2 = _s32(_s32(converted >> 2) * params.dig_p8) >> 13
    converted = _u32(_s32(converted) + ((var1 + var2 + params.dig_p7) >> 4))
    return _s32(converted)


class BMP280:
    """Driver for a BMP280 on an I2C bus."""

    def __init__(self, bus: I2CBus, address: int = DEFAULT_ADDRESS) -> None:
        self.bus = bus
        self.address = address

    def configure(self) -> None:
        """Set the filter/standby and oversampling/mode registers."""
        self.bus.write(self.address, bytes([REG_CONFIG, CONFIG_VALUE]), False)
        self.bus.write(self.address, bytes([REG_CTRL_MEAS, CTRL_MEAS_VALUE]), False)

    def read_raw(self) -> tuple[int, int]:
        """Return the uncompensated 20-bit ``(temperature, pressure)`` readings."""
        self.bus.write(self.address, bytes([REG_PRESSURE_MSB]), True)
        buf = self.bus.read(self.address, 6, False)
        pressure = (buf[0] << 12) | (buf[1] << 4) | (buf[2] >> 4)
        temp = (buf[3] << 12) | (buf[4] << 4) | (buf[5] >> 4)
        return temp, pressure

    def reset(self) -> None:
        """Issue a soft reset."""
        self.bus.write(self.address, bytes([REG_RESET, RESET_WORD]), False)

    def read_calibration(self) -> CalibrationParams:
        """Read and decode the calibration block."""
        self.bus.write(self.address, bytes([REG_DIG_T1_LSB]), True)
        return CalibrationParams.from_bytes(self.bus.read(self.address, NUM_CALIB_PARAMS, False))
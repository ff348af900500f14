import struct

import pytest

from weatherstation.bmp280 import (
    BMP280,
    CalibrationParams,
    compensate_pressure,
    compensate_temperature,
    fine_temperature,
)
from weatherstation.i2c import I2CBus


class FakeBus(I2CBus):
    def __init__(self, responses=()):
        self.writes = []
        self.responses = list(responses)

    def write(self, address, data, nostop=False):
        self.writes.append((address, bytes(data), nostop))
        return len(data)

    def read(self, address, length, nostop=False):
        data = self.responses.pop(0)
        assert len(data) == length
        return data


DATASHEET = CalibrationParams(
    dig_t1=27504, dig_t2=26435, dig_t3=-1000,
    dig_p1=36477, dig_p2=-10685, dig_p3=3024, dig_p4=2855, dig_p5=140,
    dig_p6=-7, dig_p7=15500, dig_p8=-14600, dig_p9=6000,
)
RAW_T = 519888
RAW_P = 415148


def _calib_bytes(params):
    return struct.pack(
        "<HhhHhhhhhhhh",
        params.dig_t1, params.dig_t2, params.dig_t3,
        params.dig_p1, params.dig_p2, params.dig_p3, params.dig_p4, params.dig_p5,
        params.dig_p6, params.dig_p7, params.dig_p8, params.dig_p9,
    )


def test_datasheet_temperature():
    assert compensate_temperature(RAW_T, DATASHEET) == 2508


def test_datasheet_pressure_is_near_reference():
    pressure = compensate_pressure(RAW_P, RAW_T, DATASHEET)
    assert 100600 < pressure < 100700


def test_temperature_rises_with_raw_reading():
    low = compensate_temperature(RAW_T - 5000, DATASHEET)
    high = compensate_temperature(RAW_T + 5000, DATASHEET)
    assert low < compensate_temperature(RAW_T, DATASHEET) < high


def test_fine_temperature_is_consistent_with_temperature():
    t_fine = fine_temperature(RAW_T, DATASHEET)
    assert (t_fine * 5 + 128) >> 8 == compensate_temperature(RAW_T, DATASHEET)


def test_pressure_falls_as_raw_reading_rises():
    assert compensate_pressure(RAW_P + 10000, RAW_T, DATASHEET) < compensate_pressure(RAW_P, RAW_T, DATASHEET)


def test_zero_p1_avoids_division_by_zero():
    params = CalibrationParams(**{**DATASHEET.__dict__, "dig_p1": 0})
    assert compensate_pressure(RAW_P, RAW_T, params) == 0


def test_calibration_round_trip():
    assert CalibrationParams.from_bytes(_calib_bytes(DATASHEET)) == DATASHEET


def test_calibration_requires_24_bytes():
    with pytest.raises(ValueError):
        CalibrationParams.from_bytes(bytes(23))


def test_configure_writes_config_then_ctrl_meas():
    bus = FakeBus()
    BMP280(bus).configure()
    assert bus.writes == [
        (0x77, bytes([0xF5, 0x94]), False),
        (0x77, bytes([0xF4, 0x2F]), False),
    ]


def test_reset_writes_soft_reset_word():
    bus = FakeBus()
    BMP280(bus, 0x76).reset()
    assert bus.writes == [(0x76, bytes([0xE0, 0xB6]), False)]


def test_read_raw_decodes_20_bit_values():
    bus = FakeBus([bytes([0x65, 0x5A, 0xC0, 0x7E, 0xED, 0x00])])
    temp, pressure = BMP280(bus).read_raw()
    assert bus.writes == [(0x77, bytes([0xF7]), True)]
    assert pressure == (0x65 << 12) | (0x5A << 4) | (0xC0 >> 4)
    assert temp == (0x7E << 12) | (0xED << 4)


def test_read_calibration_reads_from_0x88():
    bus = FakeBus([_calib_bytes(DATASHEET)])
    params = BMP280(bus).read_calibration()
    assert bus.writes == [(0x77, bytes([0x88]), True)]
    assert params == DATASHEET
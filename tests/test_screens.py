import pytest

from weatherstation.display import SSD1306
from weatherstation.i2c import I2CBus
from weatherstation.screens import (
    draw_connected,
    draw_connecting,
    draw_lower_alert,
    draw_normal,
    draw_upper_alert,
    lower_alert_lines,
    upper_alert_lines,
)
from weatherstation.station import SensorData


class RecordingBus(I2CBus):
    def __init__(self):
        self.writes = []

    def write(self, address, data, nostop=False):
        self.writes.append((address, bytes(data)))
        return len(data)

    def read(self, address, length, nostop=False):
        return bytes(length)


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def display(bus):
    return SSD1306(bus)


def _normal_data(**overrides):
    values = dict(temperature=25.0, humidity=50.0, pressure=1000.0, altitude=100.0)
    values.update(overrides)
    return SensorData(**values)


def _any_lit(display, rows, columns=range(128)):
    return any(display.get_pixel(x, y) for y in rows for x in columns)


def test_no_upper_alerts_within_limits():
    assert upper_alert_lines(_normal_data()) == []


def test_upper_temperature_message():
    assert upper_alert_lines(_normal_data(temperature=45.0)) == ["Tmp:45.0C > 40C"]


def test_lower_humidity_message():
    assert lower_alert_lines(_normal_data(humidity=10.0)) == ["Umi:10.0% < 30%"]


def test_upper_messages_keep_order():
    data = _normal_data(temperature=99.0, humidity=99.0, pressure=2000.0, altitude=5000.0)
    prefixes = [line.split(":")[0] for line in upper_alert_lines(data)]
    assert prefixes == ["Tmp", "Umi", "P", "Alt"]


def test_lower_messages_keep_order():
    data = _normal_data(temperature=-5.0, humidity=1.0, pressure=500.0, altitude=-10.0)
    prefixes = [line.split(":")[0] for line in lower_alert_lines(data)]
    assert prefixes == ["Tmp", "Umi", "P", "Alt"]


def test_alert_lines_are_clipped_to_buffer():
    (line,) = upper_alert_lines(_normal_data(temperature=1e20))
    assert len(line) <= 21
    assert line.startswith("Tmp:1000")


def test_upper_alert_without_alerts_draws_title_only(display, bus):
    lines = draw_upper_alert(display, _normal_data())
    assert lines == []
    assert display.get_pixel(0, 10)
    assert not display.get_pixel(0, 33)
    assert not _any_lit(display, range(11, 64))
    address, frame = bus.writes[-1]
    assert address == 0x3C
    assert len(frame) == 1025
    assert frame[0] == 0x40


def test_upper_alert_draws_separator_and_footer(display):
    data = _normal_data(temperature=45.0)
    lines = draw_upper_alert(display, data)
    assert lines == upper_alert_lines(data)
    assert display.get_pixel(0, 33)
    assert display.get_pixel(127, 33)
    assert _any_lit(display, range(15, 23))
    assert _any_lit(display, range(47, 55))


def test_lower_alert_draws_footer(display):
    data = _normal_data(pressure=800.0)
    lines = draw_lower_alert(display, data)
    assert lines == lower_alert_lines(data)
    assert display.get_pixel(64, 33)
    assert _any_lit(display, range(37, 45))
    assert _any_lit(display, range(47, 55))


def test_draw_normal_frame(display):
    draw_normal(display, _normal_data())
    for point in [(3, 10), (124, 10), (3, 59), (124, 59), (64, 30), (30, 35)]:
        assert display.get_pixel(*point)


def test_draw_normal_temperature_text(display, bus):
    draw_normal(display, _normal_data(temperature=25.0))
    reference = SSD1306(RecordingBus())
    reference.draw_string("25.0 C", 7, 25)
    region = [(x, y) for y in range(25, 33) for x in range(7, 55)]
    assert [display.get_pixel(x, y) for x, y in region] == [
        reference.get_pixel(x, y) for x, y in region
    ]
    assert len(bus.writes[-1][1]) == 1025


def test_draw_connecting_clears_screen(display):
    display.fill(True)
    draw_connecting(display)
    assert not display.get_pixel(0, 0)
    assert not _any_lit(display, range(0, 30))
    assert _any_lit(display, range(30, 38))
    assert _any_lit(display, range(40, 48))
    assert not _any_lit(display, range(48, 64))


def test_draw_connected_layout(display):
    display.fill(True)
    draw_connected(display)
    assert _any_lit(display, range(0, 8))
    assert not _any_lit(display, range(8, 25))
    assert _any_lit(display, range(25, 33), range(0, 8))
    assert _any_lit(display, range(55, 63))
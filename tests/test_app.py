import pytest

from weatherstation.app import (
    BUTTON_A,
    BUTTON_B,
    BUZZER_ALERT_LEVEL,
    AlertLevel,
    Debouncer,
    WeatherStation,
    evaluate_alert,
    main,
)
from weatherstation.display import SSD1306
from weatherstation.i2c import I2CBus
from weatherstation.matrix import LedMatrix, matrix_rgb
from weatherstation.station import SensorData, SensorManager


class FakeBus(I2CBus):
    def __init__(self):
        self.writes = []

    def write(self, address, data, nostop=False):
        self.writes.append((address, bytes(data)))
        return len(data)

    def read(self, address, length, nostop=False):
        return bytes(length)


def normal_data(**changes):
    data = SensorData(temperature=25.0, humidity=50.0, pressure=1000.0, altitude=100.0)
    for key, value in changes.items():
        setattr(data, key, value)
    return data


@pytest.fixture
def rig():
    words = []
    display_bus = FakeBus()
    display = SSD1306(display_bus)
    manager = SensorManager(FakeBus())
    station = WeatherStation(manager, display, LedMatrix(words.append))
    return station, words, display, display_bus


def test_evaluate_alert_in_range_is_none():
    assert evaluate_alert(normal_data()) is AlertLevel.NONE


def test_evaluate_alert_defaults_are_below_minimum():
    assert evaluate_alert(SensorData()) is AlertLevel.LOWER


def test_evaluate_alert_upper_wins_over_lower():
    assert evaluate_alert(normal_data(temperature=50.0, humidity=10.0)) is AlertLevel.UPPER


@pytest.mark.parametrize(
    "changes",
    [{"temperature": 41.0}, {"humidity": 66.0}, {"pressure": 1201.0}, {"altitude": 1501.0}],
)
def test_evaluate_alert_each_upper_limit(changes):
    assert evaluate_alert(normal_data(**changes)) is AlertLevel.UPPER


@pytest.mark.parametrize(
    "changes",
    [{"temperature": 19.0}, {"humidity": 29.0}, {"pressure": 949.0}, {"altitude": -1.0}],
)
def test_evaluate_alert_each_lower_limit(changes):
    assert evaluate_alert(normal_data(**changes)) is AlertLevel.LOWER


def test_evaluate_alert_limits_are_exclusive():
    data = normal_data(temperature=40.0, humidity=30.0)
    assert evaluate_alert(data) is AlertLevel.NONE


def test_debouncer_sequence():
    debouncer = Debouncer(250)
    assert debouncer.accept(100) is False
    assert debouncer.accept(300) is True
    assert debouncer.accept(400) is False
    assert debouncer.accept(550) is True


def test_button_a_starts_monitoring(rig):
    station, _, _, _ = rig
    assert station.connected is False
    assert station.press_button(BUTTON_A, 1000) is True
    assert station.connected is True


def test_button_press_is_debounced(rig):
    station, _, _, _ = rig
    assert station.press_button(BUTTON_A, 1000) is True
    assert station.press_button(BUTTON_B, 1100) is False
    assert station.stop_event.is_set() is False


def test_button_b_blanks_outputs_and_stops(rig):
    station, words, display, display_bus = rig
    display.fill(True)
    assert station.press_button(BUTTON_B, 1000) is True
    assert words == [0] * 25
    assert display.get_pixel(0, 0) is False
    assert display_bus.writes[-1][1][1:] == bytes(len(display.buffer) - 1)
    assert station.stop_event.is_set()


def test_update_alert_before_start_does_nothing(rig):
    station, words, _, display_bus = rig
    assert station.update_alert() is None
    assert words == []
    assert display_bus.writes == []
    assert station.alert is False


def test_update_alert_upper(rig):
    station, words, display, _ = rig
    station.manager.data = normal_data(temperature=45.0)
    station.press_button(BUTTON_A, 1000)
    assert station.update_alert() is AlertLevel.UPPER
    assert station.alert is True
    assert len(words) == 25
    lit = [w for w in words if w]
    assert len(lit) == 4
    assert set(lit) == {matrix_rgb(0.0, 0.1, 0.0)}
    assert display.get_pixel(0, 10) is True
    assert display.get_pixel(0, 33) is True


def test_update_alert_lower(rig):
    station, words, display, _ = rig
    station.press_button(BUTTON_A, 1000)
    assert station.update_alert() is AlertLevel.LOWER
    assert station.alert is True
    assert sum(1 for w in words if w) == 4
    assert display.get_pixel(0, 33) is True


def test_update_alert_normal_clears(rig):
    station, words, display, display_bus = rig
    station.manager.data = normal_data()
    station.press_button(BUTTON_A, 1000)
    station.alert = True
    assert station.update_alert() is AlertLevel.NONE
    assert station.alert is False
    assert words == [0] * 25
    assert display.get_pixel(3, 10) is True
    assert display.get_pixel(0, 10) is False
    assert display_bus.writes[-1][1] == bytes(display.buffer)


def test_update_alert_follows_replaced_data(rig):
    station, _, _, _ = rig
    station.press_button(BUTTON_A, 1000)
    station.manager.data = normal_data()
    assert station.update_alert() is AlertLevel.NONE
    station.manager.data = normal_data(altitude=2000.0)
    assert station.update_alert() is AlertLevel.UPPER


def test_indicator_pattern_alert(rig):
    station, _, _, _ = rig
    station.connected = True
    station.alert = True
    steps = station.indicator_pattern()
    assert len(steps) == 2
    assert (steps[0].red, steps[0].green, steps[0].buzzer_level) == (True, True, BUZZER_ALERT_LEVEL)
    assert (steps[1].red, steps[1].green, steps[1].buzzer_level) == (True, False, 0)
    assert sum(step.duration_ms for step in steps) == 400


@pytest.mark.parametrize("connected,alert", [(False, True), (True, False), (False, False)])
def test_indicator_pattern_idle(rig, connected, alert):
    station, _, _, _ = rig
    station.connected = connected
    station.alert = alert
    steps = station.indicator_pattern()
    assert len(steps) == 1
    assert (steps[0].red, steps[0].green, steps[0].buzzer_level) == (False, False, 0)
    assert steps[0].duration_ms == 200


def test_main_fails_without_bus(tmp_path):
    missing = str(tmp_path / "no-such-i2c")
    assert main(["--sensor-bus", missing, "--display-bus", missing]) == 1
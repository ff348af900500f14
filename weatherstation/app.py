"""Station controller: alert evaluation, button handling and the command entry point."""

from __future__ import annotations

import argparse
import logging
import sys
import threading
import time
from collections import deque
from contextlib import ExitStack
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .display import SSD1306
from .i2c import I2CError, LinuxI2CBus
from .matrix import LedMatrix
from .screens import (
    draw_connected,
    draw_connecting,
    draw_lower_alert,
    draw_normal,
    draw_upper_alert,
)
from .server import StationHTTPServer
from .station import SensorData, SensorManager

log = logging.getLogger(__name__)

BUTTON_A = 5
BUTTON_B = 6
DEBOUNCE_MS = 250

OUT_PIN = 7
BUZZER_PIN = 21
BUZZER_FREQUENCY = 100
BUZZER_WRAP = 4096
BUZZER_ALERT_LEVEL = 2048

LED_RED = 13
LED_GREEN = 11
LED_BLUE = 12

SENSOR_PERIOD_S = 2.0
ALERT_PERIOD_S = 0.2
CONNECT_DELAY_S = 2.0

_U32 = 1 << 32


class AlertLevel(Enum):
    """Which side of the configured limits the readings are on."""

    NONE = "none"
    UPPER = "upper"
    LOWER = "lower"


def evaluate_alert(data: SensorData) -> AlertLevel:
    """Upper-limit breaches take precedence over lower-limit ones."""
    if (
        data.temperature > data.max_temp
        or data.pressure > data.max_press
        or data.humidity > data.max_umid
        or data.altitude > data.max_alt
    ):
        return AlertLevel.UPPER
    if (
        data.temperature < data.min_temp
        or data.pressure < data.min_press
        or data.humidity < data.min_umid
        or data.altitude < data.min_alt
    ):
        return AlertLevel.LOWER
    return AlertLevel.NONE


class Debouncer:
    """Accepts an event only if ``interval_ms`` passed since the last accepted one.

    The clock starts at zero, so events earlier than ``interval_ms`` are dropped.
    Times are taken modulo 2**32 like a millisecond counter since boot.
    """

    def __init__(self, interval_ms: int = DEBOUNCE_MS) -> None:
        self.interval_ms = interval_ms
        self._last_ms = 0

    def accept(self, now_ms: int) -> bool:
        now = int(now_ms) % _U32
        if (now - self._last_ms) % _U32 < self.interval_ms:
            return False
        self._last_ms = now
        return True


@dataclass(frozen=True)
class IndicatorStep:
    """State of the RGB LED and buzzer held for ``duration_ms``."""

    red: bool
    green: bool
    buzzer_level: int
    duration_ms: int


_ALERT_CYCLE = (
    IndicatorStep(red=True, green=True, buzzer_level=BUZZER_ALERT_LEVEL, duration_ms=200),
    IndicatorStep(red=True, green=False, buzzer_level=0, duration_ms=200),
)
_IDLE_CYCLE = (IndicatorStep(red=False, green=False, buzzer_level=0, duration_ms=200),)


class WeatherStation:
    """Ties the sensor data to the OLED, the LED matrix and the alert indicators."""

    def __init__(self, manager: SensorManager, display: SSD1306, matrix: LedMatrix) -> None:
        self.manager = manager
        self.display = display
        self.matrix = matrix
        self.connected = False
        self.alert = False
        self.stop_event = threading.Event()
        self._debouncer = Debouncer(DEBOUNCE_MS)
        self._lock = threading.Lock()

    def press_button(self, button: int, now_ms: int) -> bool:
        """Handle a button press; return False if it was swallowed by debouncing.

        Button A starts alert monitoring. Button B blanks the display and the
        matrix and asks the station to stop.
        """
        if not self._debouncer.accept(now_ms):
            return False
        if button == BUTTON_A:
            self.connected = True
            log.info("Button A pressed: monitoring started")
        elif button == BUTTON_B:
            with self._lock:
                self.display.fill(False)
                self.display.send_data()
                self.matrix.clear()
            self.stop_event.set()
        return True

    def update_alert(self) -> AlertLevel | None:
        """Refresh the matrix and OLED from the current data; None before button A."""
        if not self.connected:
            return None
        data = self.manager.data
        level = evaluate_alert(data)
        with self._lock:
            if level is AlertLevel.UPPER:
                self.matrix.draw_alert()
                draw_upper_alert(self.display, data)
            elif level is AlertLevel.LOWER:
                self.matrix.draw_alert()
                draw_lower_alert(self.display, data)
            else:
                self.matrix.clear()
                draw_normal(self.display, data)
        self.alert = level is not AlertLevel.NONE
        return level

    def indicator_pattern(self) -> tuple[IndicatorStep, ...]:
        """The LED and buzzer steps for one indicator cycle."""
        if self.alert and self.connected:
            return _ALERT_CYCLE
        return _IDLE_CYCLE

    def draw(self, screen: Callable[[SSD1306], None]) -> None:
        """Draw a status screen while holding the display."""
        with self._lock:
            screen(self.display)


def _bus_arg(value: str) -> int | str:
    return int(value) if value.isdigit() else value


def _sensor_loop(station: WeatherStation) -> None:
    try:
        station.manager.setup()
    except I2CError as exc:
        log.error("sensor setup failed: %s", exc)
        station.stop_event.set()
        return
    while not station.stop_event.is_set():
        try:
            station.manager.read_sensors()
        except I2CError as exc:
            log.warning("sensor read failed: %s", exc)
        station.stop_event.wait(SENSOR_PERIOD_S)


def _alert_loop(station: WeatherStation) -> None:
    while not station.stop_event.is_set():
        try:
            station.update_alert()
        except I2CError as exc:
            log.warning("display update failed: %s", exc)
        station.stop_event.wait(ALERT_PERIOD_S)


def _indicator_loop(station: WeatherStation) -> None:
    previous: IndicatorStep | None = None
    while not station.stop_event.is_set():
        for step in station.indicator_pattern():
            if step != previous:
                log.info(
                    "indicator: red=%s green=%s buzzer=%d/%d",
                    step.red, step.green, step.buzzer_level, BUZZER_WRAP,
                )
                previous = step
            if station.stop_event.wait(step.duration_ms / 1000.0):
                return


def _button_loop(station: WeatherStation) -> None:
    buttons = {"a": BUTTON_A, "b": BUTTON_B}
    for line in sys.stdin:
        button = buttons.get(line.strip().lower())
        if button is not None:
            station.press_button(button, int(time.monotonic() * 1000))
        if station.stop_event.is_set():
            return
    station.stop_event.wait()


def main(argv: list[str] | None = None) -> int:
    """Run the station: sensors, alerts, OLED and web dashboard.

    Type ``a`` and Enter to start monitoring, ``b`` to blank the outputs and stop.
    """
    parser = argparse.ArgumentParser(prog="weatherstation", description=main.__doc__)
    parser.add_argument("--sensor-bus", default="0", help="I2C bus number or device path of the sensors")
    parser.add_argument("--display-bus", default="1", help="I2C bus number or device path of the OLED")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=80)
    parser.add_argument("--matrix-output", help="file receiving the LED matrix words, 4 bytes each")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    with ExitStack() as stack:
        try:
            sensor_bus = stack.enter_context(LinuxI2CBus(_bus_arg(args.sensor_bus)))
            if args.display_bus == args.sensor_bus:
                display_bus = sensor_bus
            else:
                display_bus = stack.enter_context(LinuxI2CBus(_bus_arg(args.display_bus)))
            if args.matrix_output:
                out = stack.enter_context(open(args.matrix_output, "wb"))

                def sink(word: int) -> None:
                    out.write(word.to_bytes(4, "big"))
                    out.flush()
            else:
                sink = deque(maxlen=25).append

            display = SSD1306(display_bus)
            display.configure()
            display.send_data()
            display.fill(False)
            display.send_data()
        except (I2CError, OSError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1

        manager = SensorManager(sensor_bus)
        station = WeatherStation(manager, display, LedMatrix(sink))
        stop = station.stop_event

        workers = [
            threading.Thread(target=_sensor_loop, args=(station,), daemon=True),
            threading.Thread(target=_alert_loop, args=(station,), daemon=True),
            threading.Thread(target=_indicator_loop, args=(station,), daemon=True),
        ]
        for worker in workers:
            worker.start()

        server: StationHTTPServer | None = None
        try:
            station.draw(draw_connecting)
            if not stop.wait(CONNECT_DELAY_S):
                try:
                    server = StationHTTPServer(manager, args.host, args.port)
                except OSError as exc:
                    print(f"error: cannot start HTTP server: {exc}", file=sys.stderr)
                    stop.set()
                    return 1
                threading.Thread(target=server.serve_forever, daemon=True).start()
                station.draw(draw_connected)
                _button_loop(station)
        except KeyboardInterrupt:
            pass
        finally:
            stop.set()
            if server is not None:
                server.shutdown()
            for worker in workers:
                worker.join(timeout=1.0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
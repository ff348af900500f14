"""Screens drawn on the OLED: dashboard, alert pages and connection status."""

from __future__ import annotations

from .display import SSD1306, center_text
from .station import SensorData

_ALERT_LINE_SIZE = 22
_NORMAL_LINE_SIZE = 30

_TITLE = "CUIDADO"
_FOOTER_TOP = "Temp. Ultrapas."
_FOOTER_UPPER = "Limite Sup.!"
_FOOTER_LOWER = "Limite Inf.!"


def _clip(text: str, size: int) -> str:
    """Keep what fits in a text buffer of ``size`` bytes, terminator included."""
    return text[: size - 1]


def upper_alert_lines(data: SensorData) -> list[str]:
    """Messages for every quantity above its maximum, in display order."""
    lines = []
    if data.temperature > data.max_temp:
        lines.append(f"Tmp:{data.temperature:.1f}C > {int(data.max_temp)}C")
    if data.humidity > data.max_umid:
        lines.append(f"Umi:{data.humidity:.1f}% > {int(data.max_umid)}%")
    if data.pressure > data.max_press:
        lines.append(f"P:{data.pressure:.0f}hPa > {int(data.max_press)}")
    if data.altitude > data.max_alt:
        lines.append(f"Alt: {data.altitude:.0f}m > {int(data.max_alt)}m")
    return [_clip(line, _ALERT_LINE_SIZE) for line in lines]


def lower_alert_lines(data: SensorData) -> list[str]:
    """Messages for every quantity below its minimum, in display order."""
    lines = []
    if data.temperature < data.min_temp:
        lines.append(f"Tmp:{data.temperature:.1f}C < {int(data.min_temp)}C")
    if data.humidity < data.min_umid:
        lines.append(f"Umi:{data.humidity:.1f}% < {int(data.min_umid)}%")
    if data.pressure < data.min_press:
        lines.append(f"P:{data.pressure:.0f}hPa < {int(data.min_press)}")
    if data.altitude < data.min_alt:
        lines.append(f"Alt: {data.altitude:.0f}m < {int(data.min_alt)}m")
    return [_clip(line, _ALERT_LINE_SIZE) for line in lines]


def _draw_alert(display: SSD1306, lines: list[str], footer: str) -> list[str]:
    display.fill(False)
    display.draw_string(_TITLE, center_text(_TITLE), 0)
    display.hline(0, 127, 10, True)
    for row, line in enumerate(lines):
        display.draw_string(line, 0, 15 + 12 * row)
        display.hline(0, 127, 33, True)
        display.draw_string(_FOOTER_TOP, center_text(_FOOTER_TOP), 37)
        display.draw_string(footer, center_text(footer), 47)
    display.send_data()
    return lines


def draw_upper_alert(display: SSD1306, data: SensorData) -> list[str]:
    """Show the upper-limit alert page; return the messages drawn."""
    return _draw_alert(display, upper_alert_lines(data), _FOOTER_UPPER)


def draw_lower_alert(display: SSD1306, data: SensorData) -> list[str]:
    """Show the lower-limit alert page; return the messages drawn."""
    return _draw_alert(display, lower_alert_lines(data), _FOOTER_LOWER)


def draw_normal(display: SSD1306, data: SensorData) -> None:
    """Show the four readings in a two-by-two grid."""
    display.fill(False)
    display.draw_string("DASHBOARD", center_text("DASHBOARD"), 0)
    display.rect(10, 3, 122, 50, True, False)
    display.line(64, 10, 64, 60, True)
    display.line(3, 35, 122, 35, True)

    cells = (
        ("Temp:", f"{data.temperature:.1f} C", 7, 15),
        ("Press:", f"{data.pressure:.0f} hPa", 7, 40),
        ("Umid:", f"{data.humidity:.1f} %", 75, 15),
        ("Alt:", f"{data.altitude:.0f} M", 70, 40),
    )
    for label, value, x, y in cells:
        display.draw_string(label, x, y)
        display.draw_string(_clip(value, _NORMAL_LINE_SIZE), x, y + 10)
    display.send_data()


def draw_connecting(display: SSD1306) -> None:
    """Show that the network connection is being set up."""
    display.fill(False)
    display.draw_string("ESTABELECENDO", center_text("ESTABELECENDO"), 30)
    display.draw_string("CONEXAO...", center_text("CONEXAO..."), 40)
    display.send_data()


def draw_connected(display: SSD1306) -> None:
    """Show the connected state and what the two buttons do."""
    display.fill(False)
    display.draw_string("CONECTADO", center_text("CONECTADO"), 0)
    display.draw_string("Iniciar", 0, 25)
    display.draw_string("-> Botao A", 0, 35)
    display.draw_string("Reset", 0, 45)
    display.draw_string("-> Botao B", 0, 55)
    display.send_data()
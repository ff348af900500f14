"""Weather station: BMP280/AHT20 sensors, SSD1306 display, LED matrix alerts and a web dashboard."""

__version__ = "0.1.0"
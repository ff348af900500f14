# weatherstation

A small weather station. It reads temperature and pressure from a BMP280,
humidity from an AHT20, works out altitude from pressure, and shows the
readings on an SSD1306 OLED, a 5x5 LED matrix and a web dashboard.

## Running the station

The package installs one command:

```
weatherstation [--sensor-bus BUS] [--display-bus BUS] [--host HOST] [--port PORT]
               [--matrix-output FILE]
```

- `--sensor-bus` – I2C bus number or device path of the sensors (default `0`,
  meaning `/dev/i2c-0`).
- `--display-bus` – I2C bus number or device path of the OLED (default `1`).
  When it is the same as the sensor bus, the bus is shared.
- `--host`, `--port` – where the HTTP dashboard listens (default `0.0.0.0:80`).
- `--matrix-output` – a file that receives every LED matrix word as 4
  big-endian bytes. Without it the words are discarded.

On start the OLED shows a "connecting" screen, after two seconds the HTTP
server starts and the OLED shows the button help. The two buttons are read
from standard input, one per line:

- `a` – start alert monitoring.
- `b` – blank the OLED and the LED matrix and stop the station.

Presses closer together than 250 ms are ignored. Ctrl+C or the end of
standard input also stops the station. The command exits with status 1 if a
bus cannot be opened or the HTTP server cannot bind.

## What it does

- **Sensors** (`weatherstation.station.SensorManager`) – every two seconds a
  reading takes the compensated BMP280 temperature and pressure, the AHT20
  humidity and the altitude computed from pressure (sea-level pressure
  101325 Pa). User offsets are added to each value, and the last 20 readings
  of every quantity are kept, oldest first. If the AHT20 gives no measurement,
  the previous humidity is kept.
- **Limits** – each quantity has a minimum and a maximum. The defaults are:

  | Quantity        | Min | Max  |
  |-----------------|-----|------|
  | Temperature °C  | 20  | 40   |
  | Humidity %      | 30  | 65   |
  | Pressure hPa    | 950 | 1200 |
  | Altitude m      | 0   | 1500 |

  `SensorManager.setup()` restores these defaults and clears offsets and
  history.
- **Alerts** (`weatherstation.app`) – once button A has been pressed, the
  station checks the readings every 200 ms. A value above its maximum shows the
  upper-limit alert page; otherwise a value below its minimum shows the
  lower-limit page. In both cases the LED matrix shows an exclamation sign in
  dim red. With no alert the matrix is cleared and the OLED shows the
  dashboard grid. `evaluate_alert(data)` returns the `AlertLevel` on its own.
- **Web dashboard** (`weatherstation.server.StationHTTPServer`) – one request
  per connection, only the first 255 bytes of each are looked at:
  - `GET /` – the dashboard page (it loads its chart library from a CDN).
  - `GET /dados_sensores` – readings, offsets, limits and history as JSON.
  - `GET /config?offset_temp=1.5` – set an offset (`offset_temp`,
    `offset_umid`, `offset_press`, `offset_alt`).
  - `GET /config?limite_min_temp=10&limite_max_temp=30` – set a pair of
    limits (`temp`, `umid`, `press`, `alt`); both keys must be present.

  Offsets are checked before limits and only the first match is applied.
  `/config` always answers `OK`. Any other request answers `404 Not Found`.
  `build_response(request, manager)` produces a full response without a
  socket.

## Using the parts as a library

BMP280 compensation works on plain bytes and integers:

```python
from weatherstation.bmp280 import CalibrationParams, compensate_temperature, compensate_pressure

params = CalibrationParams.from_bytes(calibration_block)  # 24 bytes from register 0x88
centi_celsius = compensate_temperature(raw_temp, params)
pascal = compensate_pressure(raw_pressure, raw_temp, params)
```

`weatherstation.aht20.parse_measurement(frame)` decodes a 6-byte AHT20 frame
into an `AHT20Reading` with `temperature` and `humidity`.

Hardware is reached through an I2C bus object:

```python
from weatherstation.i2c import LinuxI2CBus
from weatherstation.station import SensorManager

with LinuxI2CBus(1) as bus:
    manager = SensorManager(bus)
    manager.setup()
    data = manager.read_sensors()
    print(data.temperature, data.pressure, data.humidity, data.altitude)
```

Any subclass of `weatherstation.i2c.I2CBus` implementing `write` and `read`
can stand in for the bus, so the drivers can be exercised without hardware.
Bus failures raise `I2CError`.

The display keeps its frame buffer in memory until `send_data()`:

```python
from weatherstation.display import SSD1306, center_text

display = SSD1306(bus, 128, 64, 0x3C, False)
display.draw_string("DASHBOARD", center_text("DASHBOARD"), 0)
print(display.get_pixel(40, 3))
display.send_data()
```

`weatherstation.screens` draws the station's pages (`draw_normal`,
`draw_upper_alert`, `draw_lower_alert`, `draw_connecting`, `draw_connected`),
and `weatherstation.matrix.LedMatrix` sends 25 colour words per frame to any
callable.

## What it does not do

- It does not join a Wi-Fi network; the dashboard is served on whatever
  network the host already has.
- Buttons, the RGB LEDs and the buzzer are not driven through GPIO: buttons
  come from standard input, and the LED and buzzer pattern is only written to
  the log.
- The LED matrix is not driven directly; its words go to the
  `--matrix-output` file or nowhere.
- Button B stops the program; it does not reboot any device.
- `LinuxI2CBus` ends every transfer with a stop condition; repeated starts
  are not supported.
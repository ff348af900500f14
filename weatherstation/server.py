"""Small HTTP server with the dashboard page, a JSON feed and a config endpoint."""

from __future__ import annotations

import json
import logging
import re
import socketserver
from typing import Optional, Union

from .station import HISTORY_LENGTH, SensorData, SensorManager

log = logging.getLogger(__name__)

_REQUEST_LIMIT = 255
_RECV_SIZE = 1024

_CHART_SCRIPT = "https://cdn.jsdelivr.net/npm/chart.js"

# key, icon, name, unit, chart colour
_QUANTITIES = (
    ("temp", "🌡️", "Temperatura", "°C", "yellow"),
    ("umid", "💧", "Umidade", "%", "green"),
    ("press", "🧭", "Pressão", "hPa", "red"),
    ("alt", "⛰️", "Altitude", "m", "orange"),
)

_TABS = (
    ("principal", "📊 Principal"),
    ("config", "⚙️ Configurações"),
    ("graficos", "📈 Gráficos"),
)

_STYLE = (
    ("body", (
        'font-family:"Segoe UI",sans-serif', "background:#1e1e2f", "color:#f0f0f0",
        "display:flex", "justify-content:center", "padding:10px", "margin:0",
    )),
    (".container", (
        "width:100%", "max-width:900px", "background:#2c2f48", "padding:30px",
        "border-radius:16px", "box-shadow:0 4px 20px rgba(0,0,0,0.3)",
    )),
    ("h1,h2", ("text-align:center", "color:#fff")),
    ("hr", ("border:1px solid #444", "margin:30px 0")),
    (".tabs", ("display:flex", "justify-content:center", "margin-bottom:20px")),
    (".tab", (
        "padding:10px 20px", "cursor:pointer", "background:#444", "margin:0 5px",
        "border-radius:8px", "color:#fff",
    )),
    (".tab.active", ("background:#28a745",)),
    (".section", ("display:none",)),
    (".section.active", ("display:block",)),
    (".grid", (
        "display:grid", "grid-template-columns:repeat(auto-fit,minmax(150px,1fr))",
        "gap:20px", "text-align:center",
    )),
    (".card", ("background:#3c3f5a", "padding:15px", "border-radius:12px", "border:1px solid #555")),
    (".card p", ("margin:0", "font-size:1.5rem", "font-weight:bold", "color:#4fc3f7")),
    (".card span", ("font-size:0.9rem", "color:#ccc")),
    (".charts-grid,.form-grid", (
        "display:grid", "grid-template-columns:repeat(auto-fit,minmax(300px,1fr))",
        "gap:20px", "margin-top:20px",
    )),
    (".chart-container", ("width:100%",)),
    (".form-group", ("display:flex", "flex-direction:column")),
    ("label", ("margin-bottom:5px", "font-weight:bold", "color:#ddd", "text-align:left")),
    ("input", (
        "padding:10px 14px", "border:1px solid #666", "border-radius:10px", "font-size:0.9rem",
        "background:rgba(255,255,255,0.05)", "color:#fff", "transition:all 0.2s ease-in-out",
        "box-shadow:inset 0 1px 3px rgba(0,0,0,0.3)", "backdrop-filter:blur(5px)",
    )),
    ("input:focus", ("outline:none", "border-color:#4fc3f7", "background:rgba(255,255,255,0.08)")),
    ("input::placeholder", ("color:#bbb",)),
    ("button", (
        "padding:10px", "border:none", "background:#28a745", "color:white",
        "border-radius:8px", "cursor:pointer", "margin-top:10px", "font-weight:bold",
    )),
    ("button:hover", ("background:#218838",)),
    (".limit-inputs", ("display:flex", "gap:10px")),
    (".limit-inputs input", ("width:100%",)),
)

_SCRIPT_TEMPLATE = """
const KEYS = %(keys)s;
const CHART_SPECS = %(charts)s;
const CHARTS = {};
function byId(id) { return document.getElementById(id); }
function createChart(id, label, color) {
  return new Chart(byId(id).getContext('2d'), {
    type: 'line',
    data: {labels: [], datasets: [{label: label, data: [], borderColor: color,
                                   backgroundColor: color + '80', tension: 0.1}]},
    options: {scales: {y: {beginAtZero: false}}, animation: false,
              plugins: {legend: {display: true}}}
  });
}
function initCharts() {
  for (const [key, label, color] of CHART_SPECS) {
    CHARTS[key] = createChart(key + 'Chart', label, color);
  }
}
function setConfig(param) {
  const input = byId('input_' + param);
  fetch('/config?' + param + '=' + input.value).then(() => input.blur());
}
function setLimits(param) {
  const low = byId('input_limite_min_' + param);
  const high = byId('input_limite_max_' + param);
  fetch('/config?limite_min_' + param + '=' + low.value + '&limite_max_' + param + '=' + high.value)
    .then(() => { low.blur(); high.blur(); });
}
function atualizarDados() {
  fetch('/dados_sensores').then(r => r.json()).then(d => {
    for (const key of KEYS) { byId(key).innerText = d[key].toFixed(2); }
    if (!document.activeElement.id.includes('input')) {
      for (const key of KEYS) {
        byId('input_offset_' + key).value = d['offset_' + key];
        byId('input_limite_min_' + key).value = d['limite_min_' + key];
        byId('input_limite_max_' + key).value = d['limite_max_' + key];
      }
    }
    for (const key of KEYS) {
      const chart = CHARTS[key];
      chart.data.datasets[0].data = d['hist_' + key];
      chart.data.labels = d.hist_labels;
      chart.update();
    }
  }).catch(e => console.error('Erro:', e));
}
function switchTab(tab) {
  document.querySelectorAll('.section, .tab').forEach(el => el.classList.remove('active'));
  byId(tab).classList.add('active');
  byId('tab_' + tab).classList.add('active');
}
window.onload = () => {
  initCharts();
  atualizarDados();
  setInterval(atualizarDados, 2000);
  switchTab('principal');
};
"""


def _render_style() -> str:
    return "\n".join(f"{selector}{{{';'.join(rules)}}}" for selector, rules in _STYLE)


def _render_script() -> str:
    keys = [key for key, *_ in _QUANTITIES]
    charts = [[key, f"{name} ({unit})", colour] for key, _, name, unit, colour in _QUANTITIES]
    return _SCRIPT_TEMPLATE % {
        "keys": json.dumps(keys),
        "charts": json.dumps(charts, ensure_ascii=False),
    }


def _render_page() -> str:
    tabs = "".join(
        f"<div class='tab' id='tab_{section}' onclick=\"switchTab('{section}')\">{title}</div>"
        for section, title in _TABS
    )
    cards = "".join(
        f"<div class=card><p id={key}>--</p><span>{icon} {name} ({unit})</span></div>"
        for key, icon, name, unit, _ in _QUANTITIES
    )
    offsets = "".join(
        f"<div class=form-group><label>Offset {icon} {name}:</label>"
        f"<input type=number step=0.1 id=input_offset_{key}>"
        f"<button onclick=\"setConfig('offset_{key}')\">Calibrar</button></div>"
        for key, icon, name, _, _ in _QUANTITIES
    )
    limits = "".join(
        f"<div class=form-group><label>Limites {icon} {name} ({unit}):</label>"
        f"<div class=limit-inputs>"
        f"<input type=number placeholder=Min id=input_limite_min_{key}> "
        f"<input type=number placeholder=Max id=input_limite_max_{key}></div>"
        f"<button onclick=\"setLimits('{key}')\">Aplicar</button></div>"
        for key, icon, name, unit, _ in _QUANTITIES
    )
    charts = "".join(
        f"<div class=chart-container><canvas id={key}Chart></canvas></div>"
        for key, *_ in _QUANTITIES
    )
    head = (
        "<!DOCTYPE html><html><head><title>Dashboard do Sensor</title><meta charset='UTF-8'>\n"
        "<meta name='viewport' content='width=device-width, initial-scale=1.0'>\n"
        f"<style>\n{_render_style()}\n</style>\n"
        f"<script src='{_CHART_SCRIPT}'></script>\n"
        f"<script>{_render_script()}</script></head>"
    )
    body = (
        "<body><div class=container><h1>Dashboard do Sensor</h1>\n"
        f"<div class=tabs>{tabs}</div>\n"
        f"<div class='section' id='principal'><div class=grid>{cards}</div></div>\n"
        "<div class='section' id='config'>"
        f"<h2>Configurações de Calibração</h2><div class=form-grid>{offsets}</div>"
        f"<h2>Configurações de limites</h2><div class=form-grid>{limits}</div></div>\n"
        f"<div class='section' id='graficos'><div class=charts-grid>{charts}</div></div>\n"
        "</div></body></html>"
    )
    return head + "\n" + body


HTML_BODY = _render_page()

_NOT_FOUND_BODY = "<h1>404 Not Found</h1>"

_SPACE = "[ \t\n\v\f\r]*"
_FLOAT_RE = re.compile(
    _SPACE
    + r"(?P<hex>[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?)"
    + r"|" + _SPACE
    + r"(?P<dec>[+-]?(?:inf(?:inity)?|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?))",
    re.IGNORECASE,
)
_INT_RE = re.compile(_SPACE + r"([+-]?[0-9]+)")

_OFFSETS = (
    ("offset_temp=", "set_temp_offset"),
    ("offset_umid=", "set_umid_offset"),
    ("offset_press=", "set_press_offset"),
    ("offset_alt=", "set_alt_offset"),
)
_LIMITS = (
    ("temp", "set_temp_limits"),
    ("umid", "set_umid_limits"),
    ("press", "set_press_limits"),
    ("alt", "set_alt_limits"),
)


def _leading_float(text: str) -> float:
    """Parse a leading number the way ``atof`` does; 0.0 when there is none."""
    match = _FLOAT_RE.match(text)
    if match is None:
        return 0.0
    if match.group("hex") is not None:
        hex_text = match.group("hex")
        if not re.search(r"[pP]", hex_text):
            hex_text += "p0"
        return float.fromhex(hex_text)
    return float(match.group("dec"))


def _leading_int(text: str) -> int:
    """Parse a leading integer the way ``atoi`` does; 0 when there is none."""
    match = _INT_RE.match(text)
    return int(match.group(1)) if match else 0


def format_history(values) -> str:
    """Render readings as a JSON array with two decimals each."""
    return "[" + ",".join(f"{value:.2f}" for value in values) + "]"


def sensor_json(data: SensorData) -> str:
    """Render readings, offsets, limits and history as the dashboard's JSON."""
    labels = ",".join(str(n) for n in range(1, HISTORY_LENGTH + 1))
    return (
        f'{{"temp":{data.temperature:.2f},"umid":{data.humidity:.2f},'
        f'"press":{data.pressure:.2f},"alt":{data.altitude:.2f},'
        f'"offset_temp":{data.offset_temp:.2f},"offset_press":{data.offset_press:.2f},'
        f'"offset_umid":{data.offset_umid:.2f},"offset_alt":{data.offset_alt:.2f},'
        f'"limite_min_temp":{int(data.min_temp)},"limite_max_temp":{int(data.max_temp)},'
        f'"limite_min_umid":{int(data.min_umid)},"limite_max_umid":{int(data.max_umid)},'
        f'"limite_min_press":{int(data.min_press)},"limite_max_press":{int(data.max_press)},'
        f'"limite_min_alt":{int(data.min_alt)},"limite_max_alt":{int(data.max_alt)},'
        f'"hist_labels":[{labels}],'
        f'"hist_temp":{format_history(data.hist_temp)},'
        f'"hist_umid":{format_history(data.hist_umid)},'
        f'"hist_press":{format_history(data.hist_press)},'
        f'"hist_alt":{format_history(data.hist_alt)}}}'
    )


def apply_config(request_line: str, manager: SensorManager) -> Optional[str]:
    """Apply the first offset or limit pair found in the request.

    Offsets are tried first, then limit pairs, which need both the minimum and
    the maximum. Returns the name of the setting changed, or None.
    """
    for key, setter in _OFFSETS:
        position = request_line.find(key)
        if position >= 0:
            getattr(manager, setter)(_leading_float(request_line[position + len(key):]))
            return key[:-1]
    for name, setter in _LIMITS:
        min_key = f"limite_min_{name}="
        max_key = f"limite_max_{name}="
        min_pos = request_line.find(min_key)
        max_pos = request_line.find(max_key)
        if min_pos >= 0 and max_pos >= 0:
            getattr(manager, setter)(
                _leading_int(request_line[min_pos + len(min_key):]),
                _leading_int(request_line[max_pos + len(max_key):]),
            )
            return f"limits_{name}"
    return None


def _response(status: str, content_type: str, body: str) -> bytes:
    payload = body.encode("utf-8")
    head = (
        f"HTTP/1.1 {status}\r\nConnection: close\r\n"
        f"Content-Type: {content_type}\r\nContent-Length: {len(payload)}\r\n\r\n"
    )
    return head.encode("ascii") + payload


def build_response(request: Union[bytes, str], manager: SensorManager) -> bytes:
    """Answer one request; only its first 255 bytes are looked at."""
    if isinstance(request, str):
        request = request.encode("latin-1", errors="replace")
    text = request[:_REQUEST_LIMIT].decode("latin-1").split("\0", 1)[0]

    if text.startswith("GET / "):
        return _response("200 OK", "text/html", HTML_BODY)
    if text.startswith("GET /dados_sensores"):
        return _response("200 OK", "application/json", sensor_json(manager.data))
    if text.startswith("GET /config?"):
        apply_config(text, manager)
        return _response("200 OK", "text/plain", "OK")
    return _response("404 Not Found", "text/html", _NOT_FOUND_BODY)


class _Handler(socketserver.BaseRequestHandler):
    def handle(self) -> None:
        data = self.request.recv(_RECV_SIZE)
        if not data:
            return
        self.request.sendall(build_response(data, self.server.manager))


class _Server(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True
    manager: SensorManager


class StationHTTPServer:
    """Serves one request per connection, then closes it."""

    def __init__(self, manager: SensorManager, host: str = "0.0.0.0", port: int = 80) -> None:
        self.manager = manager
        self._server = _Server((host, port), _Handler)
        self._server.manager = manager
        self._running = False
        log.info("HTTP server listening on port %d", self.server_address[1])

    @property
    def server_address(self) -> tuple[str, int]:
        host, port = self._server.server_address[:2]
        return host, port

    def serve_forever(self) -> None:
        """Handle connections until :meth:`shutdown` is called."""
        self._running = True
        self._server.serve_forever(poll_interval=0.05)

    def shutdown(self) -> None:
        """Stop serving and release the listening socket."""
        if self._running:
            self._server.shutdown()
            self._running = False
        self._server.server_close()
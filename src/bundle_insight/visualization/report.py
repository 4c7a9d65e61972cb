"""Render a self-contained HTML report with an interactive treemap.

The report embeds all data as a JSON blob inside a ``<script>`` tag and
uses a pure-SVG treemap (zero external dependencies) so it can be opened
from any local file:// path or served statically. Output depends only on
the report, so the same report always renders to the same document.
"""

import json

from ..report.models import Report
from .treemap import build_treemap_data

TOP_INPUTS = 25


def render_html(report: Report, default_metric: str = "bytes") -> str:
    """Build the HTML document for ``report``.

    Parameters
    ----------
    report:
        The finished report.
    default_metric:
        ``bytes`` or ``gzip``; which size the treemap is coloured by first.
    """
    metrics = ["bytes"]
    if any(entry.gzip is not None for entry in report.inputs.values()):
        metrics.append("gzip")
    if default_metric not in metrics:
        default_metric = "bytes"

    # ── Largest attributed inputs ──────────────────────────────────
    owners = {e.belongs_to for e in report.inputs.values() if e.belongs_to is not None}
    largest = sorted(
        (entry for key, entry in report.inputs.items() if key not in owners),
        key=lambda entry: (-entry.bytes, entry.key),
    )[:TOP_INPUTS]

    data = {
        "treemap": {m: build_treemap_data(report.inputs, m) for m in metrics},
        "summary": {
            "asset_count": len(report.assets),
            "input_count": len(report.inputs),
            "total_bytes": report.total_bytes,
            "total_gzip": report.total_gzip,
            "warning_count": len(report.warnings),
            "unreachable_count": len(report.unreachable),
        },
        "assets": list(report.assets),
        "largest": [
            {
                "path": entry.key,
                "bytes": entry.bytes,
                "gzip": entry.gzip,
                "format": entry.format.value,
                "belongs_to": entry.belongs_to,
            }
            for entry in largest
        ],
        "warnings": [warning.to_dict() for warning in report.warnings],
        "unreachable": list(report.unreachable),
        "report": report.to_dict(),
        "metrics": metrics,
        "default_metric": default_metric,
    }

    # "</" would close the script element early.
    data_json = json.dumps(data, sort_keys=True).replace("</", "<\\/")
    return _build_html(data_json)


# ── Private helpers ──────────────────────────────────────────────────


def _build_html(data_json: str) -> str:
    """Build self-contained HTML with embedded visualisation code.

    The f-string uses {{ / }} to produce literal braces in the CSS and JS.
    """
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Bundle Insight Report</title>
<style>
:root {{ --bg: #f6f7f9; --panel: #ffffff; --line: #dde1e6; --text: #1f2328; --dim: #656d76;
         --esm: 37, 99, 235; --cjs: 234, 88, 12; --unknown: 100, 116, 139; --warn: #b45309; }}
* {{ box-sizing: border-box; }}
body {{ margin: 0; font: 14px/1.45 system-ui, -apple-system, "Segoe UI", sans-serif; background: var(--bg); color: var(--text); }}
header {{ padding: 20px 28px 12px; background: var(--panel); border-bottom: 1px solid var(--line); }}
header h1 {{ margin: 0 0 12px; font-size: 20px; font-weight: 600; }}
.cards {{ display: grid; grid-template-columns: repeat(auto-fill, minmax(140px, 1fr)); gap: 10px; }}
.card {{ border: 1px solid var(--line); border-radius: 6px; padding: 8px 12px; }}
.card b {{ display: block; font-size: 18px; }}
.card span {{ color: var(--dim); font-size: 12px; }}
.toolbar {{ display: flex; gap: 12px; align-items: center; padding: 12px 28px; flex-wrap: wrap; }}
.toolbar input, .toolbar select {{ font: inherit; padding: 5px 8px; border: 1px solid var(--line); border-radius: 4px; background: var(--panel); }}
.toolbar input {{ min-width: 260px; }}
.legend {{ display: flex; gap: 12px; margin-left: auto; color: var(--dim); font-size: 12px; }}
.legend i {{ display: inline-block; width: 10px; height: 10px; border-radius: 2px; margin-right: 4px; vertical-align: -1px; }}
#treemap {{ margin: 0 28px; height: 540px; background: var(--panel); border: 1px solid var(--line); border-radius: 6px; position: relative; overflow: hidden; }}
#treemap svg text {{ pointer-events: none; font-size: 11px; }}
#tip {{ position: fixed; display: none; background: var(--panel); border: 1px solid var(--line); border-radius: 6px; padding: 8px 10px; font-size: 12px; max-width: 380px; box-shadow: 0 4px 14px rgba(0,0,0,.12); z-index: 10; }}
#tip .path {{ font-weight: 600; word-break: break-all; margin-bottom: 4px; }}
main section {{ background: var(--panel); margin: 16px 28px; border: 1px solid var(--line); border-radius: 6px; padding: 14px 16px; }}
main h2 {{ margin: 0 0 10px; font-size: 15px; }}
table {{ width: 100%; border-collapse: collapse; font-size: 13px; }}
th, td {{ padding: 5px 8px; border-bottom: 1px solid var(--line); text-align: left; }}
th {{ color: var(--dim); font-weight: 500; }}
td.n {{ text-align: right; font-variant-numeric: tabular-nums; white-space: nowrap; }}
td.path {{ word-break: break-all; }}
.bar {{ height: 4px; background: rgba(var(--esm), .25); border-radius: 2px; }}
.bar div {{ height: 4px; background: rgb(var(--esm)); border-radius: 2px; }}
.warn {{ border-left: 3px solid var(--warn); padding: 4px 10px; margin: 6px 0; }}
.warn small {{ color: var(--warn); display: block; }}
.empty {{ color: var(--dim); }}
</style>
</head>
<body>
<header>
  <h1>Bundle Insight Report</h1>
  <div class="cards" id="cards"></div>
</header>
<div class="toolbar">
  <label>Size <select id="metric"></select></label>
  <input id="filter" type="search" placeholder="Filter inputs by path">
  <div class="legend" id="legend"></div>
</div>
<div id="treemap"></div>
<div id="tip"></div>
<main>
  <section><h2>Largest inputs</h2><div id="largest"></div></section>
  <section><h2>Assets</h2><div id="assets"></div></section>
  <section><h2>Warnings</h2><div id="warnings"></div></section>
  <section><h2>Not reachable from any asset</h2><div id="unreachable"></div></section>
</main>

<script id="report-data" type="application/json">{data_json}</script>
<script>
const DATA = JSON.parse(document.getElementById("report-data").textContent);
const FORMATS = ["esm", "cjs", "unknown"];
const state = {{ metric: DATA.default_metric, filter: "" }};

function size(n) {{
  if (n === null || n === undefined) return "-";
  if (n < 1024) return n + " B";
  if (n < 1048576) return (n / 1024).toFixed(2) + " KiB";
  return (n / 1048576).toFixed(2) + " MiB";
}}

function esc(value) {{
  return String(value).replace(/[&<>"']/g, function(c) {{
    return {{"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;"}}[c];
  }});
}}

function fill(format, pct, depthShade) {{
  var rgb = getComputedStyle(document.documentElement).getPropertyValue("--" + (FORMATS.indexOf(format) >= 0 ? format : "unknown"));
  return "rgba(" + rgb.trim() + "," + (0.35 + 0.6 * (pct || 0)) * depthShade + ")";
}}

// Cards and legend
(function() {{
  var s = DATA.summary;
  var cards = [
    [s.asset_count, "assets"],
    [s.input_count, "inputs"],
    [size(s.total_bytes), "total size"],
    [DATA.metrics.indexOf("gzip") >= 0 ? size(s.total_gzip) : "-", "gzip"],
    [s.warning_count, "warnings"],
    [s.unreachable_count, "unreachable"]
  ];
  document.getElementById("cards").innerHTML = cards.map(function(c) {{
    return '<div class="card"><b>' + esc(c[0]) + '</b><span>' + c[1] + '</span></div>';
  }}).join("");
  document.getElementById("legend").innerHTML = FORMATS.map(function(f) {{
    return '<span><i style="background:' + fill(f, 1, 1) + '"></i>' + f + '</span>';
  }}).join("");

  var select = document.getElementById("metric");
  DATA.metrics.forEach(function(m) {{
    var option = new Option(m, m, m === state.metric, m === state.metric);
    select.add(option);
  }});
  select.onchange = function() {{ state.metric = select.value; draw(); }};
  document.getElementById("filter").oninput = function(e) {{
    state.filter = e.target.value.toLowerCase();
    draw();
  }};
}})();

// Nested treemap: directories are laid out first, then their children inside.
function total(node) {{
  if (!node.children) {{
    if (state.filter && node.path.toLowerCase().indexOf(state.filter) < 0) return 0;
    return Math.max(1, node.signals[state.metric] || node.value || 1);
  }}
  node._total = node.children.reduce(function(sum, child) {{ return sum + total(child); }}, 0);
  return node._total;
}}

function slice(items, x, y, w, h, horizontal) {{
  var sum = items.reduce(function(s, it) {{ return s + it.weight; }}, 0);
  var offset = 0;
  return items.map(function(it) {{
    var part = sum > 0 ? it.weight / sum : 0;
    var box = horizontal
      ? {{ x: x + offset * w, y: y, w: part * w, h: h }}
      : {{ x: x, y: y + offset * h, w: w, h: part * h }};
    offset += part;
    return {{ item: it.node, box: box }};
  }});
}}

function layout(node, box, depth, out) {{
  var items = node.children
    .map(function(child) {{ return {{ node: child, weight: child.children ? child._total : total(child) }}; }})
    .filter(function(it) {{ return it.weight > 0; }})
    .sort(function(a, b) {{ return b.weight - a.weight; }});
  slice(items, box.x, box.y, box.w, box.h, box.w >= box.h).forEach(function(placed) {{
    if (placed.item.children) {{
      out.push({{ dir: placed.item, box: placed.box, depth: depth }});
      var pad = placed.box.w > 24 && placed.box.h > 30 ? 2 : 0;
      var header = pad ? 14 : 0;
      layout(placed.item, {{
        x: placed.box.x + pad, y: placed.box.y + header,
        w: Math.max(0, placed.box.w - 2 * pad), h: Math.max(0, placed.box.h - header - pad)
      }}, depth + 1, out);
    }} else {{
      out.push({{ leaf: placed.item, box: placed.box, depth: depth }});
    }}
  }});
  return out;
}}

function draw() {{
  var root = DATA.treemap[state.metric];
  var el = document.getElementById("treemap");
  var tip = document.getElementById("tip");
  el.innerHTML = "";
  if (!total(root)) {{
    el.innerHTML = '<p class="empty" style="padding:16px">Nothing to show.</p>';
    return;
  }}

  var ns = "http://www.w3.org/2000/svg";
  var svg = document.createElementNS(ns, "svg");
  svg.setAttribute("width", el.clientWidth);
  svg.setAttribute("height", el.clientHeight);

  layout(root, {{ x: 0, y: 0, w: el.clientWidth, h: el.clientHeight }}, 0, []).forEach(function(cell) {{
    var b = cell.box;
    var rect = document.createElementNS(ns, "rect");
    rect.setAttribute("x", b.x);
    rect.setAttribute("y", b.y);
    rect.setAttribute("width", Math.max(0, b.w));
    rect.setAttribute("height", Math.max(0, b.h));
    rect.setAttribute("stroke", "#fff");
    svg.appendChild(rect);

    var label = cell.dir ? cell.dir.name + "/" : cell.leaf.name;
    if (cell.dir) {{
      rect.setAttribute("fill", "rgba(0,0,0," + (0.04 + 0.02 * cell.depth) + ")");
    }} else {{
      var leaf = cell.leaf;
      rect.setAttribute("fill", fill(leaf.format, leaf.color_value, 1));
      rect.onmousemove = function(e) {{
        var lines = Object.keys(leaf.signals).map(function(k) {{ return k + ": " + size(leaf.signals[k]); }});
        lines.push("format: " + leaf.format);
        if (leaf.belongs_to) lines.push("from: " + leaf.belongs_to);
        tip.innerHTML = '<div class="path">' + esc(leaf.path) + '</div>' + lines.map(esc).join("<br>");
        tip.style.display = "block";
        tip.style.left = (e.clientX + 14) + "px";
        tip.style.top = (e.clientY + 14) + "px";
      }};
      rect.onmouseleave = function() {{ tip.style.display = "none"; }};
    }}

    if (b.w > 40 && b.h > 13) {{
      var text = document.createElementNS(ns, "text");
      text.setAttribute("x", b.x + 3);
      text.setAttribute("y", b.y + 11);
      text.setAttribute("fill", cell.dir ? "#656d76" : "#fff");
      var fit = Math.floor((b.w - 6) / 6.5);
      text.textContent = label.length > fit ? label.slice(0, Math.max(1, fit - 1)) + "\\u2026" : label;
      svg.appendChild(text);
    }}
  }});
  el.appendChild(svg);
}}

// Tables
(function() {{
  var largest = DATA.largest;
  var top = largest.length ? Math.max(1, largest[0].bytes) : 1;
  document.getElementById("largest").innerHTML = largest.length
    ? '<table><tr><th>Input</th><th>Format</th><th>From</th><th>Size</th><th>Gzip</th><th></th></tr>' +
      largest.map(function(item) {{
        return '<tr><td class="path">' + esc(item.path) + '</td><td>' + esc(item.format) + '</td>' +
          '<td class="path">' + esc(item.belongs_to || "") + '</td>' +
          '<td class="n">' + size(item.bytes) + '</td><td class="n">' + size(item.gzip) + '</td>' +
          '<td style="width:120px"><div class="bar"><div style="width:' + (100 * item.bytes / top).toFixed(1) + '%"></div></div></td></tr>';
      }}).join("") + '</table>'
    : '<p class="empty">No inputs recorded.</p>';

  var inputs = DATA.report.inputs;
  document.getElementById("assets").innerHTML = '<table>' + DATA.assets.map(function(a) {{
    var entry = inputs[a];
    return '<tr><td class="path">' + esc(a) + '</td><td class="n">' + (entry ? size(entry.bytes) : "-") + '</td></tr>';
  }}).join("") + '</table>';

  document.getElementById("warnings").innerHTML = DATA.warnings.length
    ? DATA.warnings.map(function(w) {{
        return '<div class="warn"><small>' + esc(w.kind) + '</small>' + esc(w.key) + ': ' + esc(w.message) + '</div>';
      }}).join("")
    : '<p class="empty">No warnings.</p>';

  document.getElementById("unreachable").innerHTML = DATA.unreachable.length
    ? DATA.unreachable.map(function(key) {{ return '<div class="path">' + esc(key) + '</div>'; }}).join("")
    : '<p class="empty">Every input is reachable.</p>';
}})();

draw();
window.addEventListener("resize", draw);
</script>
</body>
</html>
"""

"""Shared test fixtures for Bundle Insight tests."""

import base64
import json
from pathlib import Path

import pytest

# One generated line: 5 bytes from source 0, then 10 bytes from source 1.
GENERATED_LINE = "AAAAABBBBBBBBBB"
MAPPINGS = "AAAA,KCAA"


def make_source_map(sources, mappings=MAPPINGS, **extra) -> dict:
    data = {"version": 3, "sources": list(sources), "names": [], "mappings": mappings}
    data.update(extra)
    return data


def inline_url(source_map: dict) -> str:
    payload = base64.b64encode(json.dumps(source_map).encode("utf-8")).decode("ascii")
    return f"data:application/json;charset=utf-8;base64,{payload}"


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Project root with a ``dist`` directory holding one mapped bundle.

    Layout::

        dist/app.js       external map -> ../src/a.ts, ../src/b.ts
        dist/app.js.map
        dist/style.css    inline map -> ../styles/main.css
        dist/plain.js     no source map
    """
    dist = tmp_path / "dist"
    dist.mkdir()

    (dist / "app.js").write_text(
        GENERATED_LINE + "\n//# sourceMappingURL=app.js.map\n", encoding="utf-8"
    )
    (dist / "app.js.map").write_text(
        json.dumps(make_source_map(["../src/a.ts", "../src/b.ts"])), encoding="utf-8"
    )

    css_map = make_source_map(["../styles/main.css"], mappings="AAAA")
    (dist / "style.css").write_text(
        f"body{{color:red}}\n/*# sourceMappingURL={inline_url(css_map)} */\n",
        encoding="utf-8",
    )

    (dist / "plain.js").write_text("console.log('plain');\n", encoding="utf-8")
    return tmp_path


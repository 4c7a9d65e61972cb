"""Tests for report assembly, reachability and serialization."""

import json

import pytest

from bundle_insight.config import ReportConfig
from bundle_insight.exceptions import MissingOutputError, UnresolvedAttributionWarning
from bundle_insight.graph import ModuleEntry, ModuleGraph
from bundle_insight.paths import PathNormalizer
from bundle_insight.report import Report, build_report, find_reachable, serialize, write_report


@pytest.fixture
def graph():
    graph = ModuleGraph()
    graph.upsert("dist/app.js", bytes=100, format="esm", imports=["dist/chunk.js"])
    graph.upsert("src/a.ts", bytes=60, format="esm", belongs_to="dist/app.js")
    graph.upsert("src/b.ts", bytes=40, format="esm", belongs_to="dist/app.js")
    graph.upsert("dist/chunk.js", bytes=20, format="esm")
    graph.upsert("dist/orphan.js", bytes=5, format="cjs")
    return graph


@pytest.fixture
def normalizer():
    return PathNormalizer("/repo")


class TestFindReachable:
    def test_follows_imports_and_children(self, graph):
        entries = {entry.key: entry for entry in graph.entries()}
        assert find_reachable(entries, ["dist/app.js"]) == {
            "dist/app.js",
            "dist/chunk.js",
            "src/a.ts",
            "src/b.ts",
        }

    def test_virtual_root_keeps_owner(self, graph):
        entries = {entry.key: entry for entry in graph.entries()}
        assert "dist/app.js" in find_reachable(entries, ["src/a.ts"])

    def test_unknown_roots_and_imports_are_ignored(self):
        entries = {"a.js": ModuleEntry(key="a.js", imports=["missing.js"])}
        assert find_reachable(entries, ["a.js", "nope.js"]) == {"a.js"}

    def test_import_cycles_terminate(self):
        entries = {
            "a.js": ModuleEntry(key="a.js", imports=["b.js"]),
            "b.js": ModuleEntry(key="b.js", imports=["a.js"]),
        }
        assert find_reachable(entries, ["a.js"]) == {"a.js", "b.js"}


class TestBuildReport:
    def test_requires_assets(self, graph, normalizer):
        with pytest.raises(MissingOutputError, match="Could not detect output assets"):
            build_report([], graph, normalizer=normalizer)

    def test_assets_are_canonical_and_unique(self, graph, normalizer):
        report = build_report(
            ["/repo/dist/app.js", "/repo/dist/./app.js"], graph, normalizer=normalizer
        )
        assert report.assets == ("dist/app.js",)

    def test_flag_policy_lists_unreachable(self, graph, normalizer):
        config = ReportConfig(root="/repo", unreachable="flag")
        report = build_report(["/repo/dist/app.js"], graph, config, normalizer=normalizer)
        assert "dist/orphan.js" in report.inputs
        assert report.unreachable == ("dist/orphan.js",)

    def test_include_policy_keeps_silently(self, graph, normalizer):
        config = ReportConfig(root="/repo", unreachable="include")
        report = build_report(["/repo/dist/app.js"], graph, config, normalizer=normalizer)
        assert "dist/orphan.js" in report.inputs
        assert report.unreachable == ()

    def test_exclude_policy_drops(self, graph, normalizer):
        config = ReportConfig(root="/repo", unreachable="exclude")
        report = build_report(["/repo/dist/app.js"], graph, config, normalizer=normalizer)
        assert "dist/orphan.js" not in report.inputs
        assert report.unreachable == ()

    def test_outputs_mapping_adds_roots(self, graph, normalizer):
        report = build_report(
            ["/repo/dist/app.js"],
            graph,
            ReportConfig(root="/repo"),
            outputs={"/repo/dist/app.js": ["/repo/dist/orphan.js"]},
            normalizer=normalizer,
        )
        assert report.unreachable == ()

    def test_assets_outside_graph_treat_everything_as_reachable(self, graph, normalizer):
        report = build_report(["/repo/dist/other.css"], graph, normalizer=normalizer)
        assert report.unreachable == ()
        assert len(report.inputs) == 5

    def test_warnings_are_attached(self, graph, normalizer):
        warning = UnresolvedAttributionWarning("src/a.ts", "collision")
        report = build_report(["dist/app.js"], graph, warnings=[warning], normalizer=normalizer)
        assert report.warnings == (warning,)


class TestReportModel:
    def test_inputs_are_sorted_snapshots(self, graph):
        report = Report(assets=("dist/app.js",), inputs={e.key: e for e in graph.entries()})
        assert list(report.inputs) == sorted(report.inputs)
        graph.upsert("src/a.ts", bytes=1)
        assert report.inputs["src/a.ts"].bytes == 60

    def test_totals_count_compiled_modules_only(self, graph):
        report = Report(assets=("dist/app.js",), inputs={e.key: e for e in graph.entries()})
        assert report.total_bytes == 125
        assert report.total_gzip == 0

    def test_to_dict_omits_empty_sections(self):
        report = Report(assets=("a.js",), inputs={"a.js": ModuleEntry(key="a.js", bytes=3)})
        assert report.to_dict() == {
            "assets": ["a.js"],
            "inputs": {"a.js": {"bytes": 3, "format": "unknown", "imports": [], "belongsTo": None}},
            "warnings": [],
        }


class TestSerialize:
    def test_json_matches_report_shape(self, graph, normalizer):
        report = build_report(["dist/app.js"], graph, normalizer=normalizer)
        data = json.loads(serialize(report, "json"))
        assert data["assets"] == ["dist/app.js"]
        assert data["inputs"]["src/a.ts"] == {
            "bytes": 60,
            "format": "esm",
            "imports": [],
            "belongsTo": "dist/app.js",
        }
        assert data["unreachable"] == ["dist/orphan.js"]

    def test_json_is_deterministic(self, normalizer):
        def build(order):
            graph = ModuleGraph()
            for key in order:
                graph.upsert(key, bytes=len(key))
            return serialize(build_report(["b.js"], graph, normalizer=normalizer), "json")

        assert build(["a.js", "b.js", "c.js"]) == build(["c.js", "b.js", "a.js"])

    def test_html_embeds_escaped_data(self, normalizer):
        graph = ModuleGraph()
        graph.upsert("src/</script><b>x.js", bytes=10)
        html = serialize(build_report(["src/</script><b>x.js"], graph, normalizer=normalizer), "html")

        assert html.startswith("<!DOCTYPE html>")
        assert html.count("</script>") == 2
        assert "<\\/script><b>x.js" in html

    def test_html_is_deterministic(self, graph, normalizer):
        report = build_report(["dist/app.js"], graph, normalizer=normalizer)
        assert serialize(report, "html") == serialize(report, "html")

    def test_unknown_format(self, graph, normalizer):
        report = build_report(["dist/app.js"], graph, normalizer=normalizer)
        with pytest.raises(ValueError, match="Unknown formatter"):
            serialize(report, "xml")


class TestWriteReport:
    def test_writes_with_format_extension(self, graph, normalizer, tmp_path):
        report = build_report(["dist/app.js"], graph, normalizer=normalizer)
        out = write_report(report, ReportConfig(format="json", filename="stats"), output_dir=tmp_path)
        assert out == (tmp_path / "stats.json").resolve()
        assert json.loads(out.read_text(encoding="utf-8"))["assets"] == ["dist/app.js"]

    def test_explicit_path_wins(self, graph, normalizer, tmp_path):
        report = build_report(["dist/app.js"], graph, normalizer=normalizer)
        target = tmp_path / "nested" / "report.html"
        out = write_report(report, ReportConfig(), output_path=target)
        assert out == target.resolve()
        assert out.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")

    def test_open_launches_browser(self, graph, normalizer, tmp_path, monkeypatch):
        opened = []
        monkeypatch.setattr("webbrowser.open", opened.append)
        report = build_report(["dist/app.js"], graph, normalizer=normalizer)
        out = write_report(report, ReportConfig(open=True), output_dir=tmp_path)
        assert opened == [out.as_uri()]

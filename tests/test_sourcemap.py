"""Tests for source map decoding and loading."""

import json
from urllib.parse import quote

import pytest

from bundle_insight.sourcemap import (
    SourceMapError,
    SourceMapSources,
    decode_mappings,
    decode_vlq,
    find_source_mapping_url,
    load_code_and_map,
    mapped_weights,
    parse_source_map,
    read_source_map,
)
from bundle_insight.sourcemap.vlq import Segment

from conftest import GENERATED_LINE, MAPPINGS, make_source_map


class TestDecodeVlq:
    def test_zero(self):
        assert decode_vlq("A") == [0]

    def test_positive_and_negative(self):
        assert decode_vlq("C") == [1]
        assert decode_vlq("D") == [-1]

    def test_continuation(self):
        assert decode_vlq("gB") == [16]

    def test_multiple_values(self):
        assert decode_vlq("AAAA") == [0, 0, 0, 0]
        assert decode_vlq("KCAA") == [5, 1, 0, 0]

    def test_invalid_character(self):
        with pytest.raises(ValueError, match="Invalid base64"):
            decode_vlq("A!")

    def test_truncated(self):
        with pytest.raises(ValueError, match="Truncated"):
            decode_vlq("g")


class TestDecodeMappings:
    def test_segments_per_line(self):
        lines = decode_mappings("AAAA,KCAA;AAAA")
        assert lines[0] == [Segment(0, 0), Segment(5, 1)]
        # Source index is relative across lines.
        assert lines[1] == [Segment(0, 1)]

    def test_empty_lines_and_unmapped_segments(self):
        lines = decode_mappings(";;K")
        assert lines == [[], [], [Segment(5, None)]]

    def test_invalid_field_count(self):
        with pytest.raises(ValueError, match="fields"):
            decode_mappings("AA")


class TestMappedWeights:
    def test_bytes_per_source(self):
        assert mapped_weights(GENERATED_LINE, MAPPINGS, 2) == [5, 10]

    def test_running_state_across_lines(self):
        code = GENERATED_LINE + "\nCCC"
        assert mapped_weights(code, "AAAA,KCAA;AAAA", 2) == [5, 13]

    def test_multibyte_characters_count_as_utf8(self):
        assert mapped_weights("é", "AAAA", 1) == [2]

    def test_out_of_range_sources_are_ignored(self):
        assert mapped_weights("abc", "AEAA", 1) == [0]

    def test_mappings_longer_than_code(self):
        assert mapped_weights("ab", "AAAA;AAAA;AAAA", 1) == [2]

    def test_crlf_terminators_count_towards_no_source(self):
        code = GENERATED_LINE + "\r\nCCC\r\n"
        assert mapped_weights(code, "AAAA,KCAA;AAAA", 2) == [5, 13]


class TestFindSourceMappingUrl:
    def test_js_comment(self):
        assert find_source_mapping_url("x\n//# sourceMappingURL=app.js.map\n") == "app.js.map"

    def test_css_comment(self):
        assert find_source_mapping_url("a{}\n/*# sourceMappingURL=a.css.map */") == "a.css.map"

    def test_last_annotation_wins(self):
        code = "//# sourceMappingURL=old.map\ncode\n//@ sourceMappingURL=new.map"
        assert find_source_mapping_url(code) == "new.map"

    def test_no_annotation(self):
        assert find_source_mapping_url("console.log(1)") is None


class TestParseSourceMap:
    def test_accepts_dict_str_and_bytes(self):
        data = make_source_map(["a.ts"])
        assert parse_source_map(data)["sources"] == ["a.ts"]
        assert parse_source_map(json.dumps(data))["sources"] == ["a.ts"]
        assert parse_source_map(json.dumps(data).encode())["sources"] == ["a.ts"]

    def test_strips_xssi_prefix(self):
        payload = ")]}'\n" + json.dumps(make_source_map(["a.ts"]))
        assert parse_source_map(payload)["sources"] == ["a.ts"]

    @pytest.mark.parametrize(
        "payload",
        ["not json", "[]", json.dumps({"version": 3}), json.dumps({"sources": [1]})],
    )
    def test_rejects_malformed(self, payload):
        with pytest.raises(SourceMapError):
            parse_source_map(payload)

    def test_index_map_sections(self):
        data = {
            "version": 3,
            "sections": [
                {"offset": {"line": 0, "column": 0}, "map": make_source_map(["a.ts"])},
                {
                    "offset": {"line": 1, "column": 0},
                    "map": make_source_map(["b.ts"], sourceRoot="lib"),
                },
            ],
        }
        assert parse_source_map(data)["sources"] == ["a.ts", "lib/b.ts"]


class TestReadSourceMap:
    def test_sources_and_weights(self):
        record = read_source_map(make_source_map(["a.ts", "b.ts"]), code=GENERATED_LINE)
        assert record == SourceMapSources(sources=["a.ts", "b.ts"], weights=[5, 10])

    def test_without_code_no_weights(self):
        assert read_source_map(make_source_map(["a.ts", "b.ts"])).weights is None

    def test_source_root_combines_with_map_location(self):
        record = read_source_map(make_source_map(["a.ts"], sourceRoot="src"), source_root="../maps")
        assert record.source_root == "../maps/src"

    def test_null_sources_keep_alignment(self):
        record = read_source_map(make_source_map([None, "b.ts"]), code=GENERATED_LINE)
        assert record.sources == ["", "b.ts"]
        assert record.weights == [5, 10]

    def test_invalid_mappings(self):
        with pytest.raises(SourceMapError, match="Invalid mappings"):
            read_source_map(make_source_map(["a.ts"], mappings="!!"), code="abc")

    def test_weights_must_align(self):
        with pytest.raises(ValueError):
            SourceMapSources(sources=["a.ts"], weights=[1, 2])


class TestLoadCodeAndMap:
    def test_external_map(self, project):
        loaded = load_code_and_map(project / "dist" / "app.js")
        assert loaded.map_payload is not None
        assert loaded.source_root is None
        assert parse_source_map(loaded.map_payload)["sources"] == ["../src/a.ts", "../src/b.ts"]

    def test_inline_map(self, project):
        loaded = load_code_and_map(project / "dist" / "style.css")
        assert parse_source_map(loaded.map_payload)["sources"] == ["../styles/main.css"]

    def test_no_map(self, project):
        loaded = load_code_and_map(project / "dist" / "plain.js")
        assert loaded.map_payload is None
        assert loaded.error is None
        assert loaded.code == b"console.log('plain');\n"

    def test_falls_back_to_adjacent_map_file(self, tmp_path):
        (tmp_path / "x.js").write_text("x\n", encoding="utf-8")
        (tmp_path / "x.js.map").write_text(json.dumps(make_source_map(["x.ts"])), encoding="utf-8")
        assert load_code_and_map(tmp_path / "x.js").map_payload is not None

    def test_map_in_other_directory_sets_source_root(self, tmp_path):
        (tmp_path / "dist").mkdir()
        (tmp_path / "maps").mkdir()
        (tmp_path / "dist" / "x.js").write_text(
            "x\n//# sourceMappingURL=../maps/x.js.map\n", encoding="utf-8"
        )
        (tmp_path / "maps" / "x.js.map").write_text(
            json.dumps(make_source_map(["x.ts"])), encoding="utf-8"
        )
        assert load_code_and_map(tmp_path / "dist" / "x.js").source_root == "../maps"

    def test_broken_data_url(self, tmp_path):
        (tmp_path / "x.js").write_text(
            "x\n//# sourceMappingURL=data:application/json;base64,@@@\n", encoding="utf-8"
        )
        loaded = load_code_and_map(tmp_path / "x.js")
        assert loaded.map_payload is None
        assert "base64" in loaded.error

    def test_url_encoded_data_url(self, tmp_path):
        url = "data:application/json," + quote(json.dumps(make_source_map(["x.ts"])))
        (tmp_path / "x.js").write_text(f"x\n//# sourceMappingURL={url}\n", encoding="utf-8")
        loaded = load_code_and_map(tmp_path / "x.js")
        assert parse_source_map(loaded.map_payload)["sources"] == ["x.ts"]

# ============================================================================
# tests/test_svg_bubble.py
# Word wrap, bubble composition and data URIs
# ============================================================================

import xml.etree.ElementTree as ET

import pytest

from sigil_engine import build_sigil_element, derive_sigil_params, new_drawing
from svg_bubble import compose_bubble, from_embeddable_uri, to_embeddable_uri, wrap_text
from swirl_engine import derive_ornament_params

SVG_NS = "{http://www.w3.org/2000/svg}"


@pytest.fixture
def ornament(sender, receiver):
    return derive_ornament_params(sender, receiver, 0, 73)


def _texts(svg):
    root = ET.fromstring(svg)
    return [t.text for t in root.iter(f"{SVG_NS}text")]


class TestWrapText:
    def test_scenario(self):
        assert wrap_text("hello world this is a test message", 10, 10) == [
            "hello", "world this", "is a test", "message",
        ]

    def test_long_word_is_cut(self):
        assert wrap_text("a " + "x" * 50, 42) == ["a", "x" * 42]

    def test_max_lines(self):
        lines = wrap_text(" ".join(["word"] * 100), 10, 3)
        assert lines == ["word word", "word word", "word word"]

    def test_only_first_256_characters(self):
        lines = wrap_text("abcd " * 100, 42, 100)
        assert sum(len(line) for line in lines) + len(lines) - 1 <= 256

    def test_blank(self):
        assert wrap_text("   ") == []
        assert wrap_text(None) == []

    def test_xml_illegal_characters_dropped(self):
        assert wrap_text("hi \x07 there\x00") == ["hi there"]


class TestCompose:
    def test_lines_and_code_present(self, ornament):
        svg = compose_bubble(["hello", "world"], "Y00D073", ornament)
        texts = _texts(svg)
        assert texts[:2] == ["hello", "world"]
        assert "Y00D073" in texts

    def test_empty_placeholder(self, ornament):
        assert "(empty message)" in _texts(compose_bubble([], "Y00D001", ornament))

    def test_markup_is_escaped(self, ornament):
        svg = compose_bubble(['<script>"x"</script>'], "Y00D001", ornament)
        assert "<script>" not in svg
        assert _texts(svg)[0] == '<script>"x"</script>'

    def test_canvas_height(self, ornament):
        root = ET.fromstring(compose_bubble(["one line"], "Y00D001", ornament))
        assert root.get("width") == "600"
        assert root.get("height") == "366"

    def test_canvas_grows_with_lines(self, ornament):
        short = ET.fromstring(compose_bubble(["x"], "Y00D001", ornament))
        tall = ET.fromstring(compose_bubble(["x"] * 10, "Y00D001", ornament))
        assert int(tall.get("height")) > int(short.get("height"))

    def test_sigil_extends_canvas(self, ornament, sender):
        svg = compose_bubble(["hi"], "Y00D001", ornament, derive_sigil_params(sender))
        root = ET.fromstring(svg)
        assert root.get("height") == "414"
        nested = root.findall(f"{SVG_NS}svg")
        assert len(nested) == 1
        assert nested[0].get("width") == "64"

    def test_prebuilt_sigil_fragment_is_repositioned(self, ornament, sender):
        fragment = build_sigil_element(derive_sigil_params(sender), dwg=new_drawing(64, 64))
        root = ET.fromstring(compose_bubble(["hi"], "Y00D001", ornament, fragment))
        nested = root.find(f"{SVG_NS}svg")
        assert nested.get("x") == "268.0"
        assert nested.get("y") == "326"

    def test_prebuilt_sigil_fragment_left_untouched(self, ornament, sender):
        fragment = build_sigil_element(derive_sigil_params(sender), insert=(5, 7), dwg=new_drawing(64, 64))
        before = dict(fragment.attribs)
        first = ET.fromstring(compose_bubble(["hi"], "Y00D001", ornament, fragment))
        second = ET.fromstring(compose_bubble(["a", "b", "c", "d", "e"], "Y00D001", ornament, fragment))
        assert fragment.attribs == before
        assert first.find(f"{SVG_NS}svg").get("y") == "326"
        assert second.find(f"{SVG_NS}svg").get("y") != "326"

    def test_control_characters_stay_well_formed(self, ornament):
        svg = compose_bubble(["bell\x07", "\x1b[0m"], "Y00D001", ornament)
        assert _texts(svg)[:2] == ["bell", "[0m"]

    def test_ornament_row(self, ornament):
        root = ET.fromstring(compose_bubble(["hi"], "Y00D001", ornament))
        group = root.find(f"{SVG_NS}g")
        assert group.get("stroke") == "#0ea5e9"
        assert len(group.findall(f"{SVG_NS}path")) == ornament.layers * 2

    def test_deterministic(self, ornament, sender):
        sigil = derive_sigil_params(sender)
        assert compose_bubble(["a"], "Y00D002", ornament, sigil) == compose_bubble(["a"], "Y00D002", ornament, sigil)


class TestDataUri:
    def test_prefix_and_quotes(self):
        uri = to_embeddable_uri("<svg a=\"b\">'x' & ü</svg>")
        assert uri.startswith("data:image/svg+xml,")
        body = uri[len("data:image/svg+xml,"):]
        assert '"' not in body and "'" not in body
        assert "%22" in body and "%27" in body
        assert "%C3%BC" in body

    def test_unreserved_characters_kept(self):
        assert to_embeddable_uri("a-b_c.d!e~f*g(h)") == "data:image/svg+xml,a-b_c.d!e~f*g(h)"

    def test_round_trip(self, ornament):
        svg = compose_bubble(["Ahoj 😀"], "Y00D001", ornament)
        assert from_embeddable_uri(to_embeddable_uri(svg)) == svg

    def test_base64_variant(self):
        assert from_embeddable_uri("data:image/svg+xml;base64,PHN2Zy8+") == "<svg/>"

    def test_not_a_data_uri(self):
        assert from_embeddable_uri("https://example.com/a.svg") is None

import pytest

from pagetrans.errors import ElementNotFound
from pagetrans.translation.extractor import Fragment, extract_fragments, fragment_texts, line_offsets

from conftest import SCENARIO_MARKUP, SCENARIO_SELECTORS


class TestExtractFragments:

    def test_scenario_page(self):
        fragments = extract_fragments(SCENARIO_MARKUP, SCENARIO_SELECTORS)
        assert fragment_texts(fragments) == ["Home", "Welcome", "Body text"]
        assert [f.selector for f in fragments] == SCENARIO_SELECTORS

    def test_order_follows_selectors_not_document(self):
        fragments = extract_fragments(SCENARIO_MARKUP, ["p", "title"])
        assert fragment_texts(fragments) == ["Body text", "Home"]

    def test_first_match_only(self):
        markup = "<p>First</p><p>Second</p>"
        fragments = extract_fragments(markup, ["p"])
        assert fragment_texts(fragments) == ["First"]

    def test_inner_markup_is_kept(self):
        markup = '<ul class="nav"><li><a href="/">Home</a></li></ul>'
        fragments = extract_fragments(markup, ["ul"])
        assert fragments[0].text == '<li><a href="/">Home</a></li>'
        assert fragments[0].tag_name == "ul"

    def test_records_source_position(self):
        markup = "<html>\n<head><title>Home</title></head>\n<body><h1>Hi</h1></body></html>"
        title, h1 = extract_fragments(markup, ["title", "h1"])
        assert (title.sourceline, title.sourcepos) == (2, 6)
        assert (h1.sourceline, h1.sourcepos) == (3, 6)

    def test_same_selector_twice_yields_same_text(self):
        fragments = extract_fragments(SCENARIO_MARKUP, ["h1", "h1"])
        assert fragment_texts(fragments) == ["Welcome", "Welcome"]

    def test_empty_element(self):
        fragments = extract_fragments("<p></p>", ["p"])
        assert fragments == [Fragment(selector="p", text="", tag_name="p", sourceline=1, sourcepos=0, start=3, end=3)]


class TestRawInnerMarkup:

    @pytest.mark.parametrize("inner", [
        "Hello&nbsp;world",
        "Hello<br>world",
        "Tom &amp; Jerry&#39;s",
        "<a href='/'>single quoted</a>",
        "<img src=\"x.png\"/>caption",
    ])
    def test_text_is_sliced_verbatim(self, inner):
        markup = f"<html><body><h1>{inner}</h1></body></html>"
        assert fragment_texts(extract_fragments(markup, ["h1"])) == [inner]

    def test_span_points_at_text(self):
        markup = "<div>\n  <p class='a>b'>Text</p></div>"
        fragment = extract_fragments(markup, ["p"])[0]
        assert markup[fragment.start:fragment.end] == fragment.text == "Text"

    def test_nested_same_name(self):
        markup = "<div id=\"outer\"><div>inner</div>tail</div><p>x</p>"
        assert fragment_texts(extract_fragments(markup, ["#outer"])) == ["<div>inner</div>tail"]

    def test_unclosed_children_end_with_parent(self):
        markup = "<ul><li>One<li>Two</ul><p>After</p>"
        assert fragment_texts(extract_fragments(markup, ["ul"])) == ["<li>One<li>Two"]

    def test_unclosed_element_ends_at_ancestor_close(self):
        markup = "<div><p>Body text</div><footer>F</footer>"
        assert fragment_texts(extract_fragments(markup, ["p"])) == ["Body text"]

    def test_comment_and_script_are_skipped(self):
        markup = "<p>a<!-- </p> --><script>var s = '</p>';</script>b</p>"
        assert fragment_texts(extract_fragments(markup, ["p"])) == [
            "a<!-- </p> --><script>var s = '</p>';</script>b"
        ]

    def test_title_content_is_raw(self):
        markup = "<title>A &amp; B</title><h1>x</h1>"
        assert fragment_texts(extract_fragments(markup, ["title"])) == ["A &amp; B"]

    def test_line_offsets(self):
        assert line_offsets("ab\ncd\n") == [0, 3, 6]


class TestExtractFailures:

    def test_missing_element_is_hard_failure(self):
        with pytest.raises(ElementNotFound) as exc_info:
            extract_fragments(SCENARIO_MARKUP, ["title", "footer", "p"])
        assert exc_info.value.selector == "footer"
        assert exc_info.value.code == "element_not_found"
        assert exc_info.value.details["selector"] == "footer"

    def test_invalid_selector(self):
        with pytest.raises(ElementNotFound) as exc_info:
            extract_fragments(SCENARIO_MARKUP, ["p["])
        assert exc_info.value.selector == "p["
        assert "reason" in exc_info.value.details

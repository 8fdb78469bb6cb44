"""Tests for the website markdown → Discord embed transcoder."""

import copy

import pytest

from gecko.media.models import Embed, EmbedAuthor, EmbedFooter
from gecko.media.transcoder import (
    BASE_URL,
    DESCRIPTION_LIMIT,
    convert_headers,
    convert_iframes,
    extract_image,
    highlight_to_bold,
    strip_icons,
    transcode,
    truncate_description,
)

URL = "https://geco.ethz.ch/news/7"


def _embed(description: str, **kwargs) -> Embed:
    kwargs.setdefault("title", "Title")
    kwargs.setdefault("url", URL)
    return Embed(description=description, **kwargs)


# === Headers ===

class TestHeaders:
    def test_h1_bold_underline(self):
        """Test that a level 1 heading becomes bold and underlined."""
        assert convert_headers("# Title\nbody") == "**__Title__**\nbody"

    def test_h2_underline(self):
        """Test that a level 2 heading becomes underlined."""
        assert convert_headers("## Sub\ntext") == "__Sub__\ntext"

    def test_deep_heading_at_end(self):
        """Test a deeper heading on the last line."""
        assert convert_headers("before\n### Deep") == "before\n__Deep__\n"

    def test_multiple_headings(self):
        """Test that every heading is converted."""
        assert convert_headers("# A\n## B\n") == "**__A__**\n__B__\n"

    def test_crlf_line_ending(self):
        """Test that CRLF line endings are consumed with the heading."""
        assert convert_headers("# A\r\nx") == "**__A__**\nx"

    def test_no_headings_untouched(self):
        """Test that text without headings is unchanged."""
        text = "plain text\nwith lines"
        assert convert_headers(text) == text

    def test_already_converted_is_stable(self):
        """Test that converting twice changes nothing more."""
        once = convert_headers("# A\n## B\nrest")
        assert convert_headers(once) == once


# === Images ===

class TestImages:
    def test_first_image_extracted(self):
        """Test that the image is removed and its URL returned."""
        text, url = extract_image("![x](http://img)rest")
        assert url == "http://img"
        assert text == "rest"

    def test_no_image(self):
        """Test that text without images is unchanged."""
        text, url = extract_image("no images [link](http://a)")
        assert url is None
        assert text == "no images [link](http://a)"

    def test_only_first_image_used(self):
        """Test that every image is removed but only the first URL kept."""
        text, url = extract_image("![a](http://one) text ![b](http://two)")
        assert url == "http://one"
        assert text == " text "

    def test_nested_image_link_unwrapped(self):
        """Test that a linked image becomes a link labelled with its alt text."""
        text, url = extract_image("[![logo](http://img/a.png)](http://link)")
        assert url == "http://img/a.png"
        assert text == "[logo](http://link)"

    def test_nested_image_without_alt_becomes_bare_url(self):
        """Test that a linked image without alt text becomes the bare link."""
        text, _ = extract_image("[![](http://img)](http://link)")
        assert text == "http://link"

    def test_empty_link_target_removed(self):
        """Test that links without a target are removed."""
        text, _ = extract_image("see [here]( ) now")
        assert text == "see  now"

    def test_empty_link_label_becomes_url(self):
        """Test that links without a label become their URL."""
        text, _ = extract_image("go to [](http://x) or [ ](http://y)")
        assert text == "go to http://x or http://y"


# === Highlighting ===

class TestHighlight:
    def test_simple_span(self):
        """Test a single highlighted span."""
        assert highlight_to_bold("a ==bold== b") == "a **bold** b"

    def test_unclosed_left_alone(self):
        """Test that an opening pair without a close is kept."""
        assert highlight_to_bold("a ==unclosed") == "a ==unclosed"

    def test_two_spans(self):
        """Test two spans in a row."""
        assert highlight_to_bold("==a== ==b==") == "**a** **b**"

    def test_second_span_unclosed(self):
        """Test that only the closed span is converted."""
        assert highlight_to_bold("a ==b== c ==d") == "a **b** c ==d"

    def test_single_equals_ignored(self):
        """Test that single '=' characters are not delimiters."""
        assert highlight_to_bold("x = 1, y = 2") == "x = 1, y = 2"

    def test_triple_equals_does_not_close(self):
        """Test that '===' doesn't open and close a span at once."""
        assert highlight_to_bold("===") == "==="

    def test_empty_span(self):
        """Test that '====' is an empty span."""
        assert highlight_to_bold("====") == "****"

    def test_span_across_lines(self):
        """Test a span over a line break."""
        assert highlight_to_bold("==one\ntwo==") == "**one\ntwo**"

    def test_empty_string(self):
        """Test the empty string."""
        assert highlight_to_bold("") == ""


# === Icons / iframes ===

class TestIcons:
    def test_icons_removed(self):
        """Test that icon tokens are removed."""
        assert strip_icons("Hi {{fa-star}} there{{x}}") == "Hi  there"

    def test_empty_braces_kept(self):
        """Test that empty double braces are not an icon."""
        assert strip_icons("{{}}") == "{{}}"


class TestIframes:
    def test_youtube_watch(self):
        """Test a youtube.com watch URL."""
        text = "{iframe}(https://www.youtube.com/watch?v=dQw4w9WgXcQ)"
        assert convert_iframes(text) == "[Video](https://www.youtube.com/watch?v=dQw4w9WgXcQ)"

    def test_youtube_short_host(self):
        """Test a youtu.be URL."""
        assert convert_iframes("{iframe}(https://youtu.be/dQw4w9WgXcQ)") == "[Video](https://youtu.be/dQw4w9WgXcQ)"

    def test_extra_query_parameters_dropped(self):
        """Test that the link keeps only the video id."""
        text = "{iframe}(https://youtube.com/watch?v=dQw4w9WgXcQ&t=10)"
        assert convert_iframes(text) == "[Video](https://youtube.com/watch?v=dQw4w9WgXcQ)"

    def test_video_id_capped_at_eleven_chars(self):
        """Test that video ids are at most eleven characters."""
        assert convert_iframes("{iframe}(https://youtu.be/abcdefghijklmnop)") == "[Video](https://youtu.be/abcdefghijk)"

    def test_empty_iframe_removed(self):
        """Test that an iframe without URL is removed."""
        assert convert_iframes("a{iframe}()b") == "ab"

    def test_map_iframe_removed(self):
        """Test that non-YouTube iframes are removed."""
        assert convert_iframes("Map: {iframe}(https://maps.google.com/?q=ETH)") == "Map: "

    def test_multiple_iframes(self):
        """Test that every iframe is handled."""
        text = "{iframe}(https://youtu.be/abc) and {iframe}(https://example.com)"
        assert convert_iframes(text) == "[Video](https://youtu.be/abc) and "


# === Length ===

class TestTruncation:
    def test_short_untouched(self):
        """Test that a short description is unchanged."""
        assert truncate_description("short", URL, 100) == "short"

    def test_exactly_at_limit_untouched(self):
        """Test that a description at the limit is unchanged."""
        text = "x" * 100
        assert truncate_description(text, URL, 100) == text

    def test_long_cut_to_exact_limit(self):
        """Test that a long description is cut to the limit with a read-more link."""
        suffix = f"...\n\n[Read more]({URL})"
        result = truncate_description("y" * 500, URL, 100)
        assert len(result) == 100
        assert result.endswith(suffix)
        assert result == "y" * (100 - len(suffix)) + suffix

    @pytest.mark.parametrize("max_length", [0, 5, 20])
    def test_limit_shorter_than_link(self, max_length):
        """Test that a limit shorter than the read-more link is still respected."""
        result = truncate_description("y" * 500, URL, max_length)
        assert len(result) == max_length
        assert "y" not in result

    def test_transcode_enforces_default_limit(self):
        """Test that transcode applies the Discord description limit."""
        result = transcode(_embed("z" * (DESCRIPTION_LIMIT + 10)))
        assert len(result.description) == DESCRIPTION_LIMIT
        assert result.description.endswith(f"[Read more]({URL})")


# === Full pipeline ===

class TestTranscode:
    def test_image_becomes_embed_image(self):
        """Test that the first image moves into the embed image."""
        result = transcode(_embed("![x](http://img)rest"))
        assert result.image is not None
        assert result.image.url == "http://img"
        assert result.description == "rest"

    def test_no_image_leaves_image_unset(self):
        """Test that no image block is added without an image."""
        assert transcode(_embed("text")).image is None

    def test_rules_combined(self):
        """Test all description rules applied together."""
        raw = "# News\n==Important== {{fa-bell}}\n{iframe}(https://youtu.be/dQw4w9WgXcQ)\n"
        result = transcode(_embed(raw))
        assert result.description == (
            "**__News__**\n**Important** \n[Video](https://youtu.be/dQw4w9WgXcQ)"
        )

    def test_author_icon_made_absolute(self):
        """Test that a relative author icon gets the site origin."""
        embed = _embed("x", author=EmbedAuthor(name="Board", url="https://geco.ethz.ch/about", icon_url="/media/a.png"))
        result = transcode(embed)
        assert result.author.icon_url == BASE_URL + "/media/a.png"

    def test_custom_base_url(self):
        """Test that the author icon origin can be configured."""
        embed = _embed("x", author=EmbedAuthor(name="Board", icon_url="/a.png"))
        assert transcode(embed, base_url="https://example.org").author.icon_url == "https://example.org/a.png"

    def test_author_without_icon(self):
        """Test that a missing author icon stays missing."""
        embed = _embed("x", author=EmbedAuthor(name="Board"))
        assert transcode(embed).author.icon_url is None

    def test_fields_trimmed(self):
        """Test that every text field is stripped."""
        embed = Embed(
            title="  Title  ",
            description="  body \n",
            url=f" {URL} ",
            author=EmbedAuthor(name=" Board ", url=" https://geco.ethz.ch ", icon_url="/a.png "),
            footer=EmbedFooter(text=" footer "),
        )
        result = transcode(embed)
        assert result.title == "Title"
        assert result.description == "body"
        assert result.url == URL
        assert result.author.name == "Board"
        assert result.author.url == "https://geco.ethz.ch"
        assert result.author.icon_url == BASE_URL + "/a.png"
        assert result.footer.text == "footer"

    def test_image_url_trimmed(self):
        """Test that the extracted image URL is stripped."""
        assert transcode(_embed("![x]( http://img )")).image.url == "http://img"

    def test_missing_description_becomes_empty(self):
        """Test that a missing description becomes an empty string."""
        assert transcode(_embed(None)).description == ""

    def test_input_not_modified(self):
        """Test that transcode works on a copy."""
        embed = _embed("# H\n![x](http://img)", author=EmbedAuthor(name="A", icon_url="/a.png"))
        before = copy.deepcopy(embed)
        transcode(embed)
        assert embed == before

    def test_deterministic(self):
        """Test that the same input gives the same output."""
        embed = _embed("# H\n==x== ![i](http://img)")
        assert transcode(embed) == transcode(embed)

    @pytest.mark.parametrize("description", ["[unclosed link(", "![broken](", "{iframe}(", "{{", "# "])
    def test_malformed_markup_does_not_raise(self, description):
        """Test that malformed markup degrades instead of raising."""
        assert isinstance(transcode(_embed(description)).description, str)

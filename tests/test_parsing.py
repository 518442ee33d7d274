import json

import pytest

from fastfood_mcp.app.core.parsing import parse_json_text, strip_json_extensions


def test_plain_json_passes_through():
    text = '{"a": [1, 2, 3], "b": {"c": null}}'
    assert strip_json_extensions(text) == text


def test_comments_are_removed():
    text = """
    {
      // line comment
      "a": 1, /* inline */ "b": 2
      /* block
         spanning lines */
    }
    """
    assert parse_json_text(text) == {"a": 1, "b": 2}


def test_trailing_commas_are_dropped():
    assert parse_json_text('{"a": [1, 2, ], "b": {"c": 3,},}') == {"a": [1, 2], "b": {"c": 3}}


def test_trailing_comma_before_comment_and_close():
    assert parse_json_text('[1, 2, // last\n]') == [1, 2]


def test_string_contents_are_untouched():
    text = '{"url": "https://example.com/a", "note": "a, }", "esc": "quote \\" // not a comment"}'
    assert parse_json_text(text) == {
        "url": "https://example.com/a",
        "note": "a, }",
        "esc": 'quote " // not a comment',
    }


def test_byte_order_mark_is_ignored():
    assert parse_json_text('\ufeff{"a": 1}') == {"a": 1}


@pytest.mark.parametrize("text", ['{"a": 1', '{"a": 1 /* open', "", "{a: 1}"])
def test_malformed_text_raises_decode_error(text):
    with pytest.raises(json.JSONDecodeError):
        parse_json_text(text)

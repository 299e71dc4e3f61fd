import logging
import time

import pytest

from dtext.dtext import parse_dtext, parse_inline
from dtext.errors import DTextError, NestingError


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("[quote][b]unterminated", "<blockquote><p><strong>unterminated</strong></p></blockquote>"),
        ("[b]unclosed", "<p><strong>unclosed</strong></p>"),
        ("[b]x\n\ny[/b]", "<p><strong>x</strong></p><p>y[/b]</p>"),
        ("[b]a[i]b[/b]c[/i]", "<p><strong>a<em>b</em>c</strong></p>"),
        ("[b]x[/i]", "<p><strong>x</strong></p>"),
        ("h1. [b]title\nbody", "<h1><strong>title</strong></h1><p>body</p>"),
        ("* [i]item\n* next", "<ul><li><em>item</em></li><li>next</li></ul>"),
        ("[spoiler]\n[b]x", '<div class="spoiler"><p><strong>x</strong></p></div>'),
    ],
)
def test_unclosed_element(data: str, expected: str):
    assert parse_dtext(data).html == expected


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("plain [/b] text", "<p>plain [/b] text</p>"),
        ("[/quote]", "<p>[/quote]</p>"),
        ("text [/section]", "<p>text [/section]</p>"),
        ("[/spoiler]", "<p>[/spoiler]</p>"),
        ("a [/tn]", "<p>a [/tn]</p>"),
        ("[/color]", "<p>[/color]</p>"),
    ],
)
def test_stray_close(data: str, expected: str):
    result = parse_dtext(data)
    assert result.html == expected
    assert result.stray_closes == 1


def test_stray_close_is_logged(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.DEBUG, logger="dtext")
    parse_dtext("plain [/b] text")
    assert "stray close: [/b]" in caplog.text


@pytest.mark.parametrize(
    "data",
    [
        "[quote]" * 600,
        "[spoiler]" * 600,
        "[b]" * 600,
        "a " + "[i]" * 600,
        "* " + "[s]" * 600,
    ],
)
def test_too_deep_nesting(data: str, caplog: pytest.LogCaptureFixture):
    with pytest.raises(DTextError) as excinfo:
        parse_dtext(data)
    assert isinstance(excinfo.value, NestingError)
    assert "too many nested elements" in str(excinfo.value)
    assert "too many nested" in caplog.text


def test_too_deep_nesting_inline():
    with pytest.raises(NestingError):
        parse_inline("[u]" * 600)


def test_nesting_below_limit():
    data = "[quote]" * 100 + "x"
    expected = "<blockquote>" * 100 + "<p>x</p>" + "</blockquote>" * 100
    assert parse_dtext(data).html == expected


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("[quote]", "<blockquote></blockquote>"),
        ("[b][/b]", "<p><strong></strong></p>"),
        ("[code]", "<pre></pre>"),
        ("[table]", '<table class="striped"></table>'),
        ("[[", "<p>[[</p>"),
        ("{{}}", "<p>{{}}</p>"),
        ('"":/x', '<p>&quot;&quot;:/x</p>'),
        ("\x00[b]x", "<p>\x00<strong>x</strong></p>"),
    ],
)
def test_degenerate_input(data: str, expected: str):
    assert parse_dtext(data).html == expected


def parse_time(data: str) -> float:
    best = float("inf")
    for _ in range(3):
        started = time.perf_counter()
        parse_dtext(data)
        best = min(best, time.perf_counter() - started)
    return best


@pytest.mark.parametrize(
    "unit",
    [
        "a",
        "{",
        "[",
        "a[[",
        "{{a",
        '"a":[',
        "[url=a]",
        "[section=",
        "[color=",
        "[code=",
        "<http://",
        "[td a=",
        "[a](",
        "http://a.",
        "http://a)",
        "```a\n",
        "x\n```\n",
    ],
)
def test_scan_time_grows_linearly(unit: str):
    small = parse_time(unit * 2000)
    large = parse_time(unit * 16000)
    # 8x the input; quadratic scanning would take about 64x the time
    assert large < max(small, 0.001) * 24

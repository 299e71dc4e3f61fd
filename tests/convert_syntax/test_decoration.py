import pytest

from dtext.dtext import parse_dtext


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("[b]bold[/b]", "<p><strong>bold</strong></p>"),
        ("<strong>bold</strong>", "<p><strong>bold</strong></p>"),
        ("[B]bold[/B]", "<p><strong>bold</strong></p>"),
        ("[i]italic[/i]", "<p><em>italic</em></p>"),
        ("<em>italic</em>", "<p><em>italic</em></p>"),
        ("[u]underline[/u]", "<p><u>underline</u></p>"),
        ("[s]strike[/s]", "<p><s>strike</s></p>"),
        ("x[sup]2[/sup]", "<p>x<sup>2</sup></p>"),
        ("H[sub]2[/sub]O", "<p>H<sub>2</sub>O</p>"),
        ("[b][i]both[/i][/b]", "<p><strong><em>both</em></strong></p>"),
        ("[b]multi\nline[/b]", "<p><strong>multi<br>line</strong></p>"),
    ],
)
def test_emphasis(data: str, expected: str):
    assert parse_dtext(data).html == expected


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("foo [tn]note[/tn]", '<p>foo <span class="tn">note</span></p>'),
        ("[tn]note[/tn]", '<p class="tn">note</p>'),
        ("a [spoiler]secret[/spoiler] b", '<p>a <span class="spoiler">secret</span> b</p>'),
        ("a [spoilers]secret[/spoilers]", '<p>a <span class="spoiler">secret</span></p>'),
        ("[spoiler]secret[/spoiler]", '<div class="spoiler"><p>secret</p></div>'),
        ("<spoiler>\nsecret\n</spoiler>", '<div class="spoiler"><p>secret</p></div>'),
    ],
)
def test_translator_note_and_spoiler(data: str, expected: str):
    assert parse_dtext(data).html == expected


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("[color=red]red[/color]", '<p><span class="dtext-color-red">red</span></p>'),
        (
            "[color=#ff0000]red[/color]",
            '<p><span class="dtext-color" style="color: #ff0000">red</span></p>',
        ),
        ("[color=red]red", '<p><span class="dtext-color-red">red</span></p>'),
    ],
)
def test_color(data: str, expected: str):
    assert parse_dtext(data).html == expected


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("[color=red]red[/color]", "<p>red</p>"),
        ("[color=#ff0000]red[/color] text", "<p>red text</p>"),
    ],
)
def test_color_disallowed(data: str, expected: str):
    assert parse_dtext(data, allow_color=False).html == expected


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("a[br]b", "<p>a<br>b</p>"),
        ("a<br>b", "<p>a<br>b</p>"),
        ("use `[b]` for bold", "<p>use <code>[b]</code> for bold</p>"),
        ("`a < b`", "<p><code>a &lt; b</code></p>"),
    ],
)
def test_line_break_and_code_span(data: str, expected: str):
    assert parse_dtext(data).html == expected

import pytest

from dtext.config import DTextOptions
from dtext.dstack import DStack
from dtext.elements import Element
from dtext.emitter import Emitter, normalize_tag, sanitize_anchor, strip_qualifier
from dtext.output import OutputBuffer


@pytest.fixture
def emitter() -> Emitter:
    output = OutputBuffer()
    return Emitter(DTextOptions(), output, DStack(output))


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("Kaga (Kantai Collection)", "Kaga"),
        ("kaga_(kantai_collection)", "kaga"),
        ("touhou", "touhou"),
        ("(foo) bar", "(foo) bar"),
    ],
)
def test_strip_qualifier(data: str, expected: str):
    assert strip_qualifier(data) == expected


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("Touhou Project", "touhou_project"),
        ("ÉCOLE", "École"),
    ],
)
def test_normalize_tag(data: str, expected: str):
    assert normalize_tag(data) == expected


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("Intro", "intro"),
        ("Bar Baz!", "bar-baz-"),
    ],
)
def test_sanitize_anchor(data: str, expected: str):
    assert sanitize_anchor(data) == expected


def test_open_list(emitter: Emitter):
    emitter.open_list(2)
    emitter.output.append("a")
    emitter.open_list(1)
    emitter.output.append("b")
    emitter.dstack.close_all()
    assert emitter.output.getvalue() == "<ul><ul><li>a</li></ul><li>b</li></ul>"


def test_open_table_element(emitter: Emitter):
    emitter.open_table_element(
        "td", Element.BLOCK_TD, {"colspan": "2", "align": "left", "style": "x"}
    )
    assert emitter.output.getvalue() == '<td colspan="2" align="left">'
    assert emitter.dstack.check(Element.BLOCK_TD)


def test_open_col_is_void(emitter: Emitter):
    emitter.open_table_element("col", Element.BLOCK_COL, {"span": "3"})
    assert emitter.output.getvalue() == '<col span="3">'
    assert len(emitter.dstack) == 0


def test_append_header(emitter: Emitter):
    emitter.append_header(2, "Intro Part")
    assert emitter.dstack.header_mode
    emitter.append_line_break("[br]")
    emitter.dstack.close_all()
    assert emitter.output.getvalue() == '<h2 id="dtext-intro-part">[br]</h2>'
    assert not emitter.dstack.header_mode


def test_append_section(emitter: Emitter):
    emitter.append_section("<Title>", True)
    emitter.dstack.close_all()
    assert emitter.output.getvalue() == (
        "<details open><summary>&lt;Title&gt;</summary><div></div></details>"
    )


def test_append_code_fence(emitter: Emitter):
    emitter.append_code_fence("a < b", "c++")
    assert emitter.output.getvalue() == '<pre class="language-c++">a &lt; b</pre>'


def test_append_wiki_link_collects_pages(emitter: Emitter):
    emitter.append_wiki_link("", "touhou", "", None, "")
    emitter.append_wiki_link("", " touhou ", "", "Touhou", "")
    assert list(emitter.wiki_pages) == ["touhou"]


def test_append_mention(emitter: Emitter):
    emitter.append_mention('a"b')
    assert emitter.mentions == ['a"b']
    assert emitter.output.getvalue() == (
        '<a class="dtext-link dtext-user-mention-link" data-user-name="a&quot;b" '
        'href="/users?name=a%22b">@a&quot;b</a>'
    )


def test_append_post_link_limits_thumbnails():
    output = OutputBuffer()
    emitter = Emitter(DTextOptions(max_thumbs=1), output, DStack(output))
    emitter.append_post_link("5")
    emitter.append_post_link("6")
    assert emitter.posts == [5]
    assert 'data-id="5"' in output.getvalue()
    assert 'data-id="6"' not in output.getvalue()


def test_named_url_without_title_renderer(emitter: Emitter):
    emitter.append_named_url("/posts", "[b]x[/b]")
    assert emitter.output.getvalue() == '<a class="dtext-link" href="/posts">[b]x[/b]</a>'

import enum
import logging
import re
import string
from typing import Callable, Dict, List, Optional, Tuple

import attr

from dtext import id_links
from dtext.config import DTextOptions
from dtext.dstack import MAX_STACK_DEPTH, DStack
from dtext.elements import TABLE_ELEMENTS, Element
from dtext.emitter import Emitter
from dtext.errors import NestingError
from dtext.output import OutputBuffer
from dtext.url import trim_url

logger = logging.getLogger(__name__)

WORD_CHARS = frozenset(string.ascii_letters + string.digits)
URL_PUNCTUATION = ".,;:!?'"


class Mode(enum.Enum):
    MAIN = "main"
    INLINE = "inline"
    BASIC_INLINE = "basic_inline"
    CODE = "code"
    NODTEXT = "nodtext"
    TABLE = "table"


@attr.s(frozen=True, slots=True)
class ModeFrame:
    """Where to go back to when a called mode finishes.

    The called mode finishes when the dstack shrinks below ``depth``, i.e. when
    the element it was called for gets closed.
    """

    mode: Mode = attr.ib()
    depth: int = attr.ib()


@attr.s(frozen=True, slots=True)
class ParseResult:
    html: str = attr.ib()
    wiki_pages: List[str] = attr.ib(factory=list)
    posts: List[int] = attr.ib(factory=list)
    mentions: List[str] = attr.ib(factory=list)
    stray_closes: int = attr.ib(default=0)


def normalize_input(text: str) -> str:
    return "\0" + text.replace("\r\n", "\n") + "\0"


def _tag(*names: str) -> str:
    return r"(?:\[(?:%(n)s)\]|<(?:%(n)s)>)" % {"n": "|".join(names)}


def _close_tag(*names: str) -> str:
    return r"(?:\[/(?:%(n)s)\]|</(?:%(n)s)>)" % {"n": "|".join(names)}


def _strip_url_punctuation(url: str) -> str:
    """Drop trailing ``.,;:!?'`` from a url, keeping at least one character
    after ``://`` or ``#``.
    """
    if url.startswith("/"):
        keep = 1
    elif url.startswith("#"):
        keep = 2
    else:
        keep = url.index("://") + 4
    end = len(url)
    while end > keep and url[end - 1] in URL_PUNCTUATION:
        end -= 1
    return url[:end]


class DTextParser(object):
    # tag shapes shared by the block rules and the inline rules that must
    # recognize where a block starts
    quote_open = _tag("quote", "blockquote")
    quote_close = _close_tag("quote", "blockquote")
    spoiler_open = _tag("spoilers?")
    spoiler_close = _close_tag("spoilers?")
    section_open = r"[\[<](?:section|expand)(?:,expanded)?(?:=[^\[\]<>\n]*)?[\]>]"
    section_close = _close_tag("section", "expand")
    code_open = r"[\[<]code(?:=[^\[\]<>\s]+)?[\]>]"
    code_close = _close_tag("code")
    nodtext_open = _tag("nodtext")
    nodtext_close = _close_tag("nodtext")
    table_open = _tag("table")
    table_close = _close_tag("table")
    tn_open = _tag("tn")
    tn_close = _close_tag("tn")
    hr = r"[ \t]*(?:\[hr\]|<hr>|\*{3,})[ \t]*(?=\n|$)"
    header = r"h[1-6](?:\#[a-z0-9_-]+)?\."
    # the closing fence is looked up separately, see _fence_close()
    code_fence = r"```[a-z0-9_+\#.-]*[ \t]*\n"
    list_item = r"[ \t]*\*+[ \t]+(?=\S)"

    block_start = r"""
        [ \t]*
        (?:%(header)s|%(code_fence)s|%(quote_open)s|%(spoiler_open)s|%(section_open)s
         |%(code_open)s|%(nodtext_open)s|%(table_open)s|%(tn_open)s)
        |%(hr)s
    """ % {
        "header": header,
        "code_fence": code_fence,
        "quote_open": quote_open,
        "spoiler_open": spoiler_open,
        "section_open": section_open,
        "code_open": code_open,
        "nodtext_open": nodtext_open,
        "table_open": table_open,
        "tn_open": tn_open,
        "hr": hr,
    }

    # the url body stops before these; trailing punctuation is given back by
    # the handler, see _strip_url_punctuation()
    url_body = r"""[^\s\x00<>"\[\]]"""
    bare_url = r"https?://%(body)s+" % {"body": url_body}
    named_url_target = r"(?:https?://%(body)s+|/%(body)s*|\#%(body)s+)" % {"body": url_body}

    # main: the start of a block
    main_rules = r"""
(?P<blank_lines>
    (?:[ \t]*\n)+
)|(?P<code_fence>
    ```(?P<fence_lang>[a-z0-9_+\#.-]*)[ \t]*\n
)|(?P<header>
    h(?P<header_level>[1-6])
    (?:\#(?P<header_id>[a-z0-9_-]+))?  # optional anchor
    \.[ \t]*
)|(?P<open_quote>
    %(quote_open)s[ \t]*\n?
)|(?P<close_quote>
    %(quote_close)s[ \t]*
)|(?P<open_spoiler>
    %(spoiler_open)s[ \t]*\n?
)|(?P<close_spoiler>
    %(spoiler_close)s[ \t]*
)|(?P<open_section>
    [\[<](?:section|expand)
    (?P<section_expanded>,expanded)?
    (?:=(?P<section_title>[^\[\]<>\n]*))?
    [\]>][ \t]*\n?
)|(?P<close_section>
    %(section_close)s[ \t]*
)|(?P<open_code>
    [\[<]code(?:=(?P<code_lang>[^\[\]<>\s]+))?[\]>][ \t]*\n?
)|(?P<open_nodtext>
    %(nodtext_open)s[ \t]*\n?
)|(?P<open_table>
    %(table_open)s
)|(?P<open_tn>
    %(tn_open)s[ \t]*\n?
)|(?P<close_tn>
    %(tn_close)s[ \t]*
)|(?P<list_item>
    [ \t]*(?P<list_depth>\*+)[ \t]+(?=\S)
)|(?P<hr>
    %(hr)s
)|(?P<leading_space>
    [ \t]+
)""" % {
        "quote_open": quote_open,
        "quote_close": quote_close,
        "spoiler_open": spoiler_open,
        "spoiler_close": spoiler_close,
        "section_close": section_close,
        "nodtext_open": nodtext_open,
        "table_open": table_open,
        "tn_open": tn_open,
        "tn_close": tn_close,
        "hr": hr,
    }
    main_re = re.compile(main_rules, re.IGNORECASE | re.VERBOSE)

    # emphasis and other markup allowed everywhere text is allowed
    basic_inline_rules = r"""
(?P<open_b>
    %(open_b)s
)|(?P<close_b>
    %(close_b)s
)|(?P<open_i>
    %(open_i)s
)|(?P<close_i>
    %(close_i)s
)|(?P<open_u>
    %(open_u)s
)|(?P<close_u>
    %(close_u)s
)|(?P<open_s>
    %(open_s)s
)|(?P<close_s>
    %(close_s)s
)|(?P<open_sup>
    %(open_sup)s
)|(?P<close_sup>
    %(close_sup)s
)|(?P<open_sub>
    %(open_sub)s
)|(?P<close_sub>
    %(close_sub)s
)|(?P<open_inline_tn>
    %(tn_open)s
)|(?P<close_tn>
    %(tn_close)s
)|(?P<open_inline_spoiler>
    %(spoiler_open)s
)|(?P<close_spoiler>
    %(spoiler_close)s
)|(?P<entity>
    (?-i:
     &(?:amp|lt|gt|quot|apos|nbsp|copy|reg|trade|mdash|ndash|hellip|lsquo|rsquo|ldquo|rdquo|bull|middot);
     |
     &\#[0-9]{1,5};
    )
)""" % {
        "open_b": _tag("b", "strong"),
        "close_b": _close_tag("b", "strong"),
        "open_i": _tag("i", "em"),
        "close_i": _close_tag("i", "em"),
        "open_u": _tag("u"),
        "close_u": _close_tag("u"),
        "open_s": _tag("s"),
        "close_s": _close_tag("s"),
        "open_sup": _tag("sup"),
        "close_sup": _close_tag("sup"),
        "open_sub": _tag("sub"),
        "close_sub": _close_tag("sub"),
        "tn_open": tn_open,
        "tn_close": tn_close,
        "spoiler_open": spoiler_open,
        "spoiler_close": spoiler_close,
    }
    basic_inline_re = re.compile(basic_inline_rules, re.IGNORECASE | re.VERBOSE)

    # inline: the body of a block
    inline_rules = r"""
(?P<newline_before_close>
    \n(?=[ \t]*[\[<]/(?P<newline_close_name>quote|blockquote|spoilers?|section|expand|tn|td|th)[\]>])
)|(?P<paragraph_break>
    \n(?:[ \t]*\n)+|\n[ \t]*$  # a blank line, or the end of input
)|(?P<list_break>
    \n(?=%(list_item)s)
)|(?P<block_break>
    \n(?=%(block_start)s)
)|(?P<newline>
    \n
)|(?P<inline_block>  # blocks that interrupt a paragraph even mid-line
    %(quote_open)s|%(section_open)s|(?:\[hr\]|<hr>)[ \t]*(?=\n|$)
)|(?P<close_quote>
    %(quote_close)s
)|(?P<close_section>
    %(section_close)s
)|(?P<close_cell>
    [\[<]/(?P<close_cell_name>td|th)[\]>]
)|(?P<table_tag>  # only meaningful inside a table cell
    [\[<](?:/table|/?(?:thead|tbody|tr|td|th|colgroup|col))(?:\s[^\[\]<>\n]*)?[\]>]
)|%(basic_inline_rules)s
|(?P<open_color>
    \[color=(?P<color>[^\[\]\n]+)\]
)|(?P<close_color>
    \[/color\]
)|(?P<open_code>
    [\[<]code(?:=(?P<code_lang>[^\[\]<>\s]+))?[\]>]
)|(?P<open_nodtext>
    %(nodtext_open)s
)|(?P<br>
    \[br\]|<br\s*/?>
)|(?P<code_span>
    `(?P<code_span_body>[^`\n]+)`
)|(?P<delimited_url>
    <(?P<delimited_url_target>https?://[^\s<>]+)>
)|(?P<delimited_mention>
    <@(?P<delimited_mention_name>[^\s<>]+)>
)|(?P<named_url_delimited>
    "(?P<named_url_delimited_title>[^"\n]+)":\[(?P<named_url_delimited_target>[^\[\]\n]+)\]
)|(?P<named_url>
    "(?P<named_url_title>[^"\n]+)":(?P<named_url_target>%(named_url_target)s)
)|(?P<markdown_link>
    \[(?P<markdown_link_title>[^\[\]\n]+)\]\((?P<markdown_link_target>[^)\[\]\s]+)\)
)|(?P<bbcode_url>
    \[url=(?P<bbcode_url_target>[^\[\]\n]+)\]
    (?P<bbcode_url_title>(?:[^\[\n]|\[(?!/?url[\]=]))*)
    \[/url\]
)|(?P<bbcode_unnamed_url>
    \[url\](?P<bbcode_unnamed_url_target>[^\[\n]+?)\[/url\]
)|(?P<wiki_link>  # a word right before the link is taken from the text, see _scan()
    \[\[
    (?P<wiki_tag>[^\]\[|\n\#]*)
    (?:\#(?P<wiki_anchor>[^\]\[|\n]*))?
    (?:(?P<wiki_pipe>\|)(?P<wiki_title>[^\]\[\n]*))?
    \]\]
    (?P<wiki_suffix>[a-z0-9]*)
)|(?P<search_link>
    \{\{
    (?P<search_tags>[^{}|\n]+)
    (?:(?P<search_pipe>\|)(?P<search_title>[^{}\n]*))?
    \}\}
    (?P<search_suffix>[a-z0-9]*)
)|(?P<bare_url>
    (?<![a-z0-9])%(bare_url)s
)|(?P<dmail_key_link>
    (?<![a-z0-9_])dmail\ \#(?P<dmail_id>[0-9]+)/(?P<dmail_key>[a-z0-9_=-]+)
)|(?P<paged_link>
    (?<![a-z0-9_])(?P<paged_name>%(paged_names)s)\ \#(?P<paged_id>[0-9]+)/p(?P<paged_page>[0-9]+)
)|(?P<hex_id_link>
    (?<![a-z0-9_])(?P<hex_id_name>%(hex_id_names)s)\ \#(?P<hex_id>[0-9a-f]+)
)|(?P<id_link>
    (?<![a-z0-9_])(?P<id_name>%(id_names)s)\ \#(?P<id>[0-9]+)
)|(?P<mention>
    (?<=[\x00\r\n /"'()\[\]{}])@(?P<mention_name>[^\s\x00<>\[\]{}"@]+)
)""" % {
        "list_item": list_item,
        "block_start": block_start,
        "quote_open": quote_open,
        "quote_close": quote_close,
        "section_open": section_open,
        "section_close": section_close,
        "nodtext_open": nodtext_open,
        "basic_inline_rules": basic_inline_rules,
        "named_url_target": named_url_target,
        "bare_url": bare_url,
        "paged_names": "|".join(id_links.PAGED_ID_LINKS),
        "hex_id_names": id_links.surface_rule([e for e in id_links.ID_LINKS if e.hex_id]),
        "id_names": id_links.surface_rule([e for e in id_links.ID_LINKS if not e.hex_id]),
    }
    inline_re = re.compile(inline_rules, re.IGNORECASE | re.VERBOSE)

    # code / nodtext: everything is text until the terminator
    code_re = re.compile(r"(?P<close_code>\n?%s)" % code_close, re.IGNORECASE)
    nodtext_re = re.compile(r"(?P<close_nodtext>\n?%s)" % nodtext_close, re.IGNORECASE)
    fence_open_re = re.compile(r"[ \t]*%s" % code_fence, re.IGNORECASE)
    fence_close_re = re.compile(r"^```[ \t]*(?=\n|$)", re.MULTILINE)

    # table: only the table vocabulary is recognized between cells
    table_rules = r"""
(?P<table_open_tag>
    [\[<]
    (?P<table_tag_name>thead|tbody|tr|th|td|colgroup|col)
    (?P<table_tag_attrs>(?:\s+[a-z]+\s*=\s*(?:"[^"\n]*"|'[^'\n]*'|[^\s\[\]<>"']+))*)
    \s*[\]>]
)|(?P<table_close_tag>
    [\[<]/(?P<table_close_name>thead|tbody|tr|colgroup)[\]>]
)|(?P<close_table>
    %(table_close)s
)""" % {
        "table_close": table_close,
    }
    table_re = re.compile(table_rules, re.IGNORECASE | re.VERBOSE)
    table_attr_re = re.compile(
        r"""([a-z]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s\]>"']+))""", re.IGNORECASE
    )

    scan_res: Dict[Mode, "re.Pattern[str]"] = {
        Mode.INLINE: inline_re,
        Mode.BASIC_INLINE: basic_inline_re,
        Mode.CODE: code_re,
        Mode.NODTEXT: nodtext_re,
        Mode.TABLE: table_re,
    }

    inline_elements = {
        "b": (Element.INLINE_B, "<strong>"),
        "i": (Element.INLINE_I, "<em>"),
        "u": (Element.INLINE_U, "<u>"),
        "s": (Element.INLINE_S, "<s>"),
        "sup": (Element.INLINE_SUP, "<sup>"),
        "sub": (Element.INLINE_SUB, "<sub>"),
    }

    newline_close_elements = {
        "quote": (Element.BLOCK_QUOTE,),
        "blockquote": (Element.BLOCK_QUOTE,),
        "spoiler": (Element.BLOCK_SPOILER, Element.INLINE_SPOILER),
        "spoilers": (Element.BLOCK_SPOILER, Element.INLINE_SPOILER),
        "section": (Element.BLOCK_SECTION,),
        "expand": (Element.BLOCK_SECTION,),
        "tn": (Element.BLOCK_TN, Element.INLINE_TN),
        "td": (Element.BLOCK_TD,),
        "th": (Element.BLOCK_TH,),
    }

    def __init__(self, text: str, options: Optional[DTextOptions] = None, mode: Mode = Mode.MAIN):
        if options:
            self.options = options
        else:
            self.options = DTextOptions()
        self.text = normalize_input(text)
        self.pos = 1
        self.end = len(self.text) - 1
        self.mode = mode
        self.mode_stack: List[ModeFrame] = []
        self.paragraph_start = -1
        # the word right before a wiki or search link, held back from the text
        self.link_prefix = ""
        # (searched from, first closing fence found there)
        self.fence_close_cache: Tuple[int, Optional[re.Match]] = (self.end + 1, None)

        self.output = OutputBuffer(base_url=self.options.base_url, f_inline=self.options.f_inline)
        self.dstack = DStack(self.output)
        self.emitter = Emitter(
            self.options, self.output, self.dstack, title_renderer=self._render_title
        )

        self.main_dispatcher: Dict[str, Callable[[re.Match], None]] = {
            "blank_lines": self._blank_lines_handler,
            "code_fence": self._code_fence_handler,
            "header": self._header_handler,
            "open_quote": self._open_quote_handler,
            "close_quote": self._main_close_handler,
            "open_spoiler": self._open_spoiler_handler,
            "close_spoiler": self._main_close_handler,
            "open_section": self._open_section_handler,
            "close_section": self._main_close_handler,
            "open_code": self._open_block_code_handler,
            "open_nodtext": self._open_block_nodtext_handler,
            "open_table": self._open_table_handler,
            "open_tn": self._open_block_tn_handler,
            "close_tn": self._main_close_handler,
            "list_item": self._list_item_handler,
            "hr": self._hr_handler,
            "leading_space": self._leading_space_handler,
        }

        basic_inline_dispatcher: Dict[str, Callable[[re.Match], None]] = {
            "open_b": self._open_inline_handler,
            "close_b": self._close_inline_handler,
            "open_i": self._open_inline_handler,
            "close_i": self._close_inline_handler,
            "open_u": self._open_inline_handler,
            "close_u": self._close_inline_handler,
            "open_s": self._open_inline_handler,
            "close_s": self._close_inline_handler,
            "open_sup": self._open_inline_handler,
            "close_sup": self._close_inline_handler,
            "open_sub": self._open_inline_handler,
            "close_sub": self._close_inline_handler,
            "open_inline_tn": self._open_inline_tn_handler,
            "close_tn": self._close_tn_handler,
            "open_inline_spoiler": self._open_inline_spoiler_handler,
            "close_spoiler": self._close_spoiler_handler,
            "entity": self._entity_handler,
        }

        inline_dispatcher: Dict[str, Callable[[re.Match], None]] = {
            # Line Structure
            "newline_before_close": self._newline_before_close_handler,
            "paragraph_break": self._paragraph_break_handler,
            "list_break": self._list_break_handler,
            "block_break": self._block_break_handler,
            "newline": self._newline_handler,
            "inline_block": self._inline_block_handler,
            "close_quote": self._close_quote_handler,
            "close_section": self._close_section_handler,
            "close_cell": self._close_cell_handler,
            "table_tag": self._table_tag_handler,
            # Decorations
            "open_color": self._open_color_handler,
            "close_color": self._close_color_handler,
            "open_code": self._open_inline_code_handler,
            "open_nodtext": self._open_inline_nodtext_handler,
            "br": self._br_handler,
            "code_span": self._code_span_handler,
            # Links
            "delimited_url": self._delimited_url_handler,
            "delimited_mention": self._delimited_mention_handler,
            "named_url_delimited": self._named_url_delimited_handler,
            "named_url": self._named_url_handler,
            "markdown_link": self._markdown_link_handler,
            "bbcode_url": self._bbcode_url_handler,
            "bbcode_unnamed_url": self._bbcode_unnamed_url_handler,
            "wiki_link": self._wiki_link_handler,
            "search_link": self._search_link_handler,
            "bare_url": self._bare_url_handler,
            "dmail_key_link": self._dmail_key_link_handler,
            "paged_link": self._paged_link_handler,
            "hex_id_link": self._hex_id_link_handler,
            "id_link": self._id_link_handler,
            "mention": self._mention_handler,
        }
        inline_dispatcher.update(basic_inline_dispatcher)

        self.dispatchers: Dict[Mode, Dict[str, Callable[[re.Match], None]]] = {
            Mode.INLINE: inline_dispatcher,
            Mode.BASIC_INLINE: basic_inline_dispatcher,
            Mode.CODE: {"close_code": self._close_raw_handler},
            Mode.NODTEXT: {"close_nodtext": self._close_raw_handler},
            Mode.TABLE: {
                "table_open_tag": self._table_open_tag_handler,
                "table_close_tag": self._table_close_tag_handler,
                "close_table": self._close_table_handler,
            },
        }

    # Public Method ----------------------------------------------------------
    @classmethod
    def parse(
        cls, text: str, options: Optional[DTextOptions] = None, mode: Mode = Mode.MAIN
    ) -> ParseResult:
        parser = cls(text, options=options, mode=mode)
        return parser.run_parse()

    # Private Parsing Entrypoint ---------------------------------------------
    def run_parse(self) -> ParseResult:
        while self.pos < self.end:
            if self.mode is Mode.MAIN:
                self._scan_block()
            else:
                self._scan(self.mode)
            self._unwind()
        self.dstack.close_all()

        return ParseResult(
            html=self.output.getvalue(),
            wiki_pages=list(self.emitter.wiki_pages),
            posts=list(self.emitter.posts),
            mentions=list(self.emitter.mentions),
            stray_closes=self.dstack.stray_closes,
        )

    def _scan_block(self):
        match = self.main_re.match(self.text, self.pos, self.end)
        if not match:
            self._start_paragraph()
            return
        self.pos = match.end()
        self.main_dispatcher[match.lastgroup](match)

    def _scan(self, mode: Mode):
        match = self.scan_res[mode].search(self.text, self.pos, self.end)
        if not match:
            self._text(self.text[self.pos : self.end])
            self.pos = self.end
            return

        start = match.start()
        if match.lastgroup in ("wiki_link", "search_link"):
            # prefix[[tag]]: the word before the link becomes part of its title
            prefix_start = self._word_start(self.pos, start)
            self.link_prefix = self.text[prefix_start:start]
            start = prefix_start
        if self.pos < start:
            self._text(self.text[self.pos : start])
        self.pos = match.end()
        self.dispatchers[mode][match.lastgroup](match)

    def _word_start(self, lower: int, pos: int) -> int:
        while pos > lower and self.text[pos - 1] in WORD_CHARS:
            pos -= 1
        return pos

    def _fence_close(self, pos: int) -> Optional[re.Match]:
        """Find the first closing fence at or after ``pos``.

        Lookups only move forward, so a search is reused until ``pos`` passes
        the fence it found.
        """
        searched_from, found = self.fence_close_cache
        if searched_from <= pos and (found is None or found.start() >= pos):
            return found
        found = self.fence_close_re.search(self.text, pos, self.end)
        self.fence_close_cache = (pos, found)
        return found

    def _text(self, text: str):
        if self.mode is Mode.TABLE:
            # whitespace between table tags is layout, anything else is shown
            text = text.strip()
        self.output.append_html_escaped(text)

    # Mode Stack ----------------------------------------------------------------
    def _call(self, mode: Mode):
        if len(self.mode_stack) >= MAX_STACK_DEPTH:
            logger.warning("too many nested modes: depth=%d" % len(self.mode_stack))
            raise NestingError()
        self.mode_stack.append(ModeFrame(mode=self.mode, depth=len(self.dstack)))
        self.mode = mode

    def _ret(self):
        frame = self.mode_stack.pop()
        self.mode = frame.mode

    def _unwind(self):
        """Leave every called mode whose element has been closed."""
        while self.mode_stack and len(self.dstack) < self.mode_stack[-1].depth:
            self._ret()

    def _return_from_inline(self):
        self._unwind()
        if self.mode is Mode.INLINE and self.mode_stack:
            self._ret()

    @property
    def _returns_to_main(self) -> bool:
        return bool(self.mode_stack) and self.mode_stack[-1].mode is Mode.MAIN

    def _rescan(self, match: re.Match):
        self.pos = match.start()

    def _literal(self, match: re.Match):
        self.output.append_html_escaped(match.group(0))

    def _stray_close(self, match: re.Match):
        logger.debug("stray close: %s" % match.group(0))
        self.dstack.stray_closes += 1
        self._literal(match)

    def _render_title(self, title: str) -> str:
        options = self.options.model_copy(update={"max_thumbs": 0, "f_mentions": False})
        return DTextParser.parse(title, options=options, mode=Mode.BASIC_INLINE).html

    # Block Handlers -------------------------------------------------------------
    def _start_paragraph(self):
        self.paragraph_start = self.pos
        self.emitter.open_paragraph()
        self._call(Mode.INLINE)

    def _blank_lines_handler(self, match: re.Match):
        self.dstack.close_leaf_blocks()

    def _leading_space_handler(self, match: re.Match):
        pass

    def _code_fence_handler(self, match: re.Match):
        close = self._fence_close(self.pos)
        if not close:
            # an unterminated fence is paragraph text
            self._rescan(match)
            self._start_paragraph()
            return
        body = self.text[self.pos : close.start()]
        self.pos = close.end()
        # the newline before the closing fence belongs to neither
        self.emitter.append_code_fence(body[:-1], match.group("fence_lang"))

    def _header_handler(self, match: re.Match):
        level = int(match.group("header_level"))
        self.emitter.append_header(level, match.group("header_id") or "")
        self._call(Mode.INLINE)

    def _open_quote_handler(self, match: re.Match):
        self.dstack.close_leaf_blocks()
        self.emitter.open_element(Element.BLOCK_QUOTE, "<blockquote>")

    def _open_spoiler_handler(self, match: re.Match):
        self.dstack.close_leaf_blocks()
        self.emitter.open_element(Element.BLOCK_SPOILER, '<div class="spoiler">')

    def _open_section_handler(self, match: re.Match):
        title = match.group("section_title")
        if title is None or not title.strip():
            title = "Show"
        self.emitter.append_section(title.strip(), bool(match.group("section_expanded")))

    def _main_close_handler(self, match: re.Match):
        group_to_element = {
            "close_quote": Element.BLOCK_QUOTE,
            "close_spoiler": Element.BLOCK_SPOILER,
            "close_section": Element.BLOCK_SECTION,
            "close_tn": Element.BLOCK_TN,
        }
        e = group_to_element[match.lastgroup]
        if self.dstack.is_open(e):
            self.dstack.close_until(e)
        else:
            # not ours to close; let the paragraph show it
            self._rescan(match)
            self._start_paragraph()

    def _open_block_code_handler(self, match: re.Match):
        self.emitter.append_block_code(match.group("code_lang") or "")
        self._call(Mode.CODE)

    def _open_block_nodtext_handler(self, match: re.Match):
        self.dstack.close_leaf_blocks()
        self.emitter.open_element(Element.BLOCK_NODTEXT, "<p>")
        self._call(Mode.NODTEXT)

    def _open_table_handler(self, match: re.Match):
        self.dstack.close_leaf_blocks()
        self.emitter.open_element(Element.BLOCK_TABLE, '<table class="striped">')
        self._call(Mode.TABLE)

    def _open_block_tn_handler(self, match: re.Match):
        self.dstack.close_leaf_blocks()
        self.emitter.open_element(Element.BLOCK_TN, '<p class="tn">')
        self._call(Mode.INLINE)

    def _list_item_handler(self, match: re.Match):
        self.emitter.open_list(len(match.group("list_depth")))
        self._call(Mode.INLINE)

    def _hr_handler(self, match: re.Match):
        self.dstack.close_leaf_blocks()
        self.output.append_block("<hr>")

    # Inline Handlers: Line Structure ------------------------------------------
    def _newline_before_close_handler(self, match: re.Match):
        """A newline right before the closing tag of an open element is dropped."""
        elements = self.newline_close_elements[match.group("newline_close_name").lower()]
        if any(self.dstack.is_open(e) for e in elements):
            return
        self._newline_handler(match)

    def _paragraph_break_handler(self, match: re.Match):
        self.dstack.close_leaf_blocks()
        if self.mode_stack:
            self._return_from_inline()
        elif match.end() < self.end:
            # nothing to return to, e.g. when parsing inline text only
            self.output.append("<br><br>")

    def _list_break_handler(self, match: re.Match):
        if self.dstack.header_mode:
            self.dstack.close_leaf_blocks()
        elif self._returns_to_main:
            self._ret()
        else:
            self._newline_handler(match)

    def _block_break_handler(self, match: re.Match):
        fence = self.fence_open_re.match(self.text, match.end(), self.end)
        if not self.mode_stack or (fence and not self._fence_close(fence.end())):
            self._newline_handler(match)
            return
        self.dstack.close_leaf_blocks()
        self._return_from_inline()

    def _newline_handler(self, match: re.Match):
        if self.dstack.header_mode:
            self.dstack.close_leaf_blocks()
        else:
            self.output.append("<br>")

    def _inline_block_handler(self, match: re.Match):
        if not self.mode_stack or match.start() == self.paragraph_start:
            self._literal(match)
            return
        self.dstack.close_leaf_blocks()
        self._return_from_inline()
        self._rescan(match)

    def _close_quote_handler(self, match: re.Match):
        if self.dstack.is_open(Element.BLOCK_QUOTE):
            self.dstack.close_until(Element.BLOCK_QUOTE)
        else:
            self._stray_close(match)

    def _close_section_handler(self, match: re.Match):
        if self.dstack.is_open(Element.BLOCK_SECTION):
            self.dstack.close_until(Element.BLOCK_SECTION)
        else:
            self._stray_close(match)

    def _close_cell_handler(self, match: re.Match):
        e = TABLE_ELEMENTS[match.group("close_cell_name").lower()]
        if self.dstack.is_open(e):
            self.dstack.close_until(e)
        else:
            self._stray_close(match)

    def _table_tag_handler(self, match: re.Match):
        """A table tag inside a cell closes the cell and is read again as table markup."""
        cell = self.dstack.innermost(Element.BLOCK_TD, Element.BLOCK_TH)
        if cell == Element.EMPTY:
            self._literal(match)
            return
        self.dstack.close_until(cell)
        self._unwind()
        if self.mode is Mode.TABLE:
            self._rescan(match)

    # Inline Handlers: Decorations ---------------------------------------------
    def _open_inline_handler(self, match: re.Match):
        name = match.lastgroup[len("open_") :]
        e, html = self.inline_elements[name]
        self.emitter.open_element(e, html)

    def _close_inline_handler(self, match: re.Match):
        name = match.lastgroup[len("close_") :]
        e, _html = self.inline_elements[name]
        self.dstack.close_element(e, match.group(0))

    def _open_inline_tn_handler(self, match: re.Match):
        self.emitter.open_element(Element.INLINE_TN, '<span class="tn">')

    def _close_tn_handler(self, match: re.Match):
        if self.dstack.is_open(Element.INLINE_TN) or not self.dstack.is_open(Element.BLOCK_TN):
            self.dstack.close_element(Element.INLINE_TN, match.group(0))
        else:
            self.dstack.close_until(Element.BLOCK_TN)

    def _open_inline_spoiler_handler(self, match: re.Match):
        self.emitter.open_element(Element.INLINE_SPOILER, '<span class="spoiler">')

    def _close_spoiler_handler(self, match: re.Match):
        if self.dstack.is_open(Element.INLINE_SPOILER) or not self.dstack.is_open(
            Element.BLOCK_SPOILER
        ):
            self.dstack.close_element(Element.INLINE_SPOILER, match.group(0))
        else:
            self.dstack.close_until(Element.BLOCK_SPOILER)

    def _open_color_handler(self, match: re.Match):
        if not self.options.allow_color:
            return
        self.emitter.append_color(match.group("color").strip())

    def _close_color_handler(self, match: re.Match):
        if not self.options.allow_color:
            return
        self.dstack.close_element(Element.INLINE_COLOR, match.group(0))

    def _open_inline_code_handler(self, match: re.Match):
        self.emitter.append_inline_code(match.group("code_lang") or "")
        self._call(Mode.CODE)

    def _open_inline_nodtext_handler(self, match: re.Match):
        self.emitter.open_element(Element.INLINE_NODTEXT, "")
        self._call(Mode.NODTEXT)

    def _br_handler(self, match: re.Match):
        self.emitter.append_line_break(match.group(0))

    def _code_span_handler(self, match: re.Match):
        self.emitter.append_code_span(match.group("code_span_body"))

    def _entity_handler(self, match: re.Match):
        self.output.append(match.group(0))

    # Inline Handlers: Links ---------------------------------------------------
    def _delimited_url_handler(self, match: re.Match):
        self.emitter.append_unnamed_url(match.group("delimited_url_target"))

    def _delimited_mention_handler(self, match: re.Match):
        if not self.options.f_mentions:
            self._literal(match)
            return
        self.emitter.append_mention(match.group("delimited_mention_name"))

    def _named_url_delimited_handler(self, match: re.Match):
        url = match.group("named_url_delimited_target").strip()
        self.emitter.append_named_url(url, match.group("named_url_delimited_title"))

    def _named_url_handler(self, match: re.Match):
        url = _strip_url_punctuation(match.group("named_url_target"))
        self.pos = match.start("named_url_target") + len(url)
        self.emitter.append_bare_named_url(url, match.group("named_url_title"))

    def _markdown_link_handler(self, match: re.Match):
        url = match.group("markdown_link_target")
        self.emitter.append_named_url(url, match.group("markdown_link_title"))

    def _bbcode_url_handler(self, match: re.Match):
        url = match.group("bbcode_url_target").strip()
        title = match.group("bbcode_url_title")
        if not title:
            self.emitter.append_unnamed_url(url)
            return
        self.emitter.append_named_url(url, title)

    def _bbcode_unnamed_url_handler(self, match: re.Match):
        self.emitter.append_unnamed_url(match.group("bbcode_unnamed_url_target").strip())

    def _wiki_link_handler(self, match: re.Match):
        prefix = self.link_prefix
        tag = match.group("wiki_tag")
        anchor = match.group("wiki_anchor") or ""
        suffix = match.group("wiki_suffix")
        title: Optional[str] = None
        if match.group("wiki_pipe"):
            title = match.group("wiki_title").strip()

        if tag.strip():
            self.emitter.append_wiki_link(prefix, tag, anchor, title, suffix)
        elif anchor.strip():
            self.emitter.append_internal_anchor_link(prefix, anchor, title, suffix)
        else:
            self.output.append_html_escaped(prefix + match.group(0))

    def _search_link_handler(self, match: re.Match):
        prefix = self.link_prefix
        search = match.group("search_tags")
        if not search.strip():
            self.output.append_html_escaped(prefix + match.group(0))
            return
        title: Optional[str] = None
        if match.group("search_pipe"):
            title = match.group("search_title").strip()
        suffix = match.group("search_suffix")
        self.emitter.append_post_search_link(prefix, search, title, suffix)

    def _bare_url_handler(self, match: re.Match):
        url = _strip_url_punctuation(match.group(0))
        self.pos = match.start() + len(url)
        self.emitter.append_bare_unnamed_url(url)

    def _dmail_key_link_handler(self, match: re.Match):
        self.emitter.append_dmail_key_link(match.group("dmail_id"), match.group("dmail_key"))

    def _paged_link_handler(self, match: re.Match):
        link = id_links.lookup(match.group("paged_name"))
        self.emitter.append_paged_link(
            link, match.group("paged_id"), "?page=", match.group("paged_page")
        )

    def _hex_id_link_handler(self, match: re.Match):
        link = id_links.lookup(match.group("hex_id_name"))
        self.emitter.append_id_link(link, match.group("hex_id"))

    def _id_link_handler(self, match: re.Match):
        link = id_links.lookup(match.group("id_name"))
        if link.title == "post":
            self.emitter.append_post_link(match.group("id"))
        else:
            self.emitter.append_id_link(link, match.group("id"))

    def _mention_handler(self, match: re.Match):
        if not self.options.f_mentions:
            self._literal(match)
            return
        name, leftover = trim_url(match.group("mention_name"))
        stripped = name.rstrip(".,;:!?'")
        leftover = name[len(stripped) :] + leftover
        if not stripped:
            self._literal(match)
            return
        self.emitter.append_mention(stripped)
        self.output.append_html_escaped(leftover)

    # Raw Text Handlers ----------------------------------------------------------
    def _close_raw_handler(self, match: re.Match):
        self.dstack.close_until(self.dstack.peek())

    # Table Handlers -------------------------------------------------------------
    def _parse_table_attrs(self, attrdef: str) -> Dict[str, str]:
        attrs: Dict[str, str] = {}
        for m in self.table_attr_re.finditer(attrdef):
            name = m.group(1).lower()
            value = next(v for v in m.groups()[1:] if v is not None)
            attrs[name] = value
        return attrs

    def _table_open_tag_handler(self, match: re.Match):
        name = match.group("table_tag_name").lower()
        e = TABLE_ELEMENTS[name]
        attrs = self._parse_table_attrs(match.group("table_tag_attrs"))
        self.emitter.open_table_element(name, e, attrs)
        if e in (Element.BLOCK_TD, Element.BLOCK_TH):
            self._call(Mode.INLINE)

    def _table_close_tag_handler(self, match: re.Match):
        e = TABLE_ELEMENTS[match.group("table_close_name").lower()]
        if self.dstack.is_open(e):
            self.dstack.close_until(e)
        else:
            self._stray_close(match)

    def _close_table_handler(self, match: re.Match):
        self.dstack.close_until(Element.BLOCK_TABLE)

import logging
import re
import urllib.parse
from typing import Callable, Dict, List, Optional

from dtext import id_links
from dtext.config import DTextOptions
from dtext.dstack import DStack
from dtext.elements import Element, is_permitted_attribute
from dtext.id_links import IdLink
from dtext.output import OutputBuffer, escape_html, escape_uri
from dtext.url import URL, is_internal_url, parse_url, site_relative_url, trim_url

logger = logging.getLogger(__name__)

EXTERNAL_REL = "external nofollow noreferrer"

qualifier_re = re.compile(r"[ _]\([^)]+?\)$")
anchor_sanitize_re = re.compile(r"[^a-z0-9]")


def strip_qualifier(title: str) -> str:
    """Pipe trick: ``Kaga (Kantai Collection)`` -> ``Kaga``."""
    return qualifier_re.sub("", title)


def normalize_tag(tag: str) -> str:
    return "".join(c.lower() if c.isascii() else c for c in tag).replace(" ", "_")


def sanitize_anchor(anchor: str) -> str:
    return anchor_sanitize_re.sub("-", anchor.lower())


class Emitter(object):
    """High-level output operations.

    Each operation composes writes to the output buffer with pushes and pops
    on the document-structure stack, and records wiki pages, posts and
    mentions found along the way.
    """

    def __init__(
        self,
        options: DTextOptions,
        output: OutputBuffer,
        dstack: DStack,
        title_renderer: Optional[Callable[[str], str]] = None,
    ):
        self.options = options
        self.output = output
        self.dstack = dstack
        self.title_renderer = title_renderer

        # dict as an insertion-ordered set
        self.wiki_pages: Dict[str, None] = {}
        self.posts: List[int] = []
        self.mentions: List[str] = []

    # Elements
    def open_element(self, e: Element, html: str):
        self.dstack.push(e)
        if e.is_inline:
            self.output.append(html)
        else:
            self.output.append_block(html)

    def open_table_element(self, tag: str, e: Element, attributes: Dict[str, str]):
        html = "<" + tag
        for name, value in attributes.items():
            if not is_permitted_attribute(tag, name, value):
                logger.debug("dropped attribute: %s=%r on %s" % (name, value, tag))
                continue
            html += ' %s="%s"' % (name, escape_html(value))
        html += ">"
        self.open_element(e, html)
        if e == Element.BLOCK_COL:
            self.dstack.rewind()

    def open_paragraph(self):
        self.open_element(Element.BLOCK_P, "<p>")

    def append_color(self, color: str):
        if color.startswith("#"):
            html = '<span class="dtext-color" style="color: #%s">' % escape_uri(color[1:])
        else:
            html = '<span class="dtext-color-%s">' % escape_uri(color)
        self.open_element(Element.INLINE_COLOR, html)

    # Links
    def append_absolute_link(
        self, url: str, title: str, internal: bool, escape_title: bool = True
    ):
        if internal:
            self.output.append('<a class="dtext-link" href="')
            self.output.append_relative_url(site_relative_url(url))
        else:
            if url == title:
                classes = "dtext-link dtext-external-link"
            else:
                classes = "dtext-link dtext-external-link dtext-named-external-link"
            self.output.append('<a rel="%s" class="%s" href="' % (EXTERNAL_REL, classes))
            self.output.append_html_escaped(url)
        self.output.append('">')
        if escape_title:
            self.output.append_html_escaped(title)
        else:
            self.output.append(title)
        self.output.append("</a>")

    def append_unnamed_url(self, url: str):
        parsed = parse_url(url)
        if parsed.domain and self.options.is_internal_domain(parsed.domain):
            if self.append_internal_url(parsed):
                return
        self.append_absolute_link(url, url, is_internal_url(url, self.options.domain))

    def append_internal_url(self, url: URL) -> bool:
        """Render a link to an internal domain as an id-link or wiki link if possible."""
        path = url.path_components
        if len(path) == 2 and path[1].isascii() and path[1].isdigit():
            rule = id_links.internal_url_rule(path[0], url.query, url.fragment)
            if rule is None:
                return False
            self.append_id_link(id_links.lookup(rule.id_link), path[1])
            return True
        if len(path) == 2 and path[0] == "wiki_pages" and not url.fragment:
            tag = urllib.parse.unquote(path[1])
            self.append_wiki_link("", tag, "", None, "")
            return True
        if len(path) == 3 and path[:2] == ("post", "show") and path[2].isdigit():
            self.append_id_link(id_links.lookup("post"), path[2])
            return True
        return False

    def append_bare_unnamed_url(self, url: str):
        url, leftover = trim_url(url)
        self.append_unnamed_url(url)
        self.output.append_html_escaped(leftover)

    def render_title(self, title: str) -> str:
        if self.title_renderer is None:
            return escape_html(title)
        return self.title_renderer(title)

    def append_named_url(self, url: str, title: str):
        rendered = self.render_title(title)
        if url.startswith("//"):
            url = "http:" + url

        if url[:1] in ("/", "#"):
            self.output.append('<a class="dtext-link" href="')
            self.output.append_relative_url(url)
            self.output.append('">')
            self.output.append(rendered)
            self.output.append("</a>")
        elif url == title:
            self.append_unnamed_url(url)
        else:
            internal = is_internal_url(url, self.options.domain)
            self.append_absolute_link(url, rendered, internal, escape_title=False)

    def append_bare_named_url(self, url: str, title: str):
        url, leftover = trim_url(url)
        self.append_named_url(url, title)
        self.output.append_html_escaped(leftover)

    # Mentions
    def append_mention(self, name: str):
        self.mentions.append(name)
        self.output.append('<a class="dtext-link dtext-user-mention-link" data-user-name="')
        self.output.append_html_escaped(name)
        self.output.append('" href="')
        self.output.append_relative_url("/users?name=")
        self.output.append_uri_escaped(name)
        self.output.append('">@')
        self.output.append_html_escaped(name)
        self.output.append("</a>")

    # Id Links
    def _id_link_start(self, link: IdLink, extra_class: str = "") -> None:
        if link.is_external:
            self.output.append('<a rel="%s" class="dtext-link dtext-external-link ' % EXTERNAL_REL)
        else:
            self.output.append('<a class="dtext-link ')
        self.output.append("dtext-id-link dtext-%s-id-link%s" % (link.id_name, extra_class))

    def _id_link_href(self, link: IdLink, id: str):
        self.output.append('href="')
        self.output.append_relative_url(link.url)
        self.output.append_uri_escaped(id)

    def append_id_link(self, link: IdLink, id: str):
        self._id_link_start(link)
        self.output.append('" ')
        self._id_link_href(link, id)
        self.output.append('">')
        self.output.append_html_escaped("%s #%s" % (link.title, id))
        self.output.append("</a>")

    def append_post_link(self, id: str):
        """``post #N``: a thumbnail placeholder while under ``max_thumbs``."""
        link = id_links.lookup("post")
        post_id = int(id)
        if post_id not in self.posts:
            if len(self.posts) >= self.options.max_thumbs:
                self.append_id_link(link, id)
                return
            self.posts.append(post_id)

        self._id_link_start(link, extra_class=" thumb-placeholder-link")
        self.output.append('" data-id="')
        self.output.append_html_escaped(id)
        self.output.append('" ')
        self._id_link_href(link, id)
        self.output.append('">')
        self.output.append_html_escaped("%s #%s" % (link.title, id))
        self.output.append("</a>")

    def append_paged_link(self, link: IdLink, id: str, page_param: str, page: str):
        self._id_link_start(link)
        self.output.append('" ')
        self._id_link_href(link, id)
        self.output.append_html_escaped(page_param)
        self.output.append_uri_escaped(page)
        self.output.append('">')
        self.output.append_html_escaped("%s #%s/p%s" % (link.title, id, page))
        self.output.append("</a>")

    def append_dmail_key_link(self, id: str, key: str):
        link = id_links.lookup("dmail")
        self._id_link_start(link)
        self.output.append('" ')
        self._id_link_href(link, id)
        self.output.append("?key=")
        self.output.append_uri_escaped(key)
        self.output.append('">')
        self.output.append_html_escaped("%s #%s" % (link.title, id))
        self.output.append("</a>")

    # Wiki and Search Links
    def append_wiki_link(
        self, prefix: str, tag: str, anchor: str, title: Optional[str], suffix: str
    ):
        """``prefix[[tag#anchor|title]]suffix``

        An empty ``title`` (``[[tag|]]``) derives the title from ``tag`` by
        dropping a trailing qualifier; ``None`` (``[[tag]]``) uses ``tag`` as is.
        """
        tag = tag.strip()
        normalized_tag = normalize_tag(tag)
        if title is None:
            title = tag
        elif not title:
            title = strip_qualifier(tag)
        title = prefix + title + suffix

        self.wiki_pages[tag] = None

        self.output.append('<a class="dtext-link dtext-wiki-link" href="')
        if normalized_tag.isascii() and normalized_tag.isdigit():
            self.output.append_relative_url("/wiki_pages/")
            self.output.append_uri_escaped(normalized_tag)
        else:
            self.output.append_relative_url("/wiki_pages/show_or_new?title=")
            self.output.append_uri_escaped(normalized_tag)
        if anchor:
            self.output.append("#dtext-")
            self.output.append_uri_escaped(sanitize_anchor(anchor))
        self.output.append('">')
        self.output.append_html_escaped(title)
        self.output.append("</a>")

    def append_post_search_link(
        self, prefix: str, search: str, title: Optional[str], suffix: str
    ):
        search = search.strip()
        if title is None:
            title = search
        elif not title:
            title = strip_qualifier(search)
        title = prefix + title + suffix

        self.output.append('<a class="dtext-link dtext-post-search-link" href="')
        self.output.append_relative_url("/posts?tags=")
        self.output.append_uri_escaped(search)
        self.output.append('">')
        self.output.append_html_escaped(title)
        self.output.append("</a>")

    def append_internal_anchor_link(
        self, prefix: str, anchor: str, title: Optional[str], suffix: str
    ):
        anchor = anchor.strip()
        if not title:
            title = anchor
        title = prefix + title + suffix

        self.output.append('<a class="dtext-link dtext-internal-anchor-link" href="#')
        self.output.append_uri_escaped(anchor)
        self.output.append('">')
        self.output.append_html_escaped(title)
        self.output.append("</a>")

    # Sections and Headers
    def append_section(self, summary: str, initially_open: bool):
        self.dstack.close_leaf_blocks()
        self.dstack.push(Element.BLOCK_SECTION)
        self.output.append_block("<details open>" if initially_open else "<details>")
        self.output.append_block("<summary>")
        if not self.output.f_inline:
            self.output.append_html_escaped(summary)
        self.output.append_block("</summary><div>")

    def append_header(self, level: int, id: str = ""):
        e = Element.header(level)
        self.dstack.close_leaf_blocks()
        if id:
            html = '<h%d id="dtext-%s">' % (level, escape_html(sanitize_anchor(id)))
        else:
            html = "<h%d>" % level
        self.open_element(e, html)
        self.dstack.header_mode = True

    def append_line_break(self, literal: str = "<br>"):
        if self.dstack.header_mode:
            self.output.append_html_escaped(literal)
        else:
            self.output.append("<br>")

    # Code
    def _language_class(self, language: str) -> str:
        if not language:
            return ""
        return ' class="language-%s"' % escape_html(language)

    def append_code_fence(self, body: str, language: str):
        self.dstack.close_leaf_blocks()
        self.output.append_block("<pre%s>" % self._language_class(language))
        self.output.append_html_escaped(body)
        self.output.append_block("</pre>")

    def append_inline_code(self, language: str = ""):
        self.open_element(Element.INLINE_CODE, "<code%s>" % self._language_class(language))

    def append_block_code(self, language: str = ""):
        self.dstack.close_leaf_blocks()
        self.open_element(Element.BLOCK_CODE, "<pre%s>" % self._language_class(language))

    def append_code_span(self, body: str):
        self.output.append("<code>")
        self.output.append_html_escaped(body)
        self.output.append("</code>")

    # Lists
    def open_list(self, depth: int):
        if self.dstack.is_open(Element.BLOCK_LI):
            self.dstack.close_until(Element.BLOCK_LI)
        else:
            self.dstack.close_leaf_blocks()

        while self.dstack.count(Element.BLOCK_UL) < depth:
            self.open_element(Element.BLOCK_UL, "<ul>")
        while self.dstack.count(Element.BLOCK_UL) > depth:
            self.dstack.close_until(Element.BLOCK_UL)

        self.open_element(Element.BLOCK_LI, "<li>")

    def close_list(self):
        while self.dstack.is_open(Element.BLOCK_UL):
            self.dstack.close_until(Element.BLOCK_UL)

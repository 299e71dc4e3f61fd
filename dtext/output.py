import html
from typing import List

URI_SAFE_CHARS = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_.~"
)


def escape_html(text: str) -> str:
    """Escape ``< > & "`` only; everything else passes through."""
    return html.escape(text, quote=False).replace('"', "&quot;")


def escape_uri(text: str) -> str:
    ret = []
    for c in text:
        if c in URI_SAFE_CHARS:
            ret.append(c)
        else:
            ret.extend("%%%02X" % b for b in c.encode("utf-8"))
    return "".join(ret)


class OutputBuffer(object):
    """Append-only HTML output."""

    def __init__(self, base_url: str = "", f_inline: bool = False):
        self.base_url = base_url
        self.f_inline = f_inline
        self._chunks: List[str] = []

    def __str__(self) -> str:
        return self.getvalue()

    def getvalue(self) -> str:
        return "".join(self._chunks)

    def append(self, text: str):
        if text:
            self._chunks.append(text)

    def append_html_escaped(self, text: str):
        self.append(escape_html(text))

    def append_uri_escaped(self, text: str):
        self.append(escape_uri(text))

    def append_relative_url(self, url: str):
        if self.base_url and url[:1] in ("/", "#"):
            self.append_html_escaped(self.base_url)
        self.append_html_escaped(url)

    def append_block(self, text: str):
        if self.f_inline:
            return
        self.append(text)

    def append_block_html_escaped(self, text: str):
        if self.f_inline:
            return
        self.append_html_escaped(text)

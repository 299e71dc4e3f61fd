import enum
from typing import Dict


class Element(enum.IntEnum):
    """Kinds of elements that can sit on the document-structure stack.

    Every kind above ``INLINE`` is an inline element; the others are
    blocks. ``EMPTY`` is returned when peeking or popping an empty stack.
    """

    EMPTY = 0

    BLOCK_P = enum.auto()
    BLOCK_QUOTE = enum.auto()
    BLOCK_SPOILER = enum.auto()
    BLOCK_SECTION = enum.auto()
    BLOCK_NODTEXT = enum.auto()
    BLOCK_CODE = enum.auto()
    BLOCK_TD = enum.auto()
    BLOCK_TH = enum.auto()
    BLOCK_COL = enum.auto()
    BLOCK_COLGROUP = enum.auto()
    BLOCK_THEAD = enum.auto()
    BLOCK_TBODY = enum.auto()
    BLOCK_TR = enum.auto()
    BLOCK_TABLE = enum.auto()
    BLOCK_UL = enum.auto()
    BLOCK_LI = enum.auto()
    BLOCK_H1 = enum.auto()
    BLOCK_H2 = enum.auto()
    BLOCK_H3 = enum.auto()
    BLOCK_H4 = enum.auto()
    BLOCK_H5 = enum.auto()
    BLOCK_H6 = enum.auto()
    BLOCK_TN = enum.auto()

    INLINE = enum.auto()

    INLINE_B = enum.auto()
    INLINE_I = enum.auto()
    INLINE_U = enum.auto()
    INLINE_S = enum.auto()
    INLINE_SUP = enum.auto()
    INLINE_SUB = enum.auto()
    INLINE_TN = enum.auto()
    INLINE_CODE = enum.auto()
    INLINE_NODTEXT = enum.auto()
    INLINE_SPOILER = enum.auto()
    INLINE_COLOR = enum.auto()

    @property
    def is_inline(self) -> bool:
        return self > Element.INLINE

    @property
    def is_header(self) -> bool:
        return Element.BLOCK_H1 <= self <= Element.BLOCK_H6

    @property
    def is_container(self) -> bool:
        return self in CONTAINER_BLOCKS

    @property
    def close_tag(self) -> str:
        return CLOSE_TAGS.get(self, "")

    @classmethod
    def header(cls, level: int) -> "Element":
        if not 1 <= level <= 6:
            raise ValueError("header level out of range: %d" % level)
        return cls(cls.BLOCK_H1 + level - 1)


CONTAINER_BLOCKS = frozenset(
    [Element.BLOCK_QUOTE, Element.BLOCK_SPOILER, Element.BLOCK_SECTION, Element.BLOCK_TN]
)

CLOSE_TAGS: Dict[Element, str] = {
    Element.BLOCK_P: "</p>",
    Element.BLOCK_QUOTE: "</blockquote>",
    Element.BLOCK_SPOILER: "</div>",
    Element.BLOCK_SECTION: "</div></details>",
    Element.BLOCK_NODTEXT: "</p>",
    Element.BLOCK_CODE: "</pre>",
    Element.BLOCK_TD: "</td>",
    Element.BLOCK_TH: "</th>",
    Element.BLOCK_COL: "",
    Element.BLOCK_COLGROUP: "</colgroup>",
    Element.BLOCK_THEAD: "</thead>",
    Element.BLOCK_TBODY: "</tbody>",
    Element.BLOCK_TR: "</tr>",
    Element.BLOCK_TABLE: "</table>",
    Element.BLOCK_UL: "</ul>",
    Element.BLOCK_LI: "</li>",
    Element.BLOCK_H1: "</h1>",
    Element.BLOCK_H2: "</h2>",
    Element.BLOCK_H3: "</h3>",
    Element.BLOCK_H4: "</h4>",
    Element.BLOCK_H5: "</h5>",
    Element.BLOCK_H6: "</h6>",
    Element.BLOCK_TN: "</p>",
    Element.INLINE_B: "</strong>",
    Element.INLINE_I: "</em>",
    Element.INLINE_U: "</u>",
    Element.INLINE_S: "</s>",
    Element.INLINE_SUP: "</sup>",
    Element.INLINE_SUB: "</sub>",
    Element.INLINE_TN: "</span>",
    Element.INLINE_CODE: "</code>",
    Element.INLINE_NODTEXT: "",
    Element.INLINE_SPOILER: "</span>",
    Element.INLINE_COLOR: "</span>",
}

# table tag name -> element
TABLE_ELEMENTS: Dict[str, Element] = {
    "thead": Element.BLOCK_THEAD,
    "tbody": Element.BLOCK_TBODY,
    "tr": Element.BLOCK_TR,
    "th": Element.BLOCK_TH,
    "td": Element.BLOCK_TD,
    "col": Element.BLOCK_COL,
    "colgroup": Element.BLOCK_COLGROUP,
}

PERMITTED_ATTRIBUTES: Dict[str, frozenset] = {
    "thead": frozenset(["align"]),
    "tbody": frozenset(["align"]),
    "tr": frozenset(["align"]),
    "td": frozenset(["align", "colspan", "rowspan"]),
    "th": frozenset(["align", "colspan", "rowspan"]),
    "col": frozenset(["align", "span"]),
    "colgroup": frozenset(),
}

ALIGN_VALUES = frozenset(["left", "center", "right", "justify"])


def is_permitted_attribute(tag: str, name: str, value: str) -> bool:
    if name not in PERMITTED_ATTRIBUTES.get(tag, frozenset()):
        return False
    if name == "align":
        return value in ALIGN_VALUES
    # span, colspan, rowspan
    return value.isascii() and value.isdigit()

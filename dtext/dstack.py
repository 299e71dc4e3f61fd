import logging
from typing import List

from dtext.elements import Element
from dtext.errors import NestingError
from dtext.output import OutputBuffer

logger = logging.getLogger(__name__)

MAX_STACK_DEPTH = 512


class DStack(object):
    """Stack of currently open block and inline elements.

    Popping an element through :meth:`rewind` writes its closing tag to the
    output buffer, so every element pushed here is closed exactly once.
    """

    def __init__(self, output: OutputBuffer, max_depth: int = MAX_STACK_DEPTH):
        self.output = output
        self.max_depth = max_depth
        self.header_mode = False
        self.stray_closes = 0
        self._stack: List[Element] = []

    def __len__(self) -> int:
        return len(self._stack)

    def __repr__(self) -> str:
        return "DStack(%s)" % ", ".join(e.name for e in self._stack)

    # Primitive Operations
    def push(self, e: Element):
        if len(self._stack) >= self.max_depth:
            logger.warning("too many nested elements: depth=%d" % len(self._stack))
            raise NestingError()
        self._stack.append(e)

    def pop(self) -> Element:
        if not self._stack:
            logger.debug("dstack underflow")
            return Element.EMPTY
        return self._stack.pop()

    def peek(self) -> Element:
        if not self._stack:
            return Element.EMPTY
        return self._stack[-1]

    def check(self, e: Element) -> bool:
        return self.peek() == e

    def is_open(self, e: Element) -> bool:
        return e in self._stack

    def count(self, e: Element) -> int:
        return self._stack.count(e)

    def innermost(self, *elements: Element) -> Element:
        for e in reversed(self._stack):
            if e in elements:
                return e
        return Element.EMPTY

    # Closing
    def rewind(self) -> Element:
        e = self.pop()
        if e == Element.EMPTY:
            return e
        if e.is_inline:
            self.output.append(e.close_tag)
        else:
            self.output.append_block(e.close_tag)
        if e.is_header:
            self.header_mode = False
        return e

    def close_until(self, e: Element):
        while self._stack:
            if self.rewind() == e:
                return

    def close_leaf_blocks(self):
        while self._stack and not self.peek().is_container:
            self.rewind()

    def close_all(self):
        while self._stack:
            self.rewind()

    def close_element(self, e: Element, literal: str) -> bool:
        """Close ``e``, or write ``literal`` as text when ``e`` can't be closed here."""
        top = self.peek()
        if top == e:
            self.rewind()
            return True
        if e.is_inline and top.is_inline:
            logger.debug("closing %s in place of %s" % (top.name, e.name))
            self.rewind()
            return True

        logger.debug("stray close: %s" % literal)
        self.stray_closes += 1
        if e.is_inline:
            self.output.append_html_escaped(literal)
        else:
            self.output.append_block_html_escaped(literal)
        return False

import logging
from typing import Optional, Union

from dtext.config import DTextOptions
from dtext.dtext_parser import DTextParser, Mode, ParseResult

logger = logging.getLogger(__name__)

__all__ = ["ParseResult", "parse_dtext", "parse_inline", "parse_basic_inline", "convert_file"]


def _decode(text: Union[str, bytes]) -> str:
    if isinstance(text, bytes):
        return text.decode("utf-8", errors="replace")
    return text


def _options(options: Optional[DTextOptions], **kwargs) -> DTextOptions:
    if options is None:
        return DTextOptions(**kwargs)
    if kwargs:
        return options.model_copy(update=kwargs)
    return options


def parse_dtext(
    text: Union[str, bytes], options: Optional[DTextOptions] = None, **kwargs
) -> ParseResult:
    """Translate a DText document to HTML.

    Keyword arguments override the corresponding fields of ``options``.
    Raises :class:`dtext.errors.NestingError` if the document nests too deeply.
    """
    return DTextParser.parse(_decode(text), options=_options(options, **kwargs), mode=Mode.MAIN)


def parse_inline(text: Union[str, bytes], options: Optional[DTextOptions] = None, **kwargs) -> str:
    """Translate DText with no block structure, e.g. a one-line summary."""
    options = _options(options, **kwargs)
    return DTextParser.parse(_decode(text), options=options, mode=Mode.INLINE).html


def parse_basic_inline(
    text: Union[str, bytes], options: Optional[DTextOptions] = None, **kwargs
) -> str:
    options = _options(options, **kwargs).model_copy(update={"max_thumbs": 0, "f_mentions": False})
    return DTextParser.parse(_decode(text), options=options, mode=Mode.BASIC_INLINE).html


def convert_file(src: str, text: Union[str, bytes], options: DTextOptions, mode: Mode) -> ParseResult:
    """Translate the contents of ``src``; log records emitted meanwhile are tagged with it."""
    logger.info("+ Convert: %s" % src)
    result = DTextParser.parse(_decode(text), options=options, mode=mode)
    if result.stray_closes:
        logger.warning("%d unmatched closing tag(s)" % result.stray_closes)
    return result

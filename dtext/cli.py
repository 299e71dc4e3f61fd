import logging
import sys
from typing import Optional

import click
import yaml

from dtext import __version__
from dtext.config import Config, load_config
from dtext.dtext import convert_file
from dtext.dtext_parser import Mode
from dtext.errors import DTextError
from dtext.utils import set_console_handlers


def config_logger(verbose: bool, debug: bool):
    app_logger = logging.getLogger("dtext")
    app_logger.propagate = False
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    set_console_handlers(app_logger, verbose, debug)


def print_version():
    click.echo(__version__)


def cmd_print_version(ctx: click.Context, param: click.Parameter, value: str):
    if not value or ctx.resilient_parsing:
        return
    print_version()
    ctx.exit()


@click.command()
@click.argument("src", type=click.Path(exists=True, allow_dash=True), default="-")
@click.option("--output", "-o", "dst", type=click.Path(), default=None, help="Write HTML to DST.")
@click.option("--config", "-c", "configfile", type=click.Path(exists=True), default=None)
@click.option("--inline", "mode", flag_value=Mode.INLINE.value, help="Parse without blocks.")
@click.option(
    "--basic-inline",
    "mode",
    flag_value=Mode.BASIC_INLINE.value,
    help="Parse basic emphasis only.",
)
@click.option(
    "--collections",
    "collections",
    is_flag=True,
    default=False,
    help="Append wiki pages, posts and mentions as YAML.",
)
@click.option("--base-url", "base_url", metavar="URL", default=None)
@click.option("--domain", "domain", metavar="DOMAIN", default=None)
@click.option("--max-thumbs", "max_thumbs", type=click.IntRange(min=0), default=None)
@click.option("--no-mentions", "no_mentions", is_flag=True, default=False)
@click.option("--no-color", "no_color", is_flag=True, default=False)
@click.option("--strict", "strict", is_flag=True, default=False, help="Fail on unmatched tags.")
@click.option("--verbose", "-v", "verbose", type=bool, default=False, is_flag=True)
@click.option("--debug", "-d", "debug", type=bool, default=False, is_flag=True)
@click.option(
    "--version",
    "-V",
    "version",
    help="Show version and exit.",
    is_flag=True,
    callback=cmd_print_version,
    is_eager=True,
    expose_value=False,
)
def main(
    src: str,
    dst: Optional[str],
    configfile: Optional[str],
    mode: Optional[str],
    collections: bool,
    base_url: Optional[str],
    domain: Optional[str],
    max_thumbs: Optional[int],
    no_mentions: bool,
    no_color: bool,
    strict: bool,
    verbose: bool,
    debug: bool,
):
    """Translate a DText document to HTML.

    \b
    SRC is the DText file to translate (default: stdin)
    """
    if debug:
        verbose = True
    config_logger(verbose, debug)
    if configfile:
        with open(configfile, "r") as f:
            config_data = f.read()
        config_dict = yaml.safe_load(config_data) or {}
        config = load_config(config_dict)
    else:
        config = Config()

    overrides = {}
    if base_url is not None:
        overrides["base_url"] = base_url
    if domain is not None:
        overrides["domain"] = domain
    if max_thumbs is not None:
        overrides["max_thumbs"] = max_thumbs
    if no_mentions:
        overrides["f_mentions"] = False
    if no_color:
        overrides["allow_color"] = False
    options = config.dtext_options.model_copy(update=overrides)

    with click.open_file(src, "rb") as f:
        text = f.read()

    try:
        result = convert_file(src, text, options, Mode(mode or Mode.MAIN.value))
    except DTextError as e:
        raise click.ClickException("%s: %s" % (src, e))

    if (strict or config.strict_mode) and result.stray_closes:
        raise click.ClickException("%s: %d unmatched closing tag(s)" % (src, result.stray_closes))

    output = result.html + "\n"
    if collections:
        output += "---\n" + yaml.safe_dump(
            {
                "wiki_pages": result.wiki_pages,
                "posts": result.posts,
                "mentions": result.mentions,
            },
            allow_unicode=True,
            sort_keys=False,
        )

    if dst:
        with open(dst, "w", encoding="utf-8") as f:
            f.write(output)
    else:
        click.echo(output, nl=False)


if __name__ == "__main__":
    sys.exit(main())

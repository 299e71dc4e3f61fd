import os

import yaml
from click.testing import CliRunner

from dtext import __version__
from dtext.cli import main


def test_print_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert result.output == __version__ + "\n"


def test_convert_stdin():
    runner = CliRunner()
    result = runner.invoke(main, [], input="hello [b]world[/b]")
    assert result.exit_code == 0, result.output
    assert result.output == "<p>hello <strong>world</strong></p>\n"


def test_convert_file(tmp_path):
    src = tmp_path / "page.dtext"
    src.write_text("h1. Title\n\n* item\n", encoding="utf-8")
    dst = tmp_path / "page.html"
    runner = CliRunner()
    result = runner.invoke(main, [str(src), "-o", str(dst)])
    assert result.exit_code == 0, result.output
    assert dst.read_text(encoding="utf-8") == "<h1>Title</h1><ul><li>item</li></ul>\n"


def test_inline_modes():
    runner = CliRunner()
    result = runner.invoke(main, ["--inline"], input="[b]x[/b]\n\n[quote]")
    assert result.output == "<strong>x</strong><br><br>[quote]\n"
    result = runner.invoke(main, ["--basic-inline"], input="[b]x[/b] post #1")
    assert result.output == "<strong>x</strong> post #1\n"


def test_collections():
    runner = CliRunner()
    result = runner.invoke(
        main, ["--collections", "--max-thumbs", "1"], input="[[touhou]] post #1 @alice"
    )
    assert result.exit_code == 0, result.output
    html, collections = result.output.split("---\n", 1)
    assert html.startswith("<p>")
    assert yaml.safe_load(collections) == {
        "wiki_pages": ["touhou"],
        "posts": [1],
        "mentions": ["alice"],
    }


def test_option_overrides():
    runner = CliRunner()
    result = runner.invoke(
        main,
        ["--no-mentions", "--no-color", "--base-url", "https://danbooru.donmai.us"],
        input='@alice [color=red]x[/color] "home":/posts',
    )
    assert result.output == (
        '<p>@alice x <a class="dtext-link" href="https://danbooru.donmai.us/posts">home</a></p>\n'
    )


def test_config_file(tmp_path):
    config = tmp_path / "config.yml"
    config.write_text(
        "dtext_options:\n"
        "  domain: danbooru.donmai.us\n"
        "  internal_domains: [danbooru.donmai.us]\n",
        encoding="utf-8",
    )
    runner = CliRunner()
    result = runner.invoke(
        main, ["-c", str(config)], input="https://danbooru.donmai.us/posts/1"
    )
    assert result.exit_code == 0, result.output
    assert result.output == (
        '<p><a class="dtext-link dtext-id-link dtext-post-id-link" href="/posts/1">'
        "post #1</a></p>\n"
    )


def test_strict_mode():
    runner = CliRunner()
    result = runner.invoke(main, ["--strict"], input="plain [/b] text")
    assert result.exit_code == 1
    assert "1 unmatched closing tag(s)" in result.output

    result = runner.invoke(main, [], input="plain [/b] text")
    assert result.exit_code == 0


def test_strict_mode_in_config(tmp_path):
    config = tmp_path / "config.yml"
    config.write_text("strict_mode: true\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(main, ["-c", str(config)], input="[/quote]")
    assert result.exit_code == 1


def test_too_deep_nesting():
    runner = CliRunner()
    result = runner.invoke(main, [], input="[quote]" * 600)
    assert result.exit_code == 1
    assert "too many nested elements" in result.output


def test_missing_source():
    runner = CliRunner()
    result = runner.invoke(main, [os.path.join("no", "such", "file.dtext")])
    assert result.exit_code == 2

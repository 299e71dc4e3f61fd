import pydantic
import pytest

import dtext.config
from dtext.dtext import parse_dtext


def test_load_config():
    config_dict = {"dtext_options": {"max_thumbs": 3, "internal_domains": ["danbooru.donmai.us"]}}
    config = dtext.config.load_config(config_dict)
    assert config.dtext_options.max_thumbs == 3
    assert config.dtext_options.internal_domains == {"danbooru.donmai.us"}
    assert config.dtext_options.allow_color is True
    assert config.strict_mode is False


def test_default_options():
    options = dtext.config.DTextOptions()
    assert options.domain == ""
    assert options.base_url == ""
    assert options.internal_domains == set()
    assert options.allow_color is True
    assert options.f_mentions is True
    assert options.f_inline is False
    assert options.max_thumbs == 0


def test_options_ignore_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DTEXT_MAX_THUMBS", "5")
    monkeypatch.setenv("DTEXT_F_MENTIONS", "false")
    monkeypatch.setenv("DTEXT_F_INLINE", "true")
    options = dtext.config.DTextOptions()
    assert options.max_thumbs == 0
    assert options.f_mentions is True
    assert options.f_inline is False

    result = parse_dtext("post #1 @bob")
    assert result.posts == []
    assert result.mentions == ["bob"]
    assert result.html.startswith("<p>")


def test_config_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DTEXT_STRICT_MODE", "true")
    monkeypatch.setenv("DTEXT_DTEXT_OPTIONS__MAX_THUMBS", "5")
    monkeypatch.setenv("DTEXT_DTEXT_OPTIONS__ALLOW_COLOR", "false")
    config = dtext.config.Config()
    assert config.strict_mode is True
    assert config.dtext_options.max_thumbs == 5
    assert config.dtext_options.allow_color is False


def test_invalid_options():
    with pytest.raises(pydantic.ValidationError):
        dtext.config.DTextOptions(max_thumbs=-1)
    with pytest.raises(pydantic.ValidationError):
        dtext.config.load_config({"dtext_options": {"max_thumbs": "many"}})


def test_is_internal_domain():
    options = dtext.config.DTextOptions(internal_domains={"Danbooru.donmai.us"})
    assert options.is_internal_domain("danbooru.donmai.us")
    assert not options.is_internal_domain("example.com")

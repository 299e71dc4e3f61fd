import pytest

from dtext.config import DTextOptions


@pytest.fixture
def internal_options() -> DTextOptions:
    return DTextOptions(domain="danbooru.donmai.us", internal_domains={"danbooru.donmai.us"})


@pytest.fixture
def thumbs_options() -> DTextOptions:
    return DTextOptions(max_thumbs=2)

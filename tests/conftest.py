import logging
from typing import Iterator

import pytest

from dtext.config import DTextOptions


@pytest.fixture(autouse=True)
def restore_app_logger() -> Iterator[None]:
    # the cli reconfigures the "dtext" logger; keep caplog working for later tests
    app_logger = logging.getLogger("dtext")
    handlers = list(app_logger.handlers)
    propagate = app_logger.propagate
    level = app_logger.level
    yield
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    for handler in handlers:
        app_logger.addHandler(handler)
    app_logger.propagate = propagate
    app_logger.setLevel(level)


@pytest.fixture
def default_options() -> DTextOptions:
    return DTextOptions()

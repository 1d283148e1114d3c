"""テスト共通フィクスチャ"""

import logging
from collections.abc import Iterator

import pytest
from canary.logger import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_library_logger() -> Iterator[None]:
    """new_logger が追加したハンドラをテストごとに外す。"""
    yield
    library_logger = logging.getLogger(LOGGER_NAME)
    library_logger.handlers.clear()
    library_logger.setLevel(logging.NOTSET)
    library_logger.propagate = True

"""init_canary のユニットテスト"""

import logging
from pathlib import Path

from canary import (
    CanaryOptions,
    EvaluationReason,
    InMemoryUserContextStore,
    StaticConfigSource,
    init_canary,
)
from canary.logger import LOGGER_NAME
from canary.schema import FeatureFlagsConfig


async def test_init_canary_defaults() -> None:
    """オプション無しでは空の設定で動作すること。"""
    client = init_canary()
    result = await client.check_feature("anything", "user-1")
    assert result.enabled is False
    assert result.reason == EvaluationReason.NOT_FOUND


async def test_init_canary_with_config_path(tmp_path: Path) -> None:
    """config_path から設定を読み込むこと。"""
    config_file = tmp_path / "features.yaml"
    config_file.write_text("features:\n  new-dashboard:\n    enabled: true\n")
    client = init_canary(CanaryOptions(config_path=config_file))
    assert await client.is_enabled("new-dashboard", "user-1") is True


async def test_init_canary_missing_file_falls_back() -> None:
    """設定ファイルが無い場合は空の設定にフォールバックすること。"""
    client = init_canary(CanaryOptions(config_path=Path("/nonexistent/features.yaml")))
    result = await client.check_feature("new-dashboard", "user-1")
    assert result.reason == EvaluationReason.NOT_FOUND


async def test_config_source_takes_precedence(tmp_path: Path) -> None:
    """config_source は config_path より優先されること。"""
    config_file = tmp_path / "features.yaml"
    config_file.write_text("features:\n  from-file:\n    enabled: true\n")
    source = StaticConfigSource(
        FeatureFlagsConfig.model_validate({"features": {"from-source": {"enabled": True}}})
    )
    client = init_canary(CanaryOptions(config_path=config_file, config_source=source))
    assert await client.is_enabled("from-source", "user-1") is True
    assert await client.is_enabled("from-file", "user-1") is False


async def test_init_canary_custom_store_and_persistence() -> None:
    """指定したストアにバリアントが保存されること。"""
    store = InMemoryUserContextStore()
    source = StaticConfigSource(
        FeatureFlagsConfig.model_validate(
            {"features": {"ab-test": {"enabled": True, "variants": ["control", "treatment"]}}}
        )
    )
    client = init_canary(
        CanaryOptions(config_source=source, persist_variants=True), store=store
    )
    result = await client.check_feature("ab-test", "user-1")
    assert (await store.get("user-1")).variants == {"ab-test": result.variant}


def test_init_canary_leaves_logging_alone_by_default() -> None:
    """既定ではライブラリのログ設定を変更しないこと。"""
    library_logger = logging.getLogger(LOGGER_NAME)
    sentinel = logging.NullHandler()
    library_logger.addHandler(sentinel)
    init_canary()
    init_canary(CanaryOptions(debug=True))
    assert library_logger.handlers == [sentinel]
    assert library_logger.level == logging.NOTSET


def test_init_canary_configures_logging_when_requested() -> None:
    """configure_logging 有効時はログ設定を行うこと。"""
    init_canary(CanaryOptions(configure_logging=True, debug=True))
    library_logger = logging.getLogger(LOGGER_NAME)
    assert library_logger.level == logging.DEBUG
    assert len(library_logger.handlers) == 1
    assert library_logger.propagate is False
